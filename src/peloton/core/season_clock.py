"""Season clock -- map calendar dates to logical season years.

A season year is a planning label, not a calendar year. From October
onward the team is already planning the next season, so Q4 dates roll
over. Every function takes the current time as an argument; nothing here
reads the wall clock.

Two cutover months coexist: October for season years and the rider
roster, November for the staff roster prompt.
"""

from __future__ import annotations

from datetime import date, datetime

from peloton.models.roster import SeasonStatus, SeasonYear

TRANSITION_MONTH = 10
STAFF_TRANSITION_MONTH = 11

# Seasons up to and including this year are planned as this year once the
# transition window opens.
PINNED_PLANNING_SEASON = 2026

SEASON_HISTORY_YEARS = 3
SEASON_LOOKAHEAD_YEARS = 2
PLANNING_HORIZON_YEARS = 3


def current_season_year(now: date) -> SeasonYear:
    """Return the season year the team is working on at ``now``."""
    if now.year <= PINNED_PLANNING_SEASON:
        if now.month >= TRANSITION_MONTH:
            return PINNED_PLANNING_SEASON
        return now.year
    if now.month >= TRANSITION_MONTH:
        return now.year + 1
    return now.year


def season_year_for_date(d: date) -> SeasonYear:
    """Season year a dated record belongs to. No pinning applies here."""
    if d.month >= TRANSITION_MONTH:
        return d.year + 1
    return d.year


def is_in_season_transition_window(now: date) -> bool:
    return now.month >= TRANSITION_MONTH


def _with_pinned_season(years: list[SeasonYear], current: SeasonYear) -> list[SeasonYear]:
    if PINNED_PLANNING_SEASON not in years and current <= PINNED_PLANNING_SEASON:
        years.append(PINNED_PLANNING_SEASON)
    return years


def available_season_years(now: date) -> list[SeasonYear]:
    """Years offered in season selectors, newest first.

    Three seasons back through two ahead, always including the pinned
    planning season while it is still in the future.
    """
    current = current_season_year(now)
    years = list(range(current - SEASON_HISTORY_YEARS, current + SEASON_LOOKAHEAD_YEARS + 1))
    return sorted(_with_pinned_season(years, current), reverse=True)


def planning_years(now: date) -> list[SeasonYear]:
    """Years open for forward planning, oldest first."""
    current = current_season_year(now)
    years = list(range(current, current + PLANNING_HORIZON_YEARS + 1))
    return sorted(_with_pinned_season(years, current))


def is_planning_year(year: SeasonYear, now: date) -> bool:
    current = current_season_year(now)
    return current <= year <= current + PLANNING_HORIZON_YEARS


def is_season_active(year: SeasonYear, now: date) -> bool:
    return year == current_season_year(now)


def season_transition_status(year: SeasonYear, now: date) -> SeasonStatus:
    """Classify ``year`` relative to the current season."""
    current = current_season_year(now)
    if year < current:
        return SeasonStatus.PAST
    if year > current:
        return SeasonStatus.UPCOMING
    if is_in_season_transition_window(now):
        return SeasonStatus.TRANSITION
    return SeasonStatus.ACTIVE


def season_months(season_year: SeasonYear) -> tuple[date, date]:
    """First and last calendar day of a season: October 1 to September 30."""
    return date(season_year - 1, TRANSITION_MONTH, 1), date(season_year, TRANSITION_MONTH - 1, 30)


def is_date_in_season(d: date, season_year: SeasonYear) -> bool:
    if isinstance(d, datetime):
        d = d.date()
    start, end = season_months(season_year)
    return start <= d <= end


def season_label(year: SeasonYear, now: date, show_transition: bool = True) -> str:
    label = f"Season {year}"
    if show_transition and is_season_active(year, now) and is_in_season_transition_window(now):
        return f"{label} (transition active)"
    return label


def should_prompt_roster_transition(now: date) -> bool:
    """Whether the rider roster rollover should be offered (October rule)."""
    return now.month >= TRANSITION_MONTH or now.year >= PINNED_PLANNING_SEASON


def should_prompt_staff_transition(now: date) -> bool:
    """Whether the staff roster rollover should be offered (November rule)."""
    return now.month >= STAFF_TRANSITION_MONTH or now.year >= PINNED_PLANNING_SEASON
