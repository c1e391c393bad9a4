"""Tests for the season clock -- season years, selectors, status."""

from datetime import UTC, date, datetime

import pytest

from peloton.core.season_clock import (
    available_season_years,
    current_season_year,
    is_date_in_season,
    is_in_season_transition_window,
    is_planning_year,
    is_season_active,
    planning_years,
    season_label,
    season_months,
    season_transition_status,
    season_year_for_date,
    should_prompt_roster_transition,
    should_prompt_staff_transition,
)
from peloton.models.roster import SeasonStatus


class TestCurrentSeasonYear:
    @pytest.mark.parametrize("year", [2023, 2024, 2025, 2026])
    @pytest.mark.parametrize("month", range(1, 10))
    def test_before_october_up_to_2026_is_calendar_year(self, year, month):
        assert current_season_year(date(year, month, 15)) == year

    @pytest.mark.parametrize("year", [2023, 2024, 2025, 2026])
    @pytest.mark.parametrize("month", [10, 11, 12])
    def test_q4_up_to_2026_is_pinned(self, year, month):
        assert current_season_year(date(year, month, 1)) == 2026

    @pytest.mark.parametrize("year", [2027, 2028, 2031])
    def test_q4_after_2026_rolls_over(self, year):
        assert current_season_year(date(year, 10, 1)) == year + 1
        assert current_season_year(date(year, 12, 31)) == year + 1

    def test_after_2026_before_october(self):
        assert current_season_year(date(2027, 9, 30)) == 2027

    def test_accepts_datetime(self):
        now = datetime(2025, 11, 15, 9, 30, tzinfo=UTC)
        assert current_season_year(now) == 2026


class TestSeasonYearForDate:
    def test_q4_rolls_over_without_pinning(self):
        assert season_year_for_date(date(2024, 10, 1)) == 2025
        assert season_year_for_date(date(2026, 11, 3)) == 2027

    def test_before_october(self):
        assert season_year_for_date(date(2024, 9, 30)) == 2024


class TestTransitionWindow:
    def test_window_opens_in_october(self):
        assert not is_in_season_transition_window(date(2025, 9, 30))
        assert is_in_season_transition_window(date(2025, 10, 1))
        assert is_in_season_transition_window(date(2025, 12, 31))

    def test_scenario_mid_november_2025(self):
        now = date(2025, 11, 15)
        assert current_season_year(now) == 2026
        assert is_in_season_transition_window(now) is True
        assert season_transition_status(2026, now) == SeasonStatus.TRANSITION


class TestAvailableSeasonYears:
    def test_range_descending(self):
        assert available_season_years(date(2025, 5, 1)) == [2027, 2026, 2025, 2024, 2023, 2022]

    def test_pinned_season_added_when_out_of_range(self):
        years = available_season_years(date(2021, 3, 1))
        assert 2026 in years
        assert years == sorted(years, reverse=True)
        assert years[0] == 2026

    def test_no_pinned_season_once_past(self):
        years = available_season_years(date(2030, 3, 1))
        assert 2026 not in years
        assert years == [2032, 2031, 2030, 2029, 2028, 2027]

    @pytest.mark.parametrize(
        "now", [date(2019, 1, 1), date(2024, 10, 5), date(2026, 2, 2), date(2026, 12, 1)]
    )
    def test_contains_pinned_and_no_duplicates(self, now):
        years = available_season_years(now)
        assert 2026 in years
        assert len(years) == len(set(years))


class TestPlanningYears:
    def test_ascending_horizon(self):
        assert planning_years(date(2026, 3, 1)) == [2026, 2027, 2028, 2029]

    def test_pinned_season_added(self):
        assert planning_years(date(2020, 3, 1)) == [2020, 2021, 2022, 2023, 2026]

    def test_is_planning_year(self):
        now = date(2026, 3, 1)
        assert is_planning_year(2029, now)
        assert not is_planning_year(2030, now)
        assert not is_planning_year(2025, now)


class TestSeasonStatus:
    def test_past_and_upcoming(self):
        now = date(2026, 5, 1)
        assert season_transition_status(2025, now) == SeasonStatus.PAST
        assert season_transition_status(2027, now) == SeasonStatus.UPCOMING

    def test_active_outside_window(self):
        assert season_transition_status(2026, date(2026, 5, 1)) == SeasonStatus.ACTIVE

    def test_is_season_active(self):
        assert is_season_active(2026, date(2025, 10, 2))
        assert not is_season_active(2025, date(2025, 10, 2))


class TestSeasonMonths:
    def test_bounds(self):
        assert season_months(2026) == (date(2025, 10, 1), date(2026, 9, 30))

    def test_membership(self):
        assert is_date_in_season(date(2025, 10, 1), 2026)
        assert is_date_in_season(date(2026, 9, 30), 2026)
        assert not is_date_in_season(date(2025, 9, 30), 2026)
        assert not is_date_in_season(date(2026, 10, 1), 2026)

    def test_date_in_season_accepts_aware_datetime(self):
        assert is_date_in_season(datetime(2025, 11, 15, 9, tzinfo=UTC), 2026)
        assert not is_date_in_season(datetime(2026, 10, 1, 0, 30, tzinfo=UTC), 2026)


class TestLabelsAndPrompts:
    def test_label_in_window(self):
        assert season_label(2026, date(2025, 10, 15)) == "Season 2026 (transition active)"

    def test_label_plain(self):
        assert season_label(2026, date(2025, 10, 15), show_transition=False) == "Season 2026"
        assert season_label(2025, date(2025, 5, 1)) == "Season 2025"

    def test_rider_prompt_uses_october(self):
        assert should_prompt_roster_transition(date(2025, 10, 1))
        assert not should_prompt_roster_transition(date(2025, 9, 30))

    def test_staff_prompt_uses_november(self):
        assert not should_prompt_staff_transition(date(2025, 10, 15))
        assert should_prompt_staff_transition(date(2025, 11, 1))

    def test_prompts_always_on_from_2026(self):
        assert should_prompt_roster_transition(date(2026, 2, 1))
        assert should_prompt_staff_transition(date(2026, 2, 1))
