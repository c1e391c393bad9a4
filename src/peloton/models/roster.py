"""Roster members, race events, and season transition records."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field

SeasonYear = int


class RosterKind(StrEnum):
    """The two rosters a team keeps. Each rolls over independently."""

    RIDER = "rider"
    STAFF = "staff"


class StaffRole(StrEnum):
    MANAGER = "manager"
    DIRECTEUR_SPORTIF = "directeur_sportif"
    ASSISTANT = "assistant"
    MECANO = "mecano"
    COMMUNICATION = "communication"
    MEDECIN = "medecin"
    KINE = "kine"
    RESP_PERF = "resp_perf"
    ENTRAINEUR = "entraineur"
    DATA_ANALYST = "data_analyst"
    PREPA_PHYSIQUE = "prepa_physique"
    AUTRE = "autre"


class StaffStatus(StrEnum):
    BENEVOLE = "benevole"
    VACATAIRE = "vacataire"
    SALARIE = "salarie"


class RosterMember(BaseModel):
    """Fields shared by riders and staff.

    ``is_active=None`` means active. ``current_season=None`` means the member
    belongs to whatever season is current.
    """

    id: str
    first_name: str = ""
    last_name: str = ""
    is_active: bool | None = None
    current_season: SeasonYear | None = None

    @property
    def is_effectively_active(self) -> bool:
        """Only an explicit ``False`` deactivates a member."""
        return self.is_active is not False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Rider(RosterMember):
    kind: Literal["rider"] = "rider"
    roster_role: Literal["principal", "reserve"] | None = None


class StaffMember(RosterMember):
    kind: Literal["staff"] = "staff"
    role: StaffRole = StaffRole.AUTRE
    status: StaffStatus = StaffStatus.BENEVOLE


Member = Annotated[Rider | StaffMember, Field(discriminator="kind")]

# Staff assignment fields on a race event, one per role.
STAFF_ROLE_FIELDS: tuple[str, ...] = (
    "manager_ids",
    "directeur_sportif_ids",
    "assistant_ids",
    "mecano_ids",
    "kine_ids",
    "medecin_ids",
    "resp_perf_ids",
    "entraineur_ids",
    "data_analyst_ids",
    "prepa_physique_ids",
    "communication_ids",
)

PARTICIPANT_FIELDS: tuple[str, ...] = (
    "selected_rider_ids",
    "selected_staff_ids",
    *STAFF_ROLE_FIELDS,
)


class RaceEvent(BaseModel):
    """A race or camp on the team calendar.

    Dates stay as ISO strings: stored records are not guaranteed to be well
    formed, and consumers decide how to treat a bad value.
    """

    id: str
    name: str = ""
    date: str
    end_date: str | None = None
    location: str = ""
    selected_rider_ids: list[str] = Field(default_factory=list)
    selected_staff_ids: list[str] = Field(default_factory=list)
    manager_ids: list[str] = Field(default_factory=list)
    directeur_sportif_ids: list[str] = Field(default_factory=list)
    assistant_ids: list[str] = Field(default_factory=list)
    mecano_ids: list[str] = Field(default_factory=list)
    kine_ids: list[str] = Field(default_factory=list)
    medecin_ids: list[str] = Field(default_factory=list)
    resp_perf_ids: list[str] = Field(default_factory=list)
    entraineur_ids: list[str] = Field(default_factory=list)
    data_analyst_ids: list[str] = Field(default_factory=list)
    prepa_physique_ids: list[str] = Field(default_factory=list)
    communication_ids: list[str] = Field(default_factory=list)

    def participant_ids(self) -> set[str]:
        """Every rider and staff id assigned to this event, in any role."""
        ids: set[str] = set()
        for field in PARTICIPANT_FIELDS:
            ids.update(getattr(self, field))
        return ids

    def participants(self) -> dict[str, list[str]]:
        """Non-empty participant fields, keyed by field name."""
        return {f: list(getattr(self, f)) for f in PARTICIPANT_FIELDS if getattr(self, f)}


class RosterArchive(BaseModel):
    """Frozen snapshot of one roster at the end of a season."""

    model_config = {"frozen": True}

    kind: RosterKind
    season: SeasonYear
    members: list[Member] = Field(default_factory=list)
    archived_at: datetime
    total_count: int = 0
    active_count: int = 0
    inactive_count: int = 0


class RosterTransition(BaseModel):
    """Which members were kept, removed, or added moving between seasons."""

    model_config = {"frozen": True}

    kind: RosterKind
    from_season: SeasonYear
    to_season: SeasonYear
    transition_date: datetime
    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    kept: list[str] = Field(default_factory=list)


class SeasonStats(BaseModel):
    total_count: int = 0
    active_count: int = 0
    inactive_count: int = 0


class DetailedSeasonStats(SeasonStats):
    """Season stats plus work-day totals and head counts by role and status."""

    total_work_days: int = 0
    average_work_days: int = 0
    by_role: dict[str, int] = Field(default_factory=dict)
    by_status: dict[str, int] = Field(default_factory=dict)


class SeasonStatus(StrEnum):
    PAST = "past"
    TRANSITION = "transition"
    ACTIVE = "active"
    UPCOMING = "upcoming"
