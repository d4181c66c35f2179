"""
Data models for the Club Field Scheduler.
Defines the immutable snapshot records the scheduling core works on.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, date, timedelta
from typing import List, Optional, Union

from field_scheduler.core.config import CLUB_WIDE_SCOPE
from field_scheduler.core.exceptions import InvalidWindowError


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end <= self.start:
            raise InvalidWindowError(self.start, self.end)

    def __str__(self):
        return f"{self.start:%Y-%m-%d %H:%M}-{self.end:%H:%M}"

    @classmethod
    def from_duration(cls, start: datetime, minutes: int) -> 'TimeWindow':
        return cls(start, start + timedelta(minutes=minutes))

    @classmethod
    def full_day(cls, day: date) -> 'TimeWindow':
        start = datetime.combine(day, datetime.min.time())
        return cls(start, start + timedelta(days=1))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: 'TimeWindow') -> bool:
        """Half-open overlap: touching endpoints do not conflict."""
        return self.start < other.end and other.start < self.end

    def contains_instant(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end

    def contains(self, other: 'TimeWindow') -> bool:
        """True when both endpoints of `other` fall inside this window."""
        return self.contains_instant(other.start) and self.contains_instant(other.end)

    def shifted_to(self, new_start: datetime) -> 'TimeWindow':
        return TimeWindow(new_start, new_start + self.duration)


@dataclass(frozen=True)
class Existing:
    """A team or venue backed by a store record."""
    id: str


@dataclass(frozen=True)
class Temporary:
    """An ad hoc team or venue known only by name."""
    name: str


Participant = Union[Existing, Temporary]


def participant_id(participant: Optional[Participant]) -> Optional[str]:
    if isinstance(participant, Existing):
        return participant.id
    return None


@dataclass(frozen=True)
class Permit:
    id: str
    field_id: str
    window: TimeWindow

    def covers(self, field_id: str, window: TimeWindow) -> bool:
        return self.field_id == field_id and self.window.contains(window)


@dataclass(frozen=True)
class Blackout:
    id: str
    scope: str
    window: TimeWindow
    reason: str = ""

    @property
    def is_club_wide(self) -> bool:
        return self.scope == CLUB_WIDE_SCOPE

    def applies_to(self, team_id: Optional[str]) -> bool:
        if self.is_club_wide:
            return True
        return team_id is not None and self.scope == team_id


@dataclass(frozen=True)
class Match:
    id: str
    field_id: str
    home: Participant
    away: Participant
    window: TimeWindow
    complex: Optional[Participant] = None
    field_name: str = ""

    def __str__(self):
        return f"{self.id} on {self.field_id} at {self.window}"

    @property
    def home_team_id(self) -> Optional[str]:
        return participant_id(self.home)

    @property
    def away_team_id(self) -> Optional[str]:
        return participant_id(self.away)

    def involves_team(self, team_id: str) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    def with_window(self, window: TimeWindow) -> 'Match':
        return replace(self, window=window)


@dataclass(frozen=True)
class AvailabilityDeclaration:
    id: str
    team_id: str
    window: TimeWindow
    note: str = ""


@dataclass(frozen=True)
class MatchProposal:
    field_id: str
    home: Participant
    away: Participant
    window: TimeWindow

    @property
    def team_ids(self) -> List[str]:
        return [tid for tid in (participant_id(self.home), participant_id(self.away)) if tid]


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)

    def add_error(self, message: str):
        self.errors.append(message)
        self.is_valid = False

    def get_summary(self) -> str:
        if self.is_valid:
            return "Match valid"
        return "Match invalid: " + "; ".join(self.errors)


@dataclass(frozen=True)
class BusyInterval:
    start: datetime
    end: datetime


@dataclass
class DayAvailability:
    day: date
    note: str
    busy: List[BusyInterval] = field(default_factory=list)

    @property
    def is_fully_available(self) -> bool:
        return not self.busy
