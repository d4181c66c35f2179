"""
Public availability projection for a single team.
"""

from datetime import date, timedelta
from typing import Dict, List, Sequence

from field_scheduler.models import (
    AvailabilityDeclaration, Match, TimeWindow, BusyInterval, DayAvailability
)
from field_scheduler.core.logging_config import get_logger

logger = get_logger(__name__)


def team_matches(team_id: str, matches: Sequence[Match]) -> List[Match]:
    """The team's matches, home or away, deduplicated by id in first-seen order."""
    unique: Dict[str, Match] = {}
    for match in matches:
        if match.involves_team(team_id) and match.id not in unique:
            unique[match.id] = match
    return list(unique.values())


def covered_days(window: TimeWindow) -> List[date]:
    """Every calendar day touched by the window, start and end days included."""
    days = []
    current = window.start.date()
    while current <= window.end.date():
        days.append(current)
        current += timedelta(days=1)
    return days


def busy_intervals(day: date, matches: Sequence[Match]) -> List[BusyInterval]:
    day_window = TimeWindow.full_day(day)
    overlapping = sorted(
        (m for m in matches if m.window.overlaps(day_window)),
        key=lambda m: m.window.start
    )
    return [BusyInterval(start=m.window.start, end=m.window.end) for m in overlapping]


class AvailabilityProjector:
    """
    Explodes a team's declared open ranges into one record per day, each
    annotated with the team's busy match intervals. Opponents are never exposed.
    """

    def __init__(self, team_id: str, today: date):
        self.team_id = team_id
        self.today = today

    def project(self, declarations: Sequence[AvailabilityDeclaration],
                matches: Sequence[Match]) -> List[DayAvailability]:
        own_matches = team_matches(self.team_id, matches)
        days: List[DayAvailability] = []

        for declaration in declarations:
            if declaration.team_id != self.team_id:
                continue
            for day in covered_days(declaration.window):
                if day < self.today:
                    continue
                days.append(DayAvailability(
                    day=day,
                    note=declaration.note,
                    busy=busy_intervals(day, own_matches)
                ))

        days.sort(key=lambda d: d.day)
        logger.debug(f"Projected {len(days)} available days for team {self.team_id} from {self.today}")
        return days


def project_availability(declarations: Sequence[AvailabilityDeclaration],
                         matches: Sequence[Match], team_id: str,
                         today: date) -> List[DayAvailability]:
    """
    Project a team's availability declarations onto per-day records.

    Args:
        declarations: Availability declarations (other teams' entries are ignored)
        matches: Matches to scan for the team's busy intervals
        team_id: Team to project
        today: Days strictly before this are dropped

    Returns:
        DayAvailability records sorted by day
    """
    return AvailabilityProjector(team_id, today).project(declarations, matches)
