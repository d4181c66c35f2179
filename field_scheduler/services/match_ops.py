"""
Helpers the application runs around committed matches: time shifts, the
club-wide upcoming schedule, and availability warnings for the match form.
"""

from collections import OrderedDict
from datetime import datetime, date, time
from typing import Dict, List, Mapping, Optional, Sequence

from field_scheduler.models import (
    Match, Participant, Existing, Temporary, AvailabilityDeclaration
)


def reschedule_match(match: Match, new_start: datetime) -> Match:
    """Move a match to a new start, keeping its original duration."""
    return match.with_window(match.window.shifted_to(new_start))


def display_name(participant: Participant, team_names: Optional[Mapping[str, str]] = None) -> str:
    if isinstance(participant, Temporary):
        return participant.name
    if isinstance(participant, Existing):
        return (team_names or {}).get(participant.id, participant.id)
    return ""


def upcoming_matches_by_day(matches: Sequence[Match], today: date,
                            on_day: Optional[date] = None,
                            team_search: Optional[str] = None,
                            team_names: Optional[Mapping[str, str]] = None) -> Dict[date, List[Match]]:
    """
    Group upcoming matches by local day.

    Args:
        matches: Match snapshot
        today: Matches starting before today's midnight are dropped
        on_day: Keep only matches starting on this day
        team_search: Case-insensitive substring of either side's display name
        team_names: Team id -> display name lookup

    Returns:
        Ordered mapping of day -> matches sorted by start
    """
    cutoff = datetime.combine(today, time.min)
    needle = team_search.lower() if team_search else None

    selected = []
    for match in matches:
        if match.window.start < cutoff:
            continue
        if on_day is not None and match.window.start.date() != on_day:
            continue
        if needle:
            home = display_name(match.home, team_names).lower()
            away = display_name(match.away, team_names).lower()
            if needle not in home and needle not in away:
                continue
        selected.append(match)

    grouped: Dict[date, List[Match]] = OrderedDict()
    for match in sorted(selected, key=lambda m: m.window.start):
        grouped.setdefault(match.window.start.date(), []).append(match)
    return grouped


def availability_warning(team_id: str, day: date,
                         declarations: Sequence[AvailabilityDeclaration],
                         team_name: Optional[str] = None) -> Optional[str]:
    """Warn when the team has not declared the day as open."""
    reference = datetime.combine(day, time.min)
    declared = any(
        d.team_id == team_id and d.window.contains_instant(reference)
        for d in declarations
    )
    if declared:
        return None
    return f"Warning: {team_name or team_id} has NOT listed {day} as available."
