"""
Slot enumeration for the Club Field Scheduler.
Lists the kickoff times on a field that fall inside a permit and clear every
committed match. The output is advisory; MatchValidator is the commit gate.
"""

from datetime import datetime, date, time, timedelta
from typing import Dict, List, Sequence

from field_scheduler.models import Permit, Match, Blackout, TimeWindow
from field_scheduler.core.config import (
    SLOT_STEP_MINUTES, DAY_WINDOW_START, DAY_WINDOW_END, SLOT_FORMAT
)
from field_scheduler.core.logging_config import get_logger

logger = get_logger(__name__)


def has_permit_coverage(field_id: str, window: TimeWindow, permits: Sequence[Permit]) -> bool:
    """True when a single permit for the field holds the whole window."""
    return any(permit.covers(field_id, window) for permit in permits)


def find_field_conflict(field_id: str, window: TimeWindow, matches: Sequence[Match]):
    """Return the first match on the field overlapping the window, or None."""
    for match in matches:
        if match.field_id == field_id and match.window.overlaps(window):
            return match
    return None


def is_club_blackout_day(day: date, blackouts: Sequence[Blackout]) -> bool:
    """Point check of the day's midnight against every club-wide blackout."""
    reference = datetime.combine(day, time.min)
    return any(
        blackout.is_club_wide and blackout.window.contains_instant(reference)
        for blackout in blackouts
    )


class SlotEnumerator:
    """
    Scans a bounded daily window at a fixed step and keeps the starts whose
    full match window is permitted and unbooked.
    """

    def __init__(self, step_minutes: int = SLOT_STEP_MINUTES,
                 day_start: time = DAY_WINDOW_START, day_end: time = DAY_WINDOW_END):
        """
        Args:
            step_minutes: Minutes between candidate starts
            day_start: First candidate start of the day (inclusive)
            day_end: Scan stops before this time (exclusive)
        """
        if step_minutes <= 0:
            raise ValueError(f"step_minutes must be positive, got {step_minutes}")
        self.step = timedelta(minutes=step_minutes)
        self.day_start = day_start
        self.day_end = day_end

    def candidate_starts(self, day: date) -> List[datetime]:
        starts = []
        scanner = datetime.combine(day, self.day_start)
        end_of_scan = datetime.combine(day, self.day_end)
        while scanner < end_of_scan:
            starts.append(scanner)
            scanner += self.step
        return starts

    def enumerate(self, field_id: str, day: date, duration_minutes: int,
                  permits: Sequence[Permit], matches: Sequence[Match],
                  blackouts: Sequence[Blackout]) -> List[str]:
        """
        Enumerate valid kickoff slots for one field on one day.

        Args:
            field_id: Field to book
            day: Local calendar day
            duration_minutes: Match length
            permits: Permit snapshot
            matches: Committed match snapshot
            blackouts: Blackout snapshot (only club-wide entries are consulted)

        Returns:
            Ascending list of HH:MM start times; empty when nothing fits
        """
        if duration_minutes is None or duration_minutes <= 0:
            logger.warning(f"Rejected slot request for {field_id} on {day}: "
                           f"non-positive duration {duration_minutes}")
            return []

        if is_club_blackout_day(day, blackouts):
            logger.debug(f"{day} is under a club-wide blackout, no slots for {field_id}")
            return []

        field_permits = [p for p in permits if p.field_id == field_id]
        if not field_permits:
            return []
        field_matches = [m for m in matches if m.field_id == field_id]

        slots = []
        for start in self.candidate_starts(day):
            window = TimeWindow.from_duration(start, duration_minutes)
            if not has_permit_coverage(field_id, window, field_permits):
                continue
            if find_field_conflict(field_id, window, field_matches) is not None:
                continue
            slots.append(start.strftime(SLOT_FORMAT))

        logger.debug(f"Enumerated {len(slots)} slots for {field_id} on {day} ({duration_minutes} min)")
        return slots


def enumerate_slots(field_id: str, day: date, duration_minutes: int,
                    permits: Sequence[Permit], matches: Sequence[Match],
                    blackouts: Sequence[Blackout]) -> List[str]:
    """Enumerate slots with the configured step and daily scan window."""
    return SlotEnumerator().enumerate(field_id, day, duration_minutes, permits, matches, blackouts)


def enumerate_field_board(field_ids: Sequence[str], day: date, duration_minutes: int,
                          permits: Sequence[Permit], matches: Sequence[Match],
                          blackouts: Sequence[Blackout]) -> Dict[str, List[str]]:
    """Slot lists for several fields on the same day, keyed by field id."""
    enumerator = SlotEnumerator()
    return {
        field_id: enumerator.enumerate(field_id, day, duration_minutes, permits, matches, blackouts)
        for field_id in field_ids
    }
