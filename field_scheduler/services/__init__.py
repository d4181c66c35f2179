"""
Services for slot enumeration, match validation, availability projection and
Supabase integration.
"""

from .slot_enumerator import SlotEnumerator, enumerate_slots
from .validator import MatchValidator, validate_match, validate_away_match, validate_raw_proposal
from .availability import AvailabilityProjector, project_availability
from .match_ops import reschedule_match, upcoming_matches_by_day, availability_warning
from .supabase_reader import SnapshotReader, SchedulerSnapshot
from .supabase_writer import MatchWriter, RecordWriter

__all__ = [
    "SlotEnumerator",
    "enumerate_slots",
    "MatchValidator",
    "validate_match",
    "validate_away_match",
    "validate_raw_proposal",
    "AvailabilityProjector",
    "project_availability",
    "reschedule_match",
    "upcoming_matches_by_day",
    "availability_warning",
    "SnapshotReader",
    "SchedulerSnapshot",
    "MatchWriter",
    "RecordWriter"
]
