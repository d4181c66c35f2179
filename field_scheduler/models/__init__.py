"""
Data models for the field scheduling core.
"""

from .models import (
    TimeWindow,
    Existing,
    Temporary,
    Participant,
    participant_id,
    Permit,
    Blackout,
    Match,
    AvailabilityDeclaration,
    MatchProposal,
    ValidationResult,
    BusyInterval,
    DayAvailability
)

__all__ = [
    "TimeWindow",
    "Existing",
    "Temporary",
    "Participant",
    "participant_id",
    "Permit",
    "Blackout",
    "Match",
    "AvailabilityDeclaration",
    "MatchProposal",
    "ValidationResult",
    "BusyInterval",
    "DayAvailability"
]
