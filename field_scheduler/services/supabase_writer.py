"""
Supabase writers for the Club Field Scheduler.
Matches are persisted only after a passing validation against a fresh snapshot;
permits, blackouts and availability declarations are written as given.
"""

from datetime import date, datetime, time
from typing import Dict, Optional, Tuple

from supabase import create_client, Client

from field_scheduler.models import (
    Match, MatchProposal, Participant, Existing, Temporary, TimeWindow, ValidationResult
)
from field_scheduler.core.config import (
    SUPABASE_URL, SUPABASE_KEY, TABLE_MATCHES, TABLE_PERMITS, TABLE_BLACKOUTS,
    TABLE_AVAILABILITY, TEMPORARY_ID, EXTERNAL_FIELD_ID, CLUB_WIDE_SCOPE
)
from field_scheduler.core.logging_config import get_logger
from field_scheduler.services.supabase_reader import SnapshotReader
from field_scheduler.services.validator import MatchValidator
from field_scheduler.services.match_ops import reschedule_match

logger = get_logger(__name__)

# A whole-day record ends on the last millisecond of the day
END_OF_DAY = time(23, 59, 59, 999000)


def participant_columns(prefix: str, participant: Optional[Participant]) -> Dict[str, Optional[str]]:
    """Flatten a participant back into the store's id/name column pair."""
    if isinstance(participant, Existing):
        return {f"{prefix}_id": participant.id, f"{prefix}_name": None}
    if isinstance(participant, Temporary):
        return {f"{prefix}_id": TEMPORARY_ID, f"{prefix}_name": participant.name}
    return {f"{prefix}_id": None, f"{prefix}_name": None}


def whole_day(day: date) -> TimeWindow:
    return TimeWindow(datetime.combine(day, time(0, 0)), datetime.combine(day, END_OF_DAY))


def _inserted_id(response) -> Optional[str]:
    return str(response.data[0]['id']) if response.data else None


class MatchWriter:
    def __init__(self, reader: SnapshotReader, client: Optional[Client] = None):
        self.reader = reader
        self.client: Client = client or create_client(SUPABASE_URL, SUPABASE_KEY)
        self.validator = MatchValidator()

    def _check(self, proposal: MatchProposal, snapshot, exclude_id: Optional[str] = None) -> ValidationResult:
        if proposal.field_id == EXTERNAL_FIELD_ID:
            return self.validator.validate_away_match(proposal, snapshot.blackouts)
        others = [m for m in snapshot.matches if m.id != exclude_id]
        return self.validator.validate_match(proposal, others, snapshot.permits, snapshot.blackouts)

    def commit_match(self, proposal: MatchProposal, complex: Optional[Participant] = None,
                     field_name: str = "") -> Tuple[ValidationResult, Optional[str]]:
        """
        Validate against a freshly loaded snapshot and insert on success.
        Two concurrent commits can still both pass; the store keeps the last write.

        Away games on the EXTERNAL field skip the permit and field checks but
        still honor blackouts. field_name names the venue's pitch for them.

        Returns:
            (validation result, new match id or None)
        """
        snapshot = self.reader.load_snapshot()
        result = self._check(proposal, snapshot)
        if not result.is_valid:
            return result, None

        row = {
            'field_id': proposal.field_id,
            'field_name': field_name if proposal.field_id == EXTERNAL_FIELD_ID else "",
            'start': proposal.window.start.isoformat(),
            'end': proposal.window.end.isoformat(),
        }
        row.update(participant_columns('home_team', proposal.home))
        row.update(participant_columns('away_team', proposal.away))
        row.update(participant_columns('complex', complex))

        response = self.client.table(TABLE_MATCHES).insert(row).execute()
        match_id = _inserted_id(response)
        logger.info(f"Committed match {match_id} on {proposal.field_id} at {proposal.window}")
        return result, match_id

    def reschedule(self, match_id: str, new_start: datetime) -> Tuple[ValidationResult, Optional[Match]]:
        """
        Shift a match to a new start with its original duration, re-validating
        against every other match.
        """
        snapshot = self.reader.load_snapshot()
        current = next((m for m in snapshot.matches if m.id == match_id), None)
        if current is None:
            return ValidationResult(is_valid=False, errors=[f"match {match_id} not found"]), None

        moved = reschedule_match(current, new_start)
        proposal = MatchProposal(field_id=moved.field_id, home=moved.home, away=moved.away,
                                 window=moved.window)
        result = self._check(proposal, snapshot, exclude_id=match_id)
        if not result.is_valid:
            return result, None

        self.client.table(TABLE_MATCHES).update({
            'start': moved.window.start.isoformat(),
            'end': moved.window.end.isoformat(),
        }).eq('id', match_id).execute()
        logger.info(f"Rescheduled match {match_id} to {moved.window}")
        return result, moved

    def cancel(self, match_id: str):
        self.client.table(TABLE_MATCHES).delete().eq('id', match_id).execute()
        logger.info(f"Cancelled match {match_id}")


class RecordWriter:
    """Create and delete the permit, blackout and availability records."""

    def __init__(self, client: Optional[Client] = None):
        self.client: Client = client or create_client(SUPABASE_URL, SUPABASE_KEY)

    def _insert(self, table: str, row: Dict) -> Optional[str]:
        record_id = _inserted_id(self.client.table(table).insert(row).execute())
        logger.info(f"Created {table} record {record_id}")
        return record_id

    def _delete(self, table: str, record_id: str):
        self.client.table(table).delete().eq('id', record_id).execute()
        logger.info(f"Deleted {table} record {record_id}")

    def create_permit(self, field_id: str, window: TimeWindow) -> Optional[str]:
        return self._insert(TABLE_PERMITS, {
            'field_id': field_id,
            'start': window.start.isoformat(),
            'end': window.end.isoformat(),
        })

    def delete_permit(self, permit_id: str):
        self._delete(TABLE_PERMITS, permit_id)

    def create_blackout(self, window: TimeWindow, team_id: Optional[str] = None,
                        reason: str = "") -> Optional[str]:
        """A blackout with no team applies to the whole club."""
        return self._insert(TABLE_BLACKOUTS, {
            'scope': team_id or CLUB_WIDE_SCOPE,
            'team_id': team_id,
            'start': window.start.isoformat(),
            'end': window.end.isoformat(),
            'reason': reason,
        })

    def delete_blackout(self, blackout_id: str):
        self._delete(TABLE_BLACKOUTS, blackout_id)

    def declare_availability(self, team_id: str, day: date, note: str = "") -> Optional[str]:
        window = whole_day(day)
        return self._insert(TABLE_AVAILABILITY, {
            'team_id': team_id,
            'start': window.start.isoformat(),
            'end': window.end.isoformat(),
            'note': note,
        })

    def delete_declaration(self, declaration_id: str):
        self._delete(TABLE_AVAILABILITY, declaration_id)
