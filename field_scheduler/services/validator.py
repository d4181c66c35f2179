"""
Match validation module for the Club Field Scheduler.
Authoritative gate run at commit time: every condition is re-derived from the
snapshot passed in, never taken from an earlier slot listing.
"""

from datetime import datetime
from typing import Sequence

from field_scheduler.models import (
    Match, Permit, Blackout, MatchProposal, Participant, TimeWindow,
    ValidationResult
)
from field_scheduler.core.config import (
    ERROR_NO_PERMIT, ERROR_FIELD_CONFLICT, ERROR_TEAM_BLACKOUT,
    ERROR_INVALID_PROPOSAL, EXTERNAL_FIELD_ID
)
from field_scheduler.core.exceptions import InvalidWindowError
from field_scheduler.core.logging_config import get_logger
from field_scheduler.services.slot_enumerator import has_permit_coverage, find_field_conflict

logger = get_logger(__name__)


class MatchValidator:
    """
    Validates a proposed match against permits, committed matches and blackouts.
    All checks run; errors accumulate in the result.
    """

    def validate_match(self, proposal: MatchProposal, matches: Sequence[Match],
                       permits: Sequence[Permit], blackouts: Sequence[Blackout]) -> ValidationResult:
        """
        Validate a match proposal.

        Args:
            proposal: The match to check
            matches: Committed matches (exclude the match itself when rescheduling)
            permits: Permit snapshot
            blackouts: Blackout snapshot

        Returns:
            ValidationResult with every error found
        """
        result = ValidationResult(is_valid=True)

        self._check_permit_coverage(proposal, permits, result)
        self._check_field_conflicts(proposal, matches, result)
        self._check_team_blackouts(proposal, blackouts, result)

        if result.is_valid:
            logger.debug(f"Proposal on {proposal.field_id} at {proposal.window} is valid")
        else:
            logger.info(f"Proposal on {proposal.field_id} at {proposal.window} rejected: {result.errors}")
        return result

    def validate_away_match(self, proposal: MatchProposal,
                            blackouts: Sequence[Blackout]) -> ValidationResult:
        """
        Validate an away game played off club fields.
        No permit or field booking exists to check, so only blackouts apply.
        """
        result = ValidationResult(is_valid=True)
        self._check_team_blackouts(proposal, blackouts, result)
        if not result.is_valid:
            logger.info(f"Away game at {proposal.window} rejected: {result.errors}")
        return result

    def _check_permit_coverage(self, proposal: MatchProposal, permits: Sequence[Permit],
                               result: ValidationResult):
        """Check that one permit for the field holds the whole match."""
        if not has_permit_coverage(proposal.field_id, proposal.window, permits):
            result.add_error(ERROR_NO_PERMIT)

    def _check_field_conflicts(self, proposal: MatchProposal, matches: Sequence[Match],
                               result: ValidationResult):
        """Check for a committed match on the same field overlapping the proposal."""
        conflict = find_field_conflict(proposal.field_id, proposal.window, matches)
        if conflict is not None:
            result.add_error(ERROR_FIELD_CONFLICT.format(match_id=conflict.id))

    def _check_team_blackouts(self, proposal: MatchProposal, blackouts: Sequence[Blackout],
                              result: ValidationResult):
        """
        Check both sides against team-scoped and club-wide blackouts.
        Temporary participants carry no id, so only club-wide blackouts reach them.
        """
        team_ids = proposal.team_ids or [None]
        for blackout in blackouts:
            if not blackout.window.overlaps(proposal.window):
                continue
            if any(blackout.applies_to(team_id) for team_id in team_ids):
                result.add_error(ERROR_TEAM_BLACKOUT)
                return


def validate_match(proposal: MatchProposal, matches: Sequence[Match],
                   permits: Sequence[Permit], blackouts: Sequence[Blackout]) -> ValidationResult:
    return MatchValidator().validate_match(proposal, matches, permits, blackouts)


def validate_away_match(proposal: MatchProposal, blackouts: Sequence[Blackout]) -> ValidationResult:
    return MatchValidator().validate_away_match(proposal, blackouts)


def validate_raw_proposal(field_id: str, home: Participant, away: Participant,
                          start: datetime, end: datetime, matches: Sequence[Match],
                          permits: Sequence[Permit], blackouts: Sequence[Blackout]) -> ValidationResult:
    """
    Build and validate a proposal from raw instants.
    A window with end <= start yields an "invalid proposal" result instead of raising.
    """
    try:
        window = TimeWindow(start, end)
    except InvalidWindowError as e:
        logger.warning(f"Malformed proposal on {field_id}: {e}")
        return ValidationResult(is_valid=False, errors=[ERROR_INVALID_PROPOSAL])

    proposal = MatchProposal(field_id=field_id, home=home, away=away, window=window)
    if field_id == EXTERNAL_FIELD_ID:
        return validate_away_match(proposal, blackouts)
    return validate_match(proposal, matches, permits, blackouts)
