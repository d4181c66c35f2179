"""
API routes for slot listing, match validation/commit, public availability and
the permit, blackout and availability records.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from typing import List, Dict, Optional
from datetime import datetime, date
from zoneinfo import ZoneInfo
from celery.result import AsyncResult

from field_scheduler.models import Match, MatchProposal, TimeWindow, Participant
from field_scheduler.core.config import (
    CLUB_TIMEZONE, DEFAULT_MATCH_DURATION_MINUTES,
    MIN_MATCH_DURATION_MINUTES, MAX_MATCH_DURATION_MINUTES, ERROR_INVALID_PROPOSAL
)
from field_scheduler.core.exceptions import SchedulingError
from field_scheduler.core.logging_config import get_logger
from field_scheduler.core.celery_app import celery_app
from field_scheduler.services.supabase_reader import SnapshotReader, parse_instant, parse_participant
from field_scheduler.services.supabase_writer import MatchWriter, RecordWriter
from field_scheduler.services.slot_enumerator import enumerate_slots
from field_scheduler.services.validator import validate_raw_proposal
from field_scheduler.services.availability import project_availability
from field_scheduler.services.match_ops import upcoming_matches_by_day, display_name
from field_scheduler.tasks.field_board_tasks import build_field_board_task


logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["scheduling"])


def get_reader() -> SnapshotReader:
    return SnapshotReader()


def get_writer(reader: SnapshotReader = Depends(get_reader)) -> MatchWriter:
    return MatchWriter(reader)


def get_record_writer() -> RecordWriter:
    return RecordWriter()


def club_today() -> date:
    return datetime.now(ZoneInfo(CLUB_TIMEZONE)).date()


def to_local(value: datetime) -> datetime:
    return parse_instant(value, ZoneInfo(CLUB_TIMEZONE))


class ParticipantIn(BaseModel):
    """An existing record (id) or an ad hoc entity (name only)."""
    id: Optional[str] = None
    name: Optional[str] = None

    def to_participant(self) -> Participant:
        participant = parse_participant(self.id, self.name)
        if participant is None:
            raise HTTPException(status_code=400, detail="Participant needs an id or a name")
        return participant


class SlotRequest(BaseModel):
    field_id: str
    date: date
    duration_minutes: int = DEFAULT_MATCH_DURATION_MINUTES


class SlotResponse(BaseModel):
    field_id: str
    date: date
    duration_minutes: int
    slots: List[str]


class ProposalRequest(BaseModel):
    field_id: str
    home: ParticipantIn
    away: ParticipantIn
    start: datetime
    end: datetime
    complex: Optional[ParticipantIn] = None
    field_name: str = ""


class ValidationResponse(BaseModel):
    is_valid: bool
    errors: List[str]


class CommitResponse(BaseModel):
    match_id: Optional[str]
    validation: ValidationResponse


class RescheduleRequest(BaseModel):
    start: datetime


class BusyIntervalResponse(BaseModel):
    start: datetime
    end: datetime


class DayAvailabilityResponse(BaseModel):
    day: date
    note: str
    fully_available: bool
    busy: List[BusyIntervalResponse]


class MatchResponse(BaseModel):
    id: str
    field_id: str
    field_name: str = ""
    home_team: str
    away_team: str
    start: datetime
    end: datetime


class FieldBoardRequest(BaseModel):
    date: date
    duration_minutes: int = DEFAULT_MATCH_DURATION_MINUTES


class PermitRequest(BaseModel):
    field_id: str
    start: datetime
    end: datetime


class BlackoutRequest(BaseModel):
    """Omit team_id for a club-wide blackout."""
    team_id: Optional[str] = None
    start: datetime
    end: datetime
    reason: str = ""


class AvailabilityRequest(BaseModel):
    date: date
    note: str = ""


class CreatedResponse(BaseModel):
    id: Optional[str]


def request_window(start: datetime, end: datetime) -> TimeWindow:
    """Club-local window from request instants; 400 when end is not after start."""
    try:
        return TimeWindow(to_local(start), to_local(end))
    except SchedulingError:
        raise HTTPException(status_code=400, detail=ERROR_INVALID_PROPOSAL)


def check_duration(duration_minutes: int):
    if not MIN_MATCH_DURATION_MINUTES <= duration_minutes <= MAX_MATCH_DURATION_MINUTES:
        raise HTTPException(
            status_code=400,
            detail=f"duration_minutes must be between {MIN_MATCH_DURATION_MINUTES} "
                   f"and {MAX_MATCH_DURATION_MINUTES}"
        )


def match_response(match: Match, team_names: Optional[Dict[str, str]] = None) -> MatchResponse:
    return MatchResponse(
        id=match.id,
        field_id=match.field_id,
        field_name=match.field_name,
        home_team=display_name(match.home, team_names),
        away_team=display_name(match.away, team_names),
        start=match.window.start,
        end=match.window.end
    )


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@router.post("/slots", response_model=SlotResponse)
def list_slots(request: SlotRequest, reader: SnapshotReader = Depends(get_reader)):
    """
    Advisory list of open kickoff times on a field.
    Commit still runs the full validation.
    """
    check_duration(request.duration_minutes)
    try:
        snapshot = reader.load_snapshot()
    except Exception as e:
        logger.exception("Failed to load scheduling snapshot")
        raise HTTPException(status_code=500, detail=f"Failed to load scheduling data: {str(e)}")

    slots = enumerate_slots(request.field_id, request.date, request.duration_minutes,
                            snapshot.permits, snapshot.matches, snapshot.blackouts)
    return SlotResponse(field_id=request.field_id, date=request.date,
                        duration_minutes=request.duration_minutes, slots=slots)


@router.post("/matches/validate", response_model=ValidationResponse)
def validate_proposal(request: ProposalRequest, reader: SnapshotReader = Depends(get_reader)):
    """Dry-run validation of a proposal against the latest snapshot."""
    home = request.home.to_participant()
    away = request.away.to_participant()
    try:
        snapshot = reader.load_snapshot()
    except Exception as e:
        logger.exception("Failed to load scheduling snapshot")
        raise HTTPException(status_code=500, detail=f"Failed to load scheduling data: {str(e)}")

    result = validate_raw_proposal(request.field_id, home, away,
                                   to_local(request.start), to_local(request.end),
                                   snapshot.matches, snapshot.permits, snapshot.blackouts)
    return ValidationResponse(is_valid=result.is_valid, errors=result.errors)


@router.post("/matches", response_model=CommitResponse, status_code=201)
def commit_match(request: ProposalRequest, writer: MatchWriter = Depends(get_writer)):
    """
    Validate and persist a match.
    Responds 422 with the accumulated errors when validation fails.
    """
    home = request.home.to_participant()
    away = request.away.to_participant()
    complex_ref = request.complex.to_participant() if request.complex else None
    window = request_window(request.start, request.end)

    proposal = MatchProposal(field_id=request.field_id, home=home, away=away, window=window)
    try:
        result, match_id = writer.commit_match(proposal, complex=complex_ref,
                                               field_name=request.field_name)
    except Exception as e:
        logger.exception("Match commit failed")
        raise HTTPException(status_code=500, detail=f"Match commit failed: {str(e)}")

    if not result.is_valid:
        raise HTTPException(status_code=422, detail={"is_valid": False, "errors": result.errors})
    return CommitResponse(match_id=match_id,
                          validation=ValidationResponse(is_valid=True, errors=[]))


@router.patch("/matches/{match_id}", response_model=MatchResponse)
def reschedule(match_id: str, request: RescheduleRequest, writer: MatchWriter = Depends(get_writer)):
    """Move a match to a new start, keeping its duration."""
    try:
        result, moved = writer.reschedule(match_id, to_local(request.start))
    except Exception as e:
        logger.exception(f"Rescheduling match {match_id} failed")
        raise HTTPException(status_code=500, detail=f"Reschedule failed: {str(e)}")

    if moved is None:
        raise HTTPException(status_code=422, detail={"is_valid": False, "errors": result.errors})
    return match_response(moved)


@router.delete("/matches/{match_id}", status_code=204)
def cancel(match_id: str, writer: MatchWriter = Depends(get_writer)):
    """Cancel (delete) a match."""
    try:
        writer.cancel(match_id)
    except Exception as e:
        logger.exception(f"Cancelling match {match_id} failed")
        raise HTTPException(status_code=500, detail=f"Cancel failed: {str(e)}")


@router.get("/teams/{team_id}/availability", response_model=List[DayAvailabilityResponse])
def team_availability(team_id: str, reader: SnapshotReader = Depends(get_reader)):
    """
    Public availability of a team from today on.
    Busy intervals carry times only, never the opponent.
    """
    try:
        if not reader.team_exists(team_id):
            raise HTTPException(status_code=404, detail="Team not found.")
        declarations = reader.load_availability(team_id)
        matches = reader.load_team_matches(team_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to load availability for team {team_id}")
        raise HTTPException(status_code=500, detail=f"Failed to load availability: {str(e)}")

    days = project_availability(declarations, matches, team_id, club_today())
    return [
        DayAvailabilityResponse(
            day=d.day,
            note=d.note,
            fully_available=d.is_fully_available,
            busy=[BusyIntervalResponse(start=b.start, end=b.end) for b in d.busy]
        )
        for d in days
    ]


@router.post("/teams/{team_id}/availability", response_model=CreatedResponse, status_code=201)
def declare_availability(team_id: str, request: AvailabilityRequest,
                         reader: SnapshotReader = Depends(get_reader),
                         records: RecordWriter = Depends(get_record_writer)):
    """Declare a team available for a whole day."""
    try:
        if not reader.team_exists(team_id):
            raise HTTPException(status_code=404, detail="Team not found.")
        declaration_id = records.declare_availability(team_id, request.date, request.note)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to declare availability for team {team_id}")
        raise HTTPException(status_code=500, detail=f"Failed to declare availability: {str(e)}")
    return CreatedResponse(id=declaration_id)


@router.delete("/availability/{declaration_id}", status_code=204)
def delete_declaration(declaration_id: str, records: RecordWriter = Depends(get_record_writer)):
    try:
        records.delete_declaration(declaration_id)
    except Exception as e:
        logger.exception(f"Deleting declaration {declaration_id} failed")
        raise HTTPException(status_code=500, detail=f"Delete failed: {str(e)}")


@router.post("/permits", response_model=CreatedResponse, status_code=201)
def create_permit(request: PermitRequest, records: RecordWriter = Depends(get_record_writer)):
    """Grant a field permit window."""
    window = request_window(request.start, request.end)
    try:
        permit_id = records.create_permit(request.field_id, window)
    except Exception as e:
        logger.exception(f"Creating permit on {request.field_id} failed")
        raise HTTPException(status_code=500, detail=f"Permit creation failed: {str(e)}")
    return CreatedResponse(id=permit_id)


@router.delete("/permits/{permit_id}", status_code=204)
def delete_permit(permit_id: str, records: RecordWriter = Depends(get_record_writer)):
    try:
        records.delete_permit(permit_id)
    except Exception as e:
        logger.exception(f"Deleting permit {permit_id} failed")
        raise HTTPException(status_code=500, detail=f"Delete failed: {str(e)}")


@router.post("/blackouts", response_model=CreatedResponse, status_code=201)
def create_blackout(request: BlackoutRequest, records: RecordWriter = Depends(get_record_writer)):
    """Block out a team, or the whole club when no team is given."""
    window = request_window(request.start, request.end)
    try:
        blackout_id = records.create_blackout(window, team_id=request.team_id, reason=request.reason)
    except Exception as e:
        logger.exception("Creating blackout failed")
        raise HTTPException(status_code=500, detail=f"Blackout creation failed: {str(e)}")
    return CreatedResponse(id=blackout_id)


@router.delete("/blackouts/{blackout_id}", status_code=204)
def delete_blackout(blackout_id: str, records: RecordWriter = Depends(get_record_writer)):
    try:
        records.delete_blackout(blackout_id)
    except Exception as e:
        logger.exception(f"Deleting blackout {blackout_id} failed")
        raise HTTPException(status_code=500, detail=f"Delete failed: {str(e)}")


@router.get("/schedule", response_model=Dict[str, List[MatchResponse]])
def club_schedule(on_date: Optional[date] = Query(None, alias="date"),
                  team: Optional[str] = None,
                  reader: SnapshotReader = Depends(get_reader)):
    """Upcoming matches grouped by day, optionally filtered by date and team name."""
    try:
        matches = reader.load_matches()
        team_names = reader.load_team_names()
    except Exception as e:
        logger.exception("Failed to load club schedule")
        raise HTTPException(status_code=500, detail=f"Failed to load schedule: {str(e)}")

    grouped = upcoming_matches_by_day(matches, club_today(), on_day=on_date,
                                      team_search=team, team_names=team_names)
    return {
        day.isoformat(): [match_response(m, team_names) for m in day_matches]
        for day, day_matches in grouped.items()
    }


@router.post("/field-board")
async def start_field_board(request: FieldBoardRequest):
    """
    Start async enumeration of every field for one day.

    Returns:
        dict: Task ID for polling status
    """
    check_duration(request.duration_minutes)
    try:
        task = build_field_board_task.delay(request.date.isoformat(), request.duration_minutes)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to start task: {str(e)}")
    return {"task_id": task.id, "status": "PENDING", "message": "Field board generation started"}


@router.get("/field-board/{task_id}")
async def get_field_board(task_id: str):
    """Status and result of a field board task."""
    task_result = AsyncResult(task_id, app=celery_app)

    if task_result.state == "PROGRESS":
        return {"task_id": task_id, "status": "PROGRESS",
                "message": task_result.info.get("status", "Processing...")}
    if task_result.state == "SUCCESS":
        return {"task_id": task_id, "status": "SUCCESS", "result": task_result.result}
    if task_result.state == "FAILURE":
        return {"task_id": task_id, "status": "FAILURE", "message": str(task_result.info)}
    return {"task_id": task_id, "status": task_result.state, "message": f"Task state: {task_result.state}"}
