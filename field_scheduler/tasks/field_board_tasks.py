"""
Celery tasks for building the day's field board.
"""

from datetime import date, datetime

from field_scheduler.core.celery_app import celery_app
from field_scheduler.core.logging_config import get_logger
from field_scheduler.services.supabase_reader import SnapshotReader
from field_scheduler.services.slot_enumerator import enumerate_field_board

logger = get_logger(__name__)


@celery_app.task(bind=True, name="build_field_board")
def build_field_board_task(self, day_iso: str, duration_minutes: int):
    """
    Enumerate open slots on every club field for one day.

    Args:
        day_iso: Day as YYYY-MM-DD
        duration_minutes: Match length

    Returns:
        dict: {success, day, duration_minutes, fields: {field_id: [HH:MM, ...]}, generation_time}
        or {success: False, message, error} when the board could not be built
    """
    started = datetime.now()
    try:
        day = date.fromisoformat(day_iso)

        self.update_state(state="PROGRESS", meta={"status": "Loading permits, matches and blackouts..."})
        reader = SnapshotReader()
        field_ids = reader.load_field_ids()
        snapshot = reader.load_snapshot()

        self.update_state(state="PROGRESS", meta={"status": f"Enumerating slots for {len(field_ids)} fields..."})
        board = enumerate_field_board(field_ids, day, duration_minutes,
                                      snapshot.permits, snapshot.matches, snapshot.blackouts)

        logger.info(f"Built field board for {day} across {len(board)} fields")
        return {
            "success": True,
            "day": day_iso,
            "duration_minutes": duration_minutes,
            "fields": board,
            "generation_time": (datetime.now() - started).total_seconds()
        }

    except Exception as e:
        logger.exception(f"Field board for {day_iso} failed")
        return {
            "success": False,
            "message": f"Field board generation failed: {str(e)}",
            "error": str(e)
        }
