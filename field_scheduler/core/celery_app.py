"""
Celery configuration for async task processing.
"""

from celery import Celery

from field_scheduler.core.config import (
    REDIS_URL, CLUB_TIMEZONE, TASK_TIME_LIMIT_SECONDS, TASK_SOFT_TIME_LIMIT_SECONDS
)

celery_app = Celery(
    "field_scheduler",
    broker=REDIS_URL,
    backend=REDIS_URL,
    include=["field_scheduler.tasks.field_board_tasks"]
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=CLUB_TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=TASK_TIME_LIMIT_SECONDS,
    task_soft_time_limit=TASK_SOFT_TIME_LIMIT_SECONDS,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=50,
)
