"""
Run Celery worker for field board tasks.
"""

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from field_scheduler.core.celery_app import celery_app
from field_scheduler.core.logging_config import setup_logging

if __name__ == "__main__":
    setup_logging()
    print("=" * 60)
    print("Club Field Scheduler - Celery Worker")
    print("=" * 60)
    print("Worker will process field board tasks")
    print("=" * 60)

    celery_app.worker_main([
        "worker",
        "--loglevel=info",
        "--concurrency=2",
        "--pool=solo" if os.name == "nt" else "--pool=prefork"  # Use solo pool on Windows
    ])
