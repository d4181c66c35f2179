"""
Main FastAPI application for the Club Field Scheduler.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from field_scheduler.api import routes
from field_scheduler.core.config import CORS_ORIGINS
from field_scheduler.core.logging_config import setup_logging

setup_logging()

app = FastAPI(
    title="Club Field Scheduler API",
    description="Slot enumeration, match validation and team availability for club fields",
    version="1.0.0"
)

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(routes.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Club Field Scheduler API",
        "version": "1.0.0",
        "endpoints": {
            "slots": "/api/slots",
            "validate": "/api/matches/validate",
            "matches": "/api/matches",
            "availability": "/api/teams/{team_id}/availability",
            "schedule": "/api/schedule",
            "health": "/api/health"
        }
    }
