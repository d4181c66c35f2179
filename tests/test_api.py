"""
Tests for the HTTP routes with the Supabase client replaced by the in-memory fake.
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from field_scheduler.main import app
from field_scheduler.api import routes
from field_scheduler.services.supabase_reader import SnapshotReader
from field_scheduler.services.supabase_writer import MatchWriter, RecordWriter


@pytest.fixture
def client(fake_client, monkeypatch):
    reader = SnapshotReader(client=fake_client)
    app.dependency_overrides[routes.get_reader] = lambda: reader
    app.dependency_overrides[routes.get_writer] = lambda: MatchWriter(reader, client=fake_client)
    app.dependency_overrides[routes.get_record_writer] = lambda: RecordWriter(client=fake_client)
    monkeypatch.setattr(routes, "club_today", lambda: date(2026, 11, 7))
    yield TestClient(app)
    app.dependency_overrides.clear()


def proposal_body(start="2026-11-07T09:00:00", end="2026-11-07T10:30:00", field_id="F"):
    return {
        "field_id": field_id,
        "home": {"id": "teamA"},
        "away": {"name": "Visitors FC"},
        "start": start,
        "end": end,
    }


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_slots(client):
    response = client.post("/api/slots", json={"field_id": "F", "date": "2026-11-07", "duration_minutes": 90})
    assert response.status_code == 200
    assert response.json()["slots"] == ["09:00", "09:15", "09:30", "09:45", "10:00", "10:15", "10:30"]


def test_slots_rejects_out_of_range_duration(client):
    response = client.post("/api/slots", json={"field_id": "F", "date": "2026-11-07", "duration_minutes": 5})
    assert response.status_code == 400


def test_validate_and_commit_flow(client, fake_client):
    response = client.post("/api/matches/validate", json=proposal_body())
    assert response.json() == {"is_valid": True, "errors": []}

    response = client.post("/api/matches", json=proposal_body())
    assert response.status_code == 201
    match_id = response.json()["match_id"]
    assert fake_client.tables["matches"][0]["id"] == match_id

    response = client.post("/api/matches", json=proposal_body(start="2026-11-07T10:00:00",
                                                              end="2026-11-07T11:00:00"))
    assert response.status_code == 422
    assert response.json()["detail"]["errors"] == [f"field conflict with match {match_id}"]


def test_malformed_proposal(client):
    body = proposal_body(start="2026-11-07T11:00:00", end="2026-11-07T10:00:00")
    assert client.post("/api/matches/validate", json=body).json() == {
        "is_valid": False, "errors": ["invalid proposal"]
    }
    assert client.post("/api/matches", json=body).status_code == 400


def test_participant_needs_id_or_name(client):
    body = proposal_body()
    body["away"] = {}
    assert client.post("/api/matches/validate", json=body).status_code == 400


def test_reschedule_and_cancel(client, fake_client):
    fake_client.tables["matches"] = [
        {"id": "m1", "field_id": "F", "home_team_id": "teamA", "away_team_id": "teamB",
         "start": "2026-11-07T09:00:00", "end": "2026-11-07T10:00:00"},
    ]
    response = client.patch("/api/matches/m1", json={"start": "2026-11-07T10:15:00"})
    assert response.status_code == 200
    assert response.json()["end"] == "2026-11-07T11:15:00"

    response = client.patch("/api/matches/m1", json={"start": "2026-11-07T15:00:00"})
    assert response.status_code == 422

    assert client.delete("/api/matches/m1").status_code == 204
    assert fake_client.tables["matches"] == []


def test_team_availability(client, fake_client):
    fake_client.tables["availability"] = [
        {"id": "a1", "team_id": "teamA", "start": "2026-11-06T00:00:00", "end": "2026-11-08T23:59:00",
         "note": "Weekend"},
    ]
    fake_client.tables["matches"] = [
        {"id": "m1", "field_id": "F", "home_team_id": "teamB", "away_team_id": "teamA",
         "start": "2026-11-08T10:00:00", "end": "2026-11-08T11:30:00"},
    ]
    response = client.get("/api/teams/teamA/availability")
    assert response.status_code == 200
    days = response.json()
    assert [d["day"] for d in days] == ["2026-11-07", "2026-11-08"]
    assert days[0]["fully_available"] is True
    assert days[1]["busy"] == [{"start": "2026-11-08T10:00:00", "end": "2026-11-08T11:30:00"}]
    assert "teamB" not in response.text

    assert client.get("/api/teams/teamZ/availability").status_code == 404


def test_club_schedule(client, fake_client):
    fake_client.tables["matches"] = [
        {"id": "m1", "field_id": "F", "home_team_id": "teamA", "away_team_id": "teamB",
         "start": "2026-11-08T10:00:00", "end": "2026-11-08T11:30:00"},
        {"id": "m0", "field_id": "F", "home_team_id": "teamA", "away_team_id": "teamB",
         "start": "2026-11-01T10:00:00", "end": "2026-11-01T11:30:00"},
    ]
    response = client.get("/api/schedule")
    assert response.status_code == 200
    schedule = response.json()
    assert list(schedule.keys()) == ["2026-11-08"]
    assert schedule["2026-11-08"][0]["home_team"] == "Lions U12"

    assert client.get("/api/schedule", params={"team": "eagles"}).json() == {}


def test_away_game_commit(client, fake_client):
    body = proposal_body(start="2026-11-08T13:00:00", end="2026-11-08T14:30:00", field_id="EXTERNAL")
    body["field_name"] = "Field 3"
    body["complex"] = {"name": "Riverside Park"}

    assert client.post("/api/matches/validate", json=body).json() == {"is_valid": True, "errors": []}
    response = client.post("/api/matches", json=body)
    assert response.status_code == 201
    row = fake_client.tables["matches"][0]
    assert row["field_id"] == "EXTERNAL"
    assert row["field_name"] == "Field 3"
    assert row["complex_id"] == "TEMP"
    assert row["complex_name"] == "Riverside Park"

    # Away games hold no field booking, so a second one at the same time is accepted
    assert client.post("/api/matches", json=body).status_code == 201

    fake_client.tables["blackouts"] = [
        {"id": "b1", "team_id": "teamA", "start": "2026-11-08T00:00:00", "end": "2026-11-08T23:59:00"},
    ]
    response = client.post("/api/matches", json=body)
    assert response.status_code == 422
    assert response.json()["detail"]["errors"] == ["team blackout conflict"]


def test_permit_lifecycle(client, fake_client):
    body = {"field_id": "G", "start": "2026-11-07T14:00:00", "end": "2026-11-07T16:00:00"}
    response = client.post("/api/permits", json=body)
    assert response.status_code == 201
    permit_id = response.json()["id"]

    slots = client.post("/api/slots", json={"field_id": "G", "date": "2026-11-07", "duration_minutes": 60})
    assert slots.json()["slots"] == ["14:00", "14:15", "14:30", "14:45", "15:00"]

    assert client.delete(f"/api/permits/{permit_id}").status_code == 204
    slots = client.post("/api/slots", json={"field_id": "G", "date": "2026-11-07", "duration_minutes": 60})
    assert slots.json()["slots"] == []

    body["end"] = "2026-11-07T14:00:00"
    assert client.post("/api/permits", json=body).status_code == 400


def test_blackout_lifecycle(client, fake_client):
    body = {"start": "2026-11-07T00:00:00", "end": "2026-11-07T23:59:59", "reason": "Tournament"}
    response = client.post("/api/blackouts", json=body)
    assert response.status_code == 201
    blackout_id = response.json()["id"]
    assert fake_client.tables["blackouts"][0]["scope"] == "ALL"

    slots = client.post("/api/slots", json={"field_id": "F", "date": "2026-11-07", "duration_minutes": 90})
    assert slots.json()["slots"] == []

    assert client.delete(f"/api/blackouts/{blackout_id}").status_code == 204
    slots = client.post("/api/slots", json={"field_id": "F", "date": "2026-11-07", "duration_minutes": 90})
    assert slots.json()["slots"][0] == "09:00"

    team_body = {"team_id": "teamA", "start": "2026-11-07T09:00:00", "end": "2026-11-07T10:00:00"}
    assert client.post("/api/blackouts", json=team_body).status_code == 201
    response = client.post("/api/matches", json=proposal_body())
    assert response.json()["detail"]["errors"] == ["team blackout conflict"]

    team_body["end"] = "2026-11-07T08:00:00"
    assert client.post("/api/blackouts", json=team_body).status_code == 400


def test_availability_declaration_lifecycle(client, fake_client):
    response = client.post("/api/teams/teamA/availability", json={"date": "2026-11-09", "note": "Evening only"})
    assert response.status_code == 201
    declaration_id = response.json()["id"]
    assert fake_client.tables["availability"][0]["end"] == "2026-11-09T23:59:59.999000"

    days = client.get("/api/teams/teamA/availability").json()
    assert [(d["day"], d["note"]) for d in days] == [("2026-11-09", "Evening only")]

    assert client.delete(f"/api/availability/{declaration_id}").status_code == 204
    assert client.get("/api/teams/teamA/availability").json() == []

    assert client.post("/api/teams/teamZ/availability", json={"date": "2026-11-09"}).status_code == 404


class StartedTask:
    id = "task-1"


class FinishedResult:
    def __init__(self, task_id, app=None):
        self.state = "SUCCESS"
        self.result = {"success": True, "fields": {"F": ["09:00"]}}


def test_field_board_routes(client, monkeypatch):
    calls = []

    class BoardTask:
        @staticmethod
        def delay(day_iso, duration_minutes):
            calls.append((day_iso, duration_minutes))
            return StartedTask()

    monkeypatch.setattr(routes, "build_field_board_task", BoardTask)
    monkeypatch.setattr(routes, "AsyncResult", FinishedResult)

    response = client.post("/api/field-board", json={"date": "2026-11-07", "duration_minutes": 60})
    assert response.json()["task_id"] == "task-1"
    assert calls == [("2026-11-07", 60)]

    assert client.post("/api/field-board", json={"date": "2026-11-07", "duration_minutes": 500}).status_code == 400

    response = client.get("/api/field-board/task-1")
    assert response.json()["status"] == "SUCCESS"
    assert response.json()["result"]["fields"] == {"F": ["09:00"]}
