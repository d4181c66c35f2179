"""
Tests for reschedule, the upcoming schedule view and availability warnings.
"""

from datetime import date, datetime

from field_scheduler.models import Match, TimeWindow, Existing, Temporary
from field_scheduler.services.match_ops import (
    reschedule_match, upcoming_matches_by_day, availability_warning, display_name
)
from builders import window, match, declaration

TEAM_NAMES = {"teamA": "Lions U12", "teamB": "Hawks U12"}


def test_reschedule_preserves_duration_and_identity():
    original = match("F", window(14, 0, 15, 30), "m7")
    moved = reschedule_match(original, datetime(2026, 11, 14, 9, 15))
    assert moved.id == "m7"
    assert moved.field_id == "F"
    assert moved.window == TimeWindow(datetime(2026, 11, 14, 9, 15), datetime(2026, 11, 14, 10, 45))
    assert original.window == window(14, 0, 15, 30)


def test_display_names():
    assert display_name(Existing("teamA"), TEAM_NAMES) == "Lions U12"
    assert display_name(Existing("teamZ"), TEAM_NAMES) == "teamZ"
    assert display_name(Temporary("Visitors FC")) == "Visitors FC"


def test_upcoming_matches_grouped_by_day():
    past = match("F", TimeWindow(datetime(2026, 11, 6, 9), datetime(2026, 11, 6, 10)), "old")
    later_today = match("F", window(15, 0, 16, 0), "m2")
    earlier_today = match("G", window(9, 0, 10, 0), "m1")
    next_week = match("F", TimeWindow(datetime(2026, 11, 14, 9), datetime(2026, 11, 14, 10)), "m3")

    grouped = upcoming_matches_by_day([next_week, past, later_today, earlier_today], date(2026, 11, 7))
    assert list(grouped.keys()) == [date(2026, 11, 7), date(2026, 11, 14)]
    assert [m.id for m in grouped[date(2026, 11, 7)]] == ["m1", "m2"]


def test_upcoming_matches_filters():
    lions = match("F", window(9, 0, 10, 0), "m1", home="teamA", away="teamB")
    guests = Match(id="m2", field_id="F", home=Existing("teamB"), away=Temporary("Visitors FC"),
                   window=TimeWindow(datetime(2026, 11, 8, 9), datetime(2026, 11, 8, 10)))
    today = date(2026, 11, 7)

    by_name = upcoming_matches_by_day([lions, guests], today, team_search="lions", team_names=TEAM_NAMES)
    assert [m.id for ms in by_name.values() for m in ms] == ["m1"]

    by_guest = upcoming_matches_by_day([lions, guests], today, team_search="VISITORS", team_names=TEAM_NAMES)
    assert [m.id for ms in by_guest.values() for m in ms] == ["m2"]

    by_day = upcoming_matches_by_day([lions, guests], today, on_day=date(2026, 11, 8))
    assert list(by_day.keys()) == [date(2026, 11, 8)]


def test_availability_warning():
    decls = [declaration("teamA", TimeWindow(datetime(2026, 11, 7), datetime(2026, 11, 8, 23, 59)))]
    assert availability_warning("teamA", date(2026, 11, 8), decls) is None
    warning = availability_warning("teamA", date(2026, 11, 9), decls, team_name="Lions U12")
    assert warning == "Warning: Lions U12 has NOT listed 2026-11-09 as available."
    assert availability_warning("teamB", date(2026, 11, 7), decls) is not None
