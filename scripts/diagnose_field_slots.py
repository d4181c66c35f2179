"""
Diagnostic script to explain the open slots on one field for one day.

Usage: python scripts/diagnose_field_slots.py <field_id> <YYYY-MM-DD> [duration_minutes]
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date, datetime, time

from field_scheduler.core.config import DEFAULT_MATCH_DURATION_MINUTES
from field_scheduler.core.logging_config import setup_logging
from field_scheduler.services.supabase_reader import SnapshotReader
from field_scheduler.services.slot_enumerator import enumerate_slots, is_club_blackout_day


def main():
    if len(sys.argv) < 3:
        print(__doc__)
        return 1

    setup_logging()
    field_id = sys.argv[1]
    day = date.fromisoformat(sys.argv[2])
    duration = int(sys.argv[3]) if len(sys.argv) > 3 else DEFAULT_MATCH_DURATION_MINUTES

    print("=" * 80)
    print(f"FIELD SLOT DIAGNOSTIC: {field_id} on {day:%A, %b %d %Y} ({duration} min)")
    print("=" * 80)

    snapshot = SnapshotReader().load_snapshot()
    day_start = datetime.combine(day, time.min)

    permits = [p for p in snapshot.permits if p.field_id == field_id and p.window.start.date() <= day <= p.window.end.date()]
    print(f"\nPermits touching the day: {len(permits)}")
    for permit in sorted(permits, key=lambda p: p.window.start):
        print(f"  - {permit.id}: {permit.window}")
    if not permits:
        print("  ⚠️  No permit on this field for the day: no slots possible")

    matches = [m for m in snapshot.matches if m.field_id == field_id and m.window.start.date() == day]
    print(f"\nMatches already booked: {len(matches)}")
    for match in sorted(matches, key=lambda m: m.window.start):
        print(f"  - {match}")

    club_blackouts = [b for b in snapshot.blackouts if b.is_club_wide and b.window.contains_instant(day_start)]
    if is_club_blackout_day(day, snapshot.blackouts):
        print("\n❌ Club-wide blackout covers this day:")
        for blackout in club_blackouts:
            print(f"  - {blackout.id}: {blackout.window} ({blackout.reason})")

    slots = enumerate_slots(field_id, day, duration, snapshot.permits, snapshot.matches, snapshot.blackouts)
    print(f"\nOpen slots: {len(slots)}")
    print("  " + (", ".join(slots) if slots else "none"))
    print("=" * 80)
    return 0


if __name__ == "__main__":
    sys.exit(main())
