"""
Supabase snapshot reader for the Club Field Scheduler.
Materializes the permit, match, blackout and availability stores into the
immutable records the scheduling core consumes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from supabase import create_client, Client

from field_scheduler.models import (
    TimeWindow, Existing, Temporary, Participant, Permit, Blackout, Match,
    AvailabilityDeclaration
)
from field_scheduler.core.config import (
    SUPABASE_URL, SUPABASE_KEY, CLUB_TIMEZONE, CLUB_WIDE_SCOPE, TEMPORARY_ID,
    TABLE_PERMITS, TABLE_MATCHES, TABLE_BLACKOUTS, TABLE_AVAILABILITY, TABLE_TEAMS,
    TABLE_FIELDS
)
from field_scheduler.core.exceptions import SchedulingError
from field_scheduler.core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SchedulerSnapshot:
    permits: Tuple[Permit, ...] = field(default_factory=tuple)
    matches: Tuple[Match, ...] = field(default_factory=tuple)
    blackouts: Tuple[Blackout, ...] = field(default_factory=tuple)


def parse_instant(value: Any, tz: ZoneInfo) -> datetime:
    """
    Parse a stored instant into a naive club-local datetime.
    Aware values are converted to the club timezone first.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise SchedulingError(f"Could not parse instant: {value}")
    else:
        raise SchedulingError(f"Missing instant: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz).replace(tzinfo=None)
    return parsed


def parse_participant(entity_id: Optional[str], name: Optional[str] = None) -> Optional[Participant]:
    """
    Map a stored id/name pair onto the Existing/Temporary union.
    The TEMP sentinel (or a bare name) marks an entity with no store record.
    """
    if entity_id and entity_id != TEMPORARY_ID:
        return Existing(str(entity_id))
    if name:
        return Temporary(name)
    if entity_id == TEMPORARY_ID:
        return Temporary("")
    return None


class SnapshotReader:
    def __init__(self, client: Optional[Client] = None, timezone: str = CLUB_TIMEZONE):
        self.client: Client = client or create_client(SUPABASE_URL, SUPABASE_KEY)
        self.tz = ZoneInfo(timezone)

    def _fetch(self, table: str, **filters) -> List[Dict]:
        query = self.client.table(table).select('*')
        for column, value in filters.items():
            query = query.eq(column, value)
        response = query.execute()
        return response.data or []

    def _window(self, row: Dict) -> TimeWindow:
        return TimeWindow(parse_instant(row.get('start'), self.tz),
                          parse_instant(row.get('end'), self.tz))

    def _parse_rows(self, table: str, rows: List[Dict], parser) -> List:
        records = []
        for row in rows:
            try:
                record = parser(row)
            except (SchedulingError, KeyError) as e:
                logger.warning(f"Skipping malformed {table} row {row.get('id')}: {e}")
                continue
            if record is not None:
                records.append(record)
        return records

    def _parse_permit(self, row: Dict) -> Permit:
        return Permit(id=str(row['id']), field_id=str(row['field_id']), window=self._window(row))

    def _parse_blackout(self, row: Dict) -> Blackout:
        scope = row.get('scope') or row.get('team_id') or CLUB_WIDE_SCOPE
        return Blackout(id=str(row['id']), scope=str(scope), window=self._window(row),
                        reason=row.get('reason') or "")

    def _parse_match(self, row: Dict) -> Optional[Match]:
        home = parse_participant(row.get('home_team_id'), row.get('home_team_name'))
        away = parse_participant(row.get('away_team_id'), row.get('away_team_name'))
        if home is None or away is None:
            raise SchedulingError("match is missing a home or away side")
        return Match(
            id=str(row['id']),
            field_id=str(row['field_id']),
            home=home,
            away=away,
            window=self._window(row),
            complex=parse_participant(row.get('complex_id'), row.get('complex_name')),
            field_name=row.get('field_name') or ""
        )

    def _parse_declaration(self, row: Dict) -> AvailabilityDeclaration:
        return AvailabilityDeclaration(id=str(row['id']), team_id=str(row['team_id']),
                                       window=self._window(row), note=row.get('note') or "")

    def load_permits(self, field_id: Optional[str] = None) -> List[Permit]:
        filters = {'field_id': field_id} if field_id else {}
        permits = self._parse_rows(TABLE_PERMITS, self._fetch(TABLE_PERMITS, **filters), self._parse_permit)
        logger.info(f"Loaded {len(permits)} permits from Supabase")
        return permits

    def load_matches(self) -> List[Match]:
        matches = self._parse_rows(TABLE_MATCHES, self._fetch(TABLE_MATCHES), self._parse_match)
        logger.info(f"Loaded {len(matches)} matches from Supabase")
        return matches

    def load_team_matches(self, team_id: str) -> List[Match]:
        """The team's matches as home or away side; may contain duplicates."""
        rows = self._fetch(TABLE_MATCHES, home_team_id=team_id)
        rows += self._fetch(TABLE_MATCHES, away_team_id=team_id)
        return self._parse_rows(TABLE_MATCHES, rows, self._parse_match)

    def load_blackouts(self) -> List[Blackout]:
        blackouts = self._parse_rows(TABLE_BLACKOUTS, self._fetch(TABLE_BLACKOUTS), self._parse_blackout)
        logger.info(f"Loaded {len(blackouts)} blackouts from Supabase")
        return blackouts

    def load_availability(self, team_id: str) -> List[AvailabilityDeclaration]:
        rows = self._fetch(TABLE_AVAILABILITY, team_id=team_id)
        return self._parse_rows(TABLE_AVAILABILITY, rows, self._parse_declaration)

    def load_team_names(self) -> Dict[str, str]:
        return {str(row['id']): row.get('name') or str(row['id']) for row in self._fetch(TABLE_TEAMS)}

    def load_field_ids(self) -> List[str]:
        return [str(row['id']) for row in self._fetch(TABLE_FIELDS)]

    def team_exists(self, team_id: str) -> bool:
        return bool(self._fetch(TABLE_TEAMS, id=team_id))

    def load_snapshot(self) -> SchedulerSnapshot:
        """Fresh permits, matches and blackouts for one enumeration or validation."""
        return SchedulerSnapshot(
            permits=tuple(self.load_permits()),
            matches=tuple(self.load_matches()),
            blackouts=tuple(self.load_blackouts())
        )
