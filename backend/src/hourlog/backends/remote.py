from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from hourlog import __version__
from hourlog.core.config import RemoteConfig
from hourlog.core.errors import InitializationError, RemoteQueryError
from hourlog.models.tracking import (
    RANGE_LIMITS,
    DayRecord,
    EntryKind,
    RecordRead,
    Statistics,
    StatsRange,
    TimeEntryRead,
    range_start,
    utcnow,
)
from hourlog.utils.validators import check_hours, parse_day, safe_float

from .base import TrackerBackend, _none, recoverable

logger = logging.getLogger(__name__)

RECORDS = "daily_records"
ENTRIES = "time_entries"

RECORD_COLUMNS = "date,hours,workout_done"
ENTRY_COLUMNS = "id,date,hours,kind,note,created_at"

# Provisioned out-of-band (SQL editor); the client never creates tables.
SCHEMA_SQL = """
CREATE TABLE daily_records (
  date TEXT PRIMARY KEY,
  hours DOUBLE PRECISION NOT NULL DEFAULT 0,
  workout_done BOOLEAN NOT NULL DEFAULT FALSE,
  created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
  updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
);

CREATE TABLE time_entries (
  id BIGSERIAL PRIMARY KEY,
  date TEXT NOT NULL,
  hours DOUBLE PRECISION NOT NULL CHECK (hours >= 0),
  kind TEXT NOT NULL CHECK (kind IN ('manual', 'stopwatch')),
  note TEXT,
  created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
);
CREATE INDEX time_entries_date_idx ON time_entries (date);

ALTER TABLE daily_records ENABLE ROW LEVEL SECURITY;
ALTER TABLE time_entries ENABLE ROW LEVEL SECURITY;
CREATE POLICY "Allow all operations" ON daily_records FOR ALL USING (true);
CREATE POLICY "Allow all operations" ON time_entries FOR ALL USING (true);
"""


def _eq(value: Any) -> str:
    return f"eq.{value}"


def _record_from_row(row: Dict[str, Any]) -> RecordRead:
    return RecordRead(
        date=str(row.get("date") or ""),
        hours=safe_float(row.get("hours")),
        workout_done=bool(row.get("workout_done")),
    )


class RemoteBackend(TrackerBackend):
    """
    Hosted Postgres behind a PostgREST endpoint (e.g. Supabase).

    Each operation is a short series of request/response calls. The derived
    total is refreshed with a read of the workout flag, a sum query and an
    upsert; those steps are not one transaction, so two writers on the same
    date can race. The next recompute of that date repairs the total.
    """

    name = "remote"

    def __init__(
        self,
        config: RemoteConfig,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=f"{config.url.rstrip('/')}/rest/v1",
            headers={
                "apikey": config.key,
                "Authorization": f"Bearer {config.key}",
                "Accept": "application/json",
                "User-Agent": f"Hourlog/{__version__}",
            },
            timeout=timeout,
            transport=transport,
        )

    async def _query(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        headers = {"Prefer": prefer} if prefer else None
        response = await self._client.request(method, f"/{table}", params=params, json=json, headers=headers)
        if response.status_code >= 400:
            raise RemoteQueryError.from_response(response)
        if not response.content:
            return []
        return response.json()

    async def initialize(self) -> "RemoteBackend":
        try:
            await self._query("GET", RECORDS, params={"select": "date", "limit": 1})
        except RemoteQueryError as exc:
            if exc.is_auth_failure:
                raise InitializationError(f"Remote store rejected the access key: {exc}") from exc
            if not exc.is_missing_relation:
                raise InitializationError(f"Remote store check failed: {exc}") from exc
            logger.warning(
                "Tables missing on %s; create them in the SQL editor with:\n%s",
                self.config.url,
                SCHEMA_SQL,
            )
        except httpx.HTTPError as exc:
            raise InitializationError(f"Remote store unreachable at {self.config.url}: {exc}") from exc

        logger.info("Remote store ready (%s, config from %s)", self.config.url, self.config.source)
        return self

    async def close(self) -> None:
        await self._client.aclose()

    # ----------------------------
    # derived total
    # ----------------------------

    async def _sum_hours(self, day: str) -> float:
        rows = await self._query("GET", ENTRIES, params={"select": "hours", "date": _eq(day)})
        return sum(safe_float(row.get("hours")) for row in rows)

    async def _upsert_record(self, day: str, hours: float, workout_done: bool) -> None:
        await self._query(
            "POST",
            RECORDS,
            params={"on_conflict": "date"},
            json={
                "date": day,
                "hours": hours,
                "workout_done": workout_done,
                "updated_at": utcnow().isoformat(),
            },
            prefer="resolution=merge-duplicates,return=minimal",
        )

    @recoverable(float)
    async def recompute_total(self, day: str) -> float:
        day = parse_day(day)
        rows = await self._query("GET", RECORDS, params={"select": "workout_done", "date": _eq(day)})
        workout_done = bool(rows[0].get("workout_done")) if rows else False
        total = await self._sum_hours(day)
        await self._upsert_record(day, total, workout_done)
        return total

    # ----------------------------
    # time entries
    # ----------------------------

    @recoverable(_none)
    async def add_time_entry(
        self, day: str, hours: float, kind: EntryKind | str, note: Optional[str] = None
    ) -> Optional[int]:
        day = parse_day(day)
        rows = await self._query(
            "POST",
            ENTRIES,
            params={"select": "id"},
            json={"date": day, "hours": check_hours(hours), "kind": EntryKind(kind).value, "note": note},
            prefer="return=representation",
        )
        entry_id = int(rows[0]["id"])
        await self.recompute_total(day)
        return entry_id

    @recoverable(list)
    async def get_time_entries(self, day: str) -> List[TimeEntryRead]:
        rows = await self._query(
            "GET",
            ENTRIES,
            params={"select": ENTRY_COLUMNS, "date": _eq(parse_day(day)), "order": "created_at.asc,id.asc"},
        )
        return [TimeEntryRead.model_validate(row) for row in rows]

    @recoverable(bool)
    async def delete_time_entry(self, entry_id: int) -> bool:
        rows = await self._query("GET", ENTRIES, params={"select": "date", "id": _eq(int(entry_id))})
        if not rows:
            logger.warning("Time entry %s not found", entry_id)
            return False
        day = rows[0]["date"]
        await self._query("DELETE", ENTRIES, params={"id": _eq(int(entry_id))})
        await self.recompute_total(day)
        return True

    @recoverable(float)
    async def get_total_hours_for_date(self, day: str) -> float:
        return await self._sum_hours(parse_day(day))

    # ----------------------------
    # daily records
    # ----------------------------

    @recoverable(DayRecord)
    async def get_record(self, day: str) -> DayRecord:
        rows = await self._query("GET", RECORDS, params={"select": "hours,workout_done", "date": _eq(parse_day(day))})
        if not rows:
            return DayRecord()
        return DayRecord(hours=safe_float(rows[0].get("hours")), workout_done=bool(rows[0].get("workout_done")))

    @recoverable(bool)
    async def insert_or_update_record(self, day: str, hours: float, workout_done: bool) -> bool:
        await self._upsert_record(parse_day(day), check_hours(hours), bool(workout_done))
        return True

    @recoverable(bool)
    async def delete_record(self, day: str) -> bool:
        day = parse_day(day)
        await self._query("DELETE", ENTRIES, params={"date": _eq(day)})
        await self._query("DELETE", RECORDS, params={"date": _eq(day)})
        return True

    @recoverable(list)
    async def get_all_records(self) -> List[RecordRead]:
        rows = await self._query("GET", RECORDS, params={"select": RECORD_COLUMNS, "order": "date.desc"})
        return [_record_from_row(row) for row in rows]

    @recoverable(Statistics)
    async def get_statistics(self, range: StatsRange = "all") -> Statistics:
        start = range_start(range)
        params: Dict[str, Any] = {"select": RECORD_COLUMNS, "order": "date.desc"}
        if start is not None:
            params["date"] = f"gte.{start}"
        rows = await self._query("GET", RECORDS, params=params)
        return Statistics.from_rows((_record_from_row(row) for row in rows), limit=RANGE_LIMITS[range])
