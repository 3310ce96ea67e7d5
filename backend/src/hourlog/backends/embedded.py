from __future__ import annotations

import logging
import sqlite3
from typing import List, Optional

from sqlalchemy import Integer, cast
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, func, select

from hourlog.core.database import create_snapshot_engine, export_snapshot, init_db
from hourlog.core.errors import InitializationError
from hourlog.core.storage import SnapshotStore
from hourlog.models.tracking import (
    RANGE_LIMITS,
    DailyRecord,
    DayRecord,
    EntryKind,
    RecordRead,
    Statistics,
    StatsRange,
    TimeEntry,
    TimeEntryRead,
    range_start,
    utcnow,
)
from hourlog.utils.validators import check_hours, parse_day

from .base import TrackerBackend, _none, recoverable

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "time_tracker_db"


class EmbeddedBackend(TrackerBackend):
    """
    In-process SQLite store living in memory.

    Every mutation ends with a full snapshot of the database written to one
    slot of a :class:`SnapshotStore`; :meth:`initialize` reloads that slot.
    Nothing suspends, so concurrent callers are serialized by the event loop.
    """

    name = "embedded"

    def __init__(self, store: SnapshotStore, slot: str = DEFAULT_SLOT, echo: bool = False):
        self.store = store
        self.slot = slot
        self.echo = echo
        self.engine: Optional[Engine] = None

    async def initialize(self) -> "EmbeddedBackend":
        try:
            snapshot = self.store.read(self.slot)
        except OSError as exc:
            raise InitializationError(f"Cannot read snapshot slot {self.slot!r}: {exc}") from exc

        try:
            engine = create_snapshot_engine(snapshot, echo=self.echo)
            # also makes sure both tables exist in an older snapshot
            init_db(engine)
        except (sqlite3.DatabaseError, SQLAlchemyError) as exc:
            raise InitializationError(f"Snapshot in slot {self.slot!r} is not a usable database: {exc}") from exc

        self.engine = engine
        logger.info(
            "Embedded store ready (slot=%s, restored=%s)", self.slot, snapshot is not None
        )
        return self

    async def close(self) -> None:
        if self.engine is None:
            return
        self._persist()
        self.engine.dispose()
        self.engine = None

    def _session(self) -> Session:
        if self.engine is None:
            raise InitializationError("Embedded backend used before initialize()")
        return Session(self.engine)

    def _persist(self) -> None:
        try:
            self.store.write(self.slot, export_snapshot(self.engine))
        except (OSError, sqlite3.Error) as exc:
            # in-memory state stays authoritative for this session
            logger.error("Failed to save database snapshot to slot %r: %s", self.slot, exc)

    # ----------------------------
    # derived total
    # ----------------------------

    @staticmethod
    def _sum_hours(session: Session, day: str) -> float:
        stmt = select(func.coalesce(func.sum(TimeEntry.hours), 0.0)).where(TimeEntry.date == day)
        return float(session.exec(stmt).one() or 0.0)

    def _recompute(self, session: Session, day: str) -> float:
        total = self._sum_hours(session, day)
        record = session.get(DailyRecord, day)
        if record is None:
            record = DailyRecord(date=day, workout_done=False)
        record.hours = total
        record.updated_at = utcnow()
        session.add(record)
        return total

    @recoverable(float)
    async def recompute_total(self, day: str) -> float:
        day = parse_day(day)
        with self._session() as session:
            total = self._recompute(session, day)
            session.commit()
        self._persist()
        return total

    # ----------------------------
    # time entries
    # ----------------------------

    @recoverable(_none)
    async def add_time_entry(
        self, day: str, hours: float, kind: EntryKind | str, note: Optional[str] = None
    ) -> Optional[int]:
        entry = TimeEntry(date=parse_day(day), hours=check_hours(hours), kind=EntryKind(kind), note=note)
        with self._session() as session:
            session.add(entry)
            session.flush()
            entry_id = entry.id
            self._recompute(session, entry.date)
            session.commit()
        self._persist()
        return entry_id

    @recoverable(list)
    async def get_time_entries(self, day: str) -> List[TimeEntryRead]:
        stmt = (
            select(TimeEntry)
            .where(TimeEntry.date == parse_day(day))
            .order_by(TimeEntry.created_at, TimeEntry.id)
        )
        with self._session() as session:
            return [TimeEntryRead.model_validate(row) for row in session.exec(stmt).all()]

    @recoverable(bool)
    async def delete_time_entry(self, entry_id: int) -> bool:
        with self._session() as session:
            entry = session.get(TimeEntry, entry_id)
            if entry is None:
                logger.warning("Time entry %s not found", entry_id)
                return False
            # the date is needed for the recompute after the row is gone
            day = entry.date
            session.delete(entry)
            session.flush()
            self._recompute(session, day)
            session.commit()
        self._persist()
        return True

    @recoverable(float)
    async def get_total_hours_for_date(self, day: str) -> float:
        with self._session() as session:
            return self._sum_hours(session, parse_day(day))

    # ----------------------------
    # daily records
    # ----------------------------

    @recoverable(DayRecord)
    async def get_record(self, day: str) -> DayRecord:
        with self._session() as session:
            record = session.get(DailyRecord, parse_day(day))
            if record is None:
                return DayRecord()
            return DayRecord(hours=record.hours, workout_done=record.workout_done)

    @recoverable(bool)
    async def insert_or_update_record(self, day: str, hours: float, workout_done: bool) -> bool:
        day = parse_day(day)
        hours = check_hours(hours)
        with self._session() as session:
            record = session.get(DailyRecord, day)
            if record is None:
                record = DailyRecord(date=day)
            record.hours = hours
            record.workout_done = bool(workout_done)
            record.updated_at = utcnow()
            session.add(record)
            session.commit()
        self._persist()
        return True

    @recoverable(bool)
    async def delete_record(self, day: str) -> bool:
        day = parse_day(day)
        with self._session() as session:
            for entry in session.exec(select(TimeEntry).where(TimeEntry.date == day)).all():
                session.delete(entry)
            record = session.get(DailyRecord, day)
            if record is not None:
                session.delete(record)
            session.commit()
        self._persist()
        return True

    @recoverable(list)
    async def get_all_records(self) -> List[RecordRead]:
        stmt = select(DailyRecord).order_by(DailyRecord.date.desc())
        with self._session() as session:
            return [RecordRead.model_validate(row) for row in session.exec(stmt).all()]

    @recoverable(Statistics)
    async def get_statistics(self, range: StatsRange = "all") -> Statistics:
        start = range_start(range)
        limit = RANGE_LIMITS[range]

        totals = select(
            func.count(DailyRecord.date),
            func.coalesce(func.sum(DailyRecord.hours), 0.0),
            func.coalesce(func.sum(cast(DailyRecord.workout_done, Integer)), 0),
        )
        recent = select(DailyRecord).order_by(DailyRecord.date.desc()).limit(limit)
        if start is not None:
            totals = totals.where(DailyRecord.date >= start)
            recent = recent.where(DailyRecord.date >= start)

        with self._session() as session:
            total_days, total_hours, workout_days = session.exec(totals).one()
            rows = session.exec(recent).all()
            recent_data = [RecordRead.model_validate(row) for row in reversed(rows)]

        return Statistics.build(total_days, total_hours, workout_days, recent_data)
