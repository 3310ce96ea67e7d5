# backend/src/hourlog/models/tracking.py
from datetime import date as _date
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable, List, Literal, Optional

from sqlmodel import Field, SQLModel

StatsRange = Literal["week", "all"]

# how many rows recent_data carries per range
RANGE_LIMITS = {"week": 7, "all": 30}
WEEK_DAYS = 7


def utcnow() -> datetime:
    # timezone-aware; sqlmodel 0.0.48 rejects naive datetimes
    return datetime.now(timezone.utc)


def range_start(stats_range: str, today: Optional[_date] = None) -> Optional[str]:
    """First date (inclusive) covered by ``stats_range``, or None for no filter."""
    if stats_range not in RANGE_LIMITS:
        raise ValueError(f"Unknown statistics range: {stats_range!r}")
    if stats_range == "week":
        today = today or utcnow().date()
        return (today - timedelta(days=WEEK_DAYS)).isoformat()
    return None


class EntryKind(str, Enum):
    manual = "manual"
    stopwatch = "stopwatch"


# ----------------------------
# Tables
# ----------------------------

class DailyRecord(SQLModel, table=True):
    __tablename__ = "daily_records"

    date: str = Field(primary_key=True, max_length=10, description="YYYY-MM-DD")
    # derived: always the sum of time_entries.hours for this date
    hours: float = Field(default=0.0, ge=0)
    workout_done: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class TimeEntry(SQLModel, table=True):
    __tablename__ = "time_entries"
    # ids are never reused after a delete
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    date: str = Field(index=True, max_length=10)
    hours: float = Field(ge=0)
    kind: EntryKind = Field(default=EntryKind.manual)
    note: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, index=True)


# ----------------------------
# Read schemas
# ----------------------------

class DayRecord(SQLModel):
    hours: float = 0.0
    workout_done: bool = False


class RecordRead(SQLModel):
    date: str
    hours: float = 0.0
    workout_done: bool = False


class TimeEntryRead(SQLModel):
    id: int
    date: str
    hours: float
    kind: EntryKind
    note: Optional[str] = None
    created_at: datetime


class Statistics(SQLModel):
    total_days: int = 0
    total_hours: float = 0.0
    avg_hours: float = 0.0
    workout_days: int = 0
    workout_percentage: float = 0.0
    recent_data: List[RecordRead] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        total_days: int,
        total_hours: float,
        workout_days: int,
        recent_data: Iterable[RecordRead] = (),
    ) -> "Statistics":
        total_days = int(total_days or 0)
        total_hours = float(total_hours or 0.0)
        workout_days = int(workout_days or 0)
        return cls(
            total_days=total_days,
            total_hours=total_hours,
            avg_hours=total_hours / total_days if total_days else 0.0,
            workout_days=workout_days,
            workout_percentage=100.0 * workout_days / total_days if total_days else 0.0,
            recent_data=list(recent_data),
        )

    @classmethod
    def from_rows(cls, rows: Iterable[RecordRead], limit: int) -> "Statistics":
        """
        Aggregate over ``rows`` in any order.
        recent_data keeps the newest ``limit`` rows, oldest first for charting.
        """
        newest_first = sorted(rows, key=lambda r: r.date, reverse=True)
        return cls.build(
            total_days=len(newest_first),
            total_hours=sum(r.hours for r in newest_first),
            workout_days=sum(1 for r in newest_first if r.workout_done),
            recent_data=reversed(newest_first[:limit]),
        )
