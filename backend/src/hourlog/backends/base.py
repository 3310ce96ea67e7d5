from __future__ import annotations

import functools
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from hourlog.core.errors import InitializationError
from hourlog.models.tracking import DayRecord, EntryKind, RecordRead, Statistics, StatsRange, TimeEntryRead

logger = logging.getLogger(__name__)


def recoverable(default: Callable[[], object]):
    """
    Turn any failure inside a backend operation into a logged, typed default.

    Initialization errors are fatal and still propagate.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except InitializationError:
                raise
            except Exception:
                logger.exception("[%s] %s failed", self.name, func.__name__)
                return default()

        return wrapper

    return decorator


def _none() -> None:
    return None


class TrackerBackend(ABC):
    """
    Operation set every storage backend implements.

    Callers only ever see this interface. Mutations that touch time entries
    recompute the day's total before returning, so for every stored record
    ``hours == sum(entry.hours for its date)``.
    """

    name = "abstract"

    @abstractmethod
    async def initialize(self) -> "TrackerBackend":
        ...

    async def close(self) -> None:
        return None

    # daily records
    @abstractmethod
    async def get_record(self, day: str) -> DayRecord:
        ...

    @abstractmethod
    async def insert_or_update_record(self, day: str, hours: float, workout_done: bool) -> bool:
        ...

    @abstractmethod
    async def delete_record(self, day: str) -> bool:
        ...

    @abstractmethod
    async def get_all_records(self) -> List[RecordRead]:
        ...

    @abstractmethod
    async def get_statistics(self, range: StatsRange = "all") -> Statistics:
        ...

    # time entries
    @abstractmethod
    async def add_time_entry(
        self, day: str, hours: float, kind: EntryKind | str, note: Optional[str] = None
    ) -> Optional[int]:
        ...

    @abstractmethod
    async def get_time_entries(self, day: str) -> List[TimeEntryRead]:
        ...

    @abstractmethod
    async def delete_time_entry(self, entry_id: int) -> bool:
        ...

    @abstractmethod
    async def get_total_hours_for_date(self, day: str) -> float:
        ...

    @abstractmethod
    async def recompute_total(self, day: str) -> float:
        """Resync the day's record hours from its entries; keeps workout_done."""
