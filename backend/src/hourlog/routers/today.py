# backend/src/hourlog/routers/today.py
from __future__ import annotations

import asyncio
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from hourlog.backends.base import TrackerBackend
from hourlog.deps import get_backend, valid_day
from hourlog.models.tracking import EntryKind, TimeEntryRead
from hourlog.utils.durations import format_hours_hms, seconds_to_hours

router = APIRouter(prefix="/today", tags=["today"])

MANUAL_NOTE = "Manual time entry"
STOPWATCH_NOTE = "Stopwatch session"

# ----------------------------
# Schemas
# ----------------------------

class ManualEntryIn(BaseModel):
    hours: float = Field(gt=0)
    note: Optional[str] = None


class StopwatchIn(BaseModel):
    elapsed_seconds: float = Field(gt=0)
    note: Optional[str] = None


class WorkoutIn(BaseModel):
    workout_done: bool


class BulkDeleteIn(BaseModel):
    ids: List[int] = Field(min_length=1)


class DayView(BaseModel):
    date: str
    total_hours: float
    total_display: str
    workout_done: bool
    entries: List[TimeEntryRead]


class EntryCreated(BaseModel):
    id: int
    hours_added: float
    total_hours: float
    total_display: str


class BulkDeleteResult(BaseModel):
    requested: int
    deleted: int
    total_hours: float


async def _add_entry(backend: TrackerBackend, day: str, hours: float, kind: EntryKind, note: str) -> EntryCreated:
    entry_id = await backend.add_time_entry(day, hours, kind, note)
    if entry_id is None:
        raise HTTPException(status_code=500, detail=f"Failed to save {kind.value} time")
    total = await backend.get_total_hours_for_date(day)
    return EntryCreated(id=entry_id, hours_added=hours, total_hours=total, total_display=format_hours_hms(total))


# ----------------------------
# Endpoints
# ----------------------------

@router.get("/{day}", response_model=DayView)
async def get_day(day: str = Depends(valid_day), backend: TrackerBackend = Depends(get_backend)):
    record = await backend.get_record(day)
    total = await backend.get_total_hours_for_date(day)
    entries = await backend.get_time_entries(day)
    return DayView(
        date=day,
        total_hours=total,
        total_display=format_hours_hms(total),
        workout_done=record.workout_done,
        entries=entries,
    )


@router.post("/{day}/entries", response_model=EntryCreated, status_code=status.HTTP_201_CREATED)
async def add_manual_hours(
    payload: ManualEntryIn,
    day: str = Depends(valid_day),
    backend: TrackerBackend = Depends(get_backend),
):
    return await _add_entry(backend, day, payload.hours, EntryKind.manual, payload.note or MANUAL_NOTE)


@router.post("/{day}/stopwatch", response_model=EntryCreated, status_code=status.HTTP_201_CREATED)
async def add_stopwatch_session(
    payload: StopwatchIn,
    day: str = Depends(valid_day),
    backend: TrackerBackend = Depends(get_backend),
):
    hours = seconds_to_hours(payload.elapsed_seconds)
    return await _add_entry(backend, day, hours, EntryKind.stopwatch, payload.note or STOPWATCH_NOTE)


@router.delete("/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(entry_id: int, backend: TrackerBackend = Depends(get_backend)):
    if not await backend.delete_time_entry(entry_id):
        raise HTTPException(status_code=404, detail=f"Time entry {entry_id} not deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{day}/entries/bulk-delete", response_model=BulkDeleteResult)
async def delete_entries(
    payload: BulkDeleteIn,
    day: str = Depends(valid_day),
    backend: TrackerBackend = Depends(get_backend),
):
    """
    Delete several entries at once. The deletes run concurrently; each one
    recomputes its date from the current entry set, so the last to finish
    leaves the correct total. Ids that do not belong to {day} are skipped.
    """
    on_day = {entry.id for entry in await backend.get_time_entries(day)}
    results = await asyncio.gather(
        *(backend.delete_time_entry(entry_id) for entry_id in payload.ids if entry_id in on_day)
    )
    deleted = sum(1 for ok in results if ok)
    if deleted == 0:
        raise HTTPException(status_code=500, detail="Failed to delete entries")
    total = await backend.get_total_hours_for_date(day)
    return BulkDeleteResult(requested=len(payload.ids), deleted=deleted, total_hours=total)


@router.put("/{day}/workout", response_model=DayView)
async def save_workout(
    payload: WorkoutIn,
    day: str = Depends(valid_day),
    backend: TrackerBackend = Depends(get_backend),
):
    # never an arbitrary hours value: always the freshly summed total
    total = await backend.get_total_hours_for_date(day)
    if not await backend.insert_or_update_record(day, total, payload.workout_done):
        raise HTTPException(status_code=500, detail="Failed to save data")
    return await get_day(day=day, backend=backend)
