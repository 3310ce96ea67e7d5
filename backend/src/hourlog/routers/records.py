from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from hourlog.backends.base import TrackerBackend
from hourlog.deps import get_backend, valid_day
from hourlog.models.tracking import RecordRead

router = APIRouter(prefix="/records", tags=["records"])


@router.get("", response_model=List[RecordRead], summary="All daily records, newest first")
async def list_records(backend: TrackerBackend = Depends(get_backend)):
    return await backend.get_all_records()


@router.delete(
    "/{day}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a day together with all of its time entries",
)
async def delete_record(day: str = Depends(valid_day), backend: TrackerBackend = Depends(get_backend)):
    if not await backend.delete_record(day):
        raise HTTPException(status_code=500, detail=f"Failed to delete record for {day}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
