from fastapi import APIRouter, Depends, Query

from hourlog.backends.base import TrackerBackend
from hourlog.deps import get_backend
from hourlog.models.tracking import Statistics, StatsRange

router = APIRouter(prefix="/statistics", tags=["statistics"])


@router.get("", response_model=Statistics)
async def get_statistics(
    range: StatsRange = Query(default="all", description="'week' = last 7 days, 'all' = everything"),
    backend: TrackerBackend = Depends(get_backend),
):
    return await backend.get_statistics(range)
