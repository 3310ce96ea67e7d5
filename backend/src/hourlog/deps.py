from fastapi import HTTPException, Request

from hourlog.backends.base import TrackerBackend
from hourlog.utils.validators import parse_day


def get_backend(request: Request) -> TrackerBackend:
    backend = getattr(request.app.state, "backend", None)
    if backend is None:
        raise HTTPException(status_code=503, detail="Storage backend not initialized")
    return backend


def valid_day(day: str) -> str:
    try:
        return parse_day(day)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid date {day!r}, expected YYYY-MM-DD")
