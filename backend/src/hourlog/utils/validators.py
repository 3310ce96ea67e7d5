# backend/src/hourlog/utils/validators.py
import math
from datetime import date, datetime


def safe_float(x) -> float:
    try:
        return float(x)
    except Exception:
        return 0.0


def parse_day(value) -> str:
    """Normalize to ISO ``YYYY-MM-DD``; raise ValueError otherwise."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value or "").strip()
    if len(text) != 10:
        raise ValueError(f"Not an ISO date (YYYY-MM-DD): {value!r}")
    return date.fromisoformat(text).isoformat()


def check_hours(value) -> float:
    hours = float(value)
    if not math.isfinite(hours) or hours < 0:
        raise ValueError(f"Hours must be a finite, non-negative number: {value!r}")
    return hours
