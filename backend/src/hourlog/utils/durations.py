import math


def seconds_to_hours(seconds: float) -> float:
    return float(seconds) / 3600.0


def format_hours_hms(hours: float) -> str:
    """
    Render decimal hours as e.g. ``2h 30m`` or ``45s``.
    Leading zero units are dropped; zero itself reads ``0h 0m``.
    """
    total_seconds = int(math.floor(float(hours) * 3600 + 0.5))
    h, rem = divmod(total_seconds, 3600)
    m, s = divmod(rem, 60)

    if h == 0 and m == 0 and s == 0:
        return "0h 0m"

    parts = []
    if h > 0:
        parts.append(f"{h}h")
    if m > 0 or h > 0:
        parts.append(f"{m}m")
    if s > 0 or (h == 0 and m == 0):
        parts.append(f"{s}s")
    return " ".join(parts)
