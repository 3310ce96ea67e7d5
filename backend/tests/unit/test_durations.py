import pytest

from hourlog.utils.durations import format_hours_hms, seconds_to_hours


@pytest.mark.parametrize(
    "hours, expected",
    [
        (0, "0h 0m"),
        (2.5, "2h 30m"),
        (1.0, "1h 0m"),
        (0.01, "36s"),
        (1 / 60, "1m"),
        (1 + 1 / 3600, "1h 0m 1s"),
        (0.5 + 5 / 3600, "30m 5s"),
    ],
)
def test_format_hours_hms(hours, expected):
    assert format_hours_hms(hours) == expected


def test_seconds_to_hours():
    assert seconds_to_hours(5400) == 1.5
