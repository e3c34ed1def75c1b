import pytest
from datetime import datetime, timedelta, timezone

from labbooker.utils.timewindow import (
    TimeWindow,
    duration_hours,
    expand,
    overlaps,
    to_naive_utc,
)

BASE = datetime(2030, 1, 7, 10, 0)


def window(start_hour, end_hour):
    return TimeWindow(BASE.replace(hour=start_hour), BASE.replace(hour=end_hour))


def test_duration_hours():
    assert duration_hours(BASE, BASE + timedelta(hours=4)) == 4
    assert duration_hours(BASE, BASE + timedelta(minutes=90)) == 1.5


@pytest.mark.parametrize("delta", [timedelta(0), timedelta(hours=-1)])
def test_duration_hours_rejects_empty_window(delta):
    with pytest.raises(ValueError):
        duration_hours(BASE, BASE + delta)


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (window(10, 14), window(12, 16), True),
        (window(10, 14), window(11, 12), True),
        (window(10, 14), window(14, 16), False),
        (window(10, 14), window(15, 16), False),
        (window(10, 14), window(8, 10), False),
    ],
)
def test_overlaps_is_symmetric(a, b, expected):
    assert overlaps(a, b) is expected
    assert overlaps(b, a) is expected


def test_window_overlaps_itself():
    assert overlaps(window(10, 14), window(10, 14))


def test_expand():
    widened = expand(window(10, 14), 2, 1)
    assert widened == window(8, 15)
    assert expand(window(10, 14), timedelta(minutes=30), 0).start == BASE.replace(hour=9, minute=30)


def test_to_naive_utc_converts_aware_values():
    aware = datetime(2030, 1, 7, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    assert to_naive_utc(aware) == datetime(2030, 1, 7, 10, 0)
    assert to_naive_utc(BASE) is BASE
