from datetime import date

import pytest

from app.core.exceptions import InvalidConfigurationError
from app.services.attendance.attendance_window_policy import (
    AttendanceWindowConfig,
    attendance_date_for,
    classify_timing,
    describe_window,
    is_window_open,
)

from tests.conftest import HOSTEL_TZ, local_time, utc

EVENING = AttendanceWindowConfig(start_hour=19, end_hour=22, grace_minutes=5, timezone=HOSTEL_TZ)
OVERNIGHT = AttendanceWindowConfig(start_hour=22, end_hour=6, grace_minutes=10, timezone=HOSTEL_TZ)


@pytest.mark.parametrize(
    "hour,minute,expected",
    [
        (18, 59, False),
        (19, 0, True),
        (21, 59, True),
        (22, 0, False),
        (3, 0, False),
    ],
)
def test_daytime_window_boundaries(hour, minute, expected):
    assert is_window_open(local_time(2026, 3, 10, hour, minute), EVENING) is expected


@pytest.mark.parametrize(
    "hour,expected",
    [(21, False), (22, True), (23, True), (0, True), (5, True), (6, False), (12, False)],
)
def test_overnight_window_wraps_midnight(hour, expected):
    assert is_window_open(local_time(2026, 3, 10, hour), OVERNIGHT) is expected


def test_window_is_evaluated_in_configured_timezone():
    # 14:30 UTC is 20:00 in Kolkata but 14:30 in London
    at = utc(2026, 3, 10, 14, 30)
    assert is_window_open(at, EVENING)
    assert not is_window_open(at, AttendanceWindowConfig(start_hour=19, end_hour=22, timezone="Europe/London"))


def test_naive_timestamps_are_treated_as_utc():
    naive = utc(2026, 3, 10, 14, 30).replace(tzinfo=None)
    assert is_window_open(naive, EVENING)


def test_disabled_or_full_day_window_is_always_open():
    at = local_time(2026, 3, 10, 4)
    assert is_window_open(at, AttendanceWindowConfig(enabled=False, timezone=HOSTEL_TZ))
    assert is_window_open(at, AttendanceWindowConfig(start_hour=8, end_hour=8, timezone=HOSTEL_TZ))
    assert classify_timing(at, AttendanceWindowConfig(enabled=False, timezone=HOSTEL_TZ)).on_time


def test_on_time_inside_window():
    timing = classify_timing(local_time(2026, 3, 10, 20, 15), EVENING)
    assert timing.on_time
    assert timing.permitted
    assert timing.late_minutes == 0


def test_grace_period_permits_but_marks_late():
    timing = classify_timing(local_time(2026, 3, 10, 22, 3), EVENING)
    assert not timing.on_time
    assert timing.within_grace
    assert timing.permitted
    assert timing.late_minutes == 3


def test_first_minute_after_close_is_one_minute_late():
    timing = classify_timing(local_time(2026, 3, 10, 22, 0), EVENING)
    assert timing.within_grace
    assert timing.late_minutes == 1


def test_after_grace_is_not_permitted():
    timing = classify_timing(local_time(2026, 3, 10, 22, 5), EVENING)
    assert not timing.permitted


def test_before_opening_is_not_permitted_even_with_grace():
    assert not classify_timing(local_time(2026, 3, 10, 18, 58), EVENING).permitted


def test_no_grace_means_closed_at_end_hour():
    strict = AttendanceWindowConfig(start_hour=19, end_hour=22, grace_minutes=0, timezone=HOSTEL_TZ)
    assert not classify_timing(local_time(2026, 3, 10, 22, 0), strict).permitted


def test_overnight_grace_after_morning_close():
    timing = classify_timing(local_time(2026, 3, 11, 6, 7), OVERNIGHT)
    assert timing.within_grace
    assert timing.late_minutes == 7


def test_overnight_session_belongs_to_the_evening_it_opened():
    assert attendance_date_for(local_time(2026, 3, 10, 23), OVERNIGHT) == date(2026, 3, 10)
    assert attendance_date_for(local_time(2026, 3, 11, 2), OVERNIGHT) == date(2026, 3, 10)
    assert attendance_date_for(local_time(2026, 3, 11, 6, 5), OVERNIGHT) == date(2026, 3, 10)
    assert attendance_date_for(local_time(2026, 3, 11, 12), OVERNIGHT) == date(2026, 3, 11)


def test_grace_past_midnight_stays_in_the_evening_session():
    late_evening = AttendanceWindowConfig(start_hour=21, end_hour=23, grace_minutes=90, timezone=HOSTEL_TZ)

    timing = classify_timing(local_time(2026, 3, 11, 0, 20), late_evening)
    assert timing.within_grace
    assert timing.late_minutes == 80
    assert attendance_date_for(local_time(2026, 3, 11, 0, 20), late_evening) == date(2026, 3, 10)
    # Grace ends at 00:30; later that morning is a new day
    assert attendance_date_for(local_time(2026, 3, 11, 0, 30), late_evening) == date(2026, 3, 11)
    assert attendance_date_for(local_time(2026, 3, 11, 22), late_evening) == date(2026, 3, 11)


def test_grace_before_midnight_never_shifts_the_date():
    assert attendance_date_for(local_time(2026, 3, 11, 0, 1), EVENING) == date(2026, 3, 11)


def test_attendance_date_uses_local_calendar_day():
    # 20:00 UTC on the 10th is 01:30 on the 11th in Kolkata
    assert attendance_date_for(utc(2026, 3, 10, 20), EVENING) == date(2026, 3, 11)


def test_describe_window():
    assert describe_window(EVENING) == "7 PM and 10 PM (Asia/Kolkata)"
    assert describe_window(AttendanceWindowConfig(start_hour=0, end_hour=12)) == "12 AM and 12 PM (Asia/Kolkata)"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"start_hour": 24},
        {"end_hour": -1},
        {"grace_minutes": -5},
        {"timezone": "Mars/Olympus_Mons"},
        {"start_hour": 19.5},
    ],
)
def test_invalid_window_configuration(kwargs):
    with pytest.raises(InvalidConfigurationError):
        AttendanceWindowConfig(**kwargs)
