"""
Attendance window policy.

Decides whether attendance may be marked at a given instant and how the
attempt is classified:

- Window disabled, or start hour equal to end hour: always open, on time.
- start < end: open when start <= local hour < end.
- start > end (overnight): open when local hour >= start or < end.
- After the nominal close, ``grace_minutes`` still permit the action but
  it is classified late (``on_time=False, within_grace=True``).

Every check normalizes ``now`` into the configured timezone first; the
host clock's timezone never takes part.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from app.core.exceptions import InvalidConfigurationError
from app.utils.datetime_utils import DateTimeHelper

MINUTES_PER_DAY = 24 * 60

__all__ = [
    "AttendanceWindowConfig",
    "TimingClassification",
    "is_window_open",
    "classify_timing",
    "attendance_date_for",
    "describe_window",
]


@dataclass(frozen=True)
class AttendanceWindowConfig:
    """Daily attendance window in a fixed timezone."""

    enabled: bool = True
    start_hour: int = 19
    end_hour: int = 22
    grace_minutes: int = 0
    timezone: str = "Asia/Kolkata"

    def __post_init__(self):
        for key in ("start_hour", "end_hour"):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 23:
                raise InvalidConfigurationError(key, value, f"{key} must be an integer between 0 and 23")
        if isinstance(self.grace_minutes, bool) or not isinstance(self.grace_minutes, int) or self.grace_minutes < 0:
            raise InvalidConfigurationError("grace_minutes", self.grace_minutes, "grace_minutes must be >= 0")
        # Raises InvalidConfigurationError for unknown names
        DateTimeHelper.get_timezone(self.timezone)

    @property
    def spans_full_day(self) -> bool:
        return self.start_hour == self.end_hour

    @property
    def is_overnight(self) -> bool:
        return self.start_hour > self.end_hour


@dataclass(frozen=True)
class TimingClassification:
    """How an attendance attempt relates to the window."""

    on_time: bool
    within_grace: bool
    late_minutes: int = 0

    @property
    def permitted(self) -> bool:
        return self.on_time or self.within_grace


def _hour_in_window(hour: int, start: int, end: int) -> bool:
    if start <= end:
        return start <= hour < end
    return hour >= start or hour < end


def _local_minute_of_day(now: datetime, config: AttendanceWindowConfig) -> float:
    local = DateTimeHelper.to_timezone(now, config.timezone)
    return local.hour * 60 + local.minute + (local.second + local.microsecond / 1e6) / 60


def is_window_open(now: datetime, config: AttendanceWindowConfig) -> bool:
    """True when ``now`` falls inside the nominal window (grace not included)."""
    if not config.enabled or config.spans_full_day:
        return True
    hour = DateTimeHelper.to_timezone(now, config.timezone).hour
    return _hour_in_window(hour, config.start_hour, config.end_hour)


def classify_timing(now: datetime, config: AttendanceWindowConfig) -> TimingClassification:
    """Classify ``now`` as on time, late but within grace, or not permitted."""
    if is_window_open(now, config):
        return TimingClassification(on_time=True, within_grace=False)

    if config.grace_minutes == 0:
        return TimingClassification(on_time=False, within_grace=False)

    close_minute = config.end_hour * 60
    minutes_past_close = (_local_minute_of_day(now, config) - close_minute) % MINUTES_PER_DAY
    if minutes_past_close < config.grace_minutes:
        return TimingClassification(
            on_time=False,
            within_grace=True,
            late_minutes=max(1, math.ceil(minutes_past_close)),
        )
    return TimingClassification(on_time=False, within_grace=False)


def _session_close_after_midnight(config: AttendanceWindowConfig) -> int:
    """Minute of the next local day at which the session closes, 0 if it closes before midnight."""
    close = config.end_hour * 60 + config.grace_minutes
    if config.is_overnight:
        return close
    return max(0, close - MINUTES_PER_DAY)


def attendance_date_for(now: datetime, config: AttendanceWindowConfig) -> date:
    """
    Window-local day an attendance attempt at ``now`` belongs to.

    Hours after midnight that are still covered by the window or its grace
    period belong to the session that opened the previous evening, so a
    student cannot mark twice in one night. This applies to overnight
    windows and to evening windows whose grace runs past midnight.
    """
    local = DateTimeHelper.to_timezone(now, config.timezone)
    if config.enabled and not config.spans_full_day:
        minute = local.hour * 60 + local.minute
        if minute < _session_close_after_midnight(config) and minute < config.start_hour * 60:
            return local.date() - timedelta(days=1)
    return local.date()


def _format_hour(hour: int) -> str:
    suffix = "AM" if hour < 12 else "PM"
    display = hour % 12 or 12
    return f"{display} {suffix}"


def describe_window(config: AttendanceWindowConfig) -> str:
    """Human readable window, e.g. ``7 PM and 10 PM (Asia/Kolkata)``."""
    return f"{_format_hour(config.start_hour)} and {_format_hour(config.end_hour)} ({config.timezone})"
