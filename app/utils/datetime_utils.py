"""
Date and time utility classes for the hostel service

All comparisons in the service are made on timezone-aware values. Naive
datetimes (for example values read back from SQLite) are treated as UTC.
"""

from datetime import datetime, date, time, timedelta
from typing import Optional

import pytz
from dateutil import parser

from app.core.exceptions import InvalidConfigurationError


class DateTimeHelper:
    """Timezone-aware date and time helpers"""

    @staticmethod
    def get_timezone(timezone: str):
        """Resolve an IANA timezone name"""
        try:
            return pytz.timezone(timezone)
        except pytz.UnknownTimeZoneError as e:
            raise InvalidConfigurationError(
                "timezone", timezone, f"Unknown timezone '{timezone}'"
            ) from e

    @staticmethod
    def utcnow() -> datetime:
        """Current time as an aware UTC datetime"""
        return datetime.now(pytz.UTC)

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """Return ``dt`` as an aware UTC datetime; naive values are assumed to be UTC"""
        if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
            return pytz.UTC.localize(dt)
        return dt.astimezone(pytz.UTC)

    @staticmethod
    def to_timezone(dt: datetime, timezone: str) -> datetime:
        """Convert ``dt`` into the named timezone"""
        return DateTimeHelper.ensure_utc(dt).astimezone(DateTimeHelper.get_timezone(timezone))

    @staticmethod
    def local_date(dt: datetime, timezone: str) -> date:
        """Calendar date of ``dt`` as seen in the named timezone"""
        return DateTimeHelper.to_timezone(dt, timezone).date()

    @staticmethod
    def start_of_day(day: date, timezone: str) -> datetime:
        """Local midnight of ``day`` in the named timezone, returned in UTC"""
        tz_obj = DateTimeHelper.get_timezone(timezone)
        local_midnight = tz_obj.localize(datetime.combine(day, time.min))
        return local_midnight.astimezone(pytz.UTC)

    @staticmethod
    def parse_datetime(dt_string: str) -> datetime:
        """Parse an ISO-like datetime string into an aware UTC datetime"""
        try:
            parsed_dt = parser.parse(dt_string)
        except (ValueError, TypeError, OverflowError) as e:
            raise ValueError(f"Unable to parse datetime string: {dt_string}") from e
        return DateTimeHelper.ensure_utc(parsed_dt)

    @staticmethod
    def humanize_late_duration(delta: timedelta) -> str:
        """Render a lateness duration the way guards read it, e.g. ``2h 5m late``"""
        total_minutes = max(0, int(delta.total_seconds() // 60))
        hours, minutes = divmod(total_minutes, 60)
        if hours > 0:
            return f"{hours}h {minutes}m late"
        return f"{minutes}m late"


class DateRangeCalculator:
    """Date range calculations"""

    @staticmethod
    def duration_in_days(start: datetime, end: datetime) -> float:
        """Length of a datetime interval in (fractional) days"""
        delta = DateTimeHelper.ensure_utc(end) - DateTimeHelper.ensure_utc(start)
        return delta.total_seconds() / 86400


def coerce_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """``ensure_utc`` that lets None through"""
    return None if dt is None else DateTimeHelper.ensure_utc(dt)


__all__ = [
    "DateTimeHelper",
    "DateRangeCalculator",
    "coerce_utc",
]
