from datetime import date, datetime, timedelta

import pytest
import pytz

from app.core.exceptions import InvalidConfigurationError
from app.utils.datetime_utils import DateRangeCalculator, DateTimeHelper, coerce_utc


def test_ensure_utc_treats_naive_as_utc():
    result = DateTimeHelper.ensure_utc(datetime(2026, 3, 10, 12))
    assert result == datetime(2026, 3, 10, 12, tzinfo=pytz.UTC)


def test_ensure_utc_converts_aware_values():
    kolkata = pytz.timezone("Asia/Kolkata").localize(datetime(2026, 3, 10, 17, 30))
    assert DateTimeHelper.ensure_utc(kolkata) == datetime(2026, 3, 10, 12, tzinfo=pytz.UTC)


def test_start_of_day_is_local_midnight_in_utc():
    assert DateTimeHelper.start_of_day(date(2026, 3, 10), "Asia/Kolkata") == datetime(
        2026, 3, 9, 18, 30, tzinfo=pytz.UTC
    )


def test_unknown_timezone():
    with pytest.raises(InvalidConfigurationError):
        DateTimeHelper.get_timezone("Atlantis/Capital")


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2026-03-10T12:00:00Z", datetime(2026, 3, 10, 12, tzinfo=pytz.UTC)),
        ("2026-03-10 17:30+05:30", datetime(2026, 3, 10, 12, tzinfo=pytz.UTC)),
        ("10 March 2026 12:00", datetime(2026, 3, 10, 12, tzinfo=pytz.UTC)),
    ],
)
def test_parse_datetime(value, expected):
    assert DateTimeHelper.parse_datetime(value) == expected


def test_parse_datetime_rejects_garbage():
    with pytest.raises(ValueError):
        DateTimeHelper.parse_datetime("yesterday-ish")


@pytest.mark.parametrize(
    "delta,label",
    [
        (timedelta(minutes=45), "45m late"),
        (timedelta(hours=2, minutes=5), "2h 5m late"),
        (timedelta(hours=26), "26h 0m late"),
        (timedelta(seconds=30), "0m late"),
    ],
)
def test_humanize_late_duration(delta, label):
    assert DateTimeHelper.humanize_late_duration(delta) == label


def test_duration_in_days():
    start = datetime(2026, 3, 10, tzinfo=pytz.UTC)
    assert DateRangeCalculator.duration_in_days(start, start + timedelta(days=1, hours=12)) == 1.5


def test_coerce_utc_passes_none_through():
    assert coerce_utc(None) is None
