from datetime import datetime, timezone

import pytest

from threat_timeline.core.exceptions import TimestampValidationError
from threat_timeline.core.timestamps import (
    coerce_timestamp,
    format_timestamp,
    now_event_timestamp,
    parse_timestamp,
)


def test_parse_naive_minute_precision_as_utc():
    assert parse_timestamp("2024-03-14T10:05") == datetime(2024, 3, 14, 10, 5, tzinfo=timezone.utc)


def test_parse_z_and_offset():
    assert parse_timestamp("2024-03-14T10:05:30Z") == datetime(2024, 3, 14, 10, 5, 30, tzinfo=timezone.utc)
    assert parse_timestamp("2024-03-14T12:05+02:00") == datetime(2024, 3, 14, 10, 5, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", ["", None, "yesterday", "2024-13-45T99:99"])
def test_parse_rejects_invalid(value):
    with pytest.raises(TimestampValidationError):
        parse_timestamp(value)


def test_coerce_falls_back_to_now():
    before = datetime.now(timezone.utc)
    assert coerce_timestamp("garbage") >= before


def test_format_and_new_event_timestamp():
    assert format_timestamp(datetime(2024, 1, 1)) == "2024-01-01T00:00:00Z"
    assert format_timestamp(None) == ""
    stamp = now_event_timestamp()
    assert len(stamp) == 16
    parse_timestamp(stamp)
