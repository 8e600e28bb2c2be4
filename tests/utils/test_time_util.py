import pytest

from regproc.core.errors import TimestampParseError
from regproc.utils.time import parse_iso_timestamp, to_iso_utc


@pytest.mark.parametrize("raw,expected", [
    ("2021-03-02T08:24:29.526Z", "2021-03-02T08:24:29.526Z"),
    ("  2021-12-31T23:59:59.000Z ", "2021-12-31T23:59:59.000Z"),
])
def test_parse_and_normalize(raw, expected):
    assert to_iso_utc(parse_iso_timestamp(raw)) == expected


@pytest.mark.parametrize("raw", [
    "", "   ", None, "02/03/2021", "tomorrow",
    "2021-03-02T08:24:29.5Z",
    "2021-03-02T08:24:29.526",
    "2021-03-02T08:24:29Z",
    "2021-03-02T10:24:29.526+02:00",
    "2021-02-30T08:24:29.526Z",
])
def test_unreadable_timestamps_raise(raw):
    with pytest.raises(TimestampParseError) as exc:
        parse_iso_timestamp(raw)
    assert exc.value.kind == "DATA"
    assert not exc.value.is_retryable
