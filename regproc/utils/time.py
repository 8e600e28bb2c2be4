import re
import time
from datetime import datetime, timezone

from regproc.core.errors import TimestampParseError

# yyyy-MM-ddTHH:mm:ss.SSSZ, exactly three fractional digits
_ACTION_TS = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")

def now_ms() -> int:
    return int(time.time() * 1000)

def parse_iso_timestamp(ts: str) -> datetime:
    """
    Parse a timestamp as sent on workflow actions: "2021-03-02T08:24:29.526Z".

    Only that exact UTC millisecond form is accepted. There is no fallback:
    a resume time that cannot be read must not be silently replaced by "now".
    """
    if not isinstance(ts, str) or not ts.strip():
        raise TimestampParseError("RPR-WIA-002", f"Timestamp is empty or not a string: {ts!r}")
    s = ts.strip()
    if not _ACTION_TS.match(s):
        raise TimestampParseError("RPR-WIA-002", f"Unparseable timestamp: {ts!r}")
    try:
        dt = datetime.strptime(s, "%Y-%m-%dT%H:%M:%S.%fZ")
    except ValueError as e:
        raise TimestampParseError("RPR-WIA-002", f"Unparseable timestamp: {ts!r}") from e
    return dt.replace(tzinfo=timezone.utc)

def to_iso_utc(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
