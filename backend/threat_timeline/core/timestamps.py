import logging
from datetime import datetime, timezone

from threat_timeline.core.exceptions import TimestampValidationError

logger = logging.getLogger(__name__)

# datetime-local form value, minute precision
EVENT_TS_FORMAT = "%Y-%m-%dT%H:%M"


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_event_timestamp() -> str:
    return now_utc().strftime(EVENT_TS_FORMAT)


def parse_timestamp(s: str | None) -> datetime:
    """Parse an ISO-8601 event timestamp into an aware UTC datetime.

    Naive values are taken as UTC. Raises TimestampValidationError when the
    value is missing or malformed.
    """
    if not isinstance(s, str) or not s.strip():
        raise TimestampValidationError(s)
    raw = s.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(raw)
    except ValueError as e:
        raise TimestampValidationError(s) from e
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def coerce_timestamp(s: str | None) -> datetime:
    """Like parse_timestamp, but falls back to the current time."""
    try:
        return parse_timestamp(s)
    except TimestampValidationError:
        logger.warning("unparseable timestamp %r, using current time", s)
        return now_utc()


def format_timestamp(dt: datetime | None) -> str:
    if not dt:
        return ""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
