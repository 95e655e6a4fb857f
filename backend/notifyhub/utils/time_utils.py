"""Timestamp and identifier helpers shared by the services."""
import uuid
from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string ending in 'Z'."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def new_id() -> str:
    """Generate a new record identifier."""
    return str(uuid.uuid4())


EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 timestamp of any fractional precision.

    Missing or unparseable values sort before every real timestamp.
    """
    if not isinstance(value, str) or not value:
        return EARLIEST
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return EARLIEST
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
