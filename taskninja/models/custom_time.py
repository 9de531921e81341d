"""Fixed-layout timestamps used on the wire, e.g. "2024-01-01 09:30:00".

Values are always UTC and carry no timezone designator. Sub-second precision
is dropped when formatting.
"""
import re
from datetime import datetime, timezone

LAYOUT = "%Y-%m-%d %H:%M:%S"

# strptime tolerates unpadded fields, the wire format does not
_LAYOUT_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}")


class InvalidTimeFormat(ValueError):
    def __init__(self, message="invalid Time format"):
        super().__init__(message)


def format_time(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(LAYOUT)


def parse_time(value) -> datetime:
    """Parse an already-decoded JSON value into an aware UTC datetime."""
    if not isinstance(value, str) or not _LAYOUT_RE.fullmatch(value):
        raise InvalidTimeFormat()
    try:
        parsed = datetime.strptime(value, LAYOUT)
    except ValueError as exc:
        raise InvalidTimeFormat() from exc
    return parsed.replace(tzinfo=timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes coming back from a store driver."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
