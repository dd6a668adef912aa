"""
UTC helpers shared by the repositories and lifecycle services.

Due dates, audit timestamps and release times are all compared as aware
UTC datetimes; naive values are read as UTC.
"""

from datetime import date, datetime, time, timezone
from typing import Optional, Union

UTC = timezone.utc


def now_utc() -> datetime:
    """Aware current time in UTC."""
    return datetime.now(tz=UTC)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Attach or convert to UTC.

    SQLite drops tzinfo on the way back out, so repositories pass every
    loaded datetime through here.
    """
    if value is None:
        return None
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def start_of_day_utc(moment: datetime) -> datetime:
    """Midnight (UTC) of the day containing ``moment``."""
    return datetime.combine(ensure_utc(moment).date(), time.min, tzinfo=UTC)


def parse_iso_to_utc(text: str) -> datetime:
    """
    Read an ISO-8601 timestamp or plain date as UTC.

    Accepts a trailing ``Z``, an explicit offset, or no zone at all.
    ``ValueError`` propagates for anything ``fromisoformat`` rejects.
    """
    parsed = datetime.fromisoformat(text.strip().replace("Z", "+00:00"))
    return ensure_utc(parsed)


def coerce_utc(value: Union[datetime, date, str]) -> datetime:
    """Turn a datetime, date or ISO string into an aware UTC datetime."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=UTC)
    if isinstance(value, str) and value.strip():
        return parse_iso_to_utc(value)
    raise ValueError(f"Unsupported date value: {value!r}")
