from datetime import date, datetime, time, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes coming back from the store are UTC wall time."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_client_date(value) -> Optional[datetime]:
    """Optional date attached to a create/update payload; unusable values are ignored."""
    if not value:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    try:
        text = str(value).strip().replace("Z", "+00:00")
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def parse_range_bound(value: Optional[str], end: bool = False) -> Optional[datetime]:
    """
    Parse a from/to query bound. A bare date covers the whole day, so
    to=2024-03-31 keeps records stamped at 18:00 that day. Raises ValueError
    on garbage.
    """
    if value is None or str(value).strip() == "":
        return None
    text = str(value).strip()
    if len(text) == 10:
        day = date.fromisoformat(text)
        return datetime.combine(day, time.max if end else time.min, tzinfo=timezone.utc)
    return ensure_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
