# sponsoring/utils/dates.py
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise a timestamp read from the record store to an aware UTC datetime.

    Some drivers (SQLite) hand back naive datetimes even for
    DateTime(timezone=True) columns; those are stored as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
