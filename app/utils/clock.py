"""Time helpers. All persisted timestamps are naive UTC."""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as naive UTC, matching what DateTime columns hold."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_rfc3339(value: datetime) -> str:
    """Render a naive UTC datetime as an RFC3339 string with a Z suffix."""
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to a naive UTC datetime for serialisation; aware values are converted."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
