"""Utility modules for sub2api."""

from app.utils.cache import TTLCache
from app.utils.clock import utcnow, as_utc, format_rfc3339

__all__ = [
    "TTLCache",
    "utcnow",
    "as_utc",
    "format_rfc3339",
]
