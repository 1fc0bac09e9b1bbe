"""
Cross-database column types for SQLAlchemy.

Works with both PostgreSQL (native JSONB) and SQLite (JSON stored as TEXT).
"""

import json

from sqlalchemy import TypeDecorator, Text
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB


class JSONDict(TypeDecorator):
    """
    Platform-independent JSON object column.

    Uses PostgreSQL's JSONB type when available, otherwise JSON text. NULL
    and non-object payloads load as an empty dict, so account credentials and
    extra metadata can always be read and merged without a None check.
    """
    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_JSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        if value is None:
            value = {}
        if dialect.name == "postgresql":
            return value
        return json.dumps(value, separators=(",", ":"), sort_keys=True)

    def process_result_value(self, value, dialect):
        if value is None:
            return {}
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                return {}
        return value if isinstance(value, dict) else {}
