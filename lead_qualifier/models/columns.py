"""
Column helpers shared by the table models.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import TypeDecorator

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONVariant = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Current time, timezone-aware in UTC."""
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timestamp stored as UTC and always read back timezone-aware.
    Naive values are taken to be UTC already.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        # SQLite drops the offset on storage
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


def json_column(**kwargs) -> Column:
    return Column(JSONVariant, **kwargs)


def timestamp_column(**kwargs) -> Column:
    kwargs.setdefault("nullable", False)
    return Column(UTCDateTime(), **kwargs)
