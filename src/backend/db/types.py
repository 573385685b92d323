"""
SQLAlchemy type decorators shared by the models.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, TypeDecorator


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    Naive values are taken to already be UTC (that is what the store holds).
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime column stored as UTC.

    PostgreSQL keeps the offset natively. SQLite drops tzinfo on write and
    returns naive values, so values are converted to UTC before binding and
    re-tagged as UTC when loaded. Comparisons in SQL therefore always compare
    UTC against UTC.

    Usage in models:
        start_date: Mapped[datetime] = mapped_column(UTCDateTime())
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        """Convert to UTC before storing."""
        if value is None:
            return None
        value = as_utc(value)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        """Return aware UTC datetimes regardless of backend."""
        return as_utc(value)
