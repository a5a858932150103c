"""
SQLAlchemy model mixins
Project: Catering Invoices

Reusable columns shared by the models.
"""

import datetime
import uuid

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime.datetime:
    """Current time, timezone-aware (UTC)."""
    return datetime.datetime.now(datetime.timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp column.

    Backends that drop the offset (SQLite) return naive values; they are
    read back as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=datetime.timezone.utc)
        return value


class UUIDMixin:
    """
    Mixin for a UUID primary key.

    Usage:
        class MyModel(Base, UUIDMixin):
            __tablename__ = "my_table"
            ...
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        doc="UUID primary key",
    )


class CreatedAtMixin:
    """Mixin for the creation timestamp, set client-side on insert."""

    created_at: Mapped[datetime.datetime] = mapped_column(
        UTCDateTime(),
        default=utcnow,
        nullable=False,
        doc="Record creation time",
    )


class TimestampMixin(CreatedAtMixin):
    """
    Mixin for creation and last update timestamps.

    Both are filled in Python rather than with ``server_default`` so the
    values are available right after a flush without reloading the row.
    The store refreshes ``updated_at`` explicitly on every update.
    """

    updated_at: Mapped[datetime.datetime] = mapped_column(
        UTCDateTime(),
        default=utcnow,
        nullable=False,
        doc="Last update time",
    )
