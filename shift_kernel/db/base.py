"""
Module: shift_kernel.db.base
Responsibility: Declarative base shared by every ORM model in the kernel:
    UUID primary keys, the column types money and timestamps map to, and
    created/updated timestamps.
Architecture position: Kernel > DB.  Imports nothing from the kernel;
    every model module imports from here.

Invariants enforced:
    - Every row has a uuid4 primary key, stored as a 36-char string so the
      same schema runs on SQLite and PostgreSQL.
    - Annotated ``Decimal`` columns become Numeric(38, 9).  Shares, totals,
      hours and rates are never stored as floats.
    - Annotated ``datetime`` columns are timezone-aware.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """``uuid.UUID`` in Python, String(36) in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    """Root of all models.  Supplies ``id`` and the annotation type map."""

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        UUID: UUIDString(),
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Abstract base adding row timestamps.

    ``created_at`` is set by the database on insert; ``updated_at`` is
    refreshed on every update.  Neither is a business timestamp: shift
    open and close times come from the injected Clock.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
