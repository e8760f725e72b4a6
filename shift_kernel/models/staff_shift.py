"""
Module: shift_kernel.models.staff_shift
Responsibility: ORM persistence for staff shifts and the client line items
    logged during them.  A closed shift row carries the settlement snapshot
    produced by ``shift_engines.settlement``.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/dtos.py only.

Invariants enforced:
    - One shift per staff member per date (uq_staff_shift_date).
    - Status transitions OPEN -> CLOSED only; the settlement service is the
      sole writer of the financial columns.
    - Monetary columns are Numeric(38, 9); never float.

Audit relevance:
    The financial columns of a closed shift are the authoritative record of
    how the shift's money was split.  total_amount, consumables_amount and
    the normalized percents are kept so the settlement can be replayed.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shift_kernel.db.base import TrackedBase, UUIDString
from shift_kernel.domain.dtos import ShiftSnapshot, ShiftStatus


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite returns naive datetimes; stored values are UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class StaffShift(TrackedBase):
    """
    One working shift of one staff member.

    Contract:
        Opened once, closed once.  While open, line items accumulate; at
        close the settlement columns are written in the same transaction
        as the status change.

    Non-goals:
        - This model does not compute anything; see ShiftSettlementService.
    """

    __tablename__ = "staff_shifts"

    __table_args__ = (
        UniqueConstraint("staff_id", "shift_date", name="uq_staff_shift_date"),
        Index("idx_shift_biz_date", "biz_id", "shift_date"),
        Index("idx_shift_status", "status"),
    )

    staff_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    biz_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    shift_date: Mapped[date] = mapped_column(Date, nullable=False)

    status: Mapped[ShiftStatus] = mapped_column(
        String(20),
        default=ShiftStatus.OPEN,
        nullable=False,
    )

    opened_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    closed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Aggregated totals (snapshot at close)
    total_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    consumables_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    # Normalized split used for the settlement
    percent_master: Mapped[Decimal | None] = mapped_column(nullable=True)
    percent_salon: Mapped[Decimal | None] = mapped_column(nullable=True)

    # Final shares
    master_share: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    salon_share: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    # Guarantee
    hours_worked: Mapped[Decimal | None] = mapped_column(nullable=True)
    hourly_rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    guaranteed_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    topup_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    payment_mode: Mapped[str | None] = mapped_column(String(30), nullable=True)

    items: Mapped[list["StaffShiftItem"]] = relationship(
        back_populates="shift",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="StaffShiftItem.created_at",
    )

    def __repr__(self) -> str:
        return f"<StaffShift {self.staff_id} {self.shift_date}: {self.status}>"

    @property
    def is_open(self) -> bool:
        return self.status == ShiftStatus.OPEN

    @property
    def is_closed(self) -> bool:
        return self.status == ShiftStatus.CLOSED

    def to_snapshot(self) -> ShiftSnapshot:
        """Engine-facing view of this row."""
        return ShiftSnapshot(
            shift_id=self.id,
            staff_id=self.staff_id,
            shift_date=self.shift_date,
            status=ShiftStatus(self.status),
            opened_at=_as_utc(self.opened_at),
        )


class StaffShiftItem(TrackedBase):
    """
    One client transaction logged during a shift.

    Amounts are stored as entered; the aggregation engine clamps invalid
    and negative values to 0 when the shift is summed.
    """

    __tablename__ = "staff_shift_items"

    __table_args__ = (
        Index("idx_shift_item_shift", "shift_id"),
    )

    shift_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("staff_shifts.id", ondelete="CASCADE"),
        nullable=False,
    )

    client_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    service_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    service_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    consumables_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    booking_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    note: Mapped[str | None] = mapped_column(String(500), nullable=True)

    shift: Mapped["StaffShift"] = relationship(back_populates="items")

    def __repr__(self) -> str:
        return f"<StaffShiftItem {self.service_amount} / {self.consumables_amount}>"
