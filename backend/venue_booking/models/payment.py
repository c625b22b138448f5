"""
Payment ledger and invoice models for venue bookings.

Payments are append-only: rows are never deleted, only their status moves
from PENDING to COMPLETED once the booking is fully settled.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.enums import InvoiceStatus, PayerKind, PaymentStatus
from ..database import Base
from .types import _now_utc, enum_column, new_ulid

if TYPE_CHECKING:
    from .booking import Booking


class Payment(Base):
    """A (possibly partial) payment toward a booking."""

    __tablename__ = "venue_booking_payments"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=new_ulid)
    booking_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("venue_bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    payer_id: Mapped[str] = mapped_column(String(26), nullable=False)
    payer_kind: Mapped[PayerKind] = mapped_column(enum_column(PayerKind), nullable=False)
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    payment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now_utc, nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        enum_column(PaymentStatus), nullable=False, default=PaymentStatus.PENDING
    )
    method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now_utc, nullable=False)

    booking: Mapped["Booking"] = relationship("Booking")

    def __repr__(self) -> str:
        return f"<Payment(booking_id={self.booking_id}, amount={self.amount_paid}, status={self.status})>"


class Invoice(Base):
    """The single invoice issued for a booking at approval time."""

    __tablename__ = "venue_invoices"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=new_ulid)
    booking_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("venue_bookings.id"), nullable=False, unique=True
    )
    venue_id: Mapped[str] = mapped_column(String(26), ForeignKey("venues.id"), nullable=False)
    event_id: Mapped[Optional[str]] = mapped_column(String(26), ForeignKey("events.id"), nullable=True)
    payer_id: Mapped[str] = mapped_column(String(26), nullable=False)
    payer_kind: Mapped[PayerKind] = mapped_column(enum_column(PayerKind), nullable=False)
    invoice_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now_utc, nullable=False)
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    status: Mapped[InvoiceStatus] = mapped_column(
        enum_column(InvoiceStatus), nullable=False, default=InvoiceStatus.PENDING
    )

    def __repr__(self) -> str:
        return f"<Invoice(booking_id={self.booking_id}, total={self.total_amount}, status={self.status})>"
