# backend/venue_booking/models/booking.py
"""
Venue booking model.

A booking is created PENDING by the booking-request flow and is owned
thereafter by the approval and payment pipeline. It carries its own date
range and optional daily time window so conflict checks never have to
reconstruct them from related rows.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, Boolean, Date, DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.enums import ApprovalStatus, BookingStatus, VenueStatus
from ..database import Base
from .types import _now_utc, enum_column, new_ulid

if TYPE_CHECKING:
    from .event import Event
    from .venue import Venue


class Booking(Base):
    __tablename__ = "venue_bookings"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=new_ulid)
    venue_id: Mapped[str] = mapped_column(String(26), ForeignKey("venues.id"), nullable=False)
    requester_id: Mapped[str] = mapped_column(String(26), nullable=False)
    event_id: Mapped[Optional[str]] = mapped_column(String(26), ForeignKey("events.id"), nullable=True)
    organization_id: Mapped[Optional[str]] = mapped_column(String(26), nullable=True)

    # Derived from booking_dates (min/max)
    event_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    event_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    # HH:mm; absent for whole-day bookings
    start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)

    booking_status: Mapped[BookingStatus] = mapped_column(
        enum_column(BookingStatus), nullable=False, default=BookingStatus.PENDING
    )
    approval_status: Mapped[ApprovalStatus] = mapped_column(
        enum_column(ApprovalStatus), nullable=False, default=ApprovalStatus.PENDING
    )
    venue_status: Mapped[VenueStatus] = mapped_column(
        enum_column(VenueStatus), nullable=False, default=VenueStatus.BOOKED
    )

    amount_to_be_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now_utc, nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=_now_utc, nullable=True
    )

    venue: Mapped["Venue"] = relationship("Venue", back_populates="bookings")
    event: Mapped[Optional["Event"]] = relationship("Event")
    booking_dates: Mapped[List["BookingDate"]] = relationship(
        "BookingDate",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingDate.date",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_venue_bookings_venue_start", "venue_id", "event_start_date"),
        Index("ix_venue_bookings_venue_status", "venue_id", "booking_status"),
    )

    @property
    def has_time_window(self) -> bool:
        return bool(self.start_time and self.end_time)

    @property
    def is_cancelled(self) -> bool:
        return self.booking_status == BookingStatus.CANCELLED

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, venue_id={self.venue_id}, "
            f"{self.event_start_date}..{self.event_end_date}, status={self.booking_status})>"
        )


class BookingDate(Base):
    """One requested day; hourly venues list the hours (0-23) they need."""

    __tablename__ = "venue_booking_dates"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=new_ulid)
    booking_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("venue_bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    hours: Mapped[Optional[List[int]]] = mapped_column(JSON, nullable=True)

    booking: Mapped["Booking"] = relationship("Booking", back_populates="booking_dates")

    def __repr__(self) -> str:
        return f"<BookingDate(date={self.date}, hours={self.hours})>"
