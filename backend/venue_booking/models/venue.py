# backend/venue_booking/models/venue.py
"""
Venue models: the venue itself, its booking policy, and the occupancy slots
materialized when a booking is approved.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.enums import SlotStatus, VenueBookingType
from ..database import Base
from .types import _now_utc, enum_column, new_ulid

if TYPE_CHECKING:
    from .booking import Booking


class Venue(Base):
    """A rentable venue, priced per day or per hour."""

    __tablename__ = "venues"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=new_ulid)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    booking_type: Mapped[VenueBookingType] = mapped_column(
        enum_column(VenueBookingType), nullable=False, default=VenueBookingType.HOURLY
    )
    base_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now_utc, nullable=False)

    booking_conditions: Mapped[List["BookingCondition"]] = relationship(
        "BookingCondition",
        back_populates="venue",
        cascade="all, delete-orphan",
        order_by="BookingCondition.created_at",
    )
    availability_slots: Mapped[List["AvailabilitySlot"]] = relationship(
        "AvailabilitySlot", back_populates="venue", cascade="all, delete-orphan"
    )
    bookings: Mapped[List["Booking"]] = relationship("Booking", back_populates="venue")

    @property
    def condition(self) -> Optional["BookingCondition"]:
        """The authoritative booking policy (first configured) or None."""
        return self.booking_conditions[0] if self.booking_conditions else None

    @property
    def is_hourly(self) -> bool:
        return self.booking_type == VenueBookingType.HOURLY

    def __repr__(self) -> str:
        return f"<Venue(id={self.id}, name={self.name}, type={self.booking_type})>"


class BookingCondition(Base):
    """Per-venue deposit and transition policy."""

    __tablename__ = "booking_conditions"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=new_ulid)
    venue_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Percentage (0-100) of the booking amount due as deposit
    deposit_required_percent: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # Hours after booking creation within which the deposit must be complete
    deposit_required_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # Days before the event the balance is due
    payment_complement_time_before_event: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # Trailing buffer days after a DAILY booking's last date
    transition_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now_utc, nullable=False)

    venue: Mapped["Venue"] = relationship("Venue", back_populates="booking_conditions")

    def __repr__(self) -> str:
        return (
            f"<BookingCondition(venue_id={self.venue_id}, deposit={self.deposit_required_percent}%, "
            f"within={self.deposit_required_time}h)>"
        )


class AvailabilitySlot(Base):
    """
    Materialized venue occupancy for one day (and, for hourly venues, one
    time window). Written only by the approval workflow and never updated.
    """

    __tablename__ = "venue_availability_slots"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=new_ulid)
    venue_id: Mapped[str] = mapped_column(String(26), ForeignKey("venues.id"), nullable=False)
    booking_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("venue_bookings.id"), nullable=True, index=True
    )
    event_id: Mapped[Optional[str]] = mapped_column(String(26), ForeignKey("events.id"), nullable=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    status: Mapped[SlotStatus] = mapped_column(enum_column(SlotStatus), nullable=False, default=SlotStatus.BOOKED)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now_utc, nullable=False)

    venue: Mapped["Venue"] = relationship("Venue", back_populates="availability_slots")

    __table_args__ = (Index("ix_venue_availability_slots_venue_date", "venue_id", "date"),)

    def __repr__(self) -> str:
        window = f" {self.start_time}-{self.end_time}" if self.start_time else ""
        return f"<AvailabilitySlot(venue_id={self.venue_id}, date={self.date}{window})>"
