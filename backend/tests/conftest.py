from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional, Sequence

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from venue_booking.core.enums import (
    ApprovalStatus,
    BookingStatus,
    EventStatus,
    VenueBookingType,
    VenueStatus,
)
from venue_booking.database import Base

# Import models so Base.metadata is populated for create_all.
import venue_booking.models  # noqa: F401
from venue_booking.models import Booking, BookingCondition, BookingDate, Event, Venue
from venue_booking.models.types import new_ulid
from venue_booking.services.booking_approval_service import calculate_booking_amount

BOOKING_CREATED_AT = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Session:
    """Session on a fresh in-memory database; services commit into it freely."""
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def venue_factory(db):
    def _create(
        booking_type: VenueBookingType = VenueBookingType.HOURLY,
        base_amount: str = "100.00",
        with_condition: bool = True,
        **condition_kwargs,
    ) -> Venue:
        venue = Venue(
            name=f"Hall {new_ulid()[-4:]}",
            capacity=200,
            booking_type=booking_type,
            base_amount=Decimal(base_amount),
        )
        if with_condition:
            params = {
                "deposit_required_percent": 30,
                "deposit_required_time": 24,
                "payment_complement_time_before_event": 7,
                "transition_time": 0,
                "description": "Standard terms",
            }
            params.update(condition_kwargs)
            venue.booking_conditions.append(BookingCondition(**params))
        db.add(venue)
        db.commit()
        return venue

    return _create


@pytest.fixture
def event_factory(db):
    def _create(
        status: EventStatus = EventStatus.PENDING,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        organizer_user_id: Optional[str] = "auto",
        organizer_organization_id: Optional[str] = None,
    ) -> Event:
        event = Event(
            title="Spring Gala",
            status=status,
            start_date=start_date,
            end_date=end_date or start_date,
            start_time=start_time,
            end_time=end_time,
            organizer_user_id=new_ulid() if organizer_user_id == "auto" else organizer_user_id,
            organizer_organization_id=organizer_organization_id,
        )
        db.add(event)
        db.commit()
        return event

    return _create


@pytest.fixture
def booking_factory(db):
    def _create(
        venue: Venue,
        dates: Sequence[date],
        *,
        event: Optional[Event] = None,
        hours: Optional[Iterable[int]] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        booking_status: BookingStatus = BookingStatus.PENDING,
        approval_status: ApprovalStatus = ApprovalStatus.PENDING,
        amount_to_be_paid: Optional[str] = None,
        created_at: datetime = BOOKING_CREATED_AT,
    ) -> Booking:
        booking_dates = [BookingDate(date=d, hours=list(hours) if hours else None) for d in dates]
        amount = (
            Decimal(amount_to_be_paid)
            if amount_to_be_paid is not None
            else calculate_booking_amount(venue, booking_dates)
        )
        booking = Booking(
            venue_id=venue.id,
            requester_id=new_ulid(),
            event_id=event.id if event else None,
            event_start_date=min(dates),
            event_end_date=max(dates),
            start_time=start_time,
            end_time=end_time,
            booking_status=booking_status,
            approval_status=approval_status,
            venue_status=VenueStatus.BOOKED,
            amount_to_be_paid=amount,
            created_at=created_at,
            booking_dates=booking_dates,
        )
        db.add(booking)
        db.commit()
        return booking

    return _create


@pytest.fixture
def approved_booking_factory(booking_factory):
    """Bookings that already passed manager approval."""

    def _create(venue: Venue, dates: Sequence[date], **kwargs) -> Booking:
        kwargs.setdefault("booking_status", BookingStatus.APPROVED_NOT_PAID)
        kwargs.setdefault("approval_status", ApprovalStatus.APPROVED)
        return booking_factory(venue, dates, **kwargs)

    return _create
