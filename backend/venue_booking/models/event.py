# backend/venue_booking/models/event.py
"""
Minimal event record.

Events are owned by the surrounding application; the booking engine only
reads their window, status and organizer.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from ..core.enums import EventStatus
from ..database import Base
from .types import _now_utc, enum_column, new_ulid


class Event(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=new_ulid)
    title: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    status: Mapped[EventStatus] = mapped_column(
        enum_column(EventStatus), nullable=False, default=EventStatus.PENDING
    )
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)

    # Exactly one of these identifies who pays for the event's venues
    organizer_user_id: Mapped[Optional[str]] = mapped_column(String(26), nullable=True)
    organizer_organization_id: Mapped[Optional[str]] = mapped_column(String(26), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now_utc, nullable=False)

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, status={self.status})>"
