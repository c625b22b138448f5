"""
Availability schemas.

A day is either fully free or carries the ordered free gaps left between
its bookings, alongside the merged booked intervals those gaps complement.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


class TimeRange(BaseModel):
    start_time: str = Field(description="HH:mm, inclusive")
    end_time: str = Field(description="HH:mm, exclusive")


class DayAvailability(BaseModel):
    date: date
    fully_free: bool
    booked: List[TimeRange] = Field(default_factory=list)
    gaps: List[TimeRange] = Field(default_factory=list)


class VenueAvailability(BaseModel):
    venue_id: str
    start_date: date
    end_date: date
    days: List[DayAvailability]


class DateAvailability(BaseModel):
    """Answer of the materialized-slot absence checks."""

    venue_id: str
    date: date
    hour: Optional[int] = None
    available: bool
