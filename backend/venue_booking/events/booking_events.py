"""Booking domain events."""
from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional


@dataclass
class BookingApproved:
    """Fired after an approval transaction commits."""

    booking_id: str
    venue_id: str
    event_id: Optional[str]
    payer_id: str
    amount_to_be_paid: Decimal
    approved_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BookingCancelled:
    """Fired after a booking is cancelled, by a manager or by a colliding approval."""

    booking_id: str
    requester_id: str
    reason: str
    cancelled_at: datetime
    displaced_by: Optional[str] = None  # approving booking id when auto-cancelled

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DepositFulfilled:
    """Fired when a booking's deposit is met within its deadline."""

    booking_id: str
    total_paid: Decimal
    required_amount: Decimal
    fully_paid: bool
    fulfilled_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
