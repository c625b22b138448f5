"""
Payment ledger schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.enums import BookingStatus, PayerKind, PaymentStatus


class PaymentData(BaseModel):
    """A payment submitted toward a booking."""

    amount_paid: Decimal = Field(..., description="Amount of this installment")
    payment_date: Optional[datetime] = Field(
        default=None, description="When the money was received; defaults to now"
    )
    payer_id: Optional[str] = Field(default=None, description="Overrides the event organizer")
    payer_kind: Optional[PayerKind] = None
    method: Optional[str] = Field(default=None, max_length=50)
    reference: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("amount_paid", mode="before")
    @classmethod
    def coerce_amount(cls, v: object) -> object:
        if isinstance(v, float):
            return Decimal(str(v))
        return v


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    booking_id: str
    payer_id: str
    payer_kind: PayerKind
    amount_paid: Decimal
    payment_date: datetime
    status: PaymentStatus
    method: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None


class DepositEvaluation(BaseModel):
    """
    Read-and-decide outcome for one booking's payment set.

    ``deposit_paid_at`` is the payment date at which the running total first
    reached ``required_deposit``; None when it never did.
    """

    booking_id: str
    amount_to_be_paid: Decimal
    deposit_required_percent: int
    required_deposit: Decimal
    total_paid: Decimal
    remaining_balance: Decimal
    deposit_paid_at: Optional[datetime] = None
    hours_since_booking: Optional[float] = None
    deposit_met: bool
    deposit_fulfilled: bool
    fully_paid: bool
    booking_status: BookingStatus


class PaymentResult(BaseModel):
    payment: PaymentResponse
    booking_id: str
    booking_status: BookingStatus
    payer_id: str
    payer_kind: PayerKind
    total_paid: Decimal
    required_deposit: Decimal
    remaining_balance: Decimal
    deposit_fulfilled: bool
    fully_paid: bool
    message: str


class PaymentSummary(BaseModel):
    total_paid: Decimal
    required_amount: Decimal
    deposit_required: Decimal
    remaining_balance: Decimal
    is_fully_paid: bool
    is_deposit_met: bool


class PaymentHistory(BaseModel):
    booking_id: str
    payments: List[PaymentResponse]
    summary: PaymentSummary
