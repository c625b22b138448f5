# backend/venue_booking/services/deposit_ledger_service.py
"""
Deposit Ledger Service for the venue booking engine

Records partial payments against an approved booking and decides whether
the deposit was met in time. A deposit counts only if the running total of
payments, in payment-date order, reached the required share of the booking
amount within ``deposit_required_time`` hours of the booking's creation. A
late deposit never confirms a booking after the fact, even if the final
total is the same.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.enums import BookingStatus
from ..core.exceptions import (
    BookingNotFound,
    ConditionNotFound,
    PayerUndetermined,
    PaymentRejected,
)
from ..events.booking_events import DepositFulfilled
from ..models.booking import Booking
from ..models.payment import Payment
from ..models.venue import BookingCondition
from ..repositories import RepositoryFactory
from ..repositories.event_repository import OrganizerRef, OrganizerResolver
from ..schemas.payment import (
    DepositEvaluation,
    PaymentData,
    PaymentHistory,
    PaymentResponse,
    PaymentResult,
    PaymentSummary,
)
from .base import BaseService

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
# Share of the booking amount due when a condition leaves the percentage unset
DEFAULT_DEPOSIT_PERCENT = 100

PAYABLE_STATUSES = (BookingStatus.APPROVED_NOT_PAID, BookingStatus.APPROVED_PAID)


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes from the store are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _money(value) -> Decimal:
    return Decimal(value or 0).quantize(CENTS, rounding=ROUND_HALF_UP)


def evaluate(
    booking: Booking,
    payments: Sequence[Payment],
    condition: Optional[BookingCondition],
) -> DepositEvaluation:
    """
    Read-and-decide core of the ledger. Pure: mutates nothing, and the same
    payment set always yields the same outcome.

    Raises:
        ConditionNotFound: the venue has no booking condition
    """
    if condition is None:
        raise ConditionNotFound(booking.venue_id)

    amount = _money(booking.amount_to_be_paid)
    percent = (
        condition.deposit_required_percent
        if condition.deposit_required_percent is not None
        else DEFAULT_DEPOSIT_PERCENT
    )
    required = _money(amount * Decimal(percent) / Decimal(100))

    ordered = sorted(
        payments,
        key=lambda p: (_as_utc(p.payment_date), _as_utc(p.created_at) if p.created_at else _as_utc(p.payment_date)),
    )
    running = Decimal("0")
    deposit_paid_at: Optional[datetime] = None
    for payment in ordered:
        running += _money(payment.amount_paid)
        if deposit_paid_at is None and running >= required:
            deposit_paid_at = _as_utc(payment.payment_date)
    total_paid = running

    hours_since_booking: Optional[float] = None
    if deposit_paid_at is not None:
        hours_since_booking = (deposit_paid_at - _as_utc(booking.created_at)).total_seconds() / 3600

    deposit_met = total_paid >= required and deposit_paid_at is not None
    in_time = hours_since_booking is not None and hours_since_booking >= 0 and (
        condition.deposit_required_time is None or hours_since_booking <= condition.deposit_required_time
    )
    deposit_fulfilled = deposit_met and in_time
    fully_paid = total_paid >= amount

    status = booking.booking_status
    if deposit_fulfilled and status == BookingStatus.APPROVED_NOT_PAID:
        status = BookingStatus.APPROVED_PAID

    return DepositEvaluation(
        booking_id=booking.id,
        amount_to_be_paid=amount,
        deposit_required_percent=percent,
        required_deposit=required,
        total_paid=total_paid,
        remaining_balance=max(amount - total_paid, Decimal("0.00")),
        deposit_paid_at=deposit_paid_at,
        hours_since_booking=hours_since_booking,
        deposit_met=deposit_met,
        deposit_fulfilled=deposit_fulfilled,
        fully_paid=fully_paid,
        booking_status=status,
    )


class DepositLedgerService(BaseService):
    """Service for recording booking payments and gating the paid status."""

    def __init__(self, db: Session, organizer_resolver: Optional[OrganizerResolver] = None, **kwargs):
        super().__init__(db, **kwargs)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.venue_repository = RepositoryFactory.create_venue_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)
        self.invoice_repository = RepositoryFactory.create_invoice_repository(db)
        self.organizer_resolver = organizer_resolver or RepositoryFactory.create_event_repository(db)

    def evaluate(
        self,
        booking: Booking,
        payments: Sequence[Payment],
        condition: Optional[BookingCondition],
    ) -> DepositEvaluation:
        return evaluate(booking, payments, condition)

    def _resolve_payer(self, booking: Booking, payment_data: PaymentData) -> OrganizerRef:
        if payment_data.payer_id:
            kind = payment_data.payer_kind
            if kind is None:
                organizer = (
                    self.organizer_resolver.resolve_organizer(booking.event_id) if booking.event_id else None
                )
                if organizer is None or organizer.payer_id != payment_data.payer_id:
                    raise PayerUndetermined(booking.id)
                kind = organizer.kind
            return OrganizerRef(payment_data.payer_id, kind)

        organizer = self.organizer_resolver.resolve_organizer(booking.event_id) if booking.event_id else None
        if organizer is None:
            raise PayerUndetermined(booking.id)
        return organizer

    @BaseService.measure_operation("record_payment")
    def record_payment(self, booking_id: str, payment_data: PaymentData) -> PaymentResult:
        """
        Append a payment and re-evaluate the booking's deposit.

        Runs in one transaction holding a row lock on the booking so two
        concurrent payments are evaluated one after the other.

        Raises:
            BookingNotFound
            PaymentRejected: cancelled or unapproved booking, non-positive
                amount, more than the outstanding balance, or a payment
                dated before the booking was created or in the future
            ConditionNotFound: the venue has no booking condition
            PayerUndetermined: no payer given and no organizer found
        """
        with self.transaction():
            booking = self.booking_repository.get_booking_with_details(booking_id, for_update=True)
            if booking is None:
                raise BookingNotFound(booking_id)
            if booking.booking_status == BookingStatus.CANCELLED:
                raise PaymentRejected(
                    f"Cannot record a payment on cancelled booking {booking_id}", booking_id=booking_id
                )
            if booking.booking_status not in PAYABLE_STATUSES:
                raise PaymentRejected(
                    f"Booking {booking_id} must be approved before payments are recorded",
                    booking_id=booking_id,
                    booking_status=booking.booking_status.value,
                )

            condition = self.venue_repository.get_condition(booking.venue_id)
            if condition is None:
                raise ConditionNotFound(booking.venue_id)

            amount = _money(payment_data.amount_paid)
            if amount <= 0:
                raise PaymentRejected("Payment amount must be greater than zero", amount=str(amount))

            existing = self.payment_repository.get_payments_for_booking(booking.id)
            outstanding = _money(booking.amount_to_be_paid) - sum(
                (_money(p.amount_paid) for p in existing), Decimal("0")
            )
            if amount > outstanding:
                raise PaymentRejected(
                    f"Payment of {amount} exceeds the outstanding balance of {outstanding}",
                    amount=str(amount),
                    outstanding=str(outstanding),
                )

            received_at = self._received_at(booking, payment_data)
            payer = self._resolve_payer(booking, payment_data)
            payment = self.payment_repository.create(
                booking_id=booking.id,
                payer_id=payer.payer_id,
                payer_kind=payer.kind,
                amount_paid=amount,
                payment_date=received_at,
                method=payment_data.method,
                reference=payment_data.reference,
                notes=payment_data.notes,
            )

            payments: List[Payment] = [*existing, payment]
            evaluation = evaluate(booking, payments, condition)
            self._apply(booking, payments, evaluation)
            payment_response = PaymentResponse.model_validate(payment)

        self.log_operation(
            "record_payment",
            booking_id=booking_id,
            amount=str(amount),
            deposit_fulfilled=evaluation.deposit_fulfilled,
        )
        return PaymentResult(
            payment=payment_response,
            booking_id=booking.id,
            booking_status=booking.booking_status,
            payer_id=payer.payer_id,
            payer_kind=payer.kind,
            total_paid=evaluation.total_paid,
            required_deposit=evaluation.required_deposit,
            remaining_balance=evaluation.remaining_balance,
            deposit_fulfilled=evaluation.deposit_fulfilled,
            fully_paid=evaluation.fully_paid,
            message=self._describe(evaluation),
        )

    @staticmethod
    def _received_at(booking: Booking, payment_data: PaymentData) -> datetime:
        """Payment instant, which must fall between the booking's creation and now."""
        now = datetime.now(timezone.utc)
        if payment_data.payment_date is None:
            return now
        received_at = _as_utc(payment_data.payment_date)
        if received_at < _as_utc(booking.created_at):
            raise PaymentRejected(
                "Payment date cannot precede the booking's creation",
                payment_date=received_at.isoformat(),
                booking_created_at=_as_utc(booking.created_at).isoformat(),
            )
        if received_at > now:
            raise PaymentRejected(
                "Payment date cannot be in the future", payment_date=received_at.isoformat()
            )
        return received_at

    def _apply(self, booking: Booking, payments: Sequence[Payment], evaluation: DepositEvaluation) -> None:
        """Persist the decision. Status only ever moves forward."""
        if evaluation.booking_status != booking.booking_status:
            booking.booking_status = evaluation.booking_status
            self.publisher.stage(
                DepositFulfilled(
                    booking_id=booking.id,
                    total_paid=evaluation.total_paid,
                    required_amount=evaluation.required_deposit,
                    fully_paid=evaluation.fully_paid,
                    fulfilled_at=evaluation.deposit_paid_at or datetime.now(timezone.utc),
                )
            )

        if evaluation.fully_paid:
            self.payment_repository.mark_completed(list(payments))
            booking.is_paid = True
            invoice = self.invoice_repository.get_for_booking(booking.id)
            if invoice is not None:
                self.invoice_repository.mark_paid(invoice)

        self.booking_repository.flush()

    @staticmethod
    def _describe(evaluation: DepositEvaluation) -> str:
        if evaluation.fully_paid:
            return "Payment recorded. Booking is fully paid."
        if evaluation.deposit_fulfilled:
            return "Payment recorded. Deposit fulfilled; booking confirmed."
        if evaluation.deposit_met:
            return "Payment recorded. Deposit reached after the allowed time; booking not confirmed."
        return (
            f"Payment recorded. Deposit of {evaluation.required_deposit} required, "
            f"{evaluation.total_paid} paid so far."
        )

    @BaseService.measure_operation("get_payment_history")
    def get_payment_history(self, booking_id: str) -> PaymentHistory:
        """Payments newest first with a deposit summary."""
        booking = self.booking_repository.get_by_id(booking_id, load_relationships=False)
        if booking is None:
            raise BookingNotFound(booking_id)
        condition = self.venue_repository.get_condition(booking.venue_id)
        payments = self.payment_repository.get_payments_for_booking(booking.id, newest_first=True)
        evaluation = evaluate(booking, payments, condition)

        return PaymentHistory(
            booking_id=booking.id,
            payments=[PaymentResponse.model_validate(p) for p in payments],
            summary=PaymentSummary(
                total_paid=evaluation.total_paid,
                required_amount=evaluation.amount_to_be_paid,
                deposit_required=evaluation.required_deposit,
                remaining_balance=evaluation.remaining_balance,
                is_fully_paid=evaluation.fully_paid,
                is_deposit_met=evaluation.deposit_met,
            ),
        )
