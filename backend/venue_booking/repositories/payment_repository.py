# backend/venue_booking/repositories/payment_repository.py
"""
Payment Repository

Append-only access to the booking payment ledger and its invoice.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import InvoiceStatus, PaymentStatus
from ..core.exceptions import RepositoryException
from ..models.payment import Invoice, Payment
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[Payment]):
    def __init__(self, db: Session):
        super().__init__(db, Payment)

    def get_payments_for_booking(self, booking_id: str, newest_first: bool = False) -> List[Payment]:
        """
        All payments of a booking in ledger order.

        Ledger order is ``payment_date`` then ``created_at``; ``newest_first``
        reverses it for history listings.
        """
        try:
            query = self.db.query(Payment).filter(Payment.booking_id == booking_id)
            if newest_first:
                query = query.order_by(Payment.payment_date.desc(), Payment.created_at.desc())
            else:
                query = query.order_by(Payment.payment_date, Payment.created_at)
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting payments for booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to get payments: {str(e)}") from e

    def mark_completed(self, payments: List[Payment]) -> int:
        """Move every still-pending payment to COMPLETED. Returns how many changed."""
        changed = 0
        for payment in payments:
            if payment.status != PaymentStatus.COMPLETED:
                payment.status = PaymentStatus.COMPLETED
                changed += 1
        if changed:
            self.flush()
        return changed


class InvoiceRepository(BaseRepository[Invoice]):
    def __init__(self, db: Session):
        super().__init__(db, Invoice)

    def get_for_booking(self, booking_id: str) -> Optional[Invoice]:
        try:
            return self.db.query(Invoice).filter(Invoice.booking_id == booking_id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting invoice for booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to get invoice: {str(e)}") from e

    def mark_paid(self, invoice: Invoice) -> Invoice:
        if invoice.status != InvoiceStatus.PAID:
            invoice.status = InvoiceStatus.PAID
            self.flush()
        return invoice
