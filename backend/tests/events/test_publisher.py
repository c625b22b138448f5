from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import Mock, patch

from venue_booking.events.booking_events import BookingApproved, DepositFulfilled
from venue_booking.events.publisher import (
    LoggingNotificationSender,
    NotificationPublisher,
    serialize_payload,
)

APPROVED_AT = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _approved(booking_id: str = "B1") -> BookingApproved:
    return BookingApproved(
        booking_id=booking_id,
        venue_id="V1",
        event_id="E1",
        payer_id="P1",
        amount_to_be_paid=Decimal("600.00"),
        approved_at=APPROVED_AT,
    )


def test_serialize_payload_renders_dates_and_money() -> None:
    payload = serialize_payload(_approved())

    assert payload["approved_at"] == "2025-06-01T12:00:00+00:00"
    assert payload["amount_to_be_paid"] == "600.00"
    assert payload["event_id"] == "E1"


def test_stage_holds_until_flush() -> None:
    sender = Mock()
    publisher = NotificationPublisher(sender=sender)

    publisher.stage(_approved("B1"))
    publisher.stage(_approved("B2"))
    sender.send.assert_not_called()
    assert len(publisher.pending) == 2

    assert publisher.flush() == 2
    assert [call.args[1]["booking_id"] for call in sender.send.call_args_list] == ["B1", "B2"]
    assert publisher.pending == []


def test_discard_drops_everything() -> None:
    sender = Mock()
    publisher = NotificationPublisher(sender=sender)
    publisher.stage(_approved())

    publisher.discard()

    assert publisher.flush() == 0
    sender.send.assert_not_called()


def test_sender_failure_does_not_stop_the_rest() -> None:
    sender = Mock()
    sender.send.side_effect = [RuntimeError("smtp down"), None]
    publisher = NotificationPublisher(sender=sender)
    publisher.stage(_approved("B1"))
    publisher.stage(
        DepositFulfilled(
            booking_id="B1",
            total_paid=Decimal("180.00"),
            required_amount=Decimal("180.00"),
            fully_paid=False,
            fulfilled_at=APPROVED_AT,
        )
    )

    with patch("venue_booking.events.publisher.logger") as mock_logger:
        delivered = publisher.flush()

    assert delivered == 1
    assert sender.send.call_count == 2
    mock_logger.warning.assert_called_once()
    assert publisher.pending == []


def test_default_sender_logs() -> None:
    publisher = NotificationPublisher()
    assert isinstance(publisher.sender, LoggingNotificationSender)

    with patch("venue_booking.events.publisher.logger") as mock_logger:
        publisher.stage(_approved())
        publisher.flush()

    mock_logger.info.assert_called_once()
    assert mock_logger.info.call_args.args[1] == "BookingApproved"
