"""Notification publisher - holds events until the surrounding transaction commits."""
from datetime import datetime
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)


class Event(Protocol):
    """Protocol for event types."""

    def to_dict(self) -> Dict[str, Any]:
        ...


class NotificationSender(Protocol):
    """Delivers one notification. Implementations may raise on transport failure."""

    def send(self, event_type: str, payload: Dict[str, Any]) -> None:
        ...


class LoggingNotificationSender:
    """Default sender: writes each notification to the log."""

    def send(self, event_type: str, payload: Dict[str, Any]) -> None:
        logger.info("Notification %s: %s", event_type, payload)


def serialize_payload(event: Event) -> Dict[str, Any]:
    payload = event.to_dict()
    for key, value in payload.items():
        if isinstance(value, datetime):
            payload[key] = value.isoformat()
        elif isinstance(value, Decimal):
            payload[key] = str(value)
    return payload


class NotificationPublisher:
    """
    Stages domain events during a unit of work.

    ``flush`` is called by the service after commit and ``discard`` after a
    rollback. Sender failures are logged and never propagate.
    """

    def __init__(self, sender: Optional[NotificationSender] = None):
        self.sender = sender or LoggingNotificationSender()
        self._pending: List[Event] = []

    @property
    def pending(self) -> List[Event]:
        return list(self._pending)

    def stage(self, event: Event) -> None:
        self._pending.append(event)

    def discard(self) -> None:
        if self._pending:
            logger.debug("Discarding %d staged notifications", len(self._pending))
        self._pending.clear()

    def flush(self) -> int:
        """Send everything staged. Returns the number delivered."""
        events, self._pending = self._pending, []
        delivered = 0
        for event in events:
            event_type = type(event).__name__
            try:
                self.sender.send(event_type, serialize_payload(event))
                delivered += 1
            except Exception as e:
                logger.warning("Failed to send %s notification: %s", event_type, str(e))
        return delivered
