# backend/venue_booking/services/base.py
"""
Base Service Pattern for the venue booking engine

Every service shares one unit-of-work helper: commit, then send the
notifications staged during the block; on failure, roll back and drop them.
Services also record per-operation timings in-process.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from functools import wraps
import logging
import time
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ServiceException
from ..events.publisher import NotificationPublisher

logger = logging.getLogger(__name__)

SLOW_OPERATION_SECONDS = 1.0


@dataclass
class OperationStats:
    """Running timing totals for one measured operation."""

    count: int = 0
    success_count: int = 0
    total_time: float = 0.0
    min_time: float = float("inf")
    max_time: float = 0.0

    @property
    def failure_count(self) -> int:
        return self.count - self.success_count

    def record(self, elapsed: float, success: bool) -> None:
        self.count += 1
        self.success_count += int(success)
        self.total_time += elapsed
        self.min_time = min(self.min_time, elapsed)
        self.max_time = max(self.max_time, elapsed)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "success_rate": self.success_count / self.count,
            "total_time": self.total_time,
            "avg_time": self.total_time / self.count,
            "min_time": self.min_time,
            "max_time": self.max_time,
        }


class BaseService:
    """Common base for services: session, publisher, transaction and timing helpers."""

    # Shared across instances, keyed by service class name then operation
    _class_metrics: Dict[str, Dict[str, OperationStats]] = {}

    def __init__(self, db: Session, publisher: Optional[NotificationPublisher] = None):
        self.db = db
        self.publisher = publisher or NotificationPublisher()
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Unit of work around ``self.db``.

        On success the session is committed and staged notifications are sent.
        On any failure the session is rolled back and staged notifications are
        discarded; SQLAlchemy errors are re-raised as ``ServiceException``.
        """
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as e:
            self._abort(f"Transaction failed: {e}")
            raise ServiceException(f"Database operation failed: {e}") from e
        except Exception as e:
            self._abort(f"Transaction aborted: {e}")
            raise

        self.logger.debug("Transaction committed")
        self.publisher.flush()

    def _abort(self, message: str) -> None:
        self.logger.error(message)
        self.db.rollback()
        self.publisher.discard()

    @staticmethod
    def measure_operation(operation_name: str) -> Callable:
        """
        Decorator timing a service method and recording the outcome.

        Usage:
            @BaseService.measure_operation("approve_booking")
            def approve_booking(self, booking_id): ...
        """

        F = TypeVar("F", bound=Callable[..., Any])

        def decorator(func: F) -> F:
            func._operation_name = operation_name
            func._is_measured = True

            @wraps(func)
            def wrapper(self, *args, **kwargs):
                with self.measure_operation_context(operation_name):
                    return func(self, *args, **kwargs)

            return cast(F, wrapper)

        return decorator

    @contextmanager
    def measure_operation_context(self, operation_name: str) -> Iterator[None]:
        """Time a block; used for hot inner steps such as the per-day sweep."""
        started = time.time()
        success = False
        try:
            yield
            success = True
        finally:
            elapsed = time.time() - started
            self._record_metric(operation_name, elapsed, success)
            if elapsed > SLOW_OPERATION_SECONDS:
                self.logger.warning(f"Slow operation: {operation_name} took {elapsed:.2f}s")

    def log_operation(self, operation: str, **context) -> None:
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})

    def _record_metric(self, operation: str, elapsed: float, success: bool) -> None:
        per_service = BaseService._class_metrics.setdefault(self.__class__.__name__, {})
        per_service.setdefault(operation, OperationStats()).record(elapsed, success)

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Per-operation timing summary for this service class, skipping unused entries."""
        per_service = BaseService._class_metrics.get(self.__class__.__name__, {})
        return {name: stats.snapshot() for name, stats in per_service.items() if stats.count}

    def reset_metrics(self) -> None:
        BaseService._class_metrics.pop(self.__class__.__name__, None)
        self.logger.info(f"Metrics reset for {self.__class__.__name__}")
