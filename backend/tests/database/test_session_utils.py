from unittest.mock import Mock

import pytest
from sqlalchemy.exc import UnboundExecutionError

from venue_booking.database.session_utils import supports_row_locks


def _session(dialect_name: str) -> Mock:
    session = Mock()
    session.get_bind.return_value.dialect.name = dialect_name
    return session


@pytest.mark.parametrize("dialect_name, expected", [("postgresql", True), ("mysql", True), ("sqlite", False)])
def test_supports_row_locks_by_dialect(dialect_name, expected) -> None:
    assert supports_row_locks(_session(dialect_name)) is expected


def test_unbound_session_has_no_row_locks() -> None:
    session = Mock()
    session.get_bind.side_effect = UnboundExecutionError("no bind")

    assert supports_row_locks(session) is False


def test_sqlite_test_session(db) -> None:
    assert supports_row_locks(db) is False
