"""
Dialect checks for queries whose SQL differs between backends.
"""

from __future__ import annotations

from sqlalchemy.exc import UnboundExecutionError
from sqlalchemy.orm import Session

# Dialects that silently ignore SELECT ... FOR UPDATE
_NO_ROW_LOCK_DIALECTS = frozenset({"sqlite"})


def supports_row_locks(session: Session) -> bool:
    """Whether ``with_for_update`` takes effect on the session's backend. Unbound sessions answer False."""
    try:
        bind = session.get_bind()
    except UnboundExecutionError:
        return False
    return bind.dialect.name not in _NO_ROW_LOCK_DIALECTS
