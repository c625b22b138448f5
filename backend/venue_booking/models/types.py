# backend/venue_booking/models/types.py
"""
Column helpers shared by the booking models.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Type

from sqlalchemy import Enum as SAEnum
import ulid


def _now_utc() -> datetime:
    """Return timezone-aware UTC timestamp for default factories."""
    return datetime.now(timezone.utc)


def new_ulid() -> str:
    return str(ulid.ULID())


def enum_column(enum_cls: Type[Enum], length: int = 20) -> SAEnum:
    """
    Store an Enum by value in a VARCHAR column and load it back as a member.

    CHECK constraints are left to migrations; the ORM rejects unknown values.
    """
    return SAEnum(
        enum_cls,
        native_enum=False,
        create_constraint=False,
        length=length,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )
