# File: admin_core/db/models/base.py
"""
Base model and mixins for the relational backend.

Rows use application-generated string keys: ``id`` is the internal key used
for updates and deletes, ``public_id`` is the stable identifier exposed to
callers.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class KeyMixin:
    """Internal and public string keys."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    public_id: Mapped[str] = mapped_column(
        String(36), unique=True, nullable=False, default=_uuid, index=True
    )


class TimestampMixin:
    """
    Mixin providing automatic timestamp functionality.

    Adds created_at and updated_at timestamps that are automatically
    maintained when records are created or updated.
    """

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, onupdate=_utcnow
    )


class GroupedEntityMixin:
    """Columns shared by every per-language variant of a grouped entity."""

    # Ten-digit codes overflow a 32-bit INTEGER
    unique_code: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    use_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
