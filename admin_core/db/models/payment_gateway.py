# File: admin_core/db/models/payment_gateway.py

from typing import Any, Dict

from sqlalchemy import JSON, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from admin_core.db.models.base import Base, KeyMixin, TimestampMixin


class PaymentGatewayModel(Base, KeyMixin, TimestampMixin):
    """Payment gateway configuration; at most one row has is_default set."""

    __tablename__ = "payment_gateways"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    payment_slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    payment_mode: Mapped[str] = mapped_column(String(10), default="sandbox", nullable=False)
    sandbox_details: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    live_details: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
