# File: admin_core/schemas/payment_gateway.py

"""
Pydantic schemas for payment gateway configuration.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from admin_core.schemas.common import TimestampedModel

PaymentMode = Literal["sandbox", "live"]


class PaymentGateway(TimestampedModel):
    id: str
    public_id: str
    title: str
    payment_slug: str
    payment_mode: str = "sandbox"
    sandbox_details: Dict[str, Any] = Field(default_factory=dict)
    live_details: Dict[str, Any] = Field(default_factory=dict)
    is_default: bool = False
    status: bool = True


def _normalize_slug(v):
    return v.strip().lower() if isinstance(v, str) else v


class PaymentGatewayCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    payment_slug: str = Field(..., min_length=1, max_length=100)
    payment_mode: PaymentMode = "sandbox"
    sandbox_details: Dict[str, Any] = Field(default_factory=dict)
    live_details: Dict[str, Any] = Field(default_factory=dict)
    is_default: bool = False
    status: bool = True

    @field_validator("payment_slug", mode="before")
    @classmethod
    def normalize_slug(cls, v):
        return _normalize_slug(v)


class PaymentGatewayUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    payment_slug: Optional[str] = Field(None, min_length=1, max_length=100)
    payment_mode: Optional[PaymentMode] = None
    sandbox_details: Optional[Dict[str, Any]] = None
    live_details: Optional[Dict[str, Any]] = None
    is_default: Optional[bool] = None
    status: Optional[bool] = None

    @field_validator("payment_slug", mode="before")
    @classmethod
    def normalize_slug(cls, v):
        return _normalize_slug(v)
