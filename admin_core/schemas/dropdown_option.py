# File: admin_core/schemas/dropdown_option.py

"""
Pydantic schemas for dropdown options.

A dropdown option is a grouped multi-language entity: one row per language,
all sharing the same ``unique_code``.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from admin_core.schemas.common import TimestampedModel
from admin_core.schemas.language import LanguageSummary


class DropdownOption(TimestampedModel):
    id: str
    public_id: str
    unique_code: int
    language_id: str
    language: Optional[LanguageSummary] = None
    name: str
    dropdown_type: str
    country_short_code: Optional[str] = None
    is_default: bool = False
    status: bool = True
    use_count: int = 0


class DropdownOptionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    country_short_code: Optional[str] = Field(None, max_length=10)
    is_default: bool = False
    status: bool = True
    language_public_id: Optional[str] = Field(
        None, description="Create a single variant for this language instead of all"
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class DropdownOptionUpdate(BaseModel):
    """Only the name and status of a single variant may change."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[bool] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class BulkAction(str, Enum):
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
    DELETE = "delete"
