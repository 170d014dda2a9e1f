# File: admin_core/schemas/common.py

"""
Shared schema building blocks: the canonical entity base, pagination envelopes
and bulk operation results.

Every backend maps its native rows or documents into a ``CanonicalModel``
subclass right after reading. Attribute names are snake_case in Python and
camelCase in responses.
"""

import math
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Internal keys that must never leave the service layer
INTERNAL_FIELDS = {"id", "language_id"}


class CanonicalModel(BaseModel):
    """Base for entity shapes shared by both storage backends."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_response(self) -> Dict[str, Any]:
        """Serialize for external consumers, without internal keys."""
        return self.model_dump(by_alias=True, exclude=INTERNAL_FIELDS, mode="json")


class TimestampedModel(CanonicalModel):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FindOptions(BaseModel):
    """Sort and window options for list reads."""

    sort: Dict[str, int] = Field(
        default_factory=dict,
        description="Canonical field name mapped to 1 (ascending) or -1 (descending)",
    )
    skip: int = Field(0, ge=0)
    limit: Optional[int] = Field(None, ge=1)


class PaginationOptions(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    sort: Dict[str, int] = Field(default_factory=lambda: {"created_at": -1})

    @field_validator("sort")
    @classmethod
    def validate_sort(cls, v: Dict[str, int]) -> Dict[str, int]:
        for field, direction in v.items():
            if direction not in (1, -1):
                raise ValueError(f"Sort direction for '{field}' must be 1 or -1")
        return v

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def to_find_options(self) -> FindOptions:
        return FindOptions(sort=self.sort, skip=self.skip, limit=self.limit)


class PaginationMeta(CanonicalModel):
    current_page: int
    total_pages: int
    total_count: int
    limit: int
    has_next: bool
    has_prev: bool


class PaginatedResult(BaseModel, Generic[T]):
    """The ``{items, pagination}`` envelope returned by list operations."""

    items: List[T]
    pagination: PaginationMeta

    @classmethod
    def build(cls, items: List[T], total_count: int, options: PaginationOptions):
        total_pages = math.ceil(total_count / options.limit) if total_count else 0
        return cls(
            items=items,
            pagination=PaginationMeta(
                current_page=options.page,
                total_pages=total_pages,
                total_count=total_count,
                limit=options.limit,
                has_next=options.page < total_pages,
                has_prev=options.page > 1,
            ),
        )

    def to_response(self) -> Dict[str, Any]:
        return {
            "items": [
                item.to_response() if isinstance(item, CanonicalModel) else item
                for item in self.items
            ],
            "pagination": self.pagination.model_dump(by_alias=True),
        }


class BulkOperationResult(CanonicalModel):
    """
    Outcome of a best-effort bulk operation.

    Attributes:
        count: Storage rows actually mutated
        affected_rows: Requested public ids that were acted on
        skipped: Requested public ids that were missing or ineligible
        message: Human-readable summary from the message catalog
    """

    count: int = 0
    affected_rows: int = 0
    skipped: List[str] = Field(default_factory=list)
    message: Optional[str] = None


class PrincipalContext(BaseModel):
    """The acting principal; only its id is read, for audit logging."""

    principal_id: Optional[str] = None
