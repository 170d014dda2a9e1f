# File: admin_core/repositories/base_repository.py

"""
Repository contract shared by the relational and document backends.

Filters are plain dictionaries keyed by canonical field names. A value that is
a list, tuple or set matches any of its members; anything else is an equality
test. Each backend translates canonical names to its own storage names and
maps native rows back to canonical models right after every read.
"""

import logging
from abc import ABC, abstractmethod
from functools import wraps
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar

from pymongo.errors import DuplicateKeyError
from sqlalchemy.exc import IntegrityError

from admin_core.core.exceptions import (
    AdminCoreException,
    ConflictException,
    OperationFailedException,
)
from admin_core.schemas.common import FindOptions, PaginatedResult, PaginationOptions

T = TypeVar("T")
logger = logging.getLogger(__name__)

Filter = Dict[str, Any]


UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(error: Exception) -> bool:
    """
    Tell unique-key violations apart from other integrity failures such as
    foreign key or not-null violations.
    """
    if isinstance(error, DuplicateKeyError):
        return True
    orig = getattr(error, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    return "unique constraint" in str(orig or error).lower()


def violated_key(error: Exception) -> str:
    """Best-effort name of the unique key behind a violation."""
    details = getattr(error, "details", None) or {}
    if details.get("keyPattern"):
        return ", ".join(details["keyPattern"])
    orig = getattr(error, "orig", None)
    constraint = getattr(getattr(orig, "__cause__", None), "constraint_name", None)
    if constraint:
        return constraint
    # SQLite: "UNIQUE constraint failed: table.column, ..."
    message = str(orig or error)
    if message.startswith("UNIQUE constraint failed:"):
        return message.split(":", 1)[1].strip()
    return "unknown"


def handle_backend_errors(operation: str):
    """
    Translate storage driver errors raised by a repository coroutine.

    Domain errors pass through unchanged. Unique-key violations become
    ConflictException; every other failure, other integrity violations
    included, becomes OperationFailedException.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except AdminCoreException:
                raise
            except (IntegrityError, DuplicateKeyError) as e:
                if not is_unique_violation(e):
                    logger.error(f"Integrity violation during {operation} on {self.entity_type}: {e}")
                    raise OperationFailedException(f"{operation} {self.entity_type}", str(e)) from e
                logger.warning(f"Unique constraint violated during {operation} on {self.entity_type}: {e}")
                raise ConflictException(self.entity_type, "unique key", violated_key(e)) from e
            except Exception as e:
                logger.error(f"Backend failure during {operation} on {self.entity_type}: {e}", exc_info=True)
                raise OperationFailedException(f"{operation} {self.entity_type}", str(e)) from e

        return wrapper

    return decorator


class BaseRepository(ABC, Generic[T]):
    """
    Async repository contract for one entity kind.

    Attributes:
        entity_type: Human-readable entity name used in errors and logs
        search_fields: Default fields for free-text search
    """

    entity_type: str = "Entity"
    search_fields: Sequence[str] = ()

    @abstractmethod
    async def insert(self, data: Dict[str, Any]) -> T:
        """Insert one record and return it in canonical form."""

    @abstractmethod
    async def insert_many(self, rows: List[Dict[str, Any]]) -> List[T]:
        """
        Insert a batch of records all-or-nothing.

        Raises:
            ConflictException: If any row violates a unique key; no row of the
                batch remains stored
        """

    @abstractmethod
    async def get_detail(self, filter: Filter) -> Optional[T]:
        """Return the first record matching the filter, or None."""

    @abstractmethod
    async def update_by_id(self, id: str, data: Dict[str, Any]) -> Optional[T]:
        """Update a record by internal key; None when it does not exist."""

    @abstractmethod
    async def delete_by_id(self, id: str) -> bool:
        """Delete a record by internal key; False when nothing was removed."""

    @abstractmethod
    async def find_many(
        self, filter: Optional[Filter] = None, options: Optional[FindOptions] = None
    ) -> List[T]:
        """Return all records matching the filter."""

    @abstractmethod
    async def count(self, filter: Optional[Filter] = None) -> int:
        """Count records matching the filter."""

    @abstractmethod
    async def update_many(self, filter: Filter, data: Dict[str, Any]) -> int:
        """Apply the same change to every matching record; returns matched rows."""

    @abstractmethod
    async def delete_many(self, filter: Filter) -> int:
        """Delete every matching record; returns removed rows."""

    @abstractmethod
    async def increment(self, id: str, field: str, amount: int = 1) -> bool:
        """Atomically add to a numeric field."""

    @abstractmethod
    async def _search(
        self,
        term: str,
        search_fields: Sequence[str],
        filter: Optional[Filter],
        options: FindOptions,
    ) -> List[T]:
        pass

    @abstractmethod
    async def _search_count(
        self, term: str, search_fields: Sequence[str], filter: Optional[Filter]
    ) -> int:
        pass

    # Operations built on the primitives above

    async def get_by_public_id(self, public_id: str) -> Optional[T]:
        return await self.get_detail({"public_id": public_id})

    async def exists(self, filter: Filter) -> bool:
        return await self.get_detail(filter) is not None

    async def find_with_pagination(
        self, filter: Optional[Filter], options: PaginationOptions
    ) -> PaginatedResult:
        """
        Return one page of matching records with pagination metadata.

        Args:
            filter: Canonical filter
            options: Page, page size and sort

        Returns:
            PaginatedResult envelope
        """
        items = await self.find_many(filter, options.to_find_options())
        total = await self.count(filter)
        return PaginatedResult.build(items, total, options)

    async def find_with_pagination_and_search(
        self,
        term: Optional[str],
        search_fields: Optional[Sequence[str]],
        filter: Optional[Filter],
        options: PaginationOptions,
    ) -> PaginatedResult:
        """
        Same as find_with_pagination, narrowed by a case-insensitive substring
        match of ``term`` on any of ``search_fields``.
        """
        term = (term or "").strip()
        fields = list(search_fields or self.search_fields)
        if not term or not fields:
            return await self.find_with_pagination(filter, options)

        items = await self._search(term, fields, filter, options.to_find_options())
        total = await self._search_count(term, fields, filter)
        return PaginatedResult.build(items, total, options)


class GroupedEntityRepository(BaseRepository[T]):
    """Contract additions for entities replicated once per language."""

    async def find_by_unique_code(self, unique_code: int) -> List[T]:
        return await self.find_many(
            {"unique_code": unique_code}, FindOptions(sort={"created_at": 1})
        )

    async def delete_by_unique_code(self, unique_code: int) -> int:
        return await self.delete_many({"unique_code": unique_code})

    async def bulk_update_by_public_ids(self, public_ids: List[str], data: Dict[str, Any]) -> int:
        return await self.update_many({"public_id": list(public_ids)}, data)

    async def bulk_delete_by_public_ids(self, public_ids: List[str]) -> int:
        return await self.delete_many({"public_id": list(public_ids)})

    async def increment_use_count(self, id: str) -> bool:
        return await self.increment(id, "use_count", 1)
