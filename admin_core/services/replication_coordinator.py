# File: admin_core/services/replication_coordinator.py

"""
Entity replication across languages.

A grouped entity is stored as one row per language. All rows of one logical
entity share a ten-digit ``unique_code``; each row has its own public id and
references its language by internal key. Groups may be partial: a language
added after creation simply has no row in older groups.

Unique codes are drawn at random and checked for existence. Two concurrent
writers may still draw the same code between the check and the insert; the
(unique_code, language_id) constraint rejects the second batch, which is
removed as a whole and retried with a fresh code.
"""

import logging
import random
import uuid
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, TypeVar

from admin_core.core.exceptions import (
    AdminCoreException,
    ConfigurationException,
    ConflictException,
    EntityNotFoundException,
    GenerationExhaustedException,
    InUseException,
)
from admin_core.repositories.base_repository import GroupedEntityRepository
from admin_core.services.language_service import LanguageService

T = TypeVar("T")
logger = logging.getLogger(__name__)

UNIQUE_CODE_MIN = 1_000_000_000
UNIQUE_CODE_MAX = 9_999_999_999
DEFAULT_MAX_ATTEMPTS = 100


def random_unique_code() -> int:
    return random.randint(UNIQUE_CODE_MIN, UNIQUE_CODE_MAX)


class BulkOutcome(Generic[T]):
    """
    Per-row result of a bulk operation.

    Attributes:
        rows: Rows actually mutated
        processed: Requested public ids that were acted on
        skipped: Requested public ids that were missing or ineligible
    """

    def __init__(self):
        self.rows: List[T] = []
        self.processed: List[str] = []
        self.skipped: List[str] = []

    @property
    def count(self) -> int:
        return len(self.rows)


class EntityReplicationCoordinator(Generic[T]):
    """
    Creates, updates and deletes the per-language rows of grouped entities.

    One coordinator exists per grouped entity kind.
    """

    def __init__(
        self,
        repository: GroupedEntityRepository[T],
        language_service: LanguageService,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        code_generator: Callable[[], int] = random_unique_code,
    ):
        """
        Args:
            repository: Repository of the grouped entity
            language_service: Source of the active language set
            max_attempts: Bound on unique code draws
            code_generator: Draws a candidate unique code
        """
        self.repository = repository
        self.language_service = language_service
        self.max_attempts = max_attempts
        self.code_generator = code_generator

    @property
    def entity_type(self) -> str:
        return self.repository.entity_type

    async def generate_unique_code(self) -> int:
        """
        Draw a unique code not used by any stored row.

        Raises:
            GenerationExhaustedException: After ``max_attempts`` collisions
        """
        for attempt in range(1, self.max_attempts + 1):
            code = self.code_generator()
            if not await self.repository.exists({"unique_code": code}):
                return code
            logger.debug(f"{self.entity_type} unique code {code} taken (attempt {attempt})")

        logger.error(f"Unique code generation for {self.entity_type} exhausted after {self.max_attempts} attempts")
        raise GenerationExhaustedException(self.entity_type, self.max_attempts)

    async def create_for_all_languages(
        self,
        content: Dict[str, Any],
        explicit_language_id: Optional[str] = None,
        unique_code: Optional[int] = None,
        variant_content: Optional[Mapping[str, Dict[str, Any]]] = None,
    ) -> List[T]:
        """
        Create one row per active language, all sharing a fresh unique code.

        Args:
            content: Fields common to every variant
            explicit_language_id: Create a single row for this language instead
            unique_code: Use this code instead of drawing one; a collision is
                then a ConflictException rather than a retry
            variant_content: Per-language field overrides keyed by language id

        Returns:
            The created rows, in language order

        Raises:
            ConfigurationException: If there is no active language
            GenerationExhaustedException: If no free code could be found
        """
        if explicit_language_id:
            language_ids = [explicit_language_id]
        else:
            language_ids = await self.language_service.active_language_ids()
        if not language_ids:
            raise ConfigurationException(
                f"Cannot create {self.entity_type}: no active languages",
                details={"entity_type": self.entity_type},
            )

        variant_content = variant_content or {}
        attempt = 0
        while True:
            attempt += 1
            code = unique_code if unique_code is not None else await self.generate_unique_code()
            rows = [
                {
                    **content,
                    **variant_content.get(language_id, {}),
                    "unique_code": code,
                    "language_id": language_id,
                    "public_id": str(uuid.uuid4()),
                }
                for language_id in language_ids
            ]
            try:
                created = await self.repository.insert_many(rows)
            except ConflictException:
                if unique_code is not None:
                    raise
                if attempt >= self.max_attempts:
                    raise GenerationExhaustedException(self.entity_type, attempt)
                logger.warning(f"{self.entity_type} unique code {code} claimed concurrently, retrying")
                continue

            logger.info(f"Created {len(created)} {self.entity_type} variant(s) with unique code {code}")
            return created

    async def find_group(self, unique_code: int) -> List[T]:
        return await self.repository.find_by_unique_code(unique_code)

    async def update_variant(self, unique_code: int, language_id: str, patch: Dict[str, Any]) -> T:
        """
        Update the single row of a group for one language; siblings are untouched.

        Raises:
            EntityNotFoundException: If the group has no row for that language
        """
        row = await self.repository.get_detail({"unique_code": unique_code, "language_id": language_id})
        if row is None:
            raise EntityNotFoundException(self.entity_type, f"{unique_code}/{language_id}")

        updated = await self.repository.update_by_id(row.id, patch)
        if updated is None:
            raise EntityNotFoundException(self.entity_type, f"{unique_code}/{language_id}")
        return updated

    async def delete_group(self, unique_code: int) -> int:
        """
        Hard-delete every row of a group.

        Returns:
            Number of rows removed

        Raises:
            EntityNotFoundException: If the group is empty
            InUseException: If any variant has a positive use count; nothing is deleted
        """
        return len(await self.remove_group(unique_code))

    async def remove_group(self, unique_code: int) -> List[T]:
        """
        Same as delete_group, returning the removed rows so callers can clean
        up what they reference.

        Raises:
            EntityNotFoundException: If the group is empty
            InUseException: If any variant has a positive use count; nothing is deleted
        """
        rows = await self.repository.find_by_unique_code(unique_code)
        if not rows:
            raise EntityNotFoundException(self.entity_type, unique_code)

        in_use = sum(row.use_count for row in rows)
        if in_use > 0:
            raise InUseException(self.entity_type, unique_code, in_use)

        deleted = await self.repository.delete_by_unique_code(unique_code)
        logger.info(f"Deleted {deleted} {self.entity_type} variant(s) with unique code {unique_code}")
        return rows

    async def soft_deactivate(self, public_id: str) -> T:
        """Mark a single row inactive; the rest of its group is untouched."""
        row = await self.repository.get_by_public_id(public_id)
        if row is None:
            raise EntityNotFoundException(self.entity_type, public_id)
        return await self.repository.update_by_id(row.id, {"status": False})

    async def bulk_update_by_public_ids(self, public_ids: List[str], patch: Dict[str, Any]) -> BulkOutcome[T]:
        """
        Apply the same patch to many rows, possibly from different groups.

        Missing ids are skipped and reported; rows that were found are updated
        even when others fail.
        """
        outcome: BulkOutcome[T] = BulkOutcome()
        for public_id in dict.fromkeys(public_ids):
            row = await self.repository.get_by_public_id(public_id)
            updated = await self.repository.update_by_id(row.id, patch) if row else None
            if updated is None:
                outcome.skipped.append(public_id)
                continue
            outcome.rows.append(updated)
            outcome.processed.append(public_id)
        return outcome

    async def bulk_delete_by_public_ids(
        self, public_ids: List[str], expand_groups: bool = False
    ) -> BulkOutcome[T]:
        """
        Hard-delete many rows.

        Args:
            public_ids: Rows to delete
            expand_groups: Delete every variant of each row's group instead of
                the row alone

        Rows in use, or groups with a variant in use, are skipped.
        """
        outcome: BulkOutcome[T] = BulkOutcome()
        deleted_codes = set()
        for public_id in dict.fromkeys(public_ids):
            row = await self.repository.get_by_public_id(public_id)
            if row is None:
                if expand_groups and public_id in {r.public_id for r in outcome.rows}:
                    # Already removed as a sibling of an earlier id
                    outcome.processed.append(public_id)
                else:
                    outcome.skipped.append(public_id)
                continue

            if expand_groups:
                if row.unique_code in deleted_codes:
                    outcome.processed.append(public_id)
                    continue
                try:
                    outcome.rows.extend(await self.remove_group(row.unique_code))
                except (InUseException, EntityNotFoundException):
                    outcome.skipped.append(public_id)
                    continue
                deleted_codes.add(row.unique_code)
            else:
                if row.use_count > 0 or not await self.repository.delete_by_id(row.id):
                    outcome.skipped.append(public_id)
                    continue
                outcome.rows.append(row)
            outcome.processed.append(public_id)
        return outcome

    async def find_single(
        self,
        public_id: str,
        language_id: Optional[str] = None,
        extra_filter: Optional[Dict[str, Any]] = None,
    ) -> T:
        """
        Resolve the variant of a row's group for one language.

        Args:
            public_id: Public id of any variant of the group
            language_id: Internal key of the wanted language; the default
                language when omitted
            extra_filter: Canonical fields the rows must match

        Raises:
            EntityNotFoundException: If the row, or the group's variant for
                that language, does not exist
        """
        extra_filter = extra_filter or {}
        anchor = await self.repository.get_detail({"public_id": public_id, **extra_filter})
        if anchor is None:
            raise EntityNotFoundException(self.entity_type, public_id)

        if language_id is None:
            language_id = (await self.language_service.get_default()).id
        if anchor.language_id == language_id:
            return anchor

        row = await self.repository.get_detail(
            {**extra_filter, "unique_code": anchor.unique_code, "language_id": language_id}
        )
        if row is None:
            raise EntityNotFoundException(self.entity_type, f"{public_id}/{language_id}")
        return row

    async def increment_use_count(self, public_id: str) -> bool:
        """
        Record one more reference to a row.

        Failures are logged and reported as False; callers never fail because
        a usage counter could not be bumped.
        """
        try:
            row = await self.repository.get_by_public_id(public_id)
            if row is None:
                logger.warning(f"Cannot increment use count: {self.entity_type} {public_id} not found")
                return False
            return await self.repository.increment_use_count(row.id)
        except AdminCoreException as e:
            logger.warning(f"Failed to increment use count for {self.entity_type} {public_id}: {e}")
            return False
