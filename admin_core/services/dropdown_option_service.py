# File: admin_core/services/dropdown_option_service.py

"""
Dropdown option service.

Dropdown options are grouped per ``dropdown_type`` ("industry", "country",
...). Creating one writes a variant for every active language; edits touch a
single variant; deleting by unique code removes the whole group.
"""

import logging
import re
from typing import List, Optional

from admin_core.core.exceptions import (
    ConflictException,
    EntityNotFoundException,
    ValidationException,
)
from admin_core.core.messages import MessageCatalog
from admin_core.schemas.common import (
    BulkOperationResult,
    FindOptions,
    PaginatedResult,
    PaginationOptions,
    PrincipalContext,
)
from admin_core.schemas.dropdown_option import (
    BulkAction,
    DropdownOption,
    DropdownOptionCreate,
    DropdownOptionUpdate,
)
from admin_core.services.base_service import BaseService
from admin_core.services.language_service import LanguageService
from admin_core.services.replication_coordinator import EntityReplicationCoordinator

logger = logging.getLogger(__name__)

DROPDOWN_TYPE_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1,50}$")

BULK_STATUS = {
    BulkAction.ACTIVATE: (True, "bulk.activated"),
    BulkAction.DEACTIVATE: (False, "bulk.deactivated"),
    # Bulk delete is a soft delete
    BulkAction.DELETE: (False, "bulk.deleted"),
}


def normalize_dropdown_type(dropdown_type: str) -> str:
    """
    Lower-case and validate a dropdown type.

    Raises:
        ValidationException: If the type is empty, too long or has invalid characters
    """
    value = (dropdown_type or "").strip().lower()
    if not DROPDOWN_TYPE_PATTERN.match(value):
        raise ValidationException(
            "Dropdown type must be 1-50 characters of letters, numbers, hyphens or underscores",
            field="dropdown_type",
            value=dropdown_type,
        )
    return value


class DropdownOptionService(BaseService[DropdownOption]):
    """
    Service for managing dropdown options.

    Provides functionality for:
    - Creating options for every active language at once
    - Per-language edits and lookups
    - Group deletion guarded by use counts
    - Bulk status changes
    """

    entity_type = "DropdownOption"

    def __init__(
        self,
        coordinator: EntityReplicationCoordinator[DropdownOption],
        language_service: LanguageService,
        messages: Optional[MessageCatalog] = None,
        principal: Optional[PrincipalContext] = None,
    ):
        super().__init__(coordinator.repository, messages=messages, principal=principal)
        self.coordinator = coordinator
        self.language_service = language_service

    async def create(self, dropdown_type: str, data: DropdownOptionCreate) -> List[DropdownOption]:
        """
        Create a dropdown option in every active language.

        Args:
            dropdown_type: Type the option belongs to
            data: Option fields; ``language_public_id`` restricts creation to one language

        Returns:
            The created variants

        Raises:
            ValidationException: If the dropdown type is invalid
            ConflictException: If the type already has an option with this name
        """
        dropdown_type = normalize_dropdown_type(dropdown_type)
        if await self.repository.name_exists_in_type(data.name, dropdown_type):
            raise ConflictException(self.entity_type, "name", data.name)

        language_id = None
        if data.language_public_id:
            language_id = await self.language_service.resolve_language_id(data.language_public_id)

        content = data.model_dump(exclude={"language_public_id"})
        content["dropdown_type"] = dropdown_type
        content["use_count"] = 0

        created = await self.coordinator.create_for_all_languages(content, explicit_language_id=language_id)
        self._log_operation(
            "create",
            self.entity_type,
            created[0].unique_code,
            {"dropdown_type": dropdown_type, "variants": len(created)},
        )
        return created

    async def list(
        self,
        dropdown_type: str,
        options: Optional[PaginationOptions] = None,
        search: Optional[str] = None,
        language_public_id: Optional[str] = None,
        status: Optional[bool] = None,
    ) -> PaginatedResult:
        """Admin listing of one type, in one language (the default when omitted)."""
        filter = {
            "dropdown_type": normalize_dropdown_type(dropdown_type),
            "language_id": await self.language_service.resolve_language_id(language_public_id),
        }
        if status is not None:
            filter["status"] = status
        return await self.repository.find_with_pagination_and_search(
            search, None, filter, options or PaginationOptions()
        )

    async def list_active(
        self, dropdown_type: str, language_public_id: Optional[str] = None
    ) -> List[DropdownOption]:
        """Active options of one type for front-end selectors, sorted by name."""
        return await self.repository.find_many(
            {
                "dropdown_type": normalize_dropdown_type(dropdown_type),
                "language_id": await self.language_service.resolve_language_id(language_public_id),
                "status": True,
            },
            FindOptions(sort={"name": 1}),
        )

    async def find_single_by_type_and_language(
        self,
        dropdown_type: str,
        public_id: str,
        language_public_id: Optional[str] = None,
    ) -> DropdownOption:
        """
        Resolve the variant of an option in one language.

        Raises:
            EntityNotFoundException: If the option or its variant does not exist
        """
        language_id = None
        if language_public_id:
            language_id = await self.language_service.resolve_language_id(language_public_id)
        return await self.coordinator.find_single(
            public_id,
            language_id,
            extra_filter={"dropdown_type": normalize_dropdown_type(dropdown_type)},
        )

    async def update(
        self, dropdown_type: str, public_id: str, data: DropdownOptionUpdate
    ) -> DropdownOption:
        """
        Update the name or status of a single variant.

        Raises:
            EntityNotFoundException: If the variant does not exist in this type
            ConflictException: If another option of the type already has the name
        """
        dropdown_type = normalize_dropdown_type(dropdown_type)
        option = await self.repository.get_detail({"public_id": public_id, "dropdown_type": dropdown_type})
        if option is None:
            raise EntityNotFoundException(self.entity_type, public_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in changes and changes["name"].lower() != option.name.lower():
            if await self.repository.name_exists_in_type(
                changes["name"], dropdown_type, exclude_unique_code=option.unique_code
            ):
                raise ConflictException(self.entity_type, "name", changes["name"])
        if not changes:
            return option

        updated = await self.coordinator.update_variant(option.unique_code, option.language_id, changes)
        self._log_operation("update", self.entity_type, public_id, {"fields": sorted(changes)})
        return updated

    async def delete_by_unique_code(self, dropdown_type: str, unique_code: int) -> int:
        """
        Hard-delete every variant of an option.

        Returns:
            Number of variants removed

        Raises:
            EntityNotFoundException: If no variant has this code
            ValidationException: If the group belongs to another type
            InUseException: If any variant is in use
        """
        dropdown_type = normalize_dropdown_type(dropdown_type)
        rows = await self.coordinator.find_group(unique_code)
        if not rows:
            raise EntityNotFoundException(self.entity_type, unique_code)
        if any(row.dropdown_type != dropdown_type for row in rows):
            raise ValidationException(
                f"Dropdown option {unique_code} does not belong to type '{dropdown_type}'",
                field="dropdown_type",
                value=dropdown_type,
            )

        deleted = await self.coordinator.delete_group(unique_code)
        self._log_operation("delete", self.entity_type, unique_code, {"variants": deleted})
        return deleted

    async def delete(self, public_id: str) -> DropdownOption:
        """Soft-delete one variant by marking it inactive."""
        option = await self.coordinator.soft_deactivate(public_id)
        self._log_operation("deactivate", self.entity_type, public_id)
        return option

    async def bulk_action(
        self, dropdown_type: str, action: BulkAction, public_ids: List[str]
    ) -> BulkOperationResult:
        """
        Activate, deactivate or soft-delete many variants of one type.

        Ids that are missing or belong to another type are skipped.
        """
        dropdown_type = normalize_dropdown_type(dropdown_type)
        status, message_key = BULK_STATUS[BulkAction(action)]

        eligible, skipped = [], []
        for public_id in dict.fromkeys(public_ids):
            if await self.repository.exists({"public_id": public_id, "dropdown_type": dropdown_type}):
                eligible.append(public_id)
            else:
                skipped.append(public_id)

        outcome = await self.coordinator.bulk_update_by_public_ids(eligible, {"status": status})
        skipped.extend(outcome.skipped)

        self._log_operation(
            f"bulk_{BulkAction(action).value}",
            self.entity_type,
            None,
            {"dropdown_type": dropdown_type, "count": outcome.count, "skipped": len(skipped)},
        )
        return self._bulk_result(message_key, outcome.count, len(outcome.processed), skipped)

    async def increment_use_count(self, public_id: str) -> bool:
        return await self.coordinator.increment_use_count(public_id)
