# File: admin_core/services/slider_service.py

"""
Homepage slider service.

Each slider is replicated per active language and every variant gets its own
copy of the slider image, stored under ``sliders/<unique_code>/<language>/``.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from admin_core.core.exceptions import (
    AdminCoreException,
    ConfigurationException,
    ConflictException,
    EntityNotFoundException,
    GenerationExhaustedException,
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
from admin_core.schemas.slider import COLOR_FIELDS, LINK_FIELDS, Slider, SliderCreate, SliderUpdate
from admin_core.schemas.upload import UploadConstraints, UploadedFile
from admin_core.services.base_service import BaseService
from admin_core.services.file_storage_service import FileStorageService
from admin_core.services.language_service import LanguageService
from admin_core.services.replication_coordinator import EntityReplicationCoordinator

logger = logging.getLogger(__name__)

COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
LINK_PATTERN = re.compile(r"^(?:https?://[^\s/$.?#][^\s]*|/[^\s]*)$", re.IGNORECASE)


def validate_presentation(values: Dict[str, Any]) -> None:
    """
    Check color codes and button links.

    Raises:
        ValidationException: On the first invalid value
    """
    for field in COLOR_FIELDS:
        value = values.get(field)
        if value and not COLOR_PATTERN.match(value):
            raise ValidationException(f"{field} must be a hex color such as #1A2B3C", field=field, value=value)
    for field in LINK_FIELDS:
        value = values.get(field)
        if value and not LINK_PATTERN.match(value):
            raise ValidationException(
                f"{field} must be an http(s) URL or a site-relative path", field=field, value=value
            )


class SliderService(BaseService[Slider]):
    """
    Service for managing homepage sliders.

    Provides functionality for:
    - Creating sliders in every active language with per-language images
    - Per-language edits
    - Group deletion with image cleanup
    - Bulk status changes and deletions
    """

    entity_type = "Slider"

    def __init__(
        self,
        coordinator: EntityReplicationCoordinator[Slider],
        language_service: LanguageService,
        file_storage: FileStorageService,
        image_constraints: UploadConstraints,
        messages: Optional[MessageCatalog] = None,
        principal: Optional[PrincipalContext] = None,
    ):
        super().__init__(coordinator.repository, messages=messages, principal=principal)
        self.coordinator = coordinator
        self.language_service = language_service
        self.file_storage = file_storage
        self.image_constraints = image_constraints

    async def create(self, data: SliderCreate, image: UploadedFile) -> List[Slider]:
        """
        Create a slider in every active language (or one, when
        ``data.language_public_id`` is set).

        Raises:
            ValidationException: If colors, links or the image are invalid
            ConfigurationException: If there is no active language
            GenerationExhaustedException: If no free unique code could be claimed
        """
        content = data.model_dump(exclude={"language_public_id"})
        validate_presentation(content)
        self.file_storage.validate(image, self.image_constraints)

        if data.language_public_id:
            languages = [await self.language_service.get_or_404(data.language_public_id)]
        else:
            languages = await self.language_service.list_active()
        if not languages:
            raise ConfigurationException(
                "Cannot create Slider: no active languages", details={"entity_type": self.entity_type}
            )

        unique_code, created = None, None
        for attempt in range(1, self.coordinator.max_attempts + 1):
            unique_code = await self.coordinator.generate_unique_code()
            paths = await self.file_storage.upload_for_languages(
                image, self.image_constraints, unique_code, [language.code for language in languages]
            )
            variant_content = {
                language.id: {"slider_image": path} for language, path in zip(languages, paths)
            }

            try:
                created = await self.coordinator.create_for_all_languages(
                    {**content, "use_count": 0},
                    explicit_language_id=languages[0].id if data.language_public_id else None,
                    unique_code=unique_code,
                    variant_content=variant_content,
                )
            except ConflictException:
                # Another writer claimed the code after it was drawn
                await self.file_storage.delete_many(paths)
                logger.warning(f"Slider unique code {unique_code} claimed concurrently (attempt {attempt})")
                continue
            except AdminCoreException:
                await self.file_storage.delete_many(paths)
                raise
            break

        if created is None:
            raise GenerationExhaustedException(self.entity_type, self.coordinator.max_attempts)

        self._log_operation("create", self.entity_type, unique_code, {"variants": len(created)})
        return created

    async def get(self, public_id: str) -> Slider:
        return await self.get_or_404(public_id)

    async def list(
        self,
        options: Optional[PaginationOptions] = None,
        search: Optional[str] = None,
        language_public_id: Optional[str] = None,
        status: Optional[bool] = None,
    ) -> PaginatedResult:
        filter = {"language_id": await self.language_service.resolve_language_id(language_public_id)}
        if status is not None:
            filter["status"] = status
        return await self.repository.find_with_pagination_and_search(
            search, None, filter, options or PaginationOptions()
        )

    async def list_active(self, language_public_id: Optional[str] = None) -> List[Slider]:
        """Active sliders in one language, oldest first."""
        return await self.repository.find_many(
            {
                "language_id": await self.language_service.resolve_language_id(language_public_id),
                "status": True,
            },
            FindOptions(sort={"created_at": 1}),
        )

    async def find_single(self, public_id: str, language_public_id: Optional[str] = None) -> Slider:
        language_id = None
        if language_public_id:
            language_id = await self.language_service.resolve_language_id(language_public_id)
        return await self.coordinator.find_single(public_id, language_id)

    async def update(
        self, public_id: str, data: SliderUpdate, image: Optional[UploadedFile] = None
    ) -> Slider:
        """
        Update one language variant; its siblings keep their content and images.

        Raises:
            EntityNotFoundException: If the variant does not exist
            ValidationException: If colors, links or the image are invalid
        """
        slider = await self.get_or_404(public_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        validate_presentation(changes)

        old_image = None
        if image is not None:
            folder = f"{slider.unique_code}/{slider.language.code if slider.language else slider.language_id}"
            changes["slider_image"] = await self.file_storage.upload(image, self.image_constraints, folder=folder)
            old_image = slider.slider_image

        if not changes:
            return slider

        try:
            updated = await self.coordinator.update_variant(slider.unique_code, slider.language_id, changes)
        except AdminCoreException:
            if image is not None:
                await self.file_storage.delete(changes["slider_image"])
            raise

        if old_image:
            await self.file_storage.delete(old_image)
        self._log_operation("update", self.entity_type, public_id, {"fields": sorted(changes)})
        return updated

    async def delete(self, unique_code: int) -> int:
        """
        Hard-delete every variant of a slider and, best-effort, their images.

        Raises:
            EntityNotFoundException: If no variant has this code
            InUseException: If any variant is in use
        """
        deleted = await self.coordinator.remove_group(unique_code)
        await self.file_storage.delete_many([row.slider_image for row in deleted])
        self._log_operation("delete", self.entity_type, unique_code, {"variants": len(deleted)})
        return len(deleted)

    async def bulk_delete(self, public_ids: List[str]) -> BulkOperationResult:
        """Delete the whole group of every listed slider; unknown ids are skipped."""
        outcome = await self.coordinator.bulk_delete_by_public_ids(public_ids, expand_groups=True)
        await self.file_storage.delete_many([row.slider_image for row in outcome.rows])
        self._log_operation(
            "bulk_delete", self.entity_type, None, {"count": outcome.count, "skipped": len(outcome.skipped)}
        )
        return self._bulk_result("bulk.deleted", outcome.count, len(outcome.processed), outcome.skipped)

    async def bulk_update_status(self, public_ids: List[str], status: bool) -> BulkOperationResult:
        """
        Set the status of many variants.

        Raises:
            EntityNotFoundException: If any id is unknown; nothing is changed
        """
        unique_ids = list(dict.fromkeys(public_ids))
        found = await self.repository.find_many({"public_id": unique_ids})
        missing = set(unique_ids) - {row.public_id for row in found}
        if missing:
            raise EntityNotFoundException(self.entity_type, ", ".join(sorted(missing)))

        outcome = await self.coordinator.bulk_update_by_public_ids(unique_ids, {"status": status})
        self._log_operation("bulk_update", self.entity_type, None, {"status": status, "count": outcome.count})
        key = "bulk.activated" if status else "bulk.deactivated"
        return self._bulk_result(key, outcome.count, len(outcome.processed), outcome.skipped)

    async def increment_use_count(self, public_id: str) -> bool:
        return await self.coordinator.increment_use_count(public_id)
