# File: admin_core/services/language_service.py

"""
Language registry.

Owns the set of languages and the "exactly one default language" invariant.
Grouped entities are replicated across the active languages this service
reports, and fall back to the default language when a caller names none.
"""

import logging
from typing import Any, Dict, List, Optional

from admin_core.core.exceptions import (
    AdminCoreException,
    ConflictException,
    EntityNotFoundException,
    InvariantViolationException,
    ValidationException,
)
from admin_core.core.messages import MessageCatalog
from admin_core.repositories.base_repository import BaseRepository
from admin_core.schemas.common import (
    BulkOperationResult,
    FindOptions,
    PaginatedResult,
    PaginationOptions,
    PrincipalContext,
)
from admin_core.schemas.language import (
    DEFAULT_NO,
    DEFAULT_YES,
    Language,
    LanguageCreate,
    LanguageUpdate,
)
from admin_core.schemas.upload import UploadConstraints, UploadedFile
from admin_core.services.base_service import BaseService
from admin_core.services.default_singleton import DefaultScope, DefaultSingletonEnforcer
from admin_core.services.file_storage_service import FileStorageService

logger = logging.getLogger(__name__)

UNIQUE_FIELDS = ("name", "code", "iso2", "iso3")


class LanguageService(BaseService[Language]):
    """
    Service for managing languages.

    Provides functionality for:
    - Creating, updating and deleting languages with uniqueness checks
    - Keeping exactly one default language
    - Resolving language public ids to internal keys for replication
    """

    entity_type = "Language"

    def __init__(
        self,
        repository: BaseRepository[Language],
        file_storage: FileStorageService,
        flag_constraints: UploadConstraints,
        messages: Optional[MessageCatalog] = None,
        principal: Optional[PrincipalContext] = None,
    ):
        super().__init__(repository, messages=messages, principal=principal)
        self.file_storage = file_storage
        self.flag_constraints = flag_constraints
        self.default_enforcer = DefaultSingletonEnforcer(
            DefaultScope(
                "Language",
                repository,
                field="is_default",
                on=DEFAULT_YES,
                off=DEFAULT_NO,
                active_filter={"status": True},
                required=True,
            )
        )

    # Registry queries

    async def get_default(self) -> Language:
        """
        Return the default language.

        Raises:
            ConfigurationException: If no active default language exists
        """
        return await self.default_enforcer.get_default()

    async def active_language_ids(self) -> List[str]:
        """Internal keys of every active language, oldest first."""
        languages = await self.repository.find_many(
            {"status": True}, FindOptions(sort={"created_at": 1})
        )
        return [language.id for language in languages]

    async def resolve_language_id(self, public_id: Optional[str] = None) -> str:
        """
        Map a language public id to its internal key.

        Args:
            public_id: Language public id; the default language when omitted

        Raises:
            EntityNotFoundException: If the public id is unknown
        """
        if not public_id:
            return (await self.get_default()).id
        return (await self.get_or_404(public_id)).id

    async def get(self, public_id: str) -> Language:
        return await self.get_or_404(public_id)

    async def list(
        self,
        options: Optional[PaginationOptions] = None,
        search: Optional[str] = None,
        status: Optional[bool] = None,
    ) -> PaginatedResult:
        filter = {} if status is None else {"status": status}
        return await self.repository.find_with_pagination_and_search(
            search, None, filter, options or PaginationOptions()
        )

    async def list_active(self) -> List[Language]:
        """Active languages sorted by name, for front-end selectors."""
        return await self.repository.find_many({"status": True}, FindOptions(sort={"name": 1}))

    # Mutations

    async def create(
        self, data: LanguageCreate, flag_image: Optional[UploadedFile] = None
    ) -> Language:
        """
        Create a language.

        While no active default exists, a new active language becomes the
        default whatever ``is_default`` says, so the registry is never without one.

        Args:
            data: Language fields
            flag_image: Flag upload; required unless ``data.flag_image`` is set

        Raises:
            ConflictException: If name, code, iso2 or iso3 is taken
            ValidationException: If no flag image is supplied
        """
        payload = data.model_dump()
        await self._ensure_unique(payload)

        if flag_image is None and not payload.get("flag_image"):
            raise ValidationException("Flag image is required", field="flag_image")

        wants_default = payload.pop("is_default") == DEFAULT_YES
        if not wants_default and payload["status"]:
            wants_default = await self.default_enforcer.find_default() is None
        if wants_default and not payload["status"]:
            raise ValidationException(
                "An inactive language cannot be the default", field="status", value=False
            )

        uploaded = None
        if flag_image is not None:
            uploaded = await self.file_storage.upload(flag_image, self.flag_constraints)
            payload["flag_image"] = uploaded

        try:
            language = await self.repository.insert({**payload, "is_default": DEFAULT_NO})
        except AdminCoreException:
            await self.file_storage.delete(uploaded)
            raise

        if wants_default:
            language = await self.default_enforcer.set_default(language.id)

        self._log_operation("create", self.entity_type, language.public_id, {"code": language.code})
        return language

    async def update(
        self,
        public_id: str,
        data: LanguageUpdate,
        flag_image: Optional[UploadedFile] = None,
    ) -> Language:
        """
        Update a language.

        Raises:
            EntityNotFoundException: If the language does not exist
            ConflictException: If a changed unique field is taken
            InvariantViolationException: If the default flag would be removed
                from the current default
        """
        language = await self.get_or_404(public_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        changed_unique = {
            field: value
            for field, value in changes.items()
            if field in UNIQUE_FIELDS and value != getattr(language, field)
        }
        await self._ensure_unique(changed_unique, exclude_public_id=public_id)

        make_default = False
        requested_default = changes.pop("is_default", None)
        if requested_default == DEFAULT_NO and language.default:
            raise InvariantViolationException(
                "The default language cannot be unset; set another language as default instead",
                details={"public_id": public_id},
            )
        if requested_default == DEFAULT_YES and not language.default:
            if not changes.get("status", language.status):
                raise ValidationException(
                    "An inactive language cannot be the default", field="status", value=False
                )
            make_default = True

        if changes.get("status") is False and language.default:
            raise InvariantViolationException(
                "The default language cannot be deactivated",
                details={"public_id": public_id},
            )

        old_flag, uploaded = None, None
        if flag_image is not None:
            uploaded = await self.file_storage.upload(flag_image, self.flag_constraints)
            changes["flag_image"] = uploaded
            old_flag = language.flag_image

        if changes:
            try:
                language = await self.repository.update_by_id(language.id, changes)
                if language is None:
                    raise EntityNotFoundException(self.entity_type, public_id)
            except AdminCoreException:
                await self.file_storage.delete(uploaded)
                raise
        if make_default:
            language = await self.default_enforcer.set_default(language.id)

        if old_flag:
            await self.file_storage.delete(old_flag)

        self._log_operation("update", self.entity_type, public_id, {"fields": sorted(changes)})
        return language

    async def set_default(self, public_id: str) -> Language:
        language = await self.get_or_404(public_id)
        if not language.status:
            raise ValidationException(
                "An inactive language cannot be the default", field="status", value=False
            )
        language = await self.default_enforcer.set_default(language.id)
        self._log_operation("set_default", self.entity_type, public_id)
        return language

    async def delete(self, public_id: str) -> bool:
        """
        Delete a language and, best-effort, its flag image.

        Raises:
            EntityNotFoundException: If the language does not exist
            InvariantViolationException: If it is the default language
        """
        language = await self.get_or_404(public_id)
        if language.default:
            raise InvariantViolationException(
                "The default language cannot be deleted",
                details={"public_id": public_id},
            )

        deleted = await self.repository.delete_by_id(language.id)
        await self.file_storage.delete(language.flag_image)

        self._log_operation("delete", self.entity_type, public_id)
        return deleted

    async def bulk_update(self, public_ids: List[str], status: bool) -> BulkOperationResult:
        """Set the status of many languages; the default is never deactivated."""
        count, affected, skipped = 0, 0, []
        for public_id in dict.fromkeys(public_ids):
            language = await self.repository.get_by_public_id(public_id)
            if language is None or (not status and language.default):
                skipped.append(public_id)
                continue
            if await self.repository.update_by_id(language.id, {"status": status}) is None:
                skipped.append(public_id)
                continue
            count += 1
            affected += 1

        self._log_operation("bulk_update", self.entity_type, None, {"status": status, "count": count})
        return self._bulk_result("bulk.updated", count, affected, skipped)

    async def bulk_delete(self, public_ids: List[str]) -> BulkOperationResult:
        """Delete many languages, skipping the default and unknown ids."""
        count, affected, skipped = 0, 0, []
        for public_id in dict.fromkeys(public_ids):
            language = await self.repository.get_by_public_id(public_id)
            if language is None or language.default:
                skipped.append(public_id)
                continue
            if not await self.repository.delete_by_id(language.id):
                skipped.append(public_id)
                continue
            await self.file_storage.delete(language.flag_image)
            count += 1
            affected += 1

        self._log_operation("bulk_delete", self.entity_type, None, {"count": count, "skipped": len(skipped)})
        return self._bulk_result("bulk.deleted", count, affected, skipped)

    async def _ensure_unique(
        self, values: Dict[str, Any], exclude_public_id: Optional[str] = None
    ) -> None:
        for field in UNIQUE_FIELDS:
            value = values.get(field)
            if value is None:
                continue
            existing = await self.repository.get_detail({field: value})
            if existing is not None and existing.public_id != exclude_public_id:
                raise ConflictException(self.entity_type, field, value)
