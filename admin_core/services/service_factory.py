# File: admin_core/services/service_factory.py

"""
Composition root.

Builds settings-driven collaborators exactly once: the repository factory for
the configured backend, the message catalog, caches, file storage and every
service. Services are cached per factory, so one factory means one set of
default-singleton locks.
"""

import logging
from typing import Any, Dict, Optional

from admin_core.core.config import Settings, settings as default_settings
from admin_core.core.messages import MessageCatalog
from admin_core.repositories.repository_factory import RepositoryFactory
from admin_core.schemas.upload import UploadConstraints
from admin_core.services.cache_service import CacheService
from admin_core.services.dropdown_option_service import DropdownOptionService
from admin_core.services.file_storage_service import FileStorageService
from admin_core.services.language_service import LanguageService
from admin_core.services.payment_gateway_service import CACHE_NAMESPACE, PaymentGatewayService
from admin_core.services.replication_coordinator import EntityReplicationCoordinator
from admin_core.services.slider_service import SliderService

logger = logging.getLogger(__name__)


class ServiceFactory:
    """
    Factory for creating service instances with proper dependencies.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        repository_factory: Optional[RepositoryFactory] = None,
        messages: Optional[MessageCatalog] = None,
        file_storage: Optional[FileStorageService] = None,
    ):
        """
        Initialize with optional pre-built collaborators.

        Args:
            settings: Application settings; the module settings when omitted
            repository_factory: Backend factory; chosen from DATABASE_TYPE when omitted
            messages: Message catalog; loaded from MESSAGE_BUNDLE_VERSION when omitted
            file_storage: File storage; rooted at UPLOAD_ROOT when omitted
        """
        self.settings = settings or default_settings
        self.repositories = repository_factory or RepositoryFactory.for_settings(self.settings)
        self.messages = messages or MessageCatalog.load(
            self.settings.MESSAGE_BUNDLE_VERSION, self.settings.DEFAULT_LOCALE
        )
        self.file_storage = file_storage or FileStorageService(self.settings.UPLOAD_ROOT)
        self._services: Dict[str, Any] = {}

    async def initialize(self) -> None:
        """Prepare backend schema objects; call once at startup."""
        await self.repositories.initialize()

    def _cached(self, name: str, build):
        if name not in self._services:
            self._services[name] = build()
            logger.debug(f"Created {name} service")
        return self._services[name]

    @property
    def flag_constraints(self) -> UploadConstraints:
        return UploadConstraints(bucket="flags", max_size=self.settings.flag_image_max_bytes)

    @property
    def slider_image_constraints(self) -> UploadConstraints:
        return UploadConstraints(bucket="sliders", max_size=self.settings.slider_image_max_bytes)

    def get_language_service(self) -> LanguageService:
        return self._cached(
            "language",
            lambda: LanguageService(
                self.repositories.create_language_repository(),
                self.file_storage,
                self.flag_constraints,
                messages=self.messages,
            ),
        )

    def get_dropdown_option_coordinator(self) -> EntityReplicationCoordinator:
        return self._cached(
            "dropdown_option_coordinator",
            lambda: EntityReplicationCoordinator(
                self.repositories.create_dropdown_option_repository(),
                self.get_language_service(),
                max_attempts=self.settings.UNIQUE_CODE_MAX_ATTEMPTS,
            ),
        )

    def get_slider_coordinator(self) -> EntityReplicationCoordinator:
        return self._cached(
            "slider_coordinator",
            lambda: EntityReplicationCoordinator(
                self.repositories.create_slider_repository(),
                self.get_language_service(),
                max_attempts=self.settings.UNIQUE_CODE_MAX_ATTEMPTS,
            ),
        )

    def get_dropdown_option_service(self) -> DropdownOptionService:
        return self._cached(
            "dropdown_option",
            lambda: DropdownOptionService(
                self.get_dropdown_option_coordinator(),
                self.get_language_service(),
                messages=self.messages,
            ),
        )

    def get_slider_service(self) -> SliderService:
        return self._cached(
            "slider",
            lambda: SliderService(
                self.get_slider_coordinator(),
                self.get_language_service(),
                self.file_storage,
                self.slider_image_constraints,
                messages=self.messages,
            ),
        )

    def get_payment_gateway_service(self) -> PaymentGatewayService:
        return self._cached(
            "payment_gateway",
            lambda: PaymentGatewayService(
                self.repositories.create_payment_gateway_repository(),
                CacheService(self.settings.cache_config, namespace=CACHE_NAMESPACE),
                messages=self.messages,
            ),
        )
