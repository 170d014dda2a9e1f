# File: admin_core/repositories/repository_factory.py

"""
Repository factories.

Exactly two factories exist, one per storage backend. ``for_settings`` picks
one from DATABASE_TYPE once, at composition time; nothing downstream inspects
which backend is active.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from sqlalchemy.ext.asyncio import AsyncEngine

from admin_core.core.config import Settings
from admin_core.db.mongo import create_mongo_database, ensure_indexes
from admin_core.db.session import create_engine_from_settings, create_session_factory, init_models
from admin_core.repositories.dropdown_option_repository import (
    MongoDropdownOptionRepository,
    SqlDropdownOptionRepository,
)
from admin_core.repositories.language_repository import (
    MongoLanguageRepository,
    SqlLanguageRepository,
)
from admin_core.repositories.payment_gateway_repository import (
    MongoPaymentGatewayRepository,
    SqlPaymentGatewayRepository,
)
from admin_core.repositories.slider_repository import MongoSliderRepository, SqlSliderRepository

logger = logging.getLogger(__name__)


class RepositoryFactory(ABC):
    """Creates the repositories of one storage backend."""

    backend: str = None

    @classmethod
    def for_settings(
        cls,
        settings: Settings,
        engine: Optional[AsyncEngine] = None,
        database: Optional[AsyncIOMotorDatabase] = None,
    ) -> "RepositoryFactory":
        """
        Build the factory for the configured backend.

        Args:
            settings: Application settings
            engine: Pre-built engine for the relational backend
            database: Pre-built database handle for the document backend

        Returns:
            The factory for DATABASE_TYPE
        """
        if settings.DATABASE_TYPE == "mongodb":
            factory = MongoRepositoryFactory(database if database is not None else create_mongo_database(settings))
        else:
            factory = SqlRepositoryFactory(engine or create_engine_from_settings(settings))
        logger.info(f"Using {factory.backend} storage backend")
        return factory

    @abstractmethod
    async def initialize(self) -> None:
        """Create the schema objects the backend relies on (tables or indexes)."""

    @abstractmethod
    def create_language_repository(self):
        pass

    @abstractmethod
    def create_dropdown_option_repository(self):
        pass

    @abstractmethod
    def create_slider_repository(self):
        pass

    @abstractmethod
    def create_payment_gateway_repository(self):
        pass


class SqlRepositoryFactory(RepositoryFactory):
    backend = "relational"

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = create_session_factory(engine)

    async def initialize(self) -> None:
        await init_models(self.engine)

    def create_language_repository(self) -> SqlLanguageRepository:
        return SqlLanguageRepository(self.session_factory)

    def create_dropdown_option_repository(self) -> SqlDropdownOptionRepository:
        return SqlDropdownOptionRepository(self.session_factory)

    def create_slider_repository(self) -> SqlSliderRepository:
        return SqlSliderRepository(self.session_factory)

    def create_payment_gateway_repository(self) -> SqlPaymentGatewayRepository:
        return SqlPaymentGatewayRepository(self.session_factory)


class MongoRepositoryFactory(RepositoryFactory):
    backend = "document"

    def __init__(self, database: AsyncIOMotorDatabase):
        self.database = database

    async def initialize(self) -> None:
        await ensure_indexes(self.database)

    def create_language_repository(self) -> MongoLanguageRepository:
        return MongoLanguageRepository(self.database)

    def create_dropdown_option_repository(self) -> MongoDropdownOptionRepository:
        return MongoDropdownOptionRepository(self.database)

    def create_slider_repository(self) -> MongoSliderRepository:
        return MongoSliderRepository(self.database)

    def create_payment_gateway_repository(self) -> MongoPaymentGatewayRepository:
        return MongoPaymentGatewayRepository(self.database)
