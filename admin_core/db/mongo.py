# File: admin_core/db/mongo.py
"""
Client setup and index management for the document backend.

Collections mirror the relational tables. Field names are camelCase, keys are
ObjectIds, and the unique indexes match the relational constraints.
"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from admin_core.core.config import Settings

logger = logging.getLogger(__name__)

LANGUAGES = "languages"
DROPDOWN_OPTIONS = "dropdown_options"
SLIDERS = "sliders"
PAYMENT_GATEWAYS = "payment_gateways"

INDEXES = {
    LANGUAGES: [
        ([("publicId", ASCENDING)], True),
        ([("name", ASCENDING)], True),
        ([("folder", ASCENDING)], True),
        ([("iso2", ASCENDING)], True),
        ([("iso3", ASCENDING)], True),
    ],
    DROPDOWN_OPTIONS: [
        ([("publicId", ASCENDING)], True),
        ([("uniqueCode", ASCENDING), ("languageId", ASCENDING)], True),
        ([("dropdownType", ASCENDING)], False),
    ],
    SLIDERS: [
        ([("publicId", ASCENDING)], True),
        ([("uniqueCode", ASCENDING), ("languageId", ASCENDING)], True),
    ],
    PAYMENT_GATEWAYS: [
        ([("publicId", ASCENDING)], True),
        ([("paymentSlug", ASCENDING)], True),
    ],
}


def create_mongo_database(settings: Settings) -> AsyncIOMotorDatabase:
    client = AsyncIOMotorClient(settings.MONGODB_URI, tz_aware=True)
    logger.info(f"Document backend connected to database '{settings.MONGODB_DB_NAME}'")
    return client[settings.MONGODB_DB_NAME]


async def ensure_indexes(database: AsyncIOMotorDatabase) -> None:
    """Create the unique and lookup indexes for every collection."""
    for collection_name, indexes in INDEXES.items():
        collection = database[collection_name]
        for keys, unique in indexes:
            await collection.create_index(keys, unique=unique)
    logger.info("Document backend indexes ensured")
