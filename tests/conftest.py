# tests/conftest.py
import io

import pytest
from mongomock_motor import AsyncMongoMockClient
from PIL import Image

from admin_core.core.config import Settings
from admin_core.core.messages import MessageCatalog
from admin_core.db.session import create_engine_from_settings
from admin_core.repositories.repository_factory import (
    MongoRepositoryFactory,
    SqlRepositoryFactory,
)
from admin_core.schemas.language import LanguageCreate
from admin_core.schemas.upload import UploadedFile
from admin_core.services.file_storage_service import FileStorageService
from admin_core.services.service_factory import ServiceFactory

# Four active languages used by most scenarios
LANGUAGE_FIXTURES = [
    {"name": "English", "code": "en", "iso2": "en", "iso3": "eng", "direction": "ltr"},
    {"name": "French", "code": "fr", "iso2": "fr", "iso3": "fra", "direction": "ltr"},
    {"name": "Spanish", "code": "es", "iso2": "es", "iso3": "spa", "direction": "ltr"},
    {"name": "Arabic", "code": "ar", "iso2": "ar", "iso3": "ara", "direction": "rtl"},
]


def make_png(size=(4, 4), color=(255, 0, 0)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def png_upload(filename: str = "image.png") -> UploadedFile:
    return UploadedFile(filename=filename, content_type="image/png", content=make_png())


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        DATABASE_TYPE="postgres",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        UPLOAD_ROOT=str(tmp_path / "uploads"),
    )


@pytest.fixture
async def sql_factory(test_settings):
    engine = create_engine_from_settings(test_settings)
    factory = SqlRepositoryFactory(engine)
    await factory.initialize()
    yield factory
    await engine.dispose()


@pytest.fixture
async def mongo_factory():
    database = AsyncMongoMockClient()["admin_core_test"]
    factory = MongoRepositoryFactory(database)
    await factory.initialize()
    yield factory


@pytest.fixture(params=["sql", "mongo"])
async def repository_factory(request, test_settings):
    """Runs the test once per storage backend."""
    if request.param == "sql":
        engine = create_engine_from_settings(test_settings)
        factory = SqlRepositoryFactory(engine)
        await factory.initialize()
        yield factory
        await engine.dispose()
    else:
        factory = MongoRepositoryFactory(AsyncMongoMockClient()["admin_core_test"])
        await factory.initialize()
        yield factory


@pytest.fixture
def file_storage(test_settings):
    return FileStorageService(test_settings.UPLOAD_ROOT)


@pytest.fixture
def messages():
    return MessageCatalog.load("v1", "en")


@pytest.fixture
def services(test_settings, repository_factory, file_storage, messages):
    return ServiceFactory(
        settings=test_settings,
        repository_factory=repository_factory,
        messages=messages,
        file_storage=file_storage,
    )


@pytest.fixture
async def languages(services):
    """Create en (default), fr, es and ar; returns them keyed by code."""
    language_service = services.get_language_service()
    created = {}
    for index, data in enumerate(LANGUAGE_FIXTURES):
        language = await language_service.create(
            LanguageCreate(**data, is_default="YES" if index == 0 else "NO"),
            flag_image=png_upload(f"{data['code']}.png"),
        )
        created[language.code] = language
    return created
