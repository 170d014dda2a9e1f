# tests/test_language_service.py
import asyncio

import pytest

from admin_core.core.exceptions import (
    ConfigurationException,
    ConflictException,
    EntityNotFoundException,
    InvariantViolationException,
    ValidationException,
)
from admin_core.schemas.common import PaginationOptions, PrincipalContext
from admin_core.schemas.language import LanguageCreate, LanguageUpdate
from admin_core.schemas.slider import SliderCreate
from tests.conftest import png_upload


@pytest.fixture
def language_service(services):
    return services.get_language_service()


async def count_defaults(language_service):
    return await language_service.repository.count({"is_default": "YES"})


# --- Default invariants ---


async def test_first_active_language_becomes_default(language_service):
    language = await language_service.create(
        LanguageCreate(name="German", code="de", iso2="de", iso3="deu"),
        flag_image=png_upload(),
    )

    assert language.default
    assert (await language_service.get_default()).public_id == language.public_id


async def test_get_default_without_languages_is_a_configuration_error(language_service):
    with pytest.raises(ConfigurationException):
        await language_service.get_default()


async def test_set_default_moves_the_flag(language_service, languages):
    updated = await language_service.set_default(languages["fr"].public_id)

    assert updated.default
    assert (await language_service.get(languages["en"].public_id)).default is False
    assert await count_defaults(language_service) == 1


async def test_concurrent_set_default_leaves_one_default(language_service, languages):
    await asyncio.gather(
        *(language_service.set_default(languages[code].public_id) for code in ("fr", "es", "ar"))
    )

    assert await count_defaults(language_service) == 1
    default = await language_service.get_default()
    assert default.code in {"fr", "es", "ar"}


async def test_deleting_the_default_is_rejected(language_service, languages):
    with pytest.raises(InvariantViolationException):
        await language_service.delete(languages["en"].public_id)

    assert await language_service.repository.count() == 4
    assert (await language_service.get_default()).public_id == languages["en"].public_id


async def test_default_cannot_be_unset_or_deactivated(language_service, languages):
    with pytest.raises(InvariantViolationException):
        await language_service.update(languages["en"].public_id, LanguageUpdate(is_default="NO"))
    with pytest.raises(InvariantViolationException):
        await language_service.update(languages["en"].public_id, LanguageUpdate(status=False))

    assert await count_defaults(language_service) == 1


async def test_inactive_language_cannot_become_default(language_service, languages):
    await language_service.update(languages["fr"].public_id, LanguageUpdate(status=False))

    with pytest.raises(ValidationException):
        await language_service.set_default(languages["fr"].public_id)


async def test_update_can_take_over_default(language_service, languages):
    updated = await language_service.update(languages["es"].public_id, LanguageUpdate(is_default="YES"))

    assert updated.default
    assert await count_defaults(language_service) == 1


# --- Registry operations ---


async def test_duplicate_fields_conflict(language_service, languages):
    with pytest.raises(ConflictException) as exc_info:
        await language_service.create(
            LanguageCreate(name="English (UK)", code="en", iso2="gb", iso3="gbr"),
            flag_image=png_upload(),
        )
    assert exc_info.value.details["field"] == "code"

    with pytest.raises(ConflictException):
        await language_service.update(languages["fr"].public_id, LanguageUpdate(iso3="SPA"))


async def test_flag_image_is_required(language_service):
    with pytest.raises(ValidationException):
        await language_service.create(LanguageCreate(name="German", code="de", iso2="de", iso3="deu"))


async def test_create_stores_flag_and_normalizes_iso(language_service, file_storage):
    language = await language_service.create(
        LanguageCreate(name=" German ", code="de", iso2="de", iso3="deu"),
        flag_image=png_upload("de.png"),
    )

    assert language.name == "German"
    assert language.iso2 == "DE"
    assert language.flag_image.startswith("flags/")
    assert file_storage.exists(language.flag_image)


async def test_active_language_ids(language_service, languages):
    await language_service.update(languages["ar"].public_id, LanguageUpdate(status=False))

    ids = await language_service.active_language_ids()

    assert set(ids) == {languages[code].id for code in ("en", "fr", "es")}


async def test_resolve_language_id(language_service, languages):
    assert await language_service.resolve_language_id() == languages["en"].id
    assert await language_service.resolve_language_id(languages["fr"].public_id) == languages["fr"].id
    with pytest.raises(EntityNotFoundException):
        await language_service.resolve_language_id("missing")


async def test_list_with_search(language_service, languages):
    result = await language_service.list(PaginationOptions(page=1, limit=10), search="fren")

    assert [language.code for language in result.items] == ["fr"]
    assert result.pagination.total_count == 1


async def test_list_active_sorted_by_name(language_service, languages):
    names = [language.name for language in await language_service.list_active()]
    assert names == sorted(names)


async def test_delete_removes_flag(language_service, languages, file_storage):
    flag = languages["ar"].flag_image

    assert await language_service.delete(languages["ar"].public_id) is True
    assert not file_storage.exists(flag)
    with pytest.raises(EntityNotFoundException):
        await language_service.get(languages["ar"].public_id)


async def test_delete_removes_grouped_variants(language_service, languages, services):
    coordinator = services.get_dropdown_option_coordinator()
    options = await coordinator.create_for_all_languages(
        {"name": "Technology", "dropdown_type": "industry", "status": True, "use_count": 0}
    )
    slider_service = services.get_slider_service()
    await slider_service.create(SliderCreate(title="Launch day"), png_upload())

    assert await language_service.delete(languages["fr"].public_id) is True

    remaining = await coordinator.find_group(options[0].unique_code)
    assert {row.language.code for row in remaining} == {"en", "es", "ar"}
    assert await slider_service.repository.count({"language_id": languages["fr"].id}) == 0
    assert await slider_service.repository.count() == 3


async def test_bulk_delete_skips_default(language_service, languages):
    result = await language_service.bulk_delete(
        [languages["en"].public_id, languages["fr"].public_id, "missing"]
    )

    assert result.count == 1
    assert result.affected_rows == 1
    assert result.skipped == [languages["en"].public_id, "missing"]
    assert result.message == "1 record(s) deleted successfully"
    assert await language_service.repository.count() == 3


async def test_bulk_deactivate_keeps_default_active(language_service, languages):
    result = await language_service.bulk_update(
        [languages["en"].public_id, languages["es"].public_id], status=False
    )

    assert result.count == 1
    assert result.skipped == [languages["en"].public_id]
    assert (await language_service.get(languages["en"].public_id)).status is True
    assert (await language_service.get(languages["es"].public_id)).status is False


def stored_files(file_storage):
    return sorted(path for path in file_storage.base_path.rglob("*") if path.is_file())


async def test_update_of_vanished_language_discards_new_flag(
    language_service, languages, file_storage, monkeypatch
):
    async def vanished(id, data):
        return None

    monkeypatch.setattr(language_service.repository, "update_by_id", vanished)
    before = stored_files(file_storage)

    with pytest.raises(EntityNotFoundException):
        await language_service.update(
            languages["fr"].public_id, LanguageUpdate(name="Francais"), flag_image=png_upload("fr.png")
        )

    assert stored_files(file_storage) == before


async def test_with_principal_shares_state(language_service, languages):
    acting = language_service.with_principal(PrincipalContext(principal_id="admin-1"))

    assert acting.principal.principal_id == "admin-1"
    assert language_service.principal.principal_id is None
    assert acting.default_enforcer is language_service.default_enforcer
    assert (await acting.get_default()).code == "en"
