# tests/test_dropdown_option_service.py
import pytest

from admin_core.core.exceptions import (
    ConflictException,
    EntityNotFoundException,
    InUseException,
    ValidationException,
)
from admin_core.schemas.common import PaginationOptions
from admin_core.schemas.dropdown_option import (
    BulkAction,
    DropdownOptionCreate,
    DropdownOptionUpdate,
)
from admin_core.services.dropdown_option_service import normalize_dropdown_type


@pytest.fixture
def dropdown_service(services):
    return services.get_dropdown_option_service()


@pytest.fixture
async def technology(dropdown_service, languages):
    return await dropdown_service.create("industry", DropdownOptionCreate(name="Technology"))


def test_normalize_dropdown_type():
    assert normalize_dropdown_type(" Industry ") == "industry"
    with pytest.raises(ValidationException):
        normalize_dropdown_type("bad type!")
    with pytest.raises(ValidationException):
        normalize_dropdown_type("")


# --- End-to-end ---


async def test_create_replicates_then_bulk_deactivate(dropdown_service, languages, technology):
    assert len(technology) == 4
    assert len({row.unique_code for row in technology}) == 1
    assert {row.language.code for row in technology} == {"en", "fr", "es", "ar"}
    assert all(row.dropdown_type == "industry" for row in technology)

    targets = [technology[0].public_id, technology[1].public_id]
    result = await dropdown_service.bulk_action("industry", BulkAction.DEACTIVATE, targets)

    assert result.count == 2
    assert result.affected_rows == 2
    assert result.skipped == []
    assert result.message == "2 record(s) deactivated successfully"

    group = await dropdown_service.coordinator.find_group(technology[0].unique_code)
    statuses = {row.public_id: row.status for row in group}
    assert [statuses[public_id] for public_id in targets] == [False, False]
    assert sum(statuses.values()) == 2


async def test_response_shape_hides_internal_keys(technology):
    payload = technology[0].to_response()

    assert "id" not in payload
    assert "languageId" not in payload
    assert payload["uniqueCode"] == technology[0].unique_code
    assert payload["dropdownType"] == "industry"
    assert payload["language"]["code"] in {"en", "fr", "es", "ar"}
    assert "_id" not in payload["language"]


# --- Create rules ---


async def test_duplicate_name_in_type_conflicts(dropdown_service, technology):
    with pytest.raises(ConflictException):
        await dropdown_service.create("industry", DropdownOptionCreate(name="technology"))

    # Other types may reuse the name
    rows = await dropdown_service.create("sector", DropdownOptionCreate(name="Technology"))
    assert len(rows) == 4


async def test_create_for_one_language(dropdown_service, languages):
    rows = await dropdown_service.create(
        "country",
        DropdownOptionCreate(
            name="France", country_short_code="FR", language_public_id=languages["fr"].public_id
        ),
    )

    assert len(rows) == 1
    assert rows[0].language.code == "fr"
    assert rows[0].country_short_code == "FR"


# --- Reads ---


async def test_list_defaults_to_default_language(dropdown_service, languages, technology):
    await dropdown_service.create("industry", DropdownOptionCreate(name="Finance"))

    result = await dropdown_service.list("industry", PaginationOptions(page=1, limit=1))

    assert result.pagination.total_count == 2
    assert result.pagination.total_pages == 2
    assert result.pagination.has_next is True
    assert result.items[0].language.code == "en"

    response = result.to_response()
    assert response["pagination"]["currentPage"] == 1
    assert "id" not in response["items"][0]


async def test_list_search(dropdown_service, languages, technology):
    await dropdown_service.create("industry", DropdownOptionCreate(name="Finance"))

    result = await dropdown_service.list(
        "industry", search="tech", language_public_id=languages["fr"].public_id
    )

    assert [row.name for row in result.items] == ["Technology"]
    assert result.items[0].language.code == "fr"


async def test_list_active_sorted_by_name(dropdown_service, languages, technology):
    finance = await dropdown_service.create("industry", DropdownOptionCreate(name="Finance"))
    await dropdown_service.create("industry", DropdownOptionCreate(name="Agriculture", status=False))

    rows = await dropdown_service.list_active("industry")

    assert [row.name for row in rows] == ["Finance", "Technology"]
    assert rows[0].unique_code == finance[0].unique_code


async def test_find_single_by_type_and_language(dropdown_service, languages, technology):
    english = next(row for row in technology if row.language.code == "en")

    arabic = await dropdown_service.find_single_by_type_and_language(
        "industry", english.public_id, languages["ar"].public_id
    )

    assert arabic.language.code == "ar"
    assert arabic.unique_code == english.unique_code

    with pytest.raises(EntityNotFoundException):
        await dropdown_service.find_single_by_type_and_language("country", english.public_id)


# --- Updates and deletes ---


async def test_update_single_variant(dropdown_service, technology):
    french = next(row for row in technology if row.language.code == "fr")

    updated = await dropdown_service.update(
        "industry", french.public_id, DropdownOptionUpdate(name="Technologie")
    )

    assert updated.name == "Technologie"
    names = {row.name for row in await dropdown_service.coordinator.find_group(french.unique_code)}
    assert names == {"Technology", "Technologie"}


async def test_update_to_existing_name_conflicts(dropdown_service, technology):
    await dropdown_service.create("industry", DropdownOptionCreate(name="Finance"))

    with pytest.raises(ConflictException):
        await dropdown_service.update(
            "industry", technology[0].public_id, DropdownOptionUpdate(name="finance")
        )


async def test_delete_by_unique_code(dropdown_service, technology):
    code = technology[0].unique_code

    with pytest.raises(ValidationException):
        await dropdown_service.delete_by_unique_code("country", code)

    assert await dropdown_service.delete_by_unique_code("industry", code) == 4
    with pytest.raises(EntityNotFoundException):
        await dropdown_service.delete_by_unique_code("industry", code)


async def test_delete_by_unique_code_in_use(dropdown_service, technology):
    assert await dropdown_service.increment_use_count(technology[1].public_id) is True

    with pytest.raises(InUseException):
        await dropdown_service.delete_by_unique_code("industry", technology[0].unique_code)

    assert len(await dropdown_service.coordinator.find_group(technology[0].unique_code)) == 4


async def test_delete_is_soft(dropdown_service, technology):
    option = await dropdown_service.delete(technology[0].public_id)

    assert option.status is False
    assert len(await dropdown_service.coordinator.find_group(technology[0].unique_code)) == 4


async def test_bulk_action_skips_other_types(dropdown_service, languages, technology):
    country = await dropdown_service.create("country", DropdownOptionCreate(name="France"))

    result = await dropdown_service.bulk_action(
        "industry", "delete", [technology[0].public_id, country[0].public_id, "missing"]
    )

    assert result.count == 1
    assert result.skipped == [country[0].public_id, "missing"]
    assert (await dropdown_service.get_or_404(technology[0].public_id)).status is False
    assert (await dropdown_service.get_or_404(country[0].public_id)).status is True
