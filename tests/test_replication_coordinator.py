# tests/test_replication_coordinator.py
import pytest

from admin_core.core.exceptions import (
    ConfigurationException,
    ConflictException,
    EntityNotFoundException,
    GenerationExhaustedException,
    InUseException,
)
from admin_core.schemas.language import LanguageUpdate
from admin_core.services.replication_coordinator import (
    UNIQUE_CODE_MAX,
    UNIQUE_CODE_MIN,
    EntityReplicationCoordinator,
    random_unique_code,
)


class StubLanguageService:
    def __init__(self, language_ids):
        self.language_ids = language_ids

    async def active_language_ids(self):
        return list(self.language_ids)


class StubRepository:
    """Grouped repository double that records calls."""

    entity_type = "Widget"

    def __init__(self, taken=(), conflicts=0):
        self.taken = set(taken)
        self.conflicts = conflicts
        self.exists_calls = 0
        self.inserted = []

    async def exists(self, filter):
        self.exists_calls += 1
        return filter["unique_code"] in self.taken

    async def insert_many(self, rows):
        if self.conflicts:
            self.conflicts -= 1
            raise ConflictException(self.entity_type, "unique key", "unique_code, language_id")
        self.inserted.append(rows)
        return rows


@pytest.fixture
def coordinator(services):
    return services.get_dropdown_option_coordinator()


def base_content(**overrides):
    content = {"name": "Technology", "dropdown_type": "industry", "status": True, "use_count": 0}
    content.update(overrides)
    return content


# --- Unique code generation ---


def test_random_unique_code_is_ten_digits():
    for _ in range(200):
        code = random_unique_code()
        assert UNIQUE_CODE_MIN <= code <= UNIQUE_CODE_MAX
        assert len(str(code)) == 10


async def test_generate_unique_code_skips_taken_codes():
    codes = iter([1111111111, 1111111111, 2222222222])
    repository = StubRepository(taken={1111111111})
    coordinator = EntityReplicationCoordinator(
        repository, StubLanguageService(["l1"]), code_generator=lambda: next(codes)
    )

    assert await coordinator.generate_unique_code() == 2222222222
    assert repository.exists_calls == 3


async def test_generate_unique_code_gives_up_after_max_attempts():
    repository = StubRepository(taken={1234567890})
    coordinator = EntityReplicationCoordinator(
        repository, StubLanguageService(["l1"]), code_generator=lambda: 1234567890
    )

    with pytest.raises(GenerationExhaustedException) as exc_info:
        await coordinator.generate_unique_code()

    assert repository.exists_calls == 100
    assert exc_info.value.details["attempts"] == 100


async def test_concurrent_code_claim_is_retried():
    codes = iter([1111111111, 2222222222])
    repository = StubRepository(conflicts=1)
    coordinator = EntityReplicationCoordinator(
        repository, StubLanguageService(["l1", "l2"]), code_generator=lambda: next(codes)
    )

    rows = await coordinator.create_for_all_languages({"name": "Technology"})

    assert [row["unique_code"] for row in rows] == [2222222222, 2222222222]
    assert [row["language_id"] for row in rows] == ["l1", "l2"]
    assert len(repository.inserted) == 1


async def test_explicit_code_conflict_is_not_retried():
    repository = StubRepository(conflicts=1)
    coordinator = EntityReplicationCoordinator(repository, StubLanguageService(["l1"]))

    with pytest.raises(ConflictException):
        await coordinator.create_for_all_languages({"name": "Technology"}, unique_code=1234567890)


async def test_create_without_active_languages_fails():
    coordinator = EntityReplicationCoordinator(StubRepository(), StubLanguageService([]))

    with pytest.raises(ConfigurationException):
        await coordinator.create_for_all_languages({"name": "Technology"})


# --- Group operations on real backends ---


async def test_create_for_all_languages(coordinator, languages):
    rows = await coordinator.create_for_all_languages(base_content())

    assert len(rows) == 4
    assert len({row.unique_code for row in rows}) == 1
    assert len({row.public_id for row in rows}) == 4
    assert {row.language_id for row in rows} == {language.id for language in languages.values()}
    assert {row.language.code for row in rows} == {"en", "fr", "es", "ar"}


async def test_create_skips_inactive_languages(coordinator, languages, services):
    await services.get_language_service().update(languages["ar"].public_id, LanguageUpdate(status=False))

    rows = await coordinator.create_for_all_languages(base_content())

    assert {row.language.code for row in rows} == {"en", "fr", "es"}


async def test_create_for_explicit_language(coordinator, languages):
    rows = await coordinator.create_for_all_languages(
        base_content(), explicit_language_id=languages["fr"].id
    )

    assert len(rows) == 1
    assert rows[0].language_id == languages["fr"].id


async def test_update_variant_leaves_siblings(coordinator, languages):
    rows = await coordinator.create_for_all_languages(base_content())
    code = rows[0].unique_code

    updated = await coordinator.update_variant(code, languages["fr"].id, {"name": "Technologie"})

    assert updated.name == "Technologie"
    names = {row.language.code: row.name for row in await coordinator.find_group(code)}
    assert names == {"en": "Technology", "fr": "Technologie", "es": "Technology", "ar": "Technology"}


async def test_update_variant_missing_language(coordinator, languages):
    rows = await coordinator.create_for_all_languages(
        base_content(), explicit_language_id=languages["en"].id
    )

    with pytest.raises(EntityNotFoundException):
        await coordinator.update_variant(rows[0].unique_code, languages["fr"].id, {"name": "x"})


async def test_delete_group(coordinator, languages):
    rows = await coordinator.create_for_all_languages(base_content())
    code = rows[0].unique_code

    assert await coordinator.delete_group(code) == 4

    assert await coordinator.find_group(code) == []
    with pytest.raises(EntityNotFoundException):
        await coordinator.delete_group(code)


async def test_delete_group_in_use_keeps_rows(coordinator, languages):
    rows = await coordinator.create_for_all_languages(base_content())
    code = rows[0].unique_code
    assert await coordinator.increment_use_count(rows[2].public_id) is True

    with pytest.raises(InUseException) as exc_info:
        await coordinator.delete_group(code)

    assert exc_info.value.details["use_count"] == 1
    assert len(await coordinator.find_group(code)) == 4


async def test_increment_use_count_of_missing_row(coordinator, languages):
    assert await coordinator.increment_use_count("missing") is False


async def test_find_single(coordinator, languages):
    rows = await coordinator.create_for_all_languages(base_content())
    by_language = {row.language_id: row for row in rows}
    english = by_language[languages["en"].id]

    french = await coordinator.find_single(english.public_id, languages["fr"].id)
    assert french.public_id == by_language[languages["fr"].id].public_id

    # Default language when none is named
    assert (await coordinator.find_single(french.public_id)).public_id == english.public_id

    with pytest.raises(EntityNotFoundException):
        await coordinator.find_single(english.public_id, extra_filter={"dropdown_type": "country"})


async def test_bulk_update_reports_skipped(coordinator, languages):
    rows = await coordinator.create_for_all_languages(base_content())

    outcome = await coordinator.bulk_update_by_public_ids(
        [rows[0].public_id, "missing", rows[1].public_id], {"status": False}
    )

    assert outcome.count == 2
    assert outcome.processed == [rows[0].public_id, rows[1].public_id]
    assert outcome.skipped == ["missing"]


async def test_bulk_delete_expanding_groups(coordinator, languages):
    first = await coordinator.create_for_all_languages(base_content())
    second = await coordinator.create_for_all_languages(base_content(name="Finance"))
    await coordinator.increment_use_count(second[0].public_id)

    outcome = await coordinator.bulk_delete_by_public_ids(
        [first[0].public_id, first[1].public_id, second[0].public_id], expand_groups=True
    )

    assert outcome.count == 4
    assert outcome.processed == [first[0].public_id, first[1].public_id]
    assert outcome.skipped == [second[0].public_id]
    assert await coordinator.find_group(first[0].unique_code) == []
    assert len(await coordinator.find_group(second[0].unique_code)) == 4
