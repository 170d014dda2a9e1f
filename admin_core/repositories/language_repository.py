# File: admin_core/repositories/language_repository.py

"""
Language repositories for both backends.

Both store the language code under ``folder``; the canonical model calls it
``code``.
"""

from typing import Any, Mapping, Optional

from admin_core.db.models import LanguageModel
from admin_core.db.mongo import DROPDOWN_OPTIONS, LANGUAGES, SLIDERS
from admin_core.repositories.base_repository import handle_backend_errors
from admin_core.repositories.mongo_repository import MongoRepository, _to_object_id, strip_document
from admin_core.repositories.sql_repository import SqlRepository, row_to_dict
from admin_core.schemas.language import Language, LanguageSummary

LANGUAGE_SEARCH_FIELDS = ("name", "code", "iso2", "iso3")

# Collections whose rows reference a language and go away with it
GROUPED_COLLECTIONS = (DROPDOWN_OPTIONS, SLIDERS)


def language_from_row(row: LanguageModel) -> Language:
    return Language.model_validate(row_to_dict(row, {"folder": "code"}))


def language_summary_from_row(row: Optional[LanguageModel]) -> Optional[LanguageSummary]:
    if row is None:
        return None
    return LanguageSummary.model_validate(row_to_dict(row, {"folder": "code"}))


def _rename_folder(data: dict) -> dict:
    if "folder" in data:
        data["code"] = data.pop("folder")
    return data


def language_from_document(doc: Mapping[str, Any]) -> Language:
    return Language.model_validate(_rename_folder(strip_document(doc)))


def language_summary_from_document(doc: Optional[Mapping[str, Any]]) -> Optional[LanguageSummary]:
    if not doc:
        return None
    return LanguageSummary.model_validate(_rename_folder(strip_document(doc)))


class SqlLanguageRepository(SqlRepository[Language]):
    model = LanguageModel
    entity_type = "Language"
    field_map = {"code": "folder"}
    search_fields = LANGUAGE_SEARCH_FIELDS

    def to_entity(self, row: LanguageModel) -> Language:
        return language_from_row(row)


class MongoLanguageRepository(MongoRepository[Language]):
    collection_name = LANGUAGES
    entity_type = "Language"
    field_map = {"code": "folder"}
    search_fields = LANGUAGE_SEARCH_FIELDS

    def to_entity(self, doc: Mapping[str, Any]) -> Language:
        return language_from_document(doc)

    @handle_backend_errors("delete")
    async def delete_by_id(self, id: str) -> bool:
        """Delete a language together with its grouped variants."""
        key = _to_object_id(id)
        result = await self.collection.delete_one({"_id": key})
        if result.deleted_count == 0:
            return False
        for name in GROUPED_COLLECTIONS:
            await self.database[name].delete_many({"languageId": key})
        return True
