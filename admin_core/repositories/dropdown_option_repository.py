# File: admin_core/repositories/dropdown_option_repository.py

import re
from typing import Any, Mapping, Optional

from sqlalchemy import func, select

from admin_core.db.models import DropdownOptionModel
from admin_core.db.mongo import DROPDOWN_OPTIONS
from admin_core.repositories.base_repository import (
    GroupedEntityRepository,
    handle_backend_errors,
)
from admin_core.repositories.language_repository import (
    language_summary_from_document,
    language_summary_from_row,
)
from admin_core.repositories.mongo_repository import MongoRepository, strip_document
from admin_core.repositories.sql_repository import SqlRepository, row_to_dict
from admin_core.schemas.dropdown_option import DropdownOption

DROPDOWN_SEARCH_FIELDS = ("name", "country_short_code")


def dropdown_option_from_row(row: DropdownOptionModel) -> DropdownOption:
    data = row_to_dict(row)
    data["language"] = language_summary_from_row(row.language)
    return DropdownOption.model_validate(data)


def dropdown_option_from_document(doc: Mapping[str, Any]) -> DropdownOption:
    data = strip_document(doc, ("languageId",))
    data["language"] = language_summary_from_document(data.get("language"))
    return DropdownOption.model_validate(data)


class SqlDropdownOptionRepository(
    SqlRepository[DropdownOption], GroupedEntityRepository[DropdownOption]
):
    model = DropdownOptionModel
    entity_type = "DropdownOption"
    populate_language = True
    search_fields = DROPDOWN_SEARCH_FIELDS

    def to_entity(self, row: DropdownOptionModel) -> DropdownOption:
        return dropdown_option_from_row(row)

    @handle_backend_errors("check name")
    async def name_exists_in_type(
        self, name: str, dropdown_type: str, exclude_unique_code: Optional[int] = None
    ) -> bool:
        """Case-insensitive name lookup within one dropdown type."""
        stmt = select(DropdownOptionModel.id).where(
            func.lower(DropdownOptionModel.name) == name.strip().lower(),
            DropdownOptionModel.dropdown_type == dropdown_type,
        )
        if exclude_unique_code is not None:
            stmt = stmt.where(DropdownOptionModel.unique_code != exclude_unique_code)
        async with self.session_factory() as session:
            result = await session.execute(stmt.limit(1))
            return result.first() is not None


class MongoDropdownOptionRepository(
    MongoRepository[DropdownOption], GroupedEntityRepository[DropdownOption]
):
    collection_name = DROPDOWN_OPTIONS
    entity_type = "DropdownOption"
    object_id_fields = ("_id", "languageId")
    populate_language = True
    search_fields = DROPDOWN_SEARCH_FIELDS

    def to_entity(self, doc: Mapping[str, Any]) -> DropdownOption:
        return dropdown_option_from_document(doc)

    @handle_backend_errors("check name")
    async def name_exists_in_type(
        self, name: str, dropdown_type: str, exclude_unique_code: Optional[int] = None
    ) -> bool:
        query = {
            "name": {"$regex": f"^{re.escape(name.strip())}$", "$options": "i"},
            "dropdownType": dropdown_type,
        }
        if exclude_unique_code is not None:
            query["uniqueCode"] = {"$ne": exclude_unique_code}
        return await self.collection.find_one(query) is not None
