# File: admin_core/repositories/slider_repository.py

from typing import Any, Mapping

from admin_core.db.models import SliderModel
from admin_core.db.mongo import SLIDERS
from admin_core.repositories.base_repository import GroupedEntityRepository
from admin_core.repositories.language_repository import (
    language_summary_from_document,
    language_summary_from_row,
)
from admin_core.repositories.mongo_repository import MongoRepository, strip_document
from admin_core.repositories.sql_repository import SqlRepository, row_to_dict
from admin_core.schemas.slider import Slider

SLIDER_SEARCH_FIELDS = ("title", "description", "button_title")


def slider_from_row(row: SliderModel) -> Slider:
    data = row_to_dict(row)
    data["language"] = language_summary_from_row(row.language)
    return Slider.model_validate(data)


def slider_from_document(doc: Mapping[str, Any]) -> Slider:
    data = strip_document(doc, ("languageId",))
    data["language"] = language_summary_from_document(data.get("language"))
    return Slider.model_validate(data)


class SqlSliderRepository(SqlRepository[Slider], GroupedEntityRepository[Slider]):
    model = SliderModel
    entity_type = "Slider"
    populate_language = True
    search_fields = SLIDER_SEARCH_FIELDS

    def to_entity(self, row: SliderModel) -> Slider:
        return slider_from_row(row)


class MongoSliderRepository(MongoRepository[Slider], GroupedEntityRepository[Slider]):
    collection_name = SLIDERS
    entity_type = "Slider"
    object_id_fields = ("_id", "languageId")
    populate_language = True
    search_fields = SLIDER_SEARCH_FIELDS

    def to_entity(self, doc: Mapping[str, Any]) -> Slider:
        return slider_from_document(doc)
