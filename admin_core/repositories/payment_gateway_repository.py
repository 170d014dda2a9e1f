# File: admin_core/repositories/payment_gateway_repository.py

from typing import Any, Mapping

from admin_core.db.models import PaymentGatewayModel
from admin_core.db.mongo import PAYMENT_GATEWAYS
from admin_core.repositories.mongo_repository import MongoRepository, strip_document
from admin_core.repositories.sql_repository import SqlRepository, row_to_dict
from admin_core.schemas.payment_gateway import PaymentGateway

PAYMENT_GATEWAY_SEARCH_FIELDS = ("title", "payment_slug")


def payment_gateway_from_row(row: PaymentGatewayModel) -> PaymentGateway:
    data = row_to_dict(row)
    data["sandbox_details"] = data.get("sandbox_details") or {}
    data["live_details"] = data.get("live_details") or {}
    return PaymentGateway.model_validate(data)


def payment_gateway_from_document(doc: Mapping[str, Any]) -> PaymentGateway:
    data = strip_document(doc)
    data.setdefault("sandboxDetails", {})
    data.setdefault("liveDetails", {})
    return PaymentGateway.model_validate(data)


class SqlPaymentGatewayRepository(SqlRepository[PaymentGateway]):
    model = PaymentGatewayModel
    entity_type = "PaymentGateway"
    search_fields = PAYMENT_GATEWAY_SEARCH_FIELDS

    def to_entity(self, row: PaymentGatewayModel) -> PaymentGateway:
        return payment_gateway_from_row(row)


class MongoPaymentGatewayRepository(MongoRepository[PaymentGateway]):
    collection_name = PAYMENT_GATEWAYS
    entity_type = "PaymentGateway"
    search_fields = PAYMENT_GATEWAY_SEARCH_FIELDS

    def to_entity(self, doc: Mapping[str, Any]) -> PaymentGateway:
        return payment_gateway_from_document(doc)
