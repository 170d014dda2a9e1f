# File: admin_core/services/payment_gateway_service.py

"""
Payment gateway configuration service.

Gateway lookups by slug are read far more often than they are written, so
they are served from a TTL cache:

- ``payment_gateway:public:<slug>`` holds the redacted payload for public reads
- ``payment_gateway:admin:<slug>`` holds the full gateway for admin reads
- ``payment_gateway:default`` holds the default gateway, or None

Writes touching a slug drop that slug's keys and the default key. Changing the
default flushes the whole namespace.
"""

import logging
import re
from typing import Any, Dict, Optional

from admin_core.core.exceptions import (
    ConflictException,
    EntityNotFoundException,
    ValidationException,
)
from admin_core.core.messages import MessageCatalog
from admin_core.repositories.base_repository import BaseRepository
from admin_core.schemas.common import PaginatedResult, PaginationOptions, PrincipalContext
from admin_core.schemas.payment_gateway import (
    PaymentGateway,
    PaymentGatewayCreate,
    PaymentGatewayUpdate,
)
from admin_core.services.base_service import BaseService
from admin_core.services.cache_service import CacheService
from admin_core.services.default_singleton import DefaultScope, DefaultSingletonEnforcer

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "payment_gateway"
DEFAULT_KEY = "default"
HIDDEN_VALUE = "***hidden***"
SLUG_PATTERN = re.compile(r"^[a-z0-9_-]+$")

# Matched case-insensitively as substrings of detail keys
SENSITIVE_KEY_PARTS = (
    "secretkey",
    "secret",
    "privatekey",
    "private",
    "password",
    "token",
    "apisecret",
    "clientsecret",
    "webhooksecret",
)


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(part in lowered for part in SENSITIVE_KEY_PARTS)


def sanitize_details(details: Any) -> Any:
    """Replace the values of sensitive keys, recursing into nested objects and lists."""
    if isinstance(details, dict):
        return {
            key: HIDDEN_VALUE if is_sensitive_key(str(key)) else sanitize_details(value)
            for key, value in details.items()
        }
    if isinstance(details, list):
        return [sanitize_details(item) for item in details]
    return details


def public_key(slug: str) -> str:
    return f"public:{slug}"


def admin_key(slug: str) -> str:
    return f"admin:{slug}"


class PaymentGatewayService(BaseService[PaymentGateway]):
    """
    Service for managing payment gateway configuration.

    Provides functionality for:
    - Gateway CRUD keyed by payment slug
    - A single default gateway
    - Cached public (redacted) and admin reads
    """

    entity_type = "PaymentGateway"

    def __init__(
        self,
        repository: BaseRepository[PaymentGateway],
        cache_service: CacheService,
        messages: Optional[MessageCatalog] = None,
        principal: Optional[PrincipalContext] = None,
    ):
        super().__init__(repository, messages=messages, principal=principal)
        self.cache_service = cache_service
        self.default_enforcer = DefaultSingletonEnforcer(
            DefaultScope(
                "PaymentGateway",
                repository,
                field="is_default",
                on=True,
                off=False,
                active_filter={"status": True},
                required=False,
            )
        )

    # Reads

    async def get_public_payment_gateway(self, slug: str) -> Dict[str, Any]:
        """
        Return the redacted payload of an active gateway.

        Raises:
            EntityNotFoundException: If no active gateway has this slug
        """
        slug = self._normalize_slug(slug)
        cached = self.cache_service.get(public_key(slug))
        if cached is not None:
            return cached

        gateway = await self.repository.get_detail({"payment_slug": slug, "status": True})
        if gateway is None:
            raise EntityNotFoundException(self.entity_type, slug)

        payload = self.sanitize(gateway)
        self.cache_service.set(public_key(slug), payload)
        return payload

    async def get_admin_payment_gateway(self, slug: str) -> PaymentGateway:
        slug = self._normalize_slug(slug)
        gateway = await self.cache_service.get_or_load(
            admin_key(slug),
            lambda: self.repository.get_detail({"payment_slug": slug}),
        )
        if gateway is None:
            raise EntityNotFoundException(self.entity_type, slug)
        return gateway

    async def get_default(self) -> Optional[PaymentGateway]:
        """Return the active default gateway; None is a valid, cached answer."""
        return await self.cache_service.get_or_load(
            DEFAULT_KEY, self.default_enforcer.get_default, cache_none=True
        )

    async def list(
        self,
        options: Optional[PaginationOptions] = None,
        search: Optional[str] = None,
        status: Optional[bool] = None,
    ) -> PaginatedResult:
        filter = {} if status is None else {"status": status}
        return await self.repository.find_with_pagination_and_search(
            search, None, filter, options or PaginationOptions()
        )

    # Writes

    async def create(self, data: PaymentGatewayCreate) -> PaymentGateway:
        """
        Create a gateway.

        Raises:
            ValidationException: If the slug or details are invalid, or an inactive
                gateway is made the default
            ConflictException: If the slug is taken
        """
        payload = data.model_dump()
        self._validate_slug(payload["payment_slug"])
        self._validate_details(payload["payment_mode"], payload["sandbox_details"], payload["live_details"])

        if await self.repository.exists({"payment_slug": payload["payment_slug"]}):
            raise ConflictException(self.entity_type, "payment_slug", payload["payment_slug"])

        make_default = payload.pop("is_default")
        if make_default and not payload["status"]:
            raise ValidationException(
                "An inactive payment gateway cannot be the default", field="status", value=False
            )

        gateway = await self.repository.insert({**payload, "is_default": False})
        if make_default:
            gateway = await self._set_default(gateway)
        else:
            self._invalidate(gateway.payment_slug)

        self._log_operation("create", self.entity_type, gateway.payment_slug)
        return gateway

    async def update(self, slug: str, data: PaymentGatewayUpdate) -> PaymentGateway:
        """
        Update a gateway identified by slug.

        Raises:
            EntityNotFoundException: If the gateway does not exist
            ValidationException: If the new slug or details are invalid, or an inactive
                gateway is made the default
            ConflictException: If the new slug is taken
        """
        gateway = await self._get_by_slug(slug)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        new_slug = changes.get("payment_slug")
        if new_slug and new_slug != gateway.payment_slug:
            self._validate_slug(new_slug)
            if await self.repository.exists({"payment_slug": new_slug}):
                raise ConflictException(self.entity_type, "payment_slug", new_slug)

        self._validate_details(
            changes.get("payment_mode", gateway.payment_mode),
            changes.get("sandbox_details", gateway.sandbox_details),
            changes.get("live_details", gateway.live_details),
        )

        make_default = changes.pop("is_default", None)
        if make_default and not changes.get("status", gateway.status):
            raise ValidationException(
                "An inactive payment gateway cannot be the default", field="status", value=False
            )
        if make_default is False and gateway.is_default:
            changes["is_default"] = False

        updated = await self.repository.update_by_id(gateway.id, changes) if changes else gateway
        if updated is None:
            raise EntityNotFoundException(self.entity_type, slug)

        self._invalidate(gateway.payment_slug)
        if updated.payment_slug != gateway.payment_slug:
            self._invalidate(updated.payment_slug)
        if make_default and not updated.is_default:
            updated = await self._set_default(updated)

        self._log_operation("update", self.entity_type, updated.payment_slug, {"fields": sorted(changes)})
        return updated

    async def delete(self, slug: str, public_id: str) -> bool:
        """
        Delete a gateway; both its slug and public id must match.

        Raises:
            EntityNotFoundException: If no gateway matches both
        """
        slug = self._normalize_slug(slug)
        gateway = await self.repository.get_detail({"payment_slug": slug, "public_id": public_id})
        if gateway is None:
            raise EntityNotFoundException(self.entity_type, f"{slug}/{public_id}")

        deleted = await self.repository.delete_by_id(gateway.id)
        self._invalidate(slug)
        self._log_operation("delete", self.entity_type, slug)
        return deleted

    async def set_default(self, slug: str) -> PaymentGateway:
        gateway = await self._get_by_slug(slug)
        if not gateway.status:
            raise ValidationException(
                "An inactive payment gateway cannot be the default", field="status", value=False
            )
        gateway = await self._set_default(gateway)
        self._log_operation("set_default", self.entity_type, gateway.payment_slug)
        return gateway

    # Cache management

    def get_cache_stats(self) -> Dict[str, Any]:
        return self.cache_service.get_stats()

    def clear_cache(self) -> Dict[str, Any]:
        removed = self.cache_service.clear()
        return {"cleared": removed, "message": self._message("payment_gateway.cache_cleared")}

    # Helpers

    @staticmethod
    def sanitize(gateway: PaymentGateway) -> Dict[str, Any]:
        """Public payload of a gateway with every sensitive detail hidden."""
        payload = gateway.to_response()
        payload["sandboxDetails"] = sanitize_details(payload.get("sandboxDetails") or {})
        payload["liveDetails"] = sanitize_details(payload.get("liveDetails") or {})
        return payload

    async def _set_default(self, gateway: PaymentGateway) -> PaymentGateway:
        updated = await self.default_enforcer.set_default(gateway.id)
        self.cache_service.clear()
        return updated

    async def _get_by_slug(self, slug: str) -> PaymentGateway:
        slug = self._normalize_slug(slug)
        gateway = await self.repository.get_detail({"payment_slug": slug})
        if gateway is None:
            raise EntityNotFoundException(self.entity_type, slug)
        return gateway

    def _invalidate(self, slug: str) -> None:
        self.cache_service.invalidate(public_key(slug))
        self.cache_service.invalidate(admin_key(slug))
        self.cache_service.invalidate(DEFAULT_KEY)

    @staticmethod
    def _normalize_slug(slug: str) -> str:
        return (slug or "").strip().lower()

    @staticmethod
    def _validate_slug(slug: str) -> None:
        if not SLUG_PATTERN.match(slug or ""):
            raise ValidationException(
                "Payment slug may only contain lowercase letters, numbers, hyphens and underscores",
                field="payment_slug",
                value=slug,
            )

    @staticmethod
    def _validate_details(
        mode: str, sandbox_details: Dict[str, Any], live_details: Dict[str, Any]
    ) -> None:
        if mode not in ("sandbox", "live"):
            raise ValidationException("Payment mode must be sandbox or live", field="payment_mode", value=mode)
        for field, details in (("sandbox_details", sandbox_details), ("live_details", live_details)):
            if not isinstance(details, dict):
                raise ValidationException(f"{field} must be an object", field=field, value=details)
        active = live_details if mode == "live" else sandbox_details
        if not active:
            raise ValidationException(
                f"{mode} details are required when the gateway runs in {mode} mode",
                field=f"{mode}_details",
                value=active,
            )
