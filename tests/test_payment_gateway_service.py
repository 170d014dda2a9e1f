# tests/test_payment_gateway_service.py
import pytest

from admin_core.core.exceptions import (
    ConflictException,
    EntityNotFoundException,
    ValidationException,
)
from admin_core.schemas.payment_gateway import PaymentGatewayCreate, PaymentGatewayUpdate
from admin_core.services.payment_gateway_service import (
    HIDDEN_VALUE,
    is_sensitive_key,
    sanitize_details,
)

STRIPE_DETAILS = {
    "publicKey": "pk_test_123",
    "secretKey": "sk_test_456",
    "webhook": {"url": "https://example.com/hook", "webhookSecret": "whsec_789"},
}


@pytest.fixture
def gateway_service(services):
    return services.get_payment_gateway_service()


@pytest.fixture
def repository_calls(gateway_service, monkeypatch):
    """Record every get_detail call that reaches storage."""
    calls = []
    original = gateway_service.repository.get_detail

    async def spy(filter):
        calls.append(filter)
        return await original(filter)

    monkeypatch.setattr(gateway_service.repository, "get_detail", spy)
    return calls


async def create_gateway(gateway_service, slug="stripe", **overrides):
    data = {
        "title": slug.title(),
        "payment_slug": slug,
        "sandbox_details": dict(STRIPE_DETAILS),
    }
    data.update(overrides)
    return await gateway_service.create(PaymentGatewayCreate(**data))


# --- Redaction ---


def test_sensitive_keys():
    assert is_sensitive_key("secretKey")
    assert is_sensitive_key("CLIENT_SECRET")
    assert is_sensitive_key("accessToken")
    assert not is_sensitive_key("publicKey")


def test_sanitize_details_recurses():
    details = sanitize_details({"a": [{"password": "x"}], **STRIPE_DETAILS})

    assert details["publicKey"] == "pk_test_123"
    assert details["secretKey"] == HIDDEN_VALUE
    assert details["webhook"] == {"url": "https://example.com/hook", "webhookSecret": HIDDEN_VALUE}
    assert details["a"] == [{"password": HIDDEN_VALUE}]


async def test_public_read_is_redacted_and_cached(gateway_service, repository_calls):
    await create_gateway(gateway_service)
    repository_calls.clear()

    first = await gateway_service.get_public_payment_gateway("stripe")
    second = await gateway_service.get_public_payment_gateway("STRIPE")

    assert first == second
    assert len(repository_calls) == 1
    assert first["paymentSlug"] == "stripe"
    assert first["sandboxDetails"]["secretKey"] == HIDDEN_VALUE
    assert first["sandboxDetails"]["publicKey"] == "pk_test_123"
    assert "id" not in first


async def test_admin_read_keeps_secrets(gateway_service):
    await create_gateway(gateway_service)

    gateway = await gateway_service.get_admin_payment_gateway("stripe")

    assert gateway.sandbox_details["secretKey"] == "sk_test_456"


async def test_inactive_gateway_is_not_public(gateway_service):
    await create_gateway(gateway_service, status=False)

    with pytest.raises(EntityNotFoundException):
        await gateway_service.get_public_payment_gateway("stripe")
    assert (await gateway_service.get_admin_payment_gateway("stripe")).status is False


async def test_update_invalidates_cached_reads(gateway_service):
    await create_gateway(gateway_service)
    await gateway_service.get_public_payment_gateway("stripe")
    await gateway_service.get_admin_payment_gateway("stripe")

    await gateway_service.update("stripe", PaymentGatewayUpdate(title="Stripe Checkout"))

    assert (await gateway_service.get_public_payment_gateway("stripe"))["title"] == "Stripe Checkout"
    assert (await gateway_service.get_admin_payment_gateway("stripe")).title == "Stripe Checkout"


async def test_slug_rename(gateway_service):
    await create_gateway(gateway_service)
    await create_gateway(gateway_service, slug="paypal")

    with pytest.raises(ConflictException):
        await gateway_service.update("stripe", PaymentGatewayUpdate(payment_slug="paypal"))

    await gateway_service.update("stripe", PaymentGatewayUpdate(payment_slug="stripe-v2"))
    with pytest.raises(EntityNotFoundException):
        await gateway_service.get_public_payment_gateway("stripe")
    assert (await gateway_service.get_public_payment_gateway("stripe-v2"))["title"] == "Stripe"


# --- Default gateway ---


async def test_get_default_caches_none(gateway_service, repository_calls):
    assert await gateway_service.get_default() is None
    assert await gateway_service.get_default() is None
    assert len(repository_calls) == 1


async def test_set_default_is_exclusive(gateway_service):
    await create_gateway(gateway_service, is_default=True)
    await create_gateway(gateway_service, slug="paypal")

    assert (await gateway_service.get_default()).payment_slug == "stripe"

    await gateway_service.set_default("paypal")

    assert (await gateway_service.get_default()).payment_slug == "paypal"
    assert await gateway_service.repository.count({"is_default": True}) == 1


async def test_creating_a_default_refreshes_cached_none(gateway_service):
    assert await gateway_service.get_default() is None

    await create_gateway(gateway_service, is_default=True)

    assert (await gateway_service.get_default()).payment_slug == "stripe"


async def test_inactive_gateway_cannot_be_default(gateway_service):
    await create_gateway(gateway_service, status=False)

    with pytest.raises(ValidationException):
        await gateway_service.set_default("stripe")


async def test_inactive_gateway_is_not_created_as_default(gateway_service):
    await create_gateway(gateway_service, is_default=True)

    with pytest.raises(ValidationException):
        await create_gateway(gateway_service, slug="paypal", status=False, is_default=True)

    assert not await gateway_service.repository.exists({"payment_slug": "paypal"})
    assert (await gateway_service.get_default()).payment_slug == "stripe"


async def test_inactive_gateway_is_not_updated_into_default(gateway_service):
    await create_gateway(gateway_service, is_default=True)
    await create_gateway(gateway_service, slug="paypal", status=False)

    with pytest.raises(ValidationException):
        await gateway_service.update("paypal", PaymentGatewayUpdate(is_default=True))
    with pytest.raises(ValidationException):
        await gateway_service.update("stripe", PaymentGatewayUpdate(status=False, is_default=True))

    assert (await gateway_service.get_default()).payment_slug == "stripe"

    # Activating in the same update is allowed
    updated = await gateway_service.update("paypal", PaymentGatewayUpdate(status=True, is_default=True))
    assert updated.is_default
    assert (await gateway_service.get_default()).payment_slug == "paypal"
    assert await gateway_service.repository.count({"is_default": True}) == 1


# --- Validation and deletion ---


@pytest.mark.parametrize("slug", ["bad slug", "stripe!", "pay/pal"])
async def test_invalid_slug(gateway_service, slug):
    with pytest.raises(ValidationException):
        await create_gateway(gateway_service, slug=slug)


async def test_duplicate_slug_conflicts(gateway_service):
    await create_gateway(gateway_service)
    with pytest.raises(ConflictException):
        await create_gateway(gateway_service, slug="Stripe")


async def test_active_mode_needs_details(gateway_service):
    with pytest.raises(ValidationException):
        await create_gateway(gateway_service, sandbox_details={})
    with pytest.raises(ValidationException):
        await create_gateway(gateway_service, payment_mode="live")


async def test_delete_requires_matching_slug_and_id(gateway_service):
    gateway = await create_gateway(gateway_service)
    await gateway_service.get_public_payment_gateway("stripe")

    with pytest.raises(EntityNotFoundException):
        await gateway_service.delete("paypal", gateway.public_id)

    assert await gateway_service.delete("stripe", gateway.public_id) is True
    with pytest.raises(EntityNotFoundException):
        await gateway_service.get_public_payment_gateway("stripe")


async def test_cache_management(gateway_service):
    await create_gateway(gateway_service)
    await gateway_service.get_public_payment_gateway("stripe")

    assert gateway_service.get_cache_stats()["keys"] == 1
    result = gateway_service.clear_cache()
    assert result["cleared"] == 1
    assert result["message"] == "Payment gateway cache cleared"
