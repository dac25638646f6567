from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, Field

from pourboire.amounts import format_major, parse_major_amount, to_minor_units, validate_amount
from pourboire.coinbase_service import CoinbaseCommerceClient
from pourboire.config import Settings
from pourboire.dependencies import (
    get_coinbase_client,
    get_coinbase_verifier,
    get_recorder,
    get_repository,
    get_settings,
    get_stripe_gateway,
    get_stripe_verifier,
)
from pourboire.logging_config import get_logger
from pourboire.recorder import PaymentRecorder
from pourboire.repository import PaymentRepository
from pourboire.stripe_service import StripeGateway
from pourboire.webhooks import CoinbaseWebhookVerifier, StripeWebhookVerifier

logger = get_logger(__name__)

router = APIRouter(prefix="/api")

# flow -> (product name, cancel path)
CHECKOUT_FLOWS = {
    "default": ("Pourboire", "/cancel"),
    "scantip": ("Pourboire ScanTip", "/tip/pay?amount={amount}"),
}

CRYPTO_CONFIRMED = "charge:confirmed"


class CheckoutRequest(BaseModel):
    amount_minor_units: Any = Field(
        default=None, validation_alias=AliasChoices("amountMinorUnits", "amountCents")
    )
    flow: Literal["default", "scantip"] = "default"


class CryptoChargeRequest(BaseModel):
    amount_major_units: Any = Field(
        default=None, validation_alias=AliasChoices("amountMajorUnits", "amountEur")
    )
    currency_hint: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("currencyHint", "currency")
    )


@router.get("/amounts")
def amount_choices(settings: Settings = Depends(get_settings)):
    return {
        "currency": settings.currency,
        "presets": settings.preset_amounts_cents,
        "min": settings.min_amount_cents,
        "max": settings.max_amount_cents,
    }


@router.post("/create-checkout-session")
def create_checkout_session(
    request: CheckoutRequest,
    settings: Settings = Depends(get_settings),
    gateway: StripeGateway = Depends(get_stripe_gateway),
):
    amount = validate_amount(
        request.amount_minor_units, settings.min_amount_cents, settings.max_amount_cents
    )
    amount_major = format_major(amount)
    product_name, cancel_path = CHECKOUT_FLOWS[request.flow]

    url = gateway.create_checkout_session(
        amount,
        success_url=f"{settings.app_url}/success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=settings.app_url + cancel_path.format(amount=amount_major),
        product_name=product_name,
        description=f"Pourboire de {amount_major} €",
    )
    return {"url": url}


@router.post("/create-crypto-charge")
def create_crypto_charge(
    request: CryptoChargeRequest,
    settings: Settings = Depends(get_settings),
    client: CoinbaseCommerceClient = Depends(get_coinbase_client),
):
    client.require_configured()
    amount = parse_major_amount(request.amount_major_units)
    validate_amount(to_minor_units(amount), settings.min_amount_cents, settings.max_amount_cents)

    hosted_url = client.create_charge(amount, request.currency_hint)
    return {"hosted_url": hosted_url}


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    verifier: StripeWebhookVerifier = Depends(get_stripe_verifier),
    recorder: PaymentRecorder = Depends(get_recorder),
):
    payload = await request.body()
    event = verifier.verify(payload, request.headers.get(verifier.signature_header))
    await run_in_threadpool(recorder.record_completed_payment, event)
    return {"received": True}


@router.post("/crypto-webhook")
async def crypto_webhook(
    request: Request,
    verifier: CoinbaseWebhookVerifier = Depends(get_coinbase_verifier),
):
    payload = await request.body()
    event = verifier.verify(payload, request.headers.get(verifier.signature_header))

    # Coinbase nests the event under "event"; accept a bare event as well
    inner = event.get("event") if isinstance(event.get("event"), dict) else event
    if inner.get("type") == CRYPTO_CONFIRMED:
        charge = inner.get("data") if isinstance(inner.get("data"), dict) else {}
        # Not persisted: crypto payments have no recorder yet
        logger.info("crypto_payment_confirmed", charge_code=charge.get("code"), event_id=inner.get("id"))
    return {"received": True}


@router.get("/payments/{session_id}")
def payment_status(session_id: str, repository: PaymentRepository = Depends(get_repository)):
    payment = repository.get_by_session_id(session_id)
    if payment is None:
        return JSONResponse({"status": "pending"}, status_code=404)
    return {
        "status": payment.status,
        "amountMinorUnits": payment.amount_minor_units,
        "currency": payment.currency,
    }
