"""
Authenticity checks for inbound provider webhooks.

Signatures are always computed over the raw request bytes; the JSON body is
only parsed once the signature has been accepted.
"""
import hashlib
import hmac
import json
from typing import Any, Dict, Optional

import stripe

from pourboire.errors import (
    ConfigurationError,
    InvalidSignatureError,
    MalformedPayloadError,
    MissingSignatureError,
)


def _parse_event(raw_body: bytes) -> Dict[str, Any]:
    try:
        event = json.loads(raw_body)
    except ValueError as exc:
        raise MalformedPayloadError(detail=str(exc)) from exc
    if not isinstance(event, dict):
        raise MalformedPayloadError(detail="event is not a JSON object")
    return event


class StripeWebhookVerifier:
    provider = "stripe"
    signature_header = "stripe-signature"

    def __init__(self, secret: Optional[str], tolerance: int = 300):
        self.secret = secret
        self.tolerance = tolerance

    def verify(self, raw_body: bytes, signature: Optional[str]) -> Dict[str, Any]:
        if not self.secret:
            raise ConfigurationError("Webhook non configuré", detail="STRIPE_WEBHOOK_SECRET manquant")
        if not signature:
            raise MissingSignatureError()
        try:
            payload = raw_body.decode("utf-8")
        except UnicodeDecodeError as exc:
            # Stripe signs text payloads only
            raise InvalidSignatureError(detail=str(exc)) from exc
        try:
            stripe.WebhookSignature.verify_header(payload, signature, self.secret, self.tolerance)
        except Exception as exc:
            raise InvalidSignatureError(detail=str(exc)) from exc
        return _parse_event(raw_body)


class CoinbaseWebhookVerifier:
    provider = "coinbase"
    signature_header = "x-cc-webhook-signature"

    def __init__(self, secret: Optional[str]):
        self.secret = secret

    def verify(self, raw_body: bytes, signature: Optional[str]) -> Dict[str, Any]:
        if not self.secret:
            raise ConfigurationError("Webhook non configuré", detail="COINBASE_WEBHOOK_SECRET manquant")
        if not signature:
            raise MissingSignatureError()

        expected = hmac.new(self.secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
        try:
            received = bytes.fromhex(signature.strip())
        except ValueError as exc:
            raise InvalidSignatureError(detail="signature is not hex") from exc
        if len(expected) != len(received) or not hmac.compare_digest(expected, received):
            raise InvalidSignatureError(detail="HMAC mismatch")
        return _parse_event(raw_body)
