"""
Error taxonomy for the tipping service.

Every error carries a client-safe ``message`` and an optional ``detail`` that
is only ever logged (or shown in development).
"""
from typing import Optional


class PourboireError(Exception):
    status_code = 500
    generic_message = "Erreur serveur."

    def __init__(self, message: Optional[str] = None, *, detail: Optional[str] = None):
        self.message = message or self.generic_message
        self.detail = detail
        super().__init__(self.message)


class InvalidAmountError(PourboireError):
    status_code = 400
    generic_message = "Montant invalide."


class ConfigurationError(PourboireError):
    status_code = 500


class ProviderError(PourboireError):
    """Non-2xx answer (or no answer) from a payment provider."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        provider: str,
        status_code: int = 500,
        detail: Optional[str] = None,
    ):
        super().__init__(message, detail=detail)
        self.provider = provider
        # Provider 4xx keeps its status, anything else is ours to own
        self.status_code = status_code if 400 <= status_code < 500 else 500


class InitiationError(PourboireError):
    status_code = 500
    generic_message = "Le prestataire n'a pas renvoyé d'URL de paiement."


class WebhookError(PourboireError):
    status_code = 400


class MissingSignatureError(WebhookError):
    generic_message = "Signature manquante"


class InvalidSignatureError(WebhookError):
    generic_message = "Signature invalide"


class MalformedPayloadError(WebhookError):
    generic_message = "JSON invalide"
