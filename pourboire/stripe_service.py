from typing import Optional

import stripe

from pourboire.errors import ConfigurationError, InitiationError, ProviderError
from pourboire.logging_config import get_logger

logger = get_logger(__name__)

PROVIDER = "stripe"


class StripeGateway:
    """Stripe Checkout client, built once at startup and shared by requests."""

    def __init__(self, api_key: Optional[str], currency: str = "eur"):
        if not api_key:
            raise ConfigurationError(
                "STRIPE_SECRET_KEY est manquante dans les variables d'environnement."
            )
        self._api_key = api_key
        self.currency = currency

    def create_checkout_session(
        self,
        amount: int,
        *,
        success_url: str,
        cancel_url: str,
        product_name: str,
        description: str,
    ) -> str:
        """Create a single-item hosted Checkout Session and return its redirect URL."""
        try:
            session = stripe.checkout.Session.create(
                api_key=self._api_key,
                mode="payment",
                payment_method_types=["card"],
                line_items=[
                    {
                        "quantity": 1,
                        "price_data": {
                            "currency": self.currency,
                            "unit_amount": amount,
                            "product_data": {
                                "name": product_name,
                                "description": description,
                            },
                        },
                    }
                ],
                success_url=success_url,
                cancel_url=cancel_url,
            )
        except stripe.StripeError as exc:
            raise ProviderError(provider=PROVIDER, detail=str(exc)) from exc

        url = getattr(session, "url", None)
        if not url:
            raise InitiationError("Stripe n'a pas renvoyé d'URL de paiement.")

        logger.info("checkout_session_created", session_id=getattr(session, "id", None), amount=amount)
        return url
