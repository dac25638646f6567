"""
Coinbase Commerce charges over its REST API.

Only fixed-price charges are created; settlement always happens in the
application currency, the customer's preferred coin is a display hint.
"""
from decimal import Decimal
from typing import Optional

import httpx

from pourboire.errors import ConfigurationError, InitiationError, ProviderError
from pourboire.logging_config import get_logger

logger = get_logger(__name__)

PROVIDER = "coinbase"
DEFAULT_API_URL = "https://api.commerce.coinbase.com"


class CoinbaseCommerceClient:
    def __init__(
        self,
        api_key: Optional[str],
        *,
        settlement_currency: str = "eur",
        http_client: Optional[httpx.Client] = None,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
    ):
        self._api_key = api_key
        self.settlement_currency = settlement_currency.upper()
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def require_configured(self) -> None:
        if not self._api_key:
            raise ConfigurationError("Crypto non configuré.", detail="COINBASE_COMMERCE_API_KEY manquant")

    def create_charge(self, amount: Decimal, currency_hint: Optional[str] = None) -> str:
        """Create a fixed-price charge for ``amount`` (major units) and return its hosted URL."""
        self.require_configured()

        amount_str = f"{amount:.2f}"
        hint = f" ({currency_hint})" if currency_hint else ""
        payload = {
            "name": "Pourboire ScanTip",
            "description": f"Pourboire {amount_str} €{hint}",
            "pricing_type": "fixed_price",
            "local_price": {"amount": amount_str, "currency": self.settlement_currency},
        }

        try:
            response = self._http.post(
                "/charges",
                json=payload,
                headers={"X-CC-Api-Key": self._api_key},
            )
        except httpx.HTTPError as exc:
            raise ProviderError("Erreur Coinbase Commerce.", provider=PROVIDER, detail=str(exc)) from exc

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.is_error:
            error = data.get("error") if isinstance(data.get("error"), dict) else {}
            raise ProviderError(
                "Erreur Coinbase Commerce.",
                provider=PROVIDER,
                status_code=response.status_code,
                detail=error.get("message") or response.text,
            )

        charge = data.get("data") if isinstance(data.get("data"), dict) else {}
        hosted_url = charge.get("hosted_url") or data.get("hosted_url")
        if not hosted_url:
            raise InitiationError("URL de paiement Coinbase manquante.")

        logger.info("crypto_charge_created", charge_code=charge.get("code"), amount=amount_str)
        return hosted_url
