import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from pourboire.amounts import MAX_AMOUNT_CENTS, MIN_AMOUNT_CENTS, PRESET_AMOUNTS_CENTS
from pourboire.errors import ConfigurationError

# Force-load .env (Windows-safe, reload-safe)
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"


def _clean(value: Optional[str]) -> str:
    return (value or "").strip().strip("'").strip('"')


def _optional(name: str) -> Optional[str]:
    return _clean(os.getenv(name)) or None


def _number(name: str, default, cast=int):
    return cast(_clean(os.getenv(name)) or default)


class Settings(BaseModel):
    database_url: str
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    stripe_webhook_tolerance: int = 300
    coinbase_api_key: Optional[str] = None
    coinbase_webhook_secret: Optional[str] = None
    coinbase_api_url: str = "https://api.commerce.coinbase.com"
    coinbase_timeout: float = 10.0
    app_url: str = "http://localhost:3000"
    app_env: str = "production"
    currency: str = "eur"
    min_amount_cents: int = MIN_AMOUNT_CENTS
    max_amount_cents: int = MAX_AMOUNT_CENTS
    preset_amounts_cents: List[int] = list(PRESET_AMOUNTS_CENTS)

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(dotenv_path=ENV_PATH)

        database_url = _optional("DATABASE_URL")
        if not database_url:
            raise ConfigurationError("DATABASE_URL is not set. Check your .env file.")

        presets = _clean(os.getenv("PRESET_AMOUNTS_CENTS"))
        try:
            return cls(
                database_url=database_url,
                stripe_secret_key=_optional("STRIPE_SECRET_KEY"),
                stripe_webhook_secret=_optional("STRIPE_WEBHOOK_SECRET"),
                stripe_webhook_tolerance=_number("STRIPE_WEBHOOK_TOLERANCE", 300),
                coinbase_api_key=_optional("COINBASE_COMMERCE_API_KEY"),
                coinbase_webhook_secret=_optional("COINBASE_WEBHOOK_SECRET"),
                coinbase_api_url=_optional("COINBASE_COMMERCE_API_URL") or cls.model_fields["coinbase_api_url"].default,
                coinbase_timeout=_number("COINBASE_TIMEOUT", 10.0, float),
                app_url=(_optional("APP_URL") or cls.model_fields["app_url"].default).rstrip("/"),
                app_env=(_optional("APP_ENV") or "production").lower(),
                currency=(_optional("CURRENCY") or "eur").lower(),
                min_amount_cents=_number("MIN_AMOUNT_CENTS", MIN_AMOUNT_CENTS),
                max_amount_cents=_number("MAX_AMOUNT_CENTS", MAX_AMOUNT_CENTS),
                preset_amounts_cents=[int(p) for p in presets.split(",") if p.strip()] if presets else list(PRESET_AMOUNTS_CENTS),
            )
        except ValueError as exc:
            raise ConfigurationError("Invalid numeric setting", detail=str(exc)) from exc
