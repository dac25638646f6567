import pytest

from pourboire.config import Settings
from pourboire.errors import ConfigurationError

ENV_KEYS = [
    "DATABASE_URL", "STRIPE_SECRET_KEY", "STRIPE_WEBHOOK_SECRET", "STRIPE_WEBHOOK_TOLERANCE",
    "COINBASE_COMMERCE_API_KEY", "COINBASE_WEBHOOK_SECRET", "COINBASE_COMMERCE_API_URL",
    "COINBASE_TIMEOUT", "APP_URL", "APP_ENV", "CURRENCY", "MIN_AMOUNT_CENTS",
    "MAX_AMOUNT_CENTS", "PRESET_AMOUNTS_CENTS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr("pourboire.config.load_dotenv", lambda **kwargs: False)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./pourboire.db")

    settings = Settings.from_env()

    assert settings.stripe_secret_key is None
    assert settings.app_env == "production"
    assert not settings.is_development
    assert settings.currency == "eur"
    assert settings.min_amount_cents == 50
    assert settings.max_amount_cents == 100000
    assert settings.preset_amounts_cents == [100, 200, 500, 1000]
    assert settings.stripe_webhook_tolerance == 300
    assert settings.coinbase_api_url == "https://api.commerce.coinbase.com"


def test_values_are_cleaned(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./pourboire.db")
    monkeypatch.setenv("STRIPE_SECRET_KEY", ' "sk_test_quoted" ')
    monkeypatch.setenv("APP_URL", "https://tips.example.com/")
    monkeypatch.setenv("APP_ENV", "Development")
    monkeypatch.setenv("CURRENCY", "EUR")
    monkeypatch.setenv("PRESET_AMOUNTS_CENTS", "300, 700,")

    settings = Settings.from_env()

    assert settings.stripe_secret_key == "sk_test_quoted"
    assert settings.app_url == "https://tips.example.com"
    assert settings.is_development
    assert settings.currency == "eur"
    assert settings.preset_amounts_cents == [300, 700]


def test_missing_database_url():
    with pytest.raises(ConfigurationError) as exc_info:
        Settings.from_env()
    assert "DATABASE_URL" in str(exc_info.value)


def test_invalid_number(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./pourboire.db")
    monkeypatch.setenv("MIN_AMOUNT_CENTS", "fifty")

    with pytest.raises(ConfigurationError):
        Settings.from_env()


def test_quoted_numbers_are_cleaned(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./pourboire.db")
    monkeypatch.setenv("MIN_AMOUNT_CENTS", '"100"')
    monkeypatch.setenv("MAX_AMOUNT_CENTS", " '5000' ")
    monkeypatch.setenv("STRIPE_WEBHOOK_TOLERANCE", "'600'")
    monkeypatch.setenv("COINBASE_TIMEOUT", '"2.5"')

    settings = Settings.from_env()

    assert settings.min_amount_cents == 100
    assert settings.max_amount_cents == 5000
    assert settings.stripe_webhook_tolerance == 600
    assert settings.coinbase_timeout == 2.5
