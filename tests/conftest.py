import hashlib
import hmac
import time

import pytest
from fastapi.testclient import TestClient

from pourboire.config import Settings
from pourboire.main import create_app

STRIPE_WEBHOOK_SECRET = "whsec_test_secret"
COINBASE_WEBHOOK_SECRET = "cb_webhook_secret"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test_pourboire.db'}",
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret=STRIPE_WEBHOOK_SECRET,
        coinbase_api_key="cb_api_key_test",
        coinbase_webhook_secret=COINBASE_WEBHOOK_SECRET,
        app_url="https://tips.example.com",
        app_env="production",
    )


@pytest.fixture
def fastapi_app(settings):
    return create_app(settings)


@pytest.fixture
def client(fastapi_app):
    with TestClient(fastapi_app) as c:
        yield c


@pytest.fixture
def db(fastapi_app):
    session = fastapi_app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def stripe_signature():
    """Build a Stripe-Signature header the way Stripe signs deliveries."""
    def sign(payload: bytes, secret: str = STRIPE_WEBHOOK_SECRET, timestamp: int = None) -> str:
        ts = int(time.time()) if timestamp is None else timestamp
        signed = f"{ts}.".encode("utf-8") + payload
        digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
        return f"t={ts},v1={digest}"
    return sign


@pytest.fixture
def coinbase_signature():
    def sign(payload: bytes, secret: str = COINBASE_WEBHOOK_SECRET) -> str:
        return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return sign
