from fastapi import Depends, Request
from sqlalchemy.orm import Session

from pourboire.coinbase_service import CoinbaseCommerceClient
from pourboire.config import Settings
from pourboire.recorder import PaymentRecorder
from pourboire.repository import PaymentRepository
from pourboire.stripe_service import StripeGateway
from pourboire.webhooks import CoinbaseWebhookVerifier, StripeWebhookVerifier


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_repository(db: Session = Depends(get_db)) -> PaymentRepository:
    return PaymentRepository(db)


def get_recorder(repository: PaymentRepository = Depends(get_repository)) -> PaymentRecorder:
    return PaymentRecorder(repository)


def get_stripe_gateway(request: Request) -> StripeGateway:
    return request.app.state.stripe_gateway


def get_coinbase_client(request: Request) -> CoinbaseCommerceClient:
    return request.app.state.coinbase_client


def get_stripe_verifier(request: Request) -> StripeWebhookVerifier:
    return request.app.state.stripe_verifier


def get_coinbase_verifier(request: Request) -> CoinbaseWebhookVerifier:
    return request.app.state.coinbase_verifier
