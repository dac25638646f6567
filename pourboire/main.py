from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pourboire.coinbase_service import CoinbaseCommerceClient
from pourboire.config import Settings
from pourboire.database import Base, create_db_engine, create_session_factory
from pourboire.errors import PourboireError, ProviderError
from pourboire.logging_config import configure_logging, get_logger
from pourboire.models import Payment  # noqa: F401  registers the table
from pourboire.routes import router
from pourboire.stripe_service import StripeGateway
from pourboire.webhooks import CoinbaseWebhookVerifier, StripeWebhookVerifier

logger = get_logger(__name__)

GENERIC_ERROR = "Erreur serveur."


def _public_message(exc: PourboireError, settings: Settings) -> str:
    # Signature and payload rejections never carry more than their label
    if settings.is_development and exc.detail and (exc.status_code >= 500 or isinstance(exc, ProviderError)):
        return exc.detail
    return exc.message


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PourboireError)
    async def pourboire_error_handler(request: Request, exc: PourboireError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "request_rejected",
            path=request.url.path,
            error=type(exc).__name__,
            status_code=exc.status_code,
            detail=exc.detail or exc.message,
        )
        return JSONResponse(
            {"error": _public_message(exc, request.app.state.settings)},
            status_code=exc.status_code,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning("request_invalid", path=request.url.path, errors=str(exc.errors()))
        return JSONResponse({"error": "Requête invalide."}, status_code=400)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("request_failed", path=request.url.path)
        settings = request.app.state.settings
        message = str(exc) if settings.is_development else GENERIC_ERROR
        return JSONResponse({"error": message}, status_code=500)


def create_app(
    settings: Optional[Settings] = None,
    *,
    stripe_gateway: Optional[StripeGateway] = None,
    coinbase_client: Optional[CoinbaseCommerceClient] = None,
) -> FastAPI:
    """
    Build the application and every collaborator it depends on.

    Run with ``uvicorn pourboire.main:create_app --factory``. Missing database
    or Stripe credentials fail here, before the first request is served.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.is_development)

    engine = create_db_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    session_factory = create_session_factory(engine)

    stripe_gateway = stripe_gateway or StripeGateway(settings.stripe_secret_key, settings.currency)
    coinbase_client = coinbase_client or CoinbaseCommerceClient(
        settings.coinbase_api_key,
        settlement_currency=settings.currency,
        base_url=settings.coinbase_api_url,
        timeout=settings.coinbase_timeout,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        coinbase_client.close()
        engine.dispose()

    app = FastAPI(title="Pourboire Payment Service", lifespan=lifespan)
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.stripe_gateway = stripe_gateway
    app.state.coinbase_client = coinbase_client
    app.state.stripe_verifier = StripeWebhookVerifier(
        settings.stripe_webhook_secret, settings.stripe_webhook_tolerance
    )
    app.state.coinbase_verifier = CoinbaseWebhookVerifier(settings.coinbase_webhook_secret)

    register_exception_handlers(app)
    app.include_router(router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
