import enum
from typing import Any, Dict, Optional

from pourboire.errors import MalformedPayloadError
from pourboire.logging_config import get_logger
from pourboire.models import STATUS_COMPLETED, Payment
from pourboire.repository import PaymentRepository

logger = get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


class RecordOutcome(str, enum.Enum):
    RECORDED = "recorded"
    ALREADY_RECORDED = "already_recorded"
    IGNORED = "ignored"


def _payment_reference(session: Dict[str, Any]) -> Optional[str]:
    intent = session.get("payment_intent")
    if isinstance(intent, dict):
        return intent.get("id")
    return intent or None


def _customer_email(session: Dict[str, Any]) -> Optional[str]:
    details = session.get("customer_details")
    if not isinstance(details, dict):
        details = {}
    return session.get("customer_email") or details.get("email") or None


class PaymentRecorder:
    def __init__(self, repository: PaymentRepository, provider: str = "stripe"):
        self.repository = repository
        self.provider = provider

    def record_completed_payment(self, event: Dict[str, Any]) -> RecordOutcome:
        event_type = event.get("type")
        if event_type != CHECKOUT_COMPLETED:
            logger.debug("webhook_event_ignored", provider=self.provider, event_type=event_type)
            return RecordOutcome.IGNORED

        data = event.get("data")
        session = data.get("object") if isinstance(data, dict) else None
        session_id = session.get("id") if isinstance(session, dict) else None
        if not session_id:
            raise MalformedPayloadError(detail="checkout.session.completed without a session id")

        payment = Payment(
            provider=self.provider,
            provider_session_id=session_id,
            provider_payment_reference=_payment_reference(session),
            amount_minor_units=session.get("amount_total") or 0,
            currency=(session.get("currency") or "eur").lower(),
            status=STATUS_COMPLETED,
            customer_email=_customer_email(session),
        )

        if not self.repository.insert_if_absent(payment):
            logger.info("payment_already_recorded", provider=self.provider, session_id=session_id)
            return RecordOutcome.ALREADY_RECORDED

        logger.info(
            "payment_recorded",
            provider=self.provider,
            session_id=session_id,
            amount=payment.amount_minor_units,
            currency=payment.currency,
        )
        return RecordOutcome.RECORDED
