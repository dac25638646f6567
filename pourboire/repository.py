from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pourboire.models import Payment


class PaymentRepository:
    """Append-only access to the payments table."""

    def __init__(self, db: Session):
        self.db = db

    def insert_if_absent(self, payment: Payment) -> bool:
        """
        Insert ``payment`` unless a row already exists for its provider session.

        Relies on the (provider, provider_session_id) unique constraint rather
        than a prior lookup, so two concurrent deliveries cannot both insert.
        Returns False when the row was already there.
        """
        self.db.add(payment)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return False
        return True

    def get_by_session_id(self, session_id: str, provider: str = "stripe") -> Optional[Payment]:
        return (
            self.db.query(Payment)
            .filter_by(provider=provider, provider_session_id=session_id)
            .first()
        )
