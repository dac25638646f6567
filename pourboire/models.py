from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint, func

from pourboire.database import Base

STATUS_COMPLETED = "completed"


class Payment(Base):
    __tablename__ = "payments"
    # One row per provider session, enforced by the database itself
    __table_args__ = (
        UniqueConstraint("provider", "provider_session_id", name="uq_payments_provider_session"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    provider = Column(String, nullable=False, default="stripe")
    provider_session_id = Column(String, nullable=False, index=True)   # Checkout Session ID
    provider_payment_reference = Column(String, nullable=True)         # PaymentIntent ID
    amount_minor_units = Column(Integer, nullable=False)
    currency = Column(String, nullable=False)
    status = Column(String, nullable=False, default=STATUS_COMPLETED)
    customer_email = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Payment {self.provider}:{self.provider_session_id} {self.amount_minor_units} {self.currency}>"
