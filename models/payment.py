# models/payment.py
"""
Payment model - append-only ledger of subscription charges and cancellations.

One row is written per inbound provider event. Rows sharing a
transaction_key form a lineage; the newest row (created_at, then id) is the
lineage's current state. Cancellations are new rows carrying the negated
amount, never edits of the original charge. There is no update or delete path.
"""
import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Integer, Numeric, String, func
from .base import Base


class PaymentStatus(str, enum.Enum):
     """Ledger event kind."""
     PAID = "Paid"
     CANCELLED = "Cancelled"


def _utcnow() -> datetime:
     return datetime.now(timezone.utc)


class Payment(Base):
     """Immutable ledger entry for one charge or cancellation event."""

     id = Column(Integer, primary_key=True, autoincrement=True)

     # Lineage: provider payment id of the original charge (not unique)
     transaction_key = Column(String(255), nullable=False, index=True)
     customer_id = Column(String(255), nullable=True, index=True)

     amount = Column(Numeric(12, 2), nullable=False)
     status = Column(
          Enum(
               PaymentStatus,
               name="payment_status",
               values_callable=lambda statuses: [s.value for s in statuses],
               create_constraint=True,
          ),
          nullable=False,
          index=True
     )

     # Covered period
     start_at = Column(DateTime(timezone=True), nullable=False)
     end_at = Column(DateTime(timezone=True), nullable=False)
     end_grace_at = Column(DateTime(timezone=True), nullable=False)

     # Provider-side recurring charge correlation
     next_schedule_at = Column(DateTime(timezone=True), nullable=False)
     next_schedule_id = Column(String(64), nullable=True)

     created_at = Column(
          DateTime(timezone=True),
          default=_utcnow,
          server_default=func.now(),
          nullable=False,
          index=True
     )

     def __repr__(self):
          return (
               f"<Payment(id={self.id}, transaction_key='{self.transaction_key}', "
               f"amount={self.amount}, status='{self.status.value if self.status else None}')>"
          )
