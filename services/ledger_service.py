# services/ledger_service.py
"""
Payment Ledger Service - append-only store of subscription payment events.

Rows are only ever inserted:
1. A Paid event inserts a charge row with its billing window
2. A Cancelled event inserts a new row copying the charge with the amount negated
3. Nothing updates or deletes existing rows

Each insert commits immediately so the row is durable before any provider
call that depends on it.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import Payment, PaymentStatus
from services.errors import LedgerWriteError
from utils.dates import as_utc

logger = logging.getLogger(__name__)


class PaymentLedgerStore:
     """Ledger reads and appends over a SQLAlchemy session."""

     def __init__(self, db: Session):
          self.db = db

     def append(
          self,
          transaction_key: str,
          amount: Decimal,
          status: PaymentStatus,
          start_at: datetime,
          end_at: datetime,
          end_grace_at: datetime,
          next_schedule_at: datetime,
          next_schedule_id: Optional[str] = None,
          customer_id: Optional[str] = None,
     ) -> Payment:
          """
          Insert a ledger row and return it as stored.

          Raises:
               LedgerWriteError: If the insert or commit fails; the session is
                    rolled back and no row is left behind.
          """
          # Stored as UTC; some backends drop the offset
          entry = Payment(
               transaction_key=transaction_key,
               amount=amount,
               status=status,
               start_at=as_utc(start_at),
               end_at=as_utc(end_at),
               end_grace_at=as_utc(end_grace_at),
               next_schedule_at=as_utc(next_schedule_at),
               next_schedule_id=next_schedule_id,
               customer_id=customer_id,
          )
          try:
               self.db.add(entry)
               self.db.commit()
               self.db.refresh(entry)
          except SQLAlchemyError as exc:
               self.db.rollback()
               logger.error("Ledger insert failed for transaction_key=%s: %s", transaction_key, exc)
               raise LedgerWriteError(f"Failed to save payment: {exc}") from exc

          logger.info(
               "Ledger row %s appended: transaction_key=%s status=%s amount=%s",
               entry.id, entry.transaction_key, entry.status.value, entry.amount,
          )
          return entry

     def append_cancellation(self, paid: Payment) -> Payment:
          """
          Append a Cancelled row annotating an existing Paid row.

          The period, schedule and customer fields are copied verbatim and the
          amount is negated; the Paid row itself is left untouched.
          """
          return self.append(
               transaction_key=paid.transaction_key,
               amount=-paid.amount,
               status=PaymentStatus.CANCELLED,
               start_at=paid.start_at,
               end_at=paid.end_at,
               end_grace_at=paid.end_grace_at,
               next_schedule_at=paid.next_schedule_at,
               next_schedule_id=paid.next_schedule_id,
               customer_id=paid.customer_id,
          )

     def latest_for_transaction(
          self,
          transaction_key: str,
          status: Optional[PaymentStatus] = None,
     ) -> Optional[Payment]:
          """Most recent row of a lineage, optionally restricted to one status."""
          query = self.db.query(Payment).filter(Payment.transaction_key == transaction_key)
          if status is not None:
               query = query.filter(Payment.status == status)
          return query.order_by(desc(Payment.created_at), desc(Payment.id)).limit(1).first()

     def list_payments(self, customer_id: Optional[str] = None) -> List[Payment]:
          """All rows, newest first, optionally scoped to one customer."""
          query = self.db.query(Payment)
          if customer_id is not None:
               query = query.filter(Payment.customer_id == customer_id)
          return query.order_by(desc(Payment.created_at), desc(Payment.id)).all()
