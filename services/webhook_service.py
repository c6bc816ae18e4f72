# services/webhook_service.py
"""
PortOne webhook handling - ledger writes plus recurring schedule sync.

Paid:
1. Fetch the payment from PortOne
2. Compute the billing window and mint a schedule id
3. Append a Paid row to the ledger
4. If the payment has a billing key, book next month's charge (best-effort)

Cancelled:
1. Fetch the payment from PortOne (for its billing key)
2. Find the latest Paid row for the payment id
3. Append a Cancelled row with the amount negated
4. If a schedule was booked, find and delete it at PortOne (best-effort)

Anything that fails before the ledger append is raised so PortOne retries
the webhook. Once the row is committed, provider failures are only logged.
"""
import logging
import random
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional

import requests

from models import Payment, PaymentStatus
from schemas.portone import ProviderPayment
from services.billing_window import compute_window
from services.errors import BestEffortSyncError, BillingError, LookupNotFoundError
from services.ledger_service import PaymentLedgerStore
from services.portone_client import PortOneClient
from utils.dates import as_utc

logger = logging.getLogger(__name__)

SCHEDULE_LOOKUP_MARGIN = timedelta(days=1)


def _random_minute() -> int:
     return random.randint(0, 59)


def _new_schedule_id() -> str:
     return str(uuid.uuid4())


@dataclass
class WebhookResult:
     success: bool
     message: Optional[str] = None
     payment: Optional[Payment] = None


class PortOneWebhookService:
     """Applies PortOne payment events to the ledger."""

     def __init__(
          self,
          ledger: PaymentLedgerStore,
          provider: PortOneClient,
          currency: str = "KRW",
          billing_tz: tzinfo = timezone.utc,
          clock: Optional[Callable[[], datetime]] = None,
          minute_source: Callable[[], int] = _random_minute,
          schedule_id_factory: Callable[[], str] = _new_schedule_id,
     ):
          self.ledger = ledger
          self.provider = provider
          self.currency = currency
          self.billing_tz = billing_tz
          self.clock = clock or (lambda: datetime.now(timezone.utc))
          self.minute_source = minute_source
          self.schedule_id_factory = schedule_id_factory

     def handle(self, payment_id: str, status: str) -> WebhookResult:
          """
          Dispatch an inbound event by status.

          Raises:
               BillingError: ProviderFetchError, LedgerWriteError or
                    LookupNotFoundError when the event could not be recorded.
          """
          logger.info("PortOne webhook received: payment_id=%s status=%s", payment_id, status)
          if status == PaymentStatus.PAID.value:
               return self.handle_paid(payment_id)
          if status == PaymentStatus.CANCELLED.value:
               return self.handle_cancelled(payment_id)

          logger.info("Ignoring PortOne status %s for payment %s", status, payment_id)
          return WebhookResult(success=True)

     # Paid

     def handle_paid(self, payment_id: str) -> WebhookResult:
          provider_payment = self.provider.get_payment(payment_id)

          current = self.ledger.latest_for_transaction(payment_id)
          if current is not None and current.status == PaymentStatus.PAID:
               logger.info("Duplicate Paid delivery for %s; ledger row %s already recorded", payment_id, current.id)
               return WebhookResult(success=True, message="Payment already recorded", payment=current)

          now = self.clock().astimezone(self.billing_tz)
          window = compute_window(now, self.minute_source())
          schedule_id = self.schedule_id_factory()

          record = self.ledger.append(
               transaction_key=payment_id,
               amount=provider_payment.amount.total,
               status=PaymentStatus.PAID,
               start_at=window.start_at,
               end_at=window.end_at,
               end_grace_at=window.end_grace_at,
               next_schedule_at=window.next_schedule_at,
               next_schedule_id=schedule_id,
               customer_id=provider_payment.customer.id,
          )

          if provider_payment.billing_key:
               try:
                    self._register_next_charge(provider_payment, schedule_id, window.next_schedule_at)
               except BestEffortSyncError as exc:
                    logger.error("Next charge for %s not scheduled: %s", payment_id, exc.message)
          else:
               logger.debug("Payment %s has no billing key; skipping schedule registration", payment_id)

          return WebhookResult(success=True, message="Payment recorded", payment=record)

     def _register_next_charge(self, payment: ProviderPayment, schedule_id: str, time_to_pay: datetime) -> None:
          try:
               self.provider.create_schedule(
                    schedule_id=schedule_id,
                    billing_key=payment.billing_key,
                    order_name=payment.order_name,
                    customer_id=payment.customer.id,
                    amount=payment.amount.total,
                    currency=self.currency,
                    time_to_pay=time_to_pay,
               )
          except (BillingError, requests.RequestException) as exc:
               raise BestEffortSyncError(str(exc)) from exc
          logger.info("Next charge %s scheduled at %s", schedule_id, time_to_pay.isoformat())

     # Cancelled

     def handle_cancelled(self, payment_id: str) -> WebhookResult:
          provider_payment = self.provider.get_payment(payment_id)

          paid = self.ledger.latest_for_transaction(payment_id, status=PaymentStatus.PAID)
          if paid is None:
               raise LookupNotFoundError(f"No paid payment found to cancel for {payment_id}")

          current = self.ledger.latest_for_transaction(payment_id)
          if current is not None and current.status == PaymentStatus.CANCELLED:
               logger.info("Duplicate Cancelled delivery for %s; ledger row %s already recorded", payment_id, current.id)
               return WebhookResult(success=True, message="Cancellation already recorded", payment=current)

          record = self.ledger.append_cancellation(paid)

          if paid.next_schedule_id and provider_payment.billing_key:
               try:
                    self._revoke_next_charge(provider_payment.billing_key, paid)
               except BestEffortSyncError as exc:
                    logger.warning("Scheduled charge for %s not revoked: %s", payment_id, exc.message)
          else:
               logger.debug("No schedule id or billing key for %s; skipping schedule revocation", payment_id)

          return WebhookResult(success=True, message="Cancellation recorded", payment=record)

     def _revoke_next_charge(self, billing_key: str, paid: Payment) -> None:
          scheduled_at = as_utc(paid.next_schedule_at)
          try:
               items = self.provider.list_schedules(
                    billing_key=billing_key,
                    since=scheduled_at - SCHEDULE_LOOKUP_MARGIN,
                    until=scheduled_at + SCHEDULE_LOOKUP_MARGIN,
               )
          except (BillingError, requests.RequestException) as exc:
               raise BestEffortSyncError(str(exc)) from exc

          match = next((item for item in items if item.payment_id == paid.next_schedule_id), None)
          if match is None:
               raise BestEffortSyncError(f"no pending schedule for payment {paid.next_schedule_id}")

          try:
               self.provider.delete_schedules([match.id])
          except (BillingError, requests.RequestException) as exc:
               raise BestEffortSyncError(str(exc)) from exc
          logger.info("Scheduled charge %s revoked", match.id)
