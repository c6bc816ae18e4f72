"""
Subscription status API.

GET /api/payments/status: derive the caller's subscription status from the
payment ledger (latest row per transaction_key, Paid and within grace).
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError

from schemas.payment import SubscriptionStatusResponse
from services.ledger_service import PaymentLedgerStore
from services.subscription_status import SubscriptionStatus, resolve_status

from routers.dependencies import get_ledger_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.get(
     "/status",
     response_model=SubscriptionStatusResponse,
     summary="Get subscription status",
)
def get_subscription_status(
     customer_id: Optional[str] = Query(None, description="Restrict to one provider customer"),
     ledger: PaymentLedgerStore = Depends(get_ledger_store),
):
     """
     Return ``subscribed`` with the active transaction_key, or ``free``.

     A ledger read failure reports ``free`` together with the error so the
     status widget can still render.
     """
     try:
          payments = ledger.list_payments(customer_id=customer_id)
     except SQLAlchemyError as exc:
          logger.error("Subscription status lookup failed: %s", exc)
          return SubscriptionStatusResponse(
               subscription_status=SubscriptionStatus.FREE,
               error=f"Failed to read payments: {exc}",
          )

     state = resolve_status(payments, datetime.now(timezone.utc))
     return SubscriptionStatusResponse(
          subscription_status=state.status,
          transaction_key=state.transaction_key,
     )
