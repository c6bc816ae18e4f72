"""
PortOne webhook API.

POST /api/portone: PortOne notifies a payment status change (Paid / Cancelled).
Appends a ledger row and keeps the next month's scheduled charge in sync.
Returns 500 when the event could not be recorded so PortOne redelivers it.
"""
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from schemas.payment import PaymentRecordResponse, WebhookResponse
from schemas.portone import WebhookPayload
from services.errors import BillingError
from services.webhook_service import PortOneWebhookService

from routers.dependencies import get_webhook_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/portone", tags=["portone"])


def _error_response(message: str) -> JSONResponse:
     body = WebhookResponse(success=False, error=message)
     return JSONResponse(
          status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
          content=body.model_dump(mode="json", exclude_none=True),
     )


@router.post(
     "",
     response_model=WebhookResponse,
     response_model_exclude_none=True,
     summary="Receive PortOne payment webhook",
)
def portone_webhook(
     payload: WebhookPayload,
     service: PortOneWebhookService = Depends(get_webhook_service),
):
     """
     Record a PortOne payment event.

     - **Paid**: appends a charge row and books the next recurring charge
     - **Cancelled**: appends a cancellation row and revokes the booked charge
     - any other status is acknowledged without changes
     """
     try:
          result = service.handle(payload.payment_id, payload.status)
     except BillingError as exc:
          logger.error("PortOne webhook failed for %s: %s", payload.payment_id, exc.message)
          return _error_response(exc.message)
     except Exception:
          logger.exception("Unexpected error handling PortOne webhook for %s", payload.payment_id)
          return _error_response("Internal server error")

     return WebhookResponse(
          success=result.success,
          message=result.message,
          payment=PaymentRecordResponse.model_validate(result.payment) if result.payment else None,
     )
