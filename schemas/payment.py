"""
Pydantic schemas for ledger rows, webhook responses and subscription status.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.payment import PaymentStatus
from services.subscription_status import SubscriptionStatus


class PaymentRecordResponse(BaseModel):
     """A single ledger row as returned to PortOne and status clients."""

     id: int
     transaction_key: str
     customer_id: Optional[str] = None
     amount: Decimal
     status: PaymentStatus
     start_at: datetime
     end_at: datetime
     end_grace_at: datetime
     next_schedule_at: datetime
     next_schedule_id: Optional[str] = None
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class WebhookResponse(BaseModel):
     """Response body for POST /api/portone."""

     success: bool
     message: Optional[str] = None
     payment: Optional[PaymentRecordResponse] = None
     error: Optional[str] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "success": True,
                    "message": "Payment recorded",
                    "payment": {
                         "id": 1,
                         "transaction_key": "payment-7f3c2e1a",
                         "amount": 10000,
                         "status": "Paid",
                    },
               }
          }
     )


class SubscriptionStatusResponse(BaseModel):
     """Response for GET /api/payments/status."""

     subscription_status: SubscriptionStatus = Field(..., description="subscribed or free")
     transaction_key: Optional[str] = Field(default=None, description="Active lineage, if subscribed")
     error: Optional[str] = Field(default=None, description="Set when the ledger could not be read")
