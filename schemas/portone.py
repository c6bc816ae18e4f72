"""
Pydantic schemas for the PortOne payment provider API and its webhook.
"""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WebhookPayload(BaseModel):
     """Request body PortOne posts to /api/portone."""

     payment_id: str = Field(..., min_length=1, description="Provider payment id")
     status: str = Field(..., description="Provider event status, e.g. Paid or Cancelled")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "payment_id": "payment-7f3c2e1a",
                    "status": "Paid",
               }
          }
     )


class ProviderAmount(BaseModel):
     total: Decimal

     model_config = ConfigDict(extra="ignore")


class ProviderCustomer(BaseModel):
     id: Optional[str] = None

     model_config = ConfigDict(extra="ignore")


class ProviderPayment(BaseModel):
     """Authoritative payment details returned by GET /payments/{id}."""

     id: Optional[str] = None
     amount: ProviderAmount
     order_name: str = Field(..., alias="orderName")
     billing_key: Optional[str] = Field(default=None, alias="billingKey")
     customer: ProviderCustomer = Field(default_factory=ProviderCustomer)
     schedule_id: Optional[str] = Field(default=None, alias="scheduleId")

     model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PaymentScheduleItem(BaseModel):
     """One pending scheduled charge from GET /payment-schedules."""

     id: str
     payment_id: Optional[str] = Field(default=None, alias="paymentId")

     model_config = ConfigDict(populate_by_name=True, extra="allow")


class PaymentScheduleList(BaseModel):
     items: List[PaymentScheduleItem] = Field(default_factory=list)

     model_config = ConfigDict(extra="ignore")
