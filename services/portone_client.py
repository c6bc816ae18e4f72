# services/portone_client.py
"""
PortOne API client.

Thin wrapper over the PortOne v2 REST endpoints the billing flow uses:
payment lookup, recurring schedule creation, schedule listing and deletion.
Calls are single attempts with a timeout; retrying is left to the caller
(PortOne itself redelivers failed webhooks).
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from schemas.portone import PaymentScheduleItem, PaymentScheduleList, ProviderPayment
from services.errors import ConfigurationError, ProviderFetchError, ProviderRequestError
from utils.dates import to_iso

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.portone.io"


def _amount_json(amount: Decimal) -> Any:
     # PortOne expects integral minor units when there is no fractional part
     if amount == amount.to_integral_value():
          return int(amount)
     return float(amount)


class PortOneClient:
     """Client for the PortOne payments API, created once at startup."""

     def __init__(
          self,
          api_secret: str,
          api_base: str = DEFAULT_API_BASE,
          timeout: float = 10.0,
          session: Optional[requests.Session] = None,
     ):
          if not api_secret:
               raise ConfigurationError("PORTONE_API_SECRET is required")
          self.api_base = api_base.rstrip("/")
          self.timeout = timeout
          self.session = session or requests.Session()
          self.session.headers.update({
               "Content-Type": "application/json",
               "Authorization": f"PortOne {api_secret}",
          })

     def _url(self, path: str) -> str:
          return f"{self.api_base}{path}"

     def get_payment(self, payment_id: str) -> ProviderPayment:
          """
          Fetch authoritative payment details.

          Raises:
               ProviderFetchError: On network failure, non-2xx status or an
                    unexpected response body.
          """
          try:
               response = self.session.get(self._url(f"/payments/{payment_id}"), timeout=self.timeout)
          except requests.RequestException as exc:
               logger.error("PortOne payment lookup failed for %s: %s", payment_id, exc)
               raise ProviderFetchError(f"Payment lookup failed: {exc}") from exc

          if not response.ok:
               logger.error("PortOne payment lookup failed for %s: %s", payment_id, response.text)
               raise ProviderFetchError(f"Payment lookup failed: {response.status_code}")

          try:
               payment = ProviderPayment.model_validate(response.json())
          except (ValueError, ValidationError) as exc:
               raise ProviderFetchError(f"Unexpected payment response: {exc}") from exc

          logger.debug("PortOne payment %s fetched: %s", payment_id, payment)
          return payment

     def create_schedule(
          self,
          schedule_id: str,
          billing_key: str,
          order_name: str,
          customer_id: Optional[str],
          amount: Decimal,
          currency: str,
          time_to_pay: datetime,
     ) -> Dict[str, Any]:
          """
          Book a future charge under ``schedule_id``.

          The schedule id becomes the payment id of the future charge, which is
          how a later cancellation finds it again.

          Raises:
               ProviderRequestError: If PortOne rejects the schedule.
               requests.RequestException: On network failure.
          """
          body = {
               "payment": {
                    "billingKey": billing_key,
                    "orderName": order_name,
                    "customer": {"id": customer_id},
                    "amount": {"total": _amount_json(amount)},
                    "currency": currency,
               },
               "timeToPay": to_iso(time_to_pay),
          }
          response = self.session.post(
               self._url(f"/payments/{schedule_id}/schedule"),
               json=body,
               timeout=self.timeout,
          )
          if not response.ok:
               raise ProviderRequestError(
                    f"Schedule registration failed: {response.text}",
                    status_code=response.status_code,
               )
          return response.json() if response.content else {}

     def list_schedules(self, billing_key: str, since: datetime, until: datetime) -> List[PaymentScheduleItem]:
          """
          List scheduled charges for a billing key within [since, until].

          PortOne reads the filter from a JSON body on GET.
          """
          body = {
               "filter": {
                    "billingKey": billing_key,
                    "from": to_iso(since),
                    "until": to_iso(until),
               }
          }
          response = self.session.get(self._url("/payment-schedules"), json=body, timeout=self.timeout)
          if not response.ok:
               raise ProviderRequestError(
                    f"Schedule lookup failed: {response.text}",
                    status_code=response.status_code,
               )
          try:
               return PaymentScheduleList.model_validate(response.json()).items
          except (ValueError, ValidationError) as exc:
               raise ProviderRequestError(f"Unexpected schedule list response: {exc}") from exc

     def delete_schedules(self, schedule_ids: List[str]) -> None:
          """Revoke pending scheduled charges by schedule id."""
          response = self.session.delete(
               self._url("/payment-schedules"),
               json={"scheduleIds": list(schedule_ids)},
               timeout=self.timeout,
          )
          if not response.ok:
               raise ProviderRequestError(
                    f"Schedule deletion failed: {response.text}",
                    status_code=response.status_code,
               )
