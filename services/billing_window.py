# services/billing_window.py
"""
Billing window arithmetic for monthly subscriptions.

A charge covers 30 days, stays active for one more day of grace, and the
next recurring charge is booked on the day after the period ends at a
random minute between 10:00 and 10:59. The random minute is a parameter so
the computation stays deterministic.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta

PERIOD_DAYS = 30
GRACE_DAYS = 1
SCHEDULE_HOUR = 10
MINUTES_PER_HOUR = 60


@dataclass(frozen=True)
class BillingWindow:
     start_at: datetime
     end_at: datetime
     end_grace_at: datetime
     next_schedule_at: datetime


def compute_window(charged_at: datetime, minute_draw: int) -> BillingWindow:
     """
     Compute the covered period and next charge instant for a payment.

     The 10:00 window is applied in the timezone carried by ``charged_at``;
     pass an instant converted to the merchant's zone to pin it to local time.

     Args:
          charged_at: Instant the charge was recorded
          minute_draw: Uniform random integer in [0, 59] chosen by the caller

     Returns:
          BillingWindow with start, end, grace end and next schedule instants

     Raises:
          ValueError: If minute_draw is outside [0, 59]
     """
     if not 0 <= minute_draw < MINUTES_PER_HOUR:
          raise ValueError(f"minute_draw must be within 0..59, got {minute_draw}")

     end_at = charged_at + timedelta(days=PERIOD_DAYS)
     end_grace_at = charged_at + timedelta(days=PERIOD_DAYS + GRACE_DAYS)
     next_schedule_at = (end_at + timedelta(days=1)).replace(
          hour=SCHEDULE_HOUR,
          minute=minute_draw,
          second=0,
          microsecond=0,
     )
     return BillingWindow(
          start_at=charged_at,
          end_at=end_at,
          end_grace_at=end_grace_at,
          next_schedule_at=next_schedule_at,
     )
