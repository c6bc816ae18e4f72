# services/subscription_status.py
"""
Subscription status derived from the payment ledger.

Status is never stored. It is recomputed from the ledger rows each time:
the newest row of every lineage decides that lineage's state, and the
subscriber is "subscribed" when any lineage's newest row is a Paid charge
whose period (including grace) contains ``now``.
"""
import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Tuple

from models.payment import PaymentStatus
from utils.dates import as_utc, parse_instant

# Rows with an unreadable created_at rank below every real timestamp
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)

# Same-instant rows of a lineage: the cancellation wins
_STATUS_RANK = {PaymentStatus.PAID.value: 0, PaymentStatus.CANCELLED.value: 1}


class SubscriptionStatus(str, enum.Enum):
     SUBSCRIBED = "subscribed"
     FREE = "free"


@dataclass(frozen=True)
class SubscriptionState:
     status: SubscriptionStatus
     transaction_key: Optional[str] = None

     @property
     def is_subscribed(self) -> bool:
          return self.status == SubscriptionStatus.SUBSCRIBED


FREE = SubscriptionState(SubscriptionStatus.FREE, None)


def _field(record: Any, name: str) -> Any:
     if isinstance(record, dict):
          return record.get(name)
     return getattr(record, name, None)


def _status_value(record: Any) -> Optional[str]:
     status = _field(record, "status")
     if isinstance(status, enum.Enum):
          return status.value
     return status


def _instant_text(value: Any) -> str:
     parsed = parse_instant(value)
     if parsed is not None:
          return parsed.isoformat()
     return "" if value is None else str(value)


def _recency_key(record: Any) -> Tuple[datetime, Tuple[int, Any], Tuple[Any, ...]]:
     """
     Order by created_at, then id, then row content.

     The content part makes the order total for rows lacking a usable id:
     Cancelled outranks Paid, then the period and lineage decide.
     """
     created_at = parse_instant(_field(record, "created_at")) or _OLDEST
     record_id = _field(record, "id")
     if isinstance(record_id, int):
          id_key = (0, record_id)
     else:
          id_key = (1, "" if record_id is None else str(record_id))
     status = _status_value(record)
     content_key = (
          _STATUS_RANK.get(status, -1),
          "" if status is None else str(status),
          _instant_text(_field(record, "start_at")),
          _instant_text(_field(record, "end_grace_at")),
          str(_field(record, "transaction_key")),
     )
     return created_at, id_key, content_key


def latest_per_lineage(records: Iterable[Any]) -> Dict[str, Any]:
     """Map each transaction_key to its newest row."""
     current: Dict[str, Any] = {}
     for record in records:
          key = _field(record, "transaction_key")
          if key is None:
               continue
          existing = current.get(key)
          if existing is None or _recency_key(record) > _recency_key(existing):
               current[key] = record
     return current


def is_active(record: Any, now: datetime) -> bool:
     """True if the row is Paid and start_at <= now <= end_grace_at."""
     if _status_value(record) != PaymentStatus.PAID.value:
          return False
     start_at = parse_instant(_field(record, "start_at"))
     end_grace_at = parse_instant(_field(record, "end_grace_at"))
     if start_at is None or end_grace_at is None:
          return False
     return start_at <= as_utc(now) <= end_grace_at


def resolve_status(records: Iterable[Any], now: datetime) -> SubscriptionState:
     """
     Resolve the current subscription status from ledger rows.

     Args:
          records: Payment rows (ORM objects, schemas or dicts) in any order
          now: Reference instant; naive values are read as UTC

     Returns:
          SubscriptionState with status "subscribed" and the active
          transaction_key, or status "free" and None
     """
     active = [
          record
          for record in latest_per_lineage(records).values()
          if is_active(record, now)
     ]
     if not active:
          return FREE
     newest = max(active, key=_recency_key)
     return SubscriptionState(SubscriptionStatus.SUBSCRIBED, _field(newest, "transaction_key"))
