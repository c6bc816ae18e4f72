# utils/dates.py
"""Helpers for normalizing instants read from the ledger or the provider."""
from datetime import datetime, timezone
from typing import Optional, Union


def as_utc(value: datetime) -> datetime:
     """Return an aware UTC datetime; naive values are taken to be UTC."""
     if value.tzinfo is None:
          return value.replace(tzinfo=timezone.utc)
     return value.astimezone(timezone.utc)


def parse_instant(value: Union[datetime, str, None]) -> Optional[datetime]:
     """
     Coerce a datetime or ISO-8601 string to aware UTC.

     Returns None for missing or unparsable values instead of raising, so a
     single bad row cannot break status resolution.
     """
     if value is None:
          return None
     if isinstance(value, str):
          text = value.strip()
          if text.endswith("Z"):
               text = text[:-1] + "+00:00"
          try:
               value = datetime.fromisoformat(text)
          except ValueError:
               return None
     if not isinstance(value, datetime):
          return None
     # Offsets near datetime.min/max cannot be shifted to UTC
     try:
          return as_utc(value)
     except OverflowError:
          return None


def to_iso(value: datetime) -> str:
     """Format as ISO-8601 UTC with a trailing Z, as the provider API expects."""
     return as_utc(value).isoformat().replace("+00:00", "Z")
