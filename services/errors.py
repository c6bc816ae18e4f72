"""
Billing error taxonomy.

Errors raised before a ledger row is committed abort the webhook with a
failure response. BestEffortSyncError covers provider synchronization that
happens after the commit and is only logged.
"""


class BillingError(Exception):
     """Base class for billing failures; carries a client-facing message."""

     def __init__(self, message: str):
          self.message = message
          super().__init__(message)


class ConfigurationError(BillingError):
     """Required credentials or endpoints are missing or invalid."""


class ProviderFetchError(BillingError):
     """Payment lookup at the provider failed."""


class ProviderRequestError(BillingError):
     """A provider schedule call returned a non-success response."""

     def __init__(self, message: str, status_code: int | None = None):
          self.status_code = status_code
          super().__init__(message)


class LedgerWriteError(BillingError):
     """Inserting a payment row failed."""


class LookupNotFoundError(BillingError):
     """A cancellation arrived but no prior Paid row exists for it."""


class BestEffortSyncError(BillingError):
     """Schedule registration, lookup or deletion failed after the ledger write."""
