from .billing_window import BillingWindow, compute_window
from .errors import (
     BestEffortSyncError,
     BillingError,
     ConfigurationError,
     LedgerWriteError,
     LookupNotFoundError,
     ProviderFetchError,
     ProviderRequestError,
)
from .ledger_service import PaymentLedgerStore
from .portone_client import PortOneClient
from .subscription_status import SubscriptionState, SubscriptionStatus, resolve_status
from .webhook_service import PortOneWebhookService, WebhookResult

__all__ = [
     "BillingWindow",
     "compute_window",
     "BestEffortSyncError",
     "BillingError",
     "ConfigurationError",
     "LedgerWriteError",
     "LookupNotFoundError",
     "ProviderFetchError",
     "ProviderRequestError",
     "PaymentLedgerStore",
     "PortOneClient",
     "SubscriptionState",
     "SubscriptionStatus",
     "resolve_status",
     "PortOneWebhookService",
     "WebhookResult",
]
