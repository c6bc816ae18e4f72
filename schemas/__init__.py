from .payment import (
     PaymentRecordResponse,
     SubscriptionStatusResponse,
     WebhookResponse,
)
from .portone import (
     PaymentScheduleItem,
     ProviderPayment,
     WebhookPayload,
)

__all__ = [
     "PaymentRecordResponse",
     "SubscriptionStatusResponse",
     "WebhookResponse",
     "PaymentScheduleItem",
     "ProviderPayment",
     "WebhookPayload",
]
