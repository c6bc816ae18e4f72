from .base import Base
from .payment import Payment, PaymentStatus

__all__ = [
     "Base",
     "Payment",
     "PaymentStatus",
]
