from .payments import router as payments_router
from .portone import router as portone_router

__all__ = [
     "payments_router",
     "portone_router",
]
