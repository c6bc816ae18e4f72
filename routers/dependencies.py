# routers/dependencies.py
"""
FastAPI dependencies wiring request-scoped services to startup singletons.

Settings and the PortOne client are built once in main.py's lifespan and
kept on ``app.state``; each request gets its own database session.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from config import Settings
from database import get_session
from services.ledger_service import PaymentLedgerStore
from services.portone_client import PortOneClient
from services.webhook_service import PortOneWebhookService


def get_settings_dependency(request: Request) -> Settings:
     return request.app.state.settings


def get_portone_client(request: Request) -> PortOneClient:
     return request.app.state.portone_client


def get_ledger_store(db: Session = Depends(get_session)) -> PaymentLedgerStore:
     return PaymentLedgerStore(db)


def get_webhook_service(
     ledger: PaymentLedgerStore = Depends(get_ledger_store),
     provider: PortOneClient = Depends(get_portone_client),
     settings: Settings = Depends(get_settings_dependency),
) -> PortOneWebhookService:
     return PortOneWebhookService(
          ledger=ledger,
          provider=provider,
          currency=settings.currency,
          billing_tz=settings.tzinfo,
     )
