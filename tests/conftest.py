"""Shared fixtures: in-memory ledger database and a recording PortOne fake."""
from __future__ import annotations

import os

# Keep the module-level engine in database.py off the developer's real database
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models import Base
from schemas.portone import PaymentScheduleItem, ProviderAmount, ProviderCustomer, ProviderPayment
from services.errors import ProviderFetchError, ProviderRequestError
from services.ledger_service import PaymentLedgerStore
from services.webhook_service import PortOneWebhookService

FIXED_NOW = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)


class FakePortOneClient:
    def __init__(self) -> None:
        self.payments: Dict[str, ProviderPayment] = {}
        self.schedules: List[PaymentScheduleItem] = []
        self.created_schedules: List[dict] = []
        self.schedule_queries: List[dict] = []
        self.deleted_schedule_ids: List[str] = []
        self.fail_create_schedule = False
        self.fail_list_schedules = False
        self.fail_delete_schedules = False

    def add_payment(
        self,
        payment_id: str,
        amount: int = 10000,
        billing_key: Optional[str] = None,
        customer_id: str = "customer-1",
        order_name: str = "Monthly subscription",
    ) -> ProviderPayment:
        payment = ProviderPayment(
            id=payment_id,
            amount=ProviderAmount(total=Decimal(amount)),
            order_name=order_name,
            billing_key=billing_key,
            customer=ProviderCustomer(id=customer_id),
        )
        self.payments[payment_id] = payment
        return payment

    def get_payment(self, payment_id: str) -> ProviderPayment:
        payment = self.payments.get(payment_id)
        if payment is None:
            raise ProviderFetchError("Payment lookup failed: 404")
        return payment

    def create_schedule(self, **kwargs) -> dict:
        if self.fail_create_schedule:
            raise ProviderRequestError("Schedule registration failed: boom", status_code=400)
        self.created_schedules.append(kwargs)
        self.schedules.append(
            PaymentScheduleItem(id=f"schedule-{len(self.schedules) + 1}", payment_id=kwargs["schedule_id"])
        )
        return {}

    def list_schedules(self, billing_key: str, since: datetime, until: datetime) -> List[PaymentScheduleItem]:
        self.schedule_queries.append({"billing_key": billing_key, "since": since, "until": until})
        if self.fail_list_schedules:
            raise ProviderRequestError("Schedule lookup failed: unavailable", status_code=503)
        return list(self.schedules)

    def delete_schedules(self, schedule_ids: List[str]) -> None:
        if self.fail_delete_schedules:
            raise ProviderRequestError("Schedule deletion failed: gone", status_code=404)
        self.deleted_schedule_ids.extend(schedule_ids)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def ledger(db_session) -> PaymentLedgerStore:
    return PaymentLedgerStore(db_session)


@pytest.fixture
def provider() -> FakePortOneClient:
    return FakePortOneClient()


@pytest.fixture
def schedule_ids():
    counter = iter(range(1, 1000))
    return lambda: f"sched-{next(counter)}"


@pytest.fixture
def service(ledger, provider, schedule_ids) -> PortOneWebhookService:
    return PortOneWebhookService(
        ledger=ledger,
        provider=provider,
        currency="KRW",
        clock=lambda: FIXED_NOW,
        minute_source=lambda: 15,
        schedule_id_factory=schedule_ids,
    )
