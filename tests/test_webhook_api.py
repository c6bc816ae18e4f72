"""HTTP-level tests for the webhook and status endpoints."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import get_session
from main import app
from models import Payment, PaymentStatus
from routers.dependencies import get_portone_client, get_settings_dependency


@pytest.fixture
def api(session_factory, provider):
    def override_session():
        session = session_factory()
        try:
            yield session
            session.commit()
        finally:
            session.close()

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_portone_client] = lambda: provider
    app.dependency_overrides[get_settings_dependency] = lambda: Settings(portone_api_secret="test-secret")
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_paid_webhook_without_billing_key(api, provider, db_session):
    provider.add_payment("pay-1", amount=10000, billing_key=None)

    response = api.post("/api/portone", json={"payment_id": "pay-1", "status": "Paid"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["payment"]["transaction_key"] == "pay-1"
    assert body["payment"]["status"] == "Paid"
    assert Decimal(str(body["payment"]["amount"])) == Decimal("10000")
    assert "error" not in body
    assert db_session.query(Payment).count() == 1
    assert provider.created_schedules == []


def test_paid_webhook_with_billing_key_schedules_charge(api, provider):
    provider.add_payment("pay-1", billing_key="bk-1")

    response = api.post("/api/portone", json={"payment_id": "pay-1", "status": "Paid"})

    assert response.status_code == 200
    assert len(provider.created_schedules) == 1
    assert provider.created_schedules[0]["schedule_id"] == response.json()["payment"]["next_schedule_id"]


def test_cancel_without_prior_payment_returns_500(api, provider, db_session):
    provider.add_payment("tx-none", billing_key="bk-1")

    response = api.post("/api/portone", json={"payment_id": "tx-none", "status": "Cancelled"})

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert "tx-none" in body["error"]
    assert db_session.query(Payment).count() == 0


def test_provider_fetch_failure_returns_500(api, db_session):
    response = api.post("/api/portone", json={"payment_id": "unknown", "status": "Paid"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Payment lookup failed: 404"}
    assert db_session.query(Payment).count() == 0


def test_unrecognized_status_is_acknowledged(api, db_session):
    response = api.post("/api/portone", json={"payment_id": "pay-1", "status": "Ready"})

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert db_session.query(Payment).count() == 0


def test_unexpected_error_returns_500(api, provider, monkeypatch):
    def explode(payment_id):
        raise RuntimeError("boom")

    monkeypatch.setattr(provider, "get_payment", explode)

    response = api.post("/api/portone", json={"payment_id": "pay-1", "status": "Paid"})

    assert response.status_code == 500
    assert response.json()["success"] is False


def test_status_free_for_empty_ledger(api):
    response = api.get("/api/payments/status")

    assert response.status_code == 200
    assert response.json() == {"subscription_status": "free", "transaction_key": None, "error": None}


def test_status_reflects_active_and_cancelled_lineages(api, ledger):
    now = datetime.now(timezone.utc)
    common = dict(
        start_at=now - timedelta(days=1),
        end_at=now + timedelta(days=29),
        end_grace_at=now + timedelta(days=30),
        next_schedule_at=now + timedelta(days=30),
    )
    ledger.append(transaction_key="tx-a", amount=Decimal("10000"), status=PaymentStatus.PAID, customer_id="alice", **common)
    paid_b = ledger.append(transaction_key="tx-b", amount=Decimal("10000"), status=PaymentStatus.PAID, customer_id="bob", **common)

    assert api.get("/api/payments/status").json()["transaction_key"] == "tx-b"

    ledger.append_cancellation(paid_b)

    body = api.get("/api/payments/status").json()
    assert body["subscription_status"] == "subscribed"
    assert body["transaction_key"] == "tx-a"

    bob = api.get("/api/payments/status", params={"customer_id": "bob"}).json()
    assert bob["subscription_status"] == "free"
    assert bob["transaction_key"] is None


def test_invalid_body_is_rejected(api):
    response = api.post("/api/portone", json={"status": "Paid"})

    assert response.status_code == 422
