"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def registry(client: TestClient) -> dict:
    """Account and category created through the API"""
    account = client.post("/v1/accounts", json={"name": "Checking", "type": "bank"}).json()
    category = client.post("/v1/categories", json={"name": "Loans", "type": "expense"}).json()
    return {"account_id": account["id"], "category_id": category["id"]}


@pytest.fixture
def credit(client: TestClient) -> dict:
    response = client.post(
        "/v1/credits",
        json={
            "name": "Car loan",
            "total_cents": 1_500_000,
            "remaining_cents": 850_000,
            "interest_rate": 12.5,
            "monthly_payment_cents": 250_000,
            "start_date": "2024-01-25",
            "end_date": "2024-12-25",
            "next_payment_date": "2024-06-25",
            "frequency": "monthly",
        },
    )
    assert response.status_code == 201
    return response.json()


def _first_payment(client: TestClient, credit_id: str) -> dict:
    payments = client.get(f"/v1/credit-payments?credit_id={credit_id}").json()
    return payments[-1]


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_create_and_list_credits(client: TestClient, credit: dict):
    assert credit["status"] == "active"
    assert credit["remaining_cents"] == 850_000

    listed = client.get("/v1/credits").json()
    assert [c["id"] for c in listed] == [credit["id"]]


def test_create_credit_validation(client: TestClient):
    response = client.post(
        "/v1/credits",
        json={
            "name": "Bad",
            "total_cents": 100,
            "monthly_payment_cents": 10,
            "start_date": "2024-05-01",
            "end_date": "2024-01-01",
        },
    )
    assert response.status_code == 422


def test_settle_payment_endpoint(client: TestClient, credit: dict, registry: dict):
    """Test POST /v1/credit-payments/pay"""
    payment = _first_payment(client, credit["id"])

    response = client.post(
        "/v1/credit-payments/pay",
        json={
            "payment_id": payment["id"],
            "credit_id": credit["id"],
            "amount_cents": 250_000,
            "date": "2024-06-25",
            "method": "transferencia",
            "notes": "June",
            **registry,
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["payment"]["status"] == "paid"
    assert data["credit"] == {
        "id": credit["id"],
        "remaining_cents": 600_000,
        "next_payment_date": "2024-07-25",
        "status": "active",
    }
    assert data["next_payment"]["date"] == "2024-07-25"

    ledger = client.get(f"/v1/transactions?source_payment_id={payment['id']}").json()
    assert len(ledger) == 1
    assert ledger[0]["id"] == data["transaction_id"]
    assert ledger[0]["type"] == "expense"
    assert ledger[0]["method"] == "transfer"
    assert ledger[0]["currency"] == "MXN"


def test_double_settlement_returns_conflict(client: TestClient, credit: dict, registry: dict):
    payment = _first_payment(client, credit["id"])
    body = {"payment_id": payment["id"], "amount_cents": 250_000, "date": "2024-06-25", "method": "cash", **registry}

    assert client.post("/v1/credit-payments/pay", json=body).status_code == 200
    second = client.post("/v1/credit-payments/pay", json=body)

    assert second.status_code == 409
    assert len(client.get("/v1/transactions").json()) == 1
    assert client.get(f"/v1/credits/{credit['id']}").json()["remaining_cents"] == 600_000


def test_settle_unknown_payment_returns_404(client: TestClient, registry: dict):
    response = client.post(
        "/v1/credit-payments/pay",
        json={"payment_id": "nope", "amount_cents": 100, "date": "2024-06-25", "method": "cash", **registry},
    )
    assert response.status_code == 404


def test_settle_with_unknown_account_returns_422(client: TestClient, credit: dict, registry: dict):
    payment = _first_payment(client, credit["id"])
    response = client.post(
        "/v1/credit-payments/pay",
        json={
            "payment_id": payment["id"],
            "amount_cents": 250_000,
            "date": "2024-06-25",
            "method": "cash",
            "account_id": "ghost",
            "category_id": registry["category_id"],
        },
    )
    assert response.status_code == 422
    assert response.json()["field"] == "account_id"


def test_paid_payment_reversal_is_rejected(client: TestClient, credit: dict, registry: dict):
    payment = _first_payment(client, credit["id"])
    client.post(
        "/v1/credit-payments/pay",
        json={"payment_id": payment["id"], "amount_cents": 250_000, "date": "2024-06-25", "method": "cash", **registry},
    )

    assert client.put(f"/v1/credit-payments/{payment['id']}", json={"status": "pending"}).status_code == 409
    assert client.delete(f"/v1/credit-payments/{payment['id']}").status_code == 409
    assert client.delete(f"/v1/credits/{credit['id']}").status_code == 409


def test_update_pending_payment_notes(client: TestClient, credit: dict):
    payment = _first_payment(client, credit["id"])

    response = client.put(f"/v1/credit-payments/{payment['id']}", json={"notes": "autopay"})

    assert response.status_code == 200
    assert response.json()["notes"] == "autopay"
    assert response.json()["credit"] is None


def test_schedule_and_delete_payment(client: TestClient, credit: dict):
    created = client.post(
        "/v1/credit-payments",
        json={"credit_id": credit["id"], "amount_cents": 50_000, "date": "2099-01-01"},
    )
    assert created.status_code == 201
    assert created.json()["status"] == "pending"

    assert client.delete(f"/v1/credit-payments/{created.json()['id']}").json() == {"ok": True}


def test_update_credit_and_delete(client: TestClient, credit: dict):
    updated = client.put(f"/v1/credits/{credit['id']}", json={"name": "Sedan loan"})
    assert updated.status_code == 200
    assert updated.json()["name"] == "Sedan loan"

    assert client.delete(f"/v1/credits/{credit['id']}").status_code == 200
    assert client.get(f"/v1/credits/{credit['id']}").status_code == 404
    assert client.get(f"/v1/credit-payments?credit_id={credit['id']}").json() == []


def test_manual_transaction(client: TestClient, registry: dict):
    response = client.post(
        "/v1/transactions",
        json={"date": "2024-06-01", "type": "income", "amount_cents": 3_000_000, "method": "transfer", **registry},
    )
    assert response.status_code == 201
    assert response.json()["source_payment_id"] is None


def test_metrics_endpoint(client: TestClient, credit: dict, registry: dict):
    """Test Prometheus metrics endpoint"""
    payment = _first_payment(client, credit["id"])
    client.post(
        "/v1/credit-payments/pay",
        json={"payment_id": payment["id"], "amount_cents": 250_000, "date": "2024-06-25", "method": "cash", **registry},
    )

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "finance_settlement_total" in response.text
