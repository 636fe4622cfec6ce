"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient


def post_message(client: TestClient, text: str, message_id: str, user_id: str = "u1") -> dict:
    response = client.post("/v1/messages", json={"user_id": user_id, "message_id": message_id, "text": text})
    assert response.status_code == 200
    return response.json()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    client.post("/v1/classify", json={"text": "gastei 10 de uber"})

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "carteira_intent_total" in response.text
    assert "http_request_duration_seconds" in response.text


def test_request_id_is_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert client.get("/health").headers["X-Request-ID"]


@pytest.mark.parametrize(
    "text,kind",
    [
        ("/saldo 100", "command"),
        ("gastei 50 no mercado", "expense"),
        ("comprei celular por 1200 em 12x", "installment"),
        ("oi tudo bem", "unknown"),
    ],
)
def test_classify_kinds(client: TestClient, text, kind):
    response = client.post("/v1/classify", json={"text": text})

    assert response.status_code == 200
    assert response.json()["kind"] == kind


def test_classify_installment_fields(client: TestClient):
    """Test POST /v1/classify returns the parsed installment"""
    data = client.post("/v1/classify", json={"text": "comprei tv 2500,50 parcelado em 10x"}).json()

    assert data["total_amount"] == 2500.5
    assert data["installments"] == 10
    assert data["installment_amount"] == 250.05
    assert data["description"] == "tv"


def test_classify_command_fields(client: TestClient):
    data = client.post("/v1/classify", json={"text": "/pagar parcela celular"}).json()

    assert data["name"] == "payInstallment"
    assert data["description"] == "celular"
    assert data["amount"] is None


def test_classify_validation_error(client: TestClient):
    response = client.post("/v1/classify", json={})
    assert response.status_code == 422


@pytest.mark.parametrize(
    "text",
    ["comprei tv " + "9" * 400 + " em 12x", "comprei tv 1200 em " + "1" * 5000 + "x", "/saldo " + "9" * 400],
)
def test_classify_long_digit_runs(client: TestClient, text):
    """Test digit runs too long for a number still classify with 200"""
    response = client.post("/v1/classify", json={"text": text})

    assert response.status_code == 200
    assert response.json()["kind"] in ("unknown", "command")


@pytest.mark.parametrize(
    "description,name",
    [
        ("almocei no restaurante", "Alimentação"),
        ("mercado", "Mercado"),
        ("celular", "Compras"),
        ("uber", "Transporte"),
        ("coisa aleatória", "Outros"),
    ],
)
def test_category_match(client: TestClient, description, name):
    """Test POST /v1/categories/match against the seeded categories"""
    response = client.post("/v1/categories/match", json={"description": description})

    assert response.status_code == 200
    assert response.json()["name"] == name


def test_category_match_empty_description(client: TestClient):
    response = client.post("/v1/categories/match", json={"description": ""})
    assert response.status_code == 422


def test_schedule_preview(client: TestClient):
    """Test POST /v1/installments/schedule clamps month ends"""
    response = client.post(
        "/v1/installments/schedule",
        json={"total_installments": 3, "installment_amount": 33.33, "anchor_date": "2024-01-31"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_installments"] == 3
    assert [p["due_date"] for p in data["payments"]] == ["2024-01-31", "2024-02-29", "2024-03-31"]
    assert all(p["status"] == "pending" for p in data["payments"])
    assert all(p["amount"] == 33.33 for p in data["payments"])


@pytest.mark.parametrize(
    "payload",
    [
        {"total_installments": 0, "installment_amount": 10, "anchor_date": "2024-01-05"},
        {"total_installments": 101, "installment_amount": 10, "anchor_date": "2024-01-05"},
        {"total_installments": 3, "installment_amount": 0, "anchor_date": "2024-01-05"},
        {"total_installments": 3, "installment_amount": 10, "anchor_date": "not-a-date"},
    ],
)
def test_schedule_validation_error(client: TestClient, payload):
    response = client.post("/v1/installments/schedule", json=payload)
    assert response.status_code == 422


def test_confirmation_flow(client: TestClient):
    """Test POST /v1/confirmations/check request-then-repeat flow"""
    body = {"user_id": "u1", "action_type": "balance"}

    assert client.post("/v1/confirmations/check", json=body).json()["status"] == "pending"
    assert client.post("/v1/confirmations/check", json=body).json()["status"] == "executed"
    assert client.post("/v1/confirmations/check", json={**body, "confirm": True}).json()["status"] == "rejected"


def test_confirmation_expires(client: TestClient, clock):
    body = {"user_id": "u1", "action_type": "everything"}
    client.post("/v1/confirmations/check", json=body)
    clock.advance(121)

    response = client.post("/v1/confirmations/check", json={**body, "confirm": True})
    assert response.json()["status"] == "rejected"


def test_confirmation_unknown_action_type(client: TestClient):
    """Test POST /v1/confirmations/check rejects action types outside the guarded set"""
    response = client.post("/v1/confirmations/check", json={"user_id": "u1", "action_type": "nuke"})
    assert response.status_code == 422


def test_messages_flow(client: TestClient):
    """Test POST /v1/messages from welcome to a recorded expense"""
    assert post_message(client, "oi", "1")["status"] == "welcome"
    assert post_message(client, "/saldo 500", "2")["status"] == "ok"

    data = post_message(client, "gastei 50 no mercado", "3")

    assert data["status"] == "ok"
    assert data["intent"] == "expense"
    assert data["data"]["category"]["name"] == "Mercado"
    assert data["data"]["balance"]["current_balance"] == 450.0


def test_messages_error_is_structured(client: TestClient):
    post_message(client, "oi", "1")

    data = post_message(client, "gastei 50 no mercado", "2")

    assert data["status"] == "error"
    assert data["code"] == "initial_balance_required"


def test_messages_duplicate(client: TestClient):
    post_message(client, "oi", "1")

    assert post_message(client, "/saldo", "2")["status"] == "ok"
    assert post_message(client, "/saldo", "2")["status"] == "duplicate"


def test_messages_guarded_reset(client: TestClient):
    post_message(client, "oi", "1")
    post_message(client, "/saldo 500", "2")

    pending = post_message(client, "/zerar tudo", "3")
    assert pending["status"] == "confirmation_required"

    done = post_message(client, "SIM, ZERAR TUDO", "4")
    assert done["status"] == "ok"
    assert post_message(client, "/saldo", "5")["data"]["balance"]["total"] == 0.0


def test_messages_validation_error(client: TestClient):
    response = client.post("/v1/messages", json={"user_id": "", "message_id": "1", "text": "oi"})
    assert response.status_code == 422


def test_list_installments(client: TestClient):
    """Test GET /v1/installments lists stored plans newest first"""
    post_message(client, "oi", "1")
    post_message(client, "/saldo 5000", "2")
    post_message(client, "comprei celular por 1200 em 12x", "3")
    post_message(client, "comprei tv 1000 em 10x", "4")
    post_message(client, "/pagar celular", "5")

    response = client.get("/v1/installments", params={"user_id": "u1"})

    assert response.status_code == 200
    plans = response.json()["plans"]
    assert [p["description"] for p in plans] == ["tv", "celular"]
    celular = plans[1]
    assert celular["total_installments"] == 12
    assert celular["payments"][0]["status"] == "paid"
    assert celular["payments"][0]["due_date"] == "2024-04-05"
    assert celular["payments"][1]["status"] == "pending"


def test_list_installments_unknown_user(client: TestClient):
    response = client.get("/v1/installments", params={"user_id": "nobody"})
    assert response.status_code == 404
