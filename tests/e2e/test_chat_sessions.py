"""
E2E tests replaying whole chat sessions through POST /v1/messages.

Chat sessions:
- monthly budget: balance, daily spending, report, low-balance warning
- installment buyer: two plans, payments, reminders
- saver: savings and emergency pots, guarded reset of one pot
- clean slate: full reset with the confirmation phrase
"""

import itertools
import pytest
from fastapi.testclient import TestClient


class ChatSession:
    """Sends messages as one user with increasing message ids"""

    def __init__(self, client: TestClient, user_id: str):
        self.client = client
        self.user_id = user_id
        self.ids = itertools.count(1)

    def say(self, text: str) -> dict:
        response = self.client.post(
            "/v1/messages",
            json={"user_id": self.user_id, "message_id": f"{self.user_id}-{next(self.ids)}", "text": text},
        )
        assert response.status_code == 200
        return response.json()


@pytest.mark.integration
def test_monthly_budget_session(client: TestClient):
    """
    Budget user: sets 1000, spends through the day
    Expected: report groups by category, warning fires once at <= 30% left
    """
    chat = ChatSession(client, "budget@s.whatsapp.net")

    assert chat.say("Olá")["data"]["name"] == "budget"
    assert chat.say("/saldo 1000")["status"] == "ok"

    assert chat.say("gastei 120 no mercado")["data"]["warnings"] == []
    assert chat.say("almocei no restaurante, deu 45")["data"]["category"]["name"] == "Alimentação"
    assert chat.say("paguei R$ 30 de uber")["data"]["description"] == "uber"
    assert chat.say("15 reais de pão na padaria")["data"]["description"] == "pão na padaria"

    report = chat.say("/relatorio hoje")["data"]
    assert report["total"] == 210.0
    assert {c["name"] for c in report["categories"]} == {"Mercado", "Alimentação", "Transporte"}

    assert chat.say("gastei 500 em roupa")["data"]["warnings"] == ["low_balance"]
    assert chat.say("gastei 10 de uber")["data"]["warnings"] == []

    balance = chat.say("/saldo")["data"]["balance"]
    assert balance["current_balance"] == 280.0


@pytest.mark.integration
def test_installment_buyer_session(client: TestClient):
    """
    Installment buyer: two plans, pays the phone twice
    Expected: schedule starts on the 5th of next month, reminders track progress
    """
    chat = ChatSession(client, "parcelas")
    chat.say("oi")
    chat.say("/saldo 3000")

    phone = chat.say("comprei celular por 1200 em 12x")
    assert phone["data"]["first_due_date"] == "2024-04-05"
    tv = chat.say("comprei tv 2500,50 parcelado em 10x")
    assert tv["data"]["installment_amount"] == 250.05

    assert chat.say("/pagar celular")["data"]["number"] == 1
    assert chat.say("/pagar parcela celular")["data"]["number"] == 2

    plans = chat.say("/parcelamentos")["data"]["plans"]
    by_description = {p["description"]: p for p in plans}
    assert by_description["celular"]["pending_count"] == 10
    assert by_description["tv"]["remaining"] == 2500.5

    reminders = chat.say("/lembretes")["data"]["payments"]
    assert len(reminders) == 20
    assert chat.say("/vencidas")["data"]["payments"] == []

    assert chat.say("/saldo")["data"]["balance"]["current_balance"] == 2800.0


@pytest.mark.integration
def test_saver_session(client: TestClient):
    """
    Saver: moves money between pots and resets savings
    Expected: totals preserved across pots, reset needs the second request
    """
    chat = ChatSession(client, "saver")
    chat.say("oi")
    chat.say("/saldo 2000")

    chat.say("/guardar 500")
    chat.say("/reservar 300")
    assert chat.say("/retirar 100")["data"]["balance"] == {
        "initial_balance": 2000.0,
        "current_balance": 1300.0,
        "savings_balance": 400.0,
        "emergency_fund": 300.0,
        "total": 2000.0,
    }

    assert chat.say("/zerar poupança")["status"] == "confirmation_required"
    assert chat.say("/zerar poupança")["status"] == "ok"
    assert chat.say("/poupança")["data"]["balance"]["savings_balance"] == 0.0
    assert chat.say("/usar 500")["code"] == "insufficient_balance"


@pytest.mark.integration
def test_clean_slate_session(client: TestClient):
    """
    Clean slate: a different guarded action replaces the pending one
    Expected: only the phrase after /zerar tudo wipes the wallet
    """
    chat = ChatSession(client, "slate")
    chat.say("oi")
    chat.say("/saldo 800")
    chat.say("comprei fone 300 em 3x")

    chat.say("/zerar tudo")
    assert chat.say("/zerar saldo")["status"] == "confirmation_required"
    assert chat.say("SIM, ZERAR TUDO")["code"] == "confirmation_failed"

    chat.say("/zerar tudo")
    assert chat.say("SIM, ZERAR TUDO")["data"]["reset"] == "everything"

    assert chat.say("/parcelamentos")["data"]["plans"] == []
    assert chat.say("gastei 10 de uber")["code"] == "initial_balance_required"
