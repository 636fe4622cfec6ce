"""Unit tests for slash-command classification"""

import pytest
from carteira_gateway.domain.commands import COMMAND_NAMES, classify_command


COMMAND_CASES = [
    ("/saldo 1500", "setBalance"),
    ("/saldo", "getBalance"),
    ("/adicionar 200", "addBalance"),
    ("/poupança", "getSavings"),
    ("/guardar 50", "depositSavings"),
    ("/retirar 20", "withdrawSavings"),
    ("/emergencia", "getEmergency"),
    ("/reservar 100", "depositEmergency"),
    ("/usar 30", "withdrawEmergency"),
    ("/parcelamentos", "getInstallments"),
    ("/pagar parcela celular", "payInstallment"),
    ("/lembretes", "getReminders"),
    ("/vencidas", "getDuePayments"),
    ("/zerar saldo", "resetBalance"),
    ("/resetar poupanca", "resetSavings"),
    ("/limpar reserva emergência", "resetEmergency"),
    ("/apagar parcelas", "resetInstallments"),
    ("/zerar tudo", "resetEverything"),
    ("SIM, ZERAR TUDO", "confirmReset"),
    ("/relatorio hoje", "reportDaily"),
    ("/relatório semana", "reportWeekly"),
    ("/relatorio mês", "reportMonthly"),
    ("/ajuda", "help"),
    ("/start", "start"),
]


@pytest.mark.parametrize("text,name", COMMAND_CASES)
def test_classify_command(text, name):
    """Test every command pattern maps to its name"""
    intent = classify_command(text)

    assert intent is not None
    assert intent.name == name
    assert intent.kind == "command"


def test_every_command_name_is_reachable():
    """Test the cases above cover every command name"""
    assert {name for _, name in COMMAND_CASES} == COMMAND_NAMES


@pytest.mark.parametrize(
    "text,name",
    [("/hoje", "reportDaily"), ("/semana", "reportWeekly"), ("/mes", "reportMonthly"), ("/mensal", "reportMonthly")],
)
def test_short_report_aliases_use_long_name(text, name):
    """Test short report commands come back under the long name"""
    assert classify_command(text).name == name


def test_amount_argument_accepts_comma():
    """Test command amounts accept a comma decimal"""
    intent = classify_command("/saldo 1500,50")

    assert intent.name == "setBalance"
    assert intent.amount == 1500.5


def test_pay_installment_captures_description():
    """Test /pagar keeps the rest of the text, minus 'parcela'"""
    assert classify_command("/pagar geladeira nova").description == "geladeira nova"
    assert classify_command("/pagar parcela tv").description == "tv"


def test_commands_are_case_insensitive_and_trimmed():
    """Test case and surrounding whitespace are ignored"""
    assert classify_command("  /SALDO  ").name == "getBalance"
    assert classify_command("sim zerar tudo").name == "confirmReset"


@pytest.mark.parametrize("text", ["/saldo abc", "/foo", "gastei 50", "saldo 100", "/zerar"])
def test_non_commands_return_none(text):
    """Test text outside the table is not a command"""
    assert classify_command(text) is None
