"""Slash-command classification"""

import re
from typing import Dict, List, NamedTuple, Optional

from carteira_gateway.domain.models import CommandIntent
from carteira_gateway.domain.money import parse_amount

_AMOUNT = r"(\d+(?:[.,]\d{1,2})?)"
_RESET = r"(?:zerar|resetar|limpar)"


class CommandRule(NamedTuple):
    name: str
    pattern: re.Pattern
    argument: Optional[str] = None  # "amount" | "description"


def _rule(name: str, pattern: str, argument: Optional[str] = None) -> CommandRule:
    return CommandRule(name, re.compile(pattern, re.IGNORECASE), argument)


# Scanned top to bottom, first match wins
COMMAND_RULES: List[CommandRule] = [
    # Main balance
    _rule("setBalance", rf"^/saldo\s+{_AMOUNT}", "amount"),
    _rule("getBalance", r"^/saldo\s*$"),
    _rule("addBalance", rf"^/adicionar\s+{_AMOUNT}", "amount"),
    # Savings
    _rule("getSavings", r"^/poupan[cç]a\s*$"),
    _rule("depositSavings", rf"^/guardar\s+{_AMOUNT}", "amount"),
    _rule("withdrawSavings", rf"^/retirar\s+{_AMOUNT}", "amount"),
    # Emergency fund
    _rule("getEmergency", r"^/emerg[eê]ncia\s*$"),
    _rule("depositEmergency", rf"^/reservar\s+{_AMOUNT}", "amount"),
    _rule("withdrawEmergency", rf"^/usar\s+{_AMOUNT}", "amount"),
    # Installments
    _rule("getInstallments", r"^/parcelamentos?\s*$"),
    _rule("payInstallment", r"^/pagar\s+(?:parcela\s+)?(.+)", "description"),
    # Reminders
    _rule("getReminders", r"^/(?:lembretes?|lembrar|avisos?)"),
    _rule("getDuePayments", r"^/(?:vencidas?|atrasadas?|pendentes?)"),
    # Resets
    _rule("resetBalance", rf"^/{_RESET}\s+saldo\s*$"),
    _rule("resetSavings", rf"^/{_RESET}\s+poupan[cç]a\s*$"),
    _rule("resetEmergency", rf"^/{_RESET}\s+reserva(?:\s+emerg[eê]ncia)?\s*$"),
    _rule("resetInstallments", r"^/(?:zerar|resetar|limpar|apagar)\s+(?:parcelas?|parcelamentos?)\s*$"),
    _rule("resetEverything", rf"^/{_RESET}\s+(?:tudo|sistema)\s*$"),
    _rule("confirmReset", r"^SIM,?\s*ZERAR\s+TUDO\s*$"),
    # Reports
    _rule("reportDaily", r"^/relat[oó]rio\s+(?:hoje|di[aá]rio|day|daily)"),
    _rule("reportWeekly", r"^/relat[oó]rio\s+(?:semana|semanal|week|weekly)"),
    _rule("reportMonthly", r"^/relat[oó]rio\s+(?:m[eê]s|mensal|month|monthly)"),
    _rule("reportDailyShort", r"^/(?:hoje|di[aá]rio)\s*$"),
    _rule("reportWeeklyShort", r"^/(?:semana|semanal)\s*$"),
    _rule("reportMonthlyShort", r"^/(?:m[eê]s|mensal)\s*$"),
    # Misc
    _rule("help", r"^/(?:ajuda|help|comandos)"),
    _rule("start", r"^/(?:start|come[çc]ar)"),
]

COMMAND_ALIASES: Dict[str, str] = {
    "reportDailyShort": "reportDaily",
    "reportWeeklyShort": "reportWeekly",
    "reportMonthlyShort": "reportMonthly",
}

COMMAND_NAMES = frozenset(COMMAND_ALIASES.get(rule.name, rule.name) for rule in COMMAND_RULES)


def classify_command(text: str) -> Optional[CommandIntent]:
    """
    Match text against the command table.

    Amount arguments are parsed with ',' -> '.' normalization (None when the
    digits overflow a float, left for the caller to reject); payInstallment
    captures everything after the keyword as a description. Short report
    aliases come back under their long name.
    """
    trimmed = text.strip()

    for rule in COMMAND_RULES:
        match = rule.pattern.match(trimmed)
        if not match:
            continue

        name = COMMAND_ALIASES.get(rule.name, rule.name)
        if rule.argument == "amount":
            return CommandIntent(name=name, amount=parse_amount(match.group(1)))
        if rule.argument == "description":
            return CommandIntent(name=name, description=match.group(1).strip())
        return CommandIntent(name=name)

    return None
