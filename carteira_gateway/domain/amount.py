"""Monetary value extraction from free Portuguese text"""

import re
from typing import List, NamedTuple, Optional

from carteira_gateway.domain.models import AmountMatch
from carteira_gateway.domain.money import parse_amount

AMOUNT = r"(?P<amount>\d+(?:[.,]\d{1,2})?)"
CURRENCY = r"(?:r\$|rs)"
ACTION_VERBS = r"(?:gastei|paguei|comprei|saiu|foi|custou|deu)"
MONEY_WORDS = r"(?:reais|real|contos|conto|pilas|pila|pau|mangos)"


class AmountRule(NamedTuple):
    name: str
    pattern: re.Pattern


# Priority order: the first rule that matches wins, no scoring across rules
AMOUNT_RULES: List[AmountRule] = [
    AmountRule("verb_prefixed", re.compile(rf"{ACTION_VERBS}\s+{CURRENCY}?\s*{AMOUNT}", re.IGNORECASE)),
    AmountRule("currency_prefixed", re.compile(rf"{CURRENCY}\s*{AMOUNT}", re.IGNORECASE)),
    AmountRule("money_word", re.compile(rf"{AMOUNT}\s*{MONEY_WORDS}", re.IGNORECASE)),
    AmountRule("currency_suffixed", re.compile(rf"{AMOUNT}\s*{CURRENCY}", re.IGNORECASE)),
    AmountRule("leading_number", re.compile(rf"^{AMOUNT}\s+", re.IGNORECASE)),
]


def extract_amount_match(text: str) -> Optional[AmountMatch]:
    """
    Find the spent amount in text using the ordered rule table.

    Decimal separator may be '.' or ','. The value is not range-checked here;
    callers validate it with is_valid_amount. A rule whose digits overflow a
    float is skipped.

    Returns:
        AmountMatch with the parsed value and the span of the digits, or None
    """
    for rule in AMOUNT_RULES:
        match = rule.pattern.search(text)
        if not match:
            continue
        value = parse_amount(match.group("amount"))
        if value is not None:
            return AmountMatch(
                value=value,
                start=match.start("amount"),
                end=match.end("amount"),
            )
    return None


def extract_amount(text: str) -> Optional[float]:
    """Convenience wrapper returning only the value"""
    match = extract_amount_match(text)
    return match.value if match else None
