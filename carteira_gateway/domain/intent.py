"""Intent classification: command > installment > expense > unknown"""

import re
from dataclasses import dataclass
from typing import Optional

from carteira_gateway.domain.amount import extract_amount, extract_amount_match
from carteira_gateway.domain.commands import classify_command
from carteira_gateway.domain.description import extract_description
from carteira_gateway.domain.models import ExpenseIntent, InstallmentIntent, Intent, UnknownIntent
from carteira_gateway.domain.money import parse_amount, round2

MAX_INSTALLMENTS = 100

EXPENSE_KEYWORDS = (
    "gastei",
    "paguei",
    "comprei",
    "saiu",
    "foi",
    "custou",
    "deu",
    "comprando",
    "no mercado",
    "na farmácia",
    "almocei",
    "jantei",
    "lanchou",
    "tomei",
)

INSTALLMENT_PATTERN = re.compile(
    r"(?P<amount>\d+(?:[.,]\d{1,2})?)\s*"
    r"(?:em|por|parcelado em|parcelada em|parcelado|parcelada)\s*"
    r"(?P<count>\d{1,3})x?",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class InstallmentInfo:
    total_amount: float
    installments: int
    installment_amount: float
    amount_start: int
    amount_end: int
    clause_end: int


def looks_like_expense(text: str) -> bool:
    """An extractable amount or any expense keyword is enough"""
    if extract_amount(text) is not None:
        return True
    lowered = text.lower()
    return any(keyword in lowered for keyword in EXPENSE_KEYWORDS)


def extract_installment_info(text: str) -> Optional[InstallmentInfo]:
    """
    Parse "<amount> em <N>x" style purchases.

    Valid only when total parses and is > 0 and 1 <= N <= 100. The
    per-installment amount is round2(total / N); no remainder is pushed onto
    any installment.
    """
    match = INSTALLMENT_PATTERN.search(text)
    if not match:
        return None

    total_amount = parse_amount(match.group("amount"))
    installments = int(match.group("count"))

    if total_amount is None or total_amount <= 0:
        return None
    if installments <= 0 or installments > MAX_INSTALLMENTS:
        return None

    return InstallmentInfo(
        total_amount=total_amount,
        installments=installments,
        installment_amount=round2(total_amount / installments),
        amount_start=match.start("amount"),
        amount_end=match.end("amount"),
        clause_end=match.end(),
    )


def classify(text: str) -> Intent:
    """
    Turn one inbound message into exactly one typed intent.

    Never raises: anything that is not a command, installment or expense
    becomes UnknownIntent.
    """
    command = classify_command(text)
    if command:
        return command

    expense_like = looks_like_expense(text)

    if expense_like:
        info = extract_installment_info(text)
        if info:
            description = extract_description(
                text,
                amount_span=(info.amount_start, info.amount_end),
                installment_span=(info.amount_end, info.clause_end),
            )
            return InstallmentIntent(
                total_amount=info.total_amount,
                installments=info.installments,
                installment_amount=info.installment_amount,
                description=description,
                raw_text=text,
            )

        amount = extract_amount_match(text)
        if amount and amount.value > 0:
            description = extract_description(text, amount_span=(amount.start, amount.end))
            return ExpenseIntent(amount=amount.value, description=description, raw_text=text)

    return UnknownIntent(text=text)
