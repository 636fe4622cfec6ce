"""
Description cleanup for expense and installment messages.

This is best-effort text cleanup, not a grammar: it removes the tokens the
parser already consumed and keeps whatever is left.
"""

import re
from typing import List, Optional, Tuple

from carteira_gateway.domain.amount import ACTION_VERBS, CURRENCY, MONEY_WORDS

DEFAULT_EXPENSE_DESCRIPTION = "Gasto"
DEFAULT_INSTALLMENT_DESCRIPTION = "Compra parcelada"

Span = Tuple[int, int]

_LEADING_VERB = re.compile(rf"^\s*{ACTION_VERBS}\s+", re.IGNORECASE)
_BEFORE_AMOUNT = re.compile(rf"(?:\bpor\s+)?(?:{CURRENCY}\s*)?$", re.IGNORECASE)
_AFTER_AMOUNT = re.compile(rf"^\s*(?:{MONEY_WORDS}(?!\w)|{CURRENCY}(?!\w))?", re.IGNORECASE)
_LOOSE_CURRENCY = re.compile(rf"(?<!\w){CURRENCY}(?!\w)\s*", re.IGNORECASE)
_LEADING_CONNECTIVE = re.compile(r"^\s*(?:em|de|com|no|na|para|pro|pra)\s+", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def _widen_amount(text: str, span: Span) -> Span:
    """Grow the amount span over a currency prefix/suffix and money word"""
    start, end = span
    before = _BEFORE_AMOUNT.search(text[:start])
    if before:
        start = before.start()
    after = _AFTER_AMOUNT.match(text[end:])
    if after:
        end += after.end()
    return start, end


def _remove_spans(text: str, spans: List[Span]) -> str:
    kept = []
    cursor = 0
    for start, end in sorted(spans):
        if start > cursor:
            kept.append(text[cursor:start])
        cursor = max(cursor, end)
    kept.append(text[cursor:])
    return " ".join(kept)


def extract_description(
    text: str,
    amount_span: Optional[Span],
    installment_span: Optional[Span] = None,
    default: Optional[str] = None,
) -> str:
    """
    Strip consumed tokens from text, in this order:

    1. leading action verb (gastei, paguei, ...)
    2. amount token with currency prefix/suffix and colloquial money word
    3. installment clause ("em 12x"), when installment_span is given
    4. leading connective (em, de, com, no, na, para, pro, pra)

    Spans index into the original text. Falls back to "Gasto", or
    "Compra parcelada" for installments, when nothing is left.
    """
    if default is None:
        default = DEFAULT_INSTALLMENT_DESCRIPTION if installment_span else DEFAULT_EXPENSE_DESCRIPTION

    cuts: List[Span] = []

    verb = _LEADING_VERB.match(text)
    if verb:
        cuts.append(verb.span())

    if amount_span:
        cuts.append(_widen_amount(text, amount_span))

    if installment_span:
        cuts.append(installment_span)

    remaining = _remove_spans(text, cuts)
    remaining = _LOOSE_CURRENCY.sub("", remaining)
    remaining = _LEADING_CONNECTIVE.sub("", remaining, count=1)
    remaining = _WHITESPACE.sub(" ", remaining).strip()

    return remaining or default
