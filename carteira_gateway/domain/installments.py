"""Installment schedule generation for monthly purchase plans"""

from datetime import date
from typing import List, Optional, Sequence, TypeVar

from dateutil.relativedelta import relativedelta

from carteira_gateway.domain.exceptions import NotFoundError
from carteira_gateway.domain.models import InstallmentPayment, PaymentStatus


def build_installment_schedule(
    total_installments: int,
    installment_amount: float,
    anchor_date: date,
) -> List[InstallmentPayment]:
    """
    Generate monthly payments for an installment purchase.

    Requirements:
    - Payments numbered 1..N, all pending
    - Payment i is due (i - 1) calendar months after the anchor date
    - Every payment carries the same rounded amount; drift against the
      purchase total is left as is

    Args:
        total_installments: Number of payments (N)
        installment_amount: Rounded per-installment amount
        anchor_date: Due date of the first payment

    Returns:
        List of InstallmentPayment objects ordered by number

    Example:
        3 x 100.00 from 2024-01-31 -> 2024-01-31, 2024-02-29, 2024-03-31
    """
    if total_installments <= 0:
        return []

    return [
        InstallmentPayment(
            number=number,
            amount=installment_amount,
            # Offset from the anchor, not from the previous payment
            due_date=anchor_date + relativedelta(months=number - 1),
            status=PaymentStatus.PENDING,
        )
        for number in range(1, total_installments + 1)
    ]


def first_due_date(today: date, due_day: int = 5) -> date:
    """First installment falls on `due_day` of the month after `today`"""
    return today + relativedelta(months=1, day=due_day)


T = TypeVar("T")


def next_pending_payment(payments: Sequence[T]) -> Optional[T]:
    """
    Lowest-numbered payment still pending, or None when fully paid.

    Accepts domain payments or stored payment rows; a "pending" string
    compares equal to PaymentStatus.PENDING.
    """
    pending = [p for p in payments if p.status == PaymentStatus.PENDING]
    return min(pending, key=lambda p: p.number) if pending else None


def find_by_description(candidates: Sequence[T], partial_description: str) -> T:
    """
    First candidate whose `description` contains the search text (case-insensitive).

    Raises:
        NotFoundError: when no candidate matches
    """
    needle = partial_description.strip().lower()
    for candidate in candidates:
        if needle in candidate.description.lower():
            return candidate
    raise NotFoundError(f"No installment plan matching '{partial_description}'")
