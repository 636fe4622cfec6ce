"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple, Union

# Never auto-assigned by the category matcher
FALLBACK_CATEGORY = "Outros"
SAVINGS_CATEGORY = "Poupança"
EMERGENCY_CATEGORY = "Emergência"
RESERVED_CATEGORIES = frozenset({FALLBACK_CATEGORY, SAVINGS_CATEGORY, EMERGENCY_CATEGORY})


@dataclass(frozen=True)
class CommandIntent:
    """Slash-command (or confirmation phrase) with its optional argument"""

    name: str
    amount: Optional[float] = None
    description: Optional[str] = None
    kind: str = field(default="command", init=False)


@dataclass(frozen=True)
class ExpenseIntent:
    """Single expense written in free text"""

    amount: float
    description: str
    raw_text: str
    kind: str = field(default="expense", init=False)


@dataclass(frozen=True)
class InstallmentIntent:
    """Purchase split into monthly installments ("1200 em 12x")"""

    total_amount: float
    installments: int
    installment_amount: float
    description: str
    raw_text: str
    kind: str = field(default="installment", init=False)


@dataclass(frozen=True)
class UnknownIntent:
    """Text that is neither a command nor an expense"""

    text: str
    kind: str = field(default="unknown", init=False)


Intent = Union[CommandIntent, ExpenseIntent, InstallmentIntent, UnknownIntent]


@dataclass(frozen=True)
class AmountMatch:
    """Amount found in free text plus the span of its digits"""

    value: float
    start: int
    end: int


@dataclass(frozen=True)
class Category:
    """Spending category with its matching keywords"""

    id: int
    name: str
    emoji: str
    keywords: Tuple[str, ...] = ()

    @classmethod
    def from_keyword_string(cls, id: int, name: str, emoji: str, keywords: str) -> "Category":
        """Build from the stored comma-separated keyword list"""
        return cls(id=id, name=name, emoji=emoji, keywords=tuple(keywords.split(",")) if keywords else ())

    @property
    def reserved(self) -> bool:
        return self.name in RESERVED_CATEGORIES


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


@dataclass
class InstallmentPayment:
    """Single payment in an installment schedule"""

    number: int
    amount: float
    due_date: date
    status: PaymentStatus = PaymentStatus.PENDING
