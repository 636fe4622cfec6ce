"""Wallet operations: balances, pots, expenses, installment plans and resets"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from carteira_gateway.domain.exceptions import (
    InitialBalanceRequiredError,
    InsufficientBalanceError,
    InvalidValueError,
    OperationNotAllowedError,
)
from carteira_gateway.domain.installments import (
    build_installment_schedule,
    find_by_description,
    first_due_date,
    next_pending_payment,
)
from carteira_gateway.domain.models import EMERGENCY_CATEGORY, SAVINGS_CATEGORY, PaymentStatus
from carteira_gateway.domain.money import is_valid_amount, round2
from carteira_gateway.domain.periods import report_window
from carteira_gateway.infrastructure.database.models import InstallmentPaymentRecord, InstallmentPlan, Transaction, User
from carteira_gateway.infrastructure.database.repositories import (
    CategoryRepository,
    InstallmentRepository,
    TransactionRepository,
)

# pot -> (balance attribute, reserved category, label used in insufficient-balance errors)
POTS = {
    "savings": ("savings_balance", SAVINGS_CATEGORY, "Poupança"),
    "emergency": ("emergency_fund", EMERGENCY_CATEGORY, "Reserva"),
}


@dataclass
class InstallmentPaymentOutcome:
    plan: InstallmentPlan
    payment: Optional[InstallmentPaymentRecord]  # None when the plan was already fully paid


def require_valid_amount(amount: Optional[float]) -> float:
    if not is_valid_amount(amount):
        raise InvalidValueError("Amount must be greater than 0 and less than 1,000,000")
    return amount


def wallet_snapshot(user: User) -> dict:
    return {
        "initial_balance": user.initial_balance,
        "current_balance": user.current_balance,
        "savings_balance": user.savings_balance,
        "emergency_fund": user.emergency_fund,
        "total": round2(user.current_balance + user.savings_balance + user.emergency_fund),
    }


class WalletService:
    """Applies money movements to one user's wallet; every mutation is round2'ed"""

    def __init__(self, db: Session, now: Callable[[], datetime], first_due_day: int = 5, low_balance_percent: float = 30.0):
        self.db = db
        self.now = now
        self.first_due_day = first_due_day
        self.low_balance_percent = low_balance_percent
        self.categories = CategoryRepository(db)
        self.transactions = TransactionRepository(db)
        self.installments = InstallmentRepository(db)

    # Main balance

    def set_balance(self, user: User, amount: Optional[float]) -> None:
        amount = require_valid_amount(amount)
        user.initial_balance = round2(amount)
        user.current_balance = round2(amount)
        self.db.flush()

    def add_balance(self, user: User, amount: Optional[float]) -> None:
        amount = require_valid_amount(amount)
        user.initial_balance = round2(user.initial_balance + amount)
        user.current_balance = round2(user.current_balance + amount)
        user.low_balance_warned = False
        self.db.flush()

    # Savings and emergency pots

    def deposit(self, user: User, pot: str, amount: Optional[float]) -> Transaction:
        """Move money from the main balance into a pot"""
        amount = require_valid_amount(amount)
        attribute, category_name, _ = POTS[pot]

        if user.current_balance < amount:
            raise InsufficientBalanceError("Saldo")

        user.current_balance = round2(user.current_balance - amount)
        setattr(user, attribute, round2(getattr(user, attribute) + amount))
        return self._record_pot_movement(user, category_name, amount, f"{pot}_deposit")

    def withdraw(self, user: User, pot: str, amount: Optional[float]) -> Transaction:
        """Move money from a pot back into the main balance"""
        amount = require_valid_amount(amount)
        attribute, category_name, label = POTS[pot]

        if getattr(user, attribute) < amount:
            raise InsufficientBalanceError(label)

        setattr(user, attribute, round2(getattr(user, attribute) - amount))
        user.current_balance = round2(user.current_balance + amount)
        return self._record_pot_movement(user, category_name, amount, f"{pot}_withdrawal")

    def _record_pot_movement(self, user: User, category_name: str, amount: float, transaction_type: str) -> Transaction:
        category = self.categories.get_by_name(category_name)
        return self.transactions.create(
            user_id=user.id,
            amount=amount,
            description=transaction_type.replace("_", " "),
            category_id=category.id if category else None,
            transaction_type=transaction_type,
            created_at=self.now(),
            chat_id=user.external_id,
        )

    # Expenses and installments

    def _require_initial_balance(self, user: User) -> None:
        if user.initial_balance == 0:
            raise InitialBalanceRequiredError("Set an initial balance with /saldo first")

    def record_expense(
        self,
        user: User,
        amount: float,
        description: str,
        category_id: Optional[int],
        chat_id: Optional[str] = None,
        message_id: Optional[str] = None,
    ) -> Transaction:
        """Store an expense and debit the main balance"""
        amount = require_valid_amount(amount)
        self._require_initial_balance(user)

        transaction = self.transactions.create(
            user_id=user.id,
            amount=amount,
            description=description,
            category_id=category_id,
            transaction_type="expense",
            created_at=self.now(),
            chat_id=chat_id,
            message_id=message_id,
        )
        user.current_balance = round2(user.current_balance - amount)
        self.db.flush()
        return transaction

    def balance_warnings(self, user: User) -> List[str]:
        """
        Warnings after spending: negative balance every time, low balance
        (money left <= threshold of initial) only once until money is added.
        """
        if user.current_balance < 0:
            return ["negative_balance"]

        total = user.current_balance + user.savings_balance + user.emergency_fund
        percent_left = (total / user.initial_balance) * 100 if user.initial_balance > 0 else 100

        if percent_left <= self.low_balance_percent and not user.low_balance_warned:
            user.low_balance_warned = True
            self.db.flush()
            return ["low_balance"]
        return []

    def create_installment_plan(
        self,
        user: User,
        total_amount: float,
        installments: int,
        installment_amount: float,
        description: str,
        category_id: Optional[int],
        chat_id: Optional[str] = None,
    ) -> InstallmentPlan:
        """Store a plan whose first payment is due on first_due_day of next month"""
        require_valid_amount(total_amount)
        self._require_initial_balance(user)

        schedule = build_installment_schedule(
            installments,
            installment_amount,
            first_due_date(self.now().date(), self.first_due_day),
        )
        return self.installments.create_plan(
            user_id=user.id,
            description=description,
            total_amount=total_amount,
            installment_amount=installment_amount,
            category_id=category_id,
            schedule=schedule,
            chat_id=chat_id,
        )

    def pay_installment(self, user: User, partial_description: Optional[str]) -> InstallmentPaymentOutcome:
        """
        Pay the next pending payment of the plan matching the description.

        Raises:
            InvalidValueError: empty description
            NotFoundError: no plan description contains the text
            InsufficientBalanceError: main balance below the payment amount
        """
        if not partial_description or not partial_description.strip():
            raise InvalidValueError("Tell which installment plan to pay")

        plan = find_by_description(self.installments.list_plans(user.id), partial_description)
        payment = next_pending_payment(plan.payments)
        if payment is None:
            return InstallmentPaymentOutcome(plan=plan, payment=None)

        if user.current_balance < payment.amount:
            raise InsufficientBalanceError("Saldo")

        payment.status = PaymentStatus.PAID.value
        payment.paid_at = self.now()
        self.record_expense(
            user,
            payment.amount,
            f"{plan.description} (parcela {payment.number}/{plan.total_installments})",
            plan.category_id,
            chat_id=plan.chat_id,
        )
        return InstallmentPaymentOutcome(plan=plan, payment=payment)

    def pending_payments(self, user: User, due_only: bool = False) -> List[InstallmentPaymentRecord]:
        """All pending payments, or only those due today or earlier"""
        due_before = self.now().date() + timedelta(days=1) if due_only else None
        return self.installments.pending_payments(user.id, due_before=due_before)

    # Reports

    def report(self, user: User, period: str) -> dict:
        start, end = report_window(period, self.now())
        rows = self.transactions.totals_by_category(user.id, start, end)
        total = round2(sum(row.total for row in rows))
        return {
            "period": period,
            "start": start.isoformat(),
            "end": end.isoformat(),
            "total": total,
            "categories": [
                {"name": row.name, "emoji": row.emoji, "total": round2(row.total), "count": row.entries}
                for row in rows
            ],
        }

    # Resets

    def reset(self, user: User, action_type: str) -> None:
        """
        Zero one part of the wallet, leaving a reset marker transaction.

        Raises:
            OperationNotAllowedError: the targeted pot or plan list is already empty
        """
        if action_type == "balance":
            user.current_balance = 0.0
            user.initial_balance = 0.0
            user.low_balance_warned = False
            marker = "Saldo zerado"
        elif action_type == "savings":
            if user.savings_balance == 0:
                raise OperationNotAllowedError("Savings already empty")
            user.savings_balance = 0.0
            marker = "Poupança zerada"
        elif action_type == "emergency":
            if user.emergency_fund == 0:
                raise OperationNotAllowedError("Emergency fund already empty")
            user.emergency_fund = 0.0
            marker = "Reserva de emergência zerada"
        elif action_type == "installments":
            if self.installments.delete_for_user(user.id) == 0:
                raise OperationNotAllowedError("No installment plans to remove")
            marker = "Parcelamentos zerados"
        elif action_type == "everything":
            user.current_balance = 0.0
            user.initial_balance = 0.0
            user.savings_balance = 0.0
            user.emergency_fund = 0.0
            user.low_balance_warned = False
            self.installments.delete_for_user(user.id)
            self.transactions.delete_for_user(user.id)
            marker = "Sistema totalmente zerado"
        else:
            raise ValueError(f"Unknown reset target: {action_type}")

        self.transactions.create(
            user_id=user.id,
            amount=0.0,
            description=marker,
            category_id=None,
            transaction_type="reset",
            created_at=self.now(),
        )
