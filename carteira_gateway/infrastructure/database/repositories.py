"""Data access layer for wallets, categories and installment plans"""

from datetime import date, datetime
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from carteira_gateway.domain import models as domain
from carteira_gateway.infrastructure.database.models import (
    Category,
    InstallmentPaymentRecord,
    InstallmentPlan,
    Transaction,
    User,
)


class UserRepository:
    """Repository for users and their balances"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_external_id(self, external_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.external_id == external_id).first()

    def create(self, external_id: str, name: str) -> User:
        """Register a new chat user with an empty wallet"""
        user = User(
            external_id=external_id,
            name=name,
            initial_balance=0.0,
            current_balance=0.0,
            savings_balance=0.0,
            emergency_fund=0.0,
            low_balance_warned=False,
        )
        self.db.add(user)
        self.db.flush()
        return user


class CategoryRepository:
    """Repository for spending categories"""

    def __init__(self, db: Session):
        self.db = db

    def list_categories(self) -> List[domain.Category]:
        """All categories ordered by name, as domain objects"""
        rows = self.db.query(Category).order_by(Category.name).all()
        return [domain.Category.from_keyword_string(row.id, row.name, row.emoji, row.keywords) for row in rows]

    def get_by_name(self, name: str) -> Optional[Category]:
        return self.db.query(Category).filter(Category.name == name).first()

    def create(self, name: str, emoji: str, keywords: Sequence[str]) -> Category:
        category = Category(name=name, emoji=emoji, keywords=",".join(keywords))
        self.db.add(category)
        self.db.flush()
        return category


class TransactionRepository:
    """Repository for money movements"""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: int,
        amount: float,
        description: str,
        category_id: Optional[int],
        transaction_type: str,
        created_at: datetime,
        chat_id: Optional[str] = None,
        message_id: Optional[str] = None,
    ) -> Transaction:
        """Persist one transaction; balance changes are the caller's job"""
        transaction = Transaction(
            user_id=user_id,
            amount=amount,
            description=description,
            category_id=category_id,
            transaction_type=transaction_type,
            chat_id=chat_id,
            message_id=message_id,
            created_at=created_at,
        )
        self.db.add(transaction)
        self.db.flush()
        return transaction

    def totals_by_category(self, user_id: int, start: datetime, end: datetime) -> list:
        """Expense totals per category in [start, end), largest first"""
        return (
            self.db.query(
                Category.name,
                Category.emoji,
                func.sum(Transaction.amount).label("total"),
                func.count(Transaction.id).label("entries"),
            )
            .join(Category, Transaction.category_id == Category.id)
            .filter(
                Transaction.user_id == user_id,
                Transaction.transaction_type == "expense",
                Transaction.created_at >= start,
                Transaction.created_at < end,
            )
            .group_by(Category.id, Category.name, Category.emoji)
            .order_by(func.sum(Transaction.amount).desc())
            .all()
        )

    def delete_for_user(self, user_id: int) -> int:
        return self.db.query(Transaction).filter(Transaction.user_id == user_id).delete(synchronize_session=False)


class InstallmentRepository:
    """Repository for installment plans and their payments"""

    def __init__(self, db: Session):
        self.db = db

    def create_plan(
        self,
        user_id: int,
        description: str,
        total_amount: float,
        installment_amount: float,
        category_id: Optional[int],
        schedule: List[domain.InstallmentPayment],
        chat_id: Optional[str] = None,
    ) -> InstallmentPlan:
        """Create plan with one payment row per scheduled installment"""
        plan = InstallmentPlan(
            user_id=user_id,
            description=description,
            total_amount=total_amount,
            installment_amount=installment_amount,
            total_installments=len(schedule),
            category_id=category_id,
            chat_id=chat_id,
        )
        self.db.add(plan)
        self.db.flush()

        for payment in schedule:
            self.db.add(
                InstallmentPaymentRecord(
                    plan_id=plan.id,
                    number=payment.number,
                    amount=payment.amount,
                    due_date=payment.due_date,
                    status=payment.status.value,
                )
            )
        self.db.flush()
        self.db.refresh(plan)
        return plan

    def list_plans(self, user_id: int) -> List[InstallmentPlan]:
        """User's plans, newest first"""
        return (
            self.db.query(InstallmentPlan)
            .filter(InstallmentPlan.user_id == user_id)
            .order_by(InstallmentPlan.created_at.desc(), InstallmentPlan.id.desc())
            .all()
        )

    def pending_payments(self, user_id: int, due_before: Optional[date] = None) -> List[InstallmentPaymentRecord]:
        """Pending payments across all plans, earliest due first"""
        query = (
            self.db.query(InstallmentPaymentRecord)
            .join(InstallmentPlan, InstallmentPaymentRecord.plan_id == InstallmentPlan.id)
            .filter(
                InstallmentPlan.user_id == user_id,
                InstallmentPaymentRecord.status == domain.PaymentStatus.PENDING.value,
            )
        )
        if due_before is not None:
            query = query.filter(InstallmentPaymentRecord.due_date < due_before)
        return query.order_by(InstallmentPaymentRecord.due_date, InstallmentPaymentRecord.number).all()

    def delete_for_user(self, user_id: int) -> int:
        """Remove every plan (and its payments) owned by the user"""
        plans = self.list_plans(user_id)
        for plan in plans:
            self.db.delete(plan)
        self.db.flush()
        return len(plans)


def to_domain_payments(plan: InstallmentPlan) -> List[domain.InstallmentPayment]:
    """ORM payment rows as domain InstallmentPayment objects"""
    return [
        domain.InstallmentPayment(
            number=record.number,
            amount=record.amount,
            due_date=record.due_date,
            status=domain.PaymentStatus(record.status),
        )
        for record in plan.payments
    ]
