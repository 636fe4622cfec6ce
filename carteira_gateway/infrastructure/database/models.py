"""SQLAlchemy ORM models for wallets, categories and installment plans"""

from sqlalchemy import Column, String, Boolean, Float, DateTime, Date, Integer, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class User(Base):
    """Chat user and their wallet balances"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    external_id = Column(String(128), nullable=False, unique=True, index=True)
    name = Column(Text, nullable=False)
    initial_balance = Column(Float, nullable=False, default=0.0)
    current_balance = Column(Float, nullable=False, default=0.0)
    savings_balance = Column(Float, nullable=False, default=0.0)
    emergency_fund = Column(Float, nullable=False, default=0.0)
    low_balance_warned = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    transactions = relationship("Transaction", back_populates="user", cascade="all, delete-orphan")
    installment_plans = relationship("InstallmentPlan", back_populates="user", cascade="all, delete-orphan")


class Category(Base):
    """Spending category; keywords stored comma-separated"""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(64), nullable=False, unique=True)
    emoji = Column(String(16), nullable=False, default="")
    keywords = Column(Text, nullable=False, default="")


class Transaction(Base):
    """Money movement: expense, pot transfer or reset marker"""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    description = Column(Text, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    transaction_type = Column(String(32), nullable=False, default="expense")
    chat_id = Column(Text, nullable=True)
    message_id = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    user = relationship("User", back_populates="transactions")
    category = relationship("Category")


class InstallmentPlan(Base):
    """Purchase split into monthly payments"""

    __tablename__ = "installment_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    total_amount = Column(Float, nullable=False)
    installment_amount = Column(Float, nullable=False)
    total_installments = Column(Integer, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    chat_id = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    user = relationship("User", back_populates="installment_plans")
    category = relationship("Category")
    payments = relationship(
        "InstallmentPaymentRecord",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="InstallmentPaymentRecord.number",
    )


class InstallmentPaymentRecord(Base):
    """Individual payment within an installment plan"""

    __tablename__ = "installment_payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plan_id = Column(Integer, ForeignKey("installment_plans.id", ondelete="CASCADE"), nullable=False)
    number = Column(Integer, nullable=False)
    amount = Column(Float, nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(String(16), nullable=False, default="pending")
    paid_at = Column(DateTime, nullable=True)

    plan = relationship("InstallmentPlan", back_populates="payments")
