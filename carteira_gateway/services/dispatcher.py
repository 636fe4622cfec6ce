"""Routes classified messages to wallet operations"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from carteira_gateway.config import settings
from carteira_gateway.domain.categories import match_category
from carteira_gateway.domain.confirmation import EVERYTHING, ConfirmationGate, GuardOutcome
from carteira_gateway.domain.dedup import MessageDeduplicator
from carteira_gateway.domain.exceptions import ConfirmationFailedError, DomainException, UnknownCommandError
from carteira_gateway.domain.intent import classify
from carteira_gateway.domain.models import CommandIntent, ExpenseIntent, InstallmentIntent, Intent
from carteira_gateway.domain.money import round2
from carteira_gateway.domain.periods import REPORT_PERIODS
from carteira_gateway.infrastructure.database.models import User
from carteira_gateway.infrastructure.database.repositories import UserRepository
from carteira_gateway.infrastructure.observability.logging import log_dispatch
from carteira_gateway.infrastructure.observability.metrics import (
    category_match_counter,
    guarded_action_counter,
    record_dispatch,
)
from carteira_gateway.services.wallet import WalletService, require_valid_amount, wallet_snapshot

logger = logging.getLogger(__name__)

GUARDED_COMMANDS = {
    "resetBalance": "balance",
    "resetSavings": "savings",
    "resetEmergency": "emergency",
    "resetInstallments": "installments",
    "resetEverything": EVERYTHING,
}

CONFIRM_EVERYTHING_PHRASE = "SIM, ZERAR TUDO"


@dataclass
class InboundMessage:
    """One chat message as handed over by the transport"""

    user_id: str
    message_id: str
    text: str
    display_name: Optional[str] = None
    chat_id: Optional[str] = None


@dataclass
class DispatchResult:
    """Structured outcome; wording is left to the chat transport"""

    status: str  # ok | error | confirmation_required | duplicate | ignored | welcome
    intent: Optional[str] = None
    command: Optional[str] = None
    code: Optional[str] = None
    detail: Optional[str] = None
    data: dict = field(default_factory=dict)


def local_now(tz: str) -> datetime:
    """Naive wall-clock time in the configured timezone"""
    return datetime.now(ZoneInfo(tz)).replace(tzinfo=None)


class MessageDispatcher:
    """
    Applies one inbound message to the sender's wallet.

    Holds the per-process session state (duplicate-message window and
    confirmation slots); everything else lives in the database session passed
    to handle(). Messages are handled one at a time, even when the HTTP layer
    calls in from several worker threads.
    """

    def __init__(
        self,
        gate: Optional[ConfirmationGate] = None,
        deduplicator: Optional[MessageDeduplicator] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        if gate is None:
            gate = ConfirmationGate(ttl_seconds=settings.confirmation_ttl_seconds)
        if deduplicator is None:
            deduplicator = MessageDeduplicator(ttl_seconds=settings.duplicate_message_ttl_seconds)
        self.gate = gate
        self.deduplicator = deduplicator
        self.now = now or (lambda: local_now(settings.timezone))
        # Reentrant so the HTTP layer can hold it across handle() and its commit
        self.lock = threading.RLock()

    def handle(self, db: Session, message: InboundMessage) -> DispatchResult:
        with self.lock:
            return self._handle(db, message)

    def _handle(self, db: Session, message: InboundMessage) -> DispatchResult:
        text = (message.text or "").strip()
        if not text:
            return DispatchResult(status="ignored")

        if self.deduplicator.seen_recently(message.user_id, message.message_id):
            record_dispatch("unknown", "duplicate")
            return DispatchResult(status="duplicate")

        users = UserRepository(db)
        user = users.get_by_external_id(message.user_id)
        if user is None:
            name = message.display_name or message.user_id.split("@")[0]
            user = users.create(message.user_id, name)
            logger.info("New user registered", extra={"user_id": message.user_id})
            record_dispatch("unknown", "welcome")
            return DispatchResult(status="welcome", data={"name": name})

        intent = classify(text)
        wallet = WalletService(
            db,
            now=self.now,
            first_due_day=settings.first_due_day,
            low_balance_percent=settings.low_balance_threshold_percent,
        )

        try:
            result = self._dispatch(intent, user, wallet, message)
        except DomainException as e:
            logger.warning(f"Dispatch rejected: {e}", extra={"user_id": message.user_id, "code": e.code})
            result = DispatchResult(status="error", code=e.code, detail=str(e))

        result.intent = intent.kind
        if isinstance(intent, CommandIntent):
            result.command = intent.name

        record_dispatch(intent.kind, result.status)
        log_dispatch(message.user_id, intent.kind, result.status, result.code)
        return result

    def _dispatch(self, intent: Intent, user: User, wallet: WalletService, message: InboundMessage) -> DispatchResult:
        if isinstance(intent, CommandIntent):
            return self._handle_command(intent, user, wallet)
        if isinstance(intent, ExpenseIntent):
            return self._handle_expense(intent, user, wallet, message)
        if isinstance(intent, InstallmentIntent):
            return self._handle_installment(intent, user, wallet, message)

        if intent.text.strip().startswith("/"):
            raise UnknownCommandError(f"Unknown command: {intent.text.split()[0]}")
        return DispatchResult(status="ignored")

    # Free-text spending

    def _match_category(self, wallet: WalletService, description: str) -> Optional[dict]:
        categories = wallet.categories.list_categories()
        if not categories:
            return None
        category_id = match_category(description, categories)
        category = next(c for c in categories if c.id == category_id)
        category_match_counter.labels(category=category.name).inc()
        return {"id": category.id, "name": category.name, "emoji": category.emoji}

    def _handle_expense(
        self, intent: ExpenseIntent, user: User, wallet: WalletService, message: InboundMessage
    ) -> DispatchResult:
        require_valid_amount(intent.amount)
        category = self._match_category(wallet, intent.description)
        transaction = wallet.record_expense(
            user,
            intent.amount,
            intent.description,
            category["id"] if category else None,
            chat_id=message.chat_id,
            message_id=message.message_id,
        )
        return DispatchResult(
            status="ok",
            data={
                "transaction_id": transaction.id,
                "amount": transaction.amount,
                "description": transaction.description,
                "category": category,
                "balance": wallet_snapshot(user),
                "warnings": wallet.balance_warnings(user),
            },
        )

    def _handle_installment(
        self, intent: InstallmentIntent, user: User, wallet: WalletService, message: InboundMessage
    ) -> DispatchResult:
        require_valid_amount(intent.total_amount)
        category = self._match_category(wallet, intent.description)
        plan = wallet.create_installment_plan(
            user,
            total_amount=intent.total_amount,
            installments=intent.installments,
            installment_amount=intent.installment_amount,
            description=intent.description,
            category_id=category["id"] if category else None,
            chat_id=message.chat_id,
        )
        return DispatchResult(
            status="ok",
            data={
                "plan_id": plan.id,
                "description": plan.description,
                "total_amount": plan.total_amount,
                "installment_amount": plan.installment_amount,
                "total_installments": plan.total_installments,
                "first_due_date": plan.payments[0].due_date.isoformat(),
                "category": category,
            },
        )

    # Commands

    def _handle_command(self, intent: CommandIntent, user: User, wallet: WalletService) -> DispatchResult:
        name = intent.name

        if name in GUARDED_COMMANDS:
            return self._guarded(user, wallet, GUARDED_COMMANDS[name], confirm=False)
        if name == "confirmReset":
            return self._guarded(user, wallet, EVERYTHING, confirm=True)
        if name in REPORT_PERIODS:
            return DispatchResult(status="ok", data=wallet.report(user, REPORT_PERIODS[name]))

        handler = self._command_handlers().get(name)
        if handler is None:
            raise UnknownCommandError(f"Unknown command: {name}")
        return handler(intent, user, wallet)

    def _command_handlers(self) -> Dict[str, Callable[[CommandIntent, User, WalletService], DispatchResult]]:
        return {
            "setBalance": self._set_balance,
            "addBalance": self._add_balance,
            "getBalance": self._balance,
            "getSavings": self._balance,
            "getEmergency": self._balance,
            "depositSavings": lambda i, u, w: self._pot(w.deposit, u, "savings", i.amount),
            "withdrawSavings": lambda i, u, w: self._pot(w.withdraw, u, "savings", i.amount),
            "depositEmergency": lambda i, u, w: self._pot(w.deposit, u, "emergency", i.amount),
            "withdrawEmergency": lambda i, u, w: self._pot(w.withdraw, u, "emergency", i.amount),
            "getInstallments": self._list_installments,
            "payInstallment": self._pay_installment,
            "getReminders": lambda i, u, w: self._pending(u, w, due_only=False),
            "getDuePayments": lambda i, u, w: self._pending(u, w, due_only=True),
            "help": lambda i, u, w: DispatchResult(status="ok", data={"topic": "help"}),
            "start": lambda i, u, w: DispatchResult(status="ok", data={"topic": "welcome", "name": u.name}),
        }

    def _set_balance(self, intent: CommandIntent, user: User, wallet: WalletService) -> DispatchResult:
        wallet.set_balance(user, intent.amount)
        logger.info("Initial balance set", extra={"user_id": user.external_id, "amount": intent.amount})
        return DispatchResult(status="ok", data={"balance": wallet_snapshot(user), "at": self.now().isoformat()})

    def _add_balance(self, intent: CommandIntent, user: User, wallet: WalletService) -> DispatchResult:
        wallet.add_balance(user, intent.amount)
        return DispatchResult(
            status="ok",
            data={"added": intent.amount, "balance": wallet_snapshot(user), "at": self.now().isoformat()},
        )

    def _balance(self, intent: CommandIntent, user: User, wallet: WalletService) -> DispatchResult:
        return DispatchResult(status="ok", data={"balance": wallet_snapshot(user)})

    def _pot(self, operation, user: User, pot: str, amount: Optional[float]) -> DispatchResult:
        transaction = operation(user, pot, amount)
        return DispatchResult(
            status="ok",
            data={"pot": pot, "amount": transaction.amount, "balance": wallet_snapshot(user)},
        )

    def _list_installments(self, intent: CommandIntent, user: User, wallet: WalletService) -> DispatchResult:
        plans = []
        for plan in wallet.installments.list_plans(user.id):
            paid = sum(1 for p in plan.payments if p.status == "paid")
            pending = len(plan.payments) - paid
            plans.append(
                {
                    "plan_id": plan.id,
                    "description": plan.description,
                    "installment_amount": plan.installment_amount,
                    "total_installments": plan.total_installments,
                    "paid_count": paid,
                    "pending_count": pending,
                    "remaining": round2(pending * plan.installment_amount),
                }
            )
        return DispatchResult(status="ok", data={"plans": plans})

    def _pay_installment(self, intent: CommandIntent, user: User, wallet: WalletService) -> DispatchResult:
        outcome = wallet.pay_installment(user, intent.description)
        plan = outcome.plan
        if outcome.payment is None:
            return DispatchResult(status="ok", detail="already_paid", data={"plan_id": plan.id})

        logger.info(
            "Installment paid",
            extra={"user_id": user.external_id, "plan_id": plan.id, "number": outcome.payment.number},
        )
        return DispatchResult(
            status="ok",
            data={
                "plan_id": plan.id,
                "number": outcome.payment.number,
                "total_installments": plan.total_installments,
                "amount": outcome.payment.amount,
                "balance": wallet_snapshot(user),
            },
        )

    def _pending(self, user: User, wallet: WalletService, due_only: bool) -> DispatchResult:
        payments = [
            {
                "plan_id": p.plan_id,
                "description": p.plan.description,
                "number": p.number,
                "total_installments": p.plan.total_installments,
                "amount": p.amount,
                "due_date": p.due_date.isoformat(),
            }
            for p in wallet.pending_payments(user, due_only=due_only)
        ]
        return DispatchResult(status="ok", data={"payments": payments})

    def _guarded(self, user: User, wallet: WalletService, action_type: str, confirm: bool) -> DispatchResult:
        outcome = self.gate.check_guarded_action(user.external_id, action_type, confirm=confirm)
        guarded_action_counter.labels(action_type=action_type, outcome=outcome.value).inc()

        if outcome == GuardOutcome.PENDING:
            data = {"action_type": action_type, "expires_in_seconds": self.gate.ttl_seconds}
            if action_type == EVERYTHING:
                data["confirm_phrase"] = CONFIRM_EVERYTHING_PHRASE
            return DispatchResult(status="confirmation_required", data=data)

        if outcome == GuardOutcome.REJECTED:
            raise ConfirmationFailedError("No pending operation to confirm")

        wallet.reset(user, action_type)
        logger.warning("Wallet reset", extra={"user_id": user.external_id, "action_type": action_type})
        return DispatchResult(status="ok", data={"reset": action_type, "at": self.now().isoformat()})
