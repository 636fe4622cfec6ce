"""Two-step confirmation for destructive actions"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Tuple, Union

EVERYTHING = "everything"
GUARDED_ACTIONS = ("balance", "savings", "emergency", "installments", EVERYTHING)


class GuardOutcome(str, Enum):
    PENDING = "pending"
    EXECUTED = "executed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Idle:
    """No action awaiting confirmation"""


@dataclass(frozen=True)
class Pending:
    """One action awaiting its second request"""

    action_type: str
    created_at: float
    expires_at: float

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


GateState = Union[Idle, Pending]

IDLE = Idle()


@dataclass(frozen=True)
class GuardRequest:
    """
    A guarded command (confirm=False) or an explicit confirmation phrase
    (confirm=True) for action_type.
    """

    action_type: str
    confirm: bool = False


def transition(
    state: GateState,
    request: GuardRequest,
    now: float,
    ttl_seconds: float,
) -> Tuple[GateState, GuardOutcome]:
    """
    Pure state transition for a single user's confirmation slot.

    Guarded command:
    - Idle or expired: becomes Pending, outcome PENDING
    - Pending with the same type: back to Idle, outcome EXECUTED
    - Pending with another type: replaced by the new type with a fresh TTL,
      outcome PENDING; the older action is dropped

    Confirmation phrase:
    - Pending with the same type, not expired: back to Idle, outcome EXECUTED
    - anything else: outcome REJECTED, slot untouched (expired slots are dropped)
    """
    if isinstance(state, Pending) and state.expired(now):
        state = IDLE

    if isinstance(state, Pending) and state.action_type == request.action_type:
        return IDLE, GuardOutcome.EXECUTED

    if request.confirm:
        return state, GuardOutcome.REJECTED

    return Pending(request.action_type, created_at=now, expires_at=now + ttl_seconds), GuardOutcome.PENDING


class ConfirmationGate:
    """Per-user confirmation slots with lazily checked expiry"""

    def __init__(self, ttl_seconds: float = 120.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._slots: Dict[str, Pending] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)

    def state_for(self, user_id: str) -> GateState:
        with self._lock:
            self._purge(self.clock())
            return self._slots.get(user_id, IDLE)

    def check_guarded_action(self, user_id: str, action_type: str, confirm: bool = False) -> GuardOutcome:
        """Apply one request to the user's slot and report what happened"""
        with self._lock:
            now = self.clock()
            new_state, outcome = transition(
                self._slots.get(user_id, IDLE),
                GuardRequest(action_type, confirm),
                now=now,
                ttl_seconds=self.ttl_seconds,
            )

            if isinstance(new_state, Pending):
                self._slots[user_id] = new_state
            else:
                self._slots.pop(user_id, None)

            self._purge(now)
            return outcome

    def _purge(self, now: float) -> None:
        # Caller holds the lock; drops slots of users who never came back
        for user_id in [u for u, pending in self._slots.items() if pending.expired(now)]:
            del self._slots[user_id]
