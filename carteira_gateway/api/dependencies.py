"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache

from fastapi import Depends, Request

from carteira_gateway.domain.confirmation import ConfirmationGate
from carteira_gateway.services.dispatcher import MessageDispatcher


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


@lru_cache(maxsize=1)
def get_dispatcher() -> MessageDispatcher:
    """Process-wide dispatcher; it owns the per-user session state"""
    return MessageDispatcher()


def get_confirmation_gate(dispatcher: MessageDispatcher = Depends(get_dispatcher)) -> ConfirmationGate:
    """Gate shared with the dispatcher"""
    return dispatcher.gate
