"""POST /v1/confirmations/check - Guarded action gate"""

import logging

from fastapi import APIRouter, Depends, Request

from carteira_gateway.api.dependencies import get_confirmation_gate, get_request_id
from carteira_gateway.api.v1.schemas import GuardCheckRequest, GuardCheckResponse
from carteira_gateway.domain.confirmation import ConfirmationGate
from carteira_gateway.infrastructure.observability.metrics import guarded_action_counter

router = APIRouter()


@router.post("/confirmations/check", response_model=GuardCheckResponse)
def check_guarded_action(
    request_body: GuardCheckRequest,
    request: Request,
    gate: ConfirmationGate = Depends(get_confirmation_gate),
):
    """
    Ask whether a destructive action may run now.

    Flow:
    1. First request for an action -> pending
    2. Same request again within the TTL -> executed
    3. Confirmation with nothing pending (or after expiry) -> rejected
    """
    outcome = gate.check_guarded_action(
        request_body.user_id,
        request_body.action_type,
        confirm=request_body.confirm,
    )
    guarded_action_counter.labels(action_type=request_body.action_type, outcome=outcome.value).inc()
    logging.info(
        "Guarded action checked",
        extra={
            "request_id": get_request_id(request),
            "user_id": request_body.user_id,
            "action_type": request_body.action_type,
            "outcome": outcome.value,
        },
    )
    return GuardCheckResponse(status=outcome.value)
