"""POST /v1/classify - Intent classification endpoint"""

from dataclasses import asdict

from fastapi import APIRouter

from carteira_gateway.api.v1.schemas import ClassifyRequest, IntentResponse
from carteira_gateway.domain.intent import classify
from carteira_gateway.infrastructure.observability.metrics import intent_counter

router = APIRouter()


@router.post("/classify", response_model=IntentResponse)
def classify_text(request_body: ClassifyRequest):
    """
    Classify one message without touching any wallet.

    Returns:
        Intent with `kind` in command | expense | installment | unknown
    """
    intent = classify(request_body.text)
    intent_counter.labels(kind=intent.kind).inc()
    return IntentResponse(**asdict(intent))
