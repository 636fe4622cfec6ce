"""Pydantic schemas for API request/response validation"""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from carteira_gateway.domain.confirmation import GUARDED_ACTIONS


class ClassifyRequest(BaseModel):
    """Request body for POST /v1/classify"""

    text: str = Field(..., description="Raw chat message")


class IntentResponse(BaseModel):
    """Classified intent; fields not used by the kind stay null"""

    kind: str
    name: Optional[str] = None
    amount: Optional[float] = None
    description: Optional[str] = None
    total_amount: Optional[float] = None
    installments: Optional[int] = None
    installment_amount: Optional[float] = None
    raw_text: Optional[str] = None
    text: Optional[str] = None


class CategoryMatchRequest(BaseModel):
    """Request body for POST /v1/categories/match"""

    description: str = Field(..., min_length=1)


class CategoryMatchResponse(BaseModel):
    category_id: int
    name: str
    emoji: str


class ScheduleRequest(BaseModel):
    """Request body for POST /v1/installments/schedule"""

    total_installments: int = Field(..., ge=1, le=100)
    installment_amount: float = Field(..., gt=0)
    anchor_date: date


class InstallmentPaymentSchema(BaseModel):
    """Single payment in an installment schedule"""

    number: int
    amount: float
    due_date: date
    status: str = "pending"


class ScheduleResponse(BaseModel):
    total_installments: int
    payments: List[InstallmentPaymentSchema]


class InstallmentPlanSchema(BaseModel):
    plan_id: int
    description: str
    total_amount: float
    installment_amount: float
    total_installments: int
    payments: List[InstallmentPaymentSchema]


class InstallmentPlansResponse(BaseModel):
    """Response for GET /v1/installments"""

    user_id: str
    plans: List[InstallmentPlanSchema]


class GuardCheckRequest(BaseModel):
    """Request body for POST /v1/confirmations/check"""

    user_id: str = Field(..., min_length=1)
    action_type: str = Field(..., min_length=1)
    confirm: bool = False

    @field_validator("action_type")
    @classmethod
    def known_action_type(cls, value: str) -> str:
        if value not in GUARDED_ACTIONS:
            raise ValueError(f"action_type must be one of {', '.join(GUARDED_ACTIONS)}")
        return value


class GuardCheckResponse(BaseModel):
    status: str  # pending | executed | rejected


class MessageRequest(BaseModel):
    """Request body for POST /v1/messages"""

    user_id: str = Field(..., min_length=1, description="Sender identifier from the chat transport")
    message_id: str = Field(..., min_length=1)
    text: str
    display_name: Optional[str] = None
    chat_id: Optional[str] = None


class DispatchResponse(BaseModel):
    """Response for POST /v1/messages"""

    status: str
    intent: Optional[str] = None
    command: Optional[str] = None
    code: Optional[str] = None
    detail: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
