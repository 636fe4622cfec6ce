"""Installment schedule preview and plan listing endpoints"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from carteira_gateway.api.v1.schemas import (
    InstallmentPaymentSchema,
    InstallmentPlanSchema,
    InstallmentPlansResponse,
    ScheduleRequest,
    ScheduleResponse,
)
from carteira_gateway.domain.installments import build_installment_schedule
from carteira_gateway.infrastructure.database.repositories import (
    InstallmentRepository,
    UserRepository,
    to_domain_payments,
)
from carteira_gateway.infrastructure.database.session import get_db

router = APIRouter()


@router.post("/installments/schedule", response_model=ScheduleResponse)
def preview_schedule(request_body: ScheduleRequest):
    """
    Compute a monthly schedule without storing it.

    Returns:
        Payments 1..N, one calendar month apart from the anchor date
    """
    payments = build_installment_schedule(
        request_body.total_installments,
        request_body.installment_amount,
        request_body.anchor_date,
    )
    return ScheduleResponse(
        total_installments=len(payments),
        payments=[
            InstallmentPaymentSchema(number=p.number, amount=p.amount, due_date=p.due_date, status=p.status.value)
            for p in payments
        ],
    )


@router.get("/installments", response_model=InstallmentPlansResponse)
def list_plans(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """Stored installment plans for a user, newest first"""
    user = UserRepository(db).get_by_external_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    plans = [
        InstallmentPlanSchema(
            plan_id=plan.id,
            description=plan.description,
            total_amount=plan.total_amount,
            installment_amount=plan.installment_amount,
            total_installments=plan.total_installments,
            payments=[
                InstallmentPaymentSchema(number=p.number, amount=p.amount, due_date=p.due_date, status=p.status.value)
                for p in to_domain_payments(plan)
            ],
        )
        for plan in InstallmentRepository(db).list_plans(user.id)
    ]

    return InstallmentPlansResponse(user_id=user_id, plans=plans)
