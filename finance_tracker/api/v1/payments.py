"""/v1/credit-payments - installment schedule and settlement endpoints"""

from dataclasses import asdict
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from finance_tracker.api.v1.schemas import (
    DeleteResponse,
    PaymentCreateRequest,
    PaymentSchema,
    PaymentUpdateRequest,
    PaymentUpdateResponse,
    SettleRequest,
    SettleResponse,
)
from finance_tracker.api.dependencies import get_payment_service
from finance_tracker.services.payments import PaymentService

router = APIRouter()


@router.get("/credit-payments", response_model=List[PaymentSchema])
def list_payments(
    credit_id: Optional[str] = Query(None, description="Restrict to one credit"),
    service: PaymentService = Depends(get_payment_service),
):
    """List installments; pending ones past their due date read as overdue"""
    return service.list_payments(credit_id or None)


@router.post("/credit-payments", response_model=PaymentSchema, status_code=201)
def schedule_payment(request_body: PaymentCreateRequest, service: PaymentService = Depends(get_payment_service)):
    """Schedule an extra pending installment"""
    return service.schedule_payment(
        credit_id=request_body.credit_id,
        amount_cents=request_body.amount_cents,
        due_date=request_body.date,
        notes=request_body.notes,
    )


@router.post("/credit-payments/pay", response_model=SettleResponse)
def settle_payment(request_body: SettleRequest, service: PaymentService = Depends(get_payment_service)):
    """
    Settle a scheduled installment.

    Flow:
    1. Mark the payment paid (fails with 409 if it already was)
    2. Record the expense in the ledger
    3. Decrement the credit balance and roll its next due date
    4. Schedule the next installment unless the credit is paid off
    """
    return service.settle_payment(
        payment_id=request_body.payment_id,
        amount_cents=request_body.amount_cents,
        paid_on=request_body.date,
        account_id=request_body.account_id,
        category_id=request_body.category_id,
        method=request_body.method,
        notes=request_body.notes,
        currency=request_body.currency,
        tags=request_body.tags,
        expected_credit_id=request_body.credit_id,
    )


@router.put("/credit-payments/{payment_id}", response_model=PaymentUpdateResponse)
def update_payment(
    payment_id: str,
    request_body: PaymentUpdateRequest,
    service: PaymentService = Depends(get_payment_service),
):
    """Edit status, notes or date of an unsettled installment"""
    result = service.update_payment_metadata(
        payment_id,
        status=request_body.status,
        notes=request_body.notes,
        due_date=request_body.date,
    )
    return {
        **asdict(result.payment),
        "credit": asdict(result.credit) if result.credit else None,
    }


@router.delete("/credit-payments/{payment_id}", response_model=DeleteResponse)
def delete_payment(payment_id: str, service: PaymentService = Depends(get_payment_service)):
    """Delete an unsettled installment"""
    service.delete_payment(payment_id)
    return DeleteResponse()
