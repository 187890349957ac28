"""/v1/credits - credit CRUD endpoints"""

from typing import List
from fastapi import APIRouter, Depends

from finance_tracker.api.v1.schemas import (
    CreditCreateRequest,
    CreditSchema,
    CreditUpdateRequest,
    DeleteResponse,
)
from finance_tracker.api.dependencies import get_credit_service
from finance_tracker.services.credits import CreditService

router = APIRouter()


@router.get("/credits", response_model=List[CreditSchema])
def list_credits(service: CreditService = Depends(get_credit_service)):
    """List credits, newest first"""
    return service.list_credits()


@router.post("/credits", response_model=CreditSchema, status_code=201)
def create_credit(request_body: CreditCreateRequest, service: CreditService = Depends(get_credit_service)):
    """
    Create a credit.

    The opening balance defaults to the total and the first pending
    installment is scheduled on next_payment_date (or start_date).
    """
    return service.create_credit(**request_body.model_dump())


@router.get("/credits/{credit_id}", response_model=CreditSchema)
def get_credit(credit_id: str, service: CreditService = Depends(get_credit_service)):
    return service.get_credit(credit_id)


@router.put("/credits/{credit_id}", response_model=CreditSchema)
def update_credit(
    credit_id: str,
    request_body: CreditUpdateRequest,
    service: CreditService = Depends(get_credit_service),
):
    """Partially update a credit; amounts, dates and frequency are frozen once paid"""
    return service.update_credit(credit_id, request_body.model_dump(exclude_unset=True))


@router.delete("/credits/{credit_id}", response_model=DeleteResponse)
def delete_credit(credit_id: str, service: CreditService = Depends(get_credit_service)):
    """Delete a credit that has no paid installments"""
    service.delete_credit(credit_id)
    return DeleteResponse()
