"""/v1/transactions - ledger listing and manual entries"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from finance_tracker.api.v1.schemas import TransactionCreateRequest, TransactionSchema
from finance_tracker.config import settings
from finance_tracker.domain.credits import normalize_method
from finance_tracker.domain.exceptions import ValidationError
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.infrastructure.database.repositories import (
    AccountRepository,
    CategoryRepository,
    TransactionRepository,
    to_ledger_entry,
)

router = APIRouter()


@router.get("/transactions", response_model=List[TransactionSchema])
def list_transactions(
    type: Optional[str] = Query(None, description="income | expense"),
    account_id: Optional[str] = Query(None),
    category_id: Optional[str] = Query(None),
    source_payment_id: Optional[str] = Query(None, description="Entries generated by a credit payment"),
    db: Session = Depends(get_db),
):
    """Ledger entries, newest first"""
    tx_repo = TransactionRepository(db)
    rows = tx_repo.list_transactions(
        type=type,
        account_id=account_id,
        category_id=category_id,
        source_payment_id=source_payment_id,
    )
    return [to_ledger_entry(r) for r in rows]


@router.post("/transactions", response_model=TransactionSchema, status_code=201)
def create_transaction(request_body: TransactionCreateRequest, db: Session = Depends(get_db)):
    """Record a manual income or expense"""
    method = normalize_method(request_body.method)
    if not AccountRepository(db).exists(request_body.account_id):
        raise ValidationError(f"account does not exist: {request_body.account_id}", field="account_id")
    if not CategoryRepository(db).exists(request_body.category_id):
        raise ValidationError(f"category does not exist: {request_body.category_id}", field="category_id")

    try:
        db_tx = TransactionRepository(db).append_transaction(
            type=request_body.type,
            amount_cents=request_body.amount_cents,
            on_date=request_body.date,
            currency=request_body.currency or settings.default_currency,
            category_id=request_body.category_id,
            account_id=request_body.account_id,
            description=request_body.description,
            method=method,
            status=request_body.status,
            tags=request_body.tags,
            notes=request_body.notes,
        )
        entry = to_ledger_entry(db_tx)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return entry
