"""/v1/accounts and /v1/categories - registries consulted by settlements"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from finance_tracker.api.v1.schemas import (
    AccountCreateRequest,
    AccountSchema,
    CategoryCreateRequest,
    CategorySchema,
)
from finance_tracker.domain.models import Account, Category
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.infrastructure.database.repositories import AccountRepository, CategoryRepository

router = APIRouter()


@router.get("/accounts", response_model=List[AccountSchema])
def list_accounts(db: Session = Depends(get_db)):
    return AccountRepository(db).list_accounts()


@router.post("/accounts", response_model=AccountSchema, status_code=201)
def create_account(request_body: AccountCreateRequest, db: Session = Depends(get_db)):
    account = AccountRepository(db).create_account(Account(id="", **request_body.model_dump()))
    db.commit()
    return account


@router.get("/categories", response_model=List[CategorySchema])
def list_categories(db: Session = Depends(get_db)):
    return CategoryRepository(db).list_categories()


@router.post("/categories", response_model=CategorySchema, status_code=201)
def create_category(request_body: CategoryCreateRequest, db: Session = Depends(get_db)):
    category = CategoryRepository(db).create_category(Category(id="", **request_body.model_dump()))
    db.commit()
    return category
