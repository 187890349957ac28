"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.services.credits import CreditService
from finance_tracker.services.payments import PaymentService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_credit_service(db: Session = Depends(get_db)) -> CreditService:
    """Provide credit service bound to the request's session"""
    return CreditService(db)


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    """Provide payment engine bound to the request's session"""
    return PaymentService(db)
