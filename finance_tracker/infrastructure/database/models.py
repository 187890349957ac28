"""SQLAlchemy ORM models for credits, payments, ledger and registries"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, BigInteger, Float, DateTime, Date, ForeignKey, Text, JSON
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountRecord(Base):
    """Account registry row"""

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    initial_balance_cents = Column(BigInteger, nullable=False, default=0)
    notes = Column(Text, nullable=False, default="")


class CategoryRecord(Base):
    """Category registry row"""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    icon = Column(Text, nullable=True)
    color = Column(Text, nullable=True)


class CreditRecord(Base):
    """Installment credit with outstanding balance"""

    __tablename__ = "credits"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(Text, nullable=False)
    total_cents = Column(BigInteger, nullable=False)
    remaining_cents = Column(BigInteger, nullable=False)
    interest_rate = Column(Float, nullable=False, default=0.0)
    monthly_payment_cents = Column(BigInteger, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    next_payment_date = Column(Date, nullable=False)
    frequency = Column(Text, nullable=False, default="monthly")
    status = Column(Text, nullable=False, default="active")
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    # Delete guard ensures only pending/overdue rows are ever cascaded
    payments = relationship("CreditPaymentRecord", back_populates="credit", cascade="all, delete-orphan")


class CreditPaymentRecord(Base):
    """Scheduled or settled credit installment"""

    __tablename__ = "credit_payments"

    id = Column(String(36), primary_key=True, default=_new_id)
    credit_id = Column(String(36), ForeignKey("credits.id", ondelete="CASCADE"), nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    credit = relationship("CreditRecord", back_populates="payments")


class TransactionRecord(Base):
    """Ledger entry (income or expense)"""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_new_id)
    type = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    date = Column(Date, nullable=False, index=True)
    currency = Column(Text, nullable=False, default="MXN")
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False)
    description = Column(Text, nullable=False, default="")
    method = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="confirmed")
    tags = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=False, default="")
    source_payment_id = Column(
        String(36), ForeignKey("credit_payments.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
