"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import List, Literal, Optional

Frequency = Literal["weekly", "biweekly", "monthly", "yearly"]


class CreditCreateRequest(BaseModel):
    """Request body for POST /v1/credits"""

    name: str = Field(..., min_length=1, description="Credit name")
    total_cents: int = Field(..., gt=0, description="Original principal in cents")
    interest_rate: float = Field(0.0, ge=0, description="Annual interest rate (informational)")
    monthly_payment_cents: int = Field(..., gt=0, description="Nominal installment in cents")
    start_date: date
    end_date: date
    next_payment_date: Optional[date] = None
    frequency: Frequency = "monthly"
    notes: str = ""
    remaining_cents: Optional[int] = Field(None, gt=0, description="Opening balance override")


class CreditUpdateRequest(BaseModel):
    """Request body for PUT /v1/credits/{credit_id}; omitted fields are left unchanged"""

    name: Optional[str] = None
    total_cents: Optional[int] = None
    remaining_cents: Optional[int] = None
    interest_rate: Optional[float] = None
    monthly_payment_cents: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    next_payment_date: Optional[date] = None
    frequency: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None


class CreditSchema(BaseModel):
    """Credit as returned by the API"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    total_cents: int
    remaining_cents: int
    interest_rate: float
    monthly_payment_cents: int
    start_date: date
    end_date: date
    next_payment_date: date
    frequency: str
    status: str
    notes: str
    created_at: Optional[datetime] = None


class CreditSnapshotSchema(BaseModel):
    """Credit fields touched by a settlement"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    remaining_cents: int
    next_payment_date: date
    status: str


class PaymentSchema(BaseModel):
    """Single scheduled or settled installment"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    credit_id: str
    amount_cents: int
    date: date
    status: str
    notes: str
    created_at: Optional[datetime] = None


class PaymentCreateRequest(BaseModel):
    """Request body for POST /v1/credit-payments"""

    credit_id: str = Field(..., min_length=1)
    amount_cents: int = Field(..., gt=0)
    date: date
    notes: str = ""


class SettleRequest(BaseModel):
    """Request body for POST /v1/credit-payments/pay"""

    payment_id: str = Field(..., min_length=1, description="Scheduled payment to settle")
    credit_id: Optional[str] = Field(None, description="Expected owning credit")
    amount_cents: int = Field(..., gt=0)
    date: date
    account_id: str = Field(..., min_length=1)
    category_id: str = Field(..., min_length=1)
    method: str = Field(..., min_length=1, description="cash | card | transfer | other")
    currency: Optional[str] = None
    notes: str = ""
    tags: List[str] = Field(default_factory=list)


class SettleResponse(BaseModel):
    """Response for POST /v1/credit-payments/pay"""

    payment: PaymentSchema
    transaction_id: str
    credit: CreditSnapshotSchema
    next_payment: Optional[PaymentSchema] = None


class PaymentUpdateRequest(BaseModel):
    """Request body for PUT /v1/credit-payments/{payment_id}"""

    status: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[date] = None


class PaymentUpdateResponse(PaymentSchema):
    """Updated payment plus credit snapshot when the credit changed"""

    credit: Optional[CreditSnapshotSchema] = None


class TransactionCreateRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    date: date
    type: Literal["income", "expense"]
    amount_cents: int = Field(..., gt=0)
    currency: Optional[str] = None
    category_id: str = Field(..., min_length=1)
    account_id: str = Field(..., min_length=1)
    description: str = ""
    method: str = Field(..., min_length=1)
    status: Literal["confirmed", "pending"] = "confirmed"
    tags: List[str] = Field(default_factory=list)
    notes: str = ""


class TransactionSchema(BaseModel):
    """Ledger entry as returned by the API"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    date: date
    type: str
    amount_cents: int
    currency: str
    category_id: str
    account_id: str
    description: str
    method: str
    status: str
    tags: List[str]
    notes: str
    source_payment_id: Optional[str] = None
    created_at: Optional[datetime] = None


class AccountCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    type: Literal["cash", "bank", "card"]
    initial_balance_cents: int = 0
    notes: str = ""


class AccountSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    initial_balance_cents: int
    notes: str


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    type: Literal["income", "expense", "both"]
    icon: Optional[str] = None
    color: Optional[str] = None


class CategorySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    icon: Optional[str] = None
    color: Optional[str] = None


class DeleteResponse(BaseModel):
    ok: bool = True
