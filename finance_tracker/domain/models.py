"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

FREQUENCIES = frozenset({"weekly", "biweekly", "monthly", "yearly"})
CREDIT_STATUSES = frozenset({"active", "paid", "overdue"})
PAYMENT_STATUSES = frozenset({"pending", "paid", "overdue"})
# Stored states the engine treats as awaiting settlement
OPEN_PAYMENT_STATUSES = ("pending", "overdue")
PAYMENT_METHODS = frozenset({"cash", "card", "transfer", "other"})

# Labels sent by the Spanish-language dashboard
METHOD_ALIASES = {
    "efectivo": "cash",
    "tarjeta": "card",
    "transferencia": "transfer",
    "otro": "other",
}


@dataclass
class Credit:
    """Installment obligation with an outstanding balance"""

    id: str
    name: str
    total_cents: int
    remaining_cents: int
    interest_rate: float  # annual percentage, informational only
    monthly_payment_cents: int
    start_date: date
    end_date: date
    next_payment_date: date
    frequency: str  # weekly | biweekly | monthly | yearly
    status: str  # active | paid | overdue
    notes: str = ""
    created_at: Optional[datetime] = None

    @property
    def is_paid(self) -> bool:
        return self.status == "paid"


@dataclass
class CreditPayment:
    """Scheduled or settled installment of a credit"""

    id: str
    credit_id: str
    amount_cents: int
    date: date  # due date, or settlement date once paid
    status: str  # pending | paid | overdue
    notes: str = ""
    created_at: Optional[datetime] = None


@dataclass
class LedgerEntry:
    """Financial movement recorded in the ledger"""

    id: str
    date: date
    type: str  # income | expense
    amount_cents: int
    currency: str
    category_id: str
    account_id: str
    description: str
    method: str
    status: str
    tags: List[str] = field(default_factory=list)
    notes: str = ""
    source_payment_id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Account:
    """Money container a transaction is drawn from"""

    id: str
    name: str
    type: str  # cash | bank | card
    initial_balance_cents: int = 0
    notes: str = ""


@dataclass
class Category:
    """Classification label for transactions"""

    id: str
    name: str
    type: str  # income | expense | both
    icon: Optional[str] = None
    color: Optional[str] = None


@dataclass
class CreditSnapshot:
    """Credit fields touched by a settlement"""

    id: str
    remaining_cents: int
    next_payment_date: date
    status: str


@dataclass
class SettlementResult:
    """Output of a successful payment settlement"""

    payment: CreditPayment
    transaction_id: str
    credit: CreditSnapshot
    next_payment: Optional[CreditPayment] = None


@dataclass
class MetadataUpdateResult:
    """Output of a payment metadata update"""

    payment: CreditPayment
    credit: Optional[CreditSnapshot] = None
