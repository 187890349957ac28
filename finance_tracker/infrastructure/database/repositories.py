"""Data access layer for credits, payments, ledger and registries"""

from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session
from finance_tracker.infrastructure.database.models import (
    AccountRecord,
    CategoryRecord,
    CreditRecord,
    CreditPaymentRecord,
    TransactionRecord,
)
from finance_tracker.domain.models import (
    OPEN_PAYMENT_STATUSES,
    Account,
    Category,
    Credit,
    CreditPayment,
    LedgerEntry,
)


def to_credit(record: CreditRecord) -> Credit:
    return Credit(
        id=record.id,
        name=record.name,
        total_cents=record.total_cents,
        remaining_cents=record.remaining_cents,
        interest_rate=record.interest_rate,
        monthly_payment_cents=record.monthly_payment_cents,
        start_date=record.start_date,
        end_date=record.end_date,
        next_payment_date=record.next_payment_date,
        frequency=record.frequency,
        status=record.status,
        notes=record.notes or "",
        created_at=record.created_at,
    )


def to_payment(record: CreditPaymentRecord) -> CreditPayment:
    return CreditPayment(
        id=record.id,
        credit_id=record.credit_id,
        amount_cents=record.amount_cents,
        date=record.date,
        status=record.status,
        notes=record.notes or "",
        created_at=record.created_at,
    )


def to_ledger_entry(record: TransactionRecord) -> LedgerEntry:
    return LedgerEntry(
        id=record.id,
        date=record.date,
        type=record.type,
        amount_cents=record.amount_cents,
        currency=record.currency,
        category_id=record.category_id,
        account_id=record.account_id,
        description=record.description or "",
        method=record.method,
        status=record.status,
        tags=list(record.tags or []),
        notes=record.notes or "",
        source_payment_id=record.source_payment_id,
        created_at=record.created_at,
    )


class CreditRepository:
    """Repository for credits"""

    def __init__(self, db: Session):
        self.db = db

    def create_credit(self, credit: Credit) -> CreditRecord:
        """Persist a new credit (id assigned on flush)"""
        db_credit = CreditRecord(
            name=credit.name,
            total_cents=credit.total_cents,
            remaining_cents=credit.remaining_cents,
            interest_rate=credit.interest_rate,
            monthly_payment_cents=credit.monthly_payment_cents,
            start_date=credit.start_date,
            end_date=credit.end_date,
            next_payment_date=credit.next_payment_date,
            frequency=credit.frequency,
            status=credit.status,
            notes=credit.notes,
        )
        self.db.add(db_credit)
        self.db.flush()  # Get ID without committing
        return db_credit

    def get_credit(self, credit_id: str, for_update: bool = False) -> Optional[CreditRecord]:
        """
        Fetch a credit, optionally locking its row until the transaction ends.

        A locked read always reflects the committed row, never a cached copy.
        """
        query = self.db.query(CreditRecord).filter(CreditRecord.id == credit_id)
        if for_update:
            # Reload over any copy already in the identity map
            query = query.with_for_update().populate_existing()
        return query.first()

    def list_credits(self) -> List[CreditRecord]:
        """All credits, newest first"""
        return self.db.query(CreditRecord).order_by(CreditRecord.created_at.desc()).all()

    def apply_state(self, db_credit: CreditRecord, credit: Credit) -> CreditRecord:
        """Write a full next-state Credit onto its row"""
        db_credit.name = credit.name
        db_credit.total_cents = credit.total_cents
        db_credit.remaining_cents = credit.remaining_cents
        db_credit.interest_rate = credit.interest_rate
        db_credit.monthly_payment_cents = credit.monthly_payment_cents
        db_credit.start_date = credit.start_date
        db_credit.end_date = credit.end_date
        db_credit.next_payment_date = credit.next_payment_date
        db_credit.frequency = credit.frequency
        db_credit.status = credit.status
        db_credit.notes = credit.notes
        self.db.flush()
        return db_credit

    def delete_credit(self, db_credit: CreditRecord) -> None:
        """Delete a credit; the ORM cascade removes its payments"""
        self.db.delete(db_credit)
        self.db.flush()


class PaymentRepository:
    """Repository for credit payments"""

    def __init__(self, db: Session):
        self.db = db

    def create_payment(
        self,
        credit_id: str,
        amount_cents: int,
        due_date: date,
        status: str = "pending",
        notes: str = "",
    ) -> CreditPaymentRecord:
        db_payment = CreditPaymentRecord(
            credit_id=credit_id,
            amount_cents=amount_cents,
            date=due_date,
            status=status,
            notes=notes,
        )
        self.db.add(db_payment)
        self.db.flush()
        return db_payment

    def get_payment(self, payment_id: str) -> Optional[CreditPaymentRecord]:
        return self.db.query(CreditPaymentRecord).filter(CreditPaymentRecord.id == payment_id).first()

    def list_payments(self, credit_id: Optional[str] = None) -> List[CreditPaymentRecord]:
        """Payments ordered by date then creation time, newest first"""
        query = self.db.query(CreditPaymentRecord)
        if credit_id:
            query = query.filter(CreditPaymentRecord.credit_id == credit_id)
        return query.order_by(CreditPaymentRecord.date.desc(), CreditPaymentRecord.created_at.desc()).all()

    def count_paid(self, credit_id: str) -> int:
        return (
            self.db.query(CreditPaymentRecord)
            .filter(CreditPaymentRecord.credit_id == credit_id, CreditPaymentRecord.status == "paid")
            .count()
        )

    def pending_exists(self, credit_id: str, due_date: date) -> bool:
        """True if an unsettled installment is already scheduled for that date"""
        return (
            self.db.query(CreditPaymentRecord.id)
            .filter(
                CreditPaymentRecord.credit_id == credit_id,
                CreditPaymentRecord.status.in_(OPEN_PAYMENT_STATUSES),
                CreditPaymentRecord.date == due_date,
            )
            .first()
            is not None
        )

    def mark_paid(
        self,
        payment_id: str,
        credit_id: str,
        amount_cents: int,
        paid_on: date,
        notes: str,
    ) -> bool:
        """
        Conditionally flip a payment to paid.

        Single UPDATE guarded by `status != 'paid'`, so two concurrent
        settlements of the same payment cannot both succeed.

        Returns:
            True if this call claimed the payment
        """
        rowcount = (
            self.db.query(CreditPaymentRecord)
            .filter(
                CreditPaymentRecord.id == payment_id,
                CreditPaymentRecord.credit_id == credit_id,
                CreditPaymentRecord.status != "paid",
            )
            .update(
                {
                    CreditPaymentRecord.status: "paid",
                    CreditPaymentRecord.amount_cents: amount_cents,
                    CreditPaymentRecord.date: paid_on,
                    CreditPaymentRecord.notes: notes,
                },
                synchronize_session="fetch",
            )
        )
        return rowcount == 1

    def delete_payment(self, db_payment: CreditPaymentRecord) -> None:
        self.db.delete(db_payment)
        self.db.flush()


class TransactionRepository:
    """Append-only ledger access"""

    def __init__(self, db: Session):
        self.db = db

    def append_transaction(
        self,
        type: str,
        amount_cents: int,
        on_date: date,
        currency: str,
        category_id: str,
        account_id: str,
        description: str,
        method: str,
        status: str = "confirmed",
        tags: Optional[List[str]] = None,
        notes: str = "",
        source_payment_id: Optional[str] = None,
    ) -> TransactionRecord:
        """Insert a ledger row (never updated afterwards by credit operations)"""
        db_tx = TransactionRecord(
            type=type,
            amount_cents=amount_cents,
            date=on_date,
            currency=currency,
            category_id=category_id,
            account_id=account_id,
            description=description,
            method=method,
            status=status,
            tags=list(tags or []),
            notes=notes,
            source_payment_id=source_payment_id,
        )
        self.db.add(db_tx)
        self.db.flush()
        return db_tx

    def list_transactions(
        self,
        type: Optional[str] = None,
        account_id: Optional[str] = None,
        category_id: Optional[str] = None,
        source_payment_id: Optional[str] = None,
    ) -> List[TransactionRecord]:
        """Ledger rows, newest first"""
        query = self.db.query(TransactionRecord)
        if type:
            query = query.filter(TransactionRecord.type == type)
        if account_id:
            query = query.filter(TransactionRecord.account_id == account_id)
        if category_id:
            query = query.filter(TransactionRecord.category_id == category_id)
        if source_payment_id:
            query = query.filter(TransactionRecord.source_payment_id == source_payment_id)
        return query.order_by(TransactionRecord.date.desc(), TransactionRecord.created_at.desc()).all()


class AccountRepository:
    """Account registry"""

    def __init__(self, db: Session):
        self.db = db

    def exists(self, account_id: str) -> bool:
        return self.db.query(AccountRecord.id).filter(AccountRecord.id == account_id).first() is not None

    def create_account(self, account: Account) -> Account:
        db_account = AccountRecord(
            name=account.name,
            type=account.type,
            initial_balance_cents=account.initial_balance_cents,
            notes=account.notes,
        )
        self.db.add(db_account)
        self.db.flush()
        account.id = db_account.id
        return account

    def list_accounts(self) -> List[Account]:
        return [
            Account(
                id=a.id,
                name=a.name,
                type=a.type,
                initial_balance_cents=a.initial_balance_cents,
                notes=a.notes or "",
            )
            for a in self.db.query(AccountRecord).order_by(AccountRecord.name.asc()).all()
        ]


class CategoryRepository:
    """Category registry"""

    def __init__(self, db: Session):
        self.db = db

    def exists(self, category_id: str) -> bool:
        return self.db.query(CategoryRecord.id).filter(CategoryRecord.id == category_id).first() is not None

    def create_category(self, category: Category) -> Category:
        db_category = CategoryRecord(
            name=category.name,
            type=category.type,
            icon=category.icon,
            color=category.color,
        )
        self.db.add(db_category)
        self.db.flush()
        category.id = db_category.id
        return category

    def list_categories(self) -> List[Category]:
        return [
            Category(id=c.id, name=c.name, type=c.type, icon=c.icon, color=c.color)
            for c in self.db.query(CategoryRecord).order_by(CategoryRecord.name.asc()).all()
        ]
