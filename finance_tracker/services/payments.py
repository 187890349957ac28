"""Payment execution engine - settles credit installments atomically"""

import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from finance_tracker.config import settings
from finance_tracker.domain.credits import (
    apply_settlement,
    coerce_date,
    needs_next_installment,
    normalize_method,
    project_payment_status,
    validate_payment_status,
)
from finance_tracker.domain.exceptions import ConflictError, NotFoundError, ValidationError
from finance_tracker.domain.models import (
    Credit,
    CreditPayment,
    CreditSnapshot,
    MetadataUpdateResult,
    SettlementResult,
)
from finance_tracker.infrastructure.database.models import CreditRecord
from finance_tracker.infrastructure.database.repositories import (
    AccountRepository,
    CategoryRepository,
    CreditRepository,
    PaymentRepository,
    TransactionRepository,
    to_credit,
    to_payment,
)
from finance_tracker.infrastructure.observability.logging import log_rejection, log_settlement
from finance_tracker.infrastructure.observability.metrics import record_settlement

DESCRIPTION_PREFIX = "Payment for: "


def _snapshot(credit: Credit) -> CreditSnapshot:
    return CreditSnapshot(
        id=credit.id,
        remaining_cents=credit.remaining_cents,
        next_payment_date=credit.next_payment_date,
        status=credit.status,
    )


class PaymentService:
    """
    Credit payment operations.

    Every mutating call is one database transaction: it either commits the
    full write set or rolls back and raises a DomainException.
    """

    def __init__(self, db: Session):
        self.db = db
        self.credits = CreditRepository(db)
        self.payments = PaymentRepository(db)
        self.ledger = TransactionRepository(db)
        self.accounts = AccountRepository(db)
        self.categories = CategoryRepository(db)

    def list_payments(self, credit_id: Optional[str] = None, today: Optional[date] = None) -> List[CreditPayment]:
        """Payments with the pending-past-due -> overdue projection applied"""
        result = []
        for record in self.payments.list_payments(credit_id):
            payment = to_payment(record)
            payment.status = project_payment_status(payment, today)
            result.append(payment)
        return result

    def schedule_payment(
        self,
        credit_id: str,
        amount_cents: int,
        due_date: date | str,
        notes: str = "",
    ) -> CreditPayment:
        """Add a pending installment to a credit that is still open"""
        if amount_cents <= 0:
            raise ValidationError("amount must be greater than zero", field="amount_cents")
        due = coerce_date(due_date, "date")

        try:
            db_credit = self.credits.get_credit(credit_id)
            if db_credit is None:
                raise NotFoundError("Credit", credit_id)
            if db_credit.status == "paid":
                raise ConflictError(f"credit {credit_id} is already paid")

            db_payment = self.payments.create_payment(
                credit_id=credit_id, amount_cents=amount_cents, due_date=due, notes=notes or ""
            )
            payment = to_payment(db_payment)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return payment

    def settle_payment(
        self,
        payment_id: str,
        amount_cents: int,
        paid_on: date | str,
        account_id: str,
        category_id: str,
        method: str,
        notes: str = "",
        currency: Optional[str] = None,
        tags: Optional[List[str]] = None,
        expected_credit_id: Optional[str] = None,
    ) -> SettlementResult:
        """
        Settle a scheduled installment.

        Flow (single transaction):
        1. Check the payment exists, is not paid, and belongs to expected_credit_id
        2. Validate amount, date, method, account and category
        3. Claim the payment with a conditional update (status != paid)
        4. Append the expense to the ledger
        5. Apply balance decrement, rollover and payoff to the locked credit
        6. Provision the next pending installment if the credit is still open

        Raises:
            NotFoundError: Payment does not exist
            ConflictError: Payment already paid or belongs to another credit
            ValidationError: Bad amount/date/method or unknown account/category
        """
        try:
            result = self._settle(
                payment_id=payment_id,
                amount_cents=amount_cents,
                paid_on=paid_on,
                account_id=account_id,
                category_id=category_id,
                method=method,
                notes=notes or "",
                currency=currency or settings.default_currency,
                tags=tags or [],
                expected_credit_id=expected_credit_id,
            )
            self.db.commit()
        except NotFoundError:
            self.db.rollback()
            record_settlement("not_found")
            raise
        except ConflictError as e:
            self.db.rollback()
            record_settlement("conflict")
            log_rejection("settlement", e.message, payment_id=payment_id)
            raise
        except ValidationError as e:
            self.db.rollback()
            record_settlement("invalid")
            log_rejection("settlement", e.message, payment_id=payment_id)
            raise
        except Exception:
            self.db.rollback()
            raise

        record_settlement("settled", amount_cents, paid_off=result.credit.status == "paid")
        log_settlement(
            payment_id=result.payment.id,
            credit_id=result.credit.id,
            transaction_id=result.transaction_id,
            amount_cents=result.payment.amount_cents,
            remaining_cents=result.credit.remaining_cents,
            credit_status=result.credit.status,
        )
        return result

    def _settle(
        self,
        payment_id: str,
        amount_cents: int,
        paid_on: date | str,
        account_id: str,
        category_id: str,
        method: str,
        notes: str,
        currency: str,
        tags: List[str],
        expected_credit_id: Optional[str],
    ) -> SettlementResult:
        db_payment = self.payments.get_payment(payment_id)
        if db_payment is None:
            raise NotFoundError("CreditPayment", payment_id)
        if db_payment.status == "paid":
            raise ConflictError(f"payment {payment_id} is already settled")
        if expected_credit_id and db_payment.credit_id != expected_credit_id:
            raise ConflictError(
                f"payment {payment_id} belongs to credit {db_payment.credit_id}, not {expected_credit_id}"
            )

        if amount_cents <= 0:
            raise ValidationError("amount must be greater than zero", field="amount_cents")
        settled_on = coerce_date(paid_on, "date")
        method = normalize_method(method)
        if not account_id or not self.accounts.exists(account_id):
            raise ValidationError(f"account does not exist: {account_id}", field="account_id")
        if not category_id or not self.categories.exists(category_id):
            raise ValidationError(f"category does not exist: {category_id}", field="category_id")

        if not self.payments.mark_paid(payment_id, db_payment.credit_id, amount_cents, settled_on, notes):
            # Lost the race against a concurrent settlement
            raise ConflictError(f"payment {payment_id} is already settled")

        # Read the balance only once the claim holds the write lock
        db_credit = self._lock_credit(db_payment.credit_id)

        db_tx = self.ledger.append_transaction(
            type="expense",
            amount_cents=amount_cents,
            on_date=settled_on,
            currency=currency,
            category_id=category_id,
            account_id=account_id,
            description=DESCRIPTION_PREFIX + db_credit.name,
            method=method,
            status="confirmed",
            tags=tags,
            notes=notes,
            source_payment_id=payment_id,
        )

        credit, next_payment = self._advance_credit(db_credit, amount_cents)
        return SettlementResult(
            payment=to_payment(self.payments.get_payment(payment_id)),
            transaction_id=db_tx.id,
            credit=_snapshot(credit),
            next_payment=next_payment,
        )

    def _lock_credit(self, credit_id: str) -> CreditRecord:
        db_credit = self.credits.get_credit(credit_id, for_update=True)
        if db_credit is None:
            raise NotFoundError("Credit", credit_id)
        return db_credit

    def _advance_credit(self, db_credit: CreditRecord, amount_cents: int) -> tuple[Credit, Optional[CreditPayment]]:
        """Apply a settled amount to a locked credit and schedule its successor"""
        credit = apply_settlement(to_credit(db_credit), amount_cents)
        self.credits.apply_state(db_credit, credit)

        next_payment = None
        if needs_next_installment(credit) and not self.payments.pending_exists(credit.id, credit.next_payment_date):
            next_payment = to_payment(
                self.payments.create_payment(
                    credit_id=credit.id,
                    amount_cents=credit.monthly_payment_cents,
                    due_date=credit.next_payment_date,
                )
            )
        return credit, next_payment

    def update_payment_metadata(
        self,
        payment_id: str,
        status: Optional[str] = None,
        notes: Optional[str] = None,
        due_date: Optional[date | str] = None,
    ) -> MetadataUpdateResult:
        """
        Edit status, notes or date of an unsettled payment.

        A transition into paid applies the credit-side effects of a
        settlement using the stored amount, but writes no ledger entry.
        """
        if status is not None:
            validate_payment_status(status)
        new_date = coerce_date(due_date, "date") if due_date is not None else None

        try:
            db_payment = self.payments.get_payment(payment_id)
            if db_payment is None:
                raise NotFoundError("CreditPayment", payment_id)
            if db_payment.status == "paid":
                if status is not None and status != "paid":
                    raise ConflictError(f"payment {payment_id} is paid; reversal not supported")
                raise ConflictError(f"payment {payment_id} is paid and cannot be modified")

            snapshot = None
            if status == "paid":
                amount_cents = db_payment.amount_cents
                claimed = self.payments.mark_paid(
                    payment_id,
                    db_payment.credit_id,
                    amount_cents,
                    new_date or db_payment.date,
                    notes if notes is not None else db_payment.notes,
                )
                if not claimed:
                    raise ConflictError(f"payment {payment_id} is already settled")
                credit, _ = self._advance_credit(self._lock_credit(db_payment.credit_id), amount_cents)
                snapshot = _snapshot(credit)
                logging.warning(
                    "Payment marked paid without ledger entry",
                    extra={"payment_id": payment_id, "credit_id": credit.id, "step": "metadata_paid"},
                )
            else:
                if status is not None:
                    db_payment.status = status
                if notes is not None:
                    db_payment.notes = notes
                if new_date is not None:
                    db_payment.date = new_date
                self.db.flush()

            payment = to_payment(self.payments.get_payment(payment_id))
            self.db.commit()
        except ConflictError as e:
            self.db.rollback()
            log_rejection("payment_update", e.message, payment_id=payment_id)
            raise
        except Exception:
            self.db.rollback()
            raise

        return MetadataUpdateResult(payment=payment, credit=snapshot)

    def delete_payment(self, payment_id: str) -> None:
        """Remove an unsettled payment"""
        try:
            db_payment = self.payments.get_payment(payment_id)
            if db_payment is None:
                raise NotFoundError("CreditPayment", payment_id)
            if db_payment.status == "paid":
                raise ConflictError(f"payment {payment_id} is paid and cannot be deleted")
            self.payments.delete_payment(db_payment)
            self.db.commit()
        except ConflictError as e:
            self.db.rollback()
            log_rejection("payment_delete", e.message, payment_id=payment_id)
            raise
        except Exception:
            self.db.rollback()
            raise
