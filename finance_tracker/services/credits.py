"""Credit lifecycle - create, edit, delete"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from finance_tracker.domain.credits import apply_credit_edit, coerce_date, validate_new_credit
from finance_tracker.domain.exceptions import ConflictError, NotFoundError
from finance_tracker.domain.models import Credit
from finance_tracker.infrastructure.database.repositories import (
    CreditRepository,
    PaymentRepository,
    to_credit,
)
from finance_tracker.infrastructure.observability.logging import log_rejection

FIRST_PAYMENT_NOTE = "First scheduled payment"


class CreditService:
    """Unit-of-work operations over the credit aggregate"""

    def __init__(self, db: Session):
        self.db = db
        self.credits = CreditRepository(db)
        self.payments = PaymentRepository(db)

    def list_credits(self) -> List[Credit]:
        return [to_credit(c) for c in self.credits.list_credits()]

    def get_credit(self, credit_id: str) -> Credit:
        db_credit = self.credits.get_credit(credit_id)
        if db_credit is None:
            raise NotFoundError("Credit", credit_id)
        return to_credit(db_credit)

    def create_credit(
        self,
        name: str,
        total_cents: int,
        interest_rate: float,
        monthly_payment_cents: int,
        start_date: date | str,
        end_date: date | str,
        next_payment_date: Optional[date | str] = None,
        frequency: str = "monthly",
        notes: str = "",
        remaining_cents: Optional[int] = None,
    ) -> Credit:
        """
        Create an active credit and provision its first pending installment.

        The first installment is due on next_payment_date (start_date when
        omitted) for the nominal monthly payment.
        """
        start = coerce_date(start_date, "start_date")
        end = coerce_date(end_date, "end_date")
        next_due = coerce_date(next_payment_date, "next_payment_date") if next_payment_date else start

        remaining = validate_new_credit(
            name=name,
            total_cents=total_cents,
            interest_rate=interest_rate,
            monthly_payment_cents=monthly_payment_cents,
            start_date=start,
            end_date=end,
            frequency=frequency,
            remaining_cents=remaining_cents,
        )

        credit = Credit(
            id="",
            name=name.strip(),
            total_cents=total_cents,
            remaining_cents=remaining,
            interest_rate=interest_rate,
            monthly_payment_cents=monthly_payment_cents,
            start_date=start,
            end_date=end,
            next_payment_date=next_due,
            frequency=frequency,
            status="active",
            notes=notes or "",
        )

        try:
            db_credit = self.credits.create_credit(credit)
            self.payments.create_payment(
                credit_id=db_credit.id,
                amount_cents=db_credit.monthly_payment_cents,
                due_date=db_credit.next_payment_date,
                notes=FIRST_PAYMENT_NOTE,
            )
            created = to_credit(db_credit)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logging.info(
            "Credit created",
            extra={"credit_id": created.id, "total_cents": created.total_cents, "step": "credit_created"},
        )
        return created

    def update_credit(self, credit_id: str, changes: Dict[str, Any]) -> Credit:
        """Merge a partial edit; paid credits reject financial changes"""
        changes = dict(changes)
        for key in ("start_date", "end_date", "next_payment_date"):
            if changes.get(key) is not None:
                changes[key] = coerce_date(changes[key], key)

        try:
            db_credit = self.credits.get_credit(credit_id, for_update=True)
            if db_credit is None:
                raise NotFoundError("Credit", credit_id)

            updated = apply_credit_edit(to_credit(db_credit), changes)
            self.credits.apply_state(db_credit, updated)
            self.db.commit()
        except ConflictError as e:
            self.db.rollback()
            log_rejection("credit_update", e.message, credit_id=credit_id)
            raise
        except Exception:
            self.db.rollback()
            raise

        return updated

    def delete_credit(self, credit_id: str) -> None:
        """Delete a credit with no settled history, cascading its open installments"""
        try:
            db_credit = self.credits.get_credit(credit_id, for_update=True)
            if db_credit is None:
                raise NotFoundError("Credit", credit_id)

            paid = self.payments.count_paid(credit_id)
            if paid > 0:
                raise ConflictError(
                    f"credit {credit_id} has {paid} paid payment(s); deleting it would lose its history"
                )

            self.credits.delete_credit(db_credit)
            self.db.commit()
        except ConflictError as e:
            self.db.rollback()
            log_rejection("credit_delete", e.message, credit_id=credit_id)
            raise
        except Exception:
            self.db.rollback()
            raise

        logging.info("Credit deleted", extra={"credit_id": credit_id, "step": "credit_deleted"})
