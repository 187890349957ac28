"""Credit aggregate rules - validation, edits and the settlement transition"""

from dataclasses import replace
from datetime import date
from typing import Any, Dict, Optional

from finance_tracker.domain.exceptions import ConflictError, ValidationError
from finance_tracker.domain.models import (
    CREDIT_STATUSES,
    FREQUENCIES,
    METHOD_ALIASES,
    PAYMENT_METHODS,
    PAYMENT_STATUSES,
    Credit,
    CreditPayment,
)
from finance_tracker.domain.rollover import rollover
from finance_tracker.utils.date_utils import is_before, parse_iso_date

# Fields frozen once a credit is paid off
FINANCIAL_FIELDS = frozenset(
    {
        "total_cents",
        "remaining_cents",
        "interest_rate",
        "monthly_payment_cents",
        "start_date",
        "end_date",
        "next_payment_date",
        "frequency",
    }
)

EDITABLE_FIELDS = FINANCIAL_FIELDS | {"name", "notes", "status"}


def validate_new_credit(
    name: str,
    total_cents: int,
    interest_rate: float,
    monthly_payment_cents: int,
    start_date: date,
    end_date: date,
    frequency: str,
    remaining_cents: Optional[int] = None,
) -> int:
    """
    Validate credit creation input.

    Returns:
        Opening remaining balance (total unless overridden)

    Raises:
        ValidationError: On blank name, non-positive amounts, negative rate,
            unknown frequency, inverted date range or out-of-range override
    """
    if not name or not name.strip():
        raise ValidationError("name is required", field="name")
    if total_cents <= 0:
        raise ValidationError("total amount must be greater than zero", field="total_cents")
    if monthly_payment_cents <= 0:
        raise ValidationError("monthly payment must be greater than zero", field="monthly_payment_cents")
    if interest_rate < 0:
        raise ValidationError("interest rate cannot be negative", field="interest_rate")
    if frequency not in FREQUENCIES:
        raise ValidationError(f"unknown frequency: {frequency}", field="frequency")
    if end_date < start_date:
        raise ValidationError("end date cannot precede start date", field="end_date")

    if remaining_cents is None:
        return total_cents
    if remaining_cents <= 0 or remaining_cents > total_cents:
        raise ValidationError(
            "remaining amount must be within (0, total amount]", field="remaining_cents"
        )
    return remaining_cents


def apply_credit_edit(credit: Credit, changes: Dict[str, Any]) -> Credit:
    """
    Merge a partial edit into a credit and return the next state.

    Keys whose value is None are treated as absent. A paid credit rejects
    any financial field or status change. remaining_cents is clamped into
    [0, total] using the total in effect after the edit.
    """
    changes = {k: v for k, v in changes.items() if v is not None}

    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"fields not editable: {', '.join(sorted(unknown))}")

    if credit.is_paid:
        frozen = sorted((set(changes) & FINANCIAL_FIELDS) | ({"status"} & set(changes)))
        if frozen:
            raise ConflictError(
                f"credit {credit.id} is paid; cannot edit {', '.join(frozen)}"
            )

    if "name" in changes and not str(changes["name"]).strip():
        raise ValidationError("name cannot be blank", field="name")
    if "frequency" in changes and changes["frequency"] not in FREQUENCIES:
        raise ValidationError(f"unknown frequency: {changes['frequency']}", field="frequency")
    if "status" in changes:
        if changes["status"] not in CREDIT_STATUSES:
            raise ValidationError(f"unknown status: {changes['status']}", field="status")
        if changes["status"] == "paid":
            raise ConflictError("a credit can only be marked paid by settling its balance")
    for key in ("total_cents", "monthly_payment_cents"):
        if key in changes and changes[key] <= 0:
            raise ValidationError(f"{key} must be greater than zero", field=key)
    if "remaining_cents" in changes and changes["remaining_cents"] < 0:
        raise ValidationError("remaining_cents cannot be negative", field="remaining_cents")
    if "interest_rate" in changes and changes["interest_rate"] < 0:
        raise ValidationError("interest rate cannot be negative", field="interest_rate")

    updated = replace(credit, **changes)
    if updated.end_date < updated.start_date:
        raise ValidationError("end date cannot precede start date", field="end_date")

    updated.remaining_cents = max(0, min(updated.remaining_cents, updated.total_cents))
    return updated


def apply_settlement(credit: Credit, amount_cents: int) -> Credit:
    """
    Credit state after an installment of `amount_cents` is settled.

    Balance never drops below zero, the next due date rolls over by the
    credit's frequency, and the status flips to paid when the balance
    reaches zero.
    """
    remaining = max(credit.remaining_cents - amount_cents, 0)
    return replace(
        credit,
        remaining_cents=remaining,
        next_payment_date=rollover(credit.next_payment_date, credit.frequency),
        status="paid" if remaining == 0 else credit.status,
    )


def needs_next_installment(credit: Credit) -> bool:
    """True if a settled credit still expects another installment"""
    return credit.remaining_cents > 0 and credit.status != "paid"


def project_payment_status(payment: CreditPayment, today: Optional[date] = None) -> str:
    """Presentation status: a pending payment past its due date reads as overdue"""
    if payment.status == "pending" and is_before(payment.date, today):
        return "overdue"
    return payment.status


def normalize_method(method: str) -> str:
    """Map a payment method (or its dashboard label) to its stored form"""
    value = str(method or "").strip().lower()
    value = METHOD_ALIASES.get(value, value)
    if value not in PAYMENT_METHODS:
        raise ValidationError(f"unknown payment method: {method}", field="method")
    return value


def validate_payment_status(status: str) -> str:
    if status not in PAYMENT_STATUSES:
        raise ValidationError(f"unknown payment status: {status}", field="status")
    return status


def coerce_date(value: Any, field: str) -> date:
    """Parse a calendar date input, reporting the offending field"""
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"invalid date for {field}: {value}", field=field) from e
