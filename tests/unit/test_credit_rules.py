"""Unit tests for credit aggregate rules"""

import pytest
from datetime import date
from finance_tracker.domain.credits import (
    apply_credit_edit,
    apply_settlement,
    coerce_date,
    needs_next_installment,
    normalize_method,
    project_payment_status,
    validate_new_credit,
)
from finance_tracker.domain.exceptions import ConflictError, ValidationError
from finance_tracker.domain.models import Credit, CreditPayment


def _credit(**overrides) -> Credit:
    fields = dict(
        id="c1",
        name="Car loan",
        total_cents=1_500_000,
        remaining_cents=850_000,
        interest_rate=12.5,
        monthly_payment_cents=250_000,
        start_date=date(2024, 1, 25),
        end_date=date(2024, 12, 25),
        next_payment_date=date(2024, 6, 25),
        frequency="monthly",
        status="active",
    )
    fields.update(overrides)
    return Credit(**fields)


def _new_credit_args(**overrides):
    args = dict(
        name="Laptop",
        total_cents=2_000_000,
        interest_rate=0.0,
        monthly_payment_cents=200_000,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 10, 1),
        frequency="monthly",
    )
    args.update(overrides)
    return args


def test_validate_new_credit_defaults_remaining_to_total():
    assert validate_new_credit(**_new_credit_args()) == 2_000_000


def test_validate_new_credit_accepts_remaining_override():
    assert validate_new_credit(**_new_credit_args(remaining_cents=500_000)) == 500_000


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"name": "  "}, "name"),
        ({"total_cents": 0}, "total_cents"),
        ({"monthly_payment_cents": -1}, "monthly_payment_cents"),
        ({"interest_rate": -0.5}, "interest_rate"),
        ({"frequency": "daily"}, "frequency"),
        ({"end_date": date(2023, 12, 31)}, "end_date"),
        ({"remaining_cents": 3_000_000}, "remaining_cents"),
    ],
)
def test_validate_new_credit_rejects_bad_input(overrides, field):
    with pytest.raises(ValidationError) as exc_info:
        validate_new_credit(**_new_credit_args(**overrides))
    assert exc_info.value.field == field


def test_settlement_decrements_and_rolls_over():
    after = apply_settlement(_credit(), 250_000)

    assert after.remaining_cents == 600_000
    assert after.next_payment_date == date(2024, 7, 25)
    assert after.status == "active"
    assert needs_next_installment(after)


def test_settlement_reaching_zero_marks_paid():
    after = apply_settlement(_credit(remaining_cents=250_000), 250_000)

    assert after.remaining_cents == 0
    assert after.status == "paid"
    assert not needs_next_installment(after)


def test_settlement_overpayment_floors_at_zero():
    after = apply_settlement(_credit(remaining_cents=100_000), 999_999)
    assert after.remaining_cents == 0
    assert after.status == "paid"


def test_settlement_does_not_mutate_prior_state():
    before = _credit()
    apply_settlement(before, 250_000)
    assert before.remaining_cents == 850_000


def test_edit_merges_fields_and_ignores_none():
    after = apply_credit_edit(_credit(), {"name": "Car", "notes": "refinanced", "frequency": None})
    assert after.name == "Car"
    assert after.notes == "refinanced"
    assert after.frequency == "monthly"


def test_edit_clamps_remaining_to_new_total():
    after = apply_credit_edit(_credit(), {"total_cents": 500_000})
    assert after.remaining_cents == 500_000


def test_edit_clamps_explicit_remaining_above_total():
    after = apply_credit_edit(_credit(), {"remaining_cents": 9_000_000})
    assert after.remaining_cents == 1_500_000


def test_edit_on_paid_credit_rejects_financial_fields():
    paid = _credit(remaining_cents=0, status="paid")
    with pytest.raises(ConflictError):
        apply_credit_edit(paid, {"monthly_payment_cents": 100_000})


def test_edit_on_paid_credit_allows_name_and_notes():
    paid = _credit(remaining_cents=0, status="paid")
    after = apply_credit_edit(paid, {"name": "Old car", "notes": "closed"})
    assert after.name == "Old car"
    assert after.status == "paid"


def test_edit_cannot_mark_credit_paid():
    with pytest.raises(ConflictError):
        apply_credit_edit(_credit(), {"status": "paid"})


def test_edit_rejects_unknown_frequency():
    with pytest.raises(ValidationError):
        apply_credit_edit(_credit(), {"frequency": "hourly"})


def test_pending_past_due_reads_as_overdue():
    payment = CreditPayment(id="p1", credit_id="c1", amount_cents=1, date=date(2024, 6, 1), status="pending")
    assert project_payment_status(payment, today=date(2024, 6, 2)) == "overdue"
    assert project_payment_status(payment, today=date(2024, 6, 1)) == "pending"


def test_paid_payment_never_reads_as_overdue():
    payment = CreditPayment(id="p1", credit_id="c1", amount_cents=1, date=date(2024, 6, 1), status="paid")
    assert project_payment_status(payment, today=date(2025, 1, 1)) == "paid"


@pytest.mark.parametrize(
    "raw, expected",
    [("cash", "cash"), ("Tarjeta", "card"), ("transferencia", "transfer"), ("otro", "other")],
)
def test_normalize_method(raw, expected):
    assert normalize_method(raw) == expected


def test_normalize_method_rejects_unknown():
    with pytest.raises(ValidationError):
        normalize_method("cheque")


def test_coerce_date_rejects_impossible_date():
    with pytest.raises(ValidationError):
        coerce_date("2024-02-30", "date")
