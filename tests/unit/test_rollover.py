"""Unit tests for the next-due-date rule"""

import pytest
from datetime import date, timedelta
from finance_tracker.domain.rollover import rollover


def test_weekly_adds_seven_days():
    start = date(2024, 3, 28)
    assert rollover(start, "weekly") == start + timedelta(days=7)


def test_biweekly_adds_fourteen_days():
    assert rollover(date(2024, 12, 25), "biweekly") == date(2025, 1, 8)


def test_monthly_keeps_day_of_month():
    assert rollover(date(2024, 6, 25), "monthly") == date(2024, 7, 25)


def test_monthly_end_of_month_clamps_into_february():
    """Jan 31 has no February counterpart; lands on the last day"""
    assert rollover(date(2024, 1, 31), "monthly") == date(2024, 2, 29)
    assert rollover(date(2023, 1, 31), "monthly") == date(2023, 2, 28)


def test_monthly_crosses_year_boundary():
    assert rollover(date(2024, 12, 15), "monthly") == date(2025, 1, 15)


def test_yearly_adds_one_year():
    assert rollover(date(2024, 6, 25), "yearly") == date(2025, 6, 25)


def test_yearly_from_leap_day():
    assert rollover(date(2024, 2, 29), "yearly") == date(2025, 2, 28)


@pytest.mark.parametrize("frequency", ["quarterly", "", "MONTHLY"])
def test_unknown_frequency_falls_back_to_monthly(frequency):
    assert rollover(date(2024, 5, 10), frequency) == date(2024, 6, 10)
