"""Next-due-date rule for credit payment frequencies"""

from datetime import date, timedelta
from dateutil.relativedelta import relativedelta

_STEPS = {
    "weekly": timedelta(days=7),
    "biweekly": timedelta(days=14),
    "monthly": relativedelta(months=1),
    "yearly": relativedelta(years=1),
}


def rollover(current: date, frequency: str) -> date:
    """
    Compute the due date following `current` for a payment frequency.

    Month and year steps clamp to the last valid day of the target month
    (2024-01-31 monthly -> 2024-02-29, 2024-02-29 yearly -> 2025-02-28).
    Unrecognized frequencies fall back to the monthly step.
    """
    return current + _STEPS.get(frequency, _STEPS["monthly"])
