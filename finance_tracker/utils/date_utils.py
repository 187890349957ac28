"""Date manipulation utilities"""

from datetime import date


def parse_iso_date(value: str | date) -> date:
    """Parse a YYYY-MM-DD string (dates pass through unchanged)"""
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


def is_before(day: date, reference: date | None = None) -> bool:
    """True if day falls strictly before reference (default: today)"""
    return day < (reference or date.today())
