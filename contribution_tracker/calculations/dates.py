"""
Date Utilities

Accept date, datetime or ISO-8601 strings. Like the rest of the
calculations package these never raise: unreadable input gives "",
0 or False.
"""

from datetime import date, datetime
from typing import Optional

# RRSP contributions made before this month/day count toward the
# previous tax year. Fixed cutoff, no leap-year or weekend adjustment.
FIRST_PERIOD_END = (3, 1)


def _to_date(value: object) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text[-1] in "Zz":
        # fromisoformat only accepts a Z suffix from Python 3.11
        text = text[:-1] + "+00:00"
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def format_date(value: object) -> str:
    """en-CA date string (YYYY-MM-DD), or "" for missing/invalid input."""
    parsed = _to_date(value)
    return parsed.isoformat() if parsed is not None else ""


def calculate_age(date_of_birth: object, today: Optional[date] = None) -> int:
    """
    Whole years since date_of_birth, as of today.

    Returns 0 for invalid input and never goes negative.
    """
    born = _to_date(date_of_birth)
    if born is None:
        return 0

    today = today or date.today()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1

    return max(0, age)


def is_within_first_contribution_period(value: object) -> bool:
    """True if the date falls before March 1 of its own year."""
    parsed = _to_date(value)
    if parsed is None:
        return False

    month, day = FIRST_PERIOD_END
    return parsed < date(parsed.year, month, day)
