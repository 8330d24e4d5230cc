"""
Date Utilities

Business-day walking and ISO date conversion for prediction dates.
"""
from typing import List, Union
from datetime import date, datetime, timedelta


def get_next_business_day(d: date) -> date:
    """
    Get the next business day (skip Sat/Sun).
    """
    next_day = d + timedelta(days=1)
    while next_day.weekday() > 4:
        next_day += timedelta(days=1)
    return next_day


def get_future_business_days(start_date: date, count: int) -> List[date]:
    """
    Get the next `count` business days strictly after start_date.

    Parameters:
        start_date (date): Anchor date, excluded from the result
        count (int): Number of business days to return

    Returns:
        List[date]: Ascending business days
    """
    days = []
    current = start_date
    for _ in range(count):
        current = get_next_business_day(current)
        days.append(current)
    return days


def to_date(value: Union[date, datetime, str]) -> date:
    """Coerce a date, datetime or YYYY-MM-DD string to a date"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    if hasattr(value, "date"):
        # pandas Timestamp / numpy datetime wrappers
        return value.date()
    raise TypeError(f"Cannot convert {type(value).__name__} to date")


def to_iso_date(d: date) -> str:
    return d.strftime("%Y-%m-%d")
