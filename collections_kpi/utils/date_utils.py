"""Date manipulation utilities"""

import calendar
from datetime import date


def days_between(later: date, earlier: date) -> int:
    """Whole days from earlier to later (negative when later precedes earlier)"""
    return (later - earlier).days


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def end_of_month(day: date) -> date:
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=last)


def add_months(day: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's length"""
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def month_key(day: date) -> str:
    """Bucket key in YYYY-MM form; sorts chronologically as a string"""
    return f"{day.year:04d}-{day.month:02d}"
