"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, moving day 29-31 back to the month's last day when needed"""
    return date(year, month, max(1, min(day, days_in_month(year, month))))


def add_months(from_date: date, months: int, day: int | None = None) -> date:
    """
    Shift a date by whole months keeping the day valid.

    Jan 31 + 1 month -> Feb 28/29. When ``day`` is given it replaces the
    original day of month before clamping.
    """
    year = from_date.year + (from_date.month - 1 + months) // 12
    month = (from_date.month - 1 + months) % 12 + 1
    return clamp_day(year, month, from_date.day if day is None else day)


def sunday_based_weekday(value: date) -> int:
    """Weekday numbered 0=Sunday..6=Saturday"""
    return (value.weekday() + 1) % 7


def next_weekday(from_date: date, weekday: int) -> date:
    """Next date on/after from_date falling on a Sunday-based weekday"""
    diff = (weekday - sunday_based_weekday(from_date)) % 7
    return from_date + timedelta(days=diff)


def next_monthly_due_date(from_date: date, due_day: int) -> date:
    """Due day in this month if not yet passed (today counts), else next month"""
    this_month = clamp_day(from_date.year, from_date.month, due_day)
    if this_month >= from_date:
        return this_month
    return add_months(from_date, 1, day=due_day)


def same_month(a: date, b: date) -> bool:
    return a.year == b.year and a.month == b.month
