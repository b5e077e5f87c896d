"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from finplan.domain.errors import ValidationError
from finplan.domain.money import DateRange

PERIODS = ("this-month", "this-year", "this-week", "last-month", "last-year", "last-week")


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and the
    relative forms "today", "yesterday", "tomorrow", "this/last/next month",
    "this/last/next year" and "this/last/next week".

    Args:
        date_str: Date string in various formats
        today: Reference date for relative forms, defaults to date.today()

    Returns:
        Date object

    Raises:
        ValidationError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "this month": today.replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
        "next month": (today + relativedelta(months=1)).replace(day=1),
        "this year": today.replace(month=1, day=1),
        "last year": today.replace(month=1, day=1) - relativedelta(years=1),
        "next year": today.replace(month=1, day=1) + relativedelta(years=1),
        # Weeks start on Monday
        "this week": today - timedelta(days=today.weekday()),
        "last week": today - timedelta(days=today.weekday() + 7),
        "next week": today + timedelta(days=7 - today.weekday()),
    }
    if text in relative_dates:
        return relative_dates[text]

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> DateRange:
    """Get the date range for a named period.

    Args:
        period: One of this-month, this-year, this-week, last-month,
            last-year, last-week
        today: Reference date, defaults to date.today()

    Returns:
        DateRange covering the period; "this" periods end today

    Raises:
        ValidationError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "this-month":
        return DateRange(today.replace(day=1), today)
    if period == "this-year":
        return DateRange(today.replace(month=1, day=1), today)
    if period == "this-week":
        return DateRange(today - timedelta(days=today.weekday()), today)
    if period == "last-month":
        first_of_month = today.replace(day=1)
        return DateRange(first_of_month - relativedelta(months=1), first_of_month - timedelta(days=1))
    if period == "last-year":
        first_of_year = today.replace(month=1, day=1)
        return DateRange(first_of_year - relativedelta(years=1), first_of_year - timedelta(days=1))
    if period == "last-week":
        start = today - timedelta(days=today.weekday() + 7)
        return DateRange(start, start + timedelta(days=6))

    raise ValidationError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
