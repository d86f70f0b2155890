"""
Formatting helpers for notification and email text.
"""
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union


def format_currency(amount: Optional[Union[int, float, Decimal, str]]) -> str:
    """Format an amount as whole US dollars, e.g. $350,000"""
    if amount is None or amount == "":
        return ""
    value = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"${int(value):,}"


def format_date(value: Optional[Union[date, datetime]]) -> str:
    """Monday, January 5, 2026"""
    if value is None:
        return ""
    return f"{value:%A, %B} {value.day}, {value.year}"


def format_time(value: Optional[datetime]) -> str:
    """02:30 PM"""
    if value is None:
        return ""
    return value.strftime("%I:%M %p")


def format_time_range(start: Optional[datetime], end: Optional[datetime]) -> str:
    return f"{format_time(start)} - {format_time(end)}"
