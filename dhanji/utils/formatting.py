# dhanji/utils/formatting.py
import datetime
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from dhanji.config import CURRENCY

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}

MONTHS = ["January", "February", "March", "April", "May", "June", "July",
          "August", "September", "October", "November", "December"]

DateLike = Union[str, datetime.date, datetime.datetime]


def group_indian(digits: str) -> str:
    """Groups a string of digits the en-IN way: last three, then pairs.
    Ex: "12345678" -> "1,23,45,678"
    """
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount: float, currency: str = CURRENCY) -> str:
    """Formats an amount as whole currency units with Indian digit grouping.
    Ex: 123456.7 -> "₹1,23,457"
    Ex: -1500 -> "-₹1,500"
    """
    if not math.isfinite(amount):
        raise ValueError(f"Cannot format a non-finite amount: {amount!r}")
    rounded = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{group_indian(str(abs(int(rounded))))}"


def to_date(value: DateLike) -> datetime.date:
    """Drops the time of day from a date, datetime or ISO string."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    text = str(value).strip()
    try:
        return datetime.date.fromisoformat(text[:10])
    except ValueError:
        raise ValueError(f"Not an ISO date: {value!r}") from None


def format_short_date(value: DateLike) -> str:
    """Ex: 2025-01-05 -> "5 Jan" """
    day = to_date(value)
    return f"{day.day} {MONTHS[day.month - 1][:3]}"


def format_long_date(value: DateLike) -> str:
    """Ex: 2025-01-05 -> "5 January 2025" """
    day = to_date(value)
    return f"{day.day} {MONTHS[day.month - 1]} {day.year}"
