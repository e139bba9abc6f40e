# utils/formatting.py

from datetime import datetime
from typing import Optional


def format_inr(amount: float, decimals: int = 0) -> str:
    """
    Format a number with Indian digit grouping and a rupee sign.
    Example: 1234567 -> "₹12,34,567"
    """
    negative = amount < 0
    text = f"{abs(amount):.{decimals}f}"
    whole, _, frac = text.partition(".")

    # last three digits, then groups of two
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])

    out = f"₹{whole}" + (f".{frac}" if frac else "")
    return f"-{out}" if negative else out


def format_percent(value: float) -> str:
    return f"{abs(value):.1f}%"


def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return "N/A"
    return value.strftime("%d %b %Y")


def humanize(value: str) -> str:
    """'cash_on_delivery' -> 'Cash on delivery'"""
    text = (value or "").replace("_", " ").strip()
    return text[:1].upper() + text[1:]
