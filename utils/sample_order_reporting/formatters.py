"""
Formatting utilities for Sample & Order Reporting
Indian-numbering currency and display-safe dates / numbers
"""
import pandas as pd
from datetime import datetime, date
from typing import Union
import logging

logger = logging.getLogger(__name__)


def _group_indian(digits: str) -> str:
    # Last three digits, then groups of two: 1234567 -> 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ','.join(groups + [tail])


def format_indian_currency(amount: Union[int, float, str, None]) -> str:
    """
    Format amount as rupees in the Indian numbering system, no decimals.

    Examples:
        1234567  -> ₹12,34,567
        -1500.6  -> -₹1,501
        None     -> ₹0
    """
    try:
        if amount is None or (not isinstance(amount, str) and pd.isna(amount)):
            return "₹0"
        value = int(round(float(amount)))
    except (ValueError, TypeError):
        return "₹0"

    sign = '-' if value < 0 else ''
    return f"{sign}₹{_group_indian(str(abs(value)))}"


def format_number(value: Union[int, float, None], decimals: int = 0) -> str:
    """
    Format number with thousand separator

    Args:
        value: Number to format
        decimals: Number of decimal places

    Returns:
        Formatted string
    """
    try:
        if value is None or pd.isna(value):
            return "-"

        if decimals == 0:
            return f"{int(value):,}"
        else:
            return f"{float(value):,.{decimals}f}"

    except (ValueError, TypeError):
        return "-"


def format_date(value: Union[str, datetime, date, None], format_str: str = "%d/%m/%Y") -> str:
    """Format a date-like value for tables, '-' when empty or unparseable."""
    try:
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return "-"
        if isinstance(value, str) and value.strip() == "":
            return "-"
        return pd.to_datetime(value).strftime(format_str)
    except (ValueError, TypeError) as e:
        logger.debug(f"Unparseable date {value!r}: {e}")
        return "-"
