# utils/sample_order_reporting/sku_parser.py
"""
Packed SKU string codec.

Sample requests and orders carry their book lines in one text column:

    "Atlas $ 5 // Map Set $ 3 // Atlas $ 2"

Entries are separated by " // ", each entry is "<book name> $ <quantity>".
Parsing rules:
- names are trimmed, entries with an empty name are dropped
- a missing or non-integer quantity counts as 0
- only the first " $ " splits name from quantity
"""

import re
from collections import OrderedDict
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from .constants import SKU_ENTRY_SEPARATOR, SKU_QTY_SEPARATOR

SkuEntry = Tuple[str, int]

_LEADING_INT = re.compile(r'^[+-]?\d+')


def _parse_quantity(raw: Optional[str]) -> int:
    # Leading-integer semantics: "12 copies" -> 12, "abc" -> 0
    if raw is None:
        return 0
    match = _LEADING_INT.match(raw.strip())
    return int(match.group()) if match else 0


def parse_sku_info(value) -> List[SkuEntry]:
    """
    Split a packed SKU string into (name, quantity) pairs in encounter order.

    Non-string and empty values yield an empty list.
    """
    if value is None or not isinstance(value, str) or not value.strip():
        return []

    entries = []
    for item in value.split(SKU_ENTRY_SEPARATOR):
        parts = item.split(SKU_QTY_SEPARATOR)
        name = parts[0].strip()
        if not name:
            continue
        quantity = _parse_quantity(parts[1] if len(parts) > 1 else None)
        entries.append((name, quantity))
    return entries


def format_sku_info(entries: Iterable[SkuEntry]) -> str:
    """Inverse of parse_sku_info for well-formed entries."""
    return SKU_ENTRY_SEPARATOR.join(
        f"{name}{SKU_QTY_SEPARATOR}{int(quantity)}" for name, quantity in entries
    )


def accumulate_book_quantities(values: Iterable) -> 'OrderedDict[str, int]':
    """
    Sum quantities per book name across many packed strings.

    Keys keep first-encounter order, which the ranking relies on for ties.
    """
    totals: 'OrderedDict[str, int]' = OrderedDict()
    for value in values:
        for name, quantity in parse_sku_info(value):
            totals[name] = totals.get(name, 0) + quantity
    return totals


def book_quantities_frame(values: Iterable) -> pd.DataFrame:
    """Accumulated quantities as a two-column DataFrame (name, quantity)."""
    totals = accumulate_book_quantities(values)
    return pd.DataFrame(list(totals.items()), columns=['name', 'quantity'])
