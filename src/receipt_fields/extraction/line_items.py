from __future__ import annotations

import re
from decimal import Decimal
from typing import List, Optional

from ..domain.models import LineItem
from ..domain.normalize import normalize_amount
from ..logging import get_logger

LOG = get_logger("line-items")

_SUMMARY_LINE = re.compile(r"^(sum|total|mva|vat|beløp|å betale|change|subtotal|til gode)", re.IGNORECASE)
_PRICE_AT_END = re.compile(r"(.*?)(-?\d{1,3}(?:[ .]\d{3})*[.,]\d{2})$")
_QTY_TIMES_UNIT = re.compile(r"(\d{1,3})\s*[xX*]\s*(\d{1,3}(?:[ .,]\d{3})*[.,]\d{2})")
_CURRENCY_ONLY = re.compile(r"^(kr|nok)$", re.IGNORECASE)

# qty * unit may deviate this much from the line amount before it is ignored
_QTY_TOLERANCE = Decimal("0.25")


def _split_quantity(desc: str, amount: Decimal):
    m = _QTY_TIMES_UNIT.search(desc)
    if not m:
        return desc, None, None
    quantity = int(m.group(1))
    unit_price: Optional[Decimal] = normalize_amount(m.group(2))
    desc = _QTY_TIMES_UNIT.sub("", desc, count=1).strip()
    if not quantity or not unit_price or abs(quantity * unit_price - amount) / amount > _QTY_TOLERANCE:
        return desc, None, None
    return desc, quantity, unit_price


def parse_line_items(text: str, ceiling: Decimal = Decimal("1000000")) -> List[LineItem]:
    """Split receipt text into ``<description> <price>`` line items.

    Summary lines (sum, total, VAT, ...) are skipped. A "2x12,95" style
    prefix inside the description becomes quantity and unit price when it
    agrees with the line amount.
    """
    items: List[LineItem] = []
    for raw in (text or "").splitlines():
        line = raw.strip()
        if len(line) < 3 or _SUMMARY_LINE.match(line):
            continue
        m = _PRICE_AT_END.match(line)
        if not m:
            continue
        if m.group(2).startswith("-"):
            continue
        value = normalize_amount(m.group(2))
        if value is None or value <= 0 or value > ceiling:
            continue
        desc = re.sub(r"[-–]+$", "", m.group(1).strip()).strip()
        if not desc or _CURRENCY_ONLY.match(desc):
            continue
        desc, quantity, unit_price = _split_quantity(desc, value)
        items.append(
            LineItem(description=desc[:120], amount=value, quantity=quantity, unit_price=unit_price)
        )
    LOG.debug(f"Parsed {len(items)} line item(s)")
    return items
