"""Rule-based extraction of merchant, currency, VAT and total.

Every stage ends in an explicit "not found" (None) instead of raising, so a
garbled receipt degrades field by field.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from ..config import DEFAULT_CONFIG, ExtractorConfig
from ..domain.category import categorize, resolve_category
from ..domain.merchant import detect_merchant
from ..domain.models import ExtractedFields
from ..domain.normalize import normalize_amount
from ..domain.patterns import (
    CURRENCY_CODES,
    MONEY_RE,
    TOTAL_PATTERNS,
    VAT_PATTERNS,
    KeywordPattern,
    currency_regex,
)
from ..logging import get_logger
from .line_items import parse_line_items

LOG = get_logger("fields")

# (priority, position, role, raw token)
Candidate = Tuple[int, int, str, str]


def split_lines(text: str) -> List[str]:
    """Trimmed, non-empty lines in original order (any newline style)."""
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def detect_currency(
    text: str, codes: Sequence[str] = CURRENCY_CODES, default: str = "NOK"
) -> str:
    m = currency_regex(tuple(codes)).search(text or "")
    return m.group(1).upper() if m else default


def _collect(text: str, patterns: Sequence[KeywordPattern]) -> List[Candidate]:
    found: List[Candidate] = []
    for priority, kp in enumerate(patterns):
        for m in kp.regex.finditer(text):
            found.append((priority, m.start(), kp.role, m.group(kp.group)))
    return found


def detect_vat(text: str) -> Optional[Decimal]:
    """Return the VAT amount from the highest-priority pattern that yields one.

    A match normalizing to zero counts as not found.
    """
    candidates = sorted(_collect(text or "", VAT_PATTERNS))
    for _, pos, role, raw in candidates:
        value = normalize_amount(raw)
        if value:
            LOG.debug(f"VAT {value} from {role!r} match at {pos}")
            return value
    return None


def _plausible(value: Optional[Decimal], ceiling: Decimal) -> bool:
    return value is not None and 0 < value < ceiling


def detect_total(text: str, ceiling: Decimal = Decimal("1000000")) -> Optional[Decimal]:
    """Return the grand total.

    The largest plausible amount next to a total/sum keyword wins; without
    any, the largest money-shaped number in the whole text. Values outside
    (0, ceiling) are treated as noise.
    """
    text = text or ""
    anchored = [normalize_amount(raw) for _, _, _, raw in _collect(text, TOTAL_PATTERNS)]
    valid = [v for v in anchored if _plausible(v, ceiling)]
    if valid:
        LOG.debug(f"Total from {len(valid)} keyword-anchored candidate(s)")
        return max(valid)

    loose = [normalize_amount(m.group(1)) for m in MONEY_RE.finditer(text)]
    valid = [v for v in loose if _plausible(v, ceiling)]
    if valid:
        LOG.debug(f"No keyword total; largest of {len(valid)} money-shaped number(s)")
        return max(valid)
    return None


def extract_fields(
    text: str,
    config: Optional[ExtractorConfig] = None,
    *,
    with_items: bool = False,
    with_category: bool = False,
) -> ExtractedFields:
    """Extract merchant, VAT, total and currency from receipt text.

    ``with_items`` additionally splits line items; ``with_category`` assigns
    a budget category from the merchant name (falling back to keywords
    anywhere in the text).
    """
    cfg = config or DEFAULT_CONFIG
    text = "" if text is None else str(text)
    lines = split_lines(text)

    fields = ExtractedFields(
        merchant=detect_merchant(
            text,
            lines,
            stores=cfg.store_patterns,
            max_length=cfg.merchant_max_length,
            lookback=cfg.org_id_lookback,
            holding_window=cfg.holding_window,
        ),
        vat_amount=detect_vat(text),
        total=detect_total(text, cfg.total_ceiling),
        currency=detect_currency(text, cfg.currencies, cfg.default_currency),
    )

    if with_items:
        fields.line_items = parse_line_items(text, cfg.total_ceiling)
        for item in fields.line_items:
            item.category = categorize(item.description, cfg.category_map)
    if with_category:
        label, _ = resolve_category(fields.merchant or "", cfg.category_map)
        fields.category = label or categorize(text, cfg.category_map)

    LOG.debug(
        f"Extracted merchant={fields.merchant!r} total={fields.total} "
        f"vat={fields.vat_amount} currency={fields.currency}"
    )
    return fields
