"""Merchant name detection from receipt text.

Three strategies, first hit wins:

1. a known store (or holding company, resolved to its brand) anywhere in
   the raw text,
2. the legal name printed just above an organization-number line,
3. the first non-empty line.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence

from ..logging import get_logger
from .patterns import ORG_ID_RE, STORE_PATTERNS, StorePattern

LOG = get_logger("merchant")

_ADDRESS_START = re.compile(r"^\d")
_POSTAL_CODE = re.compile(r"\b\d{4}\b")
_PHONE = re.compile(r"telefon|phone", re.IGNORECASE)
_THREE_LETTERS = re.compile(r"[^\W\d_]{3,}")


def _collapse(s: str) -> str:
    return re.sub(r"\s+", " ", s).strip()


def _nearby_subsidiary(text: str, store: StorePattern, start: int, end: int, window: int) -> Optional[str]:
    lo = max(0, start - window)
    hi = min(len(text), end + window)
    best: Optional[re.Match[str]] = None
    for regex in store.subsidiary_regexes:
        m = regex.search(text, lo, hi)
        if m and (best is None or m.start() < best.start()):
            best = m
    return _collapse(best.group(0)) if best else None


def match_known_store(
    text: str,
    stores: Sequence[StorePattern] = STORE_PATTERNS,
    holding_window: int = 400,
) -> Optional[str]:
    """Return the first known store (list order) found in text.

    A holding-company hit is replaced by a subsidiary brand found within
    ``holding_window`` characters of it, when there is one.
    """
    for store in stores:
        m = store.regex.search(text)
        if not m:
            continue
        if store.role == "holding":
            brand = _nearby_subsidiary(text, store, m.start(), m.end(), holding_window)
            if brand:
                LOG.debug(f"Holding {store.name!r} resolved to brand {brand!r}")
                return brand
        LOG.debug(f"Known store {store.name!r} matched {m.group(0)!r}")
        return _collapse(m.group(0))
    return None


def _looks_like_name(line: str) -> bool:
    if _ADDRESS_START.match(line) or _POSTAL_CODE.search(line):
        return False
    if _PHONE.search(line):
        return False
    return len(line) > 2 and bool(_THREE_LETTERS.search(line))


def merchant_from_org_line(lines: Sequence[str], lookback: int = 3) -> Optional[str]:
    """Pick the legal name printed above the first organization-number line.

    Looks at up to ``lookback`` lines before it, top to bottom, skipping
    address and phone lines.
    """
    org_idx = next((i for i, line in enumerate(lines) if ORG_ID_RE.search(line)), -1)
    if org_idx <= 0:
        return None
    for line in lines[max(0, org_idx - lookback):org_idx]:
        if _looks_like_name(line):
            return line
    return None


def detect_merchant(
    text: str,
    lines: Sequence[str],
    stores: Sequence[StorePattern] = STORE_PATTERNS,
    max_length: int = 60,
    lookback: int = 3,
    holding_window: int = 400,
) -> Optional[str]:
    known = match_known_store(text, stores, holding_window)
    if known:
        return known[:max_length]
    from_org = merchant_from_org_line(lines, lookback)
    if from_org:
        LOG.debug(f"Merchant taken from org-id neighbourhood: {from_org!r}")
        return from_org[:max_length]
    return lines[0][:max_length] if lines else None
