"""
Receipt Fields – monetary text parsing and receipt field extraction.

The package turns noisy OCR text from purchase receipts into structured
fields (merchant, VAT, grand total, currency) and normalizes ambiguously
delimited amounts such as "1.234,56" or "1,234.56".
"""

from .domain.models import ExtractedFields, LineItem
from .domain.normalize import format_nok, normalize_amount
from .extraction.fields import extract_fields
from .extraction.line_items import parse_line_items

__all__ = [
    "ExtractedFields",
    "LineItem",
    "extract_fields",
    "format_nok",
    "normalize_amount",
    "parse_line_items",
]
