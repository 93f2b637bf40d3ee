"""Receipt text -> structured fields."""

from .fields import detect_currency, detect_total, detect_vat, extract_fields, split_lines
from .line_items import parse_line_items

__all__ = [
    "detect_currency",
    "detect_total",
    "detect_vat",
    "extract_fields",
    "parse_line_items",
    "split_lines",
]
