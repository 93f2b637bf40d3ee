from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional


def _as_float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


@dataclass
class LineItem:
    description: str
    amount: Decimal
    quantity: Optional[int] = None
    unit_price: Optional[Decimal] = None
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "amount": _as_float(self.amount),
            "quantity": self.quantity,
            "unitPrice": _as_float(self.unit_price),
            "category": self.category,
        }


@dataclass
class ExtractedFields:
    """Best-effort fields recovered from one receipt text.

    Every field may be None except ``currency``, which falls back to the
    configured default (NOK).
    """

    merchant: Optional[str] = None
    vat_amount: Optional[Decimal] = None
    total: Optional[Decimal] = None
    currency: str = "NOK"
    line_items: List[LineItem] = field(default_factory=list)
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready mapping using the budgeting app's key names."""
        out: Dict[str, Any] = {
            "merchant": self.merchant,
            "vatAmount": _as_float(self.vat_amount),
            "total": _as_float(self.total),
            "currency": self.currency,
        }
        if self.line_items:
            out["items"] = [item.to_dict() for item in self.line_items]
        if self.category is not None:
            out["category"] = self.category
        return out
