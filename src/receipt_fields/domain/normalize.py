import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..logging import get_logger

_LOG = get_logger("normalize")

_TWO_DIGITS = re.compile(r"[0-9]{2}")
_NOT_NUMERIC = re.compile(r"[^0-9.]")


def _decimal_point_index(s: str) -> int:
    """Return the index of the separator acting as decimal point, or -1.

    - Both ',' and '.' present: whichever occurs last is the point.
    - Only one kind present: it is the point only when exactly two digits
      follow its last occurrence; otherwise it is a thousands mark.
    """
    last_comma = s.rfind(",")
    last_dot = s.rfind(".")
    if last_comma >= 0 and last_dot >= 0:
        return max(last_comma, last_dot)
    last = max(last_comma, last_dot)
    if last >= 0 and _TWO_DIGITS.fullmatch(s[last + 1:]):
        return last
    return -1


def normalize_amount(val: Any) -> Optional[Decimal]:
    """Normalize a money-looking token to a Decimal.

    Handles inputs like '123,45', '123.45', '1.234,56', '1,234.56',
    '1 234,56' and plain integers. The locale is inferred from the token
    itself, so '1.234' and '1,234' both read as 1234. Returns None for
    empty or non-numeric input; never raises.
    """
    if val is None:
        return None
    s = str(val).strip()
    if not s:
        return None

    point = _decimal_point_index(s)
    if point >= 0:
        head = s[:point].replace(",", "").replace(".", "")
        s2 = f"{head}.{s[point + 1:]}"
    else:
        s2 = s.replace(",", "").replace(".", "")

    s2 = _NOT_NUMERIC.sub("", s2)
    if not s2:
        return None
    try:
        return Decimal(s2)
    except InvalidOperation:
        _LOG.debug(f"Token {val!r} did not reduce to a number (got {s2!r})")
        return None


def format_nok(value: Any) -> str:
    """Format an amount Norwegian style: space grouping, comma decimals.

    >>> format_nok(1234.5)
    '1 234,50'
    """
    try:
        num = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return "0,00"
    if not num.is_finite():
        return "0,00"
    s = f"{num:,.2f}"
    return s.replace(",", " ").replace(".", ",")
