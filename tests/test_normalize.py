import sys
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from receipt_fields.domain.normalize import format_nok, normalize_amount


@pytest.mark.parametrize(
    "token, expected",
    [
        ("1.234,56", "1234.56"),
        ("1,234.56", "1234.56"),
        ("1.234", "1234"),
        ("1,234", "1234"),
        ("123,45", "123.45"),
        ("123.45", "123.45"),
        ("12.345,67", "12345.67"),
        ("123,456.78", "123456.78"),
        ("1.234.567,89", "1234567.89"),
        ("1 234,56", "1234.56"),
        ("12 345,67", "12345.67"),
        ("123", "123"),
        (" 123,45 ", "123.45"),
        ("\t1.234,56\n", "1234.56"),
        ("kr 45,50", "45.50"),
        ("NOK 1.245,80", "1245.80"),
        # one or three-plus trailing digits: the separator is a thousands mark
        ("12,3", "123"),
        ("1,2345", "12345"),
        ("128,-", "128"),
    ],
)
def test_normalize_amount(token, expected):
    assert normalize_amount(token) == Decimal(expected)


@pytest.mark.parametrize("token", ["", "   ", "abc", ",", ".", None])
def test_normalize_amount_rejects_non_numbers(token):
    assert normalize_amount(token) is None


def test_normalize_amount_is_repeatable():
    assert normalize_amount("1.245,80") == normalize_amount("1.245,80")


@pytest.mark.parametrize("value", ["0.01", "1.99", "12.90", "128.15", "999.00", "45678.12"])
def test_two_decimal_values_survive_both_spellings(value):
    v = Decimal(value)
    assert normalize_amount(f"{v:.2f}") == v
    assert normalize_amount(f"{v:.2f}".replace(".", ",")) == v


def test_normalize_amount_returns_decimal():
    assert isinstance(normalize_amount("12,90"), Decimal)


def test_format_nok():
    assert format_nok(1234.5) == "1 234,50"
    assert format_nok(Decimal("1000000")) == "1 000 000,00"
    assert format_nok("12.9") == "12,90"
    assert format_nok("abc") == "0,00"
    assert format_nok(None) == "0,00"
