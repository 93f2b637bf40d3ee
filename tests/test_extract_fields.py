import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from receipt_fields import extract_fields
from receipt_fields.extraction.fields import detect_currency, detect_total, detect_vat, split_lines


COOP_RECEIPT = """
COOP PRIX
Storgata 123
Oslo

Melk                    12,90
Brød                    25,50
Ost                     89,75

Sum                    128,15
MVA 25%                 25,63
Totalt å betale        128,15
""".strip()


def test_clean_norwegian_receipt():
    result = extract_fields(COOP_RECEIPT)
    assert result.merchant == "COOP PRIX"
    assert result.total == Decimal("128.15")
    assert result.vat_amount == Decimal("25.63")
    assert result.currency == "NOK"


def test_thousands_separator_receipt():
    text = """
REMA 1000
Hovedgata 456

Diverse varer         1.245,80
MVA                     249,16
Sum å betale          1.245,80
    """.strip()
    result = extract_fields(text)
    assert result.merchant == "REMA 1000"
    assert result.total == Decimal("1245.80")
    assert result.vat_amount == Decimal("249.16")


def test_foreign_currency_dot_decimal():
    text = "Duty Free Shop\nItem 1  50.00 EUR\nTotal  125.50 EUR"
    result = extract_fields(text)
    assert result.currency == "EUR"
    assert result.total == Decimal("125.50")
    assert result.merchant == "Duty Free Shop"


def test_org_number_merchant_heuristic():
    text = """
Bakeri AS
Gateveien 45
0123 Oslo
Org.nr: 123456789

Rundstykker             25,00
Kaffe                   30,00

Sum                     55,00
    """.strip()
    result = extract_fields(text)
    assert result.merchant == "Bakeri AS"
    assert result.total == Decimal("55.00")
    assert result.vat_amount is None


def test_period_decimal_receipt():
    text = """
Local Store
Main Street 789

Item 1                  123.45
Item 2                  67.89
Total                   191.34
VAT                     38.27
    """.strip()
    result = extract_fields(text)
    assert result.merchant == "Local Store"
    assert result.total == Decimal("191.34")
    assert result.vat_amount == Decimal("38.27")


def test_mixed_format_receipt():
    text = """
ICA Supermarket
Storveien 12A

Bananer 1kg             23,90
Kaffe premium         1.125,00
Juice 2L                45.99

Totalt                1.194,89
MVA 25%                 238,98
    """.strip()
    result = extract_fields(text)
    assert result.merchant == "ICA Supermarket"
    assert result.total == Decimal("1194.89")
    assert result.vat_amount == Decimal("238.98")


def test_garbled_text_with_vat_breakdown():
    text = "\n".join(
        [
            "~~#8 Q% -- Wq.,",
            "..ll REMA 1000 /|\\ Storo",
            "Tlf. 22 33 44 55 ;; ??",
            "Rnr 4411 ## 12:44",
            "V4rer  `` 1999.00",
            "1599.20 25% 399.80 1999.00",
            "TOTAI. 'kr 1999,00 !!",
        ]
    )
    result = extract_fields(text)
    assert result.merchant == "REMA 1000"
    assert result.total == Decimal("1999.00")
    assert result.vat_amount == Decimal("399.80")


def test_total_prefers_keyword_over_larger_line_item():
    text = "Butikk\nTV-stativ      2.499,00\nRabatt kupong   500,00\nÅ betale       1.999,00"
    # the largest keyword-anchored value wins, unanchored numbers are ignored
    assert detect_total("Sum 10,00\nVare 99,00") == Decimal("10.00")
    assert extract_fields(text).total == Decimal("1999.00")


def test_total_never_reaches_one_million():
    assert detect_total("Total 1.000.000,00\nSum 999,00") == Decimal("999.00")
    assert detect_total("Total 1 000 000,00") is None
    assert detect_total("Vare 1,000,000.00\nVare 12,50") == Decimal("12.50")
    assert detect_total("Vare 2500000,00") is None


def test_total_amount_before_keyword():
    assert detect_total("Kvittering\n349,00 TOTAL\n") == Decimal("349.00")


def test_total_whole_krone_style():
    assert detect_total("Å betale kr 128,-") == Decimal("128")


def test_total_after_bank_settlement_label():
    assert detect_total("BankAxept        kr 412,30\nRef 123456") == Decimal("412.30")


def test_zero_vat_counts_as_missing():
    assert detect_vat("MVA 0,00") is None
    assert detect_vat("MVA 0,00\n 25,00 MVA") == Decimal("25.00")


def test_vat_of_which_phrase():
    assert detect_vat("Totalt 500,00\nHerav mva 25%  100,00") == Decimal("100.00")


def test_vat_breakdown_beats_keyword():
    text = "MVA 12,00\nGrunnlag  25%  MVA  Sum\n400,00 25% 100,00 500,00"
    assert detect_vat(text) == Decimal("100.00")


def test_vat_keyword_not_matched_inside_words():
    assert detect_vat("PRIVAT 123,00") is None


def test_currency_detection():
    assert detect_currency("Total 12.00 usd") == "USD"
    assert detect_currency("SEK 100,00 ... EUR") == "SEK"
    assert detect_currency("Ingen valuta her") == "NOK"
    assert detect_currency("EUROSPAR") == "NOK"


def test_split_lines_handles_any_newline_style():
    assert split_lines("  A \r\nB\r\rC\n\n") == ["A", "B", "C"]


def test_empty_and_garbage_input_degrade_gracefully():
    result = extract_fields("")
    assert result.merchant is None
    assert result.total is None
    assert result.vat_amount is None
    assert result.currency == "NOK"

    result = extract_fields("??? !!! ###")
    assert result.merchant == "??? !!! ###"
    assert result.total is None


def test_to_dict_uses_app_keys():
    out = extract_fields(COOP_RECEIPT).to_dict()
    assert out == {"merchant": "COOP PRIX", "vatAmount": 25.63, "total": 128.15, "currency": "NOK"}


def test_items_and_category_on_request():
    result = extract_fields(COOP_RECEIPT, with_items=True, with_category=True)
    assert [item.description for item in result.line_items] == ["Melk", "Brød", "Ost"]
    assert result.category == "Groceries"
    assert result.to_dict()["items"][0] == {
        "description": "Melk",
        "amount": 12.9,
        "quantity": None,
        "unitPrice": None,
        "category": None,
    }


def test_category_fallback_ignores_keywords_inside_words():
    text = "Norli Bokhandel\nMusical-CD 199,00\nSum 199,00"
    assert extract_fields(text, with_category=True).category is None


def test_vat_keyword_stays_on_its_line():
    assert detect_vat("Totalt 128,15\nMVA 25% inkludert") is None
    assert detect_vat("MVA 25%\n128,15 kr") is None
    assert detect_vat("Totalt 128,15 MVA") == Decimal("128.15")


def test_total_keyword_does_not_reach_next_line():
    text = "Butikk\nVare 40,00\nSum\nKontant 500,00\nTilbake 460,00"
    assert detect_total("Sum\n 40,00\nKontant 500,00") == Decimal("500.00")
    assert detect_total("Sum 40,00\nKontant\n500,00") == Decimal("40.00")
    assert extract_fields(text).total == Decimal("500.00")
