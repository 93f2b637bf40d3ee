"""Ordered pattern tables consulted by the receipt extractor.

Every table is plain data: adding a store, a keyword or a currency means
appending an entry, never editing the matching code. Order matters only
where the extractor says so (store lookup and VAT priority).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Tuple


class ConfigError(ValueError):
    pass


STORE_ROLES = ("store", "holding")

# Letter guard usable in lookarounds; covers æøå and other extended Latin.
_LETTER = r"[^\W\d_]"

# Amount shapes -------------------------------------------------------------

# VAT amounts: digits, optional dot/comma thousands groups, two decimals.
VAT_AMOUNT = r"(?<!\d)(?<!\d[.,])\d{1,6}(?:[.,]\d{3})*[.,]\d{2}(?!\d)"

# Totals: grouped (space/dot/comma) or plain two-decimal amounts, plus the
# "128,-" whole-krone style.
TOTAL_AMOUNT = (
    r"(?<!\d)(?<!\d[.,])"
    r"(?:\d{1,3}(?:[ .,]\d{3})+[.,]\d{2}|\d+[.,]\d{2}|\d+(?:[ .]\d{3})*,-)"
    r"(?![.,]?\d)"
)

# Unanchored money shape for the global-maximum fallback.
MONEY_RE = re.compile(
    r"(?<!\d)(?<!\d[.,])(\d{1,3}(?:[ .,]\d{3})+[.,]\d{2}|\d+[.,]\d{2})(?!\d)"
)

TAX_RATE = r"\d{1,2}(?:[.,]\d{1,2})?[ \t]*%"


@dataclass(frozen=True)
class KeywordPattern:
    """A regex tagged with the semantic role it detects.

    ``group`` is the capture group holding the amount token.
    """

    role: str
    regex: re.Pattern[str]
    group: int = 1


def _kw(role: str, pattern: str, group: int = 1) -> KeywordPattern:
    return KeywordPattern(role=role, regex=re.compile(pattern, re.IGNORECASE), group=group)


# Keyword and amount share a line; column padding can be wide.
_GAP = r"[^\d\n]{0,40}"

# VAT: tried in priority order; within one pattern the earliest hit wins.
VAT_PATTERNS: Tuple[KeywordPattern, ...] = (
    # "<base> 25% <vat> <total>" breakdown line; the VAT is the middle number.
    _kw(
        "breakdown",
        rf"({VAT_AMOUNT})[ \t]+{TAX_RATE}[ \t]+({VAT_AMOUNT})[ \t]+({VAT_AMOUNT})",
        group=2,
    ),
    _kw(
        "of-which",
        rf"(?:herav|hvorav|derav|of[ \t]+which)[ \t]*(?:mva|moms|vat)\b[^\d\n]{{0,15}}"
        rf"(?:{TAX_RATE}[^\d\n]{{0,10}})?({VAT_AMOUNT})",
    ),
    _kw("keyword", rf"(?<!{_LETTER})(?:MVA|VAT)[ \t]*(?:{TAX_RATE})?[ \t]*({VAT_AMOUNT})"),
    _kw("trailing", rf"({VAT_AMOUNT})[ \t]*(?:MVA|VAT)(?!{_LETTER})"),
)

# Totals: every match of every pattern is a candidate; the largest plausible
# value wins, so order here is informational only.
TOTAL_PATTERNS: Tuple[KeywordPattern, ...] = (
    _kw("total", rf"(?<!{_LETTER})(?:totalt|total|grand[ \t]+total)(?!{_LETTER}){_GAP}({TOTAL_AMOUNT})"),
    _kw("sum", rf"(?<!{_LETTER})(?:sum|summa)(?!{_LETTER}){_GAP}({TOTAL_AMOUNT})"),
    _kw(
        "amount-due",
        rf"(?<!{_LETTER})(?:å[ \t]*betale|til[ \t]+betaling|beløp|amount[ \t]+due|balance[ \t]+due|to[ \t]+pay)"
        rf"(?!{_LETTER}){_GAP}({TOTAL_AMOUNT})",
    ),
    _kw("settlement", rf"(?<!{_LETTER})bank[ \t]*axept(?!{_LETTER}){_GAP}({TOTAL_AMOUNT})"),
    # Amount printed before the keyword on the same line, e.g. "128,15 TOTAL".
    _kw("total-after", rf"({TOTAL_AMOUNT})[ \t]*(?:kr|nok)?[ \t]*(?:totalt|total)(?!{_LETTER})"),
)

ORG_ID_RE = re.compile(
    r"\borg\.?\s*(?:nr|no)\b|\bbus\.?\s*reg\.?\s*no\b|\borganisasjonsnummer\b|\bforetaksregisteret\b",
    re.IGNORECASE,
)

CURRENCY_CODES: Tuple[str, ...] = ("NOK", "EUR", "USD", "GBP", "SEK", "DKK")


def currency_regex(codes: Tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(c) for c in codes)
    return re.compile(rf"\b({alternatives})\b", re.IGNORECASE)


# Stores ----------------------------------------------------------------------


def _compile(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise ConfigError(f"invalid store pattern {pattern!r}: {exc}") from exc


@dataclass(frozen=True)
class StorePattern:
    """A known store or holding company.

    Holdings carry ``subsidiaries``: brand patterns searched near the holding
    match, since receipts often print the legal owner next to the brand.
    """

    name: str
    pattern: str
    role: str = "store"
    subsidiaries: Tuple[str, ...] = ()
    regex: re.Pattern[str] = field(init=False, repr=False, compare=False)
    subsidiary_regexes: Tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.role not in STORE_ROLES:
            raise ConfigError(f"unknown store role {self.role!r} for {self.name!r}")
        object.__setattr__(self, "regex", _compile(self.pattern))
        object.__setattr__(
            self, "subsidiary_regexes", tuple(_compile(p) for p in self.subsidiaries)
        )


_COOP_BRANDS = r"(?:Prix|Extra|Mega|Obs|Marked)"

STORE_PATTERNS: Tuple[StorePattern, ...] = (
    StorePattern("Coop", rf"\bCoop[ \t]+{_COOP_BRANDS}\b"),
    StorePattern("REMA 1000", r"\bREMA[ \t]*1000\b"),
    StorePattern("Meny", r"\bMENY\b"),
    StorePattern("Eurospar", r"\bEUROSPAR\b"),
    StorePattern("Joker", r"\bJOKER\b"),
    StorePattern("Bunnpris", r"\bBUNNPRIS\b"),
    StorePattern("ICA", r"\bICA(?:[ \t]+(?:Supermarket|Maxi|Kvantum|Nära|Nær))?\b"),
    StorePattern("Europris", r"\bEUROPRIS\b"),
    StorePattern("Narvesen", r"\bNARVESEN\b"),
    StorePattern("7-Eleven", r"\b7-ELEVEN\b"),
    StorePattern("Vinmonopolet", r"\bVINMONOPOLET\b"),
    StorePattern("Circle K", r"\bCIRCLE[ \t]*K\b"),
    StorePattern("Apotek 1", r"\bAPOTEK[ \t]*1\b"),
    StorePattern("Vitusapotek", r"\bVITUSAPOTEK\b"),
    StorePattern("Clas Ohlson", r"\bCLAS[ \t]+OHLSON\b"),
    StorePattern("Biltema", r"\bBILTEMA\b"),
    StorePattern("Elkjøp", r"\bELKJØP\b"),
    StorePattern("IKEA", r"\bIKEA\b"),
    StorePattern("Lidl", r"\bLIDL\b"),
    # Brand names that double as ordinary words or products go last.
    StorePattern("Spar", r"\bSPAR\b"),
    StorePattern("Kiwi", r"\bKIWI\b"),
    StorePattern("XXL", r"\bXXL[ \t]+Sport\b"),
    StorePattern(
        "Coop Norge",
        r"\bCoop[ \t]+(?:Norge|Øst|Nordvest|Innlandet|Midt-Norge)\b",
        role="holding",
        subsidiaries=(rf"\b(?:Coop[ \t]+)?{_COOP_BRANDS}\b",),
    ),
    StorePattern(
        "NorgesGruppen",
        r"\bNorges[ \t]*Gruppen\b",
        role="holding",
        subsidiaries=(
            r"\bKIWI\b",
            r"\bMENY\b",
            r"\b(?:EURO)?SPAR\b",
            r"\bJOKER\b",
            r"\bN[æa]rbutikken\b",
            r"\bKjøpmannshuset\b",
        ),
    ),
    StorePattern(
        "Reitan",
        r"\bReitan(?:gruppen|[ \t]+Retail|[ \t]+Convenience)?\b",
        role="holding",
        subsidiaries=(r"\bREMA\b(?:[ \t]*1000)?", r"\bNARVESEN\b", r"\b7-ELEVEN\b"),
    ),
)
