from typing import Dict, List, Mapping, Optional, Sequence, Tuple
import re
import unicodedata

from ..logging import get_logger

LOG = get_logger("category")

DEFAULT_CATEGORY_MAP: Dict[str, Tuple[str, ...]] = {
    "Groceries": ("grocery", "supermarket", "coop", "rema", "kiwi", "ica", "spar", "meny", "joker", "bunnpris"),
    "Utilities": ("electric", "power", "utility", "strom", "strøm", "elvia"),
    "Housing": ("water", "rent", "husleie"),
    "Internet": ("internet", "fiber", "broadband", "wifi", "telenor"),
    "Mobile": ("mobile", "phone", "telia"),
    "Dining": ("restaurant", "dining", "cafe", "kafe", "coffee", "espresso"),
    "Transport": ("fuel", "gas", "diesel", "bensin", "circle k", "esso"),
}

_LEGAL_TOKENS = (
    "norge as",
    "norway as",
    "asa",
    "as",
    "sa",
    "ans",
    "da",
    "enk",
    "ab",
    "aps",
    "a s",
    "ltd",
    "gmbh",
    "inc",
)


def _only_letters_digits_and_spaces(s: str) -> str:
    kept: List[str] = []
    for ch in (s or ""):
        if ch.isalnum() or ch.isspace():
            kept.append(ch)
        else:
            kept.append(" ")
    out = "".join(kept)
    return re.sub(r"\s+", " ", out).strip()


def _remove_legal_tokens(s: str) -> str:
    if not s:
        return s
    out = f" {s} "
    for t in _LEGAL_TOKENS:
        pat = f" {t} "
        if pat in out:
            out = out.replace(pat, " ")
    return re.sub(r"\s+", " ", out).strip()


def normalize_merchant_name(name: str) -> str:
    """Reduce a merchant name to a comparable key.

    NFC-normalizes, lowercases, drops punctuation and legal-form suffixes
    ("AS", "ASA", "SA", ...). Digits are kept so "REMA 1000" stays distinct.
    """
    raw = (name or "").replace("\u00A0", " ").strip()
    nfc = unicodedata.normalize("NFC", raw)
    lowered = nfc.lower()
    cleaned = _remove_legal_tokens(_only_letters_digits_and_spaces(lowered))
    LOG.debug(f"raw=\"{raw}\" | cleaned=\"{cleaned}\"")
    return cleaned


def _levenshtein(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    la, lb = len(a), len(b)
    if la > lb:
        a, b = b, a
        la, lb = lb, la
    prev = list(range(la + 1))
    for j in range(1, lb + 1):
        cur = [j] + [0] * la
        bj = b[j - 1]
        for i in range(1, la + 1):
            cost = 0 if a[i - 1] == bj else 1
            cur[i] = min(cur[i - 1] + 1, prev[i] + 1, prev[i - 1] + cost)
        prev = cur
    return prev[la]


def _best_substring_key(norm_text: str, keys: Sequence[str]) -> Optional[str]:
    if not norm_text or not keys:
        return None
    best: Tuple[int, Optional[str]] = (0, None)
    padded = f" {norm_text} "
    for k in keys:
        if not k:
            continue
        if len(k) < 3:
            ok = norm_text.startswith(k)
        else:
            # whole words only, so "ica" does not hit "musical"
            ok = f" {k} " in padded or norm_text.startswith(k)
        if ok and len(k) > best[0]:
            best = (len(k), k)
    return best[1]


def _contains_word(text: str, keyword: str) -> bool:
    return re.search(rf"(?<!\w){re.escape(keyword)}(?!\w)", text) is not None


def categorize(text: str, category_map: Mapping[str, Sequence[str]] = DEFAULT_CATEGORY_MAP) -> Optional[str]:
    """Return the first label (map order) with a keyword occurring as a whole word in text."""
    lower = (text or "").lower()
    for label, keywords in category_map.items():
        if any(k and _contains_word(lower, k.lower()) for k in keywords):
            return label
    return None


def resolve_category(
    name: str, category_map: Mapping[str, Sequence[str]] = DEFAULT_CATEGORY_MAP
) -> Tuple[Optional[str], Optional[str]]:
    """Map a merchant name to ``(label, matched_keyword)``.

    Tries, in order: exact normalized match, longest keyword contained in the
    name, then the nearest keyword by edit distance (within 20 % of the
    longer string) to absorb OCR misspellings such as "KIWl".
    """
    norm_name = normalize_merchant_name(name)
    if not norm_name:
        return (None, None)
    norm_index: Dict[str, str] = {}
    for label, keywords in category_map.items():
        for k in keywords:
            nk = normalize_merchant_name(str(k))
            if nk and nk not in norm_index:
                norm_index[nk] = label
    if norm_name in norm_index:
        return (norm_index[norm_name], norm_name)
    best_key = _best_substring_key(norm_name, list(norm_index.keys()))
    if best_key:
        return (norm_index[best_key], best_key)

    best_dist = 10**9
    best_len = 0
    for k in norm_index.keys():
        if len(k) < 3:
            continue
        for candidate in [norm_name, *norm_name.split(" ")]:
            d = _levenshtein(candidate, k)
            if d < best_dist:
                best_dist = d
                best_key = k
                best_len = max(len(k), len(candidate))
    if best_key is not None:
        thr = max(1, round(0.2 * best_len))
        if best_dist <= thr:
            return (norm_index[best_key], best_key)
    return (None, None)
