import json
import os
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple

from dotenv import dotenv_values

from .domain.category import DEFAULT_CATEGORY_MAP
from .domain.patterns import CURRENCY_CODES, STORE_PATTERNS, ConfigError, StorePattern
from .logging import get_logger
from .paths import find_upwards

log = get_logger("config")


@dataclass(frozen=True)
class ExtractorConfig:
    """Tunables and pattern tables used by :func:`extract_fields`."""

    default_currency: str = "NOK"
    currencies: Tuple[str, ...] = CURRENCY_CODES
    total_ceiling: Decimal = Decimal("1000000")
    merchant_max_length: int = 60
    org_id_lookback: int = 3
    holding_window: int = 400
    store_patterns: Tuple[StorePattern, ...] = STORE_PATTERNS
    category_map: Dict[str, Tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_CATEGORY_MAP)
    )


DEFAULT_CONFIG = ExtractorConfig()


def _read_dotenv(dotenv_dir: str) -> Dict[str, str]:
    """Return key/value pairs from the nearest .env; does not mutate environment."""
    path = find_upwards(dotenv_dir, ".env")
    if not path:
        log.debug(f"No .env found starting from: {os.path.abspath(dotenv_dir)}")
        return {}
    env = {k: v for k, v in dotenv_values(path).items() if v is not None}
    log.debug(f"Loaded {len(env)} key(s) from .env at {path}")
    return env


def _setting(env: Dict[str, str], key: str) -> Optional[str]:
    v = os.environ.get(key) or env.get(key)
    return v.strip() if v else None


def _read_json(start_dir: str, filename: str) -> Optional[object]:
    path = find_upwards(start_dir, filename)
    if not path:
        log.debug(f"No {filename} found; using built-in defaults")
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        log.warning(f"Failed to read {filename}: {e}")
        return None
    log.info(f"Loaded {filename} from {path}")
    return data


def load_store_patterns(start_dir: str) -> List[StorePattern]:
    """Read extra stores from store_patterns.json.

    Expected shape: a list of objects with ``name``, ``pattern`` and optional
    ``role`` ("store"/"holding") and ``subsidiaries`` (list of patterns).
    Invalid entries are logged and skipped.
    """
    data = _read_json(start_dir, "store_patterns.json")
    if data is None:
        return []
    if not isinstance(data, list):
        log.warning("store_patterns.json must contain a list; ignoring")
        return []
    out: List[StorePattern] = []
    for idx, entry in enumerate(data):
        if not isinstance(entry, dict) or not entry.get("pattern"):
            log.warning(f"store_patterns.json entry {idx} has no pattern; skipped")
            continue
        try:
            out.append(
                StorePattern(
                    name=str(entry.get("name") or entry["pattern"]),
                    pattern=str(entry["pattern"]),
                    role=str(entry.get("role") or "store"),
                    subsidiaries=tuple(str(s) for s in entry.get("subsidiaries") or ()),
                )
            )
        except ConfigError as e:
            log.warning(f"store_patterns.json entry {idx} skipped: {e}")
    return out


def load_category_map(start_dir: str) -> Dict[str, Tuple[str, ...]]:
    """Read category_map.json: ``{keyword: label}`` or ``{label: [keywords]}``."""
    data = _read_json(start_dir, "category_map.json")
    if not isinstance(data, dict):
        return {}
    out: Dict[str, List[str]] = {}
    for k, v in data.items():
        if isinstance(v, list):
            out.setdefault(str(k), []).extend(str(x).lower() for x in v)
        else:
            out.setdefault(str(v), []).append(str(k).lower())
    return {label: tuple(kws) for label, kws in out.items()}


def load_config(start_dir: str = ".") -> ExtractorConfig:
    """Build an ExtractorConfig from env, .env and optional JSON files.

    Never raises: bad values are logged and the defaults kept.
    """
    env = _read_dotenv(start_dir)
    cfg = DEFAULT_CONFIG

    currency = _setting(env, "RECEIPT_DEFAULT_CURRENCY")
    if currency:
        if currency.upper() in cfg.currencies:
            cfg = replace(cfg, default_currency=currency.upper())
        else:
            log.warning(f"RECEIPT_DEFAULT_CURRENCY={currency} is not supported; keeping {cfg.default_currency}")

    ceiling = _setting(env, "RECEIPT_TOTAL_CEILING")
    if ceiling:
        try:
            value = Decimal(ceiling)
        except InvalidOperation:
            value = Decimal(0)
        # The ceiling may only be lowered; amounts of a million or more are never totals.
        if value.is_finite() and 0 < value <= DEFAULT_CONFIG.total_ceiling:
            cfg = replace(cfg, total_ceiling=value)
        else:
            log.warning(
                f"RECEIPT_TOTAL_CEILING={ceiling} is not a positive number up to "
                f"{DEFAULT_CONFIG.total_ceiling}; ignored"
            )

    extra_stores = load_store_patterns(start_dir)
    if extra_stores:
        cfg = replace(cfg, store_patterns=cfg.store_patterns + tuple(extra_stores))

    categories = load_category_map(start_dir)
    if categories:
        merged = dict(cfg.category_map)
        for label, kws in categories.items():
            merged[label] = tuple(merged.get(label, ())) + kws
        cfg = replace(cfg, category_map=merged)
    return cfg
