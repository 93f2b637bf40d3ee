from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Sequence

from ..config import load_config
from ..domain.normalize import normalize_amount
from ..extraction.fields import extract_fields
from ..logging import get_logger, set_level
from ..paths import expand_abs, fix_windows_path_input

LOG = get_logger("cli-main")


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = expand_abs(fix_windows_path_input(source))
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def _extract(ns: argparse.Namespace) -> int:
    try:
        text = _read_text(ns.source)
    except OSError as e:
        LOG.error(f"Cannot read {ns.source}: {e}")
        return 2
    config = load_config(os.getcwd())
    fields = extract_fields(text, config, with_items=ns.items, with_category=ns.category)
    LOG.info(f"Extracted fields from {ns.source} ({len(text)} chars)")
    print(json.dumps(fields.to_dict(), ensure_ascii=False, indent=2 if ns.pretty else None))
    return 0


def _normalize(ns: argparse.Namespace) -> int:
    for token in ns.tokens:
        value = normalize_amount(token)
        print("null" if value is None else str(value))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="receipt-fields",
        description="Extract merchant, VAT, total and currency from OCR'd receipt text.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log extraction decisions at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_cmd = subparsers.add_parser("extract", help="Extract structured fields from a receipt text file.")
    extract_cmd.add_argument("source", nargs="?", default="-", help="Text file with OCR output ('-' for stdin)")
    extract_cmd.add_argument("--items", action="store_true", help="Also split line items")
    extract_cmd.add_argument("--category", action="store_true", help="Also assign a budget category")
    extract_cmd.add_argument("--pretty", action="store_true", help="Indent the JSON output")
    extract_cmd.set_defaults(handler=_extract)

    normalize_cmd = subparsers.add_parser("normalize", help="Normalize one or more amount tokens.")
    normalize_cmd.add_argument("tokens", nargs="+", help="Tokens such as 1.234,56 or 1,234.56")
    normalize_cmd.set_defaults(handler=_normalize)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    provided = list(argv) if argv is not None else sys.argv[1:]
    LOG.debug(f"CLI invoked with arguments: {provided}")
    args = build_parser().parse_args(provided)
    if args.verbose:
        set_level("DEBUG")
    code = args.handler(args)
    LOG.debug(f"Subcommand '{args.command}' finished with exit code {code}.")
    return code


if __name__ == "__main__":
    sys.exit(main())
