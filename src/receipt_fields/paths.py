import os
import re
from typing import Optional

from .logging import get_logger

log = get_logger("paths")


def fix_windows_path_input(p: str) -> str:
    """Repair common Windows path paste issues like "C:Users...".

    - Inserts a backslash after drive letter if missing.
    - Trims surrounding quotes/spaces.
    - Leaves non-Windows platforms untouched.
    """
    s = (p or "").strip().strip('"').strip("'")
    if os.name == "nt" and re.match(r"^[A-Za-z]:(?![\\/])", s):
        fixed = s[:2] + "\\" + s[2:]
        log.debug(f"Repaired Windows path input: '{s}' -> '{fixed}'")
        s = fixed
    return s


def expand_abs(path: str) -> str:
    """Expand env vars and ~ then return absolute path."""
    return os.path.abspath(os.path.expanduser(os.path.expandvars(path or "")))


def find_upwards(start_dir: Optional[str], filename: str) -> Optional[str]:
    """Return first matching file found when walking up from start_dir.

    Running the CLI from a subdirectory still finds repository-level files
    like `.env`, `store_patterns.json` and `category_map.json`.
    """
    d = os.path.abspath(start_dir or ".")
    while True:
        candidate = os.path.join(d, filename)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(d)
        if parent == d:
            return None
        d = parent
