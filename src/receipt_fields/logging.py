import logging
import os
from typing import Optional, Union

ROOT_LOGGER = "receipt_fields"

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def _coerce_level(value: Optional[Union[str, int]]) -> int:
    if isinstance(value, str):
        return _LEVELS.get(value.upper().strip(), logging.INFO)
    if isinstance(value, int):
        return value
    return logging.INFO


def _package_logger() -> logging.Logger:
    """Attach handlers to the ``receipt_fields`` logger exactly once.

    Module loggers are its children and carry no handlers of their own, so
    one LOG_LEVEL and one LOG_FILE govern the whole package.
    """
    root = logging.getLogger(ROOT_LOGGER)
    if getattr(root, "_receipt_fields_configured", False):
        return root

    level = _coerce_level(os.environ.get("LOG_LEVEL", "INFO"))
    root.setLevel(level)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    root.addHandler(stream)

    log_file = os.environ.get("LOG_FILE")
    if log_file:
        try:
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setFormatter(formatter)
            root.addHandler(fh)
        except OSError:
            root.warning("LOG_FILE could not be opened; continuing without file logging")

    # Library output stays out of the host application's root logger.
    root.propagate = False
    setattr(root, "_receipt_fields_configured", True)
    return root


def get_logger(name: str = "") -> logging.Logger:
    """Return ``receipt_fields.<name>``, logging to stderr via the package logger.

    Honors LOG_LEVEL (default INFO) and LOG_FILE (optional path).
    """
    root = _package_logger()
    return root.getChild(name) if name else root


def set_level(level: Union[str, int]) -> None:
    """Change the level of every receipt_fields logger at once (CLI --verbose)."""
    _package_logger().setLevel(_coerce_level(level))
