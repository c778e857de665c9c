# fieldmap/logging.py
from __future__ import annotations
import logging as _logging
import os
import sys
from typing import Iterable, Optional

_ANSI = {
    "reset": "\x1b[0m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "red": "\x1b[31m",
    "cyan": "\x1b[36m",
    "gray": "\x1b[90m",
}

# validation status / overall state -> (marker, colour)
_STATUS_STYLE = {
    "compatible": ("✓", "green"),
    "valid": ("✓", "green"),
    "warning": ("⚠", "yellow"),
    "error": ("✖", "red"),
    "missing": ("?", "gray"),
}

_COLOR_ENABLED: bool = False
_LOGGER = _logging.getLogger("fieldmap")


def _supports_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty() and (os.environ.get("TERM") not in (None, "dumb"))


def c(text: str, color: str) -> str:
    if not _COLOR_ENABLED:
        return text
    return f"{_ANSI.get(color, '')}{text}{_ANSI['reset']}"


def setup_logging(verbosity: int = 0, log_file: Optional[str] = None) -> None:
    """
    Configure the 'fieldmap' logger. Verbosity: 0→WARNING, 1→INFO, 2+→DEBUG.

    The console gets bare messages; the optional log file always records at
    DEBUG with timestamps so a quiet CLI run still leaves a full trace.
    """
    global _COLOR_ENABLED
    _COLOR_ENABLED = _supports_color()

    level = _logging.WARNING
    if verbosity >= 2:
        level = _logging.DEBUG
    elif verbosity == 1:
        level = _logging.INFO

    _LOGGER.handlers.clear()

    sh = _logging.StreamHandler(stream=sys.stdout)
    sh.setLevel(level)
    sh.setFormatter(_logging.Formatter("%(message)s"))
    _LOGGER.addHandler(sh)

    if log_file:
        fh = _logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(_logging.DEBUG)
        fh.setFormatter(_logging.Formatter("%(asctime)s %(levelname)-7s %(message)s"))
        _LOGGER.addHandler(fh)
        level = _logging.DEBUG

    _LOGGER.setLevel(level)


def log_info(msg: str) -> None:
    _LOGGER.info(msg)


def log_debug(msg: str) -> None:
    _LOGGER.debug(msg)


def log_warn(msg: str) -> None:
    _LOGGER.warning(f"{c('⚠', 'yellow')} {msg}")


def log_err(msg: str) -> None:
    _LOGGER.error(f"{c('✖', 'red')} {msg}")


def log_ok(msg: str) -> None:
    _LOGGER.info(f"{c('✓', 'green')} {msg}")


def log_step(label: str, value: str = "") -> None:
    arrow = c("→", "cyan")
    gray = c(value, "gray") if value else ""
    _LOGGER.info(f"{arrow} {label}{(' ' + gray) if gray else ''}")


def log_status(status: str, msg: str) -> None:
    """One mapping or run line, marked and coloured by its validation status."""
    marker, color = _STATUS_STYLE.get(str(status), ("•", "gray"))
    _LOGGER.info(f"{c(marker, color)} {msg} {c('[' + str(status) + ']', color)}")


def log_diagnostics(errors: Iterable[str], warnings: Iterable[str]) -> int:
    """Log extraction diagnostics (errors first); returns how many were logged."""
    n = 0
    for e in errors:
        log_err(e)
        n += 1
    for w in warnings:
        log_warn(w)
        n += 1
    return n
