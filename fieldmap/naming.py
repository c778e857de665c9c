# fieldmap/naming.py
from __future__ import annotations
import re
from typing import Set

_INVALID_CHARS = re.compile(r"[^A-Za-z0-9_]")


def sanitize_name(raw: str) -> str:
    return _INVALID_CHARS.sub("_", str(raw))


class NameDisambiguator:
    """
    Hands out collision-free identifiers for one extraction pass.

    The used-name set spans the whole pass (not one sibling level), so the
    order of unique() calls decides which duplicate gets the suffix.
    """

    def __init__(self) -> None:
        self._used: Set[str] = set()

    def unique(self, raw: str) -> str:
        base = sanitize_name(raw)
        name = base
        counter = 1
        while name in self._used:
            name = f"{base}_{counter}"
            counter += 1
        self._used.add(name)
        return name

    def __contains__(self, name: str) -> bool:
        return name in self._used

    def __len__(self) -> int:
        return len(self._used)
