# fieldmap/compatibility/interface.py
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, Iterable

from fieldmap.interfaces import CompatibilityLevel, CompatibilityResult

COLORS: Dict[CompatibilityLevel, str] = {
    CompatibilityLevel.COMPATIBLE: "#4caf50",  # green
    CompatibilityLevel.WARNING: "#ff9800",     # orange
    CompatibilityLevel.ERROR: "#f44336",       # red
}

_ORDER = {
    CompatibilityLevel.COMPATIBLE: 0,
    CompatibilityLevel.WARNING: 1,
    CompatibilityLevel.ERROR: 2,
}


def color_for(level: CompatibilityLevel) -> str:
    return COLORS[level]


def worst(a: CompatibilityLevel, b: CompatibilityLevel) -> CompatibilityLevel:
    return a if _ORDER[a] >= _ORDER[b] else b


def make_result(level: CompatibilityLevel, source_type: str, target_type: str,
                suggestions: Iterable[str] = (), detail: str = "") -> CompatibilityResult:
    if level is CompatibilityLevel.COMPATIBLE:
        message = f"Direct mapping from {source_type} to {target_type}"
    elif level is CompatibilityLevel.WARNING:
        message = f"Compatible with warnings: {source_type} → {target_type}"
    else:
        message = f"Incompatible types: {source_type} → {target_type}"
    if detail:
        message = f"{message} ({detail})"

    seen = []
    for s in suggestions:
        if s and s not in seen:
            seen.append(s)
    return CompatibilityResult(level=level, color=color_for(level), suggestions=tuple(seen), message=message)


class CompatibilityPolicy(ABC):
    """
    Stable policy interface.
    Implementations must be pure functions of the two type strings (no
    mutable state), so a single instance can serve concurrent callers.
    """

    @abstractmethod
    def classify(self, source_type: str, target_type: str) -> CompatibilityResult:
        """Return a verdict for every (source, target) pair; never raise for unknown tags."""
        ...
