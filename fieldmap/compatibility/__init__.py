# fieldmap/compatibility/__init__.py
from __future__ import annotations
from typing import List, Optional

from fieldmap.interfaces import CompatibilityLevel, CompatibilityResult
from .default_policy import DefaultPolicy, normalize_type
from .interface import COLORS, CompatibilityPolicy, color_for, make_result
from .override_policy import OverridePolicy, OverrideRule
from .registry import available, get, register

_DEFAULT = DefaultPolicy()

COMMON_TARGET_TYPES = (
    "varchar", "text", "char", "int", "bigint", "smallint", "tinyint", "decimal", "float",
    "boolean", "bit", "date", "datetime", "timestamp", "json", "jsonb", "blob", "uuid",
)


def resolve_policy(name: Optional[str] = None) -> CompatibilityPolicy:
    """Instantiate a registered policy by name; unknown names fall back to 'default'."""
    cls = get(name or "default")
    return cls() if cls is not None else DefaultPolicy()


def classify(source_type: str, target_type: str,
             policy: Optional[CompatibilityPolicy] = None) -> CompatibilityResult:
    """
    Classify a (source type, target type) pair. Total: a failing host policy
    is reported as an error verdict instead of an exception.
    """
    p = policy or _DEFAULT
    try:
        return p.classify(str(source_type), str(target_type))
    except Exception as e:
        return make_result(CompatibilityLevel.ERROR, str(source_type), str(target_type),
                           ["Check the compatibility policy configuration"], f"policy failure: {e}")


def compatible_targets(source_type: str, policy: Optional[CompatibilityPolicy] = None) -> List[str]:
    """Common column types the source maps to without an error verdict."""
    return [t for t in COMMON_TARGET_TYPES
            if classify(source_type, t, policy).level is not CompatibilityLevel.ERROR]


__all__ = [
    "COLORS",
    "COMMON_TARGET_TYPES",
    "CompatibilityPolicy",
    "DefaultPolicy",
    "OverridePolicy",
    "OverrideRule",
    "available",
    "classify",
    "color_for",
    "compatible_targets",
    "get",
    "normalize_type",
    "register",
    "resolve_policy",
]
