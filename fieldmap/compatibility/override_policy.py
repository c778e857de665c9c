# fieldmap/compatibility/override_policy.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from fieldmap.interfaces import CompatibilityLevel, CompatibilityResult
from .default_policy import DefaultPolicy, normalize_type
from .interface import CompatibilityPolicy, make_result
from .registry import register


@dataclass(frozen=True)
class OverrideRule:
    """
    Host rule consulted before the built-in matrix.

    ``target`` matches either the full lower-cased column type
    ('varchar(36)') or its base name ('varchar'); '*' matches anything.
    """
    source: str
    target: str
    level: CompatibilityLevel
    suggestion: str = ""

    def matches(self, source_type: str, target_type: str) -> bool:
        return _match(self.source, source_type) and _match(self.target, target_type)


def _match(rule_value: str, type_name: str) -> bool:
    want = rule_value.strip().lower()
    if want == "*":
        return True
    have = str(type_name or "").strip().lower()
    return want == have or want == normalize_type(have).base


class OverridePolicy(CompatibilityPolicy):
    """
    First matching host rule wins; otherwise defers to the wrapped policy
    (DefaultPolicy unless given). Rules are held in a tuple, never mutated.
    """

    def __init__(self, rules: Iterable[OverrideRule] = (), base: Optional[CompatibilityPolicy] = None):
        self.rules: Tuple[OverrideRule, ...] = tuple(rules)
        self.base = base or DefaultPolicy()

    def classify(self, source_type: str, target_type: str) -> CompatibilityResult:
        for rule in self.rules:
            if rule.matches(source_type, target_type):
                suggestions = [rule.suggestion] if rule.suggestion else []
                return make_result(rule.level, str(source_type), str(target_type), suggestions, "host rule")
        return self.base.classify(source_type, target_type)


register("override", OverridePolicy)
