# fieldmap/validation/rules.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Tuple

from fieldmap.interfaces import NULLISH_TAGS, DatabaseColumn, Field


@dataclass(frozen=True)
class ConstraintRule:
    name: str
    severity: str  # "error" | "warning" | "info"; info only adds a suggestion
    check: Callable[[Field, DatabaseColumn], bool]  # True = rule satisfied
    message: Callable[[Field, DatabaseColumn], str]
    suggestion: str


def _never_null(source: Field, column: DatabaseColumn) -> bool:
    return source.type not in NULLISH_TAGS


CONSTRAINT_RULES: Tuple[ConstraintRule, ...] = (
    ConstraintRule(
        name="not_null_constraint",
        severity="error",
        check=lambda s, c: (c.nullable and not c.has_constraint("NOT NULL")) or _never_null(s, c),
        message=lambda s, c: f"Source field '{s.name}' only carries null but target '{c.name}' requires NOT NULL",
        suggestion="Ensure source data is never null or add null handling",
    ),
    ConstraintRule(
        name="primary_key_constraint",
        severity="error",
        check=lambda s, c: not c.has_constraint("PRIMARY KEY") or _never_null(s, c),
        message=lambda s, c: f"Primary key field '{c.name}' cannot be fed from null source '{s.name}'",
        suggestion="Ensure source field always has a value",
    ),
    ConstraintRule(
        name="unique_constraint",
        severity="info",
        check=lambda s, c: not c.has_constraint("UNIQUE"),
        message=lambda s, c: f"Target field '{c.name}' has UNIQUE constraint",
        suggestion="Ensure source data contains unique values",
    ),
)


def apply_rules(source: Field, column: DatabaseColumn) -> Tuple[List[Tuple[str, str]], List[str]]:
    """Return ([(severity, message)] for failed warning/error rules, suggestions of all failed rules)."""
    issues: List[Tuple[str, str]] = []
    suggestions: List[str] = []
    for rule in CONSTRAINT_RULES:
        if rule.check(source, column):
            continue
        if rule.severity != "info":
            issues.append((rule.severity, rule.message(source, column)))
        suggestions.append(rule.suggestion)
    return issues, suggestions
