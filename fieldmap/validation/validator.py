# fieldmap/validation/validator.py
from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence

from fieldmap.compatibility import CompatibilityPolicy, classify
from fieldmap.interfaces import (
    CompatibilityLevel,
    Field,
    FieldMapping,
    FieldRef,
    TargetSchema,
    ValidationResult,
    ValidationStatus,
    ValidationSummary,
)
from fieldmap.query import flatten
from .rules import apply_rules


class FieldCatalog:
    """Read-only lookup over one field tree: by path first, by name as fallback."""

    def __init__(self, fields: Sequence[Field]):
        self.fields = tuple(fields)
        self._by_path: Dict[str, Field] = {}
        self._by_name: Dict[str, Field] = {}
        for f in flatten(self.fields):
            self._by_path.setdefault(f.path, f)
            self._by_name.setdefault(f.name, f)

    def find(self, ref: FieldRef) -> Optional[Field]:
        if ref.path:
            return self._by_path.get(ref.path)
        if ref.name:
            return self._by_name.get(ref.name)
        return None

    def __len__(self) -> int:
        return len(self._by_path)


def validate_mapping(mapping: FieldMapping, catalog: FieldCatalog, schema: TargetSchema,
                     policy: Optional[CompatibilityPolicy] = None) -> ValidationResult:
    source = catalog.find(mapping.source_field)
    column = schema.find_column(mapping.target_field)

    missing: List[str] = []
    if source is None:
        missing.append(mapping.source_field.label)
    if column is None:
        missing.append(mapping.target_field.label)
    if missing:
        return ValidationResult(
            mapping=mapping,
            missing_fields=tuple(missing),
            suggestions=("Re-map to a field and column that still exist",),
        )

    compat = classify(source.type, column.type, policy)
    mismatches: List[str] = []
    if compat.level is CompatibilityLevel.ERROR:
        mismatches.append(f"Type incompatibility: {source.type} → {column.type}")
    elif compat.level is CompatibilityLevel.WARNING:
        mismatches.append(f"Type conversion warning: {source.type} → {column.type}")

    issues, rule_suggestions = apply_rules(source, column)
    return ValidationResult(
        mapping=mapping,
        type_mismatches=tuple(mismatches),
        constraint_issues=tuple((CompatibilityLevel(sev), msg) for sev, msg in issues),
        suggestions=tuple(dict.fromkeys(list(compat.suggestions) + rule_suggestions)),
        compatibility=compat,
    )


def validate_all(mappings: Iterable[FieldMapping], fields: Sequence[Field], schema: TargetSchema,
                 policy: Optional[CompatibilityPolicy] = None) -> List[ValidationResult]:
    catalog = FieldCatalog(fields)
    return [validate_mapping(m, catalog, schema, policy) for m in mappings]


def summarize_results(results: Sequence[ValidationResult]) -> ValidationSummary:
    """
    Counts per status plus an overall verdict:
      - 'error'   if any mapping is in error or references something missing
      - 'warning' if any mapping only has warnings
      - 'valid'   otherwise (including an empty mapping set)
    """
    counts = {s.value: 0 for s in ValidationStatus}
    errors: List[str] = []
    warnings: List[str] = []
    suggestions: List[str] = []

    for r in results:
        counts[r.status.value] += 1
        for name in r.missing_fields:
            errors.append(f"[{r.mapping.id}] Missing field: {name}")
        for msg in r.type_mismatches:
            if r.compatibility is not None and r.compatibility.level is CompatibilityLevel.ERROR:
                errors.append(f"[{r.mapping.id}] {msg}")
            else:
                warnings.append(f"[{r.mapping.id}] {msg}")
        for level, msg in r.constraint_issues:
            (errors if level is CompatibilityLevel.ERROR else warnings).append(f"[{r.mapping.id}] {msg}")
        for s in r.suggestions:
            if s not in suggestions:
                suggestions.append(s)

    if counts[ValidationStatus.ERROR.value] or counts[ValidationStatus.MISSING.value]:
        status = "error"
    elif counts[ValidationStatus.WARNING.value]:
        status = "warning"
    else:
        status = "valid"

    return ValidationSummary(
        status=status,
        total=len(results),
        counts=counts,
        errors=tuple(errors),
        warnings=tuple(warnings),
        suggestions=tuple(suggestions),
    )
