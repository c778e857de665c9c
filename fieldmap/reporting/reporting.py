# fieldmap/reporting/reporting.py
from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence

from fieldmap.interfaces import (
    CompatibilityLevel,
    ExtractionResult,
    ValidationResult,
    ValidationStatus,
    ValidationSummary,
)
from fieldmap.compatibility import color_for
from fieldmap.statistics import field_statistics

# --------------------------- ordering ---------------------------

_ORDER = {"valid": 0, "warning": 1, "error": 2}

_STATUS_TO_OVERALL = {
    ValidationStatus.COMPATIBLE: "valid",
    ValidationStatus.WARNING: "warning",
    ValidationStatus.ERROR: "error",
    ValidationStatus.MISSING: "error",
}

# donut colors per mapping status, missing shares the error color
STATUS_COLORS = {
    ValidationStatus.COMPATIBLE.value: color_for(CompatibilityLevel.COMPATIBLE),
    ValidationStatus.WARNING.value: color_for(CompatibilityLevel.WARNING),
    ValidationStatus.ERROR.value: color_for(CompatibilityLevel.ERROR),
    ValidationStatus.MISSING.value: "#9e9e9e",
}


def _max_state(a: str, b: str) -> str:
    return a if _ORDER.get(a, 1) >= _ORDER.get(b, 1) else b


# --------------------------- rows ---------------------------

def _mapping_row(r: ValidationResult) -> Dict[str, Any]:
    status = r.status
    compat = r.compatibility
    return {
        "id": r.mapping.id,
        "source": r.mapping.source_field.label,
        "target": r.mapping.target_field.label,
        "status": status.value,
        "color": STATUS_COLORS[status.value],
        "message": compat.message if compat else "",
        "issues": (
            [f"Missing field: {m}" for m in r.missing_fields]
            + list(r.type_mismatches)
            + [msg for _lvl, msg in r.constraint_issues]
        ),
        "suggestions": list(r.suggestions),
    }


def _extraction_overall(extraction: ExtractionResult) -> str:
    if extraction.errors:
        return "error"
    if extraction.warnings:
        return "warning"
    return "valid"


# --------------------------- main entrypoint ---------------------------

def assemble_report(
    *,
    extraction: ExtractionResult,
    summary: Optional[ValidationSummary] = None,
    results: Sequence[ValidationResult] = (),
    sample_name: str = "sample",
    config_name: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the normalized report JSON used by the HTML layer."""
    summary = summary or ValidationSummary()

    rows: List[Dict[str, Any]] = [_mapping_row(r) for r in results]
    overall = _max_state(_extraction_overall(extraction), summary.status)
    for r in results:
        overall = _max_state(overall, _STATUS_TO_OVERALL[r.status])

    counts = {s.value: 0 for s in ValidationStatus}
    counts.update(summary.counts or {})
    counts["TOTAL"] = summary.total

    return {
        "sample_name": sample_name,
        "config_name": config_name,
        "overall": overall,
        "extraction": {
            "errors": list(extraction.errors),
            "warnings": list(extraction.warnings),
        },
        "statistics": extraction.statistics.to_dict(),
        "field_statistics": field_statistics(extraction.fields),
        "fields": [f.to_dict() for f in extraction.fields],
        "validation": summary.to_dict(),
        "mappings": rows,
        "counts": counts,
        "colors": dict(STATUS_COLORS),
        "meta": {"generated_by": "assemble_report"},
    }
