# fieldmap/validation/__init__.py
from __future__ import annotations
from .engine import MappingValidationEngine, ValidationPass
from .rules import CONSTRAINT_RULES, ConstraintRule
from .validator import FieldCatalog, summarize_results, validate_all, validate_mapping

__all__ = [
    "CONSTRAINT_RULES",
    "ConstraintRule",
    "FieldCatalog",
    "MappingValidationEngine",
    "ValidationPass",
    "summarize_results",
    "validate_all",
    "validate_mapping",
]
