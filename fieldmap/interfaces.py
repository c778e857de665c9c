# fieldmap/interfaces.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple


class TypeTag(str, Enum):
    """Closed set of type tags a JSON value (or a Field) can carry."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    NULL = "null"
    UNDEFINED = "undefined"

    def __str__(self) -> str:
        return self.value


PRIMITIVE_TAGS = frozenset({TypeTag.STRING, TypeTag.NUMBER, TypeTag.BOOLEAN})
NULLISH_TAGS = frozenset({TypeTag.NULL, TypeTag.UNDEFINED})


class CompatibilityLevel(str, Enum):
    COMPATIBLE = "compatible"
    WARNING = "warning"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class ValidationStatus(str, Enum):
    COMPATIBLE = "compatible"
    WARNING = "warning"
    ERROR = "error"
    MISSING = "missing"

    def __str__(self) -> str:
        return self.value


class PassState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    SUPERSEDED = "superseded"

    def __str__(self) -> str:
        return self.value


class _Undefined:
    """Stand-in for a JavaScript-style undefined value."""
    _instance: Optional["_Undefined"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()

TypeDetector = Callable[[Any], Any]


# --------------------------- extraction ---------------------------

@dataclass(frozen=True)
class Field:
    name: str
    type: TypeTag
    path: str
    nested: Tuple["Field", ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "type": str(self.type), "path": self.path}
        if self.nested:
            out["nested"] = [f.to_dict() for f in self.nested]
        return out


@dataclass(frozen=True)
class ExtractionOptions:
    max_depth: int = 10
    include_null_values: bool = False
    array_index_limit: int = 5  # 0 = unlimited
    custom_type_detector: Optional[TypeDetector] = None

    def __post_init__(self) -> None:
        if not isinstance(self.max_depth, int) or self.max_depth < 0:
            raise ValueError(f"max_depth must be a non-negative int, got {self.max_depth!r}")
        if not isinstance(self.array_index_limit, int) or self.array_index_limit < 0:
            raise ValueError(f"array_index_limit must be a non-negative int, got {self.array_index_limit!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "maxDepth": self.max_depth,
            "includeNullValues": self.include_null_values,
            "arrayIndexLimit": self.array_index_limit,
        }


@dataclass(frozen=True)
class Statistics:
    total_fields: int = 0
    max_depth: int = 0
    array_fields: int = 0
    object_fields: int = 0
    primitive_fields: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalFields": self.total_fields,
            "maxDepth": self.max_depth,
            "arrayFields": self.array_fields,
            "objectFields": self.object_fields,
            "primitiveFields": self.primitive_fields,
        }


@dataclass(frozen=True)
class ExtractionResult:
    fields: Tuple[Field, ...] = ()
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    statistics: Statistics = field(default_factory=Statistics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fields": [f.to_dict() for f in self.fields],
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "statistics": self.statistics.to_dict(),
        }


# --------------------------- mapping & schema ---------------------------

@dataclass(frozen=True)
class FieldRef:
    """Reference to a source field; resolved by path, or by name when path is empty."""
    path: str = ""
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.path or self.name or "<unnamed>"


@dataclass(frozen=True)
class ColumnRef:
    column: str
    table: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.table}.{self.column}" if self.table else self.column


@dataclass(frozen=True)
class FieldMapping:
    id: str
    source_field: FieldRef
    target_field: ColumnRef

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sourceField": {"path": self.source_field.path, "name": self.source_field.name},
            "targetField": {"table": self.target_field.table, "column": self.target_field.column},
        }


@dataclass(frozen=True)
class DatabaseColumn:
    name: str
    type: str
    nullable: bool = True
    constraints: Tuple[str, ...] = ()

    def has_constraint(self, constraint: str) -> bool:
        return constraint.upper() in self.constraints


@dataclass(frozen=True)
class TargetSchema:
    tables: Dict[str, Tuple[DatabaseColumn, ...]] = field(default_factory=dict)

    def columns(self) -> Iterator[Tuple[str, DatabaseColumn]]:
        for table, cols in self.tables.items():
            for col in cols:
                yield table, col

    def find_column(self, ref: ColumnRef) -> Optional[DatabaseColumn]:
        """Exact table lookup when the ref names one, otherwise first column with that name."""
        if ref.table is not None:
            for col in self.tables.get(ref.table, ()):
                if col.name == ref.column:
                    return col
            return None
        for _, col in self.columns():
            if col.name == ref.column:
                return col
        return None


# --------------------------- compatibility & validation ---------------------------

@dataclass(frozen=True)
class CompatibilityResult:
    level: CompatibilityLevel
    color: str
    suggestions: Tuple[str, ...] = ()
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": str(self.level),
            "color": self.color,
            "suggestions": list(self.suggestions),
            "message": self.message,
        }


@dataclass(frozen=True)
class ValidationResult:
    mapping: FieldMapping
    missing_fields: Tuple[str, ...] = ()
    type_mismatches: Tuple[str, ...] = ()
    constraint_issues: Tuple[Tuple[CompatibilityLevel, str], ...] = ()
    suggestions: Tuple[str, ...] = ()
    compatibility: Optional[CompatibilityResult] = None

    @property
    def status(self) -> ValidationStatus:
        if self.missing_fields:
            return ValidationStatus.MISSING
        levels = [lvl for lvl, _ in self.constraint_issues]
        if self.compatibility is not None:
            levels.append(self.compatibility.level)
        if CompatibilityLevel.ERROR in levels:
            return ValidationStatus.ERROR
        if CompatibilityLevel.WARNING in levels:
            return ValidationStatus.WARNING
        return ValidationStatus.COMPATIBLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mapping": self.mapping.to_dict(),
            "missingFields": list(self.missing_fields),
            "typeMismatches": list(self.type_mismatches),
            "constraintIssues": [{"level": str(lvl), "message": msg} for lvl, msg in self.constraint_issues],
            "suggestions": list(self.suggestions),
            "compatibility": self.compatibility.to_dict() if self.compatibility else None,
            "status": str(self.status),
        }


@dataclass(frozen=True)
class ValidationSummary:
    status: str = "valid"  # valid | warning | error
    total: int = 0
    counts: Dict[str, int] = field(default_factory=lambda: {s.value: 0 for s in ValidationStatus})
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    suggestions: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "total": self.total,
            "counts": dict(self.counts),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
        }
