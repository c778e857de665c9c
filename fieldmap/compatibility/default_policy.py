# fieldmap/compatibility/default_policy.py
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from fieldmap.interfaces import CompatibilityLevel, CompatibilityResult
from .interface import CompatibilityPolicy, make_result, worst
from .registry import register

COMPATIBLE = CompatibilityLevel.COMPATIBLE
WARNING = CompatibilityLevel.WARNING
ERROR = CompatibilityLevel.ERROR

SCALAR_KINDS = frozenset({"string", "number", "boolean", "temporal", "binary"})
STRUCT_KINDS = frozenset({"object", "array"})

# JSON tags and common SQL column types, by normalized base name.
_KINDS: Dict[str, str] = {}
for _kind, _names in (
    ("string", ("string", "text", "varchar", "nvarchar", "char", "nchar", "longtext", "mediumtext",
                "tinytext", "clob", "nclob", "character varying", "character", "citext", "enum",
                "uuid", "uniqueidentifier", "email", "url")),
    ("number", ("number", "integer", "int", "bigint", "smallint", "tinyint", "mediumint", "serial",
                "bigserial", "decimal", "numeric", "float", "double", "double precision", "real",
                "money", "smallmoney")),
    ("boolean", ("boolean", "bool", "bit")),
    ("temporal", ("date", "datetime", "datetime2", "timestamp", "timestamptz", "time", "timetz",
                  "smalldatetime", "datetimeoffset", "interval")),
    ("json", ("json", "jsonb")),
    ("binary", ("binary", "varbinary", "blob", "longblob", "mediumblob", "tinyblob", "bytea",
                "image", "buffer")),
    ("object", ("object",)),
    ("array", ("array",)),
    ("null", ("null",)),
    ("undefined", ("undefined",)),
):
    for _n in _names:
        _KINDS[_n] = _kind

_TYPE_RE = re.compile(r"^\s*([a-z_][a-z0-9_]*(?:\s+[a-z_][a-z0-9_]*)*)\s*(?:\(([^)]*)\))?")


@dataclass(frozen=True)
class TypeKind:
    kind: str
    base: str
    params: Tuple[int, ...] = ()


def normalize_type(type_name: str) -> TypeKind:
    """
    Reduce a JSON tag or SQL column type to its kind, e.g.
    'VARCHAR(255)' -> TypeKind('string', 'varchar', (255,)),
    'tinyint(1)'   -> TypeKind('boolean', 'tinyint', (1,)).
    """
    t = str(type_name or "").strip().lower()
    m = _TYPE_RE.match(t)
    if not m:
        return TypeKind("unknown", t)

    base = m.group(1)
    params: List[int] = []
    for p in (m.group(2) or "").split(","):
        p = p.strip()
        if p.isdigit():
            params.append(int(p))

    kind = _KINDS.get(base)
    if kind is None:
        # "timestamp with time zone", "int unsigned", ...
        first = base.split()[0]
        kind = _KINDS.get(first, "unknown")
        base = first if kind != "unknown" else base

    if base == "tinyint" and params[:1] == [1]:
        kind = "boolean"
    return TypeKind(kind, base, tuple(params))


# (source kind, target kind) -> (level, detail, suggestions) for cross-kind scalar pairs
_SCALAR_PAIRS: Dict[Tuple[str, str], Tuple[CompatibilityLevel, str, Tuple[str, ...]]] = {
    ("number", "string"): (WARNING, "number will be cast to text", (
        "Cast on insert, e.g. CAST(value AS VARCHAR)",
        "Prefer a numeric column to keep ordering and arithmetic",
    )),
    ("string", "number"): (WARNING, "text must parse as a number", (
        "Validate numeric format before conversion",
        "CAST(value AS NUMERIC) fails on non-numeric text",
    )),
    ("boolean", "string"): (WARNING, "boolean stored as text", (
        "Values will be written as 'true'/'false'",
    )),
    ("string", "boolean"): (WARNING, "text must be a boolean literal", (
        "Normalize values to true/false before insert",
    )),
    ("boolean", "number"): (WARNING, "boolean stored as 1/0", (
        "Values will be written as 1 (true) and 0 (false)",
    )),
    ("number", "boolean"): (WARNING, "number collapsed to a flag", (
        "Non-zero values become true; map to a numeric column to keep the value",
    )),
    ("string", "temporal"): (WARNING, "text must hold a parseable date", (
        "Validate date format before conversion",
        "Ensure source data is in ISO 8601 format (YYYY-MM-DD)",
        "Consider timezone handling for datetime",
    )),
    ("temporal", "string"): (WARNING, "date stored as string", (
        "Date stored as string - consider using proper date type",
    )),
    ("number", "temporal"): (WARNING, "number read as an epoch timestamp", (
        "Confirm the unit (seconds or milliseconds) before conversion",
    )),
    ("temporal", "number"): (WARNING, "date stored as a number", (
        "Convert to an epoch value explicitly",
    )),
    ("string", "binary"): (WARNING, "text will be encoded to bytes", (
        "Decide on the encoding (UTF-8, base64) before insert",
    )),
}


class DefaultPolicy(CompatibilityPolicy):
    """
    Kind-based policy for JSON tags against JSON tags or SQL column types.

    Rules:
      • identical scalar kinds → compatible
      • number/boolean/string/date cross conversions → warning with the implied cast
      • object/array against a scalar (either direction) → error
      • unknown or unsupported type names → error
    """

    def classify(self, source_type: str, target_type: str) -> CompatibilityResult:
        src = normalize_type(source_type)
        tgt = normalize_type(target_type)
        level, detail, suggestions = self._decide(src, tgt)
        level, extra = self._refine(src, tgt, level)
        return make_result(level, str(source_type), str(target_type), list(suggestions) + extra, detail)

    @staticmethod
    def _decide(src: TypeKind, tgt: TypeKind) -> Tuple[CompatibilityLevel, str, Tuple[str, ...]]:
        if tgt.kind == "unknown":
            return ERROR, f"unsupported target type '{tgt.base}'", (
                "Map to a supported column type (varchar, int, decimal, boolean, date, json)",
            )
        if src.kind == "unknown":
            return ERROR, f"unsupported source type '{src.base}'", (
                "Re-extract the source field or map a different field",
            )
        if tgt.kind in ("null", "undefined"):
            return ERROR, "target cannot hold data", ("Map to a concrete column type",)
        if src.kind == "undefined":
            return ERROR, "undefined values cannot be stored", (
                "Drop the field or give it a default value",
            )
        if src.kind == "null":
            return WARNING, "source only carries null", (
                "Map a field that carries values",
                "Make sure the target column is nullable",
            )

        if src.kind in STRUCT_KINDS:
            if tgt.kind == "json":
                return COMPATIBLE, "", (
                    "Use JSON type for structured data",
                    "Consider JSONB for better performance (PostgreSQL)",
                )
            if tgt.kind == src.kind:
                return COMPATIBLE, "", ()
            if tgt.kind in STRUCT_KINDS:
                return ERROR, f"{src.kind} cannot fill an {tgt.kind}", (
                    f"Re-map a sub-field of the {src.kind} instead",
                )
            return ERROR, f"{src.kind} cannot fill a scalar column", (
                f"Flatten the {src.kind} and map its scalar sub-fields individually",
                "Re-map a sub-field instead of the container",
                "Or store it whole in a JSON column",
            )

        if tgt.kind in STRUCT_KINDS:
            return ERROR, f"scalar {src.kind} cannot fill an {tgt.kind}", (
                "Map the containing object or array instead",
                "Or choose a scalar target column",
            )
        if tgt.kind == "json":
            return WARNING, f"{src.kind} stored as a JSON scalar", (
                "Ensure source data is valid JSON or can be serialized",
            )
        if src.kind == tgt.kind:
            return COMPATIBLE, "", ()

        rule = _SCALAR_PAIRS.get((src.kind, tgt.kind))
        if rule is not None:
            return rule
        return ERROR, f"no conversion from {src.kind} to {tgt.kind}", (
            "Consider using a compatible type or add data transformation",
        )

    @staticmethod
    def _refine(src: TypeKind, tgt: TypeKind, level: CompatibilityLevel) -> Tuple[CompatibilityLevel, List[str]]:
        """Size/precision checks that depend on column parameters."""
        extra: List[str] = []
        if level is ERROR:
            return level, extra

        if src.kind == "string" and tgt.kind == "string":
            if tgt.base in ("char", "varchar", "nchar", "nvarchar") and tgt.params[:1] == (1,):
                level = worst(level, WARNING)
                extra.append("Data truncation may occur for strings longer than 1 character")
            elif tgt.base in ("varchar", "nvarchar"):
                if tgt.params and tgt.params[0] < 50:
                    extra.append("Consider increasing VARCHAR length or using TEXT type")
                else:
                    extra.append("Consider VARCHAR length based on expected data size")

        if src.kind == "number" and tgt.kind == "number":
            if tgt.base == "tinyint":
                level = worst(level, WARNING)
                extra.append("Number overflow may occur for values greater than 255")
            elif tgt.base in ("decimal", "numeric"):
                if not tgt.params:
                    extra.append("Specify precision and scale: DECIMAL(10,2) for currency")
                elif tgt.params[0] < 10 or (len(tgt.params) > 1 and tgt.params[1] < 2):
                    extra.append("Consider increasing precision and scale")

        return level, extra


register("default", DefaultPolicy)
