# fieldmap/schemaloader.py
from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import yaml
from fieldmap import logging as slog
from fieldmap.compatibility import (
    CompatibilityPolicy,
    OverridePolicy,
    OverrideRule,
    get as get_policy,
    resolve_policy,
)
from fieldmap.interfaces import CompatibilityLevel, DatabaseColumn, ExtractionOptions, TargetSchema

_SUPPORTED_SCHEMA_VERSIONS = {"0.1"}
_EXTRACTION_KEYS = {"max_depth", "include_null_values", "array_index_limit"}
_LEVELS = {lvl.value for lvl in CompatibilityLevel}

_DEFAULTS: Dict[str, Any] = {
    "extraction": {"max_depth": 10, "include_null_values": False, "array_index_limit": 5},
    "validation": {"policy": "default"},
}

def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge dicts with 'explicit null clears default' semantics."""
    out = deepcopy(base) if base else {}
    for k, v in (override or {}).items():
        if v is None:
            out[k] = None
        elif isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


@dataclass(frozen=True)
class LoadedConfig:
    options: ExtractionOptions
    schema: TargetSchema
    policy_name: str = "default"
    overrides: Tuple[OverrideRule, ...] = ()
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


class SchemaLoader:
    """
    Loads a YAML target-schema/config file:
      schema_version: "0.1"
      defaults:
        extraction: { max_depth, include_null_values, array_index_limit }
        validation: { policy }
      tables:
        <table>:
          columns:
            <column>: "<sql type>" | { type, nullable?, constraints? }
      compatibility:
        overrides: [ { source, target, level, suggestion? }, ... ]

    Notes:
      - A column given as a plain string is nullable with no constraints.
      - 'PRIMARY KEY' and 'NOT NULL' constraints force nullable: false.
      - In non-strict mode recoverable problems are logged and the offending
        entry is skipped; structural problems always raise ValueError.
    """

    def __init__(self, yaml_path: str, *, strict: bool = True):
        self.yaml_path = yaml_path
        self.strict = strict

    def _warn_or_raise(self, msg: str, *, fatal: bool = False) -> None:
        if fatal or self.strict:
            slog.log_err(msg)
            raise ValueError(msg)
        slog.log_warn(msg)

    def _normalize_extraction(self, raw: Any) -> ExtractionOptions:
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            self._warn_or_raise("defaults.extraction must be a map.", fatal=True)
        merged = _deep_merge(_DEFAULTS["extraction"], raw)

        for key in sorted(set(merged) - _EXTRACTION_KEYS):
            self._warn_or_raise(f"defaults.extraction: unknown key '{key}' ignored.", fatal=False)

        kwargs: Dict[str, Any] = {}
        for key in ("max_depth", "array_index_limit"):
            v = merged.get(key)
            if v is None:
                v = _DEFAULTS["extraction"][key]
            if isinstance(v, bool) or not isinstance(v, int) or v < 0:
                self._warn_or_raise(f"defaults.extraction.{key} must be a non-negative integer, got {v!r}.",
                                    fatal=True)
            kwargs[key] = v
        kwargs["include_null_values"] = bool(merged.get("include_null_values") or False)
        return ExtractionOptions(**kwargs)

    def _normalize_column(self, table: str, name: str, cdef: Any) -> Optional[DatabaseColumn]:
        if isinstance(cdef, str):
            if not cdef.strip():
                self._warn_or_raise(f"Table '{table}': column '{name}' has an empty type.", fatal=False)
                return None
            return DatabaseColumn(name=str(name), type=cdef.strip())

        if not isinstance(cdef, dict):
            self._warn_or_raise(f"Table '{table}': column '{name}' must be a string or map.", fatal=True)

        ctype = str(cdef.get("type") or "").strip()
        if not ctype:
            self._warn_or_raise(f"Table '{table}': column '{name}' requires 'type'.", fatal=True)

        raw_constraints = cdef.get("constraints") or []
        if isinstance(raw_constraints, str):
            raw_constraints = [x for x in raw_constraints.split(",")]
        if not isinstance(raw_constraints, list):
            self._warn_or_raise(f"Table '{table}': column '{name}' constraints must be a list.", fatal=True)
        constraints = tuple(str(x).strip().upper() for x in raw_constraints if str(x).strip())

        nullable = bool(cdef.get("nullable", True))
        if nullable and ("PRIMARY KEY" in constraints or "NOT NULL" in constraints):
            if "nullable" in cdef:
                self._warn_or_raise(
                    f"Table '{table}': column '{name}' is declared nullable but constrained {list(constraints)}; "
                    f"treating it as NOT NULL.",
                    fatal=False,
                )
            nullable = False

        return DatabaseColumn(name=str(name), type=ctype, nullable=nullable, constraints=constraints)

    def _normalize_tables(self, raw: Any) -> TargetSchema:
        if not isinstance(raw, dict) or not raw:
            self._warn_or_raise("No tables defined.", fatal=True)

        tables: Dict[str, Tuple[DatabaseColumn, ...]] = {}
        for table_name, table_cfg in raw.items():
            if not isinstance(table_cfg, dict):
                self._warn_or_raise(f"Table '{table_name}' must be a mapping.", fatal=True)
            columns_raw = table_cfg.get("columns")
            if not isinstance(columns_raw, dict) or not columns_raw:
                self._warn_or_raise(f"Table '{table_name}': columns must be a non-empty map.", fatal=True)

            cols: List[DatabaseColumn] = []
            for cname, cdef in columns_raw.items():
                col = self._normalize_column(str(table_name), str(cname), cdef)
                if col is not None:
                    cols.append(col)
            tables[str(table_name)] = tuple(cols)
        return TargetSchema(tables)

    def _normalize_overrides(self, raw: Any) -> Tuple[OverrideRule, ...]:
        if raw is None:
            return ()
        if isinstance(raw, dict):
            raw = raw.get("overrides") or []
        if not isinstance(raw, list):
            self._warn_or_raise("compatibility.overrides must be a list.", fatal=True)

        rules: List[OverrideRule] = []
        for idx, item in enumerate(raw):
            if not isinstance(item, dict):
                self._warn_or_raise(f"compatibility.overrides[{idx}] must be a map.", fatal=True)
            source = str(item.get("source") or "").strip()
            target = str(item.get("target") or "").strip()
            level = str(item.get("level") or "").strip().lower()
            if not source or not target:
                self._warn_or_raise(f"compatibility.overrides[{idx}] needs 'source' and 'target'.", fatal=False)
                continue
            if level not in _LEVELS:
                self._warn_or_raise(
                    f"compatibility.overrides[{idx}]: level must be one of {sorted(_LEVELS)}, got '{level}'.",
                    fatal=False,
                )
                continue
            rules.append(OverrideRule(source, target, CompatibilityLevel(level), str(item.get("suggestion") or "")))
        return tuple(rules)

    def load(self) -> LoadedConfig:
        with open(self.yaml_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return self.load_dict(raw)

    def load_dict(self, raw: Dict[str, Any]) -> LoadedConfig:
        if not isinstance(raw, dict):
            self._warn_or_raise("Config root must be a mapping.", fatal=True)

        version = str(raw.get("schema_version", "")).strip()
        if version not in _SUPPORTED_SCHEMA_VERSIONS:
            self._warn_or_raise(
                f"Unsupported or missing schema_version '{version}'. Supported: {sorted(_SUPPORTED_SCHEMA_VERSIONS)}",
                fatal=True,
            )

        defaults = raw.get("defaults") or {}
        if not isinstance(defaults, dict):
            self._warn_or_raise("defaults must be a mapping.", fatal=True)

        options = self._normalize_extraction(defaults.get("extraction"))

        validation = _deep_merge(_DEFAULTS["validation"], defaults.get("validation") or {})
        policy_name = str(validation.get("policy") or "default").strip().lower()
        if get_policy(policy_name) is None:
            self._warn_or_raise(f"Unknown compatibility policy '{policy_name}'; using 'default'.", fatal=False)
            policy_name = "default"

        schema = self._normalize_tables(raw.get("tables"))
        overrides = self._normalize_overrides(raw.get("compatibility"))
        if overrides and policy_name == "default":
            policy_name = "override"

        return LoadedConfig(options=options, schema=schema, policy_name=policy_name,
                            overrides=overrides, raw=raw)


def build_policy(config: LoadedConfig) -> CompatibilityPolicy:
    """Instantiate the configured policy, handing host overrides to the override policy."""
    if config.policy_name == "override":
        return OverridePolicy(config.overrides)
    return resolve_policy(config.policy_name)
