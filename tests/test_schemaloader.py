# tests/test_schemaloader.py
from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Callable, Dict, List
import pytest

from fieldmap.compatibility import DefaultPolicy, OverridePolicy
from fieldmap.interfaces import ColumnRef, CompatibilityLevel, ExtractionOptions
from fieldmap.schemaloader import SchemaLoader, build_policy
from utility import examples_dir, write_yaml

BASE: Dict[str, Any] = {
    "schema_version": "0.1",
    "tables": {
        "users": {
            "columns": {
                "id": {"type": "int", "constraints": ["primary key"]},
                "email": "varchar(255)",
            }
        }
    },
}


# Standardized assertion message prefix for config tests.
def _msg(label: str, text: str) -> str:
    return f"[CONFIG][{label}] {text}"


def _with(**changes: Any) -> Dict[str, Any]:
    cfg = deepcopy(BASE)
    cfg.update(changes)
    return cfg


# The shipped example config loads with every table and the override rule.
def test_example_config_loads():
    cfg = SchemaLoader(str(examples_dir() / "users_api.yml")).load()
    assert set(cfg.schema.tables) == {"users", "orders"}, _msg("example", f"tables {list(cfg.schema.tables)}")
    assert cfg.policy_name == "override" and len(cfg.overrides) == 1
    assert cfg.options == ExtractionOptions()
    assert isinstance(build_policy(cfg), OverridePolicy)


# Minimal config: default options, shorthand columns, constraint normalization.
def test_minimal_config(tmp_path):
    cfg = SchemaLoader(str(write_yaml(tmp_path, "c.yml", BASE))).load()
    assert cfg.options == ExtractionOptions()
    id_col = cfg.schema.find_column(ColumnRef("id", "users"))
    assert id_col.constraints == ("PRIMARY KEY",) and id_col.nullable is False, _msg("minimal", "PK forces NOT NULL")
    email = cfg.schema.find_column(ColumnRef("email"))
    assert (email.type, email.nullable, email.constraints) == ("varchar(255)", True, ())
    assert cfg.policy_name == "default" and isinstance(build_policy(cfg), DefaultPolicy)


# Extraction defaults merge with the built-ins; explicit null falls back to the default.
def test_extraction_defaults_merge(tmp_path):
    raw = _with(defaults={"extraction": {"max_depth": 3, "array_index_limit": None, "include_null_values": True}})
    cfg = SchemaLoader(str(write_yaml(tmp_path, "c.yml", raw))).load()
    assert cfg.options == ExtractionOptions(max_depth=3, array_index_limit=5, include_null_values=True)


# Overrides parse into rules with levels; the policy switches to 'override'.
def test_overrides(tmp_path):
    raw = _with(compatibility={"overrides": [
        {"source": "string", "target": "uuid", "level": "Compatible", "suggestion": "check format"},
    ]})
    cfg = SchemaLoader(str(write_yaml(tmp_path, "c.yml", raw))).load()
    rule = cfg.overrides[0]
    assert (rule.source, rule.target, rule.level, rule.suggestion) == \
        ("string", "uuid", CompatibilityLevel.COMPATIBLE, "check format")
    assert build_policy(cfg).classify("string", "uuid").level is CompatibilityLevel.COMPATIBLE


@dataclass(frozen=True)
class BadCase:
    label: str
    make: Callable[[], Dict[str, Any]]


BAD_CASES: List[BadCase] = [
    BadCase("wrong version", lambda: _with(schema_version="9.9")),
    BadCase("no tables", lambda: _with(tables={})),
    BadCase("columns not a map", lambda: _with(tables={"t": {"columns": ["a"]}})),
    BadCase("column without type", lambda: _with(tables={"t": {"columns": {"a": {"nullable": True}}}})),
    BadCase("negative depth", lambda: _with(defaults={"extraction": {"max_depth": -1}})),
    BadCase("depth not int", lambda: _with(defaults={"extraction": {"max_depth": "deep"}})),
    BadCase("bad override level", lambda: _with(compatibility={"overrides": [
        {"source": "string", "target": "uuid", "level": "maybe"}]})),
    BadCase("unknown policy", lambda: _with(defaults={"validation": {"policy": "psychic"}})),
    BadCase("unknown extraction key", lambda: _with(defaults={"extraction": {"depth": 3}})),
]


# Strict mode raises ValueError for every malformed config.
@pytest.mark.parametrize("case", BAD_CASES, ids=[c.label for c in BAD_CASES])
def test_strict_rejects(case: BadCase, tmp_path):
    path = write_yaml(tmp_path, "bad.yml", case.make())
    with pytest.raises(ValueError):
        SchemaLoader(str(path), strict=True).load()


# Lax mode skips recoverable problems (unknown policy, bad override) and keeps loading.
def test_lax_mode_recovers(tmp_path):
    raw = _with(
        defaults={"validation": {"policy": "psychic"}},
        compatibility={"overrides": [{"source": "string", "target": "uuid", "level": "maybe"}]},
    )
    cfg = SchemaLoader(str(write_yaml(tmp_path, "c.yml", raw)), strict=False).load()
    assert cfg.policy_name == "default" and cfg.overrides == (), _msg("lax", "bad entries skipped")


# Lax mode still rejects structural problems.
def test_lax_mode_still_rejects_structure(tmp_path):
    with pytest.raises(ValueError):
        SchemaLoader(str(write_yaml(tmp_path, "c.yml", _with(tables={}))), strict=False).load()


# Declaring a PRIMARY KEY column nullable is corrected to NOT NULL in lax mode.
def test_nullable_primary_key_corrected(tmp_path):
    raw = _with(tables={"t": {"columns": {"id": {"type": "int", "nullable": True, "constraints": "PRIMARY KEY"}}}})
    cfg = SchemaLoader(str(write_yaml(tmp_path, "c.yml", raw)), strict=False).load()
    assert cfg.schema.find_column(ColumnRef("id", "t")).nullable is False
