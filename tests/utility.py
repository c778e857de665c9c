# tests/utility.py
from __future__ import annotations
import json
import subprocess
import sys
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import yaml

from fieldmap.interfaces import ColumnRef, DatabaseColumn, Field, FieldMapping, FieldRef, TargetSchema
from fieldmap.query import flatten


# -------------------------
# Paths
# -------------------------

# Returns repository root (one level above tests/).
def project_root() -> Path:
    return Path(__file__).resolve().parents[1]


# Builds an absolute path inside the repo from path parts.
def repo_path(*parts: str) -> Path:
    return project_root().joinpath(*parts)


# Returns the examples directory path used for fixtures (data/examples).
def examples_dir() -> Path:
    return repo_path("data", "examples")


# Returns the output directory used by report_html.py (results).
def results_dir() -> Path:
    return repo_path("results")


# Returns the report generator script path (report_html.py in repo root).
def report_html_path() -> Path:
    return repo_path("report_html.py")


# Returns the CLI script path (verify.py in repo root).
def verify_path() -> Path:
    return repo_path("verify.py")


# -------------------------
# Loaders / writers
# -------------------------

# Loads a JSON file into a dict (fails if the root isn't a mapping).
def load_json(path: Path) -> Dict[str, Any]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise AssertionError(f"JSON did not parse into dict: {path}")
    return data


# Dumps a dict as YAML into tmp_path/<name> and returns the path.
def write_yaml(tmp_path: Path, name: str, data: Dict[str, Any]) -> Path:
    p = tmp_path / name
    p.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return p


# Dumps any JSON value into tmp_path/<name> and returns the path.
def write_json(tmp_path: Path, name: str, data: Any) -> Path:
    p = tmp_path / name
    p.write_text(json.dumps(data), encoding="utf-8")
    return p


# Checks whether a dict looks like the report JSON consumed by report_html.py.
def is_report_json(d: Dict[str, Any]) -> bool:
    return (
        isinstance(d.get("overall"), str)
        and isinstance(d.get("mappings"), list)
        and isinstance(d.get("fields"), list)
        and isinstance(d.get("counts"), dict)
    )


# -------------------------
# Field tree helpers
# -------------------------

# Names of every field in pre-order.
def all_names(fields: Sequence[Field]) -> List[str]:
    return [f.name for f in flatten(fields)]


# Paths of every field in pre-order.
def all_paths(fields: Sequence[Field]) -> List[str]:
    return [f.path for f in flatten(fields)]


# Top-level field by name (fails loudly when absent).
def field_named(fields: Sequence[Field], name: str) -> Field:
    for f in fields:
        if f.name == name:
            return f
    raise AssertionError(f"No field named {name!r} among {[f.name for f in fields]}")


# -------------------------
# Mapping / schema builders
# -------------------------

# Builds a TargetSchema from {"table": [(name, type, nullable, constraints), ...]}.
def make_schema(tables: Dict[str, List[Tuple]]) -> TargetSchema:
    out: Dict[str, Tuple[DatabaseColumn, ...]] = {}
    for table, cols in tables.items():
        built = []
        for c in cols:
            name, ctype = c[0], c[1]
            nullable = c[2] if len(c) > 2 else True
            constraints = tuple(c[3]) if len(c) > 3 else ()
            built.append(DatabaseColumn(name, ctype, nullable, constraints))
        out[table] = tuple(built)
    return TargetSchema(out)


# Builds a mapping from a "$.path" source and a "table.column" target.
def make_mapping(mapping_id: str, source_path: str, target: str) -> FieldMapping:
    table, _, column = target.rpartition(".")
    return FieldMapping(mapping_id, FieldRef(path=source_path), ColumnRef(column, table or None))


# -------------------------
# Executors
# -------------------------

class ManualExecutor(Executor):
    """Queues submitted work until the test runs it explicitly, in any order."""

    def __init__(self) -> None:
        self.queue: List[Tuple[Future, Callable, tuple, dict]] = []

    def submit(self, fn, /, *args, **kwargs) -> Future:
        fut: Future = Future()
        self.queue.append((fut, fn, args, kwargs))
        return fut

    def run(self, index: int) -> None:
        fut, fn, args, kwargs = self.queue[index]
        try:
            fut.set_result(fn(*args, **kwargs))
        except Exception as e:
            fut.set_exception(e)

    def run_all(self) -> None:
        for i in range(len(self.queue)):
            self.run(i)


# -------------------------
# Scripts
# -------------------------

# Runs a repo script with arguments in cwd and returns the completed process.
def run_script(script: Path, args: List[str], *, cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
    return subprocess.run([sys.executable, str(script), *args], cwd=str(cwd or project_root()),
                          capture_output=True, text=True)


# Best-effort file delete helper for cleaning up generated artifacts.
def safe_unlink(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
