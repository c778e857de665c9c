# fieldmap/ingest.py
from __future__ import annotations
import json
from typing import Any, Dict, List
from fieldmap import logging as slog
from fieldmap.interfaces import ColumnRef, FieldMapping, FieldRef


class JsonParser:
    """
    Reads the files that feed the core:
      - a saved sample API response (any JSON value)
      - a mapping list:
          [ { "id": "m1",
              "source": "$.user.email" | {"path": "...", "name": "..."},
              "target": "users.email" | "email" | {"table": "users", "column": "email"} },
            ... ]
    Mapping ids must be unique; a missing id is generated from the position.
    """

    def load_sample(self, json_path: str) -> Any:
        with open(json_path, "r", encoding="utf-8") as f:
            return json.load(f)

    def load_mappings(self, json_path: str) -> List[FieldMapping]:
        with open(json_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if isinstance(raw, dict):
            raw = raw.get("mappings")
        if not isinstance(raw, list):
            raise TypeError(f"Mappings file must hold a list (or {{'mappings': [...]}}), got {type(raw).__name__}")
        return self.parse_mappings(raw)

    def parse_mappings(self, entries: List[Any]) -> List[FieldMapping]:
        out: List[FieldMapping] = []
        seen: Dict[str, int] = {}
        for idx, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise TypeError(f"Mapping #{idx} is not an object")
            if "source" not in entry:
                raise KeyError(f"Mapping #{idx} missing required field 'source'")
            if "target" not in entry:
                raise KeyError(f"Mapping #{idx} missing required field 'target'")

            mapping_id = str(entry.get("id") or f"mapping-{idx + 1}")
            if mapping_id in seen:
                raise ValueError(f"Mapping #{idx} reuses id '{mapping_id}' (first used by #{seen[mapping_id]})")
            seen[mapping_id] = idx

            out.append(FieldMapping(
                id=mapping_id,
                source_field=self._parse_source(entry["source"], idx),
                target_field=self._parse_target(entry["target"], idx),
            ))
        slog.log_debug(f"parsed {len(out)} mapping(s)")
        return out

    @staticmethod
    def _parse_source(raw: Any, idx: int) -> FieldRef:
        if isinstance(raw, str):
            s = raw.strip()
            return FieldRef(path=s) if s.startswith("$") else FieldRef(name=s)
        if isinstance(raw, dict):
            path = str(raw.get("path") or "").strip()
            name = raw.get("name")
            if not path and not name:
                raise ValueError(f"Mapping #{idx}: source needs 'path' or 'name'")
            return FieldRef(path=path, name=str(name) if name else None)
        raise TypeError(f"Mapping #{idx}: source must be a string or object, got {type(raw).__name__}")

    @staticmethod
    def _parse_target(raw: Any, idx: int) -> ColumnRef:
        if isinstance(raw, str):
            table, sep, column = raw.strip().rpartition(".")
            if not column:
                raise ValueError(f"Mapping #{idx}: empty target column")
            return ColumnRef(column=column, table=table if sep else None)
        if isinstance(raw, dict):
            column = str(raw.get("column") or "").strip()
            if not column:
                raise ValueError(f"Mapping #{idx}: target needs 'column'")
            table = raw.get("table")
            return ColumnRef(column=column, table=str(table) if table else None)
        raise TypeError(f"Mapping #{idx}: target must be a string or object, got {type(raw).__name__}")
