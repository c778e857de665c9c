# fieldmap/query.py
from __future__ import annotations
import re
from typing import Dict, List, Pattern, Sequence, Union

from fieldmap.interfaces import Field, TypeTag


def flatten(fields: Sequence[Field]) -> List[Field]:
    """Pre-order walk: every field, parents before their children."""
    out: List[Field] = []
    stack: List[Field] = list(reversed(fields))
    while stack:
        f = stack.pop()
        out.append(f)
        if f.nested:
            stack.extend(reversed(f.nested))
    return out


def filter_by_type(fields: Sequence[Field], type_tag: Union[TypeTag, str]) -> List[Field]:
    tag = TypeTag(type_tag)
    return [f for f in flatten(fields) if f.type == tag]


def compile_path_pattern(pattern: str) -> Pattern[str]:
    """'*' matches any run of characters; everything else is literal. Anchored both ends."""
    parts = [re.escape(p) for p in pattern.split("*")]
    return re.compile("^" + ".*".join(parts) + "$")


def find_by_path(fields: Sequence[Field], pattern: str) -> List[Field]:
    rx = compile_path_pattern(pattern)
    return [f for f in flatten(fields) if rx.fullmatch(f.path)]


def index_by_path(fields: Sequence[Field]) -> Dict[str, Field]:
    """path -> first field (pre-order) carrying that path."""
    index: Dict[str, Field] = {}
    for f in flatten(fields):
        index.setdefault(f.path, f)
    return index
