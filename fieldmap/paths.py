# fieldmap/paths.py
from __future__ import annotations
import re
from typing import Iterable, List

_INDEX_SEGMENT = re.compile(r"^\d+$")
_ADDRESS_TOKEN = re.compile(r"\.([^.\[\]]+)|\[(\d+)\]")


def address(segments: Iterable[str]) -> str:
    """Join path segments into a canonical address.

    Digit-only segments render as ``[n]``, everything else as ``.name``,
    whether the segment came from an object key or an array index:

        address(["user", "posts", "0", "title"]) -> "$.user.posts[0].title"
    """
    out = ["$"]
    for seg in segments:
        seg = str(seg)
        out.append(f"[{seg}]" if _INDEX_SEGMENT.match(seg) else f".{seg}")
    return "".join(out)


def split_address(path: str) -> List[str]:
    """Inverse of address() for addresses whose keys hold no '.', '[' or ']'."""
    if not path or not path.startswith("$"):
        raise ValueError(f"Address must start with '$': {path!r}")
    segments: List[str] = []
    pos = 1
    while pos < len(path):
        m = _ADDRESS_TOKEN.match(path, pos)
        if m is None:
            raise ValueError(f"Malformed address {path!r} at offset {pos}")
        segments.append(m.group(1) if m.group(1) is not None else m.group(2))
        pos = m.end()
    return segments


def address_depth(path: str) -> int:
    return len(split_address(path))
