# tests/test_paths.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List
import pytest

from fieldmap.paths import address, address_depth, split_address


@dataclass(frozen=True)
class AddressCase:
    label: str
    segments: List[str]
    expected: str


CASES: List[AddressCase] = [
    AddressCase("root", [], "$"),
    AddressCase("single key", ["user"], "$.user"),
    AddressCase("nested index", ["user", "posts", "0", "title"], "$.user.posts[0].title"),
    AddressCase("root array", ["3"], "$[3]"),
    AddressCase("digit-only object key", ["codes", "404"], "$.codes[404]"),
    AddressCase("mixed key", ["a1", "1a"], "$.a1.1a"),
]


# address: digit-only segments become [n], everything else .name, regardless of origin.
@pytest.mark.parametrize("case", CASES, ids=[c.label for c in CASES])
def test_address(case: AddressCase):
    assert address(case.segments) == case.expected, f"[PATH][{case.label}] address({case.segments})"


# split_address: inverts address() for well-formed addresses.
@pytest.mark.parametrize("case", CASES, ids=[c.label for c in CASES])
def test_split_address_roundtrip(case: AddressCase):
    assert split_address(case.expected) == case.segments, f"[PATH][{case.label}] split_address"


# address_depth: one per segment; the root has depth 0.
def test_address_depth():
    assert address_depth("$") == 0
    assert address_depth("$.user.posts[0].title") == 4


# split_address: rejects strings that are not addresses.
@pytest.mark.parametrize("bad", ["", "user.name", "$..a", "$[x]", "$.a[1"])
def test_split_address_rejects_malformed(bad: str):
    with pytest.raises(ValueError):
        split_address(bad)
