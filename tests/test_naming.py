# tests/test_naming.py
from __future__ import annotations
import pytest

from fieldmap.naming import NameDisambiguator, sanitize_name


# sanitize_name: every character outside [A-Za-z0-9_] becomes an underscore.
@pytest.mark.parametrize("raw,expected", [
    ("email", "email"),
    ("a-b", "a_b"),
    ("first name", "first_name"),
    ("has.dot", "has_dot"),
    ("ünï", "_n_"),
    ("", ""),
])
def test_sanitize_name(raw: str, expected: str):
    assert sanitize_name(raw) == expected, f"[NAME] sanitize_name({raw!r})"


# unique: first use keeps the base, later uses get _1, _2, ...
def test_unique_suffixes_in_order():
    names = NameDisambiguator()
    got = [names.unique("id") for _ in range(3)]
    assert got == ["id", "id_1", "id_2"], f"[NAME] suffix order: {got}"


# unique: sanitized collisions are disambiguated ('a-b' then 'a_b').
def test_unique_after_sanitizing():
    names = NameDisambiguator()
    assert names.unique("a-b") == "a_b"
    assert names.unique("a_b") == "a_b_1"


# unique: a suffixed name that already exists as a raw name is skipped.
def test_unique_skips_taken_suffix():
    names = NameDisambiguator()
    names.unique("x_1")
    names.unique("x")
    assert names.unique("x") == "x_2", "[NAME] x_1 was taken, next free is x_2"
    assert "x_1" in names and len(names) == 3


# Two disambiguators never share state.
def test_disambiguators_are_independent():
    a, b = NameDisambiguator(), NameDisambiguator()
    a.unique("id")
    assert b.unique("id") == "id", "[NAME] state leaked between instances"
