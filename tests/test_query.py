# tests/test_query.py
from __future__ import annotations
import pytest

from fieldmap.extractor import extract
from fieldmap.interfaces import TypeTag
from fieldmap.query import filter_by_type, find_by_path, flatten, index_by_path

SAMPLE = {
    "user": {"id": 7, "posts": [{"title": "t"}]},
    "user_id": 7,
    "a.b": 1,
    "axb": 2,
}


@pytest.fixture(scope="module")
def fields():
    return extract(SAMPLE).fields


# flatten: pre-order, parents before their children.
def test_flatten_preorder(fields):
    names = [f.name for f in flatten(fields)]
    assert names[:3] == ["user", "id", "posts"], f"[QUERY] {names}"
    assert names.index("posts") < names.index("item_0") < names.index("title")


# filter_by_type: matches at every depth; accepts enum or plain tag text.
def test_filter_by_type(fields):
    strings = filter_by_type(fields, TypeTag.STRING)
    assert [f.path for f in strings] == ["$.user.posts[0].title"]
    assert [f.name for f in filter_by_type(fields, "array")] == ["posts"]


# filter_by_type: unknown tags are rejected.
def test_filter_by_type_unknown(fields):
    with pytest.raises(ValueError):
        filter_by_type(fields, "date")


# find_by_path: exact patterns are anchored at both ends.
def test_find_by_path_exact(fields):
    assert [f.name for f in find_by_path(fields, "$.user.id")] == ["id"]
    assert find_by_path(fields, "$.user") and len(find_by_path(fields, "$.user")) == 1


# find_by_path: '*' matches any run of characters, including '.' and brackets.
def test_find_by_path_wildcard(fields):
    got = {f.path for f in find_by_path(fields, "$.user.*")}
    assert "$.user.posts[0].title" in got and "$.user_id" not in got, f"[QUERY] {sorted(got)}"


# find_by_path: regex metacharacters in the pattern are literal.
def test_find_by_path_literal_metachars(fields):
    assert [f.path for f in find_by_path(fields, "$.a.b")] == ["$.a.b"], "[QUERY] '.' must not match 'x'"
    assert [f.path for f in find_by_path(fields, "$.user.posts[0]")] == ["$.user.posts[0]"]


# index_by_path: first field per path wins (array_info shares its path with 'length').
def test_index_by_path(fields):
    idx = index_by_path(fields)
    assert idx["$.user.posts.length"].name == "array_info"
    assert idx["$.user_id"].type is TypeTag.NUMBER
