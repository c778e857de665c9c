# tests/test_ingestion.py
from __future__ import annotations
import pytest

from fieldmap.ingest import JsonParser
from fieldmap.interfaces import ColumnRef, FieldRef
from utility import examples_dir, write_json


# The example mapping file parses into mappings with unique ids.
def test_example_mappings_parse():
    mappings = JsonParser().load_mappings(str(examples_dir() / "users_api_mappings.json"))
    ids = [m.id for m in mappings]
    assert len(ids) == len(set(ids)) == 11, f"[INGEST] ids {ids}"
    city = next(m for m in mappings if m.id == "m-city")
    assert city.source_field == FieldRef(path="$.user.address.city")
    assert city.target_field == ColumnRef("country", "users")


# The sample response loads as plain decoded JSON.
def test_load_sample():
    data = JsonParser().load_sample(str(examples_dir() / "users_api_sample.json"))
    assert data["user"]["email"] == "ada@example.com"


# Source and target shorthands: "$.path" vs bare name, "table.column" vs bare column.
def test_shorthands():
    m1, m2 = JsonParser().parse_mappings([
        {"id": "a", "source": "$.user.id", "target": "users.id"},
        {"id": "b", "source": "email", "target": "email"},
    ])
    assert (m1.source_field, m1.target_field) == (FieldRef(path="$.user.id"), ColumnRef("id", "users"))
    assert (m2.source_field, m2.target_field) == (FieldRef(name="email"), ColumnRef("email"))


# A wrapped {"mappings": [...]} file and generated ids are accepted.
def test_wrapped_file_and_generated_ids(tmp_path):
    p = write_json(tmp_path, "m.json", {"mappings": [{"source": "$.a", "target": "t.a"}]})
    assert [m.id for m in JsonParser().load_mappings(str(p))] == ["mapping-1"]


# Malformed mapping entries raise with a descriptive error type.
@pytest.mark.parametrize("entries,exc", [
    ([{"id": "a", "target": "t.a"}], KeyError),
    ([{"id": "a", "source": "$.a"}], KeyError),
    (["not a mapping"], TypeError),
    ([{"id": "a", "source": 5, "target": "t.a"}], TypeError),
    ([{"id": "a", "source": {}, "target": "t.a"}], ValueError),
    ([{"id": "a", "source": "$.a", "target": "t."}], ValueError),
    ([{"id": "a", "source": "$.a", "target": "t.a"}, {"id": "a", "source": "$.b", "target": "t.b"}], ValueError),
])
def test_malformed_entries(entries, exc):
    with pytest.raises(exc):
        JsonParser().parse_mappings(entries)


# A file whose root is neither a list nor a wrapper is rejected.
def test_bad_root(tmp_path):
    p = write_json(tmp_path, "m.json", "just text")
    with pytest.raises(TypeError):
        JsonParser().load_mappings(str(p))
