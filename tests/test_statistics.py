# tests/test_statistics.py
from __future__ import annotations

from fieldmap.extractor import extract
from fieldmap.interfaces import Field, Statistics, TypeTag
from fieldmap.statistics import field_statistics, summarize


# total_fields counts the top level only; the counters cover the whole tree.
def test_summarize_top_level_total_vs_counters():
    st = extract({"a": 1, "b": {"c": 2}}).statistics
    assert st.total_fields == 2, "[STATS] top-level count"
    assert st.object_fields + st.array_fields + st.primitive_fields == 3, f"[STATS] counters {st}"
    assert (st.object_fields, st.primitive_fields, st.max_depth) == (1, 2, 1)


# Arrays count their array_info (object) and placeholder numbers too.
def test_summarize_counts_array_info():
    st = summarize(extract({"xs": [1]}).fields)
    # xs, item_0, array_info, length, processed_count
    assert st == Statistics(total_fields=1, max_depth=2, array_fields=1, object_fields=1, primitive_fields=3)


# Null and undefined fields count as primitive.
def test_summarize_nullish_is_primitive():
    fields = (Field("a", TypeTag.NULL, "$.a"), Field("b", TypeTag.UNDEFINED, "$.b"))
    assert summarize(fields).primitive_fields == 2


# An empty tree has all-zero statistics.
def test_summarize_empty():
    assert summarize(()) == Statistics()


# field_statistics: flattened totals, type counts, nesting flag and deepest path.
def test_field_statistics():
    fs = field_statistics(extract({"a": 1, "b": {"c": "x"}}).fields)
    assert fs == {
        "totalFields": 3,
        "typeCounts": {"number": 1, "object": 1, "string": 1},
        "hasNestedFields": True,
        "maxPathDepth": 3,
    }, f"[STATS] {fs}"


# field_statistics: an empty tree reports zero depth.
def test_field_statistics_empty():
    fs = field_statistics(())
    assert fs["totalFields"] == 0 and fs["maxPathDepth"] == 0 and fs["hasNestedFields"] is False


# field_statistics: empty and bracket-bearing keys still produce a depth.
def test_field_statistics_odd_keys():
    fs = field_statistics(extract({"": 1, "x]": 2, "a[b": {"c.d": 3}}).fields)
    assert fs["totalFields"] == 4, f"[STATS] {fs}"
    assert fs["maxPathDepth"] == 4, f"[STATS] '$.a[b.c.d' splits into four parts: {fs}"
