# fieldmap/statistics.py
from __future__ import annotations
from typing import Any, Dict, List, Sequence, Tuple

from fieldmap.interfaces import Field, Statistics, TypeTag
from fieldmap.query import flatten


def summarize(fields: Sequence[Field]) -> Statistics:
    """
    Statistics for an extracted tree.

    ``total_fields`` is the length of the top-level sequence only, while the
    array/object/primitive counters cover every nested field too, so the two
    totals differ for nested data. Anything that is not an array or an object
    (null and undefined included) counts as primitive.
    """
    array_fields = object_fields = primitive_fields = 0
    max_depth = 0

    stack: List[Tuple[Sequence[Field], int]] = [(fields, 0)]
    while stack:
        level, depth = stack.pop()
        max_depth = max(max_depth, depth)
        for f in level:
            if f.type == TypeTag.ARRAY:
                array_fields += 1
            elif f.type == TypeTag.OBJECT:
                object_fields += 1
            else:
                primitive_fields += 1
            if f.nested:
                stack.append((f.nested, depth + 1))

    return Statistics(
        total_fields=len(fields),
        max_depth=max_depth,
        array_fields=array_fields,
        object_fields=object_fields,
        primitive_fields=primitive_fields,
    )


def field_statistics(fields: Sequence[Field]) -> Dict[str, Any]:
    """
    Catalog overview over the flattened tree (used for reports).

    ``maxPathDepth`` counts the dot-separated parts of each address, so '$'
    is 1, '$.a' is 2 and '$.a[0]' is still 2. Any key is accepted.
    """
    flat = flatten(fields)
    type_counts: Dict[str, int] = {}
    for f in flat:
        type_counts[str(f.type)] = type_counts.get(str(f.type), 0) + 1

    return {
        "totalFields": len(flat),
        "typeCounts": type_counts,
        "hasNestedFields": any(f.nested for f in flat),
        "maxPathDepth": max((len(f.path.split(".")) for f in flat), default=0),
    }
