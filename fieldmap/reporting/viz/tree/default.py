from typing import Any, Dict, List, Tuple
from dominate import tags


def render_field_tree(fields: List[Dict[str, Any]], *, tree_id: str = "field-tree") -> tags.ul:
    """
    Render the extracted field tree (``Field.to_dict()`` shape) as nested lists.
    Built with an explicit stack, so arbitrarily deep trees do not recurse.
    """
    root = tags.ul(_class="field-tree", id=tree_id)
    stack: List[Tuple[tags.ul, List[Dict[str, Any]]]] = [(root, list(fields or []))]
    while stack:
        parent, level = stack.pop()
        for f in level:
            ftype = str(f.get("type", ""))
            item = tags.li(_class=f"field field-{ftype}")
            item.add(tags.code(str(f.get("name", ""))))
            item.add(tags.span(ftype, _class=f"badge badge-{ftype}"))
            item.add(tags.span(str(f.get("path", "")), _class="field-path"))
            nested = f.get("nested") or []
            if nested:
                child = tags.ul()
                item.add(child)
                stack.append((child, list(nested)))
            parent.add(item)
    return root
