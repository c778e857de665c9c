from typing import Any, List, Optional
from dominate import tags


def render_table_block(headers: List[str], rows: List[List[Any]], *, row_classes: Optional[List[str]] = None):
    """
    Render a plain table block.
    Cells may be text, a dominate node, or a zero-argument callable that
    builds its nodes inside the <td> (so nodes are never created in an outer
    context first). ``row_classes`` tags each <tr>, e.g. with a mapping status.
    """
    container = tags.div(_class="table-container")
    with container:
        with tags.table(_class="report-table"):
            with tags.thead():
                with tags.tr():
                    for h in headers:
                        tags.th(str(h))
            with tags.tbody():
                for i, r in enumerate(rows or []):
                    cells = r if isinstance(r, (list, tuple)) else [r]
                    tr = tags.tr()
                    if row_classes and i < len(row_classes) and row_classes[i]:
                        tr["class"] = row_classes[i]
                    with tr:
                        for c in cells:
                            if hasattr(c, "render"):
                                tags.td(c)
                            elif callable(c):
                                with tags.td():
                                    c()
                            else:
                                tags.td("" if c is None else str(c))
    return container
