# fieldmap/htmlutils.py
from __future__ import annotations
from dominate import tags


def show_hide_div(divname: str, hide: bool = False) -> tags.div:
    """Toggle button followed by a collapsible div; use as a context manager."""
    tags.button("Show / hide", cls="toggle", onclick=f"toggleBlock('{divname}')")
    style = "display: none;" if hide else "display: block;"
    return tags.div(id=divname, style=style, data_default="hidden" if hide else "shown")


def show_all_button() -> tags.button:
    return tags.button("Show all", cls="toggle", onclick="setAllBlocks(true)")


def hide_all_button() -> tags.button:
    return tags.button("Hide all", cls="toggle", onclick="setAllBlocks(false)")


def default_button() -> tags.button:
    return tags.button("Default", cls="toggle", onclick="resetBlocks()")
