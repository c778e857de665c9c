from __future__ import annotations
from .default import render_field_tree

__all__ = ["render_field_tree"]
