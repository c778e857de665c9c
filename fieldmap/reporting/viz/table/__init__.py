from __future__ import annotations
from .default import render_table_block

__all__ = ["render_table_block"]
