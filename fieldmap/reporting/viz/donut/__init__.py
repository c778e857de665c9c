from __future__ import annotations
from .default import render_donut_block

__all__ = ["render_donut_block"]
