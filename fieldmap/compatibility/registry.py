# fieldmap/compatibility/registry.py
from __future__ import annotations
from typing import Dict, Type
from .interface import CompatibilityPolicy

_REGISTRY: Dict[str, Type[CompatibilityPolicy]] = {}

def register(name: str, cls: Type[CompatibilityPolicy]) -> None:
    key = (name or "").strip().lower()
    if not key:
        raise ValueError("Policy name must be non-empty")
    _REGISTRY[key] = cls

def get(name: str) -> Type[CompatibilityPolicy] | None:
    return _REGISTRY.get((name or "").strip().lower())

def available() -> Dict[str, Type[CompatibilityPolicy]]:
    return dict(_REGISTRY)
