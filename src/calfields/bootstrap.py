from __future__ import annotations
from calfields.core.registry import SpecRegistry
from calfields.engines.specs import ALL_SPECS

def build_registry() -> SpecRegistry:
    return SpecRegistry(dict(ALL_SPECS))
