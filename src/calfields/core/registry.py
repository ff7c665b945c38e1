from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from .types import CalendarSpec


@dataclass
class SpecRegistry:
    _specs: Dict[str, CalendarSpec]

    def get(self, name: str) -> CalendarSpec:
        if name not in self._specs:
            raise KeyError(f"Unknown calendar spec '{name}'. Available: {sorted(self._specs)}")
        return self._specs[name]

    def list(self) -> List[str]:
        return sorted(self._specs.keys())

    def register(self, name: str, spec: CalendarSpec, *, overwrite: bool = False) -> None:
        if (not overwrite) and (name in self._specs):
            raise KeyError(f"Calendar spec '{name}' already exists. Use overwrite=True to replace.")
        self._specs[name] = spec
