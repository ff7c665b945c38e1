"""
calfields.engines.field_table
-----------------------------
The mutable record of calendar fields: one integer value and one provenance
tag per field, plus the anchors (instant, fixed date, rule set) of the last
time -> fields computation.

Unset fields read as 0. `set` marks a field EXTERNALLY_SET; the conversion
engine writes COMPUTED values.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence

from ..core.time import EPOCH_YEAR
from ..core.types import (
    BCE, CE, DEFAULT_FIELD_PRIORITY, DOM_GROUP, FIELD_COUNT,
    Field, FieldGroup, Provenance, as_field,
)
from .rule_set import CalendarRuleSet

_TIME_FIELDS = (Field.MINUTE, Field.SECOND, Field.MILLISECOND)


class FieldTable:
    __slots__ = ("values", "provenance", "instant", "fixed_date", "rule_set")

    def __init__(self) -> None:
        self.values: List[int] = [0] * FIELD_COUNT
        self.provenance: List[Provenance] = [Provenance.UNSET] * FIELD_COUNT
        self.instant: Optional[int] = None
        self.fixed_date: Optional[int] = None
        self.rule_set: Optional[CalendarRuleSet] = None

    # ---------------------------------------------------------
    # Access
    # ---------------------------------------------------------

    def get(self, field) -> int:
        return self.values[as_field(field)]

    def set(self, field, value: int) -> None:
        f = as_field(field)
        self.values[f] = int(value)
        self.provenance[f] = Provenance.EXTERNALLY_SET

    def set_computed(self, field: Field, value: int) -> None:
        self.values[field] = value
        self.provenance[field] = Provenance.COMPUTED

    def clear(self, field=None) -> None:
        """Clear one field, or every field and the anchors when `field` is None."""
        if field is None:
            self.values = [0] * FIELD_COUNT
            self.provenance = [Provenance.UNSET] * FIELD_COUNT
            self.instant = None
            self.fixed_date = None
            self.rule_set = None
            return
        f = as_field(field)
        self.values[f] = 0
        self.provenance[f] = Provenance.UNSET

    def is_set(self, field) -> bool:
        return self.provenance[as_field(field)] is not Provenance.UNSET

    def is_external(self, field) -> bool:
        return self.provenance[as_field(field)] is Provenance.EXTERNALLY_SET

    def provenance_of(self, field) -> Provenance:
        return self.provenance[as_field(field)]

    def externally_set(self) -> List[Field]:
        return [f for f in Field if self.provenance[f] is Provenance.EXTERNALLY_SET]

    @property
    def is_normalized(self) -> bool:
        """Every field COMPUTED from `instant`."""
        return self.instant is not None and all(p is Provenance.COMPUTED for p in self.provenance)

    @property
    def era(self) -> int:
        return self.values[Field.ERA] if self.is_set(Field.ERA) else CE

    @property
    def normalized_year(self) -> int:
        year = self.values[Field.YEAR] if self.is_set(Field.YEAR) else EPOCH_YEAR
        return 1 - year if self.era == BCE else year

    def copy(self) -> "FieldTable":
        other = FieldTable()
        other.values = list(self.values)
        other.provenance = list(self.provenance)
        other.instant = self.instant
        other.fixed_date = self.fixed_date
        other.rule_set = self.rule_set
        return other

    def as_dict(self) -> Dict[str, int]:
        return {f.name: self.values[f] for f in Field}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldTable):
            return NotImplemented
        return self.values == other.values and self.provenance == other.provenance

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        parts = []
        for f in Field:
            p = self.provenance[f]
            v = "?" if p is Provenance.UNSET else str(self.values[f])
            mark = "*" if p is Provenance.EXTERNALLY_SET else ""
            parts.append(f"{f.name}={v}{mark}")
        return f"FieldTable({', '.join(parts)})"

    # ---------------------------------------------------------
    # Field selection
    # ---------------------------------------------------------

    def _complete(self, group: FieldGroup) -> bool:
        return all(self.is_set(k) for k in group.keys)

    def _fully_external(self, group: FieldGroup) -> bool:
        return all(self.is_external(k) for k in group.keys)

    def _touched(self, group: FieldGroup) -> bool:
        if group.month_based and self.is_external(Field.MONTH):
            return True
        return any(self.is_external(k) for k in group.keys)

    def select_date_group(self, priority: Sequence[FieldGroup] = DEFAULT_FIELD_PRIORITY) -> FieldGroup:
        complete = [g for g in priority if self._complete(g)]
        for test in (self._fully_external, self._touched):
            for g in complete:
                if test(g):
                    return g
        if complete:
            return complete[0]
        for g in priority:
            if any(self.is_set(t) for t in g.triggers):
                return g
        return DOM_GROUP

    def _time_fields(self) -> Iterable[Field]:
        hod = Field.HOUR_OF_DAY
        half = (Field.HOUR, Field.AM_PM)
        if self.is_external(hod):
            chosen: Sequence[Field] = (hod,)
        elif any(self.is_external(f) for f in half):
            chosen = half
        elif self.is_set(hod):
            chosen = (hod,)
        elif any(self.is_set(f) for f in half):
            chosen = half
        else:
            chosen = ()
        return [f for f in chosen if self.is_set(f)]

    def select_fields(self, priority: Sequence[FieldGroup] = DEFAULT_FIELD_PRIORITY) -> FrozenSet[Field]:
        """The set of fields used to compute the instant."""
        group = self.select_date_group(priority)
        mask = {Field.YEAR}
        if self.is_set(Field.ERA):
            mask.add(Field.ERA)
        if group.month_based:
            mask.add(Field.MONTH)
        for k in group.keys:
            if k is Field.DAY_OF_MONTH or self.is_set(k):
                mask.add(k)
        mask.update(self._time_fields())
        mask.update(f for f in _TIME_FIELDS if self.is_set(f))
        for f in (Field.ZONE_OFFSET, Field.DST_OFFSET):
            if self.is_external(f):
                mask.add(f)
        return frozenset(mask)
