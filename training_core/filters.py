from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, fields
from typing import Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from training_core.directory import PLACEHOLDER
from training_core.records import TENURE_BUCKETS, MergedRecord, StoreDirectoryEntry, or_unknown, tagged_tenure


@dataclass(frozen=True)
class FilterSelection:
    tenure: FrozenSet[str] = field(default_factory=frozenset)
    stores: FrozenSet[str] = field(default_factory=frozenset)
    area_managers: FrozenSet[str] = field(default_factory=frozenset)
    trainers: FrozenSet[str] = field(default_factory=frozenset)
    courses: FrozenSet[str] = field(default_factory=frozenset)
    designations: FrozenSet[str] = field(default_factory=frozenset)

    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))

    def to_dict(self) -> Dict[str, List[str]]:
        return {f.name: sorted(getattr(self, f.name)) for f in fields(self)}


# Dimension name -> record attribute the dimension reads.
DIMENSIONS: Dict[str, Callable[[MergedRecord], object]] = {
    "tenure": tagged_tenure,
    "stores": lambda r: r.location,
    "area_managers": lambda r: r.area_manager,
    "trainers": lambda r: r.trainer,
    "courses": lambda r: r.course_name,
    "designations": lambda r: r.designation,
}

DIMENSION_LABELS = {
    "tenure": "Tenure",
    "stores": "Store",
    "area_managers": "Area Manager",
    "trainers": "Trainer",
    "courses": "Course",
    "designations": "Designation",
}


def _as_str_set(values: Optional[Iterable[object]]) -> FrozenSet[str]:
    if not values:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    out = set()
    for v in values:
        if v is None:
            continue
        s = str(v).strip()
        if s:
            out.add(s)
    return frozenset(out)


def normalize_filters(raw: Optional[Mapping[str, object]]) -> FilterSelection:
    raw = raw or {}
    return FilterSelection(**{name: _as_str_set(raw.get(name)) for name in DIMENSIONS})  # type: ignore[arg-type]


def dimension_value(record: MergedRecord, dimension: str) -> str:
    return or_unknown(DIMENSIONS[dimension](record))


def apply_filters(records: Sequence[MergedRecord], selection: FilterSelection) -> Tuple[MergedRecord, ...]:
    """Records matching every non-empty dimension (OR within a dimension, AND across)."""
    active = [(DIMENSIONS[name], getattr(selection, name)) for name in DIMENSIONS if getattr(selection, name)]
    if not active:
        return tuple(records)
    return tuple(r for r in records if all(or_unknown(getter(r)) in selected for getter, selected in active))


def _search(values: Iterable[str], query: str) -> List[str]:
    q = (query or "").strip().lower()
    if not q:
        return list(values)
    return [v for v in values if q in v.lower()]


def filter_options(
    records: Sequence[MergedRecord],
    directory: Sequence[StoreDirectoryEntry],
    *,
    search: Optional[Mapping[str, str]] = None,
) -> Dict[str, List[str]]:
    """Selectable values per dimension, optionally narrowed by a substring search."""
    search = search or {}
    for name in search:
        if name not in DIMENSIONS:
            raise KeyError(f"Unknown filter dimension: {name}")

    stores = sorted({e.location for e in directory if e.location})
    area_managers = sorted({e.area_manager for e in directory if e.area_manager and e.area_manager != PLACEHOLDER})
    trainers = sorted({e.trainer for e in directory if e.trainer and e.trainer != PLACEHOLDER})
    courses = sorted({dimension_value(r, "courses") for r in records})
    designations = sorted({dimension_value(r, "designations") for r in records})

    options = {
        "tenure": list(TENURE_BUCKETS),
        "stores": stores,
        "area_managers": area_managers,
        "trainers": trainers,
        "courses": courses,
        "designations": designations,
    }
    return {name: _search(values, search.get(name, "")) for name, values in options.items()}


def option_counts(records: Sequence[MergedRecord], dimension: str) -> Dict[str, int]:
    getter = DIMENSIONS[dimension]
    return dict(Counter(or_unknown(getter(r)) for r in records))


def active_filters_text(selection: FilterSelection) -> str:
    active = [(name, sorted(getattr(selection, name))) for name in DIMENSIONS if getattr(selection, name)]
    if not active:
        return "All Data"
    if len(active) > 1:
        return f"{len(active)} Filters Applied"
    name, values = active[0]
    shown = values[0] if len(values) == 1 else f"{len(values)} selected"
    return f"{DIMENSION_LABELS[name]}: {shown}"
