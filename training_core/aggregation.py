from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Sequence, Union

import pandas as pd

from training_core.records import (
    COMPLETED,
    NOT_COMPLETED,
    TENURE_BUCKETS,
    MergedRecord,
    or_unknown,
    safe_rate,
    tagged_tenure,
)

KeySelector = Callable[[MergedRecord], object]

GROUPING_KEYS: Dict[str, KeySelector] = {
    "designation": lambda r: r.designation,
    "course": lambda r: r.course_name,
    "course_category": lambda r: r.course_category,
    "store": lambda r: r.location,
    "tenure": tagged_tenure,
    "trainer": lambda r: r.trainer,
    "area_manager": lambda r: r.area_manager,
    "region": lambda r: r.region,
    "department": lambda r: r.department,
    "status": lambda r: r.completion_status,
}


@dataclass(frozen=True)
class AggregationBucket:
    key: str
    total: int
    completed: int
    rate: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def resolve_key(key: Union[str, KeySelector]) -> KeySelector:
    if callable(key):
        return key
    try:
        return GROUPING_KEYS[key]
    except KeyError:
        raise KeyError(f"Unknown grouping key: {key!r}") from None


def _grouped(records: Sequence[MergedRecord], selector: KeySelector) -> pd.DataFrame:
    df = pd.DataFrame(
        {
            "key": [or_unknown(selector(r)) for r in records],
            "completed": [r.is_completed for r in records],
            "employee_code": [r.employee_code for r in records],
        }
    )
    # sort=False keeps first-seen key order for the stable rate sort below.
    return (
        df.groupby("key", sort=False, dropna=False)
        .agg(
            total=("completed", "size"),
            completed=("completed", "sum"),
            employees=("employee_code", "nunique"),
        )
        .reset_index()
    )


def aggregate(records: Sequence[MergedRecord], key: Union[str, KeySelector]) -> List[AggregationBucket]:
    """Group ``records`` by ``key`` and compute total/completed/rate per group.

    ``key`` is a name from GROUPING_KEYS or a selector callable. Buckets come
    back by descending rate; ties keep first-seen order.
    """
    selector = resolve_key(key)
    if not records:
        return []
    grouped = _grouped(records, selector)
    buckets: List[AggregationBucket] = []
    for row in grouped.itertuples(index=False):
        total, completed = int(row.total), int(row.completed)
        buckets.append(AggregationBucket(key=str(row.key), total=total, completed=completed, rate=safe_rate(completed, total)))
    return sorted(buckets, key=lambda b: -b.rate)


def overall_rate(records: Sequence[MergedRecord]) -> float:
    completed = sum(1 for r in records if r.is_completed)
    return safe_rate(completed, len(records))


def status_breakdown(records: Sequence[MergedRecord]) -> List[Dict[str, Any]]:
    completed = sum(1 for r in records if r.is_completed)
    return [
        {"status": COMPLETED, "count": completed},
        {"status": NOT_COMPLETED, "count": len(records) - completed},
    ]


def tenure_distribution(records: Sequence[MergedRecord]) -> List[Dict[str, Any]]:
    """Per tenure bucket present, in fixed bucket order: enrollments, distinct employees and rate."""
    if not records:
        return []
    grouped = _grouped(records, GROUPING_KEYS["tenure"]).set_index("key")
    out: List[Dict[str, Any]] = []
    for bucket in TENURE_BUCKETS:
        if bucket not in grouped.index:
            continue
        row = grouped.loc[bucket]
        total, completed = int(row["total"]), int(row["completed"])
        out.append(
            {
                "tenure": bucket,
                "total": total,
                "completed": completed,
                "unique_employees": int(row["employees"]),
                "rate": safe_rate(completed, total),
            }
        )
    return out
