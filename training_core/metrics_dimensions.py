from __future__ import annotations

from typing import Any, Dict

from training_core.aggregation import GROUPING_KEYS, aggregate, tenure_distribution
from training_core.charts import completion_rate_chart
from training_core.filters import FilterSelection

DIMENSION_TITLES = {
    "designation": "Designation",
    "course": "Course",
    "course_category": "Course Category",
    "store": "Store",
    "tenure": "Tenure",
    "trainer": "Trainer",
    "area_manager": "Area Manager",
    "region": "Region",
    "department": "Department",
    "status": "Completion Status",
}


def compute_dimension(filters: FilterSelection, ctx: Dict[str, Any], dimension: str) -> Dict[str, Any]:
    if dimension not in GROUPING_KEYS:
        raise KeyError(f"Unknown grouping key: {dimension!r}")
    records = ctx.get("filtered", ())
    payload: Dict[str, Any] = {"filters": filters.to_dict(), "dimension": dimension, "buckets": [], "charts": {}}
    if not records:
        return payload

    buckets = aggregate(records, dimension)
    payload["buckets"] = [b.to_dict() for b in buckets]
    payload["charts"] = {"completion": completion_rate_chart(buckets, title=DIMENSION_TITLES[dimension])}
    return payload


def compute_tenure(filters: FilterSelection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    records = ctx.get("filtered", ())
    return {"filters": filters.to_dict(), "distribution": tenure_distribution(records)}
