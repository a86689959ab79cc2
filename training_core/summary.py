"""JSON-serializable rollup summary for the narrative-insights service."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from training_core.aggregation import aggregate, overall_rate
from training_core.records import MergedRecord
from training_core.rollup import performance_tiers, rollup_employees

# Summary section -> (grouping key, label used for the group value).
SUMMARY_SECTIONS = {
    "department_performance": ("department", "department"),
    "region_performance": ("region", "region"),
    "trainer_effectiveness": ("trainer", "trainer"),
    "area_manager_performance": ("area_manager", "area_manager"),
    "designation_performance": ("designation", "designation"),
    "course_performance": ("course", "course"),
}


def _section(records: Sequence[MergedRecord], key: str, label: str) -> List[Dict[str, Any]]:
    return [
        {label: b.key, "completion_rate": b.rate, "total": b.total, "completed": b.completed}
        for b in aggregate(records, key)
    ]


def build_summary(records: Sequence[MergedRecord], now: Optional[datetime] = None) -> Dict[str, Any]:
    rollups = rollup_employees(records, now)
    summary: Dict[str, Any] = {
        "total_enrollments": len(records),
        "total_employees": len(rollups),
        "overall_completion_rate": overall_rate(records),
        "performance_tiers": performance_tiers(rollups).counts(),
    }
    for section, (key, label) in SUMMARY_SECTIONS.items():
        summary[section] = _section(records, key, label)
    return summary
