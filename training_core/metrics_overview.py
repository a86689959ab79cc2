from __future__ import annotations

from typing import Any, Dict

from training_core.aggregation import overall_rate, status_breakdown
from training_core.charts import status_pie_chart
from training_core.filters import FilterSelection, active_filters_text
from training_core.rollup import average_completion, performance_tiers, rollup_employees


def compute_overview(filters: FilterSelection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    records = ctx.get("filtered", ())
    payload: Dict[str, Any] = {
        "filters": filters.to_dict(),
        "active_filters": active_filters_text(filters),
        "kpis": {
            "total_employees": 0,
            "total_enrollments": 0,
            "completed": 0,
            "not_completed": 0,
            "completion_rate": 0.0,
        },
        "tiers": {},
        "status_breakdown": [],
        "charts": {},
    }
    if not records:
        return payload

    rollups = rollup_employees(records, ctx.get("now"))
    tiers = performance_tiers(rollups)
    breakdown = status_breakdown(records)

    payload["kpis"] = {
        "total_employees": len(rollups),
        "total_enrollments": len(records),
        "completed": breakdown[0]["count"],
        "not_completed": breakdown[1]["count"],
        "completion_rate": overall_rate(records),
    }
    payload["tiers"] = {
        name: {"count": len(members), "average_completion": average_completion(members)}
        for name, members in (("high", tiers.high), ("average", tiers.average), ("needs_attention", tiers.needs_attention))
    }
    payload["status_breakdown"] = breakdown
    payload["charts"] = {"status": status_pie_chart(breakdown)}
    return payload
