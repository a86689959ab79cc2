from __future__ import annotations

from typing import Any, Dict

from training_core.filters import FilterSelection
from training_core.rollup import performance_tiers, rollup_employees, search_employees, sort_employees, tier_of

TIER_CHOICES = ("All", "high", "average", "needs_attention")


def compute_employees(
    filters: FilterSelection,
    ctx: Dict[str, Any],
    *,
    q: str = "",
    sort_by: str = "name",
    order: str = "asc",
    tier: str = "All",
) -> Dict[str, Any]:
    records = ctx.get("filtered", ())
    rollups = rollup_employees(records, ctx.get("now"))
    tiers = performance_tiers(rollups)

    if tier not in TIER_CHOICES:
        raise ValueError(f"Unknown tier: {tier!r}")

    table = sort_employees(search_employees(rollups, q), by=sort_by, order=order)
    if tier != "All":
        table = [r for r in table if tier_of(r.completion_rate) == tier]

    return {
        "filters": filters.to_dict(),
        "tier_counts": tiers.counts(),
        "total": len(rollups),
        "employees": [dict(r.to_dict(), tier=tier_of(r.completion_rate)) for r in table],
    }
