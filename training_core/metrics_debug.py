from __future__ import annotations

from collections import Counter
from typing import Any, Dict

from training_core.directory import directory_index
from training_core.filters import FilterSelection


def compute_debug(filters: FilterSelection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    records = ctx.get("records", ())
    directory = tuple(ctx.get("directory", ()))
    index = directory_index(directory)

    missing_store = sum(1 for r in records if not r.store_id)
    unmatched = Counter(r.store_id for r in records if r.store_id and r.store_id not in index)
    return {
        "filters": filters.to_dict(),
        "files": list(ctx.get("files", [])),
        "row_counts": {
            "raw_rows": int(ctx.get("raw_count", 0) or 0),
            "dropped_rows": int(ctx.get("dropped_rows", 0) or 0),
            "merged_records": len(records),
            "filtered_records": len(ctx.get("filtered", ())),
            "directory_entries": len(directory),
        },
        "join_checks": {
            "missing_store_id": missing_store,
            "unmatched_store_id": sum(unmatched.values()),
        },
        "unmatched_top": [{"store_id": k, "count": v} for k, v in unmatched.most_common(20)],
    }
