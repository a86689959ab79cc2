from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Literal, Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from training_api.schemas import DatasetUploadModel, DatasetUploadResponse, FilterSelectionModel
from training_core.aggregation import GROUPING_KEYS
from training_core.data import DatasetCache, load_dashboard_data, load_directory, prepare_context
from training_core.filters import DIMENSIONS, FilterSelection, filter_options, normalize_filters, option_counts
from training_core.metrics_debug import compute_debug
from training_core.metrics_dimensions import compute_dimension, compute_tenure
from training_core.metrics_employees import compute_employees
from training_core.metrics_overview import compute_overview
from training_core.rollup import rollup_employees, search_employees
from training_core.summary import build_summary


app = FastAPI(title="Training Completion API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Snapshot pushed through PUT /dataset; replaced wholesale on every upload.
_snapshot: Dict[str, Any] = {"rows": None, "directory": None}
_dataset_cache = DatasetCache()


def current_dataset() -> Dict[str, Any]:
    rows, directory = _snapshot["rows"], _snapshot["directory"]
    if rows is None:
        return load_dashboard_data()
    dataset = dict(_dataset_cache.get(rows, directory))
    dataset["files"] = ["upload"]
    return dataset


def _filters_from_model(model: FilterSelectionModel) -> FilterSelection:
    return normalize_filters(model.model_dump())


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                pd.Timestamp: lambda ts: ts.isoformat(),
                frozenset: sorted,
            },
        )
    )


@app.put("/dataset", response_model=DatasetUploadResponse)
def put_dataset(upload: DatasetUploadModel):
    try:
        directory = load_directory()
        # Publish both together so readers never see rows without a directory.
        _snapshot.update(rows=upload.rows, directory=directory)
        dataset = current_dataset()
        return DatasetUploadResponse(
            raw_rows=int(dataset["raw_count"]),
            records=len(dataset["records"]),
            dropped_rows=int(dataset["dropped_rows"]),
        )
    except Exception as exc:
        logger.exception("put_dataset failed")
        return _error(exc)


@app.get("/meta/options")
def meta_options(
    store_search: str = Query(default=""),
    area_manager_search: str = Query(default=""),
    trainer_search: str = Query(default=""),
    course_search: str = Query(default=""),
    designation_search: str = Query(default=""),
):
    try:
        ctx = prepare_context(FilterSelection(), current_dataset())
        options = filter_options(
            ctx["records"],
            ctx["directory"],
            search={
                "stores": store_search,
                "area_managers": area_manager_search,
                "trainers": trainer_search,
                "courses": course_search,
                "designations": designation_search,
            },
        )
        counts = {name: option_counts(ctx["records"], name) for name in DIMENSIONS}
        return _json({"options": options, "counts": counts})
    except Exception as exc:
        logger.exception("meta_options failed")
        return _error(exc)


@app.post("/overview")
def overview(filters: FilterSelectionModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, current_dataset())
        return _json(compute_overview(f, ctx))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/dimensions/{dimension}")
def dimension(dimension: str, filters: FilterSelectionModel):
    if dimension not in GROUPING_KEYS:
        return _error(KeyError(f"Unknown grouping key: {dimension}"), status_code=404)
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, current_dataset())
        return _json(compute_dimension(f, ctx, dimension))
    except Exception as exc:
        logger.exception("dimension failed")
        return _error(exc)


@app.post("/tenure")
def tenure(filters: FilterSelectionModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, current_dataset())
        return _json(compute_tenure(f, ctx))
    except Exception as exc:
        logger.exception("tenure failed")
        return _error(exc)


@app.post("/employees")
def employees(
    filters: FilterSelectionModel,
    q: str = Query(default=""),
    sort_by: Literal["name", "completion", "designation"] = Query(default="name"),
    order: Literal["asc", "desc"] = Query(default="asc"),
    tier: Literal["All", "high", "average", "needs_attention"] = Query(default="All"),
):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, current_dataset())
        return _json(compute_employees(f, ctx, q=q, sort_by=sort_by, order=order, tier=tier))
    except Exception as exc:
        logger.exception("employees failed")
        return _error(exc)


@app.post("/summary")
def summary(filters: FilterSelectionModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, current_dataset())
        return _json({"filters": f.to_dict(), "summary": build_summary(ctx["filtered"], ctx["now"])})
    except Exception as exc:
        logger.exception("summary failed")
        return _error(exc)


@app.post("/debug")
def debug(filters: FilterSelectionModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, current_dataset())
        return _json(compute_debug(f, ctx))
    except Exception as exc:
        logger.exception("debug failed")
        return _error(exc)


def _records_frame(records: List[Any]) -> pd.DataFrame:
    return pd.DataFrame([vars(r) for r in records])


@app.post("/export/{page}")
def export_page(page: str, filters: FilterSelectionModel, q: Optional[str] = Query(default=None)):
    f = _filters_from_model(filters)
    ctx = prepare_context(f, current_dataset())

    filename = f"{page}.csv"
    if page == "records":
        export_df = _records_frame(list(ctx["filtered"]))
    elif page == "employees":
        rows = []
        for r in search_employees(rollup_employees(ctx["filtered"], ctx["now"]), q or ""):
            row = r.to_dict()
            row.pop("courses")
            rows.append(row)
        export_df = pd.DataFrame(rows)
    else:
        export_df = pd.DataFrame()

    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
