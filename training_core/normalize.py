from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Tuple

import numpy as np
import pandas as pd

from training_core.records import COMPLETED, NOT_COMPLETED, TrainingRecord

logger = logging.getLogger(__name__)

# Raw header spellings -> TrainingRecord fields. Earlier spellings win when a
# row carries more than one for the same field.
TRAINING_COLUMNS: Dict[str, str] = {
    "employee_code": "employee_code",
    "employee_name": "employee_name",
    "email": "email",
    "employee_status": "employee_status",
    "gender": "gender",
    "date_of_joining": "date_of_joining",
    "department": "department",
    "designation": "designation",
    "reporting_manager_code": "reporting_manager_code",
    "reporting_manager_name": "reporting_manager_name",
    "course_category": "course_category",
    "course_name": "course_name",
    "course_type": "course_type",
    "course_end_date": "course_end_date",
    "enrollment_status": "enrollment_status",
    "course_completion_hours": "completion_hours",
    "completion_hours": "completion_hours",
    "course_enrolment_date": "enrollment_date",
    "enrollment_date": "enrollment_date",
    "course_completion_date": "completion_date",
    "completion_date": "completion_date",
    "course_progress": "progress",
    "progress": "progress",
    "course_completion_status": "completion_status",
    "completion_status": "completion_status",
    "Store ID": "store_id",
    "store_id": "store_id",
}

TEXT_FIELDS = [
    "employee_code",
    "employee_name",
    "email",
    "employee_status",
    "gender",
    "date_of_joining",
    "department",
    "designation",
    "reporting_manager_code",
    "reporting_manager_name",
    "course_category",
    "course_name",
    "course_type",
    "course_end_date",
    "enrollment_status",
    "enrollment_date",
    "completion_date",
]


@dataclass(frozen=True)
class NormalizationResult:
    records: Tuple[TrainingRecord, ...]
    dropped: int
    raw_count: int


def clean_key(key: object) -> str:
    return re.sub(r"\s+", " ", str(key).strip())


def _clean_row(row: Mapping[str, object]) -> Dict[str, object]:
    """Row keyed by cleaned headers; the first non-blank value wins when headers collide."""
    out: Dict[str, object] = {}
    for key, value in row.items():
        key = clean_key(key)
        current = out.get(key)
        if key not in out or current is None or str(current).strip() == "":
            out[key] = value
    return out


def _as_text(series: pd.Series) -> pd.Series:
    out = series.astype("string").str.strip()
    return out.fillna("")


def _field_text(df: pd.DataFrame, field: str) -> pd.Series:
    """First non-blank value across every raw column that maps to ``field``."""
    sources = [c for c, target in TRAINING_COLUMNS.items() if target == field and c in df.columns]
    out = pd.Series("", index=df.index, dtype="string")
    for col in reversed(sources):
        text = _as_text(df[col])
        out = text.where(text != "", out)
    return out


def _to_number(text: pd.Series, *, lower: float, upper: float = np.inf) -> pd.Series:
    values = pd.to_numeric(text.astype(object), errors="coerce").astype("float64")
    values = values.replace([np.inf, -np.inf], np.nan)
    return values.fillna(0.0).clip(lower=lower, upper=upper)


def normalize_records(rows: Iterable[Mapping[str, object]]) -> NormalizationResult:
    """Coerce raw rows into TrainingRecords.

    Rows without an employee code or name are dropped and counted; every other
    field defect falls back to a default instead of raising.
    """
    rows = list(rows)
    if not rows:
        return NormalizationResult(records=(), dropped=0, raw_count=0)

    df = pd.DataFrame([_clean_row(r) for r in rows], dtype=object)

    out = pd.DataFrame(index=df.index)
    for field in TEXT_FIELDS:
        out[field] = _field_text(df, field)

    out["completion_hours"] = _to_number(_field_text(df, "completion_hours"), lower=0.0)
    progress_text = _field_text(df, "progress").str.rstrip("%").str.strip()
    out["progress"] = _to_number(progress_text, lower=0.0, upper=100.0)

    status = _field_text(df, "completion_status")
    out["completion_status"] = status.where(status == COMPLETED, NOT_COMPLETED)

    out["store_id"] = _field_text(df, "store_id")

    keep = (out["employee_code"] != "") & (out["employee_name"] != "")
    dropped = int((~keep).sum())
    if dropped:
        logger.warning("Dropped %d of %d rows missing employee_code or employee_name", dropped, len(out))

    kept = out[keep]
    text_cols = TEXT_FIELDS + ["completion_status", "store_id"]
    kept = kept.astype({c: object for c in text_cols})
    records: List[TrainingRecord] = [
        TrainingRecord(**{**row, "store_id": row["store_id"] or None}) for row in kept.to_dict(orient="records")
    ]
    return NormalizationResult(records=tuple(records), dropped=dropped, raw_count=len(rows))
