from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional, Sequence, Tuple

import pandas as pd

from training_core.records import TENURE_BUCKETS, TENURE_FALLBACK, MergedRecord

DAY = pd.Timedelta(days=1)


def as_utc(now: Optional[datetime] = None) -> pd.Timestamp:
    """Evaluation instant as a UTC timestamp; naive datetimes are read as UTC."""
    ts = pd.Timestamp.now(tz="UTC") if now is None else pd.Timestamp(now)
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def parse_dates(values: Iterable[object]) -> pd.Series:
    """Parse date strings leniently; anything unparseable becomes NaT."""
    series = pd.Series(list(values), dtype=object)
    if series.empty:
        return pd.Series([], dtype="datetime64[ns, UTC]")
    series = series.where(series.astype(str).str.strip() != "", None)
    return pd.to_datetime(series, errors="coerce", utc=True, format="mixed")


def days_since(values: Iterable[object], now: Optional[datetime] = None) -> pd.Series:
    """Whole days elapsed from each date to ``now`` (floored); NaN where unparseable."""
    dates = parse_dates(values)
    return (as_utc(now) - dates) // DAY


def bucket_for_days(days: float) -> str:
    if days is None or math.isnan(days):
        return TENURE_FALLBACK
    if days <= 4:
        return TENURE_BUCKETS[0]
    if days <= 15:
        return TENURE_BUCKETS[1]
    if days <= 30:
        return TENURE_BUCKETS[2]
    return TENURE_BUCKETS[3]


def classify_tenure(date_of_joining: object, now: Optional[datetime] = None) -> str:
    return bucket_for_days(float(days_since([date_of_joining], now).iloc[0]))


def tag_tenure(records: Sequence[MergedRecord], now: Optional[datetime] = None) -> Tuple[MergedRecord, ...]:
    """Return copies of ``records`` with ``tenure`` computed for ``now``."""
    if not records:
        return ()
    days = days_since([r.date_of_joining for r in records], now)
    return tuple(replace(r, tenure=bucket_for_days(float(d))) for r, d in zip(records, days))
