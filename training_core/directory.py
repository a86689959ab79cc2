from __future__ import annotations

import logging
from dataclasses import fields
from functools import lru_cache
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from training_core.normalize import clean_key
from training_core.records import UNKNOWN, MergedRecord, StoreDirectoryEntry, TrainingRecord

logger = logging.getLogger(__name__)

DIRECTORY_COLUMNS = {
    "Store ID": "store_id",
    "store_id": "store_id",
    "location": "location",
    "Location": "location",
    "Region": "region",
    "region": "region",
    "AM": "area_manager",
    "area_manager": "area_manager",
    "Area Manager": "area_manager",
    "Trainer": "trainer",
    "trainer": "trainer",
}

# Directory placeholder for a role that has not been staffed yet.
PLACEHOLDER = "TBD"


def _text(value: object) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def directory_from_rows(rows: Iterable[Mapping[str, object]]) -> Tuple[StoreDirectoryEntry, ...]:
    """Build directory entries from header-keyed rows; rows without a store id are skipped."""
    entries: List[StoreDirectoryEntry] = []
    for row in rows:
        fields: Dict[str, str] = {}
        for key, value in row.items():
            field = DIRECTORY_COLUMNS.get(clean_key(key))
            if field and field not in fields:
                fields[field] = _text(value)
        store_id = fields.pop("store_id", "")
        if not store_id:
            continue
        entries.append(StoreDirectoryEntry(store_id=store_id, **{k: v or UNKNOWN for k, v in fields.items()}))
    return tuple(entries)


def directory_from_frame(df: pd.DataFrame) -> Tuple[StoreDirectoryEntry, ...]:
    if df.empty:
        return ()
    return directory_from_rows(df.to_dict(orient="records"))


@lru_cache(maxsize=8)
def directory_index(directory: Tuple[StoreDirectoryEntry, ...]) -> Dict[str, StoreDirectoryEntry]:
    # First entry wins for duplicated store ids.
    index: Dict[str, StoreDirectoryEntry] = {}
    for entry in directory:
        index.setdefault(entry.store_id, entry)
    return index


def _training_fields(record: TrainingRecord) -> Dict[str, object]:
    return {f.name: getattr(record, f.name) for f in fields(TrainingRecord)}


def merge_record(record: TrainingRecord, entry: Optional[StoreDirectoryEntry]) -> MergedRecord:
    if entry is None:
        return MergedRecord(**_training_fields(record))
    return MergedRecord(
        **_training_fields(record),
        location=entry.location or UNKNOWN,
        region=entry.region or UNKNOWN,
        area_manager=entry.area_manager or UNKNOWN,
        trainer=entry.trainer or UNKNOWN,
    )


def merge_directory(
    records: Sequence[TrainingRecord], directory: Iterable[StoreDirectoryEntry]
) -> Tuple[MergedRecord, ...]:
    """Left join ``records`` against the store directory.

    Output has the same length and order as ``records``; a missing or unmatched
    store id keeps the row with every directory field set to ``"Unknown"``.
    """
    index = directory_index(tuple(directory))
    merged: List[MergedRecord] = []
    misses = 0
    for record in records:
        entry = index.get(record.store_id) if record.store_id else None
        if entry is None:
            misses += 1
        merged.append(merge_record(record, entry))
    if misses:
        logger.debug("%d of %d records had no directory match", misses, len(merged))
    return tuple(merged)
