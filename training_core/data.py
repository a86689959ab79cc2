from __future__ import annotations

import logging
import os
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from training_core.directory import directory_from_frame, merge_directory
from training_core.filters import FilterSelection, apply_filters, normalize_filters
from training_core.normalize import normalize_records
from training_core.records import StoreDirectoryEntry
from training_core.tenure import as_utc, tag_tenure

logger = logging.getLogger(__name__)

DATA_DIR = Path(os.environ.get("TRAINING_DATA_DIR", Path(__file__).resolve().parents[1] / "data"))
TRAINING_GLOB = "training*.csv"
DIRECTORY_PATH = DATA_DIR / "store_directory.csv"

FileSignature = Tuple[Tuple[str, float], ...]


def get_source_files() -> List[Path]:
    return sorted(DATA_DIR.glob(TRAINING_GLOB))


def file_signature(files: Sequence[Path]) -> FileSignature:
    return tuple((str(f), f.stat().st_mtime) for f in files if f.exists())


def read_csv_rows(path: Path) -> List[Dict[str, object]]:
    # Everything is read as text; RecordNormalizer owns type coercion.
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    return df.to_dict(orient="records")


def load_directory(path: Optional[Path] = None) -> Tuple[StoreDirectoryEntry, ...]:
    path = path or DIRECTORY_PATH
    if not path.exists():
        logger.info("No store directory at %s; every record merges as Unknown", path)
        return ()
    return directory_from_frame(pd.read_csv(path, dtype=str, keep_default_na=False))


def build_dataset(rows: Sequence[Mapping[str, object]], directory: Sequence[StoreDirectoryEntry]) -> Dict[str, object]:
    """Normalize and merge one raw snapshot; the result does not depend on the clock."""
    normalized = normalize_records(rows)
    merged = merge_directory(normalized.records, directory)
    return {
        "raw_count": normalized.raw_count,
        "dropped_rows": normalized.dropped,
        "records": merged,
        "directory": tuple(directory),
    }


class DatasetCache:
    """Memoizes ``build_dataset`` on the identity of the raw rows and directory.

    Holding the last inputs keeps their ids from being reused while cached.
    """

    def __init__(self) -> None:
        self._inputs: Optional[Tuple[object, object]] = None
        self._dataset: Optional[Dict[str, object]] = None

    def get(self, rows: Sequence[Mapping[str, object]], directory: Sequence[StoreDirectoryEntry]) -> Dict[str, object]:
        if self._inputs is not None and self._inputs[0] is rows and self._inputs[1] is directory:
            return self._dataset  # type: ignore[return-value]
        self._dataset = build_dataset(rows, directory)
        self._inputs = (rows, directory)
        return self._dataset

    def clear(self) -> None:
        self._inputs = None
        self._dataset = None


# ---------------- Public API (FastAPI use) ----------------
@lru_cache(maxsize=4)
def _load_dashboard_data_cached(files_sig: FileSignature, directory_sig: FileSignature) -> Dict[str, object]:
    rows: List[Dict[str, object]] = []
    for name, _ in files_sig:
        file_rows = read_csv_rows(Path(name))
        logger.info("Loaded %d rows from %s", len(file_rows), name)
        rows.extend(file_rows)
    directory = load_directory(Path(directory_sig[0][0])) if directory_sig else ()
    dataset = build_dataset(rows, directory)
    dataset["files"] = [Path(name).name for name, _ in files_sig]
    return dataset


def load_dashboard_data() -> Dict[str, object]:
    files = get_source_files()
    directory_sig = file_signature([DIRECTORY_PATH])
    if not files:
        return {"files": [], "raw_count": 0, "dropped_rows": 0, "records": (), "directory": load_directory()}
    return _load_dashboard_data_cached(file_signature(files), directory_sig)


def prepare_context(
    filters: Mapping[str, object] | FilterSelection,
    data_ctx: Mapping[str, object],
    *,
    now: Optional[datetime] = None,
) -> Dict[str, object]:
    """Tag tenure for ``now`` and apply the filter selection to a loaded dataset."""
    selection = filters if isinstance(filters, FilterSelection) else normalize_filters(filters)
    ts = as_utc(now)
    records = tag_tenure(data_ctx.get("records", ()), ts)  # type: ignore[arg-type]
    filtered = apply_filters(records, selection)
    return {
        "filters": selection,
        "now": ts,
        "records": records,
        "filtered": filtered,
        "directory": data_ctx.get("directory", ()),
        "raw_count": data_ctx.get("raw_count", 0),
        "dropped_rows": data_ctx.get("dropped_rows", 0),
        "files": data_ctx.get("files", []),
    }
