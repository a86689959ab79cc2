from __future__ import annotations

import pandas as pd

from training_core import data
from training_core.data import DatasetCache, build_dataset, load_dashboard_data, prepare_context
from training_core.filters import FilterSelection


def test_build_dataset_reports_drops(raw_rows, directory):
    rows = raw_rows + [{"employee_code": "", "employee_name": "Ghost"}]
    dataset = build_dataset(rows, directory)
    assert dataset["raw_count"] == 4
    assert dataset["dropped_rows"] == 1
    assert len(dataset["records"]) == 3


def test_dataset_cache_memoizes_on_identity(raw_rows, directory):
    cache = DatasetCache()
    first = cache.get(raw_rows, directory)
    assert cache.get(raw_rows, directory) is first

    copy = list(raw_rows)
    second = cache.get(copy, directory)
    assert second is not first
    assert second["records"] == first["records"]

    cache.clear()
    assert cache.get(copy, directory) is not second


def test_prepare_context_tags_and_filters(raw_rows, directory, now):
    dataset = build_dataset(raw_rows, directory)
    ctx = prepare_context({"tenure": ["1-4 days"]}, dataset, now=now)
    assert isinstance(ctx["filters"], FilterSelection)
    assert [r.employee_code for r in ctx["filtered"]] == ["E1", "E1"]
    assert len(ctx["records"]) == 3
    # The cached dataset itself is never re-tagged.
    assert all(r.tenure is None for r in dataset["records"])


def test_prepare_context_on_empty_dataset(now):
    ctx = prepare_context({}, {"records": ()}, now=now)
    assert ctx["filtered"] == ()


def test_load_dashboard_data_from_csv(tmp_path, monkeypatch, raw_rows):
    pd.DataFrame(raw_rows).to_csv(tmp_path / "training_2024.csv", index=False)
    pd.DataFrame(
        [{"Store ID": "S1", "location": "Downtown", "Region": "North", "AM": "Alice", "Trainer": "Tom"}]
    ).to_csv(tmp_path / "store_directory.csv", index=False)
    monkeypatch.setattr(data, "DATA_DIR", tmp_path)
    monkeypatch.setattr(data, "DIRECTORY_PATH", tmp_path / "store_directory.csv")

    loaded = load_dashboard_data()
    assert loaded["files"] == ["training_2024.csv"]
    assert len(loaded["records"]) == 3
    assert [r.region for r in loaded["records"]] == ["North", "North", "Unknown"]
    assert loaded["records"][1].completion_hours == 0.0


def test_load_dashboard_data_without_files(tmp_path, monkeypatch):
    monkeypatch.setattr(data, "DATA_DIR", tmp_path)
    monkeypatch.setattr(data, "DIRECTORY_PATH", tmp_path / "store_directory.csv")
    loaded = load_dashboard_data()
    assert loaded["records"] == ()
    assert loaded["directory"] == ()
