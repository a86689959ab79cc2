from __future__ import annotations

from dataclasses import fields

from training_core.directory import directory_from_rows, directory_index, merge_directory
from training_core.normalize import normalize_records
from training_core.records import UNKNOWN, TrainingRecord


def test_left_join_keeps_length_order_and_unknowns(raw_rows, directory):
    records = normalize_records(raw_rows).records
    merged = merge_directory(records, directory)

    assert len(merged) == len(records)
    assert [m.employee_code for m in merged] == ["E1", "E1", "E2"]
    assert merged[0].region == "North"
    assert merged[0].location == "Downtown"
    assert merged[0].area_manager == "Alice"
    assert merged[0].trainer == "Tom"
    # S2 is not in the directory.
    assert (merged[2].location, merged[2].region, merged[2].area_manager, merged[2].trainer) == (UNKNOWN,) * 4


def test_record_without_store_id_is_kept(directory):
    records = normalize_records([{"employee_code": "E5", "employee_name": "No Store"}]).records
    merged = merge_directory(records, directory)
    assert len(merged) == 1
    assert merged[0].store_id is None
    assert merged[0].region == UNKNOWN
    assert merged[0].trainer == UNKNOWN


def test_training_fields_are_copied_unchanged(raw_rows, directory):
    records = normalize_records(raw_rows).records
    for source, merged in zip(records, merge_directory(records, directory)):
        for f in fields(TrainingRecord):
            assert getattr(merged, f.name) == getattr(source, f.name)


def test_merge_empty_inputs():
    assert merge_directory([], []) == ()


def test_directory_from_rows_cleans_headers_and_values():
    directory = directory_from_rows(
        [
            {" Store ID ": "S1", "location": " Downtown ", "Region": "", "AM": "Alice", "Trainer": None},
            {"Store ID": "", "location": "Nowhere"},
            {"store_id": "S2", "Location": "Mall"},
        ]
    )
    assert [e.store_id for e in directory] == ["S1", "S2"]
    assert directory[0].location == "Downtown"
    assert directory[0].region == UNKNOWN
    assert directory[0].trainer == UNKNOWN
    assert directory[1].location == "Mall"
    assert directory[1].area_manager == UNKNOWN


def test_duplicate_store_ids_first_entry_wins():
    directory = directory_from_rows(
        [
            {"Store ID": "S1", "Region": "North"},
            {"Store ID": "S1", "Region": "South"},
        ]
    )
    assert directory_index(directory)["S1"].region == "North"
