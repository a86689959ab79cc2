from __future__ import annotations

from training_core.normalize import clean_key, normalize_records
from training_core.records import COMPLETED, NOT_COMPLETED


def test_numeric_and_status_coercion(raw_rows):
    result = normalize_records(raw_rows)
    first, second, third = result.records

    assert first.completion_hours == 2.5
    assert first.progress == 100.0
    assert first.completion_status == COMPLETED
    assert second.completion_hours == 0.0
    assert second.progress == 40.0
    assert second.completion_status == NOT_COMPLETED
    assert third.progress == 100.0
    assert third.store_id == "S2"


def test_completion_status_is_exact_match_after_trim():
    rows = [
        {"employee_code": "A", "employee_name": "a", "course_completion_status": "  Completed "},
        {"employee_code": "B", "employee_name": "b", "course_completion_status": "completed"},
        {"employee_code": "C", "employee_name": "c", "course_completion_status": "COMPLETED"},
        {"employee_code": "D", "employee_name": "d"},
    ]
    statuses = [r.completion_status for r in normalize_records(rows).records]
    assert statuses == [COMPLETED, NOT_COMPLETED, NOT_COMPLETED, NOT_COMPLETED]


def test_malformed_numbers_fall_back_to_zero():
    rows = [
        {"employee_code": "A", "employee_name": "a", "course_completion_hours": "abc", "course_progress": "n/a%"},
        {"employee_code": "B", "employee_name": "b", "course_completion_hours": "inf", "course_progress": None},
        {"employee_code": "C", "employee_name": "c", "course_completion_hours": 4, "course_progress": 55.5},
    ]
    records = normalize_records(rows).records
    assert [r.completion_hours for r in records] == [0.0, 0.0, 4.0]
    assert [r.progress for r in records] == [0.0, 0.0, 55.5]


def test_rows_missing_identity_are_dropped_and_counted():
    rows = [
        {"employee_code": "A", "employee_name": "Anna"},
        {"employee_code": "", "employee_name": "No Code"},
        {"employee_code": "B", "employee_name": "   "},
        {"employee_name": "Missing Code Key"},
        {"employee_code": "C", "employee_name": "Carl"},
    ]
    result = normalize_records(rows)
    assert [r.employee_code for r in result.records] == ["A", "C"]
    assert result.dropped == 3
    assert result.raw_count == 5


def test_header_whitespace_and_store_id_spellings():
    rows = [
        {" employee_code ": " E9 ", "employee_name": " Zed  ", "  Store   ID ": " S7 "},
        {"employee_code": "E10", "employee_name": "Yan", "Store ID": "", "store_id": "S8"},
        {"employee_code": "E11", "employee_name": "Xi"},
    ]
    records = normalize_records(rows).records
    assert records[0].employee_code == "E9"
    assert records[0].employee_name == "Zed"
    assert records[0].store_id == "S7"
    assert records[1].store_id == "S8"
    assert records[2].store_id is None


def test_colliding_headers_keep_first_non_blank_value():
    rows = [
        {"employee_code": "E1", "employee_name": "a", "Store ID": "S1", "Store  ID": ""},
        {"employee_code": "E2", "employee_name": "b", "Store ID": " ", "Store  ID": "S2"},
        {"employee_code": "E3", "employee_name": "c", "Store ID": "S3", " Store ID ": "S9"},
    ]
    assert [r.store_id for r in normalize_records(rows).records] == ["S1", "S2", "S3"]


def test_numeric_identity_values_become_text():
    records = normalize_records([{"employee_code": 101, "employee_name": "Num"}]).records
    assert records[0].employee_code == "101"


def test_empty_input():
    result = normalize_records([])
    assert result.records == ()
    assert result.dropped == 0


def test_clean_key_collapses_whitespace():
    assert clean_key("  Course \t  Name ") == "Course Name"
