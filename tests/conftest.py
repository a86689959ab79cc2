"""Shared fixtures: a small enrollment export, a store directory and a fixed clock."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from training_core.directory import directory_from_rows, merge_directory
from training_core.normalize import normalize_records
from training_core.tenure import tag_tenure

NOW = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def raw_rows():
    return [
        {
            "employee_code": "E1",
            "employee_name": "Asha Rao",
            "department": "Operations",
            "designation": "Clerk",
            "date_of_joining": "2024-06-28",
            "course_name": "Safety Basics",
            "course_end_date": "2024-07-15",
            "course_completion_hours": "2.5",
            "course_progress": "100%",
            "course_completion_status": "Completed",
            "Store ID": "S1",
        },
        {
            "employee_code": "E1",
            "employee_name": "Asha Rao",
            "department": "Operations",
            "designation": "Clerk",
            "date_of_joining": "2024-06-28",
            "course_name": "POS Training",
            "course_end_date": "2024-06-01",
            "course_completion_hours": "",
            "course_progress": "40%",
            "course_completion_status": "Not Completed",
            "Store ID": "S1",
        },
        {
            "employee_code": "E2",
            "employee_name": "Ben Ortiz",
            "department": "Sales",
            "designation": "Lead",
            "date_of_joining": "2024-01-02",
            "course_name": "Safety Basics",
            "course_end_date": "2024-03-01",
            "course_completion_hours": "3",
            "course_progress": "100",
            "course_completion_status": "Completed",
            "Store ID": "S2",
        },
    ]


@pytest.fixture
def directory():
    return directory_from_rows(
        [
            {"Store ID": "S1", "location": "Downtown", "Region": "North", "AM": "Alice", "Trainer": "Tom"},
            {"Store ID": "S3", "location": "Mall", "Region": "South", "AM": "TBD", "Trainer": "Tina"},
        ]
    )


@pytest.fixture
def records(raw_rows, directory, now):
    normalized = normalize_records(raw_rows)
    return tag_tenure(merge_directory(normalized.records, directory), now)
