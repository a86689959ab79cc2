from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from training_core.records import MergedRecord, or_unknown, safe_rate, tagged_tenure
from training_core.tenure import as_utc, parse_dates

STATUS_COMPLETED = "Completed"
STATUS_IN_PROGRESS = "InProgress"
STATUS_OVERDUE = "Overdue"

HIGH_TIER_MIN = 80
AVERAGE_TIER_MIN = 60

SORT_KEYS = ("name", "completion", "designation")


@dataclass(frozen=True)
class CourseStatus:
    course_name: str
    status: str
    enrollment_date: str = ""
    completion_date: str = ""
    course_end_date: str = ""


@dataclass(frozen=True)
class EmployeeRollup:
    employee_code: str
    employee_name: str
    designation: str
    total_courses: int
    completed_courses: int
    completion_rate: int
    courses: Tuple[CourseStatus, ...]
    date_of_joining: str = ""
    tenure: str = ""
    location: str = ""
    trainer: str = ""
    area_manager: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PerformanceTiers:
    high: Tuple[EmployeeRollup, ...]
    average: Tuple[EmployeeRollup, ...]
    needs_attention: Tuple[EmployeeRollup, ...]

    def counts(self) -> Dict[str, int]:
        return {"high": len(self.high), "average": len(self.average), "needs_attention": len(self.needs_attention)}


def employee_rate(completed: int, total: int) -> int:
    """Per-employee completion percentage, rounded to a whole number."""
    return int(safe_rate(completed, total, ndigits=0))


def course_status(record: MergedRecord, end_date: Optional[pd.Timestamp], now: pd.Timestamp) -> str:
    if record.is_completed:
        return STATUS_COMPLETED
    if end_date is not None and not pd.isna(end_date) and end_date < now:
        return STATUS_OVERDUE
    return STATUS_IN_PROGRESS


def rollup_employees(records: Sequence[MergedRecord], now: Optional[datetime] = None) -> List[EmployeeRollup]:
    """One rollup per distinct employee_code, in first-seen order."""
    if not records:
        return []
    ts = as_utc(now)
    end_dates = parse_dates(r.course_end_date for r in records)

    groups: Dict[str, List[int]] = {}
    for i, record in enumerate(records):
        groups.setdefault(record.employee_code, []).append(i)

    rollups: List[EmployeeRollup] = []
    for code, positions in groups.items():
        first = records[positions[0]]
        courses = tuple(
            CourseStatus(
                course_name=or_unknown(records[i].course_name),
                status=course_status(records[i], end_dates.iloc[i], ts),
                enrollment_date=records[i].enrollment_date,
                completion_date=records[i].completion_date,
                course_end_date=records[i].course_end_date,
            )
            for i in positions
        )
        total = len(positions)
        completed = sum(1 for i in positions if records[i].is_completed)
        rollups.append(
            EmployeeRollup(
                employee_code=code,
                employee_name=or_unknown(first.employee_name),
                designation=or_unknown(first.designation),
                total_courses=total,
                completed_courses=completed,
                completion_rate=employee_rate(completed, total),
                courses=courses,
                date_of_joining=first.date_of_joining,
                tenure=tagged_tenure(first),
                location=first.location,
                trainer=first.trainer,
                area_manager=first.area_manager,
            )
        )
    return rollups


def tier_of(completion_rate: float) -> str:
    if completion_rate >= HIGH_TIER_MIN:
        return "high"
    if completion_rate >= AVERAGE_TIER_MIN:
        return "average"
    return "needs_attention"


def performance_tiers(rollups: Sequence[EmployeeRollup]) -> PerformanceTiers:
    tiers: Dict[str, List[EmployeeRollup]] = {"high": [], "average": [], "needs_attention": []}
    for rollup in rollups:
        tiers[tier_of(rollup.completion_rate)].append(rollup)
    return PerformanceTiers(**{name: tuple(members) for name, members in tiers.items()})


def average_completion(rollups: Sequence[EmployeeRollup]) -> int:
    if not rollups:
        return 0
    return employee_rate(sum(r.completion_rate for r in rollups), len(rollups) * 100)


def search_employees(rollups: Sequence[EmployeeRollup], query: str) -> List[EmployeeRollup]:
    q = (query or "").strip().lower()
    if not q:
        return list(rollups)
    return [r for r in rollups if q in r.employee_name.lower() or q in r.employee_code.lower()]


def sort_employees(rollups: Sequence[EmployeeRollup], by: str = "name", order: str = "asc") -> List[EmployeeRollup]:
    if by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {by!r}")
    if order not in ("asc", "desc"):
        raise ValueError(f"Unknown sort order: {order!r}")
    if by == "completion":
        key = lambda r: r.completion_rate  # noqa: E731
    elif by == "designation":
        key = lambda r: r.designation.lower()  # noqa: E731
    else:
        key = lambda r: r.employee_name.lower()  # noqa: E731
    return sorted(rollups, key=key, reverse=order == "desc")
