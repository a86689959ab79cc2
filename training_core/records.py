from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

UNKNOWN = "Unknown"

COMPLETED = "Completed"
NOT_COMPLETED = "NotCompleted"

TENURE_BUCKETS = ("1-4 days", "5-15 days", "16-30 days", "over a month")
TENURE_FALLBACK = "over a month"


@dataclass(frozen=True)
class TrainingRecord:
    """One employee-course enrollment after normalization."""

    employee_code: str
    employee_name: str
    department: str = ""
    designation: str = ""
    date_of_joining: str = ""
    course_name: str = ""
    course_category: str = ""
    course_type: str = ""
    course_end_date: str = ""
    enrollment_date: str = ""
    completion_date: str = ""
    completion_hours: float = 0.0
    progress: float = 0.0
    completion_status: str = NOT_COMPLETED
    store_id: Optional[str] = None
    email: str = ""
    employee_status: str = ""
    gender: str = ""
    reporting_manager_code: str = ""
    reporting_manager_name: str = ""
    enrollment_status: str = ""

    @property
    def is_completed(self) -> bool:
        return self.completion_status == COMPLETED


@dataclass(frozen=True)
class StoreDirectoryEntry:
    store_id: str
    location: str = UNKNOWN
    region: str = UNKNOWN
    area_manager: str = UNKNOWN
    trainer: str = UNKNOWN


@dataclass(frozen=True)
class MergedRecord(TrainingRecord):
    """A TrainingRecord with directory fields always present.

    ``tenure`` stays None until ``tenure.tag_tenure`` fills it in for the
    evaluation instant of the current query.
    """

    location: str = UNKNOWN
    region: str = UNKNOWN
    area_manager: str = UNKNOWN
    trainer: str = UNKNOWN
    tenure: Optional[str] = None


class UntaggedTenureError(ValueError):
    pass


def tagged_tenure(record: MergedRecord) -> str:
    if record.tenure is None:
        raise UntaggedTenureError(
            f"Record for {record.employee_code!r} has no tenure bucket; tag it with tag_tenure first"
        )
    return record.tenure


def or_unknown(value: object) -> str:
    if value is None:
        return UNKNOWN
    s = str(value).strip()
    return s if s else UNKNOWN


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None:
        return None
    try:
        f = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(f) or math.isinf(f):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(f)).quantize(q, rounding=ROUND_HALF_UP))


def safe_rate(completed: int, total: int, ndigits: int = 1) -> float:
    """Completion percentage in [0, 100]; 0 for an empty or non-finite ratio."""
    if total <= 0:
        return 0.0
    rate = round_half_up(completed / total * 100, ndigits)
    if rate is None:
        return 0.0
    return min(100.0, max(0.0, rate))
