import math
from fractions import Fraction
from typing import Optional

from pydantic import BaseModel, ConfigDict

from timewise.models.schemas import AttendanceRecord
from timewise.utils.config import ATTENDANCE_GOOD_PERCENT, ATTENDANCE_TARGET


def _target_fraction(target: float) -> Fraction:
    fraction = Fraction(str(target))
    if not 0 < fraction < 1:
        raise ValueError(f"Attendance target must be between 0 and 1, got {target}")
    return fraction


def attendance_percentage(attended: int, missed: int) -> int:
    """Rounded percentage of classes attended; 0 when nothing was recorded yet."""
    total = attended + missed
    if total == 0:
        return 0
    return math.floor(Fraction(attended * 100, total) + Fraction(1, 2))


def safe_to_miss(attended: int, missed: int, target: float = ATTENDANCE_TARGET) -> int:
    """Largest m with attended / (total + m) >= target."""
    total = attended + missed
    if total == 0:
        return 0
    return max(0, math.floor(attended / _target_fraction(target) - total))


def must_attend(attended: int, missed: int, target: float = ATTENDANCE_TARGET) -> int:
    """Smallest a with (attended + a) / (total + a) >= target."""
    t = _target_fraction(target)
    total = attended + missed
    if total == 0 or Fraction(attended, total) >= t:
        return 0
    return max(0, math.ceil((t * total - attended) / (1 - t)))


class AttendanceSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject: str
    attended: int
    missed: int
    total: int
    percentage: int
    safe_to_miss: int
    must_attend: int
    status: str


def summarize(record: AttendanceRecord, target: Optional[float] = None) -> AttendanceSummary:
    target = ATTENDANCE_TARGET if target is None else target
    percentage = attendance_percentage(record.attended, record.missed)

    if percentage < target * 100:
        status = "critical"
    elif percentage < ATTENDANCE_GOOD_PERCENT:
        status = "warning"
    else:
        status = "good"

    return AttendanceSummary(
        subject=record.subject,
        attended=record.attended,
        missed=record.missed,
        total=record.attended + record.missed,
        percentage=percentage,
        safe_to_miss=safe_to_miss(record.attended, record.missed, target),
        must_attend=must_attend(record.attended, record.missed, target),
        status=status,
    )
