import datetime
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(uuid.uuid4())


class DayOfWeek(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


DAY_ORDER = [d.value for d in DayOfWeek]

_DAY_LOOKUP = {
    "monday": "Monday", "mon": "Monday",
    "tuesday": "Tuesday", "tue": "Tuesday", "tues": "Tuesday",
    "wednesday": "Wednesday", "wed": "Wednesday",
    "thursday": "Thursday", "thu": "Thursday", "thur": "Thursday", "thurs": "Thursday",
    "friday": "Friday", "fri": "Friday",
    "saturday": "Saturday", "sat": "Saturday",
    "sunday": "Sunday", "sun": "Sunday",
}


def canonical_day(raw: Any) -> str:
    """Maps a raw day key to its canonical name; unknown keys are capitalized as-is."""
    text = str(raw).strip()
    return _DAY_LOOKUP.get(text.lower().rstrip("."), text.capitalize())


def day_sort_key(day: str):
    if day in DAY_ORDER:
        return (0, DAY_ORDER.index(day))
    return (1, 0)


class PeriodType(str, Enum):
    LECTURE = "Lecture"
    LAB = "Lab"
    TUTORIAL = "Tutorial"


_PERIOD_TYPE_LOOKUP = {
    "lecture": PeriodType.LECTURE, "lec": PeriodType.LECTURE, "theory": PeriodType.LECTURE,
    "lab": PeriodType.LAB, "laboratory": PeriodType.LAB, "practical": PeriodType.LAB,
    "tutorial": PeriodType.TUTORIAL, "tut": PeriodType.TUTORIAL,
}


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# 1. The fundamental unit: one scheduled session
class ClassPeriod(_CamelModel):
    id: str = Field(default_factory=new_id, description="Opaque identifier, unique within a day")
    subject: str = Field(description="Short subject/course code, e.g. 'CEDX 01'")
    course_name: Optional[str] = None
    teacher: Optional[str] = None
    start_time: str = Field(description="24-hour HH:MM")
    end_time: str = Field(description="24-hour HH:MM")
    room: Optional[str] = None
    type: Optional[PeriodType] = None

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value):
        if value is None or isinstance(value, PeriodType):
            return value
        return _PERIOD_TYPE_LOOKUP.get(str(value).strip().lower())

    @field_validator("subject", "start_time", "end_time", mode="before")
    @classmethod
    def _strip_required(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("course_name", "teacher", "room", mode="before")
    @classmethod
    def _coerce_optional_text(cls, value):
        # Models often return numeric halls (101) or codes
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (int, float)):
            return str(value)
        return value


# 2. A day label paired with its periods, ordered by start time
class DaySchedule(_CamelModel):
    day: str
    periods: List[ClassPeriod] = Field(default_factory=list)


# 3. A timetable is simply the ordered list of days
Timetable = List[DaySchedule]
TimetableAdapter = TypeAdapter(Timetable)


def dump_timetable(timetable: Timetable) -> List[Dict[str, Any]]:
    """Canonical JSON-ready form (camelCase keys)."""
    return TimetableAdapter.dump_python(timetable, mode="json", by_alias=True, exclude_none=True)


def load_timetable(data: Any) -> Timetable:
    return TimetableAdapter.validate_python(data or [])


# --- Attendance & calendar ---
class AttendanceRecord(_CamelModel):
    subject: str
    attended: int = Field(default=0, ge=0)
    missed: int = Field(default=0, ge=0)


class EventType(str, Enum):
    HOLIDAY = "Holiday"
    DUTY = "Duty"
    ABSENCE = "Absence"
    EXAM = "Exam"
    OTHER = "Other"


class CalendarEvent(_CamelModel):
    id: str = Field(default_factory=new_id)
    title: str
    date: datetime.date
    type: EventType = EventType.OTHER
    description: Optional[str] = None


# --- Chat bridge ---
class ToolInvocation(BaseModel):
    """A function call exactly as the model returned it."""
    name: str
    args: Dict[str, Any] = Field(default_factory=dict)


class ChatReply(BaseModel):
    reply: str = ""
    tool_invocations: List[ToolInvocation] = Field(default_factory=list)
