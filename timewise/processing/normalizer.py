"""Raw model output -> canonical Timetable.

The model's JSON comes in a handful of shapes depending on the prompt:

    payload shapes
        CANONICAL_DAYS  [{"day": "Monday", "periods": [...]}, ...]
        DAY_KEYED       {"monday": [entry, ...], ...}
        FLAT_ROWS       [{"day": "Mon", "subject": ..., "start_time": ...}, ...]

    entry shapes (inside DAY_KEYED / FLAT_ROWS)
        EXPLICIT_TIMES  "start": "9:00", "end": "9:50"
        COLUMN_RANGE    "start_col": 4, "end_col": 5     (grid.COLUMN_TIMES)
        SLOT_NUMBER     "slot": 3                        (grid.SLOT_*_TIMES)

Both may be wrapped as {"timetable": ..., "legend": {...}}. Each entry shape
has its own pure function returning the (start, end) pair; everything else
(code splitting, legend lookup, sorting, ids) is shared.
"""

from enum import Enum
from typing import Any, Collection, Dict, List, Optional, Tuple

from pydantic import ValidationError

from timewise.exceptions import TimetableStructureError
from timewise.models.grid import BREAK_COLUMNS, COLUMN_TIMES, SLOT_END_TIMES, SLOT_START_TIMES
from timewise.models.schemas import (
    ClassPeriod, DaySchedule, Timetable, canonical_day, day_sort_key, new_id
)
from timewise.processing.splitter import code_key, split_course_codes
from timewise.utils.file_io import extract_json_from_response
from timewise.utils.time_utils import normalize_time

# --- Field aliases seen in model output ---
CODE_KEYS = ("code", "subject", "course_code", "subject_code", "courseCode")
NAME_KEYS = ("name", "course_name", "courseName", "title")
TEACHER_KEYS = ("teacher", "faculty", "instructor", "teacher_name", "teacherName")
ROOM_KEYS = ("hall", "room", "venue")
TYPE_KEYS = ("type", "category")
START_KEYS = ("start", "start_time", "startTime")
END_KEYS = ("end", "end_time", "endTime")
START_COL_KEYS = ("start_col", "startCol", "col", "column")
END_COL_KEYS = ("end_col", "endCol")
SLOT_KEYS = ("slot", "slot_number", "slotNumber")

WRAPPER_KEYS = ("timetable", "schedule", "days")
LEGEND_KEYS = ("legend", "course_legend")
META_KEYS = LEGEND_KEYS + ("notes", "metadata")


class PayloadShape(str, Enum):
    CANONICAL_DAYS = "canonical_days"
    DAY_KEYED = "day_keyed"
    FLAT_ROWS = "flat_rows"


class EntryShape(str, Enum):
    EXPLICIT_TIMES = "explicit_times"
    COLUMN_RANGE = "column_range"
    SLOT_NUMBER = "slot_number"


def _first(entry: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        value = entry.get(key)
        if value is not None and (not isinstance(value, str) or value.strip()):
            return value.strip() if isinstance(value, str) else value
    return None


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Not a column/slot number: {value!r}")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return int(str(value).strip())


# --- Shape detection ---

def detect_payload_shape(payload: Any) -> PayloadShape:
    """Raises TimetableStructureError when the payload has no usable top-level shape."""
    if isinstance(payload, list):
        if not all(isinstance(item, dict) for item in payload):
            raise TimetableStructureError("Timetable array must contain objects", "list")
        if all("periods" in item for item in payload):
            return PayloadShape.CANONICAL_DAYS
        if all("day" in item for item in payload):
            return PayloadShape.FLAT_ROWS
        raise TimetableStructureError("Array items carry neither 'periods' nor 'day'", "list")

    if isinstance(payload, dict):
        for key, value in payload.items():
            if key in META_KEYS:
                continue
            if not isinstance(value, list):
                raise TimetableStructureError(
                    f"Day key {key!r} maps to {type(value).__name__}, expected a list", "dict"
                )
        return PayloadShape.DAY_KEYED

    raise TimetableStructureError(
        f"Expected an array or a day-keyed object, got {type(payload).__name__}",
        type(payload).__name__,
    )


def detect_entry_shape(entry: Dict[str, Any]) -> Optional[EntryShape]:
    if _first(entry, START_COL_KEYS) is not None:
        return EntryShape.COLUMN_RANGE
    if _first(entry, SLOT_KEYS) is not None:
        return EntryShape.SLOT_NUMBER
    if _first(entry, START_KEYS) is not None and _first(entry, END_KEYS) is not None:
        return EntryShape.EXPLICIT_TIMES
    return None


# --- One pure function per entry shape; None means "emit nothing" ---

def times_from_explicit(entry: Dict[str, Any],
                        afternoon_hours: Optional[Collection[int]] = None) -> Optional[Tuple[str, str]]:
    start = normalize_time(_first(entry, START_KEYS), afternoon_hours)
    end = normalize_time(_first(entry, END_KEYS), afternoon_hours)
    return start, end


def times_from_columns(entry: Dict[str, Any],
                       afternoon_hours: Optional[Collection[int]] = None) -> Optional[Tuple[str, str]]:
    start_col = _as_int(_first(entry, START_COL_KEYS))
    end_value = _first(entry, END_COL_KEYS)
    end_col = _as_int(end_value) if end_value is not None else start_col
    if start_col not in COLUMN_TIMES or end_col not in COLUMN_TIMES:
        return None
    return COLUMN_TIMES[start_col][0], COLUMN_TIMES[end_col][1]


def times_from_slot(entry: Dict[str, Any],
                    afternoon_hours: Optional[Collection[int]] = None) -> Optional[Tuple[str, str]]:
    slot = _as_int(_first(entry, SLOT_KEYS))
    if slot not in SLOT_START_TIMES or slot not in SLOT_END_TIMES:
        return None
    return SLOT_START_TIMES[slot], SLOT_END_TIMES[slot]


# Shared signature (entry, afternoon_hours); only times_from_explicit uses afternoon_hours.
ENTRY_TRANSFORMS = {
    EntryShape.EXPLICIT_TIMES: times_from_explicit,
    EntryShape.COLUMN_RANGE: times_from_columns,
    EntryShape.SLOT_NUMBER: times_from_slot,
}


# --- Legend ---

def parse_legend(raw: Any) -> Dict[str, Dict[str, Any]]:
    """
    Accepts {"CEDX 01": {"name": ..., "teacher": ...}}, {"CEDX 01": "Course name"}
    or [{"code": ..., "name": ..., "teacher": ...}] and returns info keyed by code_key().
    """
    items: List[Tuple[Any, Dict[str, Any]]] = []
    if isinstance(raw, dict):
        for code, info in raw.items():
            items.append((code, info if isinstance(info, dict) else {"name": info}))
    elif isinstance(raw, list):
        for info in raw:
            if isinstance(info, dict):
                items.append((_first(info, CODE_KEYS), info))

    legend = {}
    for code, info in items:
        details = {
            "name": _first(info, NAME_KEYS),
            "teacher": _first(info, TEACHER_KEYS),
            "room": _first(info, ROOM_KEYS),
        }
        for single in split_course_codes(code):
            legend[code_key(single)] = details
    return legend


def expand_cell(entry: Dict[str, Any], start: str, end: str,
                legend: Optional[Dict[str, Dict[str, Any]]] = None) -> List[ClassPeriod]:
    """One grid cell -> one period per course code it lists."""
    legend = legend or {}
    codes = split_course_codes(_first(entry, CODE_KEYS))
    name = _first(entry, NAME_KEYS)
    teacher = _first(entry, TEACHER_KEYS)
    room = _first(entry, ROOM_KEYS)
    period_type = _first(entry, TYPE_KEYS)
    supplied_id = _first(entry, ("id",))

    periods = []
    for index, code in enumerate(codes):
        info = legend.get(code_key(code), {})
        fields = {
            "subject": code,
            "course_name": info.get("name") or name,
            "teacher": info.get("teacher") or teacher,
            "room": room or info.get("room"),
            "type": period_type,
            "start_time": start,
            "end_time": end,
        }
        if supplied_id is not None:
            fields["id"] = str(supplied_id) if len(codes) == 1 else f"{supplied_id}-{index + 1}"
        periods.append(ClassPeriod(**fields))
    return periods


class ScheduleNormalizer:
    """
    Converts parsed model JSON into a canonical Timetable.

    Entries that cannot become periods are skipped and explained in
    `self.warnings` (reset on every call), so callers can log them.
    """

    def __init__(self, afternoon_hours: Optional[Collection[int]] = None):
        self.afternoon_hours = afternoon_hours
        self.warnings: List[str] = []

    def normalize_text(self, raw_text: str) -> Timetable:
        payload = extract_json_from_response(raw_text)
        if payload is None:
            raise TimetableStructureError("Model response is not valid JSON", "str")
        return self.normalize(payload)

    def normalize(self, payload: Any) -> Timetable:
        self.warnings = []
        payload, legend = self._unwrap(payload)
        shape = detect_payload_shape(payload)

        if shape == PayloadShape.CANONICAL_DAYS:
            days = self._from_canonical(payload)
        elif shape == PayloadShape.FLAT_ROWS:
            days = self._from_day_keyed(self._group_rows(payload), legend)
        else:
            days = self._from_day_keyed(payload, legend)

        return self._assemble(days)

    # --- Payload handling ---

    def _unwrap(self, payload: Any) -> Tuple[Any, Dict[str, Dict[str, Any]]]:
        if not isinstance(payload, dict):
            return payload, {}

        legend = {}
        for key in LEGEND_KEYS:
            if key in payload:
                legend.update(parse_legend(payload[key]))

        for key in WRAPPER_KEYS:
            inner = payload.get(key)
            if isinstance(inner, (list, dict)):
                if isinstance(inner, dict):
                    nested, nested_legend = self._unwrap(inner)
                    legend.update(nested_legend)
                    inner = nested
                return inner, legend

        return {k: v for k, v in payload.items() if k not in META_KEYS}, legend

    @staticmethod
    def _group_rows(rows: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
        grouped: Dict[str, List[Dict[str, Any]]] = {}
        for row in rows:
            grouped.setdefault(str(row.get("day", "")), []).append(row)
        return grouped

    def _from_canonical(self, payload: List[Dict[str, Any]]) -> List[Tuple[str, List[ClassPeriod]]]:
        days = []
        for item in payload:
            raw_periods = item.get("periods") or []
            if not isinstance(raw_periods, list):
                raise TimetableStructureError(
                    f"'periods' of {item.get('day')!r} is {type(raw_periods).__name__}, expected a list", "list"
                )
            periods = []
            for raw in raw_periods:
                try:
                    period = ClassPeriod.model_validate(raw)
                except ValidationError as e:
                    self.warnings.append(f"{item.get('day')}: skipped invalid period {raw!r}: {e.error_count()} error(s)")
                    continue
                # Already 24h: only zero-pad, never shift to PM
                try:
                    period = period.model_copy(update={
                        "start_time": normalize_time(period.start_time, afternoon_hours=()),
                        "end_time": normalize_time(period.end_time, afternoon_hours=()),
                    })
                except ValueError as e:
                    self.warnings.append(f"{item.get('day')}: skipped period with unreadable times ({e}): {raw!r}")
                    continue
                periods.append(period)
            days.append((canonical_day(item.get("day", "")), periods))
        return days

    def _from_day_keyed(self, payload: Dict[str, List[Any]],
                        legend: Dict[str, Dict[str, Any]]) -> List[Tuple[str, List[ClassPeriod]]]:
        days = []
        for raw_day, entries in payload.items():
            day = canonical_day(raw_day)
            periods = []
            for entry in entries:
                periods.extend(self._periods_from_entry(day, entry, legend))
            days.append((day, periods))
        return days

    def _periods_from_entry(self, day: str, entry: Any,
                            legend: Dict[str, Dict[str, Any]]) -> List[ClassPeriod]:
        if not isinstance(entry, dict):
            self.warnings.append(f"{day}: skipped non-object entry {entry!r}")
            return []

        shape = detect_entry_shape(entry)
        if shape is None:
            self.warnings.append(f"{day}: entry has no start/end, column or slot: {entry!r}")
            return []

        try:
            times = ENTRY_TRANSFORMS[shape](entry, self.afternoon_hours)
        except (TypeError, ValueError) as e:
            self.warnings.append(f"{day}: skipped entry with unreadable times ({e}): {entry!r}")
            return []

        if times is None:
            if shape != EntryShape.COLUMN_RANGE or not self._touches_break(entry):
                self.warnings.append(f"{day}: entry lies outside the timetable grid: {entry!r}")
            return []

        start, end = times
        if start >= end:
            self.warnings.append(f"{day}: skipped entry ending before it starts ({start}-{end}): {entry!r}")
            return []

        try:
            periods = expand_cell(entry, start, end, legend)
        except ValidationError as e:
            self.warnings.append(f"{day}: skipped entry with invalid fields ({e.error_count()} error(s)): {entry!r}")
            return []

        if not periods:
            self.warnings.append(f"{day}: skipped entry without a course code: {entry!r}")
        return periods

    @staticmethod
    def _touches_break(entry: Dict[str, Any]) -> bool:
        columns = {_as_int(_first(entry, START_COL_KEYS))}
        end_value = _first(entry, END_COL_KEYS)
        if end_value is not None:
            columns.add(_as_int(end_value))
        return any(col in BREAK_COLUMNS for col in columns)

    # --- Final assembly: one entry per day, week order, sorted, unique ids ---

    def _assemble(self, days: List[Tuple[str, List[ClassPeriod]]]) -> Timetable:
        merged: Dict[str, List[ClassPeriod]] = {}
        for day, periods in days:
            merged.setdefault(day, []).extend(periods)

        timetable = []
        for day in sorted(merged, key=day_sort_key):
            seen = set()
            periods = []
            for period in sorted(merged[day], key=lambda p: p.start_time):
                if not period.id.strip() or period.id in seen:
                    period = period.model_copy(update={"id": new_id()})
                seen.add(period.id)
                periods.append(period)
            timetable.append(DaySchedule(day=day, periods=periods))
        return timetable
