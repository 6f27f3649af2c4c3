from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError

from timewise.models.schemas import (
    AttendanceRecord, CalendarEvent, DaySchedule, Timetable, canonical_day, day_sort_key
)
from timewise.store.attendance import AttendanceSummary, summarize
from timewise.utils.config import LOG_DIR, STORE_FILE
from timewise.utils.file_io import load_json_file, save_json_file
from timewise.utils.logger import DetailedLogger


class AppState(BaseModel):
    """One immutable snapshot of everything the dashboard shows."""
    model_config = ConfigDict(frozen=True)

    timetable: Tuple[DaySchedule, ...] = ()
    attendance: Tuple[AttendanceRecord, ...] = ()
    events: Tuple[CalendarEvent, ...] = ()

    def find_attendance(self, subject: str) -> Optional[AttendanceRecord]:
        return next((r for r in self.attendance if r.subject == subject), None)

    def attendance_summaries(self) -> List[AttendanceSummary]:
        return [summarize(r) for r in self.attendance]

    def chat_context(self) -> Dict[str, Any]:
        """The trimmed view of the state sent along with every chat query."""
        return {
            "timetable": [
                {
                    "day": d.day,
                    "periods": [
                        {"subject": p.subject, "startTime": p.start_time, "endTime": p.end_time, "room": p.room}
                        for p in d.periods
                    ],
                }
                for d in self.timetable
            ],
            "attendance": [
                {"subject": r.subject, "attended": r.attended, "missed": r.missed}
                for r in self.attendance
            ],
        }

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AppStore:
    """
    Holds the current AppState. Loaded from disk on construction, saved after
    every mutation. Mutations never touch the old snapshot: each returns the
    new one, and an unchanged snapshot is returned as-is without a save.
    """

    def __init__(self, path: Path = STORE_FILE, logger: Optional[DetailedLogger] = None,
                 log_dir: Optional[Path] = None):
        self.path = Path(path)
        self.logger = logger or DetailedLogger(agent_name="store", run_name="state", log_dir=log_dir or LOG_DIR)
        self._state = self._load()

    @property
    def state(self) -> AppState:
        return self._state

    def _load(self) -> AppState:
        if not self.path.exists():
            return AppState()
        data = load_json_file(self.path, "App State")
        if data is None:
            return AppState()
        try:
            return AppState.model_validate(data)
        except ValidationError as e:
            self.logger.log("ERROR", {"summary": f"Discarding unreadable state at {self.path}: {e.error_count()} error(s)"})
            return AppState()

    def _commit(self, state: AppState, action: str) -> AppState:
        if state is self._state:
            return state
        self._state = state
        if not save_json_file(self.path, state.to_json(), "App State"):
            self.logger.log("ERROR", {"summary": f"State after '{action}' could not be saved to {self.path}"})
        else:
            self.logger.log("INFO", {"summary": action})
        return state

    # --- Timetable ---

    def set_timetable(self, timetable: Timetable) -> AppState:
        """Replaces the whole timetable; nothing is merged."""
        return self._commit(
            self._state.model_copy(update={"timetable": tuple(timetable)}),
            f"Timetable replaced ({len(timetable)} day(s))",
        )

    def reschedule_class(self, subject: str, from_day: str, to_day: str) -> AppState:
        """
        Moves every period of `subject` on `from_day` to `to_day`.
        Subjects match case-insensitively when either name contains the other.
        A blank subject or target day, an unknown source day, the same source and
        target day, or no matching subject leave the state unchanged.
        """
        needle = subject.strip().lower()
        source, target = canonical_day(from_day), canonical_day(to_day)
        days = list(self._state.timetable)
        from_idx = next((i for i, d in enumerate(days) if canonical_day(d.day) == source), None)
        if not needle or not target or from_idx is None or source == target:
            return self._state

        def matches(name: str) -> bool:
            name = name.lower()
            return needle in name or name in needle

        moving = [p for p in days[from_idx].periods if matches(p.subject)]
        if not moving:
            return self._state

        days[from_idx] = DaySchedule(
            day=days[from_idx].day,
            periods=[p for p in days[from_idx].periods if p not in moving],
        )

        to_idx = next((i for i, d in enumerate(days) if canonical_day(d.day) == target), None)
        if to_idx is None:
            days.append(DaySchedule(day=target, periods=sorted(moving, key=lambda p: p.start_time)))
            days.sort(key=lambda d: day_sort_key(d.day))
        else:
            days[to_idx] = DaySchedule(
                day=days[to_idx].day,
                periods=sorted(list(days[to_idx].periods) + moving, key=lambda p: p.start_time),
            )

        return self._commit(
            self._state.model_copy(update={"timetable": tuple(days)}),
            f"Moved {len(moving)} '{subject}' period(s) from {source} to {target}",
        )

    # --- Attendance ---

    def _replace_record(self, record: AttendanceRecord) -> Tuple[AttendanceRecord, ...]:
        records = list(self._state.attendance)
        for i, existing in enumerate(records):
            if existing.subject == record.subject:
                records[i] = record
                return tuple(records)
        return tuple(records + [record])

    def update_attendance(self, subject: str, present: bool) -> AppState:
        """Counts one more attended (present=True) or missed class."""
        record = self._state.find_attendance(subject) or AttendanceRecord(subject=subject)
        if present:
            record = record.model_copy(update={"attended": record.attended + 1})
        else:
            record = record.model_copy(update={"missed": record.missed + 1})
        return self._commit(
            self._state.model_copy(update={"attendance": self._replace_record(record)}),
            f"Marked '{subject}' {'present' if present else 'absent'}",
        )

    def edit_attendance(self, subject: str, attended: int, missed: int) -> AppState:
        record = AttendanceRecord(subject=subject, attended=attended, missed=missed)
        return self._commit(
            self._state.model_copy(update={"attendance": self._replace_record(record)}),
            f"Set '{subject}' attendance to {attended}/{attended + missed}",
        )

    def reset_attendance(self, subject: str) -> AppState:
        if self._state.find_attendance(subject) is None:
            return self._state
        remaining = tuple(r for r in self._state.attendance if r.subject != subject)
        return self._commit(
            self._state.model_copy(update={"attendance": remaining}),
            f"Removed attendance for '{subject}'",
        )

    def sync_attendance(self) -> AppState:
        """Adds an empty record for every timetable subject that has none yet."""
        known = {r.subject for r in self._state.attendance}
        added = []
        for day in self._state.timetable:
            for period in day.periods:
                if period.subject not in known:
                    known.add(period.subject)
                    added.append(AttendanceRecord(subject=period.subject))
        if not added:
            return self._state
        return self._commit(
            self._state.model_copy(update={"attendance": self._state.attendance + tuple(added)}),
            f"Synced attendance, {len(added)} new subject(s)",
        )

    # --- Calendar events ---

    def add_event(self, event: CalendarEvent) -> AppState:
        return self._commit(
            self._state.model_copy(update={"events": self._state.events + (event,)}),
            f"Added event '{event.title}' on {event.date.isoformat()}",
        )

    def remove_event(self, event_id: str) -> AppState:
        remaining = tuple(e for e in self._state.events if e.id != event_id)
        if len(remaining) == len(self._state.events):
            return self._state
        return self._commit(
            self._state.model_copy(update={"events": remaining}),
            f"Removed event {event_id}",
        )
