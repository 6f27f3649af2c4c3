from collections import Counter, defaultdict
from typing import Dict, List

from timewise.models.schemas import DAY_ORDER, Timetable
from timewise.utils.time_utils import is_valid_hhmm


def _add_violation(day: str, message: str, violation_details: Dict[str, List[str]]):
    if message not in violation_details[day]:
        violation_details[day].append(message)


class TimetableRules:
    """
    Stateless checks for the invariants of a canonical timetable.
    """

    @staticmethod
    def check_unique_days(timetable: Timetable, details: Dict[str, List[str]]):
        counts = Counter(d.day for d in timetable)
        for day, count in counts.items():
            if count > 1:
                _add_violation(day, f"Duplicate Day ({count} entries)", details)

    @staticmethod
    def check_known_days(timetable: Timetable, details: Dict[str, List[str]]):
        for d in timetable:
            if d.day not in DAY_ORDER:
                _add_violation(d.day, "Unknown Day Label", details)

    @staticmethod
    def check_time_format(timetable: Timetable, details: Dict[str, List[str]]):
        for d in timetable:
            for p in d.periods:
                if not is_valid_hhmm(p.start_time) or not is_valid_hhmm(p.end_time):
                    _add_violation(d.day, f"Time Format ({p.subject} {p.start_time}-{p.end_time})", details)

    @staticmethod
    def check_start_before_end(timetable: Timetable, details: Dict[str, List[str]]):
        for d in timetable:
            for p in d.periods:
                if p.start_time >= p.end_time:
                    _add_violation(d.day, f"Start Not Before End ({p.subject} {p.start_time}-{p.end_time})", details)

    @staticmethod
    def check_sorted(timetable: Timetable, details: Dict[str, List[str]]):
        for d in timetable:
            starts = [p.start_time for p in d.periods]
            if starts != sorted(starts):
                _add_violation(d.day, "Periods Not Sorted", details)

    @staticmethod
    def check_unique_ids(timetable: Timetable, details: Dict[str, List[str]]):
        for d in timetable:
            counts = Counter(p.id for p in d.periods)
            if any(c > 1 for c in counts.values()):
                _add_violation(d.day, "Duplicate Period Id", details)


class TimetableValidator:
    def validate(self, timetable: Timetable) -> Dict[str, List[str]]:
        """
        Runs all invariant checks.
        Returns: Dict of violation descriptions per day label (empty when valid).
        """
        details: Dict[str, List[str]] = defaultdict(list)

        TimetableRules.check_unique_days(timetable, details)
        TimetableRules.check_known_days(timetable, details)
        TimetableRules.check_time_format(timetable, details)
        TimetableRules.check_start_before_end(timetable, details)
        TimetableRules.check_sorted(timetable, details)
        TimetableRules.check_unique_ids(timetable, details)

        return dict(details)

    def is_valid(self, timetable: Timetable) -> bool:
        return not self.validate(timetable)
