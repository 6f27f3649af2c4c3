"""Unit tests for timewise/processing/normalizer.py"""

import unittest

from timewise.exceptions import TimetableStructureError
from timewise.models.schemas import dump_timetable
from timewise.processing.normalizer import (
    EntryShape, PayloadShape, ScheduleNormalizer, detect_entry_shape, detect_payload_shape,
    times_from_columns, times_from_slot
)

AFTERNOON = range(1, 6)


def periods_of(timetable, day):
    return next(d.periods for d in timetable if d.day == day)


class TestShapeDetection(unittest.TestCase):

    def test_payload_shapes(self):
        self.assertEqual(detect_payload_shape([{"day": "Monday", "periods": []}]), PayloadShape.CANONICAL_DAYS)
        self.assertEqual(detect_payload_shape({"monday": []}), PayloadShape.DAY_KEYED)
        self.assertEqual(detect_payload_shape([{"day": "Mon", "code": "A", "slot": 1}]), PayloadShape.FLAT_ROWS)

    def test_entry_shapes(self):
        self.assertEqual(detect_entry_shape({"start_col": 1}), EntryShape.COLUMN_RANGE)
        self.assertEqual(detect_entry_shape({"slot": 2}), EntryShape.SLOT_NUMBER)
        self.assertEqual(detect_entry_shape({"start": "9:00", "end": "9:50"}), EntryShape.EXPLICIT_TIMES)
        self.assertIsNone(detect_entry_shape({"start": "9:00"}))

    def test_column_and_slot_lookups(self):
        self.assertEqual(times_from_columns({"start_col": 4, "end_col": 5}), ("11:00", "12:40"))
        self.assertEqual(times_from_columns({"col": "7"}), ("13:30", "14:20"))
        self.assertIsNone(times_from_columns({"start_col": 3}))
        self.assertIsNone(times_from_columns({"start_col": 11}))
        self.assertEqual(times_from_slot({"slot": 5}), ("13:30", "14:20"))
        self.assertIsNone(times_from_slot({"slot": 9}))


class TestDayKeyedPayload(unittest.TestCase):

    def setUp(self):
        self.normalizer = ScheduleNormalizer(AFTERNOON)

    def test_multi_code_cell_over_columns(self):
        payload = {"monday": [{"code": "CEDX 01/07", "start_col": 4, "end_col": 5, "hall": "H1", "type": "Lecture"}]}
        timetable = self.normalizer.normalize(payload)

        self.assertEqual([d.day for d in timetable], ["Monday"])
        periods = timetable[0].periods
        self.assertEqual([p.subject for p in periods], ["CEDX 01", "CEDX 07"])
        for p in periods:
            self.assertEqual((p.start_time, p.end_time), ("11:00", "12:40"))
            self.assertEqual(p.room, "H1")
            self.assertEqual(p.type.value, "Lecture")
        self.assertNotEqual(periods[0].id, periods[1].id)

    def test_multi_code_cell_with_explicit_times_shares_details(self):
        payload = {"monday": [{"code": "CEDX 01/07", "start": "9:00", "end": "9:50",
                               "name": "X", "teacher": "Y", "hall": "Z"}]}
        periods = periods_of(self.normalizer.normalize(payload), "Monday")

        self.assertEqual([p.subject for p in periods], ["CEDX 01", "CEDX 07"])
        for p in periods:
            self.assertEqual((p.start_time, p.end_time), ("09:00", "09:50"))
            self.assertEqual((p.course_name, p.teacher, p.room), ("X", "Y", "Z"))

    def test_numeric_hall_is_coerced_to_text(self):
        payload = {"monday": [{"code": "CEDX 01", "start": "9:00", "end": "9:50", "hall": 101, "teacher": 7}]}
        p = periods_of(self.normalizer.normalize(payload), "Monday")[0]

        self.assertEqual(p.room, "101")
        self.assertEqual(p.teacher, "7")
        self.assertEqual(self.normalizer.warnings, [])

    def test_entry_with_unusable_field_is_skipped_not_fatal(self):
        payload = {"monday": [
            {"code": "A", "slot": 1, "hall": {"block": "B"}},
            {"code": "B", "slot": 2, "hall": 12},
        ]}
        periods = periods_of(self.normalizer.normalize(payload), "Monday")

        self.assertEqual([(p.subject, p.room) for p in periods], [("B", "12")])
        self.assertEqual(len(self.normalizer.warnings), 1)

    def test_break_column_yields_nothing_silently(self):
        timetable = self.normalizer.normalize({"tuesday": [{"code": "X", "start_col": 3}]})
        self.assertEqual(periods_of(timetable, "Tuesday"), [])
        self.assertEqual(self.normalizer.warnings, [])

    def test_outside_grid_is_skipped_with_warning(self):
        timetable = self.normalizer.normalize({"tuesday": [{"code": "X", "start_col": 12}]})
        self.assertEqual(periods_of(timetable, "Tuesday"), [])
        self.assertEqual(len(self.normalizer.warnings), 1)

    def test_explicit_times_use_afternoon_rule(self):
        timetable = self.normalizer.normalize({"wed": [{"subject": "Math", "start": "2:00", "end": "2:50"}]})
        p = periods_of(timetable, "Wednesday")[0]
        self.assertEqual((p.start_time, p.end_time), ("14:00", "14:50"))

    def test_unreadable_and_inverted_entries_are_skipped(self):
        payload = {"mon": [
            {"code": "A", "start": "abc", "end": "x"},
            {"code": "B", "start": "10:00", "end": "9:00"},
            {"code": "C", "start": "9:00", "end": "9:50"},
        ]}
        timetable = self.normalizer.normalize(payload)
        self.assertEqual([p.subject for p in periods_of(timetable, "Monday")], ["C"])
        self.assertEqual(len(self.normalizer.warnings), 2)

    def test_days_and_periods_are_sorted(self):
        payload = {
            "friday": [{"code": "Late", "slot": 8}, {"code": "Early", "slot": 1}],
            "Monday": [{"code": "Mid", "slot": 4}],
        }
        timetable = self.normalizer.normalize(payload)
        self.assertEqual([d.day for d in timetable], ["Monday", "Friday"])
        self.assertEqual([p.subject for p in periods_of(timetable, "Friday")], ["Early", "Late"])

    def test_supplied_id_is_suffixed_when_cell_splits(self):
        timetable = self.normalizer.normalize({"mon": [{"id": "p1", "code": "A/B", "start_col": 1}]})
        self.assertEqual([p.id for p in periods_of(timetable, "Monday")], ["p1-1", "p1-2"])

    def test_wrapper_and_legend(self):
        payload = {
            "timetable": {"mon": [{"code": "CEDX 01", "start_col": 1}]},
            "legend": {"CEDX01": {"name": "Data Structures", "teacher": "Dr. Rao"}},
        }
        p = periods_of(self.normalizer.normalize(payload), "Monday")[0]
        self.assertEqual((p.start_time, p.end_time), ("09:00", "09:50"))
        self.assertEqual(p.course_name, "Data Structures")
        self.assertEqual(p.teacher, "Dr. Rao")

    def test_legend_as_list(self):
        payload = {
            "schedule": {"thu": [{"code": "PHY", "slot": 2}]},
            "legend": [{"code": "phy", "name": "Physics"}],
        }
        p = periods_of(self.normalizer.normalize(payload), "Thursday")[0]
        self.assertEqual(p.course_name, "Physics")


class TestOtherPayloads(unittest.TestCase):

    def setUp(self):
        self.normalizer = ScheduleNormalizer(AFTERNOON)

    def test_flat_rows_are_grouped_by_day(self):
        rows = [
            {"day": "Mon", "subject": "Physics", "start_time": "9:00", "end_time": "9:50"},
            {"day": "tue", "subject": "Chem", "slot": 5},
            {"day": "Monday", "subject": "Maths", "start_time": "11:00", "end_time": "11:50"},
        ]
        timetable = self.normalizer.normalize(rows)
        self.assertEqual([d.day for d in timetable], ["Monday", "Tuesday"])
        self.assertEqual([p.subject for p in periods_of(timetable, "Monday")], ["Physics", "Maths"])
        chem = periods_of(timetable, "Tuesday")[0]
        self.assertEqual((chem.start_time, chem.end_time), ("13:30", "14:20"))

    def test_canonical_output_is_stable(self):
        payload = {"monday": [{"code": "CEDX 01/07", "start_col": 4, "end_col": 5}],
                   "fri": [{"code": "LAB", "start": "2:00", "end": "4:00", "type": "lab"}]}
        first = self.normalizer.normalize(payload)
        second = self.normalizer.normalize(dump_timetable(first))
        self.assertEqual(dump_timetable(second), dump_timetable(first))

    def test_canonical_times_are_padded_before_sorting(self):
        payload = [{"day": "monday", "periods": [
            {"subject": "A", "startTime": "10:00", "endTime": "10:50"},
            {"subject": "B", "startTime": "9:00", "endTime": "9:50"},
            {"subject": "C", "startTime": "2:00", "endTime": "2:50"},
        ]}]
        periods = periods_of(self.normalizer.normalize(payload), "Monday")

        self.assertEqual([(p.subject, p.start_time) for p in periods],
                         [("C", "02:00"), ("B", "09:00"), ("A", "10:00")])
        self.assertEqual(periods[1].end_time, "09:50")

    def test_canonical_unreadable_time_is_skipped(self):
        payload = [{"day": "Monday", "periods": [{"subject": "A", "startTime": "TBA", "endTime": "10:00"}]}]
        self.assertEqual(periods_of(self.normalizer.normalize(payload), "Monday"), [])
        self.assertEqual(len(self.normalizer.warnings), 1)

    def test_canonical_invalid_period_is_skipped(self):
        timetable = self.normalizer.normalize([{"day": "Monday", "periods": [{"subject": "A"}]}])
        self.assertEqual(periods_of(timetable, "Monday"), [])
        self.assertEqual(len(self.normalizer.warnings), 1)

    def test_empty_payloads(self):
        self.assertEqual(self.normalizer.normalize([]), [])
        self.assertEqual(self.normalizer.normalize({}), [])

    def test_normalize_text_accepts_code_fences(self):
        text = 'Here you go:\n```json\n{"mon": [{"code": "A", "slot": 1}]}\n```'
        timetable = self.normalizer.normalize_text(text)
        self.assertEqual(periods_of(timetable, "Monday")[0].start_time, "09:00")

    def test_structural_failures_raise(self):
        for payload in ("text", 42, None, [1, 2], {"monday": "x"}, [{"foo": 1}]):
            with self.subTest(payload=payload):
                with self.assertRaises(TimetableStructureError):
                    self.normalizer.normalize(payload)

    def test_normalize_text_rejects_prose(self):
        with self.assertRaises(TimetableStructureError):
            self.normalizer.normalize_text("I could not read the image.")


if __name__ == '__main__':
    unittest.main()
