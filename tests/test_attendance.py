"""Unit tests for timewise/store/attendance.py"""

import unittest

from timewise.models.schemas import AttendanceRecord
from timewise.store.attendance import attendance_percentage, must_attend, safe_to_miss, summarize


class TestAttendanceMath(unittest.TestCase):

    def test_percentage(self):
        self.assertEqual(attendance_percentage(0, 0), 0)
        self.assertEqual(attendance_percentage(3, 1), 75)
        self.assertEqual(attendance_percentage(2, 1), 67)
        self.assertEqual(attendance_percentage(1, 7), 13)

    def test_safe_to_miss(self):
        self.assertEqual(safe_to_miss(9, 1, 0.75), 2)
        self.assertEqual(safe_to_miss(3, 1, 0.75), 0)
        self.assertEqual(safe_to_miss(1, 3, 0.75), 0)
        self.assertEqual(safe_to_miss(0, 0, 0.75), 0)

    def test_must_attend(self):
        self.assertEqual(must_attend(1, 3, 0.75), 8)
        self.assertEqual(must_attend(0, 1, 0.75), 3)
        self.assertEqual(must_attend(9, 1, 0.75), 0)
        self.assertEqual(must_attend(0, 0, 0.75), 0)

    def test_target_must_be_a_fraction(self):
        with self.assertRaises(ValueError):
            must_attend(1, 1, 1.5)


class TestSummarize(unittest.TestCase):

    def test_status_bands(self):
        cases = [((1, 3), "critical"), ((3, 1), "warning"), ((9, 1), "good")]
        for (attended, missed), status in cases:
            with self.subTest(attended=attended, missed=missed):
                record = AttendanceRecord(subject="Maths", attended=attended, missed=missed)
                self.assertEqual(summarize(record, 0.75).status, status)

    def test_summary_fields(self):
        summary = summarize(AttendanceRecord(subject="Maths", attended=9, missed=1), 0.75)
        self.assertEqual((summary.total, summary.percentage, summary.safe_to_miss, summary.must_attend),
                         (10, 90, 2, 0))


if __name__ == '__main__':
    unittest.main()
