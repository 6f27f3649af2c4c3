"""Unit tests for timewise/utils/time_utils.py"""

import unittest

from timewise.utils.time_utils import is_valid_hhmm, normalize_time

AFTERNOON = range(1, 6)


class TestNormalizeTime(unittest.TestCase):

    def test_morning_is_zero_padded(self):
        self.assertEqual(normalize_time("9:00", AFTERNOON), "09:00")

    def test_small_hours_are_read_as_afternoon(self):
        self.assertEqual(normalize_time("2:30", AFTERNOON), "14:30")
        self.assertEqual(normalize_time("1:30", AFTERNOON), "13:30")
        self.assertEqual(normalize_time("5:59", AFTERNOON), "17:59")

    def test_noon_and_six_are_left_alone(self):
        self.assertEqual(normalize_time("12:40", AFTERNOON), "12:40")
        self.assertEqual(normalize_time("6:00", AFTERNOON), "06:00")

    def test_midnight_hour_passes_through(self):
        self.assertEqual(normalize_time("0:30", AFTERNOON), "00:30")
        self.assertEqual(normalize_time("00:05", AFTERNOON), "00:05")

    def test_evening_hours_pass_through(self):
        for hour in range(18, 24):
            with self.subTest(hour=hour):
                self.assertEqual(normalize_time(f"{hour}:15", AFTERNOON), f"{hour}:15")

    def test_24_hour_input_passes_through(self):
        self.assertEqual(normalize_time("14:20", AFTERNOON), "14:20")
        self.assertEqual(normalize_time("16:50:00", AFTERNOON), "16:50")

    def test_explicit_meridiem_wins(self):
        self.assertEqual(normalize_time("2:30 PM", AFTERNOON), "14:30")
        self.assertEqual(normalize_time("2:30 a.m.", AFTERNOON), "02:30")
        self.assertEqual(normalize_time("12 am", AFTERNOON), "00:00")
        self.assertEqual(normalize_time("12:15pm", AFTERNOON), "12:15")

    def test_alternative_separators(self):
        self.assertEqual(normalize_time("9.50", AFTERNOON), "09:50")
        self.assertEqual(normalize_time("0950", AFTERNOON), "09:50")
        self.assertEqual(normalize_time("11", AFTERNOON), "11:00")

    def test_heuristic_can_be_disabled(self):
        self.assertEqual(normalize_time("2:30", ()), "02:30")

    def test_default_heuristic(self):
        self.assertEqual(normalize_time("3:10"), "15:10")

    def test_invalid_values_raise(self):
        for raw in ("", None, "abc", "25:00", "9:75", "13:00 pm", "9-10"):
            with self.subTest(raw=raw):
                with self.assertRaises(ValueError):
                    normalize_time(raw, AFTERNOON)


class TestIsValidHHMM(unittest.TestCase):

    def test_valid(self):
        self.assertTrue(is_valid_hhmm("00:00"))
        self.assertTrue(is_valid_hhmm("23:59"))

    def test_invalid(self):
        self.assertFalse(is_valid_hhmm("9:00"))
        self.assertFalse(is_valid_hhmm("24:00"))
        self.assertFalse(is_valid_hhmm(None))


if __name__ == '__main__':
    unittest.main()
