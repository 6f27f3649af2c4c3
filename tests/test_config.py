"""Unit tests for timewise/utils/config.py"""

import unittest

from timewise.utils.config import build_model_candidates, get_api_key


class TestApiKey(unittest.TestCase):

    def test_gemini_key_wins(self):
        self.assertEqual(get_api_key({"GEMINI_API_KEY": "g", "GOOGLE_API_KEY": "o"}), "g")

    def test_google_key_is_fallback(self):
        self.assertEqual(get_api_key({"GEMINI_API_KEY": "  ", "GOOGLE_API_KEY": " o "}), "o")

    def test_no_key(self):
        self.assertEqual(get_api_key({}), "")


class TestModelCandidates(unittest.TestCase):

    def test_model_major_order(self):
        labels = [c.label for c in build_model_candidates(["a", "b"], ["v1beta", "v1"])]
        self.assertEqual(labels, ["v1beta/a", "v1/a", "v1beta/b", "v1/b"])

    def test_defaults_are_not_empty(self):
        self.assertTrue(build_model_candidates())


if __name__ == '__main__':
    unittest.main()
