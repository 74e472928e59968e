"""
Unit tests for reconciliation module.
"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

import unittest
import pandas as pd

from reconciliation import reconcile


class TestReconcile(unittest.TestCase):
    def test_missing_names_count_as_zero(self):
        result = reconcile({"甲": 5}, {"甲": 3, "乙": 2})
        self.assertEqual(list(zip(result['name'], result['difference'])), [("甲", 2), ("乙", -2)])
        self.assertEqual(result.loc[1, 'hours_a'], 0)

    def test_zero_differences_dropped(self):
        result = reconcile({"甲": 3}, {"甲": 3})
        self.assertTrue(result.empty)
        self.assertEqual(list(result.columns), ['name', 'difference', 'hours_a', 'hours_b'])

    def test_accepts_series(self):
        hours_a = pd.Series({"甲": 16.0, "乙": 6.0})
        hours_b = pd.Series({"丙": 4.0})
        result = reconcile(hours_a, hours_b)
        self.assertEqual(result['name'].tolist(), ["甲", "乙", "丙"])

    def test_none_inputs(self):
        self.assertTrue(reconcile(None, None).empty)


if __name__ == "__main__":
    unittest.main()
