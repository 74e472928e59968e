"""
Unit tests for geography module.
"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

import unittest

from content_types import UNCLASSIFIED
from geography import get_region, sort_cities, sort_regions


class TestGeography(unittest.TestCase):
    def test_get_region(self):
        self.assertEqual(get_region("新北市"), "北部")
        self.assertEqual(get_region("花蓮縣"), "東部")
        self.assertEqual(get_region("火星"), UNCLASSIFIED)
        self.assertEqual(get_region(""), UNCLASSIFIED)

    def test_sort_cities(self):
        cities = [UNCLASSIFIED, "火星", "台東縣", "台中市", "新北市", "台北市"]
        self.assertEqual(sort_cities(cities), ["台北市", "新北市", "台中市", "台東縣", "火星", UNCLASSIFIED])

    def test_unknown_cities_by_code_point(self):
        self.assertEqual(sort_cities(["金門縣", UNCLASSIFIED, "連江縣", "台北市"]),
                         ["台北市", "連江縣", "金門縣", UNCLASSIFIED])

    def test_sort_regions(self):
        self.assertEqual(sort_regions([UNCLASSIFIED, "東部", "北部", "南部"]),
                         ["北部", "南部", "東部", UNCLASSIFIED])


if __name__ == "__main__":
    unittest.main()
