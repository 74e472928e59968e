"""
Unit tests for name_aliases module.
"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

import json
import shutil
import tempfile
import unittest
from datetime import date

from name_aliases import (
    NameAliasResolver,
    add_alias,
    build_alias_skeleton,
    last_two_chars,
    load_aliases,
    save_aliases,
)
from participant_parser import Participant
from record_normalizer import ActivityRecord


class TestLastTwoChars(unittest.TestCase):
    def test_values(self):
        self.assertEqual(last_two_chars(" 王小明 "), "小明")
        self.assertEqual(last_two_chars("明"), "明")
        self.assertEqual(last_two_chars(None), "")


class TestNameAliasResolver(unittest.TestCase):
    def setUp(self):
        self.resolver = NameAliasResolver({
            "王小明": "王小明",
            "小明": "王小明",
            "張志明": "張志明",
            "李志明": "李志明",
        })

    def test_direct_lookup(self):
        self.assertEqual(self.resolver.resolve("小明"), "王小明")
        self.assertEqual(self.resolver.resolve("陌生人"), "陌生人")

    def test_resolve_is_idempotent(self):
        for name in ["小明", "王小明", "陌生人"]:
            once = self.resolver.resolve(name)
            self.assertEqual(self.resolver.resolve(once), once)

    def test_standardize(self):
        self.assertEqual(self.resolver.standardize("小明"), ("王小明", True))
        self.assertEqual(self.resolver.standardize("阿小明"), ("王小明", True))
        self.assertEqual(self.resolver.standardize(" 陌生人 "), ("陌生人", False))
        self.assertEqual(self.resolver.standardize(""), ("", False))

    def test_suffix_tie_goes_to_first_entry(self):
        self.assertEqual(self.resolver.resolve_by_suffix("志明"), "張志明")
        self.assertEqual(self.resolver.suffix_conflicts(), {"志明": ["張志明", "李志明"]})

    def test_canonical_names(self):
        self.assertEqual(self.resolver.canonical_names(), ["王小明", "張志明", "李志明"])

    def test_suggest_canonical(self):
        self.assertIn("王小明", self.resolver.suggest_canonical("王小名"))
        self.assertEqual(NameAliasResolver({}).suggest_canonical("王小名"), [])


class TestAliasFiles(unittest.TestCase):
    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_missing_file_gives_empty_table(self):
        self.assertEqual(load_aliases(self.test_dir), {})

    def test_save_and_add(self):
        path = save_aliases({"王小明": "王小明"}, self.test_dir)
        self.assertEqual(path, self.test_dir / "reference_data" / "name_aliases.json")
        add_alias("小明", "王小明", self.test_dir)
        self.assertEqual(load_aliases(self.test_dir), {"王小明": "王小明", "小明": "王小明"})
        # Stored as readable text, not \u escapes
        self.assertIn("王小明", path.read_text(encoding='utf-8'))
        self.assertEqual(json.loads(path.read_text(encoding='utf-8'))["小明"], "王小明")

    def test_skeleton_keeps_existing_entries(self):
        records = [
            ActivityRecord(date=date(2025, 1, 3), participants=[Participant("盈瑩"), Participant("小明")]),
            ActivityRecord(date=date(2025, 1, 4), participants=[Participant("盈瑩", 2)]),
        ]
        skeleton = build_alias_skeleton(records, existing={"小明": "王小明"})
        self.assertEqual(skeleton, {"小明": "王小明", "盈瑩": "盈瑩"})


if __name__ == "__main__":
    unittest.main()
