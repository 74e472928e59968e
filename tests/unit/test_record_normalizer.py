"""
Unit tests for record_normalizer module.
"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

import unittest
from datetime import date

from content_types import UNCLASSIFIED
from engine_config import EngineConfig
from participant_parser import Participant
from record_normalizer import (
    ActivityRecord,
    filter_cancelled,
    is_cancelled,
    normalize_activity_rows,
    normalize_hour_log_rows,
    to_positive_number,
    to_text,
)


def activity_row(**overrides):
    row = {
        'date': "1/3-5",
        'activity_name': "新店步道維護",
        'status': "完成",
        'days': 3,
        'activity_type': "手作",
        'city': "台北市",
        'volunteer_count': 4,
        'hours': 6,
        'participants': "盈瑩、藝婷",
    }
    row.update(overrides)
    return row


class TestHelpers(unittest.TestCase):
    def test_to_positive_number(self):
        self.assertEqual(to_positive_number(3), 3.0)
        self.assertEqual(to_positive_number("1,200"), 1200.0)
        self.assertEqual(to_positive_number(-2), 0)
        self.assertEqual(to_positive_number("abc"), 0)
        self.assertEqual(to_positive_number(None), 0)
        self.assertEqual(to_positive_number(float("nan")), 0)

    def test_to_positive_number_reads_leading_number(self):
        self.assertEqual(to_positive_number("3小時"), 3.0)
        self.assertEqual(to_positive_number("2天"), 2.0)
        self.assertEqual(to_positive_number(" 1.5 hr"), 1.5)
        self.assertEqual(to_positive_number("-2天"), 0)
        self.assertEqual(to_positive_number("約3小時"), 0)

    def test_to_text(self):
        self.assertEqual(to_text("  手作 "), "手作")
        self.assertEqual(to_text(None), "")
        self.assertEqual(to_text(float("nan")), "")

    def test_cancel_markers(self):
        self.assertTrue(is_cancelled("已取消"))
        self.assertTrue(is_cancelled("Cancelled"))
        self.assertFalse(is_cancelled("完成"))
        self.assertFalse(is_cancelled(""))

    def test_filter_cancelled(self):
        kept = ActivityRecord(date=date(2025, 1, 1), status="完成")
        dropped = ActivityRecord(date=date(2025, 1, 2), status="取消")
        self.assertEqual(filter_cancelled([kept, dropped]), [kept])


class TestNormalizeActivityRows(unittest.TestCase):
    def setUp(self):
        self.config = EngineConfig()

    def test_valid_row(self):
        result = normalize_activity_rows([activity_row()], self.config)
        self.assertEqual(len(result.records), 1)
        record = result.records[0]
        self.assertEqual(record.date, date(2025, 1, 3))
        self.assertEqual(record.days, 3)
        self.assertEqual(record.volunteer_count, 4)
        self.assertEqual(record.participants, [Participant("盈瑩"), Participant("藝婷")])
        self.assertEqual(record.row_number, 2)
        self.assertEqual(result.diagnostics, [])

    def test_cancelled_and_undated_rows_dropped(self):
        rows = [
            activity_row(),
            activity_row(status="取消"),
            activity_row(date="abc"),
            activity_row(date=None),
        ]
        result = normalize_activity_rows(rows, self.config)
        self.assertEqual(len(result.records), 1)
        self.assertEqual(result.dropped['cancelled'], 1)
        self.assertEqual(result.dropped['unparseable_date'], 2)
        # Only the non-empty bad date is worth a diagnostic
        self.assertEqual(result.diagnostics, ["Row 4: cannot parse date 'abc'"])

    def test_bad_numbers_clamped(self):
        rows = [activity_row(days=-1, volunteer_count="n/a", hours=None)]
        record = normalize_activity_rows(rows, self.config).records[0]
        self.assertEqual((record.days, record.volunteer_count, record.hours), (0, 0, 0))

    def test_days_with_unit_suffix(self):
        record = normalize_activity_rows([activity_row(days="2天", hours="16小時")], self.config).records[0]
        self.assertEqual((record.days, record.hours), (2.0, 16.0))

    def test_row_number_from_reader(self):
        result = normalize_activity_rows([activity_row(row_number=17, participants="建宇(abc)")], self.config)
        self.assertEqual(result.records[0].row_number, 17)
        self.assertEqual(len(result.diagnostics), 1)
        self.assertTrue(result.diagnostics[0].startswith("Row 17:"))


class TestNormalizeHourLogRows(unittest.TestCase):
    def setUp(self):
        self.config = EngineConfig(alias_table={"陳盈瑩": "陳盈瑩", "林藝婷": "林藝婷"})

    def test_resolution_and_classification(self):
        rows = [
            {'name': "盈瑩", 'date': "2025/3/1", 'content': "步道實作帶領", 'hours': 4},
            {'name': "路人甲", 'date': "2025/3/2", 'content': "其他", 'hours': 2},
        ]
        result = normalize_hour_log_rows(rows, self.config)
        first, second = result.records
        self.assertEqual(first.standard_name, "陳盈瑩")
        self.assertEqual(first.matched_content_type, "步道實作帶領")
        self.assertEqual(second.standard_name, "路人甲")
        self.assertEqual(second.matched_content_type, UNCLASSIFIED)
        self.assertEqual(len(result.diagnostics), 2)
        self.assertIn("路人甲", result.diagnostics[0])

    def test_dropped_rows(self):
        rows = [
            {'name': "林藝婷", 'date': "2024/1/1", 'content': "講座", 'hours': 2},
            {'name': "", 'date': "2025/1/1", 'content': "講座", 'hours': 3},
            {'name': "林藝婷", 'date': "2025/1/1", 'content': "講座", 'hours': 0},
            {'name': "林藝婷", 'date': None, 'content': "講座", 'hours': 1},
        ]
        result = normalize_hour_log_rows(rows, self.config, year=2025)
        self.assertEqual(result.records, [])
        self.assertEqual(result.summary()['dropped'], {
            'other_year': 1,
            'missing_name_or_hours': 2,
            'unparseable_date': 1,
        })

    def test_hours_with_unit_suffix(self):
        rows = [{'name': "陳盈瑩", 'date': "2025/3/1", 'content': "步道實作帶領", 'hours': "3小時"}]
        result = normalize_hour_log_rows(rows, self.config)
        self.assertEqual(len(result.records), 1)
        self.assertEqual(result.records[0].hours, 3.0)
        self.assertEqual(result.diagnostics, [])

    def test_unreadable_hours_reported(self):
        rows = [{'name': "陳盈瑩", 'date': "2025/3/1", 'content': "步道實作帶領", 'hours': "半天"}]
        result = normalize_hour_log_rows(rows, self.config)
        self.assertEqual(result.records, [])
        self.assertEqual(result.dropped['missing_name_or_hours'], 1)
        self.assertEqual(result.diagnostics, ["Row 2: cannot parse hours '半天'"])

    def test_all_years_kept_without_filter(self):
        rows = [{'name': "林藝婷", 'date': "2023/6/1", 'content': "回流訓練", 'hours': 5}]
        result = normalize_hour_log_rows(rows, self.config)
        self.assertEqual(len(result.records), 1)
        self.assertEqual(result.records[0].date, date(2023, 6, 1))


if __name__ == "__main__":
    unittest.main()
