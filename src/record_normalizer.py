"""
Build canonical activity and hour-log records from raw rows.

Raw rows are dicts keyed by field role (see workbook_io). Bad rows are
dropped or degraded and reported through NormalizationResult.diagnostics.
"""
import re
import math
import numbers
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from content_types import UNCLASSIFIED
from date_parser import parse_date
from name_aliases import last_two_chars
from participant_parser import Participant, parse_participants

logger = logging.getLogger(__name__)

CANCELLED_MARKERS = ("取消", "cancel")
LEADING_NUMBER = re.compile(r"^\s*[-+]?\d[\d,]*(?:\.\d+)?")


@dataclass
class ActivityRecord:
    date: date
    activity_name: str = ""
    status: str = ""
    days: float = 0
    activity_type: str = ""
    city: str = ""
    volunteer_count: float = 0
    hours: float = 0
    participants: List[Participant] = field(default_factory=list)
    row_number: Optional[int] = None


@dataclass
class HourLogRecord:
    name: str
    standard_name: str
    date: date
    content: str = ""
    matched_content_type: str = UNCLASSIFIED
    hours: float = 0
    row_number: Optional[int] = None


@dataclass
class NormalizationResult:
    records: list = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)
    dropped: Counter = field(default_factory=Counter)

    def summary(self):
        return {
            'records': len(self.records),
            'diagnostics': len(self.diagnostics),
            'dropped': dict(self.dropped),
        }


# ---------------------------------------------------------
# HELPERS
# ---------------------------------------------------------

def to_text(value):
    """Cell value as stripped text; None/NaN become ''."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def parse_leading_number(value):
    """
    Leading number of a cell, e.g. '3小時' -> 3.0, '1,200' -> 1200.0.

    Returns None when the cell holds no number at all.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        number = float(value)
        return None if math.isnan(number) else number
    match = LEADING_NUMBER.match(str(value))
    if not match:
        return None
    return float(match.group(0).replace(",", "").strip())


def to_positive_number(value):
    """Coerce to float; non-positive or unparseable values become 0."""
    number = parse_leading_number(value)
    if number is None or math.isinf(number) or number <= 0:
        return 0
    return number


def is_cancelled(status):
    lowered = (status or "").lower()
    return any(marker in lowered for marker in CANCELLED_MARKERS)


def filter_cancelled(records):
    """Drop activity records whose status carries a cancellation marker."""
    return [record for record in records if not is_cancelled(record.status)]


# ---------------------------------------------------------
# ACTIVITY ROWS
# ---------------------------------------------------------

def normalize_activity_rows(rows, config):
    """
    Turn raw activity rows into ActivityRecord values.

    Args:
        rows: iterable of dicts with keys date, activity_name, status, days,
            activity_type, city, volunteer_count, hours, participants and
            optionally row_number
        config: EngineConfig

    Returns:
        NormalizationResult with records in input order
    """
    result = NormalizationResult()

    for index, row in enumerate(rows, start=2):
        row_number = row.get('row_number', index)
        raw_date = row.get('date')
        activity_date = parse_date(raw_date, config.default_year)
        if activity_date is None:
            result.dropped['unparseable_date'] += 1
            if to_text(raw_date):
                result.diagnostics.append(f"Row {row_number}: cannot parse date {raw_date!r}")
            continue

        status = to_text(row.get('status'))
        if is_cancelled(status):
            result.dropped['cancelled'] += 1
            continue

        participants = parse_participants(
            row.get('participants'),
            activity_date=activity_date,
            diagnostics=result.diagnostics,
            default_year=config.default_year,
            row_number=row_number,
        )

        result.records.append(ActivityRecord(
            date=activity_date,
            activity_name=to_text(row.get('activity_name')),
            status=status,
            days=to_positive_number(row.get('days')),
            activity_type=to_text(row.get('activity_type')),
            city=to_text(row.get('city')),
            volunteer_count=to_positive_number(row.get('volunteer_count')),
            hours=to_positive_number(row.get('hours')),
            participants=participants,
            row_number=row_number,
        ))

    logger.info(f"Normalized {len(result.records)} activity records "
                f"(dropped: {dict(result.dropped) or 'none'})")
    return result


# ---------------------------------------------------------
# HOUR LOG ROWS
# ---------------------------------------------------------

def normalize_hour_log_rows(rows, config, year=None):
    """
    Turn raw hour-log rows into HourLogRecord values.

    Args:
        rows: iterable of dicts with keys name, date, content, hours and
            optionally row_number
        config: EngineConfig (alias resolver and content classifier)
        year: keep only records dated in this year (None keeps all)

    Unresolved names keep their raw spelling and unmatched content goes to the
    unclassified bucket; both are reported in diagnostics.
    """
    result = NormalizationResult()
    resolver = config.resolver
    classifier = config.classifier

    for index, row in enumerate(rows, start=2):
        row_number = row.get('row_number', index)
        name = to_text(row.get('name'))
        record_date = parse_date(row.get('date'), config.default_year)
        if record_date is None:
            result.dropped['unparseable_date'] += 1
            continue
        if year is not None and record_date.year != year:
            result.dropped['other_year'] += 1
            continue

        raw_hours = row.get('hours')
        hours = to_positive_number(raw_hours)
        if to_text(raw_hours) and parse_leading_number(raw_hours) is None:
            result.diagnostics.append(f"Row {row_number}: cannot parse hours {raw_hours!r}")
        if not name or hours <= 0:
            result.dropped['missing_name_or_hours'] += 1
            continue

        standard_name, resolved = resolver.standardize(name)
        if not resolved:
            hints = resolver.suggest_canonical(name)
            hint_text = f"; closest: {', '.join(hints)}" if hints else ""
            result.diagnostics.append(
                f"Row {row_number}: no alias for volunteer '{name}' "
                f"(last two: '{last_two_chars(name)}'){hint_text}"
            )

        content = to_text(row.get('content'))
        matched = classifier.classify(content)
        if matched == UNCLASSIFIED:
            result.diagnostics.append(f"Row {row_number}: unclassified content '{content}'")

        result.records.append(HourLogRecord(
            name=name,
            standard_name=standard_name,
            date=record_date,
            content=content,
            matched_content_type=matched,
            hours=hours,
            row_number=row_number,
        ))

    logger.info(f"Normalized {len(result.records)} hour-log records "
                f"(dropped: {dict(result.dropped) or 'none'})")
    return result
