"""
Date parsing for free-text spreadsheet cells.

Supported inputs:
- "1/3-5"        -> 2025/1/3 (start of range)
- "11/21-11/25"  -> 2025/11/21 (start of range)
- "1/3"          -> 2025/1/3
- "1/3(五)"      -> 2025/1/3 (weekday hint ignored)
- 45000          -> spreadsheet serial date
- "2024/3/5", "2024-3-5", "2024年3月5日", "3/5/2024", "2024.3.5"
"""
import re
import numbers
import logging
from datetime import date, datetime, timedelta

import pandas as pd

logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------

DEFAULT_YEAR = 2025

# Spreadsheet serial 1 is 1900-01-01, but 1900 is counted as a leap year,
# so serials are anchored one day earlier.
SPREADSHEET_EPOCH = datetime(1899, 12, 30)

MIN_YEAR = 1900
MAX_YEAR = 2100

BRACKET_PATTERN = re.compile(r"\([^)]*\)|（[^）]*）")
MONTH_DAY_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})$")
DAY_PATTERN = re.compile(r"^\d{1,2}$")
HAS_DIGIT = re.compile(r"\d")

# (pattern, order of year/month/day groups)
CANONICAL_FORMATS = [
    (re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$"), "ymd"),
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"), "ymd"),
    (re.compile(r"^(\d{4})年(\d{1,2})月(\d{1,2})日$"), "ymd"),
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), "mdy"),
    (re.compile(r"^(\d{4})\.(\d{1,2})\.(\d{1,2})$"), "ymd"),
]


# ---------------------------------------------------------
# HELPERS
# ---------------------------------------------------------

def _is_missing(value):
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def build_date(year, month, day):
    """Return a date, or None when the combination is not a real calendar day."""
    try:
        return date(year, month, day)
    except ValueError:
        return None


def strip_annotations(text):
    """Remove half-width and full-width parenthetical notes such as weekdays."""
    return BRACKET_PATTERN.sub("", text).strip()


def parse_month_day(text, default_year=DEFAULT_YEAR):
    """Parse a bare 'M/D' string against the default year."""
    match = MONTH_DAY_PATTERN.match(text.strip())
    if not match:
        return None
    return build_date(default_year, int(match.group(1)), int(match.group(2)))


def _parse_canonical(text):
    for pattern, order in CANONICAL_FORMATS:
        match = pattern.match(text)
        if not match:
            continue
        a, b, c = (int(g) for g in match.groups())
        if order == "ymd":
            year, month, day = a, b, c
        else:
            month, day, year = a, b, c
        if not MIN_YEAR <= year <= MAX_YEAR:
            return None
        return build_date(year, month, day)
    return None


def _parse_generic(text):
    # Keywords such as "now" or "today" resolve relative to the clock
    if not HAS_DIGIT.search(text):
        return None
    try:
        parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.date()


# ---------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------

def parse_date(value, default_year=DEFAULT_YEAR):
    """
    Resolve a raw cell value to a calendar date.

    Args:
        value: empty, a native date/time, a spreadsheet serial number, or text
        default_year: year applied to texts that omit one

    Returns:
        datetime.date, or None when the value cannot be parsed. Callers treat
        None as "skip this row".
    """
    if _is_missing(value):
        return None

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        if not value:
            return None
        try:
            return (SPREADSHEET_EPOCH + timedelta(days=int(value))).date()
        except OverflowError:
            return None

    text = str(value).strip()
    if not text:
        return None
    text = strip_annotations(text)
    if not text:
        return None

    # Ranges only contribute their start date here
    if "-" in text:
        parts = text.split("-")
        if len(parts) == 2:
            start = parts[0].strip()
            if MONTH_DAY_PATTERN.match(start):
                return parse_month_day(start, default_year)

    if MONTH_DAY_PATTERN.match(text):
        return parse_month_day(text, default_year)

    for pattern, _ in CANONICAL_FORMATS:
        if pattern.match(text):
            return _parse_canonical(text)

    parsed = _parse_generic(text)
    if parsed is None:
        logger.debug(f"Could not parse date: {value!r}")
    return parsed


def count_range_days(text, default_month=None, default_year=DEFAULT_YEAR):
    """
    Count the days covered by a date or date range, both ends inclusive.

    Accepts 'M/D', 'M/D-D2', 'M/D-M2/D2' and 'D-D2'. The last form needs
    default_month (normally the activity's month).

    Raises:
        ValueError: when the text is not a valid date or forward range.
    """
    text = (text or "").strip()
    if not text:
        raise ValueError("empty date text")

    if "-" not in text:
        single = parse_month_day(text, default_year)
        if single is None:
            raise ValueError(f"cannot parse date '{text}'")
        return 1

    parts = text.split("-")
    if len(parts) != 2:
        raise ValueError(f"cannot parse date range '{text}'")
    start_part, end_part = parts[0].strip(), parts[1].strip()

    if "/" in start_part:
        match = MONTH_DAY_PATTERN.match(start_part)
        if not match:
            raise ValueError(f"cannot parse start date '{start_part}'")
        start_month, start_day = int(match.group(1)), int(match.group(2))
    else:
        if default_month is None:
            raise ValueError(f"range '{text}' needs a month or an activity date")
        if not DAY_PATTERN.match(start_part):
            raise ValueError(f"cannot parse start date '{start_part}'")
        start_month, start_day = default_month, int(start_part)

    if "/" in end_part:
        match = MONTH_DAY_PATTERN.match(end_part)
        if not match:
            raise ValueError(f"cannot parse end date '{end_part}'")
        end_month, end_day = int(match.group(1)), int(match.group(2))
    else:
        if not DAY_PATTERN.match(end_part):
            raise ValueError(f"cannot parse end date '{end_part}'")
        end_month, end_day = start_month, int(end_part)

    start = build_date(default_year, start_month, start_day)
    end = build_date(default_year, end_month, end_day)
    if start is None or end is None:
        raise ValueError(f"invalid date in '{text}'")

    days = (end - start).days + 1
    if days < 1:
        raise ValueError(f"range '{text}' ends before it starts")
    return days


def month_key(d):
    """(year, month) tuple used to order monthly pivots."""
    return (d.year, d.month)


def format_month(year, month):
    """Month label, e.g. '2025年1月'."""
    return f"{year}年{month}月"
