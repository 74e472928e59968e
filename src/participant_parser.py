"""
Participant field parsing.

A participants cell may mix three conventions, one per line:
- date-prefixed:  "11/29-30：盈瑩、藝婷"   every name gets the range's day count
- name-suffixed:  "建宇(8/23)、怡君(21-22)" each name carries its own dates
- bare names:     "盈瑩、藝婷"              days = 0 (use the record's hours)
"""
import re
import logging
from dataclasses import dataclass

from date_parser import DEFAULT_YEAR, count_range_days

logger = logging.getLogger(__name__)

NAME_DELIMITERS = re.compile(r"[，,、]")
DATE_PREFIX_PATTERN = re.compile(
    r"^(\d{1,2}/\d{1,2}(?:\s*-\s*\d{1,2}(?:/\d{1,2})?)?)\s*[:：]\s*(.*)$"
)
NAME_SUFFIX_PATTERN = re.compile(r"^(.+?)[（(](.+?)[）)]$")


@dataclass(frozen=True)
class Participant:
    name: str
    # 0 means no per-person date annotation was found
    days: int = 0


def split_names(text):
    """Split on full-width comma, comma and 、; drop empty tokens."""
    return [token.strip() for token in NAME_DELIMITERS.split(text) if token.strip()]


def parse_name_with_date(token, activity_date=None, default_year=DEFAULT_YEAR):
    """
    Split a name token such as '建宇(21-22)' into name and day count.

    Returns:
        (Participant, error) where error is None on success. A token without
        brackets is a bare name with days = 0.
    """
    trimmed = (token or "").strip()
    match = NAME_SUFFIX_PATTERN.match(trimmed)
    if not match:
        return Participant(trimmed, 0), None

    name = match.group(1).strip()
    date_text = match.group(2).strip()
    if not name:
        return Participant("", 0), f"cannot extract name from '{trimmed}'"

    default_month = activity_date.month if activity_date is not None else None
    try:
        days = count_range_days(date_text, default_month=default_month, default_year=default_year)
    except ValueError as e:
        return Participant(name, 0), str(e)
    return Participant(name, days), None


def _parse_line(line, activity_date, default_year, errors):
    prefix_days = 0
    names_text = line

    prefix = DATE_PREFIX_PATTERN.match(line)
    if prefix:
        names_text = prefix.group(2)
        default_month = activity_date.month if activity_date is not None else None
        try:
            prefix_days = count_range_days(
                prefix.group(1).replace(" ", ""), default_month=default_month, default_year=default_year
            )
        except ValueError as e:
            errors.append(f"date prefix '{prefix.group(1)}': {e}")

    participants = []
    for token in split_names(names_text):
        parsed, error = parse_name_with_date(token, activity_date, default_year)
        if error and not prefix_days:
            errors.append(f"'{token}': {error}")
        if not parsed.name:
            continue
        days = prefix_days if prefix_days > 0 else parsed.days
        participants.append(Participant(parsed.name, days))
    return participants


def parse_participants(value, activity_date=None, diagnostics=None,
                       default_year=DEFAULT_YEAR, row_number=None):
    """
    Parse a participants cell into an ordered list of Participant.

    Args:
        value: raw cell value (text, number or None)
        activity_date: resolved activity date; supplies the month for 'D-D2'
        diagnostics: optional list that receives one message per failed segment
        default_year: year used for day-count arithmetic
        row_number: only used to label diagnostics

    Never raises for malformed text; bad segments degrade to bare names.
    """
    if value is None:
        return []
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return []

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    errors = []
    participants = []
    for line in text.split("\n"):
        line = line.strip()
        if not line:
            continue
        participants.extend(_parse_line(line, activity_date, default_year, errors))

    if errors:
        label = f"Row {row_number}" if row_number is not None else "Participants"
        for error in errors:
            message = f"{label}: participant {error}"
            logger.debug(message)
            if diagnostics is not None:
                diagnostics.append(message)
    return participants
