"""
Read the activity and hour-log worksheets into raw row dicts.
"""
import re
import logging
from datetime import date
from pathlib import Path

import pandas as pd
from openpyxl.utils import column_index_from_string

from errors import SheetNotFoundError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------

ACTIVITY_SHEET = "2025"
HOUR_LOG_SHEET = "表單回應"

# Field role -> column letter
ACTIVITY_COLUMNS = {
    "date": "A",
    "activity_name": "B",
    "status": "C",
    "days": "D",
    "activity_type": "E",
    "city": "G",
    "volunteer_count": "H",
    "hours": "N",
    "participants": "Q",
}

HOUR_LOG_COLUMNS = {
    "name": "B",
    "date": "C",
    "content": "D",
    "hours": "F",
}

YEAR_PREFIX = re.compile(r"^(\d{4})")


# ---------------------------------------------------------
# HELPERS
# ---------------------------------------------------------

def clean_cell(value):
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if pd.isna(value):
        return None
    return value


def is_other_year(value, year):
    """
    Cheap year check before full date parsing.

    Text starting with a four-digit year and native dates are compared
    directly; anything else (serials, 'M/D') is left for the parser.
    """
    if value is None:
        return False
    if isinstance(value, str):
        match = YEAR_PREFIX.match(value.strip())
        return bool(match) and int(match.group(1)) != year
    if isinstance(value, date):
        return value.year != year
    return False


def read_sheet_rows(path, sheet_name, columns):
    """
    Read one worksheet and map fixed columns to field roles.

    The first row is a header and is skipped. Each dict carries the 1-based
    sheet row number under 'row_number'.

    Raises:
        SheetNotFoundError: when the workbook has no such sheet
    """
    path = Path(path)
    with pd.ExcelFile(path) as workbook:
        if sheet_name not in workbook.sheet_names:
            raise SheetNotFoundError(sheet_name, path.name)
        df = workbook.parse(sheet_name, header=None, dtype=object)

    positions = {field: column_index_from_string(letter) - 1 for field, letter in columns.items()}
    width = df.shape[1]

    rows = []
    for offset, values in enumerate(df.itertuples(index=False, name=None)):
        if offset == 0:
            continue
        row = {
            field: clean_cell(values[position]) if position < width else None
            for field, position in positions.items()
        }
        row["row_number"] = offset + 1
        rows.append(row)

    logger.info(f"Loaded {len(rows)} rows from sheet '{sheet_name}' of {path.name}")
    return rows


# ---------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------

def load_activity_rows(path, sheet_name=ACTIVITY_SHEET):
    """Raw activity rows from the manpower workbook."""
    return read_sheet_rows(path, sheet_name, ACTIVITY_COLUMNS)


def load_hour_log_rows(path, year=None, sheet_name=HOUR_LOG_SHEET):
    """
    Raw hour-log rows, skipping empty rows.

    Args:
        path: workbook path
        year: when set, rows whose date is visibly another year are skipped
        sheet_name: worksheet holding the form responses
    """
    rows = []
    skipped_year = 0
    for row in read_sheet_rows(path, sheet_name, HOUR_LOG_COLUMNS):
        if all(row[field] in (None, "") for field in HOUR_LOG_COLUMNS):
            continue
        if year is not None and is_other_year(row["date"], year):
            skipped_year += 1
            continue
        rows.append(row)

    if skipped_year:
        logger.info(f"Skipped {skipped_year} hour-log rows outside {year}")
    return rows
