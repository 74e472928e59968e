"""
Main activity statistics processor: load workbooks, normalize, aggregate, report.
"""
import logging
from pathlib import Path

import pandas as pd

from engine_config import EngineConfig
from errors import NoValidDataError
from name_aliases import build_alias_skeleton, save_aliases
from record_normalizer import normalize_activity_rows, normalize_hour_log_rows
from reporting import build_report_tables, write_report
from workbook_io import (
    ACTIVITY_SHEET,
    HOUR_LOG_SHEET,
    load_activity_rows,
    load_hour_log_rows,
)

# Setup logging
logger = logging.getLogger(__name__)

WORKBOOK_SUFFIXES = [".xlsx", ".xlsm"]
MAX_LOGGED_DIAGNOSTICS = 10


# ---------------------------------------------------------
# HELPERS
# ---------------------------------------------------------

def find_workbooks(input_dir: Path):
    """
    Locate the activity and hour-log workbooks by their sheet names.

    Returns:
        (activity_path or None, hour_log_path or None)
    """
    activity_path = None
    hour_log_path = None
    if not input_dir.exists():
        return None, None

    for path in sorted(input_dir.glob("*")):
        if path.suffix.lower() not in WORKBOOK_SUFFIXES or path.name.startswith("~$"):
            continue
        with pd.ExcelFile(path) as workbook:
            sheets = workbook.sheet_names
        if activity_path is None and ACTIVITY_SHEET in sheets:
            activity_path = path
            logger.info(f"Activity workbook: {path.name}")
        elif hour_log_path is None and HOUR_LOG_SHEET in sheets:
            hour_log_path = path
            logger.info(f"Hour-log workbook: {path.name}")
    return activity_path, hour_log_path


def log_diagnostics(label, diagnostics):
    """One warning with the count, then the first few entries."""
    if not diagnostics:
        return
    logger.warning(f"{label}: {len(diagnostics)} rows need review")
    for message in diagnostics[:MAX_LOGGED_DIAGNOSTICS]:
        logger.warning(f"  {message}")
    if len(diagnostics) > MAX_LOGGED_DIAGNOSTICS:
        logger.warning(f"  ... and {len(diagnostics) - MAX_LOGGED_DIAGNOSTICS} more")


def load_activity_records(path, engine_config):
    """
    Normalized activity records from the manpower workbook.

    Raises:
        SheetNotFoundError: the workbook has no activity sheet
        NoValidDataError: no row survived normalization
    """
    rows = load_activity_rows(path)
    result = normalize_activity_rows(rows, engine_config)
    if not result.records:
        raise NoValidDataError(
            f"No valid activity rows found in {Path(path).name}; check the workbook format"
        )
    log_diagnostics("Activity sheet", result.diagnostics)
    return result


def load_hour_log_records(path, engine_config, prefilter_year=False):
    """
    Normalized hour-log records.

    All years are kept unless prefilter_year is set, because year windows are
    applied per report table.
    """
    year = engine_config.hour_log_year if prefilter_year else None
    rows = load_hour_log_rows(path, year=year)
    result = normalize_hour_log_rows(rows, engine_config, year=year)
    if not result.records:
        raise NoValidDataError(
            f"No valid hour-log rows found in {Path(path).name}; check the workbook format"
        )
    log_diagnostics("Hour-log sheet", result.diagnostics)
    return result


# ---------------------------------------------------------
# MAIN PROCESSING
# ---------------------------------------------------------

def process(project_root, config=None):
    """
    Main processing function.

    Args:
        project_root: Path to project root
        config: Optional dict with settings like:
            - activity_file / hour_log_file: explicit workbook paths
              (default: discovered in project_root/input by sheet name)
            - output_format: 'csv', 'xlsx', 'markdown' or 'html' (default 'xlsx')
            - prefilter_hour_log: bool, keep only hour_log_year rows (default False)
            - any EngineConfig override (default_year, hours_per_day, ...)

    Returns:
        dict summary with record counts, diagnostics and written report paths
    """
    if config is None:
        config = {}
    project_root = Path(project_root)

    output_format = config.get('output_format', 'xlsx')
    prefilter = config.get('prefilter_hour_log', False)

    engine_config = EngineConfig.load(project_root, config)

    activity_path = config.get('activity_file')
    hour_log_path = config.get('hour_log_file')
    if activity_path is None and hour_log_path is None:
        activity_path, hour_log_path = find_workbooks(project_root / "input")
    if activity_path is None and hour_log_path is None:
        raise FileNotFoundError(f"No activity or hour-log workbook found in {project_root / 'input'}")

    activity = None
    hour_log = None
    if activity_path is not None:
        activity = load_activity_records(activity_path, engine_config)
    if hour_log_path is not None:
        hour_log = load_hour_log_records(hour_log_path, engine_config, prefilter)

    tables = build_report_tables(
        activity.records if activity else [],
        hour_log.records if hour_log else [],
        engine_config,
    )
    report_paths = write_report(tables, project_root / "output", output_format)

    return {
        'activity_records': len(activity.records) if activity else 0,
        'hour_log_records': len(hour_log.records) if hour_log else 0,
        'activity_dropped': dict(activity.dropped) if activity else {},
        'hour_log_dropped': dict(hour_log.dropped) if hour_log else {},
        'diagnostics': (activity.diagnostics if activity else []) + (hour_log.diagnostics if hour_log else []),
        'tables': list(tables),
        'report_paths': report_paths,
    }


def generate_alias_skeleton(project_root, activity_file=None):
    """
    Seed reference_data/name_aliases.json with every participant name.

    Existing mappings are kept; new names map to themselves.
    """
    project_root = Path(project_root)
    engine_config = EngineConfig.load(project_root)
    if activity_file is None:
        activity_file, _ = find_workbooks(project_root / "input")
    if activity_file is None:
        raise FileNotFoundError(f"No activity workbook found in {project_root / 'input'}")

    result = load_activity_records(activity_file, engine_config)
    skeleton = build_alias_skeleton(result.records, existing=engine_config.alias_table)
    added = len(skeleton) - len(engine_config.alias_table)
    aliases_file = save_aliases(skeleton, project_root)
    logger.info(f"Alias table has {len(skeleton)} names ({added} new): {aliases_file}")
    return aliases_file
