#!/usr/bin/env python3
"""
Main entry point for the Volunteer Activity Statistics processor.

Usage:
    python app.py process                         # Build all report tables (default)
    python app.py report --output-format=csv      # Same, one CSV per table
    python app.py aliases                         # Seed reference_data/name_aliases.json
    python app.py --activity-file=input/x.xlsx    # Explicit activity workbook
    python app.py --hour-log-file=input/y.xlsx    # Explicit hour-log workbook
"""
import argparse
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from errors import WorkbookFormatError
from main_processor import generate_alias_skeleton, process


def setup_logging(verbose=False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler('app.log', encoding='utf-8')
        ]
    )
    return logging.getLogger(__name__)


def build_config(args):
    config = {
        'output_format': args.output_format,
        'prefilter_hour_log': args.prefilter_hour_log,
        'hours_per_day': args.hours_per_day,
        'hour_log_year': None if args.all_years else args.hour_log_year,
    }
    if args.activity_file:
        config['activity_file'] = Path(args.activity_file)
    if args.hour_log_file:
        config['hour_log_file'] = Path(args.hour_log_file)
    return config


def process_command(args, project_root, logger):
    """Process workbooks and write report tables."""
    logger.info("Starting activity processing...")

    try:
        results = process(project_root, build_config(args))
    except WorkbookFormatError as e:
        logger.error(str(e))
        return 1
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    logger.info("Processing complete!")
    logger.info(f"  Activity records: {results['activity_records']}")
    logger.info(f"  Hour-log records: {results['hour_log_records']}")
    logger.info(f"  Rows needing review: {len(results['diagnostics'])}")
    for path in results['report_paths']:
        logger.info(f"  Report: {path}")
    return 0


def aliases_command(args, project_root, logger):
    """Seed the alias table from participant names."""
    logger.info("Building alias table...")
    try:
        aliases_file = generate_alias_skeleton(
            project_root, Path(args.activity_file) if args.activity_file else None
        )
    except (WorkbookFormatError, FileNotFoundError) as e:
        logger.error(str(e))
        return 1
    logger.info(f"Edit {aliases_file} so variants of one person share the same value.")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description='Volunteer Activity Statistics',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python app.py                        # Process workbooks in input/ with defaults
  python app.py report                 # Same as process
  python app.py aliases                # Write name alias skeleton
  python app.py --output-format=csv    # One CSV per report table
  python app.py --verbose              # Enable debug logging
        """
    )

    parser.add_argument(
        'mode',
        nargs='?',
        default='process',
        choices=['process', 'report', 'aliases'],
        help='Operation mode (default: process)'
    )

    parser.add_argument('--activity-file', help='Activity workbook (sheet "2025")')
    parser.add_argument('--hour-log-file', help='Hour-log workbook (sheet "表單回應")')

    parser.add_argument(
        '--output-format',
        choices=['csv', 'xlsx', 'markdown', 'html'],
        default='xlsx',
        help='Report output format (default: xlsx)'
    )

    parser.add_argument(
        '--hours-per-day',
        type=float,
        default=8,
        help='Hours credited per annotated participant day (default: 8)'
    )

    parser.add_argument(
        '--hour-log-year',
        type=int,
        default=2025,
        help='Year shown in the hour-log content table (default: 2025)'
    )

    parser.add_argument(
        '--all-years',
        action='store_true',
        help='Show every year in the hour-log content table'
    )

    parser.add_argument(
        '--prefilter-hour-log',
        action='store_true',
        help='Drop hour-log rows outside --hour-log-year while reading'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose/debug logging'
    )

    args = parser.parse_args()

    # Setup logging
    logger = setup_logging(args.verbose)

    # Get project root
    project_root = Path(__file__).parent

    logger.info(f"Starting in {args.mode} mode")

    if args.mode in ('process', 'report'):
        return process_command(args, project_root, logger)
    elif args.mode == 'aliases':
        return aliases_command(args, project_root, logger)
    else:
        logger.error(f"Unknown mode: {args.mode}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
