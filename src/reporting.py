"""
Reporting module: numbered statistics tables and their export.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass

import pandas as pd

from aggregation import (
    category_totals,
    dimension_by_activity_type,
    matrix_row_totals,
    monthly_matrix,
    participant_count_matrix,
    participant_hours_matrix,
    total_hours_for_content_type,
    volunteer_hours_by_content,
)
from reconciliation import reconcile

logger = logging.getLogger(__name__)

TOTAL_LABEL = "總和"
VALUE_LABEL = "數量"
PERCENT_LABEL = "百分比"

OUTPUT_FORMATS = ('csv', 'xlsx', 'markdown', 'html')


@dataclass
class ReportTable:
    number: int
    title: str
    frame: pd.DataFrame

    @property
    def slug(self):
        return f"{self.number:02d}"


def stacked_table(matrix):
    """Matrix with a trailing row-total column, row key as first column."""
    table = matrix.copy()
    table[TOTAL_LABEL] = matrix_row_totals(matrix)
    return table.reset_index()


def distribution_table(series, category_label):
    """Category, value and share of total, plus a total row."""
    total = series.sum()
    table = pd.DataFrame({
        category_label: list(series.index),
        VALUE_LABEL: list(series.values),
        PERCENT_LABEL: [(value / total) if total > 0 else 0 for value in series.values],
    })
    total_row = pd.DataFrame({
        category_label: [TOTAL_LABEL],
        VALUE_LABEL: [total],
        PERCENT_LABEL: [1 if total > 0 else 0],
    })
    return pd.concat([table, total_row], ignore_index=True)


def build_report_tables(activity_records, hour_log_records, config):
    """
    Compute every report table the available data supports.

    Args:
        activity_records: ActivityRecord list (may be empty)
        hour_log_records: HourLogRecord list (may be empty)
        config: EngineConfig

    Returns:
        OrderedDict number -> ReportTable
    """
    tables = OrderedDict()

    def add(number, title, frame):
        tables[number] = ReportTable(number, title, frame)

    participant_hours = None
    if activity_records:
        number = 1
        for dimension, label in [('activity_type', '活動類型'), ('city', '縣市'), ('region', '地區')]:
            add(number, f"月份活動次數（{label}）",
                stacked_table(monthly_matrix(activity_records, dimension, 'count')))
            add(number + 1, f"月份活動天數（{label}）",
                stacked_table(monthly_matrix(activity_records, dimension, 'days')))
            add(number + 2, f"依{label}統計次數",
                distribution_table(category_totals(activity_records, dimension, 'count'), label))
            add(number + 3, f"依{label}統計天數",
                distribution_table(category_totals(activity_records, dimension, 'days'), label))
            number += 4

        add(13, "志工人數統計（依月份）",
            stacked_table(monthly_matrix(activity_records, 'activity_type', 'volunteers')))
        add(14, "志工人數統計（依縣市）",
            stacked_table(dimension_by_activity_type(activity_records, 'city')))
        add(15, "志工人數統計（依地區）",
            stacked_table(dimension_by_activity_type(activity_records, 'region')))
        add(16, "志工人數統計（依活動類型）",
            distribution_table(category_totals(activity_records, 'activity_type', 'volunteers'), '活動類型'))
        add(17, "志工人數統計（依地區）",
            distribution_table(category_totals(activity_records, 'region', 'volunteers'), '地區'))
        add(18, "志工人數統計（依縣市）",
            distribution_table(category_totals(activity_records, 'city', 'volunteers'), '縣市'))

        add(19, "參與人員次數",
            stacked_table(participant_count_matrix(activity_records, config.resolver)))
        participant_hours = participant_hours_matrix(
            activity_records, config.resolver, config.hours_per_day
        )
        add(20, "參與人員時數", stacked_table(participant_hours))

    hour_log_by_content = None
    if hour_log_records:
        hour_log_by_content, used = volunteer_hours_by_content(
            hour_log_records, config.content_types, year=config.hour_log_year
        )
        year_label = config.hour_log_year or "全部"
        add(21, f"{year_label} 志工時數（依參與內容）",
            stacked_table(hour_log_by_content[used]))

        start_year, end_year = config.training_years
        training = total_hours_for_content_type(
            hour_log_records, config.training_content_type,
            start_year=start_year, end_year=end_year,
        )
        add(22, f"{start_year}-{end_year} {config.training_content_type}時數",
            training.reset_index())

    if participant_hours is not None and hour_log_by_content is not None:
        activity_type = config.reconcile_activity_type
        content_type = config.reconcile_content_type
        hours_a = participant_hours[activity_type] if activity_type in participant_hours.columns else {}
        hours_b = hour_log_by_content[content_type] if content_type in hour_log_by_content.columns else {}
        differences = reconcile(hours_a, hours_b)
        if not differences.empty:
            add(23, f"出勤{activity_type}時數 - 回報{content_type}時數", differences)

    logger.info(f"Built {len(tables)} report tables")
    return tables


def write_report(tables, output_dir, output_format='csv'):
    """
    Write report tables.

    Args:
        tables: OrderedDict from build_report_tables
        output_dir: directory for the output
        output_format: 'csv' (one file per table), 'xlsx' (one sheet per
            table), 'markdown' or 'html' (single document)

    Returns:
        list of written paths
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format: {output_format}")
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []

    if output_format == 'csv':
        for table in tables.values():
            output_path = output_dir / f"report_{table.slug}.csv"
            table.frame.to_csv(output_path, index=False, encoding='utf-8-sig')
            written.append(output_path)
    elif output_format == 'xlsx':
        output_path = output_dir / "report.xlsx"
        with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
            for table in tables.values():
                table.frame.to_excel(writer, sheet_name=str(table.number), index=False)
                writer.sheets[str(table.number)].freeze_panes = "A2"
        written.append(output_path)
    elif output_format == 'markdown':
        output_path = output_dir / "report.md"
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write("# 活動統計報表\n\n")
            f.write(f"Generated: {pd.Timestamp.now().strftime('%Y-%m-%d %H:%M')}\n\n")
            for table in tables.values():
                f.write(f"## {table.number}. {table.title}\n\n")
                f.write(table.frame.to_markdown(index=False))
                f.write("\n\n")
        written.append(output_path)
    else:
        output_path = output_dir / "report.html"
        sections = [
            f"<h2>{table.number}. {table.title}</h2>\n"
            + table.frame.to_html(index=False, classes='table table-striped')
            for table in tables.values()
        ]
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write("<!DOCTYPE html>\n<html>\n<head><meta charset=\"utf-8\">"
                    "<title>活動統計報表</title></head>\n<body>\n")
            f.write("\n".join(sections))
            f.write("\n</body>\n</html>\n")
        written.append(output_path)

    for path in written:
        logger.info(f"Generated report: {path}")
    return written
