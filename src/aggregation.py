"""
Pivot tables over normalized activity and hour-log records.

Every matrix is a DataFrame indexed by row key (month, city, region, activity
type or person) whose columns are categories. Each row carries every column,
zero-filled, so consumers can treat the result as rectangular.
"""
import logging

import pandas as pd

from content_types import UNCLASSIFIED
from date_parser import format_month, month_key
from engine_config import HOURS_PER_DAY
from geography import REGION_ORDER, get_region, sort_cities, sort_regions

logger = logging.getLogger(__name__)

DIMENSIONS = ('activity_type', 'city', 'region')
MEASURES = ('count', 'days', 'volunteers')


class PivotAccumulator:
    """Insertion-ordered row -> {column -> total} with zero-initialized cells."""

    def __init__(self, columns=()):
        self.columns = []
        self.rows = {}
        for column in columns:
            self.add_column(column)

    def add_column(self, column):
        if column in self.columns:
            return
        self.columns.append(column)
        for cells in self.rows.values():
            cells.setdefault(column, 0)

    def ensure_row(self, row):
        if row not in self.rows:
            self.rows[row] = {column: 0 for column in self.columns}
        return self.rows[row]

    def add(self, row, column, value):
        self.add_column(column)
        cells = self.ensure_row(row)
        cells[column] += value

    def row_total(self, row):
        return sum(self.rows[row].values())

    def to_frame(self, row_order=None, column_order=None, index_name=None, labels=None):
        rows = list(self.rows) if row_order is None else list(row_order)
        columns = list(self.columns) if column_order is None else list(column_order)
        data = [[self.rows.get(row, {}).get(column, 0) for column in columns] for row in rows]
        index = [labels[row] for row in rows] if labels else rows
        return pd.DataFrame(data, index=pd.Index(index, name=index_name), columns=columns)


# ---------------------------------------------------------
# HELPERS
# ---------------------------------------------------------

def record_category(record, dimension):
    """Category of an activity record along a dimension."""
    if dimension == 'activity_type':
        return record.activity_type or UNCLASSIFIED
    city = record.city or UNCLASSIFIED
    if dimension == 'city':
        return city
    if dimension == 'region':
        return get_region(city)
    raise ValueError(f"Unknown dimension: {dimension}")


def record_measure(record, measure):
    if measure == 'count':
        return 1
    if measure == 'days':
        return record.days or 0
    if measure == 'volunteers':
        return record.volunteer_count or 0
    raise ValueError(f"Unknown measure: {measure}")


def order_categories(categories, dimension):
    """Column order for a dimension: sorted types, geography for places."""
    categories = list(dict.fromkeys(categories))
    if dimension == 'city':
        return sort_cities(categories)
    if dimension == 'region':
        # The four regions are always shown; unclassified only when present
        return REGION_ORDER + [c for c in sort_regions(categories) if c not in REGION_ORDER]
    return sorted(categories)


def activity_types(records):
    """Sorted activity types present in the records."""
    return order_categories((record_category(r, 'activity_type') for r in records), 'activity_type')


def _rows_by_total(accumulator):
    return sorted(accumulator.rows, key=lambda row: -accumulator.row_total(row))


def matrix_row_totals(matrix):
    return matrix.sum(axis=1)


def matrix_column_totals(matrix):
    return matrix.sum(axis=0)


def _year_predicate(year=None, start_year=None, end_year=None, years=None):
    """Years set beats an inclusive range, which beats a single year."""
    if years:
        allowed = set(years)
        return lambda y: y in allowed
    if start_year is not None and end_year is not None:
        return lambda y: start_year <= y <= end_year
    if year is not None:
        return lambda y: y == year
    return lambda y: True


# ---------------------------------------------------------
# MONTH x CATEGORY
# ---------------------------------------------------------

def monthly_matrix(records, dimension='activity_type', measure='count'):
    """
    Month x category pivot.

    Args:
        records: ActivityRecord list
        dimension: 'activity_type', 'city' or 'region'
        measure: 'count' (occurrences), 'days' (declared days) or
            'volunteers' (volunteer headcount)

    Returns:
        DataFrame indexed by month label (e.g. '2025年1月') in calendar order
    """
    if dimension not in DIMENSIONS:
        raise ValueError(f"Unknown dimension: {dimension}")
    accumulator = PivotAccumulator()
    for record in records:
        key = month_key(record.date)
        accumulator.add(key, record_category(record, dimension), record_measure(record, measure))

    columns = order_categories(accumulator.columns, dimension) if accumulator.columns else []
    if dimension == 'region':
        for column in columns:
            accumulator.add_column(column)
    row_order = sorted(accumulator.rows)
    labels = {key: format_month(*key) for key in row_order}
    return accumulator.to_frame(row_order, columns, index_name='month', labels=labels)


# ---------------------------------------------------------
# CATEGORY TOTALS
# ---------------------------------------------------------

def category_totals(records, dimension='activity_type', measure='count'):
    """
    Single-dimension distribution.

    Cities and regions come back in geography order with the unclassified
    bucket last; activity types by total, largest first.
    """
    if dimension not in DIMENSIONS:
        raise ValueError(f"Unknown dimension: {dimension}")
    totals = {}
    for record in records:
        category = record_category(record, dimension)
        totals[category] = totals.get(category, 0) + record_measure(record, measure)

    if dimension == 'city':
        order = sort_cities(totals)
    elif dimension == 'region':
        order = sort_regions(totals)
    else:
        order = sorted(totals, key=lambda c: -totals[c])
    return pd.Series([totals[c] for c in order], index=pd.Index(order, name=dimension),
                     name=measure, dtype=float if measure != 'count' else int)


def dimension_by_activity_type(records, dimension='city', measure='volunteers'):
    """City or region x activity type pivot (volunteer headcount by default)."""
    if dimension not in ('city', 'region'):
        raise ValueError(f"Unsupported dimension: {dimension}")
    accumulator = PivotAccumulator(activity_types(records))
    for record in records:
        accumulator.add(record_category(record, dimension), record_category(record, 'activity_type'),
                        record_measure(record, measure))
    if dimension == 'city':
        row_order = sort_cities(accumulator.rows)
    else:
        row_order = sort_regions(accumulator.rows)
    return accumulator.to_frame(row_order, index_name=dimension)


# ---------------------------------------------------------
# PERSON x ACTIVITY TYPE
# ---------------------------------------------------------

def participant_hours(participant, record, hours_per_day=HOURS_PER_DAY):
    """Hours credited to one participant of one record."""
    if participant.days > 0:
        return participant.days * hours_per_day
    return record.hours or 0


def _person_matrix(records, resolver, value_for):
    accumulator = PivotAccumulator(activity_types(records))
    for record in records:
        activity_type = record_category(record, 'activity_type')
        for participant in record.participants:
            if not participant.name:
                continue
            name = resolver.resolve(participant.name) if resolver is not None else participant.name
            accumulator.add(name, activity_type, value_for(participant, record))
    return accumulator.to_frame(_rows_by_total(accumulator), index_name='name')


def participant_count_matrix(records, resolver=None):
    """Person x activity type: one per record the person took part in."""
    return _person_matrix(records, resolver, lambda participant, record: 1)


def participant_hours_matrix(records, resolver=None, hours_per_day=HOURS_PER_DAY):
    """
    Person x activity type hours.

    A participant's day count (from a date prefix, else from a date after the
    name) times hours_per_day; participants without dates get the record's
    reported hours.
    """
    return _person_matrix(
        records, resolver,
        lambda participant, record: participant_hours(participant, record, hours_per_day),
    )


# ---------------------------------------------------------
# HOUR LOG
# ---------------------------------------------------------

def volunteer_hours_by_content(records, content_types=None, year=None,
                               start_year=None, end_year=None, years=None):
    """
    Person x content type hours from hour-log records.

    Args:
        records: HourLogRecord list
        content_types: ordered vocabulary used as the column order
        year / start_year, end_year / years: optional year window

    Returns:
        (DataFrame, used_content_types) where used_content_types lists the
        columns with a non-zero total, in column order
    """
    keep_year = _year_predicate(year, start_year, end_year, years)
    columns = list(dict.fromkeys(list(content_types or []) + [UNCLASSIFIED]))
    accumulator = PivotAccumulator(columns)
    for record in records:
        if record.date is None or not keep_year(record.date.year):
            continue
        if not record.standard_name or record.hours <= 0:
            continue
        accumulator.add(record.standard_name, record.matched_content_type or UNCLASSIFIED, record.hours)

    matrix = accumulator.to_frame(_rows_by_total(accumulator), index_name='name')
    totals = matrix_column_totals(matrix)
    used = [column for column in matrix.columns if totals[column] > 0]
    return matrix, used


def total_hours_for_content_type(records, content_type=None, year=None,
                                 start_year=None, end_year=None, years=None):
    """Person -> total hours for one content type (all types when None)."""
    keep_year = _year_predicate(year, start_year, end_year, years)
    totals = {}
    for record in records:
        if record.date is None or not keep_year(record.date.year):
            continue
        if not record.standard_name or record.hours <= 0:
            continue
        if content_type and (record.matched_content_type or UNCLASSIFIED) != content_type:
            continue
        totals[record.standard_name] = totals.get(record.standard_name, 0) + record.hours

    order = sorted(totals, key=lambda name: -totals[name])
    return pd.Series([totals[name] for name in order], index=pd.Index(order, name='name'),
                     name='hours', dtype=float)
