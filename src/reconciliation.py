"""
Reconciliation of two independently aggregated person -> hours maps.
"""
import logging

import pandas as pd

logger = logging.getLogger(__name__)

COLUMNS = ['name', 'difference', 'hours_a', 'hours_b']


def reconcile(hours_a, hours_b):
    """
    Signed difference A - B for every name present in either map.

    Names must already be canonical; no fuzzy matching happens here. Missing
    entries count as 0, zero differences are dropped, and the result is
    sorted by difference, largest first.

    Returns:
        DataFrame with columns name, difference, hours_a, hours_b
    """
    hours_a = {} if hours_a is None else dict(hours_a)
    hours_b = {} if hours_b is None else dict(hours_b)
    names = list(dict.fromkeys(list(hours_a) + list(hours_b)))

    rows = []
    for name in names:
        a = hours_a.get(name, 0) or 0
        b = hours_b.get(name, 0) or 0
        difference = a - b
        if difference != 0:
            rows.append({'name': name, 'difference': difference, 'hours_a': a, 'hours_b': b})

    rows.sort(key=lambda row: -row['difference'])
    logger.info(f"Reconciled {len(names)} names, {len(rows)} with differences")
    return pd.DataFrame(rows, columns=COLUMNS)
