"""Outlier detection and treatment."""

from typing import Any, Dict, List, NamedTuple, Optional
import logging
import math

import numpy as np

from .config import IQR_MULTIPLIER
from .statistics import compute_column_stats
from .table import Table, round_half_up, to_number

logger = logging.getLogger(__name__)


class OutlierReport(NamedTuple):
    indices: List[int]
    lower_bound: float
    upper_bound: float


def detect_outliers_iqr(table: Table, column: str) -> OutlierReport:
    """
    Detect outliers with the Tukey fence ``[q1 - 1.5*iqr, q3 + 1.5*iqr]``.

    A row is an outlier when its value is numeric and falls strictly outside
    the fence. Columns without numeric data yield no outliers and 0.0 bounds.
    """
    stats = compute_column_stats(table, column)
    if stats is None:
        return OutlierReport([], 0.0, 0.0)

    lower_bound = stats.q1 - IQR_MULTIPLIER * stats.iqr
    upper_bound = stats.q3 + IQR_MULTIPLIER * stats.iqr

    values = table.numeric_array(column)
    outlier_mask = (values < lower_bound) | (values > upper_bound)
    return OutlierReport(np.flatnonzero(outlier_mask).tolist(), lower_bound, upper_bound)


def count_outliers(table: Table, column: str) -> int:
    return len(detect_outliers_iqr(table, column).indices)


def percentile_value(sorted_values: np.ndarray, pct: float) -> float:
    """Nearest-rank percentile ``sorted[floor(n * pct / 100)]``, capped at the last value."""
    index = int(math.floor(len(sorted_values) * pct / 100))
    index = min(max(index, 0), len(sorted_values) - 1)
    return float(sorted_values[index])


def _clamp(table: Table, column: str, lower: float, upper: float) -> Table:
    changed = 0
    new_values = []
    for value in table.values(column):
        number = to_number(value)
        if number is not None and number < lower:
            new_values.append(lower)
            changed += 1
        elif number is not None and number > upper:
            new_values.append(upper)
            changed += 1
        else:
            new_values.append(value)

    if changed == 0:
        return table

    logger.debug("Clamped %d values of '%s' to [%s, %s]", changed, column, lower, upper)
    return table.replace_column(column, new_values)


def treat_outliers_iqr(table: Table, column: str) -> Table:
    """Clamp out-of-fence values to the Tukey fence."""
    table.require(column)
    if compute_column_stats(table, column) is None:
        return table
    report = detect_outliers_iqr(table, column)
    return _clamp(table, column, report.lower_bound, report.upper_bound)


def treat_outliers_winsor(
    table: Table,
    column: str,
    lower_pct: float = 5,
    upper_pct: float = 95
) -> Table:
    """Clamp values to the column's nearest-rank lower/upper percentiles."""
    values = np.sort(table.numeric_values(column))
    if len(values) == 0:
        return table

    lower_val = percentile_value(values, lower_pct)
    upper_val = percentile_value(values, upper_pct)
    return _clamp(table, column, lower_val, upper_val)


def treat_outliers_zscore(table: Table, column: str, threshold: float = 3.0) -> Table:
    """
    Replace values with ``|z| > threshold``.

    The replacement is the mean for normal columns and the median otherwise,
    rounded to 2 decimals. Zero-variance columns are left unchanged.
    """
    stats = compute_column_stats(table, column)
    if stats is None or stats.std == 0:
        return table

    replacement = round_half_up(stats.mean if stats.is_normal else stats.median, 2)

    changed = 0
    new_values = []
    for value in table.values(column):
        number = to_number(value)
        if number is not None and abs((number - stats.mean) / stats.std) > threshold:
            new_values.append(replacement)
            changed += 1
        else:
            new_values.append(value)

    if changed == 0:
        return table

    logger.debug("Replaced %d z-score outliers of '%s' with %s", changed, column, replacement)
    return table.replace_column(column, new_values)


def get_outlier_summary(table: Table, columns: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Get summary of IQR outliers in numeric columns.

    Returns:
        Dict with outlier summary
    """
    if columns is None:
        columns = table.columns_of_type("numeric")

    summary = {
        "method": "iqr",
        "threshold": IQR_MULTIPLIER,
        "columns_with_outliers": 0,
        "total_outliers": 0,
        "column_summaries": []
    }

    for column in columns:
        stats = compute_column_stats(table, column)
        if stats is None:
            continue

        report = detect_outliers_iqr(table, column)
        outlier_count = len(report.indices)
        if outlier_count == 0:
            continue

        summary["columns_with_outliers"] += 1
        summary["total_outliers"] += outlier_count
        summary["column_summaries"].append({
            "column": column,
            "outlier_count": outlier_count,
            "outlier_pct": round((outlier_count / stats.count) * 100, 2),
            "bounds": [report.lower_bound, report.upper_bound],
            "outlier_indices": report.indices[:20],
            "stats": stats.to_dict()
        })

    return summary
