"""Missing value summaries and imputation operators."""

from collections import Counter
from typing import Any, Dict, List, Optional
import logging

import numpy as np

from .config import KNN_NEIGHBORS
from .errors import InvalidParameterError, NonNumericColumnError
from .statistics import compute_column_stats
from .table import Table, cell_key, is_missing, round_half_up, to_number

logger = logging.getLogger(__name__)

IMPUTATION_METHODS = (
    "mean", "median", "mode", "constant", "ffill", "bfill", "interpolation", "knn", "drop"
)


def get_missing_summary(table: Table) -> Dict[str, Any]:
    """
    Get missing value summary with a suggested strategy per column.

    Returns:
        Dict with missing value statistics per column
    """
    # Imported here: autopilot builds on the imputation operators
    from .autopilot import suggest_imputation

    total_cells = table.row_count * table.column_count
    total_missing = 0
    missing_summary = []

    for info in table.column_info():
        total_missing += info.null_count
        if info.null_count == 0:
            continue

        suggestion = suggest_imputation(table, info.name)
        missing_summary.append({
            "column": info.name,
            "inferred_type": info.inferred_type,
            "missing_count": info.null_count,
            "missing_pct": round(info.null_percentage, 2),
            "suggested_strategy": suggestion.method,
            "reason": suggestion.reason
        })

    return {
        "total_columns": table.column_count,
        "columns_with_missing": len(missing_summary),
        "total_missing_cells": total_missing,
        "total_cells": total_cells,
        "overall_missing_pct": round((total_missing / total_cells) * 100, 2) if total_cells > 0 else 0,
        "columns": missing_summary
    }


def _fill(table: Table, column: str, fill_value: Any) -> Table:
    mask = table.missing_mask(column)
    if not mask.any():
        return table
    values = table.values(column)
    new_values = [fill_value if missing else v for v, missing in zip(values, mask)]
    logger.debug("Filled %d missing values of '%s' with %r", int(mask.sum()), column, fill_value)
    return table.replace_column(column, new_values)


def impute_mean(table: Table, column: str) -> Table:
    """Replace missing cells with the column mean, rounded to 2 decimals."""
    stats = compute_column_stats(table, column)
    if stats is None:
        return table
    return _fill(table, column, round_half_up(stats.mean, 2))


def impute_median(table: Table, column: str) -> Table:
    stats = compute_column_stats(table, column)
    if stats is None:
        return table
    return _fill(table, column, stats.median)


def most_frequent_value(values: List[Any]) -> Optional[Any]:
    """
    Most frequent non-missing value by string key.

    Ties go to the key seen first in row order; the first original value with
    that key is returned so numeric columns stay numeric.
    """
    present = [v for v in values if v is not None]
    if not present:
        return None

    counts = Counter(cell_key(v) for v in present)
    best_key = counts.most_common(1)[0][0]
    return next(v for v in present if cell_key(v) == best_key)


def impute_mode(table: Table, column: str) -> Table:
    mode = most_frequent_value(table.values(column))
    if mode is None:
        return table
    return _fill(table, column, mode)


def impute_constant(table: Table, column: str, value: Any) -> Table:
    """Replace missing cells with a caller-supplied literal."""
    table.require(column)
    if is_missing(value):
        raise InvalidParameterError(f"Constant fill value for '{column}' must not be missing")
    return _fill(table, column, value)


def impute_ffill(table: Table, column: str) -> Table:
    """Propagate the last non-missing value forward; leading gaps stay missing."""
    last_valid = None
    new_values = []
    for value in table.values(column):
        if value is not None:
            last_valid = value
            new_values.append(value)
        else:
            new_values.append(last_valid)
    return table.replace_column(column, new_values)


def impute_bfill(table: Table, column: str) -> Table:
    """Propagate the next non-missing value backward; trailing gaps stay missing."""
    next_valid = None
    new_values = []
    for value in reversed(table.values(column)):
        if value is not None:
            next_valid = value
            new_values.append(value)
        else:
            new_values.append(next_valid)
    new_values.reverse()
    return table.replace_column(column, new_values)


def impute_interpolation(table: Table, column: str) -> Table:
    """
    Linear interpolation between the nearest numeric neighbours by row index.

    Neighbours are taken from the input values, so filled cells never feed
    later interpolations. With a neighbour on one side only, its value is
    copied. Results are rounded to 2 decimals.
    """
    values = table.values(column)
    numbers = [to_number(v) for v in values]
    valid = [i for i, n in enumerate(numbers) if n is not None]
    if not valid:
        return table

    new_values = list(values)
    for i, value in enumerate(values):
        if value is not None:
            continue

        position = int(np.searchsorted(valid, i))
        prev_idx = valid[position - 1] if position > 0 else None
        next_idx = valid[position] if position < len(valid) else None

        if prev_idx is not None and next_idx is not None:
            ratio = (i - prev_idx) / (next_idx - prev_idx)
            interpolated = numbers[prev_idx] + ratio * (numbers[next_idx] - numbers[prev_idx])
            new_values[i] = round_half_up(interpolated, 2)
        elif prev_idx is not None:
            new_values[i] = numbers[prev_idx]
        else:
            new_values[i] = numbers[next_idx]

    return table.replace_column(column, new_values)


def impute_knn(
    table: Table,
    column: str,
    k: int = KNN_NEIGHBORS,
    feature_columns: Optional[List[str]] = None
) -> Table:
    """
    Impute missing cells from the k nearest rows.

    Distance uses the other numeric columns as features:
    ``sqrt(sum(d^2) / dims)`` over the dimensions present in both rows.
    Candidates are the rows whose target is present in the input table; the
    imputed value is the mean of the k nearest targets, rounded to 2 decimals.

    Raises:
        NonNumericColumnError: If a candidate target is not numeric
    """
    table.require(column)
    if k < 1:
        raise InvalidParameterError(f"k must be positive, got {k}")

    missing = table.missing_mask(column)
    if not missing.any():
        return table

    if feature_columns is None:
        feature_columns = [c for c in table.columns_of_type("numeric") if c != column]
    else:
        table.require(*feature_columns)
        feature_columns = [c for c in feature_columns if c != column]

    target = table.numeric_array(column)
    candidates = np.flatnonzero(~missing)
    bad = candidates[np.isnan(target[candidates])]
    if len(bad) > 0:
        raise NonNumericColumnError(
            f"KNN imputation needs a numeric target; '{column}' has non-numeric value "
            f"{table.values(column)[bad[0]]!r} at row {int(bad[0])}"
        )

    if not feature_columns or len(candidates) == 0:
        logger.debug("KNN imputation of '%s' skipped: no features or no candidates", column)
        return table

    features = np.column_stack([table.numeric_array(c) for c in feature_columns])
    candidate_features = features[candidates]
    candidate_targets = target[candidates]

    new_values = table.values(column)
    for row in np.flatnonzero(missing):
        diff = candidate_features - features[row]
        present = ~np.isnan(diff)
        dims = present.sum(axis=1)
        squared = np.where(present, diff, 0.0) ** 2

        usable = dims > 0
        if not usable.any():
            continue

        distances = np.sqrt(squared[usable].sum(axis=1) / dims[usable])
        nearest = np.argsort(distances, kind="stable")[:k]
        neighbour_targets = candidate_targets[usable][nearest]
        new_values[row] = round_half_up(float(neighbour_targets.mean()), 2)

    return table.replace_column(column, new_values)


def drop_missing(table: Table, column: str) -> Table:
    """Remove rows where the column is missing."""
    missing = table.missing_mask(column)
    if not missing.any():
        return table
    logger.debug("Dropping %d rows with missing '%s'", int(missing.sum()), column)
    return table.filter_rows(~missing)


def impute(table: Table, column: str, method: str, **params: Any) -> Table:
    """Apply one imputation method to a column."""
    table.require(column)

    if method == "mean":
        return impute_mean(table, column)
    elif method == "median":
        return impute_median(table, column)
    elif method == "mode":
        return impute_mode(table, column)
    elif method == "constant":
        if "value" not in params:
            raise InvalidParameterError("Constant imputation requires a 'value'")
        return impute_constant(table, column, params["value"])
    elif method == "ffill":
        return impute_ffill(table, column)
    elif method == "bfill":
        return impute_bfill(table, column)
    elif method == "interpolation":
        return impute_interpolation(table, column)
    elif method == "knn":
        return impute_knn(table, column, k=params.get("k", KNN_NEIGHBORS))
    elif method == "drop":
        return drop_missing(table, column)

    raise InvalidParameterError(f"Unknown imputation method: {method}")
