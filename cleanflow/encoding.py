"""Categorical encoding and numeric scaling."""

from typing import Any, Dict, List, Sequence, Union
import logging

from .errors import InvalidParameterError, MalformedOrdinalOrderError
from .statistics import compute_column_stats
from .table import Table, cell_key, round_half_up, to_number

logger = logging.getLogger(__name__)

ENCODING_METHODS = ("one_hot", "ordinal", "label")
SCALING_METHODS = ("min_max", "standard", "robust")


def distinct_values(table: Table, column: str) -> List[Any]:
    """Distinct non-missing values by string key, in first-seen order."""
    seen = {}
    for value in table.values(column):
        if value is not None and cell_key(value) not in seen:
            seen[cell_key(value)] = value
    return list(seen.values())


def one_hot_encode(table: Table, column: str) -> Table:
    """
    Replace a column with one 1/0 indicator column per distinct value.

    New columns are named ``{column}_{value}`` and appended after the
    remaining columns in first-seen order; missing cells get 0 everywhere.

    Raises:
        InvalidParameterError: If a generated name is already a column
    """
    table.require(column)
    keys = [cell_key(v) for v in table.values(column)]
    categories = [cell_key(v) for v in distinct_values(table, column)]

    df = table.to_frame().drop(columns=[column])
    new_columns = [f"{column}_{category}" for category in categories]
    collisions = [name for name in new_columns if name in df.columns]
    if collisions:
        raise InvalidParameterError(
            f"One-hot encoding of '{column}' would overwrite existing column(s): {collisions}"
        )

    for category, new_column in zip(categories, new_columns):
        df[new_column] = [1 if key == category else 0 for key in keys]

    logger.debug("One-hot encoded '%s' into %d columns", column, len(new_columns))
    return Table(df)


def ordinal_encode(table: Table, column: str, order: Sequence[Any]) -> Table:
    """
    Map each value to its 0-based rank in an explicit category order.

    Values outside the order, and missing cells, map to -1.

    Raises:
        MalformedOrdinalOrderError: If the order is empty
    """
    table.require(column)
    if not order or isinstance(order, str):
        raise MalformedOrdinalOrderError(
            f"Ordinal encoding of '{column}' needs a non-empty list of categories"
        )

    mapping = {cell_key(category): rank for rank, category in enumerate(order)}
    new_values = [
        -1 if value is None else mapping.get(cell_key(value), -1)
        for value in table.values(column)
    ]
    return table.replace_column(column, new_values)


def label_mapping(table: Table, column: str) -> Dict[str, int]:
    """Mapping used by label encoding: distinct values in first-seen order."""
    return {cell_key(v): code for code, v in enumerate(distinct_values(table, column))}


def label_encode(table: Table, column: str) -> Table:
    """Replace each value with its 0-based first-seen code; missing stays missing."""
    table.require(column)
    mapping = label_mapping(table, column)
    new_values = [None if v is None else mapping[cell_key(v)] for v in table.values(column)]
    return table.replace_column(column, new_values)


def encode(table: Table, column: str, method: str, **params: Any) -> Table:
    """Apply one encoding method to a column."""
    if method == "one_hot":
        return one_hot_encode(table, column)
    elif method == "ordinal":
        return ordinal_encode(table, column, params.get("order"))
    elif method == "label":
        return label_encode(table, column)

    raise InvalidParameterError(f"Unknown encoding method: {method}")


def _rescale(table: Table, column: str, center: float, spread: float) -> Table:
    new_values = []
    for value in table.values(column):
        number = to_number(value)
        if number is None:
            new_values.append(value)
        else:
            new_values.append(round_half_up((number - center) / spread, 4))
    return table.replace_column(column, new_values)


def _as_columns(columns: Union[str, Sequence[str]]) -> List[str]:
    return [columns] if isinstance(columns, str) else list(columns)


def min_max_scale(table: Table, columns: Union[str, Sequence[str]]) -> Table:
    """Scale numeric cells to ``(v - min) / (max - min)``; constant columns are skipped."""
    columns = _as_columns(columns)
    table.require(*columns)

    for column in columns:
        stats = compute_column_stats(table, column)
        if stats is None or stats.max == stats.min:
            logger.debug("Skipping min-max scaling of '%s': no range", column)
            continue
        table = _rescale(table, column, stats.min, stats.max - stats.min)

    return table


def standard_scale(table: Table, columns: Union[str, Sequence[str]]) -> Table:
    """Scale numeric cells to ``(v - mean) / std``; zero-variance columns are skipped."""
    columns = _as_columns(columns)
    table.require(*columns)

    for column in columns:
        stats = compute_column_stats(table, column)
        if stats is None or stats.std == 0:
            logger.debug("Skipping standard scaling of '%s': zero variance", column)
            continue
        table = _rescale(table, column, stats.mean, stats.std)

    return table


def robust_scale(table: Table, columns: Union[str, Sequence[str]]) -> Table:
    """Scale numeric cells to ``(v - median) / iqr``; zero-IQR columns are skipped."""
    columns = _as_columns(columns)
    table.require(*columns)

    for column in columns:
        stats = compute_column_stats(table, column)
        if stats is None or stats.iqr == 0:
            logger.debug("Skipping robust scaling of '%s': zero IQR", column)
            continue
        table = _rescale(table, column, stats.median, stats.iqr)

    return table


def scale(table: Table, columns: Union[str, Sequence[str]], method: str) -> Table:
    """Apply one scaling method to one or more columns."""
    if method == "min_max":
        return min_max_scale(table, columns)
    elif method == "standard":
        return standard_scale(table, columns)
    elif method == "robust":
        return robust_scale(table, columns)

    raise InvalidParameterError(f"Unknown scaling method: {method}")
