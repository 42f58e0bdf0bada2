"""Named-operation dispatch: ``apply(table, name, params)``."""

from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple
import logging

from .duplicates import remove_duplicates
from .encoding import (
    label_encode,
    min_max_scale,
    one_hot_encode,
    ordinal_encode,
    robust_scale,
    standard_scale,
)
from .errors import InvalidParameterError, UnknownOperationError
from .imputation import impute
from .outliers import treat_outliers_iqr, treat_outliers_winsor, treat_outliers_zscore
from .scope import select_columns
from .table import Table

logger = logging.getLogger(__name__)


class OperationResult(NamedTuple):
    table: Table
    entry: str


Handler = Callable[[Table, Dict[str, Any]], Tuple[Table, str]]


def _column(params: Dict[str, Any]) -> str:
    column = params.get("column")
    if not isinstance(column, str) or not column:
        raise InvalidParameterError("Operation requires a 'column' parameter")
    return column


def _columns(params: Dict[str, Any]) -> List[str]:
    columns = params.get("columns")
    if columns is None and "column" in params:
        columns = [_column(params)]
    if isinstance(columns, str):
        columns = [columns]
    if not columns:
        raise InvalidParameterError("Operation requires a 'columns' parameter")
    return list(columns)


def _remove_duplicates(table: Table, params: Dict[str, Any]) -> Tuple[Table, str]:
    cleaned, removed = remove_duplicates(table)
    return cleaned, f"Removed {removed} duplicate rows"


def _select_columns(table: Table, params: Dict[str, Any]) -> Tuple[Table, str]:
    keep = _columns(params)
    selected = select_columns(table, keep)
    return selected, f"Selected {len(keep)}/{table.column_count} columns"


def _imputer(method: str) -> Handler:
    def handler(table: Table, params: Dict[str, Any]) -> Tuple[Table, str]:
        column = _column(params)
        extra = {k: v for k, v in params.items() if k in ("value", "k")}
        return impute(table, column, method, **extra), f"{column}: imputation by {method.upper()}"
    return handler


def _outlier_iqr(table: Table, params: Dict[str, Any]) -> Tuple[Table, str]:
    column = _column(params)
    return treat_outliers_iqr(table, column), f"{column}: outliers treated by IQR"


def _outlier_winsor(table: Table, params: Dict[str, Any]) -> Tuple[Table, str]:
    column = _column(params)
    lower_pct = float(params.get("lower_pct", 5))
    upper_pct = float(params.get("upper_pct", 95))
    if not 0 <= lower_pct <= upper_pct <= 100:
        raise InvalidParameterError(
            f"Winsor percentiles must satisfy 0 <= lower <= upper <= 100, got {lower_pct}/{upper_pct}"
        )
    return (
        treat_outliers_winsor(table, column, lower_pct, upper_pct),
        f"{column}: outliers treated by WINSOR ({lower_pct:g}%/{upper_pct:g}%)"
    )


def _outlier_zscore(table: Table, params: Dict[str, Any]) -> Tuple[Table, str]:
    column = _column(params)
    threshold = float(params.get("threshold", 3.0))
    return treat_outliers_zscore(table, column, threshold), f"{column}: outliers treated by ZSCORE"


def _encode_onehot(table: Table, params: Dict[str, Any]) -> Tuple[Table, str]:
    column = _column(params)
    encoded = one_hot_encode(table, column)
    new_columns = encoded.column_count - table.column_count + 1
    return encoded, f"{column}: OneHotEncoder ({new_columns} columns)"


def _encode_ordinal(table: Table, params: Dict[str, Any]) -> Tuple[Table, str]:
    column = _column(params)
    return ordinal_encode(table, column, params.get("order")), f"{column}: OrdinalEncoder"


def _encode_label(table: Table, params: Dict[str, Any]) -> Tuple[Table, str]:
    column = _column(params)
    return label_encode(table, column), f"{column}: LabelEncoder"


def _scaler(function: Callable[[Table, List[str]], Table], label: str) -> Handler:
    def handler(table: Table, params: Dict[str, Any]) -> Tuple[Table, str]:
        columns = _columns(params)
        return function(table, columns), f"{', '.join(columns)}: {label}"
    return handler


OPERATIONS: Dict[str, Handler] = {
    "remove_duplicates": _remove_duplicates,
    "select_columns": _select_columns,
    "impute_mean": _imputer("mean"),
    "impute_median": _imputer("median"),
    "impute_mode": _imputer("mode"),
    "impute_constant": _imputer("constant"),
    "impute_ffill": _imputer("ffill"),
    "impute_bfill": _imputer("bfill"),
    "impute_interpolation": _imputer("interpolation"),
    "impute_knn": _imputer("knn"),
    "impute_drop": _imputer("drop"),
    "treat_outliers_iqr": _outlier_iqr,
    "treat_outliers_winsor": _outlier_winsor,
    "treat_outliers_zscore": _outlier_zscore,
    "encode_onehot": _encode_onehot,
    "encode_ordinal": _encode_ordinal,
    "encode_label": _encode_label,
    "min_max_scale": _scaler(min_max_scale, "MinMaxScaler"),
    "standard_scale": _scaler(standard_scale, "StandardScaler"),
    "robust_scale": _scaler(robust_scale, "RobustScaler"),
}


def available_operations() -> List[str]:
    return list(OPERATIONS)


def apply(
    table: Table,
    operation_name: str,
    params: Optional[Dict[str, Any]] = None
) -> OperationResult:
    """
    Apply a named operation.

    Args:
        table: Input table (left unchanged)
        operation_name: One of ``available_operations()``
        params: Operation parameters; ``column`` or ``columns`` plus any
                method-specific literal (``value``, ``order``, ``k``,
                ``lower_pct``, ``upper_pct``, ``threshold``)

    Returns:
        OperationResult with the new table and its journal entry

    Raises:
        UnknownOperationError: If the operation name is not registered
        InvalidParameterError: If required parameters are missing or invalid
        InvalidColumnError: If a referenced column does not exist
    """
    handler = OPERATIONS.get(operation_name)
    if handler is None:
        raise UnknownOperationError(f"Unknown operation: {operation_name}")

    new_table, entry = handler(table, dict(params or {}))
    logger.debug("Applied %s: %s", operation_name, entry)
    return OperationResult(new_table, entry)
