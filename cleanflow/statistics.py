"""Column statistics and pairwise correlation."""

from collections import Counter
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple
import math

import numpy as np

from .config import NORMAL_SKEW_LIMIT, SYMMETRIC_SKEW_LIMIT
from .table import Table, cell_key, round_half_up


@dataclass(frozen=True)
class ColumnStats:
    """Descriptive statistics of the numeric values of one column."""
    count: int
    mean: float
    median: float
    mode: float
    std: float
    min: float
    max: float
    q1: float
    q3: float
    iqr: float
    skewness: float
    is_normal: bool
    is_symmetric: bool

    def to_dict(self) -> dict:
        return asdict(self)


def compute_column_stats(table: Table, column: str) -> Optional[ColumnStats]:
    """
    Compute descriptive statistics over a column's numeric values.

    Quartiles use the nearest-rank convention ``sorted[floor(n * p)]`` with no
    interpolation; variance and std are population (divide by n).

    Returns:
        ColumnStats, or None when the column has no numeric values
    """
    values = np.sort(table.numeric_values(column))
    n = len(values)
    if n == 0:
        return None

    mean = math.fsum(values) / n
    if n % 2 == 0:
        median = (values[n // 2 - 1] + values[n // 2]) / 2
    else:
        median = values[n // 2]

    deviations = values - mean
    std = math.sqrt(math.fsum(deviations ** 2) / n)

    q1 = values[int(math.floor(n * 0.25))]
    q3 = values[int(math.floor(n * 0.75))]

    if n > 2 and std != 0:
        skewness = (n / ((n - 1) * (n - 2))) * math.fsum((deviations / std) ** 3)
    else:
        skewness = 0.0

    # Sorted input makes Counter's first-seen tie-break the smallest value
    mode = Counter(values.tolist()).most_common(1)[0][0]

    return ColumnStats(
        count=n,
        mean=float(mean),
        median=float(median),
        mode=float(mode),
        std=float(std),
        min=float(values[0]),
        max=float(values[-1]),
        q1=float(q1),
        q3=float(q3),
        iqr=float(q3 - q1),
        skewness=float(skewness),
        is_normal=abs(skewness) < NORMAL_SKEW_LIMIT,
        is_symmetric=abs(skewness) < SYMMETRIC_SKEW_LIMIT
    )


def pearson(x: np.ndarray, y: np.ndarray) -> float:
    """Pearson correlation over rows where both arrays hold numbers."""
    paired = ~np.isnan(x) & ~np.isnan(y)
    x = x[paired]
    y = y[paired]
    if len(x) < 2:
        return 0.0

    dx = x - x.mean()
    dy = y - y.mean()
    denominator = math.sqrt(float(np.sum(dx * dx)) * float(np.sum(dy * dy)))
    if denominator == 0:
        return 0.0
    return float(np.sum(dx * dy)) / denominator


def correlation_matrix(
    table: Table,
    columns: List[str]
) -> Tuple[List[List[float]], List[str]]:
    """
    Compute the Pearson correlation matrix for the given columns.

    Args:
        table: Input table
        columns: Ordered column names

    Returns:
        Tuple of (square matrix rounded to 3 decimals, columns)
    """
    columns = list(columns)
    table.require(*columns)
    arrays = {c: table.numeric_array(c) for c in columns}

    size = len(columns)
    matrix = [[1.0] * size for _ in range(size)]
    for i in range(size):
        for j in range(i + 1, size):
            r = round_half_up(pearson(arrays[columns[i]], arrays[columns[j]]), 3)
            matrix[i][j] = r
            matrix[j][i] = r

    return matrix, columns


def find_high_correlations(
    table: Table,
    columns: Optional[List[str]] = None,
    threshold: float = 0.7
) -> List[Dict[str, Any]]:
    """
    List column pairs whose absolute correlation exceeds the threshold.

    Returns:
        Pairs sorted by descending absolute correlation
    """
    if columns is None:
        columns = table.columns_of_type("numeric")

    matrix, columns = correlation_matrix(table, columns)

    pairs = []
    for i, col1 in enumerate(columns):
        for j in range(i + 1, len(columns)):
            value = matrix[i][j]
            if abs(value) > threshold:
                pairs.append({
                    "column1": col1,
                    "column2": columns[j],
                    "correlation": value,
                    "strength": "high" if abs(value) > 0.9 else "moderate"
                })

    pairs.sort(key=lambda p: abs(p["correlation"]), reverse=True)
    return pairs


def describe_column(table: Table, column: str) -> Dict[str, Any]:
    """Get metadata plus distribution statistics for a single column."""
    info = table.column(column)
    description = info.to_dict()

    if info.is_numeric:
        stats = compute_column_stats(table, column)
        description["statistics"] = stats.to_dict() if stats else None
        return description

    counts = Counter(cell_key(v) for v in table.values(column) if v is not None)
    description["top_values"] = dict(counts.most_common(10))
    return description
