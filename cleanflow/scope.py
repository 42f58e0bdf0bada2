"""Column selection (scope definition)."""

from collections import Counter
from typing import Any, Dict, List, Sequence
import logging

from .errors import InvalidParameterError
from .statistics import compute_column_stats
from .table import Table, cell_key

logger = logging.getLogger(__name__)


def select_columns(table: Table, keep: Sequence[str]) -> Table:
    """
    Project the table onto ``keep``, in the caller's order.

    Dropped columns cannot be recovered from the returned table.

    Raises:
        InvalidColumnError: If a name is not a column of the table
        InvalidParameterError: If ``keep`` is empty or repeats a name
    """
    if isinstance(keep, str):
        keep = [keep]
    keep = list(keep)
    if not keep:
        raise InvalidParameterError("At least one column must be selected")
    if len(set(keep)) != len(keep):
        raise InvalidParameterError(f"Duplicate columns in selection: {keep}")

    selected = table.select(keep)
    logger.debug("Selected %d/%d columns", len(keep), table.column_count)
    return selected


def get_column_summary(table: Table) -> List[Dict[str, Any]]:
    """
    Get summary information and selection flags for each column.

    Returns:
        List of column summaries
    """
    summaries = []

    for info in table.column_info():
        summary = info.to_dict()
        flags = []

        if info.unique_count <= 1:
            flags.append({
                "type": "zero_variance",
                "message": "Only 1 unique value - no analytical value"
            })
        elif table.row_count > 0 and info.unique_count == table.row_count and not info.is_numeric:
            flags.append({
                "type": "high_cardinality",
                "message": "Unique values equal row count - likely identifier"
            })

        if info.null_percentage > 50:
            flags.append({
                "type": "high_missing",
                "message": f"{info.null_percentage:.1f}% missing values"
            })

        if info.is_numeric:
            stats = compute_column_stats(table, info.name)
            if stats is not None:
                summary.update({"min": stats.min, "max": stats.max, "mean": stats.mean})
        else:
            counts = Counter(cell_key(v) for v in table.values(info.name) if v is not None)
            summary["top_values"] = dict(counts.most_common(5))

        summary["flags"] = flags
        summaries.append(summary)

    return summaries
