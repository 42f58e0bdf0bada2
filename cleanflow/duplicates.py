"""Duplicate detection and removal."""

from typing import Any, Dict, Tuple
import logging

import pandas as pd

from .table import Table, cell_key

logger = logging.getLogger(__name__)


def _cell_identity(value: Any) -> Any:
    # Bool, number and text cells never match each other (True != 1 != "1")
    if value is None:
        return None
    if isinstance(value, bool):
        return f"bool:{value}"
    if isinstance(value, (int, float)):
        return f"number:{cell_key(value)}"
    return f"{type(value).__name__}:{value}"


def _row_keys(table: Table) -> pd.DataFrame:
    """Frame of per-cell identity keys used for duplicate comparison."""
    return table.to_frame().apply(lambda column: column.map(_cell_identity))


def detect_duplicates(table: Table, sample_size: int = 5) -> Dict[str, Any]:
    """
    Detect exact duplicate rows (all columns identical).

    Returns:
        Dict with duplicate statistics and sample groups
    """
    if table.row_count == 0 or table.column_count == 0:
        return {"total_duplicates": 0, "unique_groups": 0, "rows_to_remove": 0, "sample_groups": []}

    df = table.to_frame()
    keys = _row_keys(table)
    duplicates_mask = keys.duplicated(keep=False)
    duplicate_count = int(duplicates_mask.sum())

    # Group duplicated rows by their full key tuple, in first-seen order
    groups: Dict[tuple, list] = {}
    for index in keys.index[duplicates_mask]:
        groups.setdefault(tuple(keys.loc[index].tolist()), []).append(int(index))

    sample_groups = []
    for group_id, indices in enumerate(list(groups.values())[:sample_size]):
        sample_groups.append({
            "group_id": group_id,
            "count": len(indices),
            "row_indices": indices,
            "rows": df.loc[indices[:3]].to_dict(orient="records")
        })

    return {
        "total_duplicates": duplicate_count,
        "unique_groups": len(groups),
        "rows_to_remove": duplicate_count - len(groups),
        "sample_groups": sample_groups
    }


def remove_duplicates(table: Table) -> Tuple[Table, int]:
    """
    Remove rows that repeat an earlier row in every column.

    The first occurrence of each duplicate group is kept and row order is
    preserved.

    Returns:
        Tuple of (deduplicated table, number of rows removed)
    """
    if table.row_count == 0 or table.column_count == 0:
        return table, 0

    duplicates_mask = _row_keys(table).duplicated(keep="first")
    removed_count = int(duplicates_mask.sum())
    if removed_count == 0:
        return table, 0

    logger.debug("Removing %d duplicate rows out of %d", removed_count, table.row_count)
    return table.filter_rows(~duplicates_mask.to_numpy()), removed_count
