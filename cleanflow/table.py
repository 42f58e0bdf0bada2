"""Tabular store: immutable tables with inferred per-column metadata."""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Optional, Sequence
import math

import numpy as np
import pandas as pd

from .config import (
    BOOLEAN_TOKENS,
    MISSING_TOKENS,
    SAMPLE_VALUE_COUNT,
    TYPE_MATCH_RATIO,
    TYPE_SAMPLE_SIZE,
)
from .errors import InvalidColumnError, InvalidParameterError


NUMERIC = "numeric"
CATEGORICAL = "categorical"
BOOLEAN = "boolean"
DATETIME = "datetime"
UNKNOWN = "unknown"

COLUMN_TYPES = (NUMERIC, CATEGORICAL, BOOLEAN, DATETIME, UNKNOWN)


def normalize_cell(value: Any) -> Any:
    """Map every missing encoding to None and numpy scalars to Python scalars."""
    if value is None or value is pd.NA or value is pd.NaT:
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, str) and value.strip().lower() in MISSING_TOKENS:
        return None
    return value


def is_missing(value: Any) -> bool:
    return normalize_cell(value) is None


def to_number(value: Any) -> Optional[float]:
    """Coerce a cell to a finite float, or None when it is not numeric."""
    if value is None or isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, (int, float, np.number)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def cell_key(value: Any) -> str:
    """String key used for value-frequency and category comparisons."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def round_half_up(value: float, digits: int) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _is_boolean_like(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    return isinstance(value, str) and value.strip().lower() in BOOLEAN_TOKENS


def infer_column_type(non_missing: Sequence[Any]) -> str:
    """
    Infer a column type from its non-missing values.

    Samples the first TYPE_SAMPLE_SIZE values; numeric wins when at least
    TYPE_MATCH_RATIO of the sample is numeric, then boolean, else categorical.
    """
    if len(non_missing) == 0:
        return UNKNOWN

    sample = non_missing[:TYPE_SAMPLE_SIZE]
    numeric_count = sum(1 for v in sample if to_number(v) is not None)
    if numeric_count / len(sample) >= TYPE_MATCH_RATIO:
        return NUMERIC

    boolean_count = sum(1 for v in sample if _is_boolean_like(v))
    if boolean_count / len(sample) >= TYPE_MATCH_RATIO:
        return BOOLEAN

    return CATEGORICAL


@dataclass(frozen=True)
class Column:
    """Metadata for a single column, derived from the table's current data."""
    name: str
    inferred_type: str
    null_count: int
    null_percentage: float
    unique_count: int
    sample_values: tuple

    @property
    def is_numeric(self) -> bool:
        return self.inferred_type == NUMERIC

    @property
    def is_categorical(self) -> bool:
        return self.inferred_type == CATEGORICAL

    def to_dict(self) -> dict:
        data = asdict(self)
        data["sample_values"] = list(self.sample_values)
        return data


class Table:
    """
    Immutable in-memory table.

    Cells hold numbers, text, booleans or None (missing). Rows are addressed
    by position 0..row_count-1. Operators never mutate a table; they build a
    new one from ``to_frame()`` or the ``replace_column`` / ``filter_rows`` /
    ``select`` helpers.
    """

    def __init__(self, frame: Optional[pd.DataFrame] = None):
        if frame is None:
            frame = pd.DataFrame()
        names = [str(c) for c in frame.columns]
        if len(set(names)) != len(names):
            raise InvalidParameterError(f"Duplicate column names: {names}")

        columns = {
            name: _object_series([normalize_cell(v) for v in frame.iloc[:, i].tolist()])
            for i, name in enumerate(names)
        }
        self._frame = pd.DataFrame(columns, columns=names, index=pd.RangeIndex(len(frame)))
        self._column_cache: Dict[str, Column] = {}

    @classmethod
    def from_records(
        cls,
        records: Iterable[Dict[str, Any]],
        columns: Optional[List[str]] = None
    ) -> "Table":
        """
        Build a table from row mappings.

        Args:
            records: Row dicts; absent keys become missing cells
            columns: Explicit column order (default: keys in first-seen order)

        Returns:
            New Table
        """
        records = list(records)
        if columns is None:
            columns = []
            seen = set()
            for record in records:
                for key in record:
                    if key not in seen:
                        seen.add(key)
                        columns.append(key)

        data = {col: [record.get(col) for record in records] for col in columns}
        frame = pd.DataFrame(
            {col: _object_series(values) for col, values in data.items()},
            columns=list(columns),
            index=pd.RangeIndex(len(records))
        )
        return cls(frame)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "Table":
        return cls(df.reset_index(drop=True))

    @classmethod
    def _wrap(cls, frame: pd.DataFrame) -> "Table":
        # Frame is already normalized and positionally indexed.
        table = cls.__new__(cls)
        table._frame = frame
        table._column_cache = {}
        return table

    # ── Shape ──

    @property
    def columns(self) -> List[str]:
        return list(self._frame.columns)

    @property
    def row_count(self) -> int:
        return len(self._frame)

    @property
    def column_count(self) -> int:
        return len(self._frame.columns)

    def __len__(self) -> int:
        return self.row_count

    def __contains__(self, column: str) -> bool:
        return column in self._frame.columns

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Table):
            return NotImplemented
        return self.columns == other.columns and self.to_records() == other.to_records()

    __hash__ = None

    def __repr__(self) -> str:
        return f"Table(rows={self.row_count}, columns={self.columns})"

    # ── Access ──

    def require(self, *columns: str) -> None:
        for column in columns:
            if column not in self._frame.columns:
                raise InvalidColumnError(column, self.columns)

    def to_frame(self) -> pd.DataFrame:
        return self._frame.copy()

    def to_records(self) -> List[Dict[str, Any]]:
        names = self.columns
        return [dict(zip(names, row)) for row in self._frame.itertuples(index=False, name=None)]

    def values(self, column: str) -> List[Any]:
        self.require(column)
        return self._frame[column].tolist()

    def missing_mask(self, column: str) -> np.ndarray:
        self.require(column)
        return np.array([v is None for v in self._frame[column].tolist()], dtype=bool)

    def numeric_array(self, column: str) -> np.ndarray:
        """Positional float array; NaN where a cell is missing or not numeric."""
        self.require(column)
        return np.array([to_number(v) for v in self._frame[column].tolist()], dtype=float)

    def numeric_values(self, column: str) -> np.ndarray:
        """Numeric cells of a column in row order, non-numeric cells dropped."""
        array = self.numeric_array(column)
        return array[~np.isnan(array)]

    # ── Metadata ──

    def column(self, name: str) -> Column:
        self.require(name)
        if name not in self._column_cache:
            self._column_cache[name] = self._describe(name)
        return self._column_cache[name]

    def column_info(self) -> List[Column]:
        return [self.column(name) for name in self.columns]

    def columns_of_type(self, inferred_type: str) -> List[str]:
        return [c.name for c in self.column_info() if c.inferred_type == inferred_type]

    def _describe(self, name: str) -> Column:
        values = self._frame[name].tolist()
        non_missing = [v for v in values if v is not None]
        null_count = len(values) - len(non_missing)
        return Column(
            name=name,
            inferred_type=infer_column_type(non_missing),
            null_count=null_count,
            null_percentage=(null_count / len(values)) * 100 if values else 0.0,
            unique_count=len({cell_key(v) for v in non_missing}),
            sample_values=tuple(non_missing[:SAMPLE_VALUE_COUNT])
        )

    # ── Derivation ──

    def replace_column(self, column: str, values: Sequence[Any]) -> "Table":
        """Return a new table with one column's cells replaced in place."""
        self.require(column)
        if len(values) != self.row_count:
            raise InvalidParameterError(
                f"Expected {self.row_count} values for '{column}', got {len(values)}"
            )
        frame = self._frame.copy()
        frame[column] = _object_series([normalize_cell(v) for v in values])
        return Table._wrap(frame)

    def filter_rows(self, keep: Sequence[bool]) -> "Table":
        """Return a new table with only the rows whose flag is true."""
        mask = np.asarray(keep, dtype=bool)
        frame = self._frame[mask].reset_index(drop=True)
        return Table._wrap(frame)

    def select(self, columns: Sequence[str]) -> "Table":
        self.require(*columns)
        return Table._wrap(self._frame[list(columns)].copy())


def _object_series(values: Sequence[Any]) -> pd.Series:
    return pd.Series(list(values), dtype=object, index=pd.RangeIndex(len(values)))
