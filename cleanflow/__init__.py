"""Tabular data cleaning engine."""

from .table import Table, Column, infer_column_type
from .errors import (
    CleaningError,
    InvalidColumnError,
    InvalidParameterError,
    MalformedOrdinalOrderError,
    UnknownOperationError,
    NonNumericColumnError,
    AutopilotPartialFailure,
    SessionNotFoundError,
    IngestionError
)
from .config import AutopilotConfig, configure_logging
from .statistics import ColumnStats, compute_column_stats, correlation_matrix, find_high_correlations
from .duplicates import detect_duplicates, remove_duplicates
from .outliers import detect_outliers_iqr, get_outlier_summary
from .imputation import impute, get_missing_summary
from .encoding import encode, scale
from .scope import select_columns, get_column_summary
from .journal import TransformationJournal
from .operations import OperationResult, apply, available_operations
from .autopilot import AutopilotResult, ColumnFailure, run_autopilot
from .session import CleaningSession, SessionStore, StateRecord

__version__ = "0.1.0"

__all__ = [
    'Table', 'Column', 'infer_column_type',
    'CleaningError', 'InvalidColumnError', 'InvalidParameterError',
    'MalformedOrdinalOrderError', 'UnknownOperationError', 'NonNumericColumnError',
    'AutopilotPartialFailure', 'SessionNotFoundError', 'IngestionError',
    'AutopilotConfig', 'configure_logging',
    'ColumnStats', 'compute_column_stats', 'correlation_matrix', 'find_high_correlations',
    'detect_duplicates', 'remove_duplicates',
    'detect_outliers_iqr', 'get_outlier_summary',
    'impute', 'get_missing_summary',
    'encode', 'scale',
    'select_columns', 'get_column_summary',
    'TransformationJournal',
    'OperationResult', 'apply', 'available_operations',
    'AutopilotResult', 'ColumnFailure', 'run_autopilot',
    'CleaningSession', 'SessionStore', 'StateRecord'
]
