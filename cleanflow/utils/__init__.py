"""Adapters around the cleaning engine: file ingestion, export and charts."""

from .ingestion import ingest_file, detect_delimiter
from .export import export_table, export_journal, export_report, export_filename
from .visualization import (
    create_histogram,
    create_outlier_boxplot,
    create_correlation_heatmap,
    create_missing_chart,
    create_distribution_comparison
)

__all__ = [
    'ingest_file', 'detect_delimiter',
    'export_table', 'export_journal', 'export_report', 'export_filename',
    'create_histogram', 'create_outlier_boxplot', 'create_correlation_heatmap',
    'create_missing_chart', 'create_distribution_comparison'
]
