"""Export utilities: tables, journals and markdown reports."""

from typing import Iterable, Optional
from xml.sax.saxutils import escape
import io
import json
import re

from ..journal import TransformationJournal
from ..statistics import compute_column_stats
from ..table import Table


def export_table(table: Table, format: str = "csv") -> bytes:
    """
    Export a table to various formats.

    Args:
        table: Table to export
        format: Export format ('csv', 'excel', 'json', 'xml')

    Returns:
        Bytes content of the exported file
    """
    df = table.to_frame()
    buffer = io.BytesIO()

    if format == "csv":
        df.to_csv(buffer, index=False)
    elif format == "excel":
        df.to_excel(buffer, index=False, sheet_name="Data", engine="openpyxl")
    elif format == "json":
        json_str = json.dumps(table.to_records(), indent=4, default=str)
        buffer.write(json_str.encode("utf-8"))
    elif format == "xml":
        buffer.write(_to_xml(table).encode("utf-8"))
    else:
        raise ValueError(f"Unsupported format: {format}")

    buffer.seek(0)
    return buffer.getvalue()


def _xml_tag(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", name)


def _to_xml(table: Table) -> str:
    lines = ['<?xml version="1.0" encoding="UTF-8"?>', "<root>"]
    for record in table.to_records():
        lines.append("  <row>")
        for key, value in record.items():
            tag = _xml_tag(key)
            text = "" if value is None else escape(str(value))
            lines.append(f"    <{tag}>{text}</{tag}>")
        lines.append("  </row>")
    lines.append("</root>")
    return "\n".join(lines)


def export_journal(journal: Iterable[str]) -> str:
    """
    Export transformation entries as JSON.

    Returns:
        JSON string
    """
    return json.dumps(list(journal), indent=2)


def export_report(
    table: Table,
    journal: TransformationJournal,
    original: Optional[Table] = None
) -> str:
    """
    Generate a markdown report of the cleaning session.

    Args:
        table: Final table
        journal: Applied transformations
        original: Imported table, for before/after counts

    Returns:
        Markdown report string
    """
    report = []

    report.append("# Data Cleaning Report\n")

    # Summary
    report.append("## Summary\n")
    if original is not None:
        report.append(f"- **Original Row Count:** {original.row_count:,}")
        report.append(f"- **Original Column Count:** {original.column_count}")
    report.append(f"- **Final Row Count:** {table.row_count:,}")
    report.append(f"- **Final Column Count:** {table.column_count}")
    report.append("")

    # Column types
    report.append("## Columns\n")
    report.append("| Column | Type | Missing % |")
    report.append("|--------|------|-----------|")
    columns = table.column_info()
    for info in columns[:20]:
        report.append(f"| {info.name} | {info.inferred_type} | {info.null_percentage:.2f}% |")
    if len(columns) > 20:
        report.append(f"| ... | ({len(columns) - 20} more columns) | |")
    report.append("")

    # Numeric statistics
    report.append("## Numeric Column Statistics\n")
    numeric_cols = table.columns_of_type("numeric")[:10]
    if numeric_cols:
        report.append("| Column | Mean | Median | Std | Min | Max |")
        report.append("|--------|------|--------|-----|-----|-----|")
        for col in numeric_cols:
            stats = compute_column_stats(table, col)
            report.append(
                f"| {col} | {stats.mean:.2f} | {stats.median:.2f} | "
                f"{stats.std:.2f} | {stats.min:.2f} | {stats.max:.2f} |"
            )
    else:
        report.append("No numeric columns in the final dataset.")
    report.append("")

    # Journal
    report.append("## Transformations Applied\n")
    report.append(journal.to_markdown())
    report.append("")

    return "\n".join(report)


def get_file_extension(format: str) -> str:
    """Get file extension for export format."""
    extensions = {
        "csv": ".csv",
        "excel": ".xlsx",
        "json": ".json",
        "xml": ".xml"
    }
    return extensions.get(format, ".csv")


def get_mime_type(format: str) -> str:
    """Get MIME type for export format."""
    mime_types = {
        "csv": "text/csv",
        "excel": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "json": "application/json",
        "xml": "application/xml"
    }
    return mime_types.get(format, "text/csv")


def export_filename(source_name: str, format: str) -> str:
    """Name of the exported file for an imported file name."""
    base_name = source_name.rsplit(".", 1)[0] if "." in source_name else source_name
    return f"preprocessed_{base_name}{get_file_extension(format)}"
