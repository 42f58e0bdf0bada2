"""File ingestion: raw bytes to Table."""

from typing import Any, Dict, Tuple
from pathlib import Path
import io
import json
import logging
from xml.etree.ElementTree import ParseError

import numpy as np
import pandas as pd

from ..errors import IngestionError
from ..table import Table

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = (".csv", ".tsv", ".txt", ".xlsx", ".xls", ".json", ".xml")
FALLBACK_ENCODINGS = ("latin-1", "cp1252")


def ingest_file(
    file_content: bytes,
    filename: str,
    encoding: str = "utf-8"
) -> Tuple[Table, Dict[str, Any]]:
    """
    Ingest a file and return a Table with metadata.

    Args:
        file_content: Raw file bytes
        filename: Original filename (for type detection)
        encoding: Character encoding for text files

    Returns:
        Tuple of (Table, metadata dict)

    Raises:
        IngestionError: If the format is unsupported or the content is malformed
    """
    suffix = Path(filename).suffix.lower()

    metadata = {
        "source_file": filename,
        "encoding": encoding,
        "format": suffix
    }

    if suffix not in SUPPORTED_FORMATS:
        raise IngestionError(
            f"Unsupported file format: {suffix or filename}. Use CSV, TSV, XLS, XLSX, JSON or XML."
        )

    try:
        if suffix in (".csv", ".tsv", ".txt"):
            df, metadata["encoding"], metadata["delimiter"] = _read_delimited(
                file_content, encoding, "\t" if suffix == ".tsv" else None
            )

        elif suffix in (".xlsx", ".xls"):
            # First sheet only
            df = pd.read_excel(io.BytesIO(file_content), sheet_name=0)

        elif suffix == ".json":
            df = _read_json(file_content.decode(encoding))

        else:
            df = pd.read_xml(io.BytesIO(file_content), parser="etree")

    except IngestionError:
        raise
    except (ValueError, UnicodeDecodeError, ParseError) as e:
        raise IngestionError(f"Could not read {filename}: {e}") from e

    table = Table.from_frame(sanitize_frame(df))

    metadata["row_count"] = table.row_count
    metadata["col_count"] = table.column_count
    logger.info("Ingested %s: %d rows x %d columns", filename, table.row_count, table.column_count)

    return table, metadata


def _read_delimited(file_content: bytes, encoding: str, delimiter: str = None):
    for candidate in (encoding,) + FALLBACK_ENCODINGS:
        try:
            text = file_content.decode(candidate)
        except UnicodeDecodeError:
            continue

        if delimiter is None:
            delimiter = detect_delimiter(text[:4096])
        df = pd.read_csv(io.StringIO(text), delimiter=delimiter, skip_blank_lines=True)
        return df, candidate, delimiter

    raise IngestionError("Could not determine file encoding")


def _read_json(text: str) -> pd.DataFrame:
    data = json.loads(text)
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise IngestionError("JSON content must be an object or an array of objects")
    return pd.DataFrame.from_records(data)


def detect_delimiter(sample: str) -> str:
    """Detect CSV delimiter from sample text."""
    delimiters = [",", ";", "\t", "|"]
    counts = {d: sample.count(d) for d in delimiters}
    return max(counts, key=counts.get)


def sanitize_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Replace infinities with NaN and give unnamed columns stable names."""
    df = df.replace([np.inf, -np.inf], np.nan)
    df.columns = [
        f"column_{i}" if str(c).startswith("Unnamed:") else str(c)
        for i, c in enumerate(df.columns)
    ]
    return df
