"""Tests for the ingestion, export and visualization adapters."""

import io
import json

import pandas as pd
import plotly.graph_objects as go
import pytest

from cleanflow.errors import IngestionError
from cleanflow.journal import TransformationJournal
from cleanflow.utils.export import (
    export_filename,
    export_journal,
    export_report,
    export_table,
    get_file_extension,
    get_mime_type,
)
from cleanflow.utils.ingestion import detect_delimiter, ingest_file
from cleanflow.utils.visualization import (
    create_correlation_heatmap,
    create_distribution_comparison,
    create_histogram,
    create_missing_chart,
    create_outlier_boxplot,
)

from conftest import make_table


class TestIngestion:

    def test_csv(self):
        table, metadata = ingest_file(b"a,b\n1,x\n2,\n", "data.csv")
        assert table.columns == ["a", "b"]
        assert table.values("a") == [1, 2]
        assert table.values("b") == ["x", None]
        assert table.column("a").inferred_type == "numeric"
        assert metadata["delimiter"] == ","
        assert metadata["row_count"] == 2

    def test_semicolon_delimiter(self):
        table, metadata = ingest_file(b"a;b\n1;2\n3;4\n", "data.csv")
        assert metadata["delimiter"] == ";"
        assert table.columns == ["a", "b"]

    def test_tsv(self):
        table, _ = ingest_file(b"a\tb\n1\t2\n", "data.tsv")
        assert table.to_records() == [{"a": 1, "b": 2}]

    def test_latin1_fallback(self):
        table, metadata = ingest_file("name\ncafé\n".encode("latin-1"), "data.csv")
        assert table.values("name") == ["café"]
        assert metadata["encoding"] == "latin-1"

    def test_json_array_and_object(self):
        table, _ = ingest_file(b'[{"a": 1, "b": "x"}, {"a": 2}]', "data.json")
        assert table.to_records() == [{"a": 1, "b": "x"}, {"a": 2, "b": None}]
        single, _ = ingest_file(b'{"a": 1}', "data.json")
        assert single.row_count == 1

    def test_xml(self):
        content = b"<root><row><a>1</a><b>x</b></row><row><a>2</a><b>y</b></row></root>"
        table, _ = ingest_file(content, "data.xml")
        assert table.columns == ["a", "b"]
        assert table.values("b") == ["x", "y"]

    def test_excel_round_trip(self):
        table = make_table(a=[1, 2], b=["x", "y"])
        loaded, _ = ingest_file(export_table(table, "excel"), "data.xlsx")
        assert loaded == table

    def test_unsupported_format(self):
        with pytest.raises(IngestionError):
            ingest_file(b"%PDF", "report.pdf")

    def test_malformed_json(self):
        with pytest.raises(IngestionError):
            ingest_file(b"{not json", "data.json")

    def test_json_scalar_rejected(self):
        with pytest.raises(IngestionError):
            ingest_file(b"42", "data.json")

    def test_unnamed_columns_are_renamed(self):
        table, _ = ingest_file(b",b\n1,2\n", "data.csv")
        assert table.columns == ["column_0", "b"]

    def test_detect_delimiter(self):
        assert detect_delimiter("a|b|c\n1|2|3") == "|"


class TestExport:

    def test_csv(self):
        content = export_table(make_table(a=[1, None], b=["x", "y"]), "csv")
        df = pd.read_csv(io.BytesIO(content))
        assert df.columns.tolist() == ["a", "b"]
        assert df["b"].tolist() == ["x", "y"]

    def test_json(self):
        content = export_table(make_table(a=[1, None]), "json")
        assert json.loads(content) == [{"a": 1}, {"a": None}]

    def test_xml_escapes_values(self):
        content = export_table(make_table(**{"a b": ["<x>", None]}), "xml").decode("utf-8")
        assert "<a_b>&lt;x&gt;</a_b>" in content
        assert "<a_b></a_b>" in content

    def test_unsupported_format(self):
        with pytest.raises(ValueError):
            export_table(make_table(a=[1]), "parquet")

    def test_journal(self):
        assert json.loads(export_journal(TransformationJournal(["a", "b"]))) == ["a", "b"]

    def test_report(self, scenario_table):
        journal = TransformationJournal(["age: imputation by MEAN"])
        report = export_report(scenario_table, journal, original=scenario_table)
        assert report.startswith("# Data Cleaning Report")
        assert "- **Original Row Count:** 10" in report
        assert "| age | numeric | 20.00% |" in report
        assert "1. age: imputation by MEAN" in report

    def test_names(self):
        assert export_filename("people.csv", "excel") == "preprocessed_people.xlsx"
        assert export_filename("people", "json") == "preprocessed_people.json"
        assert get_file_extension("xml") == ".xml"
        assert get_mime_type("json") == "application/json"


class TestVisualization:

    def test_figures(self, scenario_table, fence_table):
        figures = [
            create_histogram(fence_table, "value"),
            create_outlier_boxplot(fence_table, "value"),
            create_correlation_heatmap(scenario_table),
            create_missing_chart(scenario_table),
            create_distribution_comparison(scenario_table, fence_table, "age"),
        ]
        assert all(isinstance(fig, go.Figure) for fig in figures)

    def test_histogram_kde_overlay(self):
        table = make_table(a=[1, 2, 2, 3, 3, 3, 4, 4, 5, 6, 7, 8])
        fig = create_histogram(table, "a")
        assert [trace.name for trace in fig.data] == ["Histogram", "KDE"]
        assert len(create_histogram(table, "a", show_kde=False).data) == 1

    def test_boxplot_reports_outlier_count(self, fence_table):
        fig = create_outlier_boxplot(fence_table, "value")
        assert "(1 outliers)" in fig.layout.title.text
