"""Tests for IQR detection and the three outlier treatments."""

import numpy as np

from cleanflow.outliers import (
    count_outliers,
    detect_outliers_iqr,
    get_outlier_summary,
    percentile_value,
    treat_outliers_iqr,
    treat_outliers_winsor,
    treat_outliers_zscore,
)

from conftest import make_table


class TestDetection:

    def test_tukey_fence(self, fence_table):
        report = detect_outliers_iqr(fence_table, "value")
        assert report.lower_bound == -2.5
        assert report.upper_bound == 9.5
        assert report.indices == [5]

    def test_non_numeric_column_has_no_outliers(self, fence_table):
        assert detect_outliers_iqr(fence_table, "label") == ([], 0.0, 0.0)
        assert count_outliers(fence_table, "label") == 0

    def test_summary(self, fence_table):
        summary = get_outlier_summary(fence_table)
        assert summary["columns_with_outliers"] == 1
        assert summary["total_outliers"] == 1
        assert summary["column_summaries"][0]["bounds"] == [-2.5, 9.5]

    def test_percentile_index_is_capped(self):
        values = np.array([1.0, 2.0, 3.0])
        assert percentile_value(values, 100) == 3.0
        assert percentile_value(values, 0) == 1.0


class TestTreatment:

    def test_iqr_clamps_to_fence(self, fence_table):
        treated = treat_outliers_iqr(fence_table, "value")
        assert treated.values("value") == [1, 2, 3, 4, 5, 9.5]
        assert fence_table.values("value")[5] == 100
        assert treated.values("label") == fence_table.values("label")

    def test_iqr_without_outliers_is_noop(self):
        table = make_table(a=[1, 2, 3])
        assert treat_outliers_iqr(table, "a") is table

    def test_winsor(self):
        table = make_table(a=list(range(1, 21)))
        treated = treat_outliers_winsor(table, "a", 10, 90)
        values = treated.values("a")
        assert values[:3] == [3, 3, 3]
        assert values[-2:] == [19, 19]
        assert values[3:18] == list(range(4, 19))

    def test_winsor_leaves_missing_cells(self):
        table = make_table(a=[1, None, 50, 2, 3])
        treated = treat_outliers_winsor(table, "a", 0, 50)
        assert treated.values("a") == [1, None, 3, 2, 3]

    def test_zscore_replaces_with_median_for_skewed_column(self):
        table = make_table(a=[10] * 19 + [100])
        treated = treat_outliers_zscore(table, "a")
        assert treated.values("a") == [10] * 20

    def test_zscore_zero_variance_is_noop(self):
        table = make_table(a=[5, 5, 5])
        assert treat_outliers_zscore(table, "a") is table

    def test_zscore_threshold(self):
        table = make_table(a=[1, 2, 3, 4, 5, 6, 7, 8, 9, 30])
        assert treat_outliers_zscore(table, "a", threshold=10) is table
        treated = treat_outliers_zscore(table, "a", threshold=2)
        assert treated.values("a")[-1] == 5.5
