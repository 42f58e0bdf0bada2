"""Tests for the rule-based autopilot."""

import logging

import pytest

import cleanflow.autopilot as autopilot
from cleanflow.autopilot import (
    auto_ordinal_order,
    is_target_name,
    run_autopilot,
    suggest_encoding,
    suggest_imputation,
    suggest_outlier_treatment,
    suggest_scaling,
)
from cleanflow.config import AutopilotConfig
from cleanflow.errors import AutopilotPartialFailure

from conftest import make_table


# ═══════════════════════════════════════════════════════════════
# DECISION RULES
# ═══════════════════════════════════════════════════════════════

class TestImputationRule:

    def test_mean_below_ten_percent(self):
        table = make_table(a=list(range(1, 20)) + [None])
        assert suggest_imputation(table, "a").method == "mean"

    def test_median_at_exactly_ten_percent(self):
        table = make_table(a=[1, 2, 3, 4, 5, 6, 7, 8, 9, None])
        assert suggest_imputation(table, "a").method == "median"

    def test_not_dropped_at_exactly_forty_percent(self):
        table = make_table(a=[1, 2, 3, 4, 5, 6, None, None, None, None])
        assert suggest_imputation(table, "a").method == "median"

    def test_dropped_above_forty_percent(self):
        table = make_table(a=[1, 2, 3, 4, 5, None, None, None, None, None])
        assert suggest_imputation(table, "a").method == "drop"

    def test_median_with_outliers(self):
        table = make_table(a=[1, 2, 3, 4, 5, 100] + list(range(2, 16)) + [None])
        assert suggest_imputation(table, "a").method == "median"

    def test_categorical_uses_mode(self):
        table = make_table(c=["x", "y", None])
        assert suggest_imputation(table, "c").method == "mode"

    def test_config_overrides_thresholds(self):
        table = make_table(a=[1, 2, 3, 4, 5, 6, 7, 8, 9, None])
        config = AutopilotConfig(mean_missing_pct=15.0)
        assert suggest_imputation(table, "a", config).method == "mean"

    def test_earlier_share_overrides_current(self):
        table = make_table(a=[1, 2, 3, 4, 5, 6, None, None, None, None])
        assert suggest_imputation(table, "a", null_percentage=50.0).method == "drop"


class TestOutlierRule:

    def test_no_outliers(self):
        assert suggest_outlier_treatment(make_table(a=[1, 2, 3, 4]), "a") is None

    def test_skewed_column_uses_winsor(self, fence_table):
        assert suggest_outlier_treatment(fence_table, "value").method == "winsor"

    def test_near_normal_column_uses_zscore(self):
        values = [10, 11, 12, 12, 13, 13, 13, 14, 14, 15, 16, 1, 25]
        assert suggest_outlier_treatment(make_table(a=values), "a").method == "zscore"


class TestEncodingRule:

    @pytest.mark.parametrize("name", ["target", "Churn_Flag", "class_label", "y", "is_y", "Price_Range"])
    def test_target_names(self, name):
        assert is_target_name(name)

    @pytest.mark.parametrize("name", ["city", "country", "salary", "day", "yield", "age"])
    def test_non_target_names(self, name):
        assert not is_target_name(name)

    def test_label_for_target(self):
        table = make_table(outcome=["a", "b"])
        assert suggest_encoding(table, "outcome").method == "label"

    def test_ordinal_above_cardinality_limit(self):
        table = make_table(code=[f"c{i:02d}" for i in range(16)])
        assert suggest_encoding(table, "code").method == "ordinal"

    def test_one_hot_at_cardinality_limit(self):
        table = make_table(code=[f"c{i:02d}" for i in range(15)])
        assert suggest_encoding(table, "code").method == "one_hot"

    def test_auto_order_is_lexicographic(self):
        table = make_table(code=["b", "c", "a", None, "b"])
        assert auto_ordinal_order(table, "code") == ["a", "b", "c"]


class TestScalingRule:

    def test_standard_for_normal(self):
        assert suggest_scaling(make_table(a=[1, 2, 3, 4, 5]), "a").method == "standard"

    def test_robust_with_outliers(self, fence_table):
        assert suggest_scaling(fence_table, "value").method == "robust"

    def test_min_max_for_skewed_without_outliers(self):
        table = make_table(a=[1, 1, 1, 1, 2, 2, 3, 5])
        assert suggest_scaling(table, "a").method == "min_max"


# ═══════════════════════════════════════════════════════════════
# END TO END
# ═══════════════════════════════════════════════════════════════

class TestRunAutopilot:

    def test_scenario(self, scenario_table):
        result = run_autopilot(scenario_table)

        assert result.entries == [
            "Autopilot: age (Missing) -> MEDIAN",
            "Autopilot: city (Encoding) -> OneHot",
            "Autopilot: target (Encoding) -> Label",
            "Autopilot: age (Scaling) -> Standard",
        ]
        assert result.completed_cleanly

        final = result.table
        assert final.columns == ["age", "target", "city_A", "city_B", "city_C", "city_D"]
        assert final.column("age").null_count == 0
        assert final.values("target") == [0, 1, 0, 1, 0, 1, 0, 1, 1, 0]
        assert final.values("city_D") == [0, 0, 0, 1, 0, 0, 0, 1, 0, 0]

        age = final.numeric_values("age")
        assert abs(age.mean()) < 1e-3
        assert abs(age.std() - 1) < 1e-3

    def test_input_is_unchanged(self, scenario_table):
        before = scenario_table.to_records()
        run_autopilot(scenario_table)
        assert scenario_table.to_records() == before

    def test_deterministic(self, scenario_table):
        first = run_autopilot(scenario_table)
        second = run_autopilot(make_table(**{c: scenario_table.values(c) for c in scenario_table.columns}))
        assert first.table == second.table
        assert first.entries == second.entries

    def test_unpacks_to_table_and_entries(self, scenario_table):
        table, entries = run_autopilot(scenario_table)
        assert table.row_count == 10
        assert len(entries) == 4

    def test_duplicates_are_journaled(self):
        table = make_table(a=[1, 1, 2], b=["x", "x", "y"])
        result = run_autopilot(table)
        assert result.entries[0] == "Autopilot: Removed 1 duplicate rows"
        assert result.table.row_count == 2

    def test_drop_then_outliers(self):
        table = make_table(
            sparse=[1, None, None, None, None, None, 3, 4, 5, 6],
            value=[1, 2, 3, 4, 5, 6, 7, 8, 9, 200],
        )
        result = run_autopilot(table)
        assert result.entries[0] == "Autopilot: sparse (Missing) -> DROP"
        assert result.table.row_count == 5
        assert "Autopilot: value (Outliers) -> Winsorization" in result.entries

    def test_missing_shares_are_fixed_before_the_phase(self):
        table = make_table(
            id=list(range(10)),
            a=[None, None, None, None, None, 6, 7, 8, 9, 10],
            b=[None, None, None, 4, 5, None, None, 8, 9, 10],
        )
        result = run_autopilot(table)
        assert result.entries[:2] == [
            "Autopilot: a (Missing) -> DROP",
            "Autopilot: b (Missing) -> DROP",
        ]
        assert result.table.row_count == 3

    def test_high_cardinality_uses_auto_order(self):
        table = make_table(code=[f"c{i:02d}" for i in range(20)][::-1])
        result = run_autopilot(table, AutopilotConfig(ordinal_cardinality=15))
        assert result.entries == ["Autopilot: code (Encoding) -> Ordinal (Auto-order)"]
        assert result.table.values("code") == list(range(19, -1, -1))

    def test_failing_column_is_isolated(self, scenario_table, monkeypatch, caplog):
        def broken(table, column):
            raise ValueError("encoder unavailable")

        monkeypatch.setattr(autopilot, "label_encode", broken)
        with caplog.at_level(logging.WARNING, logger="cleanflow.autopilot"):
            result = run_autopilot(scenario_table)

        assert not result.completed_cleanly
        assert [(f.phase, f.column, f.method) for f in result.failures] == [("Encoding", "target", "label")]
        assert "Autopilot: target (Encoding) -> Label" not in result.entries
        assert "Autopilot: age (Scaling) -> Standard" in result.entries
        assert result.table.values("target")[0] == "yes"
        assert "encoder unavailable" in caplog.text

        with pytest.raises(AutopilotPartialFailure, match="target"):
            result.raise_for_failures()

    def test_clean_table_is_only_scaled(self):
        table = make_table(a=[1, 2, 3, 4, 5], b=[True, False, True, False, True])
        result = run_autopilot(table)
        assert result.entries == ["Autopilot: a (Scaling) -> Standard"]
