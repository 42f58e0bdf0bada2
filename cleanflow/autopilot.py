"""
Rule-based autopilot.

Runs five phases once each, in order: duplicates, missing values, outliers,
encoding and scaling. Every phase picks a method per column from the
distribution of the current table and journals what it applied. A failing
column is skipped and recorded; the run always completes.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterator, List, NamedTuple, Optional
import logging
import re

from .config import DEFAULT_AUTOPILOT_CONFIG, AutopilotConfig
from .duplicates import remove_duplicates
from .encoding import label_encode, one_hot_encode, ordinal_encode, distinct_values
from .encoding import min_max_scale, robust_scale, standard_scale
from .errors import AutopilotPartialFailure
from .imputation import drop_missing, impute_mean, impute_median, impute_mode
from .outliers import count_outliers, treat_outliers_iqr, treat_outliers_winsor, treat_outliers_zscore
from .statistics import compute_column_stats
from .table import Table, cell_key

logger = logging.getLogger(__name__)

PHASES = ("Duplicates", "Missing", "Outliers", "Encoding", "Scaling")


class Suggestion(NamedTuple):
    method: str
    reason: str


@dataclass(frozen=True)
class ColumnFailure:
    """A column operation the autopilot skipped because it raised."""
    phase: str
    column: str
    method: str
    message: str


@dataclass
class AutopilotResult:
    table: Table
    entries: List[str] = field(default_factory=list)
    failures: List[ColumnFailure] = field(default_factory=list)

    @property
    def completed_cleanly(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        if self.failures:
            raise AutopilotPartialFailure(self.failures)

    def __iter__(self) -> Iterator:
        # Allows ``final_table, entries = run_autopilot(table)``
        return iter((self.table, self.entries))


# ── Decision rules ──

def is_target_name(column: str, config: AutopilotConfig = DEFAULT_AUTOPILOT_CONFIG) -> bool:
    """
    Whether a column name looks like a prediction target.

    Keywords match anywhere in the lower-cased name, except single-letter
    keywords (``y``), which must be a whole ``_``/space/``-`` separated token
    so names like ``city`` do not match.

    Plain substring matching would treat every name containing a ``y``
    (``city``, ``salary``, ``country``, ``day``) as a target and label-encode
    it; ``city`` is expected to be one-hot encoded, so ``y`` is token-matched
    instead.
    """
    name = column.lower()
    tokens = set(re.split(r"[^a-z0-9]+", name))
    return any(
        keyword in tokens if len(keyword) == 1 else keyword in name
        for keyword in config.target_keywords
    )


def suggest_imputation(
    table: Table,
    column: str,
    config: AutopilotConfig = DEFAULT_AUTOPILOT_CONFIG,
    null_percentage: Optional[float] = None
) -> Suggestion:
    """
    Suggest how to fill or drop a column's missing values.

    Args:
        table: Table holding the column
        column: Column name
        config: Threshold overrides
        null_percentage: Missing share to judge by, when it was taken from an
            earlier table (defaults to the column's current share)

    Returns:
        Suggestion naming one of drop, mode, mean or median
    """
    info = table.column(column)
    if null_percentage is None:
        null_percentage = info.null_percentage

    if null_percentage > config.drop_missing_pct:
        return Suggestion("drop", f"More than {config.drop_missing_pct:g}% missing values")
    if info.is_categorical:
        return Suggestion("mode", "Categorical column")
    if not info.is_numeric:
        return Suggestion("mode", "Default method for non-numeric data")

    stats = compute_column_stats(table, column)
    if stats is None:
        return Suggestion("mode", "Default method for non-numeric data")

    outliers = count_outliers(table, column)
    if stats.is_symmetric and outliers == 0 and null_percentage < config.mean_missing_pct:
        return Suggestion("mean", "Symmetric distribution without outliers")
    if not stats.is_symmetric or outliers > 0:
        return Suggestion("median", "Skewed distribution or outliers present")
    return Suggestion("median", f"{config.mean_missing_pct:g}% or more missing values")


def suggest_outlier_treatment(table: Table, column: str) -> Optional[Suggestion]:
    """Suggested treatment, or None when the column has no IQR outliers."""
    stats = compute_column_stats(table, column)
    if stats is None or count_outliers(table, column) == 0:
        return None

    if stats.is_normal:
        return Suggestion("zscore", "Normal distribution: z-score replacement")
    if stats.is_symmetric:
        return Suggestion("iqr", "Symmetric distribution: clamp to the IQR fence")
    return Suggestion("winsor", "Skewed distribution: winsorization")


def suggest_encoding(
    table: Table,
    column: str,
    config: AutopilotConfig = DEFAULT_AUTOPILOT_CONFIG
) -> Suggestion:
    if is_target_name(column, config):
        return Suggestion("label", "Name looks like a target variable")
    if table.column(column).unique_count > config.ordinal_cardinality:
        return Suggestion(
            "ordinal",
            f"More than {config.ordinal_cardinality} categories: one-hot would add too many columns"
        )
    return Suggestion("one_hot", "Nominal categorical column")


def suggest_scaling(table: Table, column: str) -> Suggestion:
    stats = compute_column_stats(table, column)
    if stats is None:
        return Suggestion("min_max", "Default method")

    outliers = count_outliers(table, column)
    if stats.is_normal and outliers == 0:
        return Suggestion("standard", "Normal distribution without outliers")
    if outliers > 0:
        return Suggestion("robust", "Outliers present")
    return Suggestion("min_max", "Non-normal distribution without outliers")


def auto_ordinal_order(table: Table, column: str) -> List[str]:
    # Lexicographic order is a heuristic; it is not a semantic ranking
    return sorted(cell_key(v) for v in distinct_values(table, column))


# ── Runner ──

class _Run:
    def __init__(self, table: Table, config: AutopilotConfig):
        self.table = table
        self.config = config
        self.entries: List[str] = []
        self.failures: List[ColumnFailure] = []

    def attempt(self, phase: str, column: str, method: str, label: str,
                operation: Callable[[Table], Table]) -> None:
        try:
            self.table = operation(self.table)
        except Exception as e:
            logger.warning("Autopilot skipped %s on '%s' (%s): %s", method, column, phase, e)
            self.failures.append(ColumnFailure(phase, column, method, str(e)))
            return
        self.entries.append(f"Autopilot: {column} ({phase}) -> {label}")
        logger.info("Autopilot %s: %s -> %s", phase.lower(), column, method)

    def duplicates(self) -> None:
        self.table, removed = remove_duplicates(self.table)
        if removed > 0:
            self.entries.append(f"Autopilot: Removed {removed} duplicate rows")
            logger.info("Autopilot duplicates: removed %d rows", removed)

    def missing(self) -> None:
        # Shares are fixed before the phase so an earlier drop cannot move a
        # later column across the thresholds
        shares = {c.name: c.null_percentage for c in self.table.column_info() if c.null_count > 0}
        for column, share in shares.items():
            if self.table.column(column).null_count == 0:
                continue
            method = suggest_imputation(self.table, column, self.config, share).method
            operation = {
                "drop": drop_missing,
                "mode": impute_mode,
                "mean": impute_mean,
                "median": impute_median,
            }[method]
            self.attempt("Missing", column, method, method.upper(),
                         lambda t, op=operation, c=column: op(t, c))

    def outliers(self) -> None:
        labels = {"zscore": "Z-Score", "iqr": "IQR", "winsor": "Winsorization"}
        for column in self.table.columns_of_type("numeric"):
            suggestion = suggest_outlier_treatment(self.table, column)
            if suggestion is None:
                continue

            if suggestion.method == "zscore":
                operation = lambda t, c=column: treat_outliers_zscore(t, c, self.config.zscore_threshold)
            elif suggestion.method == "iqr":
                operation = lambda t, c=column: treat_outliers_iqr(t, c)
            else:
                operation = lambda t, c=column: treat_outliers_winsor(
                    t, c, self.config.winsor_lower_pct, self.config.winsor_upper_pct
                )
            self.attempt("Outliers", column, suggestion.method, labels[suggestion.method], operation)

    def encoding(self) -> None:
        for column in self.table.columns_of_type("categorical"):
            method = suggest_encoding(self.table, column, self.config).method
            if method == "label":
                self.attempt("Encoding", column, method, "Label",
                             lambda t, c=column: label_encode(t, c))
            elif method == "ordinal":
                self.attempt("Encoding", column, method, "Ordinal (Auto-order)",
                             lambda t, c=column: ordinal_encode(t, c, auto_ordinal_order(t, c)))
            else:
                self.attempt("Encoding", column, method, "OneHot",
                             lambda t, c=column: one_hot_encode(t, c))

    def scaling(self, numeric_columns: List[str]) -> None:
        labels = {"standard": "Standard", "robust": "Robust", "min_max": "MinMax"}
        operations = {"standard": standard_scale, "robust": robust_scale, "min_max": min_max_scale}
        for column in numeric_columns:
            if column not in self.table or compute_column_stats(self.table, column) is None:
                continue
            method = suggest_scaling(self.table, column).method
            self.attempt("Scaling", column, method, labels[method],
                         lambda t, op=operations[method], c=column: op(t, [c]))


def run_autopilot(
    table: Table,
    config: Optional[AutopilotConfig] = None
) -> AutopilotResult:
    """
    Clean a table end to end with the rule-based policy.

    Args:
        table: Input table (left unchanged)
        config: Threshold overrides (defaults to AutopilotConfig())

    Returns:
        AutopilotResult with the final table, ordered journal entries and
        any per-column failures
    """
    run = _Run(table, config or DEFAULT_AUTOPILOT_CONFIG)
    logger.info("Autopilot started on %d rows x %d columns", table.row_count, table.column_count)

    run.duplicates()
    run.missing()
    run.outliers()
    # Captured before encoding so freshly encoded columns are never scaled
    numeric_columns = run.table.columns_of_type("numeric")
    run.encoding()
    run.scaling(numeric_columns)

    if run.failures:
        logger.warning("Autopilot finished with %d skipped column operation(s)", len(run.failures))
    else:
        logger.info("Autopilot finished: %d transformations", len(run.entries))

    return AutopilotResult(run.table, run.entries, run.failures)
