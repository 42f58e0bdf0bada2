"""Shared table builders for the cleaning engine tests."""

import pytest

from cleanflow.table import Table


def make_table(**columns):
    """Build a table from keyword column lists, in keyword order."""
    names = list(columns)
    length = len(columns[names[0]]) if names else 0
    records = [{name: columns[name][i] for name in names} for i in range(length)]
    return Table.from_records(records, columns=names)


@pytest.fixture
def scenario_table():
    """age: 20% missing, symmetric, no outliers; city: 4 categories; target: 2 categories."""
    return make_table(
        age=[20, 30, None, 40, 50, None, 35, 45, 25, 55],
        city=["A", "B", "C", "D", "A", "B", "C", "D", "A", "B"],
        target=["yes", "no", "yes", "no", "yes", "no", "yes", "no", "no", "yes"],
    )


@pytest.fixture
def fence_table():
    """The classic single-outlier column: q1=2, q3=5, fence [-2.5, 9.5]."""
    return make_table(value=[1, 2, 3, 4, 5, 100], label=["a", "b", "c", "d", "e", "f"])
