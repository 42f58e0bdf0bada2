"""Visual diagnostics using Plotly."""

from typing import List, Optional

import numpy as np
import plotly.graph_objects as go

from ..outliers import detect_outliers_iqr
from ..statistics import correlation_matrix
from ..table import Table


def create_histogram(
    table: Table,
    column: str,
    bins: int = 30,
    show_kde: bool = True,
    title: Optional[str] = None
) -> go.Figure:
    """
    Create a histogram with optional KDE overlay.

    Args:
        table: Input table
        column: Column to plot
        bins: Number of bins
        show_kde: Whether to show KDE overlay
        title: Optional title

    Returns:
        Plotly figure
    """
    data = table.numeric_values(column)

    fig = go.Figure()

    fig.add_trace(go.Histogram(
        x=data,
        nbinsx=bins,
        name="Histogram",
        opacity=0.7,
        marker_color="#4F8BF9"
    ))

    # KDE needs spread in the data
    if show_kde and len(data) > 10 and np.ptp(data) > 0:
        from scipy import stats
        kde = stats.gaussian_kde(data)
        x_range = np.linspace(data.min(), data.max(), 100)
        kde_values = kde(x_range)

        # Scale KDE to match histogram
        hist_counts, _ = np.histogram(data, bins=bins)
        scale = hist_counts.max() / kde_values.max() if kde_values.max() > 0 else 1

        fig.add_trace(go.Scatter(
            x=x_range,
            y=kde_values * scale,
            mode="lines",
            name="KDE",
            line=dict(color="red", width=2)
        ))

    fig.update_layout(
        title=title or f"Distribution of {column}",
        xaxis_title=column,
        yaxis_title="Count",
        showlegend=True,
        template="plotly_white"
    )

    return fig


def create_outlier_boxplot(
    table: Table,
    column: str,
    title: Optional[str] = None
) -> go.Figure:
    """
    Create a boxplot with the IQR fence highlighted.

    Returns:
        Plotly figure
    """
    data = table.numeric_values(column)
    report = detect_outliers_iqr(table, column)

    fig = go.Figure()

    fig.add_trace(go.Box(
        y=data,
        name=column,
        boxpoints="outliers",
        marker_color="#4F8BF9"
    ))

    if len(data) > 0:
        fig.add_hline(y=report.lower_bound, line_dash="dash", line_color="red",
                      annotation_text=f"Lower: {report.lower_bound:.2f}")
        fig.add_hline(y=report.upper_bound, line_dash="dash", line_color="red",
                      annotation_text=f"Upper: {report.upper_bound:.2f}")

    fig.update_layout(
        title=title or f"Outlier Detection: {column} ({len(report.indices)} outliers)",
        yaxis_title=column,
        template="plotly_white"
    )

    return fig


def create_correlation_heatmap(
    table: Table,
    columns: Optional[List[str]] = None,
    title: Optional[str] = None
) -> go.Figure:
    """
    Create a correlation heatmap.

    Args:
        table: Input table
        columns: Columns to include (None = all numeric, first 20)
        title: Optional title

    Returns:
        Plotly figure
    """
    if columns is None:
        columns = table.columns_of_type("numeric")[:20]  # Limit for readability

    matrix, columns = correlation_matrix(table, columns)

    fig = go.Figure(data=go.Heatmap(
        z=matrix,
        x=columns,
        y=columns,
        colorscale="RdBu_r",
        zmid=0,
        zmin=-1,
        zmax=1,
        text=np.round(np.array(matrix, dtype=float), 2) if columns else None,
        texttemplate="%{text}",
        textfont={"size": 10},
        hoverongaps=False
    ))

    fig.update_layout(
        title=title or "Correlation Matrix",
        template="plotly_white",
        height=max(400, len(columns) * 30)
    )

    return fig


def create_missing_chart(table: Table, title: Optional[str] = None) -> go.Figure:
    """
    Create a bar chart of missing value percentages per column.

    Returns:
        Plotly figure
    """
    info = table.column_info()

    fig = go.Figure(data=go.Bar(
        x=[c.name for c in info],
        y=[c.null_percentage for c in info],
        text=[f"{c.null_count}" for c in info],
        textposition="outside",
        marker_color=["red" if c.null_percentage > 40 else "#4F8BF9" for c in info]
    ))

    fig.add_hline(y=40, line_dash="dash", line_color="gray",
                  annotation_text="Drop threshold: 40%")

    fig.update_layout(
        title=title or "Missing Values per Column",
        xaxis_title="Column",
        yaxis_title="Missing %",
        template="plotly_white"
    )

    return fig


def create_distribution_comparison(
    before: Table,
    after: Table,
    column: str,
    bins: int = 30,
    title: Optional[str] = None
) -> go.Figure:
    """
    Create overlaid histogram comparing before/after distributions.

    Args:
        before: Table before transformation
        after: Table after transformation
        column: Column to compare
        bins: Number of bins
        title: Optional title

    Returns:
        Plotly figure
    """
    fig = go.Figure()

    data_before = before.numeric_values(column) if column in before else np.array([])
    if len(data_before) > 0:
        fig.add_trace(go.Histogram(
            x=data_before,
            nbinsx=bins,
            name="Before",
            opacity=0.5,
            marker_color="blue"
        ))

    data_after = after.numeric_values(column) if column in after else np.array([])
    if len(data_after) > 0:
        fig.add_trace(go.Histogram(
            x=data_after,
            nbinsx=bins,
            name="After",
            opacity=0.5,
            marker_color="orange"
        ))

    fig.update_layout(
        title=title or f"Distribution Comparison: {column}",
        xaxis_title=column,
        yaxis_title="Count",
        barmode="overlay",
        showlegend=True,
        template="plotly_white"
    )

    return fig
