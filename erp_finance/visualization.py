"""Plotly visualisation helpers for the finance dashboard.

Each function accepts a value produced by the aggregation, reconciliation or
budget modules and returns a ``plotly.graph_objects.Figure`` that Streamlit
renders via ``st.plotly_chart``.  Empty inputs produce an empty figure titled
"No data to display".
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .models import Account, Stats


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def create_summary_chart(stats: Stats, title: str | None = None) -> go.Figure:
    """Stacked bars of completed income and expenses by origin.

    Parameters
    ----------
    stats : Stats
        Summary statistics from :func:`erp_finance.aggregator.compute_stats`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Stacked bar chart with one bar for income and one for expenses.
    """
    if not (stats.total_income or stats.total_expenses):
        return _empty_figure()
    df = pd.DataFrame([
        {"Flow": "Income", "Origin": "Sales", "Amount": stats.sales_income},
        {"Flow": "Income", "Origin": "Finance", "Amount": stats.regular_income},
        {"Flow": "Expenses", "Origin": "Inventory", "Amount": stats.inventory_expenses},
        {"Flow": "Expenses", "Origin": "Finance", "Amount": stats.regular_expenses},
    ])
    fig = px.bar(df, x="Flow", y="Amount", color="Origin", barmode="stack")
    fig.update_layout(
        title=title or f"Income vs expenses (net {stats.balance:,.2f})",
        xaxis_title="",
        yaxis_title="Amount",
    )
    return fig


def create_account_balance_chart(accounts: Sequence[Account], title: str | None = None) -> go.Figure:
    """Grouped bars of initial and current balance per account."""
    if not accounts:
        return _empty_figure()
    names = [account.name for account in accounts]
    fig = go.Figure(data=[
        go.Bar(name="Initial balance", x=names, y=[a.initial_balance for a in accounts]),
        go.Bar(name="Current balance", x=names, y=[a.current_balance for a in accounts]),
    ])
    fig.update_layout(
        barmode="group",
        title=title or "Account balances",
        xaxis_title="Account",
        yaxis_title="Balance",
    )
    return fig


def create_budget_comparison_chart(comparison: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Budgeted vs actual bars per category.

    Parameters
    ----------
    comparison : pandas.DataFrame
        Output of :func:`erp_finance.budgets.comparison_frame`.
    title : str, optional
        Chart title.
    """
    if comparison.empty:
        return _empty_figure()
    long_df = comparison.melt(
        id_vars="Category",
        value_vars=["Budgeted", "Actual"],
        var_name="Metric",
        value_name="Amount",
    )
    fig = px.bar(long_df, x="Category", y="Amount", color="Metric", barmode="group")
    fig.update_layout(
        title=title or "Budget vs actual",
        xaxis_title="Category",
        yaxis_title="Amount",
    )
    return fig
