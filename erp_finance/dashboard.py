"""Streamlit app for the ERP finance dashboard.

The page loads accounts, finance transactions, sales and inventory purchases
from the backend API, merges them and shows the summary stats, reconciled
account balances, a filterable transaction table and budget comparisons.

To run the dashboard from the command line::

    streamlit run erp_finance/dashboard.py
"""

from __future__ import annotations

import os
import sys

import pandas as pd
import streamlit as st

if __package__:
    from . import aggregator, filters, visualization as viz
    from .api_client import FinanceApiClient
    from .budgets import PERIODS, budget_alerts, comparison_frame
    from .config import DEFAULT_ALERT_THRESHOLD, DEFAULT_PAGE_SIZE, get_api_base_url
    from .errors import FinanceDashboardError, NoAccountsError, SourceFetchError
    from .logging_setup import configure_logging
    from .service import DashboardService, pop_warnings
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from erp_finance import aggregator, filters, visualization as viz  # type: ignore
    from erp_finance.api_client import FinanceApiClient  # type: ignore
    from erp_finance.budgets import PERIODS, budget_alerts, comparison_frame  # type: ignore
    from erp_finance.config import DEFAULT_ALERT_THRESHOLD, DEFAULT_PAGE_SIZE, get_api_base_url  # type: ignore
    from erp_finance.errors import FinanceDashboardError, NoAccountsError, SourceFetchError  # type: ignore
    from erp_finance.logging_setup import configure_logging  # type: ignore
    from erp_finance.service import DashboardService, pop_warnings  # type: ignore

STATE_KEY = 'finance_state'


def _service(base_url: str) -> DashboardService:
    return DashboardService(FinanceApiClient(base_url))


def _render_stats(state) -> None:
    stats = state.stats
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total income", f"{stats.total_income:,.2f}",
                help=f"Sales {stats.sales_income:,.2f} / other {stats.regular_income:,.2f}")
    col2.metric("Total expenses", f"{stats.total_expenses:,.2f}",
                help=f"Inventory {stats.inventory_expenses:,.2f} / other {stats.regular_expenses:,.2f}")
    col3.metric("Balance", f"{stats.balance:,.2f}")
    col4.metric("Pending", f"+{stats.pending_income:,.2f} / -{stats.pending_expenses:,.2f}")
    st.plotly_chart(viz.create_summary_chart(stats), use_container_width=True)


def _render_accounts(state) -> None:
    st.subheader("Accounts")
    table = pd.DataFrame([
        {
            'Account': a.name,
            'Type': a.type,
            'Initial balance': a.initial_balance,
            'Current balance': a.current_balance,
        }
        for a in state.accounts
    ])
    st.dataframe(table, use_container_width=True)
    st.plotly_chart(viz.create_account_balance_chart(state.accounts), use_container_width=True)


def _render_transactions(service: DashboardService, state) -> None:
    st.subheader("Transactions")
    frame = filters.sort_newest_first(aggregator.transactions_frame(state.transactions))
    options = filters.filter_options(frame)

    col1, col2, col3, col4 = st.columns(4)
    tab = col1.selectbox("Type", options=['all', 'income', 'expense'])
    search_text = col2.text_input("Search")
    category = col3.selectbox("Category", options=[''] + options['categories'])
    status = col4.selectbox("Status", options=[''] + options['statuses'])

    filtered = filters.apply_filters(frame, {
        'type': tab,
        'search_text': search_text,
        'category': category,
        'status': status,
    })
    page = st.number_input("Page", min_value=1, value=1, step=1)
    page_rows, shown_page, total_pages = filters.paginate(filtered, int(page), DEFAULT_PAGE_SIZE)
    st.caption(f"Page {shown_page} of {total_pages} ({len(filtered)} transactions)")
    st.dataframe(page_rows.drop(columns=['account_id']), use_container_width=True)

    with st.expander("Delete a transaction"):
        transaction_id = st.text_input("Transaction id")
        if st.button("Delete") and transaction_id:
            try:
                st.session_state[STATE_KEY] = service.delete_transaction(state, transaction_id)
                st.success("Transaction deleted successfully")
                st.rerun()
            except FinanceDashboardError as exc:
                st.error(str(exc))


def _render_budgets(service: DashboardService) -> None:
    st.subheader("Budgets")
    col1, col2 = st.columns(2)
    budget_id = col1.text_input("Budget id")
    period = col2.selectbox("Period", options=list(PERIODS))
    if budget_id:
        try:
            comparison = service.budget_comparison(budget_id, period)
        except SourceFetchError as exc:
            st.error(f"Failed to load budget comparison: {exc}")
        else:
            summary = comparison.summary
            st.markdown(
                f"**{comparison.name}**: {summary.total_actual:,.2f} of {summary.total_budgeted:,.2f} "
                f"({summary.percent_used:.1f}%, {summary.label})"
            )
            table = comparison_frame(comparison.categories)
            st.dataframe(table, use_container_width=True)
            st.plotly_chart(viz.create_budget_comparison_chart(table), use_container_width=True)

            for alert in budget_alerts([comparison], DEFAULT_ALERT_THRESHOLD):
                (st.error if alert.severity == 'critical' else st.warning)(alert.message)

    threshold = st.slider("Alert threshold (%)", min_value=50, max_value=150, value=int(DEFAULT_ALERT_THRESHOLD))
    try:
        alerts = service.budget_alerts(threshold)
    except SourceFetchError as exc:
        st.error(f"Failed to load budget alerts: {exc}")
        return
    if not alerts:
        st.info("No budget alerts.")
    for alert in alerts:
        (st.error if alert.severity == 'critical' else st.warning)(alert.message)


def main() -> None:
    """Entry point for the Streamlit app."""
    configure_logging()
    st.set_page_config(page_title="Finance Dashboard", layout="wide")
    st.title("Finance Dashboard")

    base_url = st.sidebar.text_input("API base URL", value=get_api_base_url())
    service = _service(base_url)

    if st.sidebar.button("Refresh") or STATE_KEY not in st.session_state:
        try:
            st.session_state[STATE_KEY] = service.refresh()
        except NoAccountsError:
            st.session_state.pop(STATE_KEY, None)
            st.subheader("No Financial Accounts")
            st.info("Create your first bank, cash, or credit account to track your transactions.")
            st.stop()

    state, warnings = pop_warnings(st.session_state[STATE_KEY])
    st.session_state[STATE_KEY] = state
    for message in warnings:
        st.warning(message)

    _render_stats(state)
    _render_accounts(state)
    _render_transactions(service, state)
    _render_budgets(service)


if __name__ == "__main__":  # pragma: no cover
    main()
