"""Fetch, merge and reconcile: the finance dashboard refresh cycle.

:class:`DashboardService` drives :class:`~erp_finance.api_client.FinanceApiClient`
and threads an immutable :class:`~erp_finance.models.DashboardState` through
the pure aggregation and reconciliation functions.  After each source is
fetched the merged list, the stats and the account balances are recomputed,
so a partially refreshed state is always internally consistent.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from . import aggregator, normalizers, reconciler
from .api_client import FinanceApiClient
from .budgets.alerts import BudgetAlert, alerts_from_payload, notification_payload
from .budgets.calculations import BudgetComparison, comparison_from_payload, tracking_from_payload
from .config import DEFAULT_ALERT_THRESHOLD
from .errors import NoAccountsError, SourceFetchError, SyntheticTransactionError
from .logging_setup import get_logger
from .models import FINANCE, INVENTORY, SALES, SOURCES, DashboardState, Transaction, is_synthetic_id

logger = get_logger(__name__)

SOURCE_LABELS: Dict[str, str] = {
    FINANCE: 'transactions',
    SALES: 'sales data',
    INVENTORY: 'inventory data',
}


class DashboardService:
    """Builds the finance dashboard state from the backend API."""

    def __init__(self, client: Optional[FinanceApiClient] = None) -> None:
        self.client = client or FinanceApiClient()

    # Accounts ---------------------------------------------------------------

    def load_accounts(self) -> DashboardState:
        """Start a fresh state from the account list.

        Raises:
            NoAccountsError: When accounts cannot be fetched or none exist.
        """
        try:
            payload = self.client.get_accounts()
            records = normalizers.coerce_records(payload, 'accounts')
        except SourceFetchError as exc:
            logger.warning("Failed to fetch accounts: %s", exc)
            raise NoAccountsError('Failed to fetch accounts') from exc

        accounts = reconciler.snapshot_accounts(records)
        if not accounts:
            raise NoAccountsError('No financial accounts')
        return DashboardState(accounts=accounts)

    # Refresh ----------------------------------------------------------------

    def refresh(self) -> DashboardState:
        """Reload accounts, then every transaction source, from scratch."""
        state = self.load_accounts()
        for source in SOURCES:
            state = self.refresh_source(state, source)
        return state

    def refresh_source(self, state: DashboardState, source: str) -> DashboardState:
        """Replace one source's transactions and recompute stats and balances.

        A failing source contributes no transactions and adds a warning; the
        other sources are left as they are.
        """
        fetchers: Dict[str, Callable[[], List[Transaction]]] = {
            FINANCE: self._fetch_finance,
            SALES: self._fetch_sales,
            INVENTORY: self._fetch_inventory,
        }
        if source not in fetchers:
            raise ValueError(f"Unknown transaction source '{source}'")

        warnings = state.warnings
        try:
            incoming = fetchers[source]()
        except SourceFetchError as exc:
            logger.warning("Error fetching %s: %s", SOURCE_LABELS[source], exc)
            incoming = []
            warnings = warnings + (f"Failed to fetch {SOURCE_LABELS[source]}",)

        transactions = aggregator.merge_source(state.transactions, source, incoming)
        return recompute(replace(state, transactions=transactions, warnings=warnings))

    def _fetch_finance(self) -> List[Transaction]:
        records = normalizers.coerce_records(self.client.get_finance_transactions(), 'transactions')
        return [normalizers.normalize_finance_transaction(record) for record in records]

    def _fetch_sales(self) -> List[Transaction]:
        records = normalizers.coerce_records(self.client.get_sales(), 'sales', key='data')
        customers = self._lookup_table(self.client.get_customers, 'customers')
        products = self._lookup_table(self.client.get_products, 'products')
        return [normalizers.sale_to_transaction(sale, customers, products) for sale in records]

    def _fetch_inventory(self) -> List[Transaction]:
        records = normalizers.coerce_records(self.client.get_purchases(), 'inventory purchases')
        items = self._lookup_table(self.client.get_inventory_items, 'inventory items')
        suppliers = self._lookup_table(self.client.get_suppliers, 'suppliers')
        return [normalizers.purchase_to_transaction(purchase, items, suppliers) for purchase in records]

    @staticmethod
    def _lookup_table(fetch: Callable[[], Any], name: str) -> Dict[str, Mapping[str, Any]]:
        """Fetch an enrichment table; failures only degrade descriptions."""
        try:
            payload = fetch()
        except SourceFetchError as exc:
            logger.warning("Could not load %s for enrichment: %s", name, exc)
            return {}
        if isinstance(payload, Mapping):
            payload = payload.get('data')
        if not isinstance(payload, list):
            logger.warning("Ignoring malformed %s lookup", name)
            return {}
        return normalizers.index_by_id(r for r in payload if isinstance(r, Mapping))

    # Mutations --------------------------------------------------------------

    def delete_transaction(self, state: DashboardState, transaction_id: str) -> DashboardState:
        """Delete a finance transaction and reload everything.

        Raises:
            SyntheticTransactionError: For sales/inventory transactions.
            SourceFetchError: When the delete request fails.
        """
        if is_synthetic_id(transaction_id):
            raise SyntheticTransactionError(transaction_id)
        self.client.delete_transaction(transaction_id)
        logger.info("Deleted transaction %s", transaction_id)
        return self.refresh()

    # Budgets ----------------------------------------------------------------

    def budget_comparison(
        self,
        budget_id: str,
        period: str = 'month',
        polarity: Optional[Mapping[str, str]] = None,
    ) -> BudgetComparison:
        payload = self.client.get_budget_comparison(budget_id, period)
        return comparison_from_payload(payload, polarity)

    def budget_tracking(self, budget_id: str) -> BudgetComparison:
        return tracking_from_payload(self.client.get_budget_tracking(budget_id))

    def budget_alerts(self, threshold: float = DEFAULT_ALERT_THRESHOLD) -> List[BudgetAlert]:
        return alerts_from_payload(self.client.get_budget_alerts(threshold))

    def notify_alert(self, alert: BudgetAlert) -> Any:
        return self.client.create_alert_notification(notification_payload(alert))


def recompute(state: DashboardState) -> DashboardState:
    """Recompute stats and account balances from ``state.transactions``."""
    return replace(
        state,
        stats=aggregator.compute_stats(state.transactions),
        accounts=reconciler.reconcile_balances(state.accounts, state.transactions),
    )


def pop_warnings(state: DashboardState) -> Tuple[DashboardState, Tuple[str, ...]]:
    """Split off pending warnings so each is shown to the user only once."""
    return replace(state, warnings=()), state.warnings
