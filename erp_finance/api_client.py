"""REST client for the ERP backend's finance, sales and inventory endpoints.

Every method returns decoded JSON.  Transport failures and non-2xx answers
raise :class:`~erp_finance.errors.SourceFetchError`; bodies that cannot be
decoded raise :class:`~erp_finance.errors.MalformedPayloadError`.  Nothing is
retried.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import requests

from .budgets.calculations import PERIODS
from .config import DEFAULT_ALERT_THRESHOLD, get_api_base_url, get_request_timeout
from .errors import MalformedPayloadError, SourceFetchError, SyntheticTransactionError
from .logging_setup import get_logger
from .models import is_synthetic_id

logger = get_logger(__name__)

ACCOUNTS_PATH = '/api/finance/accounts'
TRANSACTIONS_PATH = '/api/finance/transactions'
SALES_PATH = '/api/sales'
CUSTOMERS_PATH = '/api/sales/customers'
PRODUCTS_PATH = '/api/sales/products'
PURCHASES_PATH = '/api/inventory/purchases'
INVENTORY_ITEMS_PATH = '/api/inventory/items'
SUPPLIERS_PATH = '/api/inventory/suppliers'
BUDGET_TRACK_PATH = '/api/finance/budgets/track'
BUDGET_COMPARISON_PATH = '/api/finance/budgets/comparison'
BUDGET_ALERTS_PATH = '/api/finance/budgets/alerts'


class FinanceApiClient:
    """Thin wrapper around a ``requests.Session`` bound to one backend."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = (base_url or get_api_base_url()).rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else get_request_timeout()

    # Transport --------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise SourceFetchError(path, 'request timed out')
        except requests.exceptions.RequestException as exc:
            raise SourceFetchError(path, f'request failed: {exc}')

        if not response.ok:
            logger.warning("%s %s answered %s", method, path, response.status_code)
            raise SourceFetchError(path, f'HTTP {response.status_code}', status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedPayloadError(path, f'invalid JSON body: {exc}', status_code=response.status_code)

    def _get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self._request('GET', path, params=params)

    # Finance ----------------------------------------------------------------

    def get_accounts(self) -> Any:
        return self._get(ACCOUNTS_PATH)

    def get_finance_transactions(self) -> Any:
        return self._get(TRANSACTIONS_PATH)

    def delete_transaction(self, transaction_id: str) -> Any:
        """Delete a native finance transaction.

        Raises:
            SyntheticTransactionError: For ``sales-``/``inventory-`` ids; no
                request is made.
        """
        if is_synthetic_id(transaction_id):
            raise SyntheticTransactionError(transaction_id)
        return self._request('DELETE', TRANSACTIONS_PATH, params={'id': transaction_id})

    # Sales ------------------------------------------------------------------

    def get_sales(self) -> Any:
        return self._get(SALES_PATH)

    def get_customers(self) -> Any:
        return self._get(CUSTOMERS_PATH)

    def get_products(self) -> Any:
        return self._get(PRODUCTS_PATH)

    # Inventory --------------------------------------------------------------

    def get_purchases(self) -> Any:
        return self._get(PURCHASES_PATH)

    def get_inventory_items(self) -> Any:
        return self._get(INVENTORY_ITEMS_PATH)

    def get_suppliers(self) -> Any:
        return self._get(SUPPLIERS_PATH)

    # Budgets ----------------------------------------------------------------

    def get_budget_tracking(self, budget_id: str) -> Any:
        return self._get(BUDGET_TRACK_PATH, params={'budgetId': budget_id})

    def get_budget_comparison(self, budget_id: str, period: str = 'month') -> Any:
        if period not in PERIODS:
            raise ValueError(f"Unsupported budget period '{period}'. Expected one of {', '.join(PERIODS)}.")
        return self._get(BUDGET_COMPARISON_PATH, params={'budgetId': budget_id, 'period': period})

    def get_budget_alerts(self, threshold: float = DEFAULT_ALERT_THRESHOLD) -> Any:
        return self._get(BUDGET_ALERTS_PATH, params={'threshold': int(threshold)})

    def create_alert_notification(self, payload: Dict[str, Any]) -> Any:
        return self._request('POST', BUDGET_ALERTS_PATH, json=payload)
