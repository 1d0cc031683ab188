"""Exception types raised by the API client and the dashboard service."""

from __future__ import annotations

from typing import Optional


class FinanceDashboardError(Exception):
    """Base class for errors raised by ``erp_finance``."""


class SourceFetchError(FinanceDashboardError):
    """A backend endpoint could not be read (transport error or non-2xx)."""

    def __init__(self, source: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message
        self.status_code = status_code


class MalformedPayloadError(SourceFetchError):
    """The endpoint answered but the body is not the expected JSON shape."""


class SyntheticTransactionError(FinanceDashboardError):
    """Sales and inventory transactions are read-only from the finance view."""

    def __init__(self, transaction_id: str) -> None:
        super().__init__("Cannot delete integrated transactions from this view")
        self.transaction_id = transaction_id


class NoAccountsError(FinanceDashboardError):
    """No financial accounts could be loaded, so there is nothing to reconcile."""
