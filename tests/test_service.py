"""Tests for the DashboardService refresh cycle.

A ``FakeClient`` replaces the HTTP client; individual endpoints can be
made to fail to exercise the partial-failure paths.
"""

from __future__ import annotations

import pytest

from erp_finance.errors import NoAccountsError, SourceFetchError, SyntheticTransactionError
from erp_finance.service import DashboardService, pop_warnings


class FakeClient:
    """In-memory stand-in for FinanceApiClient."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.deleted = []
        self.notifications = []
        self.accounts = [
            {'id': 'a1', 'name': 'Checking', 'type': 'bank', 'balance': 1000},
            {'id': 'a2', 'name': 'Sales Account', 'type': 'bank', 'balance': 0},
        ]
        self.transactions = [
            {
                'id': 't1', 'date': '2024-01-05', 'description': 'Consulting', 'amount': 200,
                'type': 'income', 'category': {'name': 'Services'}, 'account': {'id': 'a1', 'name': 'Checking'},
                'status': 'completed',
            },
            {
                'id': 't2', 'date': '2024-01-06', 'description': 'Paper', 'amount': 40,
                'type': 'expense', 'category': 'Office', 'account': 'Checking', 'status': 'completed',
            },
        ]

    def _maybe_fail(self, name, payload):
        if name in self.failing:
            raise SourceFetchError(name, 'HTTP 500', status_code=500)
        return payload

    def get_accounts(self):
        return self._maybe_fail('accounts', self.accounts)

    def get_finance_transactions(self):
        return self._maybe_fail('transactions', self.transactions)

    def get_sales(self):
        return self._maybe_fail('sales', {'data': [
            {'id': 's1', 'customerId': 'c1', 'total': 500, 'status': 'paid',
             'items': [{'productId': 'p1', 'quantity': 2}]},
        ]})

    def get_customers(self):
        return self._maybe_fail('customers', [{'id': 'c1', 'name': 'Acme'}])

    def get_products(self):
        return self._maybe_fail('products', {'data': [{'id': 'p1', 'name': 'Widget'}]})

    def get_purchases(self):
        return self._maybe_fail('purchases', [
            {'id': 'p1', 'itemId': 'i1', 'unitPrice': 10, 'quantity': 5, 'status': 'pending'},
        ])

    def get_inventory_items(self):
        return self._maybe_fail('items', [{'id': 'i1', 'name': 'Bolts'}])

    def get_suppliers(self):
        return self._maybe_fail('suppliers', [])

    def delete_transaction(self, transaction_id):
        self.deleted.append(transaction_id)
        self.transactions = [t for t in self.transactions if t['id'] != transaction_id]
        return {'success': True}

    def get_budget_comparison(self, budget_id, period='month'):
        return {
            'budget': {'id': budget_id, 'name': 'Ops'},
            'categories': [{'name': 'Travel', 'budgeted': 100, 'actual': 95}],
            'summary': {'totalBudgeted': 100},
            'period': period,
        }

    def get_budget_tracking(self, budget_id):
        return {'id': budget_id, 'name': 'Ops', 'totalBudget': 100, 'totalSpent': 30, 'items': []}

    def get_budget_alerts(self, threshold=90):
        return [{'id': 'budget-b1', 'budgetId': 'b1', 'budgetName': 'Ops', 'percentSpent': 95}]

    def create_alert_notification(self, payload):
        self.notifications.append(payload)
        return {'success': True}


def test_refresh_merges_all_sources_and_reconciles():
    state = DashboardService(FakeClient()).refresh()

    ids = sorted(t.id for t in state.transactions)
    assert ids == ['inventory-p1', 'sales-s1', 't1', 't2']
    sale = next(t for t in state.transactions if t.id == 'sales-s1')
    assert sale.description == 'Sale to Acme (2x Widget)'
    purchase = next(t for t in state.transactions if t.id == 'inventory-p1')
    assert purchase.description == 'Inventory: Bolts (5 units @ 10)'

    assert state.stats.total_income == 700
    assert state.stats.sales_income == 500
    assert state.stats.total_expenses == 40
    assert state.stats.pending_expenses == 50
    assert state.stats.balance == 660

    checking, sales_account = state.accounts
    assert checking.initial_balance == 1000
    assert checking.current_balance == 1160
    assert sales_account.current_balance == 500
    assert state.warnings == ()


def test_failing_source_contributes_nothing_and_warns():
    state = DashboardService(FakeClient(failing={'sales'})).refresh()
    assert not any(t.id.startswith('sales-') for t in state.transactions)
    assert state.stats.sales_income == 0
    assert state.warnings == ('Failed to fetch sales data',)

    state, warnings = pop_warnings(state)
    assert warnings == ('Failed to fetch sales data',)
    assert state.warnings == ()


def test_failing_source_drops_previous_entries():
    client = FakeClient()
    service = DashboardService(client)
    state = service.refresh()
    client.failing.add('purchases')
    state = service.refresh_source(state, 'inventory')
    assert not any(t.id.startswith('inventory-') for t in state.transactions)
    assert sum(1 for t in state.transactions if t.id.startswith('sales-')) == 1
    assert state.warnings == ('Failed to fetch inventory data',)


def test_lookup_failures_only_degrade_descriptions():
    state = DashboardService(FakeClient(failing={'customers', 'items'})).refresh()
    sale = next(t for t in state.transactions if t.id == 'sales-s1')
    purchase = next(t for t in state.transactions if t.id == 'inventory-p1')
    assert sale.description == 'Sale to Customer (2x Widget)'
    assert purchase.description == 'Inventory: Inventory item (5 units @ 10)'
    assert state.warnings == ()


def test_refresh_source_is_idempotent():
    service = DashboardService(FakeClient())
    state = service.refresh()
    again = service.refresh_source(service.refresh_source(state, 'sales'), 'finance')
    assert len(again.transactions) == len(state.transactions)
    assert again.stats == state.stats


def test_refresh_source_rejects_unknown_source():
    service = DashboardService(FakeClient())
    state = service.load_accounts()
    with pytest.raises(ValueError):
        service.refresh_source(state, 'payroll')


def test_no_accounts():
    client = FakeClient()
    client.accounts = []
    with pytest.raises(NoAccountsError):
        DashboardService(client).refresh()
    with pytest.raises(NoAccountsError):
        DashboardService(FakeClient(failing={'accounts'})).load_accounts()


def test_delete_transaction():
    client = FakeClient()
    service = DashboardService(client)
    state = service.refresh()

    with pytest.raises(SyntheticTransactionError):
        service.delete_transaction(state, 'sales-s1')
    assert client.deleted == []

    state = service.delete_transaction(state, 't2')
    assert client.deleted == ['t2']
    assert 't2' not in {t.id for t in state.transactions}
    assert state.accounts[0].current_balance == 1200


def test_budget_operations():
    client = FakeClient()
    service = DashboardService(client)

    comparison = service.budget_comparison('b1', 'year')
    assert comparison.period == 'year'
    assert comparison.categories[0].status == 'warning'
    assert service.budget_tracking('b1').summary.percent_used == 30

    alerts = service.budget_alerts(90)
    assert alerts[0].severity == 'warning'
    service.notify_alert(alerts[0])
    assert client.notifications[0]['alertId'] == 'budget-b1'


def test_malformed_source_payload_counts_as_failed_fetch():
    client = FakeClient()
    client.get_sales = lambda: {'error': 'x'}
    state = DashboardService(client).refresh()
    assert not any(t.id.startswith('sales-') for t in state.transactions)
    assert state.stats.sales_income == 0
    assert state.warnings == ('Failed to fetch sales data',)
    assert sorted(t.id for t in state.transactions) == ['inventory-p1', 't1', 't2']
