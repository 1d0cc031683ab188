#!/usr/bin/env python3
"""Print merged finance stats, reconciled balances and skipped transactions."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pandas as pd

from erp_finance.api_client import FinanceApiClient
from erp_finance.errors import NoAccountsError
from erp_finance.logging_setup import configure_logging
from erp_finance.reconciler import unmatched_transactions
from erp_finance.service import DashboardService


def main(base_url: str | None = None, log_level: str | None = None) -> int:
    configure_logging(log_level)
    service = DashboardService(FinanceApiClient(base_url))
    try:
        state = service.refresh()
    except NoAccountsError as exc:
        print(f"No financial accounts: {exc}")
        return 1

    for message in state.warnings:
        print(f"WARNING: {message}")

    print("Stats:")
    for key, value in state.stats.as_dict().items():
        print(f"  {key:<20} {value:>14,.2f}")

    balances = pd.DataFrame([
        {'Account': a.name, 'Initial': a.initial_balance, 'Current': a.current_balance, 'Change': a.net_change}
        for a in state.accounts
    ])
    print("\nAccounts:")
    print(balances.to_string(index=False))

    skipped = unmatched_transactions(state.accounts, state.transactions)
    if skipped:
        print(f"\n{len(skipped)} completed transaction(s) match no account:")
        for transaction in skipped:
            print(f"  {transaction.id:<24} {transaction.account:<20} {transaction.amount:>12,.2f}")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show finance dashboard totals from the backend API.')
    parser.add_argument('--base-url', default=None, help='Backend base URL (defaults to ERP_FINANCE_API_URL)')
    parser.add_argument('--log-level', default=None, help='Logging level, e.g. DEBUG')
    args = parser.parse_args()
    raise SystemExit(main(base_url=args.base_url, log_level=args.log_level))
