"""Derive current account balances from completed transactions.

Balances are never persisted here: ``current_balance`` is recomputed from
``initial_balance`` each time the transaction list changes.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .logging_setup import get_logger
from .models import COMPLETED, EXPENSE, INCOME, Account, Transaction

logger = get_logger(__name__)


def snapshot_accounts(records: Iterable[Mapping[str, Any]]) -> Tuple[Account, ...]:
    """Build accounts whose initial and current balance equal the persisted one."""
    return tuple(Account.from_record(record) for record in records)


def find_account(accounts: Sequence[Account], transaction: Transaction) -> Optional[int]:
    """Index of the account owning ``transaction``, or ``None``.

    Matches on the exact account name, or on the account id when the
    transaction was loaded with a populated account object.
    """
    for index, account in enumerate(accounts):
        if account.name == transaction.account:
            return index
        if transaction.account_id is not None and transaction.account_id == account.id:
            return index
    return None


def _signed_amount(transaction: Transaction) -> float:
    if transaction.type == INCOME:
        return transaction.amount
    if transaction.type == EXPENSE:
        return -transaction.amount
    return 0.0


def reconcile_balances(
    accounts: Sequence[Account],
    transactions: Iterable[Transaction],
) -> Tuple[Account, ...]:
    """Return accounts with ``current_balance`` replayed from completed transactions.

    Net movements are summed per account before being applied, so the order
    of ``transactions`` does not affect the result.  Transactions that match
    no account are skipped.
    """
    net: Dict[int, float] = {}
    for transaction in transactions:
        if transaction.status != COMPLETED:
            continue
        index = find_account(accounts, transaction)
        if index is None:
            logger.debug("No account named %r for transaction %s", transaction.account, transaction.id)
            continue
        net[index] = net.get(index, 0.0) + _signed_amount(transaction)

    return tuple(
        replace(account, current_balance=account.initial_balance + net.get(index, 0.0))
        for index, account in enumerate(accounts)
    )


def unmatched_transactions(
    accounts: Sequence[Account],
    transactions: Iterable[Transaction],
) -> List[Transaction]:
    """Completed transactions that no account claims."""
    return [
        t for t in transactions
        if t.status == COMPLETED and find_account(accounts, t) is None
    ]
