"""Merge finance, sales and inventory transactions and compute summary stats.

Each source is fetched independently.  When one source is refreshed its
previous entries are dropped before the new ones are appended, so repeated
refreshes replace rather than accumulate.  Stats are always recomputed from
the full merged list.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import pandas as pd

from .models import (
    COMPLETED,
    EXPENSE,
    FINANCE,
    INCOME,
    INVENTORY,
    PENDING,
    SALES,
    SOURCE_PREFIXES,
    SOURCES,
    Stats,
    Transaction,
)

FRAME_COLUMNS = [
    'id', 'date', 'description', 'amount', 'type', 'category', 'account',
    'account_id', 'reference', 'status', 'source_type',
]


def belongs_to(transaction: Transaction, source: str) -> bool:
    """True when ``transaction`` was produced by ``source``.

    Sales and inventory entries are recognised by their id prefix; every
    other entry is a native finance transaction.
    """
    if source == FINANCE:
        return not transaction.is_synthetic
    return transaction.id.startswith(SOURCE_PREFIXES[source])


def merge_source(
    existing: Iterable[Transaction],
    source: str,
    incoming: Iterable[Transaction],
) -> Tuple[Transaction, ...]:
    """Replace the entries of ``source`` in ``existing`` with ``incoming``."""
    if source not in SOURCES:
        raise ValueError(f"Unknown transaction source '{source}'")
    kept = [t for t in existing if not belongs_to(t, source)]
    return tuple(kept) + tuple(incoming)


def merge_sources(
    finance: Sequence[Transaction] = (),
    sales: Sequence[Transaction] = (),
    inventory: Sequence[Transaction] = (),
) -> Tuple[Transaction, ...]:
    merged: Tuple[Transaction, ...] = ()
    for source, batch in ((FINANCE, finance), (SALES, sales), (INVENTORY, inventory)):
        merged = merge_source(merged, source, batch)
    return merged


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Tabular view of the merged transactions (one row per transaction)."""
    records: List[dict] = [t.to_record() for t in transactions]
    if not records:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    frame = pd.DataFrame.from_records(records, columns=FRAME_COLUMNS)
    frame['amount'] = pd.to_numeric(frame['amount'], errors='coerce').fillna(0.0)
    return frame


def compute_stats(transactions: Iterable[Transaction]) -> Stats:
    """Summarise completed and pending totals.

    Only completed transactions count toward ``balance``; pending totals are
    informational.
    """
    df = transactions_frame(transactions)
    if df.empty:
        return Stats()

    completed = df[df['status'] == COMPLETED]
    pending = df[df['status'] == PENDING]

    income = completed[completed['type'] == INCOME]
    expenses = completed[completed['type'] == EXPENSE]

    total_income = float(income['amount'].sum())
    sales_income = float(income.loc[income['source_type'] == SALES, 'amount'].sum())
    total_expenses = float(expenses['amount'].sum())
    inventory_expenses = float(expenses.loc[expenses['source_type'] == INVENTORY, 'amount'].sum())

    return Stats(
        total_income=total_income,
        sales_income=sales_income,
        regular_income=float(income.loc[income['source_type'] != SALES, 'amount'].sum()),
        total_expenses=total_expenses,
        inventory_expenses=inventory_expenses,
        regular_expenses=float(expenses.loc[expenses['source_type'] != INVENTORY, 'amount'].sum()),
        balance=total_income - total_expenses,
        pending_income=float(pending.loc[pending['type'] == INCOME, 'amount'].sum()),
        pending_expenses=float(pending.loc[pending['type'] == EXPENSE, 'amount'].sum()),
    )
