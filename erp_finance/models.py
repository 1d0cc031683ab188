"""Value types shared by the aggregation, reconciliation and budget modules.

All types are immutable.  Every refresh rebuilds them from the API payloads,
so nothing here is ever patched in place.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

INCOME = 'income'
EXPENSE = 'expense'

COMPLETED = 'completed'
PENDING = 'pending'

FINANCE = 'finance'
SALES = 'sales'
INVENTORY = 'inventory'

SOURCES = (FINANCE, SALES, INVENTORY)

# Synthetic id prefixes for transactions derived from other modules
SOURCE_PREFIXES: Dict[str, str] = {
    SALES: 'sales-',
    INVENTORY: 'inventory-',
}

ORIGINAL_RECORD_URLS: Dict[str, str] = {
    SALES: '/dashboard/sales/invoices/{id}',
    INVENTORY: '/dashboard/inventory/purchases/{id}',
}


def is_synthetic_id(transaction_id: str) -> bool:
    """Return True for ids of transactions derived from sales or inventory."""
    return any(str(transaction_id).startswith(prefix) for prefix in SOURCE_PREFIXES.values())


@dataclass(frozen=True)
class Transaction:
    id: str
    date: Optional[str]
    description: str
    amount: float
    type: str
    category: str
    account: str
    account_id: Optional[str] = None
    reference: Optional[str] = None
    status: str = PENDING
    source_type: str = FINANCE
    original_data: Optional[Mapping[str, Any]] = field(default=None, compare=False, repr=False)

    @property
    def is_synthetic(self) -> bool:
        return is_synthetic_id(self.id)

    @property
    def source_id(self) -> str:
        """Id of the originating sale/purchase (the transaction id for finance rows)."""
        prefix = SOURCE_PREFIXES.get(self.source_type)
        if prefix and self.id.startswith(prefix):
            return self.id[len(prefix):]
        return self.id

    @property
    def original_url(self) -> Optional[str]:
        template = ORIGINAL_RECORD_URLS.get(self.source_type)
        return template.format(id=self.source_id) if template else None

    def to_record(self) -> Dict[str, Any]:
        record = asdict(self)
        record.pop('original_data', None)
        return record


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    type: str
    balance: float
    initial_balance: float
    current_balance: float

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'Account':
        balance = float(record.get('balance') or 0.0)
        return cls(
            id=str(record.get('id', '')),
            name=str(record.get('name', '')),
            type=str(record.get('type', '')),
            balance=balance,
            initial_balance=balance,
            current_balance=balance,
        )

    @property
    def net_change(self) -> float:
        return self.current_balance - self.initial_balance


@dataclass(frozen=True)
class Stats:
    total_income: float = 0.0
    sales_income: float = 0.0
    regular_income: float = 0.0
    total_expenses: float = 0.0
    inventory_expenses: float = 0.0
    regular_expenses: float = 0.0
    balance: float = 0.0
    pending_income: float = 0.0
    pending_expenses: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class DashboardState:
    """Everything the finance view renders, rebuilt on each refresh."""

    accounts: Tuple[Account, ...] = ()
    transactions: Tuple[Transaction, ...] = ()
    stats: Stats = field(default_factory=Stats)
    warnings: Tuple[str, ...] = ()

    @property
    def has_accounts(self) -> bool:
        return bool(self.accounts)
