"""Normalization of raw API records into :class:`~erp_finance.models.Transaction`.

The finance, sales and inventory endpoints return heterogeneous shapes: a
transaction's ``category`` or ``account`` may be a populated object or a bare
string, sales carry nested items and customers, purchases reference items and
suppliers by id.  Everything is converted to a single canonical
``Transaction`` here so the rest of the pipeline never inspects raw payloads.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from .errors import MalformedPayloadError
from .models import (
    COMPLETED,
    EXPENSE,
    FINANCE,
    INCOME,
    INVENTORY,
    PENDING,
    SALES,
    SOURCE_PREFIXES,
    Transaction,
)

SALES_CATEGORY = 'Sales Revenue'
SALES_ACCOUNT = 'Sales Account'
INVENTORY_CATEGORY = 'Inventory Purchase'
INVENTORY_ACCOUNT = 'Inventory Account'
UNKNOWN_SUPPLIER = 'Unknown Supplier'

DEFAULT_CATEGORY = 'Other'
DEFAULT_ACCOUNT = 'Default'

# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def name_of(value: Any, default: str) -> str:
    """Resolve a field that is either a populated object or a plain string."""
    if isinstance(value, Mapping):
        name = value.get('name')
        return str(name) if name else default
    if isinstance(value, str):
        return value
    return default


def id_of(value: Any) -> Optional[str]:
    if isinstance(value, Mapping) and value.get('id') is not None:
        return str(value['id'])
    return None


def map_status(raw: Any) -> str:
    """Map a sales/inventory status onto the finance vocabulary."""
    if raw == 'paid':
        return COMPLETED
    return str(raw) if raw else PENDING


def coerce_records(payload: Any, source: str, key: Optional[str] = None) -> List[Mapping[str, Any]]:
    """Return the list of records in ``payload`` or raise ``MalformedPayloadError``.

    ``key`` selects an envelope field, e.g. ``{"data": [...]}`` for sales.
    """
    records = payload
    if key is not None:
        records = payload.get(key) if isinstance(payload, Mapping) else None
    if not isinstance(records, list):
        raise MalformedPayloadError(source, 'Invalid data format')
    return [record for record in records if isinstance(record, Mapping)]


def index_by_id(records: Optional[Iterable[Mapping[str, Any]]]) -> Dict[str, Mapping[str, Any]]:
    if not records:
        return {}
    return {str(record['id']): record for record in records if record.get('id') is not None}


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == '':
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _lookup(record: Mapping[str, Any], embedded: str, ref: str, table: Mapping[str, Mapping[str, Any]]) -> Mapping[str, Any]:
    nested = record.get(embedded)
    if isinstance(nested, Mapping):
        return nested
    ref_id = record.get(ref)
    if ref_id is not None:
        return table.get(str(ref_id), {})
    return {}


# ---------------------------------------------------------------------------
# Finance transactions
# ---------------------------------------------------------------------------


def normalize_finance_transaction(raw: Mapping[str, Any]) -> Transaction:
    account = raw.get('account')
    return Transaction(
        id=str(raw.get('id', '')),
        date=raw.get('date'),
        description=str(raw.get('description') or ''),
        amount=_to_float(raw.get('amount')) or 0.0,
        type=str(raw.get('type') or ''),
        category=name_of(raw.get('category'), DEFAULT_CATEGORY),
        account=name_of(account, DEFAULT_ACCOUNT),
        account_id=id_of(account),
        reference=raw.get('reference'),
        status=str(raw.get('status') or ''),
        source_type=FINANCE,
        original_data=raw,
    )


# ---------------------------------------------------------------------------
# Sales -> income
# ---------------------------------------------------------------------------


def _item_label(item: Mapping[str, Any], products: Mapping[str, Mapping[str, Any]]) -> str:
    name = item.get('name') or item.get('productName')
    if not name:
        name = _lookup(item, 'product', 'productId', products).get('name') or 'Item'
    quantity = _to_float(item.get('quantity'))
    return f"{_format_number(quantity if quantity is not None else 1)}x {name}"


def sale_to_transaction(
    sale: Mapping[str, Any],
    customers: Optional[Mapping[str, Mapping[str, Any]]] = None,
    products: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> Transaction:
    """Convert a sale into a synthetic income transaction.

    ``customers`` and ``products`` are optional id-indexed lookup tables used
    only to enrich the description and account.

    Example:
        >>> sale = {'id': 's1', 'total': 500, 'status': 'paid',
        ...         'items': [{'name': 'Widget', 'quantity': 2}]}
        >>> sale_to_transaction(sale).description
        'Sale to Customer (2x Widget)'
    """
    customers = customers or {}
    products = products or {}
    sale_id = str(sale.get('id', ''))

    customer = _lookup(sale, 'customer', 'customerId', customers)
    customer_name = customer.get('name') or 'Customer'

    items = sale.get('items') or []
    labels = [_item_label(item, products) for item in items if isinstance(item, Mapping)]
    items_list = f" ({', '.join(labels)})" if labels else ''

    account = sale.get('paymentMethod') or customer.get('preferredPaymentMethod') or SALES_ACCOUNT

    return Transaction(
        id=SOURCE_PREFIXES[SALES] + sale_id,
        date=sale.get('date'),
        description=f"Sale to {customer_name}{items_list}",
        amount=_to_float(sale.get('total')) or 0.0,
        type=INCOME,
        category=SALES_CATEGORY,
        account=str(account),
        reference=sale.get('invoiceNumber') or f"INV-{sale_id[:8]}",
        status=map_status(sale.get('status')),
        source_type=SALES,
        original_data=sale,
    )


# ---------------------------------------------------------------------------
# Inventory purchases -> expense
# ---------------------------------------------------------------------------


def purchase_amount(purchase: Mapping[str, Any]) -> float:
    total_cost = _to_float(purchase.get('totalCost'))
    if total_cost is not None:
        return total_cost
    unit_price = _to_float(purchase.get('unitPrice'))
    quantity = _to_float(purchase.get('quantity'))
    if unit_price is not None and quantity is not None:
        return unit_price * quantity
    return 0.0


def purchase_to_transaction(
    purchase: Mapping[str, Any],
    items: Optional[Mapping[str, Mapping[str, Any]]] = None,
    suppliers: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> Transaction:
    """Convert an inventory purchase into a synthetic expense transaction."""
    items = items or {}
    suppliers = suppliers or {}
    purchase_id = str(purchase.get('id', ''))

    item_name = purchase.get('itemName') or _lookup(purchase, 'item', 'itemId', items).get('name') or 'Inventory item'
    description = f"Inventory: {item_name}"

    quantity = _to_float(purchase.get('quantity'))
    unit_price = _to_float(purchase.get('unitPrice'))
    if quantity is not None and unit_price is not None:
        description += f" ({_format_number(quantity)} units @ {_format_number(unit_price)})"

    supplier_name = purchase.get('supplierName') or _lookup(purchase, 'supplier', 'supplierId', suppliers).get('name')
    if supplier_name and supplier_name != UNKNOWN_SUPPLIER:
        description += f" from {supplier_name}"

    reference = purchase.get('purchaseOrder') or purchase.get('reference') or f"PO-{purchase_id[:8]}"

    return Transaction(
        id=SOURCE_PREFIXES[INVENTORY] + purchase_id,
        date=purchase.get('date'),
        description=description,
        amount=purchase_amount(purchase),
        type=EXPENSE,
        category=INVENTORY_CATEGORY,
        account=INVENTORY_ACCOUNT,
        reference=reference,
        status=map_status(purchase.get('status')),
        source_type=INVENTORY,
        original_data=purchase,
    )
