import pytest

from erp_finance.errors import MalformedPayloadError
from erp_finance.normalizers import (
    coerce_records,
    index_by_id,
    map_status,
    name_of,
    normalize_finance_transaction,
    purchase_to_transaction,
    sale_to_transaction,
)


def test_name_of_handles_objects_strings_and_missing():
    assert name_of({'id': 'c1', 'name': 'Rent'}, 'Other') == 'Rent'
    assert name_of('Utilities', 'Other') == 'Utilities'
    assert name_of(None, 'Other') == 'Other'
    assert name_of(42, 'Default') == 'Default'
    assert name_of({'id': 'a1'}, 'Default') == 'Default'


def test_map_status():
    assert map_status('paid') == 'completed'
    assert map_status('cancelled') == 'cancelled'
    assert map_status(None) == 'pending'
    assert map_status('') == 'pending'


def test_finance_transaction_flattens_nested_fields():
    txn = normalize_finance_transaction({
        'id': 't1',
        'date': '2024-03-01',
        'description': 'Office rent',
        'amount': '1200.50',
        'type': 'expense',
        'category': {'id': 'c1', 'name': 'Rent'},
        'account': {'id': 'a1', 'name': 'Checking'},
        'status': 'completed',
    })
    assert txn.category == 'Rent'
    assert txn.account == 'Checking'
    assert txn.account_id == 'a1'
    assert txn.amount == pytest.approx(1200.50)
    assert txn.source_type == 'finance'
    assert not txn.is_synthetic


def test_finance_transaction_defaults():
    txn = normalize_finance_transaction({'id': 't2', 'amount': 10, 'type': 'income', 'status': 'pending'})
    assert txn.category == 'Other'
    assert txn.account == 'Default'
    assert txn.account_id is None


def test_sale_scenario():
    txn = sale_to_transaction({
        'id': 's1',
        'total': 500,
        'status': 'paid',
        'items': [{'name': 'Widget', 'quantity': 2}],
    })
    assert txn.id == 'sales-s1'
    assert txn.amount == 500
    assert txn.type == 'income'
    assert txn.category == 'Sales Revenue'
    assert txn.status == 'completed'
    assert txn.description == 'Sale to Customer (2x Widget)'
    assert txn.account == 'Sales Account'
    assert txn.reference == 'INV-s1'
    assert txn.is_synthetic
    assert txn.source_id == 's1'
    assert txn.original_url == '/dashboard/sales/invoices/s1'


def test_sale_uses_lookups_for_customer_products_and_account():
    customers = index_by_id([{'id': 'cu1', 'name': 'Acme', 'preferredPaymentMethod': 'Bank Transfer'}])
    products = index_by_id([{'id': 'p1', 'name': 'Gadget'}, {'id': 'p2', 'name': 'Bolt'}])
    txn = sale_to_transaction(
        {
            'id': 'abcdefghijkl',
            'customerId': 'cu1',
            'total': 80,
            'items': [{'productId': 'p1', 'quantity': 1}, {'productId': 'p2', 'quantity': 10}],
        },
        customers,
        products,
    )
    assert txn.description == 'Sale to Acme (1x Gadget, 10x Bolt)'
    assert txn.account == 'Bank Transfer'
    assert txn.reference == 'INV-abcdefgh'
    assert txn.status == 'pending'


def test_sale_without_items_omits_item_list_and_prefers_payment_method():
    txn = sale_to_transaction({
        'id': 's2',
        'total': 20,
        'customer': {'name': 'Bob', 'preferredPaymentMethod': 'Card'},
        'paymentMethod': 'Cash',
        'invoiceNumber': 'INV-0007',
        'items': [],
    })
    assert txn.description == 'Sale to Bob'
    assert txn.account == 'Cash'
    assert txn.reference == 'INV-0007'


def test_purchase_scenario():
    txn = purchase_to_transaction({'id': 'p1', 'unitPrice': 10, 'quantity': 5, 'status': 'pending'})
    assert txn.id == 'inventory-p1'
    assert txn.amount == 50
    assert txn.type == 'expense'
    assert txn.category == 'Inventory Purchase'
    assert txn.status == 'pending'
    assert txn.description == 'Inventory: Inventory item (5 units @ 10)'
    assert txn.reference == 'PO-p1'


def test_purchase_prefers_total_cost_and_appends_supplier():
    items = index_by_id([{'id': 'i1', 'name': 'Steel rod'}])
    suppliers = index_by_id([{'id': 'su1', 'name': 'MetalCo'}])
    txn = purchase_to_transaction(
        {
            'id': 'purchase-0001',
            'itemId': 'i1',
            'supplierId': 'su1',
            'unitPrice': 2.5,
            'quantity': 4,
            'totalCost': 12,
            'status': 'paid',
            'purchaseOrder': 'PO-77',
        },
        items,
        suppliers,
    )
    assert txn.amount == 12
    assert txn.description == 'Inventory: Steel rod (4 units @ 2.5) from MetalCo'
    assert txn.reference == 'PO-77'
    assert txn.status == 'completed'


def test_purchase_ignores_unknown_supplier_placeholder_and_missing_amounts():
    txn = purchase_to_transaction({
        'id': 'p9',
        'itemName': 'Paper',
        'supplierName': 'Unknown Supplier',
        'reference': 'REF-1',
    })
    assert txn.description == 'Inventory: Paper'
    assert txn.amount == 0
    assert txn.reference == 'REF-1'


def test_coerce_records_guards_shape():
    assert coerce_records({'data': [{'id': 1}]}, 'sales', key='data') == [{'id': 1}]
    assert coerce_records([{'id': 2}, 'junk'], 'purchases') == [{'id': 2}]
    with pytest.raises(MalformedPayloadError):
        coerce_records({'error': 'boom'}, 'purchases')
    with pytest.raises(MalformedPayloadError):
        coerce_records([], 'sales', key='data')


def test_account_id_only_comes_from_populated_account_object():
    txn = normalize_finance_transaction({
        'id': 't3', 'amount': 5, 'type': 'expense', 'status': 'completed',
        'account': 'Petty cash', 'accountId': 'a9',
    })
    assert txn.account == 'Petty cash'
    assert txn.account_id is None


def test_sale_item_quantities_are_formatted_like_purchase_numbers():
    txn = sale_to_transaction({
        'id': 's3',
        'total': 30,
        'items': [{'name': 'Widget', 'quantity': 2.0}, {'name': 'Cable', 'quantity': 1.5}, {'name': 'Box'}],
    })
    assert txn.description == 'Sale to Customer (2x Widget, 1.5x Cable, 1x Box)'
