from erp_finance.budgets import (
    BudgetCategory,
    BudgetComparison,
    BudgetSummary,
    alerts_from_payload,
    budget_alerts,
    notification_payload,
)


def _budget(budget_id, name, total_budgeted, total_actual, items=()):
    return BudgetComparison(
        budget_id=budget_id,
        name=name,
        summary=BudgetSummary(total_budgeted=total_budgeted, total_actual=total_actual),
        categories=list(items),
    )


def test_alerts_for_budget_and_items_above_threshold():
    budget = _budget('b1', 'Operations', 1000, 950, items=[
        BudgetCategory(name='Travel', budgeted=200, actual=240, id='i1'),
        BudgetCategory(name='Rent', budgeted=800, actual=710, id='i2'),
    ])
    alerts = budget_alerts([budget], threshold=90)

    assert [a.id for a in alerts] == ['item-i1', 'budget-b1']
    travel, overall = alerts
    assert travel.severity == 'critical'
    assert travel.item_name == 'Travel'
    assert travel.message == 'Budget item "Travel" in "Operations" has reached 120.0% of its allocation'
    assert overall.severity == 'warning'
    assert overall.item_id is None
    assert overall.message == 'Budget "Operations" has reached 95.0% of its total allocation'


def test_threshold_is_inclusive_and_configurable():
    budget = _budget('b2', 'Marketing', 100, 80)
    assert budget_alerts([budget], threshold=90) == []
    alerts = budget_alerts([budget], threshold=80)
    assert len(alerts) == 1
    assert alerts[0].threshold == 80


def test_empty_budget_never_alerts():
    budget = _budget('b3', 'Empty', 0, 50, items=[BudgetCategory(name='Misc', budgeted=0, actual=50)])
    assert budget_alerts([budget]) == []


def test_alerts_sorted_critical_first_then_by_percent():
    budgets = [
        _budget('a', 'A', 100, 92),
        _budget('b', 'B', 100, 150),
        _budget('c', 'C', 100, 97),
        _budget('d', 'D', 100, 101),
    ]
    alerts = budget_alerts(budgets)
    assert [a.budget_id for a in alerts] == ['b', 'd', 'c', 'a']


def test_alerts_from_payload_and_notification():
    payload = [
        {
            'id': 'budget-x',
            'type': 'budget',
            'budgetId': 'x',
            'budgetName': 'X',
            'message': 'Budget "X" has reached 91.0% of its total allocation',
            'percentSpent': 91,
            'threshold': 90,
        },
        {
            'id': 'item-y1',
            'type': 'budget-item',
            'budgetId': 'y',
            'budgetName': 'Y',
            'itemId': 'y1',
            'itemName': 'Hosting',
            'message': 'over',
            'severity': 'critical',
            'percentSpent': 130,
        },
        'junk',
    ]
    alerts = alerts_from_payload(payload)
    assert [a.id for a in alerts] == ['item-y1', 'budget-x']
    assert alerts[1].severity == 'warning'
    assert alerts_from_payload({'error': 'nope'}) == []

    body = notification_payload(alerts[0])
    assert body == {
        'alertId': 'item-y1',
        'budgetId': 'y',
        'itemId': 'y1',
        'message': 'over',
        'severity': 'critical',
    }
