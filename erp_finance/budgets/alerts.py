"""Budget threshold alerts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..config import DEFAULT_ALERT_THRESHOLD
from .calculations import OVER_BUDGET_PERCENT, BudgetComparison

CRITICAL = 'critical'
WARNING = 'warning'

BUDGET_ALERT = 'budget'
ITEM_ALERT = 'budget-item'


@dataclass(frozen=True)
class BudgetAlert:
    id: str
    type: str
    budget_id: str
    budget_name: str
    message: str
    severity: str
    percent_spent: float
    threshold: float
    item_id: Optional[str] = None
    item_name: Optional[str] = None


def severity_for(percent: float) -> str:
    return CRITICAL if percent >= OVER_BUDGET_PERCENT else WARNING


def _sort_key(alert: BudgetAlert):
    return (0 if alert.severity == CRITICAL else 1, -alert.percent_spent)


def budget_alerts(
    budgets: Iterable[BudgetComparison],
    threshold: float = DEFAULT_ALERT_THRESHOLD,
) -> List[BudgetAlert]:
    """Alerts for every budget and budget item at or above ``threshold`` percent.

    Critical alerts come first, then by percent spent, highest first.
    """
    alerts: List[BudgetAlert] = []
    for budget in budgets:
        percent = budget.summary.percent_used
        if percent >= threshold:
            alerts.append(BudgetAlert(
                id=f"budget-{budget.budget_id}",
                type=BUDGET_ALERT,
                budget_id=budget.budget_id,
                budget_name=budget.name,
                message=f'Budget "{budget.name}" has reached {percent:.1f}% of its total allocation',
                severity=severity_for(percent),
                percent_spent=percent,
                threshold=threshold,
            ))
        for item in budget.categories:
            item_percent = item.percent_used
            if item_percent < threshold:
                continue
            alerts.append(BudgetAlert(
                id=f"item-{item.id if item.id is not None else item.name}",
                type=ITEM_ALERT,
                budget_id=budget.budget_id,
                budget_name=budget.name,
                item_id=item.id,
                item_name=item.name,
                message=(
                    f'Budget item "{item.name}" in "{budget.name}" has reached '
                    f'{item_percent:.1f}% of its allocation'
                ),
                severity=severity_for(item_percent),
                percent_spent=item_percent,
                threshold=threshold,
            ))
    alerts.sort(key=_sort_key)
    return alerts


def alerts_from_payload(payload: Any) -> List[BudgetAlert]:
    """Parse the ``GET /api/finance/budgets/alerts`` response."""
    if not isinstance(payload, list):
        return []
    alerts = []
    for entry in payload:
        if not isinstance(entry, Mapping):
            continue
        percent = float(entry.get('percentSpent') or 0.0)
        alerts.append(BudgetAlert(
            id=str(entry.get('id', '')),
            type=str(entry.get('type', BUDGET_ALERT)),
            budget_id=str(entry.get('budgetId', '')),
            budget_name=str(entry.get('budgetName', '')),
            item_id=entry.get('itemId'),
            item_name=entry.get('itemName'),
            message=str(entry.get('message', '')),
            severity=entry.get('severity') or severity_for(percent),
            percent_spent=percent,
            threshold=float(entry.get('threshold') or DEFAULT_ALERT_THRESHOLD),
        ))
    alerts.sort(key=_sort_key)
    return alerts


def notification_payload(alert: BudgetAlert) -> Dict[str, Any]:
    """Body for ``POST /api/finance/budgets/alerts``."""
    return {
        'alertId': alert.id,
        'budgetId': alert.budget_id,
        'itemId': alert.item_id,
        'message': alert.message,
        'severity': alert.severity,
    }
