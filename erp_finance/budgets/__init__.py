"""Budget comparison and alerting.

This package provides:
- Budget-versus-actual calculations and status classification
- Threshold alerts and notification payloads
"""

from .calculations import (
    EXPENSE_LIKE,
    OVER_BUDGET,
    ON_TRACK,
    PERIODS,
    REVENUE_LIKE,
    STATUS_LABELS,
    WARNING,
    BudgetCategory,
    BudgetComparison,
    BudgetSummary,
    classify_status,
    compare_budget,
    comparison_frame,
    comparison_from_payload,
    is_favorable,
    percent_used,
    status_label,
    summarize_budget,
    tracking_from_payload,
)
from .alerts import (
    CRITICAL,
    BudgetAlert,
    alerts_from_payload,
    budget_alerts,
    notification_payload,
    severity_for,
)

__all__ = [
    # Calculations
    'EXPENSE_LIKE',
    'OVER_BUDGET',
    'ON_TRACK',
    'PERIODS',
    'REVENUE_LIKE',
    'STATUS_LABELS',
    'WARNING',
    'BudgetCategory',
    'BudgetComparison',
    'BudgetSummary',
    'classify_status',
    'compare_budget',
    'comparison_frame',
    'comparison_from_payload',
    'is_favorable',
    'percent_used',
    'status_label',
    'summarize_budget',
    'tracking_from_payload',
    # Alerts
    'CRITICAL',
    'BudgetAlert',
    'alerts_from_payload',
    'budget_alerts',
    'notification_payload',
    'severity_for',
]
