"""Budget-versus-actual comparison.

This module computes variance, percent used and status per budget category
and for the budget as a whole, and builds the comparison tables shown by the
dashboard.  Attribution of spending to categories happens server-side; the
functions here only compare the figures they are given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

WARNING_PERCENT = 90.0
OVER_BUDGET_PERCENT = 100.0

ON_TRACK = 'on-track'
WARNING = 'warning'
OVER_BUDGET = 'over-budget'

STATUS_LABELS: Dict[str, str] = {
    ON_TRACK: 'On Track',
    WARNING: 'Near Limit',
    OVER_BUDGET: 'Over Budget',
}

# Variance polarity: for expenses overspending is bad, for revenue beating
# the target is good.
EXPENSE_LIKE = 'expense'
REVENUE_LIKE = 'revenue'

PERIODS = ('month', 'quarter', 'year')

COMPARISON_COLUMNS = [
    'Category', 'Budgeted', 'Actual', 'Variance', 'Percent Used', 'Status', 'Favorable',
]


def percent_used(actual: float, budgeted: float) -> float:
    """Return ``actual / budgeted * 100``, or ``0`` for an empty budget.

    Example:
        >>> percent_used(950, 1000)
        95.0
        >>> percent_used(50, 0)
        0.0
    """
    if not budgeted:
        return 0.0
    return float(actual) / float(budgeted) * 100.0


def classify_status(percent: float) -> str:
    if percent >= OVER_BUDGET_PERCENT:
        return OVER_BUDGET
    if percent >= WARNING_PERCENT:
        return WARNING
    return ON_TRACK


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, STATUS_LABELS[ON_TRACK])


def is_favorable(variance: float, polarity: str = EXPENSE_LIKE) -> bool:
    if polarity == REVENUE_LIKE:
        return variance >= 0
    return variance <= 0


@dataclass(frozen=True)
class BudgetCategory:
    name: str
    budgeted: float
    actual: float
    id: Optional[str] = None
    polarity: str = EXPENSE_LIKE

    @property
    def variance(self) -> float:
        """Positive when actual exceeds budget."""
        return self.actual - self.budgeted

    @property
    def percent_used(self) -> float:
        return percent_used(self.actual, self.budgeted)

    @property
    def status(self) -> str:
        return classify_status(self.percent_used)

    @property
    def label(self) -> str:
        return status_label(self.status)

    @property
    def is_favorable(self) -> bool:
        return is_favorable(self.variance, self.polarity)


@dataclass(frozen=True)
class BudgetSummary:
    total_budgeted: float
    total_actual: float

    @property
    def variance(self) -> float:
        return self.total_actual - self.total_budgeted

    @property
    def percent_used(self) -> float:
        return percent_used(self.total_actual, self.total_budgeted)

    @property
    def status(self) -> str:
        return classify_status(self.percent_used)

    @property
    def label(self) -> str:
        return status_label(self.status)


@dataclass(frozen=True)
class BudgetComparison:
    """A budget with its per-category comparison and aggregate summary."""

    budget_id: str
    name: str
    summary: BudgetSummary
    categories: List[BudgetCategory] = field(default_factory=list)
    period: Optional[str] = None


def compare_budget(
    budgeted: Mapping[str, float],
    actual: Mapping[str, float],
    polarity: Optional[Mapping[str, str]] = None,
) -> List[BudgetCategory]:
    """Compare budgeted amounts against actual figures per category.

    Categories present on only one side are compared against zero.  The
    result is sorted by variance, largest overspend first.

    Args:
        budgeted: Mapping of category name to budgeted amount
        actual: Mapping of category name to actual amount
        polarity: Optional mapping of category name to ``'expense'`` or
            ``'revenue'``; categories not listed are expense-like

    Returns:
        List of BudgetCategory values
    """
    polarity = polarity or {}
    names = list(dict.fromkeys(list(budgeted.keys()) + list(actual.keys())))
    categories = [
        BudgetCategory(
            name=name,
            budgeted=float(budgeted.get(name, 0.0) or 0.0),
            actual=float(actual.get(name, 0.0) or 0.0),
            polarity=polarity.get(name, EXPENSE_LIKE),
        )
        for name in names
    ]
    categories.sort(key=lambda c: c.variance, reverse=True)
    return categories


def summarize_budget(
    categories: Sequence[BudgetCategory],
    total_budgeted: Optional[float] = None,
) -> BudgetSummary:
    """Aggregate totals; ``total_budgeted`` overrides the sum of category budgets."""
    if total_budgeted is None:
        total_budgeted = sum(c.budgeted for c in categories)
    return BudgetSummary(
        total_budgeted=float(total_budgeted),
        total_actual=float(sum(c.actual for c in categories)),
    )


def comparison_frame(categories: Iterable[BudgetCategory]) -> pd.DataFrame:
    """Build the comparison table for display.

    DataFrame columns: Category, Budgeted, Actual, Variance, Percent Used,
    Status, Favorable
    """
    rows = [
        {
            'Category': c.name,
            'Budgeted': c.budgeted,
            'Actual': c.actual,
            'Polarity': c.polarity,
        }
        for c in categories
    ]
    if not rows:
        return pd.DataFrame(columns=COMPARISON_COLUMNS)

    df = pd.DataFrame(rows)
    df['Variance'] = df['Actual'] - df['Budgeted']
    budgeted = df['Budgeted'].replace(0, np.nan)
    df['Percent Used'] = (df['Actual'] / budgeted * 100.0).fillna(0.0)
    df['Status'] = np.select(
        [df['Percent Used'] >= OVER_BUDGET_PERCENT, df['Percent Used'] >= WARNING_PERCENT],
        [STATUS_LABELS[OVER_BUDGET], STATUS_LABELS[WARNING]],
        default=STATUS_LABELS[ON_TRACK],
    )
    df['Favorable'] = np.where(
        df['Polarity'] == REVENUE_LIKE,
        df['Variance'] >= 0,
        df['Variance'] <= 0,
    )
    return df[COMPARISON_COLUMNS]


# ---------------------------------------------------------------------------
# API payloads
# ---------------------------------------------------------------------------


def comparison_from_payload(
    payload: Mapping[str, Any],
    polarity: Optional[Mapping[str, str]] = None,
) -> BudgetComparison:
    """Build a comparison from a ``/api/finance/budgets/comparison`` response.

    Variance, percent used and status are recomputed locally from the
    budgeted and actual figures.
    """
    polarity = polarity or {}
    budget = payload.get('budget') or {}
    categories = []
    for entry in payload.get('categories') or []:
        name = str(entry.get('name') or 'Uncategorized')
        categories.append(BudgetCategory(
            name=name,
            budgeted=float(entry.get('budgeted') or 0.0),
            actual=float(entry.get('actual') or 0.0),
            id=str(entry['id']) if entry.get('id') is not None else None,
            polarity=polarity.get(name, EXPENSE_LIKE),
        ))
    categories.sort(key=lambda c: c.variance, reverse=True)

    summary_payload = payload.get('summary') or {}
    total_budgeted = summary_payload.get('totalBudgeted')
    summary = summarize_budget(
        categories,
        total_budgeted=float(total_budgeted) if total_budgeted is not None else None,
    )
    return BudgetComparison(
        budget_id=str(budget.get('id', '')),
        name=str(budget.get('name', '')),
        summary=summary,
        categories=categories,
        period=payload.get('period'),
    )


def tracking_from_payload(payload: Mapping[str, Any]) -> BudgetComparison:
    """Build a comparison from a ``/api/finance/budgets/track`` response.

    Items are ordered by percent used, highest first.
    """
    items = [
        BudgetCategory(
            name=str(item.get('name', '')),
            budgeted=float(item.get('amount') or 0.0),
            actual=float(item.get('spent') or 0.0),
            id=str(item['id']) if item.get('id') is not None else None,
        )
        for item in payload.get('items') or []
    ]
    items.sort(key=lambda c: c.percent_used, reverse=True)
    summary = BudgetSummary(
        total_budgeted=float(payload.get('totalBudget') or 0.0),
        total_actual=float(payload.get('totalSpent') or 0.0),
    )
    return BudgetComparison(
        budget_id=str(payload.get('id', '')),
        name=str(payload.get('name', '')),
        summary=summary,
        categories=items,
    )
