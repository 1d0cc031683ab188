"""Search, filter and paginate the merged transaction table."""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Tuple

import pandas as pd

from .config import DEFAULT_PAGE_SIZE

SEARCH_COLUMNS = ['description', 'category', 'account', 'reference']


def apply_filters(data: pd.DataFrame, filters: Optional[Dict]) -> pd.DataFrame:
    """Apply the transaction table filters.

    Recognised keys: ``type`` (``'all'``, ``'income'`` or ``'expense'``),
    ``search_text``, ``category`` and ``status`` (case-insensitive).
    """
    filtered_data = data.copy()
    if not filters or filtered_data.empty:
        return filtered_data

    tab = filters.get('type') or 'all'
    if tab != 'all':
        filtered_data = filtered_data[filtered_data['type'] == tab]

    search_text = (filters.get('search_text') or '').strip().lower()
    if search_text:
        search_cols = [col for col in SEARCH_COLUMNS if col in filtered_data.columns]
        combined_mask = pd.Series(False, index=filtered_data.index)
        for col in search_cols:
            combined_mask = combined_mask | (
                filtered_data[col].fillna('').astype(str).str.lower().str.contains(search_text, regex=False)
            )
        filtered_data = filtered_data[combined_mask]

    if filters.get('category'):
        filtered_data = filtered_data[filtered_data['category'] == filters['category']]

    if filters.get('status'):
        wanted = str(filters['status']).lower()
        filtered_data = filtered_data[filtered_data['status'].astype(str).str.lower() == wanted]

    return filtered_data


def sort_newest_first(data: pd.DataFrame) -> pd.DataFrame:
    """Sort by date, newest first; unparseable dates go last.

    Finance rows carry full ISO timestamps while sales and purchases may carry
    plain dates, so each value is parsed as ISO 8601 on its own.
    """
    if data.empty or 'date' not in data.columns:
        return data
    dates = pd.to_datetime(data['date'], errors='coerce', utc=True, format='ISO8601')
    order = dates.sort_values(ascending=False, na_position='last', kind='stable').index
    return data.loc[order]


def paginate(
    data: pd.DataFrame,
    page: int = 1,
    per_page: int = DEFAULT_PAGE_SIZE,
) -> Tuple[pd.DataFrame, int, int]:
    """Return the rows shown, the page actually used and the total page count.

    The total is at least 1.  Pages outside ``1..total_pages`` fall back to
    the first page, and the returned page number reflects that.
    """
    per_page = max(1, int(per_page))
    total_pages = max(1, math.ceil(len(data) / per_page))
    if page < 1 or page > total_pages:
        page = 1
    start = (page - 1) * per_page
    return data.iloc[start:start + per_page], page, total_pages


def filter_options(data: pd.DataFrame) -> Dict[str, List[str]]:
    """Distinct non-empty categories and statuses, in first-seen order."""
    options: Dict[str, List[str]] = {'categories': [], 'statuses': []}
    if data.empty:
        return options
    for key, column in (('categories', 'category'), ('statuses', 'status')):
        values = data[column].dropna().astype(str)
        options[key] = [value for value in values.unique().tolist() if value]
    return options
