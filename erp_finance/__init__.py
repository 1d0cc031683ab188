"""Top-level package for the ERP finance dashboard.

The primary modules are:

* ``aggregator`` – merges finance, sales and inventory transactions and
  computes summary statistics
* ``reconciler`` – derives current account balances from completed transactions
* ``budgets`` – budget-versus-actual comparison and threshold alerts
* ``api_client`` / ``service`` – the REST client and the refresh cycle built on it
* ``visualization`` – Plotly figures
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line:

```bash
streamlit run erp_finance/dashboard.py
```
"""

from . import aggregator  # noqa: F401  # re-exported for convenience
from . import budgets  # noqa: F401  # re-exported for convenience
from . import reconciler  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience
# Streamlit may not be installed in every environment (e.g. during unit
# testing), so the dashboard module is optional.
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore


__all__ = ["aggregator", "budgets", "reconciler", "visualization", "dashboard"]
