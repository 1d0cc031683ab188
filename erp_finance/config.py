"""Configuration management for the ERP finance dashboard.

This module centralizes configuration values for the REST API client,
budget alerting and the dashboard, with environment variable overrides.
"""

from __future__ import annotations

import os

# Backend API
API_BASE_URL = os.getenv("ERP_FINANCE_API_URL", "http://localhost:3000").rstrip("/")
REQUEST_TIMEOUT = float(os.getenv("ERP_FINANCE_TIMEOUT", "10"))

# Budget alerting
DEFAULT_ALERT_THRESHOLD = float(os.getenv("ERP_FINANCE_ALERT_THRESHOLD", "90"))

# Transaction table
DEFAULT_PAGE_SIZE = int(os.getenv("ERP_FINANCE_PAGE_SIZE", "10"))


def get_api_base_url() -> str:
    """Get the backend base URL, re-reading the environment."""
    return os.getenv("ERP_FINANCE_API_URL", API_BASE_URL).rstrip("/")


def get_request_timeout() -> float:
    """Get the per-request timeout in seconds."""
    return float(os.getenv("ERP_FINANCE_TIMEOUT", REQUEST_TIMEOUT))
