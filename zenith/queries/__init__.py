"""Reporting package."""

from zenith.queries.reports import (
    UNCATEGORIZED,
    filter_transactions,
    monthly_totals,
    resolve_label,
    summarize,
)

__all__ = [
    "UNCATEGORIZED",
    "filter_transactions",
    "monthly_totals",
    "resolve_label",
    "summarize",
]
