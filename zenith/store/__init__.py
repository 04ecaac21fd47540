"""
Ledger Store Package

The in-memory relational store, its access guard and seed data.
"""

from zenith.store.access import (
    admin_count,
    ensure_role_transition_allowed,
    is_last_admin,
)
from zenith.store.defaults import (
    DEFAULT_CATEGORIES,
    DEFAULT_CURRENCIES,
    DEFAULT_INCOME_SOURCES,
    initial_snapshot,
)
from zenith.store.errors import (
    CurrencyInUseError,
    DuplicateCurrencyError,
    DuplicateEmailError,
    DuplicateError,
    LastAdminProtectedError,
    LedgerError,
    NotFoundError,
    ValidationFailure,
)
from zenith.store.ledger import LedgerStore, default_id_factory
from zenith.store.passwords import simple_hash, verify_password

__all__ = [
    # Store
    "LedgerStore",
    "default_id_factory",
    # Access guard
    "admin_count",
    "ensure_role_transition_allowed",
    "is_last_admin",
    # Seed data
    "DEFAULT_CATEGORIES",
    "DEFAULT_CURRENCIES",
    "DEFAULT_INCOME_SOURCES",
    "initial_snapshot",
    # Exceptions
    "CurrencyInUseError",
    "DuplicateCurrencyError",
    "DuplicateEmailError",
    "DuplicateError",
    "LastAdminProtectedError",
    "LedgerError",
    "NotFoundError",
    "ValidationFailure",
    # Passwords
    "simple_hash",
    "verify_password",
]
