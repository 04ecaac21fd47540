"""Shared fixtures. No network and no files outside tmp_path."""

import itertools
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from zenith.audit import AuditLogger, InMemoryAuditStorage
from zenith.config import AppSettings
from zenith.models.entities import PaymentMethod, TransactionDraft, TransactionType
from zenith.store import LedgerStore, simple_hash


@pytest.fixture
def id_factory():
    """Deterministic identifiers: id1, id2, ..."""
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


@pytest.fixture
def app_settings():
    return AppSettings(
        default_currency_code="USD",
        default_profile_name="Personal",
        reset_password="password123",
        demo_email="demo@example.com",
    )


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def store(id_factory, audit_logger, app_settings):
    return LedgerStore(
        id_factory=id_factory,
        audit_logger=audit_logger,
        settings=app_settings,
    )


@pytest.fixture
def account(store):
    """One user with one freshly seeded USD profile."""
    _, user = store.create_user("alice@example.com", simple_hash("secret"))
    _, profile = store.create_profile(user.id, "Personal", "USD")
    return user, profile


@pytest.fixture
def make_draft():
    """
    Build a draft. Passing category_id makes an expense,
    passing source_id makes income.
    """
    def _make(
        profile_id,
        category_id=None,
        source_id=None,
        amount="10.00",
        description="Test transaction",
        day=1,
        payment_method=PaymentMethod.CASH,
    ):
        return TransactionDraft(
            profile_id=profile_id,
            type=TransactionType.EXPENSE if category_id else TransactionType.INCOME,
            amount=Decimal(amount),
            description=description,
            date=datetime(2024, 3, day, tzinfo=timezone.utc),
            payment_method=payment_method,
            category_id=category_id,
            source_id=source_id,
        )
    return _make


def named(entities, name):
    """Id of the first entity called `name`."""
    return next(e.id for e in entities if e.name == name)


@pytest.fixture
def category_of(store):
    def _lookup(profile_id, name):
        return named(store.get_profile_data(profile_id).categories, name)
    return _lookup


@pytest.fixture
def source_of(store):
    def _lookup(profile_id, name):
        return named(store.get_profile_data(profile_id).income_sources, name)
    return _lookup
