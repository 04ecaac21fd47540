"""
Main Orchestrator for Zenith Finance

This module ties together all the components and defines the
end-to-end account flows:
1. Sign up (user -> default profile seeded with categories and sources)
2. Log in (email + password -> user or nothing)
3. Demo log in (find or create the demo account, reseed its data)

DESIGN DECISION: The orchestrator only goes through the store's public API.
It never edits a snapshot directly, so every step is validated and audited
the same way a UI action would be.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from zenith.audit import AuditLogger, InMemoryAuditStorage
from zenith.config import AppSettings, get_settings
from zenith.models.entities import (
    PaymentMethod,
    Profile,
    TransactionDraft,
    TransactionType,
    User,
)
from zenith.services.storage import (
    JsonFileSnapshotStorage,
    SnapshotMirror,
    SnapshotStorageInterface,
)
from zenith.store import LedgerStore, simple_hash, verify_password
from zenith.store.ledger import IdFactory


DEMO_PASSWORD = "demo"
DEMO_PROFILE_NAME = "Demo Profile"
DEMO_CURRENCY_CODE = "USD"

# (type, amount, description, day of month, category or source name, payment method)
DEMO_SAMPLES = (
    (TransactionType.INCOME, "2500", "Monthly Salary", 1, "Salary", PaymentMethod.BANK),
    (TransactionType.INCOME, "300", "Website Design Project", 15, "Freelance", PaymentMethod.BANK),
    (TransactionType.EXPENSE, "1200", "Rent Payment", 2, "Housing", PaymentMethod.BANK),
    (TransactionType.EXPENSE, "150.75", "Weekly Groceries", 5, "Food", PaymentMethod.CREDIT),
    (TransactionType.EXPENSE, "5.25", "Morning Coffee", 6, "Food", PaymentMethod.CASH),
    (TransactionType.EXPENSE, "45.50", "Gas fill-up", 8, "Transport", PaymentMethod.CREDIT),
    (TransactionType.EXPENSE, "85.20", "Electricity Bill", 12, "Utilities", PaymentMethod.BANK),
    (TransactionType.EXPENSE, "78.99", "New Shoes", 18, "Shopping", PaymentMethod.CREDIT),
    (TransactionType.EXPENSE, "25.00", "Movie Night", 21, "Entertainment", PaymentMethod.CASH),
    (TransactionType.EXPENSE, "30.00", "Pharmacy", 22, "Health", PaymentMethod.CASH),
)


class AccountFlow:
    """
    Orchestrates signup, login and the demo account.

    Sessions are not tracked here: log_in only answers "who is this".
    """

    def __init__(
        self,
        store: LedgerStore,
        settings: Optional[AppSettings] = None,
    ):
        self._store = store
        self._settings = settings or get_settings().app

    @property
    def store(self) -> LedgerStore:
        return self._store

    def sign_up(self, email: str, password: str) -> tuple[User, Profile]:
        """
        Create an account with one default profile.

        The first account ever created becomes the admin.

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        _, user = self._store.create_user(email, simple_hash(password))
        _, profile = self._store.create_profile(
            user.id,
            self._settings.default_profile_name,
            self._settings.default_currency_code,
        )
        return user, profile

    def log_in(self, email: str, password: str) -> Optional[User]:
        """Return the user if the credentials match, else None."""
        user = self._store.find_user_by_email(email)
        if user is None or not verify_password(user, password):
            return None
        return user

    def demo_log_in(self, today: Optional[date] = None) -> tuple[User, Profile]:
        """
        Log in as the demo account, creating it on first use.

        The demo profile's transactions are replaced with a fixed sample
        set dated in the current month. Samples whose category or source
        has been deleted from the demo profile are left out.
        """
        today = today or datetime.now(timezone.utc).date()
        email = self._settings.demo_email

        user = self._store.find_user_by_email(email)
        if user is None:
            _, user = self._store.create_user(email, simple_hash(DEMO_PASSWORD))

        profile = next(
            (p for p in self._store.get_profiles_for_user(user.id) if p.name == DEMO_PROFILE_NAME),
            None,
        )
        if profile is None:
            _, profile = self._store.create_profile(user.id, DEMO_PROFILE_NAME, DEMO_CURRENCY_CODE)

        self._store.replace_transactions(profile.id, self._demo_drafts(profile.id, today))
        return user, profile

    def _demo_drafts(self, profile_id: str, today: date) -> list[TransactionDraft]:
        data = self._store.get_profile_data(profile_id)
        category_ids = {c.name: c.id for c in reversed(data.categories)}
        source_ids = {s.name: s.id for s in reversed(data.income_sources)}

        drafts = []
        for kind, amount, description, day, name, method in DEMO_SAMPLES:
            if kind == TransactionType.EXPENSE:
                reference = {"category_id": category_ids.get(name)}
            else:
                reference = {"source_id": source_ids.get(name)}
            if None in reference.values():
                continue
            drafts.append(TransactionDraft(
                profile_id=profile_id,
                type=kind,
                amount=Decimal(amount),
                description=description,
                date=datetime(today.year, today.month, day, tzinfo=timezone.utc),
                payment_method=method,
                **reference,
            ))
        return drafts


def create_app_components(
    storage: Optional[SnapshotStorageInterface] = None,
    id_factory: Optional[IdFactory] = None,
) -> tuple[AccountFlow, LedgerStore, SnapshotMirror]:
    """
    Factory function to create all application components.

    Args:
        storage: Snapshot storage backend. Defaults to JSON files
                under the configured data directory.
        id_factory: Identifier generator for the store.

    Returns:
        (account_flow, store, mirror)
    """
    settings = get_settings()
    audit_logger = AuditLogger(InMemoryAuditStorage())

    storage = storage or JsonFileSnapshotStorage()
    mirror = SnapshotMirror(storage, audit_logger)
    snapshot = mirror.load_or_initialize()

    store = LedgerStore(
        snapshot=snapshot,
        id_factory=id_factory,
        audit_logger=audit_logger,
        settings=settings.app,
    )
    mirror.attach(store)

    return AccountFlow(store, settings.app), store, mirror
