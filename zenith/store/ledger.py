"""
Ledger Store

The embedded relational store: all entity collections, held as one
immutable Snapshot and replaced wholesale by every mutation.

DESIGN DECISION: Functional updates.
Each mutation validates against the current snapshot, builds a new
snapshot with version + 1, swaps it in, then notifies subscribers.
Nothing is partially applied: a mutation that raises leaves the
current snapshot untouched.

DESIGN DECISION: The store never talks to storage.
Persistence subscribes to committed snapshots (see SnapshotMirror).

GUARANTEES:
- Deleting a user removes exactly their profiles and everything those
  profiles own; deleting a profile removes its transactions,
  categories and income sources
- New transactions reference an existing profile and a category or
  income source that belongs to that profile
- A currency cannot be deleted while a profile references it
- The only admin cannot be demoted (see zenith.store.access)

Deleting a category or income source does NOT touch transactions.
Those keep a dangling reference, shown as "Uncategorized".
"""

from collections.abc import Callable, Iterable, Sequence
from typing import Optional, TypeVar
from uuid import uuid4

from zenith.audit import AuditLogger
from zenith.config import AppSettings, get_settings
from zenith.models.audit import AuditEventBuilder, AuditEventType, AuditSeverity
from zenith.models.entities import (
    Category,
    Currency,
    IncomeSource,
    Profile,
    ProfileData,
    Role,
    Snapshot,
    Transaction,
    TransactionDraft,
    TransactionType,
    User,
)
from zenith.store.access import ensure_role_transition_allowed, is_last_admin
from zenith.store.defaults import (
    DEFAULT_CATEGORIES,
    DEFAULT_INCOME_SOURCES,
    initial_snapshot,
)
from zenith.store.errors import (
    CurrencyInUseError,
    DuplicateCurrencyError,
    DuplicateEmailError,
    LastAdminProtectedError,
    NotFoundError,
    ValidationFailure,
)
from zenith.store.passwords import simple_hash


IdFactory = Callable[[], str]
SnapshotListener = Callable[[Snapshot], None]

T = TypeVar("T")


def default_id_factory() -> str:
    return str(uuid4())


def _replace_by_id(items: tuple[T, ...], item: T) -> tuple[T, ...]:
    return tuple(item if existing.id == item.id else existing for existing in items)


class LedgerStore:
    """
    Owned, versioned store object.

    Pass one instance by reference to every caller. Read the current
    state from `snapshot`; every mutation returns the new snapshot
    (plus the created or updated entity, where there is one).
    """

    def __init__(
        self,
        snapshot: Optional[Snapshot] = None,
        id_factory: Optional[IdFactory] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        """
        Initialize the store.

        Args:
            snapshot: Starting state. Defaults to an empty store with
                     the default currencies.
            id_factory: Identifier generator. Inject a deterministic one
                       in tests.
            audit_logger: Where mutation events go. Local-only if None.
            settings: Application settings (reset password).
        """
        self._snapshot = snapshot if snapshot is not None else initial_snapshot()
        self._new_id = id_factory or default_id_factory
        self._audit = audit_logger or AuditLogger()
        self._settings = settings or get_settings().app
        self._listeners: list[SnapshotListener] = []

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def version(self) -> int:
        return self._snapshot.version

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit

    def subscribe(self, listener: SnapshotListener) -> None:
        """Call `listener` with every newly committed snapshot."""
        self._listeners.append(listener)

    def _commit(self, **changes) -> Snapshot:
        snapshot = self._snapshot.model_copy(
            update={**changes, "version": self._snapshot.version + 1}
        )
        self._snapshot = snapshot
        for listener in self._listeners:
            listener(snapshot)
        return snapshot

    # =========================================================================
    # LOOKUPS (pure reads)
    # =========================================================================

    def get_user(self, user_id: str) -> User:
        for user in self._snapshot.users:
            if user.id == user_id:
                return user
        raise NotFoundError(f"User not found: {user_id}")

    def find_user_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive email lookup."""
        wanted = email.strip().lower()
        for user in self._snapshot.users:
            if user.email.lower() == wanted:
                return user
        return None

    def get_profile(self, profile_id: str) -> Profile:
        for profile in self._snapshot.profiles:
            if profile.id == profile_id:
                return profile
        raise NotFoundError(f"Profile not found: {profile_id}")

    def get_profiles_for_user(self, user_id: str) -> list[Profile]:
        return [p for p in self._snapshot.profiles if p.user_id == user_id]

    def get_transaction(self, transaction_id: str) -> Transaction:
        for transaction in self._snapshot.transactions:
            if transaction.id == transaction_id:
                return transaction
        raise NotFoundError(f"Transaction not found: {transaction_id}")

    def get_currency(self, code: str) -> Currency:
        """Codes are matched case-insensitively."""
        wanted = code.strip().upper()
        for currency in self._snapshot.currencies:
            if currency.code == wanted:
                return currency
        raise NotFoundError(f"Currency not found: {code}")

    def get_profile_data(self, profile_id: str) -> ProfileData:
        """Everything owned by one profile. No mutation."""
        profile = self.get_profile(profile_id)
        snapshot = self._snapshot
        return ProfileData(
            profile=profile,
            transactions=tuple(t for t in snapshot.transactions if t.profile_id == profile_id),
            categories=tuple(c for c in snapshot.categories if c.profile_id == profile_id),
            income_sources=tuple(s for s in snapshot.income_sources if s.profile_id == profile_id),
        )

    # =========================================================================
    # USERS
    # =========================================================================

    def create_user(self, email: str, password_verifier: str) -> tuple[Snapshot, User]:
        """
        Create a user. The first user ever is an admin, the rest are users.

        Raises:
            DuplicateEmailError: If the email is taken (case-insensitive)
        """
        if self.find_user_by_email(email) is not None:
            raise DuplicateEmailError(f"User with this email already exists: {email}")

        role = Role.ADMIN if not self._snapshot.users else Role.USER
        user = User(
            id=self._new_id(),
            email=email,
            password_verifier=password_verifier,
            role=role,
        )
        snapshot = self._commit(users=self._snapshot.users + (user,))
        self._audit.log(AuditEventBuilder.user_created(user.id, role.value, snapshot.version))
        return snapshot, user

    def delete_user(self, user_id: str) -> Snapshot:
        """
        Delete a user and, transitively, everything they own.

        NOTE: This is NOT guarded by the last-admin rule. Deleting the
        only admin is allowed; it is logged as a warning.
        """
        user = self.get_user(user_id)
        current = self._snapshot
        was_last_admin = is_last_admin(current.users, user_id) and len(current.users) > 1

        owned = {p.id for p in current.profiles if p.user_id == user_id}
        transactions = tuple(t for t in current.transactions if t.profile_id not in owned)
        removed = {
            "profiles": len(owned),
            "transactions": len(current.transactions) - len(transactions),
        }

        snapshot = self._commit(
            users=tuple(u for u in current.users if u.id != user_id),
            profiles=tuple(p for p in current.profiles if p.user_id != user_id),
            transactions=transactions,
            categories=tuple(c for c in current.categories if c.profile_id not in owned),
            income_sources=tuple(s for s in current.income_sources if s.profile_id not in owned),
        )
        self._audit.log(AuditEventBuilder.user_deleted(user.id, removed, snapshot.version))
        if was_last_admin:
            self._audit.log(AuditEventBuilder.last_admin_deleted(
                user.id, len(snapshot.users), snapshot.version
            ))
        return snapshot

    def update_user_role(self, user_id: str, new_role: Role) -> bool:
        """
        Change a user's role, subject to the last-admin rule.

        Returns:
            False if the change was rejected (store unchanged), True otherwise

        Raises:
            NotFoundError: If the user does not exist
        """
        user = self.get_user(user_id)
        try:
            ensure_role_transition_allowed(self._snapshot.users, user, new_role)
        except LastAdminProtectedError as e:
            self._audit.log(AuditEventBuilder.role_change_rejected(user_id, str(e)))
            return False

        if user.role == new_role:
            return True

        updated = user.model_copy(update={"role": new_role})
        snapshot = self._commit(users=_replace_by_id(self._snapshot.users, updated))
        self._audit.log(AuditEventBuilder.role_changed(
            user_id, user.role.value, new_role.value, snapshot.version
        ))
        return True

    def reset_password(self, email: str) -> tuple[Snapshot, User]:
        """
        Reset a user's password to the configured default.

        Raises:
            NotFoundError: If no user has this email
        """
        user = self.find_user_by_email(email)
        if user is None:
            raise NotFoundError(f"No account found for email: {email}")

        updated = user.model_copy(
            update={"password_verifier": simple_hash(self._settings.reset_password)}
        )
        snapshot = self._commit(users=_replace_by_id(self._snapshot.users, updated))
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.PASSWORD_RESET, "user", user.id,
            "Password reset to default", snapshot.version,
        ))
        return snapshot, updated

    # =========================================================================
    # PROFILES
    # =========================================================================

    def _seed_for(self, profile_id: str) -> tuple[tuple[Category, ...], tuple[IncomeSource, ...]]:
        categories = tuple(
            Category(
                id=f"{profile_id}-{self._new_id()}",
                profile_id=profile_id,
                name=name,
                icon=icon,
                is_default=True,
            )
            for name, icon in DEFAULT_CATEGORIES
        )
        sources = tuple(
            IncomeSource(
                id=f"{profile_id}-{self._new_id()}",
                profile_id=profile_id,
                name=name,
                icon=icon,
                is_default=True,
            )
            for name, icon in DEFAULT_INCOME_SOURCES
        )
        return categories, sources

    def create_profile(
        self,
        user_id: str,
        name: str,
        currency_code: str,
    ) -> tuple[Snapshot, Profile]:
        """
        Create a profile seeded with the default categories and income sources.

        The currency code is expected to exist but is not enforced here;
        an unknown code is logged as a warning.

        Raises:
            NotFoundError: If the user does not exist
        """
        self.get_user(user_id)
        profile = Profile(
            id=self._new_id(),
            user_id=user_id,
            name=name,
            currency_code=currency_code,
        )
        categories, sources = self._seed_for(profile.id)
        currency_known = any(c.code == profile.currency_code for c in self._snapshot.currencies)

        snapshot = self._commit(
            profiles=self._snapshot.profiles + (profile,),
            categories=self._snapshot.categories + categories,
            income_sources=self._snapshot.income_sources + sources,
        )
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.PROFILE_CREATED, "profile", profile.id,
            f"Profile created: {profile.name}", snapshot.version,
            details={
                "user_id": user_id,
                "currency_code": profile.currency_code,
                "currency_known": currency_known,
            },
            severity=AuditSeverity.INFO if currency_known else AuditSeverity.WARNING,
        ))
        return snapshot, profile

    def update_profile(self, profile: Profile) -> tuple[Snapshot, Profile]:
        """
        Replace a profile's name or currency. The owner cannot change.

        Raises:
            NotFoundError: If the profile does not exist
        """
        existing = self.get_profile(profile.id)
        if existing.user_id != profile.user_id:
            raise ValidationFailure("A profile cannot be moved to another user")

        # model_copy skips validators; re-validate so the code is normalized
        profile = Profile.model_validate(profile.model_dump())
        snapshot = self._commit(profiles=_replace_by_id(self._snapshot.profiles, profile))
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.PROFILE_UPDATED, "profile", profile.id,
            f"Profile updated: {profile.name}", snapshot.version,
        ))
        return snapshot, profile

    def delete_profile(self, profile_id: str) -> Snapshot:
        """
        Delete a profile with its transactions, categories and income sources.

        The store has no notion of an "active" profile; callers that
        track one must pick another.
        """
        self.get_profile(profile_id)
        current = self._snapshot
        transactions = tuple(t for t in current.transactions if t.profile_id != profile_id)

        snapshot = self._commit(
            profiles=tuple(p for p in current.profiles if p.id != profile_id),
            transactions=transactions,
            categories=tuple(c for c in current.categories if c.profile_id != profile_id),
            income_sources=tuple(s for s in current.income_sources if s.profile_id != profile_id),
        )
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.PROFILE_DELETED, "profile", profile_id,
            "Profile deleted", snapshot.version,
            details={"transactions": len(current.transactions) - len(transactions)},
        ))
        return snapshot

    def restore_profile(self, user_id: str, backup: ProfileData) -> tuple[Snapshot, Profile]:
        """
        Re-create a backed-up profile under fresh identifiers.

        Category and source references are remapped to the new ids.
        References that were already dangling in the backup stay as they are.

        Raises:
            NotFoundError: If the user does not exist
        """
        self.get_user(user_id)
        profile = Profile(
            id=self._new_id(),
            user_id=user_id,
            name=backup.profile.name,
            currency_code=backup.profile.currency_code,
        )

        id_map: dict[str, str] = {}
        categories = []
        for category in backup.categories:
            new_id = f"{profile.id}-{self._new_id()}"
            id_map[category.id] = new_id
            categories.append(category.model_copy(update={"id": new_id, "profile_id": profile.id}))
        sources = []
        for source in backup.income_sources:
            new_id = f"{profile.id}-{self._new_id()}"
            id_map[source.id] = new_id
            sources.append(source.model_copy(update={"id": new_id, "profile_id": profile.id}))

        transactions = []
        for transaction in backup.transactions:
            update = {"id": self._new_id(), "profile_id": profile.id}
            if transaction.category_id is not None:
                update["category_id"] = id_map.get(transaction.category_id, transaction.category_id)
            if transaction.source_id is not None:
                update["source_id"] = id_map.get(transaction.source_id, transaction.source_id)
            transactions.append(transaction.model_copy(update=update))

        snapshot = self._commit(
            profiles=self._snapshot.profiles + (profile,),
            transactions=self._snapshot.transactions + tuple(transactions),
            categories=self._snapshot.categories + tuple(categories),
            income_sources=self._snapshot.income_sources + tuple(sources),
        )
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.PROFILE_RESTORED, "profile", profile.id,
            f"Profile restored from backup: {profile.name}", snapshot.version,
            details={
                "source_profile_id": backup.profile.id,
                "transactions": len(transactions),
            },
        ))
        return snapshot, profile

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def _check_references(self, draft: TransactionDraft) -> None:
        """The profile must exist and own the referenced category or source."""
        self.get_profile(draft.profile_id)
        if draft.type == TransactionType.EXPENSE:
            pool: Iterable = self._snapshot.categories
            label = "Category"
        else:
            pool = self._snapshot.income_sources
            label = "Income source"
        reference = draft.reference_id
        if not any(e.id == reference and e.profile_id == draft.profile_id for e in pool):
            raise NotFoundError(
                f"{label} {reference} not found in profile {draft.profile_id}"
            )

    def add_transaction(self, draft: TransactionDraft) -> tuple[Snapshot, Transaction]:
        """
        Add one transaction.

        Raises:
            NotFoundError: If the profile, category or source does not exist
        """
        snapshot, added = self.add_transactions([draft])
        return snapshot, added[0]

    def add_transactions(
        self,
        drafts: Sequence[TransactionDraft],
    ) -> tuple[Snapshot, list[Transaction]]:
        """
        Append a batch of transactions in one mutation.

        Every draft is checked before anything is committed. An empty
        batch commits nothing.
        """
        if not drafts:
            return self._snapshot, []

        for draft in drafts:
            self._check_references(draft)

        added = [Transaction.from_draft(draft, self._new_id()) for draft in drafts]
        snapshot = self._commit(transactions=self._snapshot.transactions + tuple(added))
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.TRANSACTIONS_ADDED, "transaction",
            added[0].id if len(added) == 1 else None,
            f"{len(added)} transaction(s) added", snapshot.version,
            details={"profile_ids": sorted({t.profile_id for t in added})},
        ))
        return snapshot, added

    def replace_transactions(
        self,
        profile_id: str,
        drafts: Sequence[TransactionDraft],
    ) -> tuple[Snapshot, list[Transaction]]:
        """Swap a profile's whole transaction set in one mutation."""
        self.get_profile(profile_id)
        for draft in drafts:
            if draft.profile_id != profile_id:
                raise ValidationFailure(
                    f"Transaction belongs to profile {draft.profile_id}, not {profile_id}"
                )
            self._check_references(draft)

        added = [Transaction.from_draft(draft, self._new_id()) for draft in drafts]
        kept = tuple(t for t in self._snapshot.transactions if t.profile_id != profile_id)
        snapshot = self._commit(transactions=kept + tuple(added))
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.TRANSACTIONS_REPLACED, "profile", profile_id,
            f"Transactions replaced with {len(added)} new ones", snapshot.version,
        ))
        return snapshot, added

    def update_transaction(self, transaction: Transaction) -> tuple[Snapshot, Transaction]:
        """
        Replace a transaction, matched by id.

        The category or source is only checked when it, the profile or the
        type changes, so a transaction with a dangling reference can still
        be edited.

        Raises:
            NotFoundError: If the transaction does not exist
        """
        existing = self.get_transaction(transaction.id)
        if (
            transaction.profile_id != existing.profile_id
            or transaction.type != existing.type
            or transaction.reference_id != existing.reference_id
        ):
            self._check_references(transaction)

        snapshot = self._commit(
            transactions=_replace_by_id(self._snapshot.transactions, transaction)
        )
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.TRANSACTION_UPDATED, "transaction", transaction.id,
            "Transaction updated", snapshot.version,
        ))
        return snapshot, transaction

    def delete_transaction(self, transaction_id: str) -> Snapshot:
        self.get_transaction(transaction_id)
        snapshot = self._commit(
            transactions=tuple(t for t in self._snapshot.transactions if t.id != transaction_id)
        )
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.TRANSACTION_DELETED, "transaction", transaction_id,
            "Transaction deleted", snapshot.version,
        ))
        return snapshot

    # =========================================================================
    # CATEGORIES AND INCOME SOURCES
    # =========================================================================

    def add_category(
        self,
        profile_id: str,
        name: str,
        icon: str = "tag",
    ) -> tuple[Snapshot, Category]:
        self.get_profile(profile_id)
        category = Category(id=self._new_id(), profile_id=profile_id, name=name, icon=icon)
        snapshot = self._commit(categories=self._snapshot.categories + (category,))
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.CATEGORY_ADDED, "category", category.id,
            f"Category added: {name}", snapshot.version,
        ))
        return snapshot, category

    def delete_category(self, category_id: str) -> Snapshot:
        """Delete a category. Transactions keep their (now dangling) reference."""
        if not any(c.id == category_id for c in self._snapshot.categories):
            raise NotFoundError(f"Category not found: {category_id}")
        snapshot = self._commit(
            categories=tuple(c for c in self._snapshot.categories if c.id != category_id)
        )
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.CATEGORY_DELETED, "category", category_id,
            "Category deleted", snapshot.version,
        ))
        return snapshot

    def add_income_source(
        self,
        profile_id: str,
        name: str,
        icon: str = "tag",
    ) -> tuple[Snapshot, IncomeSource]:
        self.get_profile(profile_id)
        source = IncomeSource(id=self._new_id(), profile_id=profile_id, name=name, icon=icon)
        snapshot = self._commit(income_sources=self._snapshot.income_sources + (source,))
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.INCOME_SOURCE_ADDED, "income_source", source.id,
            f"Income source added: {name}", snapshot.version,
        ))
        return snapshot, source

    def delete_income_source(self, source_id: str) -> Snapshot:
        """Delete an income source. Transactions keep their (now dangling) reference."""
        if not any(s.id == source_id for s in self._snapshot.income_sources):
            raise NotFoundError(f"Income source not found: {source_id}")
        snapshot = self._commit(
            income_sources=tuple(s for s in self._snapshot.income_sources if s.id != source_id)
        )
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.INCOME_SOURCE_DELETED, "income_source", source_id,
            "Income source deleted", snapshot.version,
        ))
        return snapshot

    # =========================================================================
    # CURRENCIES
    # =========================================================================

    def add_currency(self, currency: Currency) -> tuple[Snapshot, Currency]:
        """
        Raises:
            DuplicateCurrencyError: If the code already exists
        """
        if any(c.code == currency.code for c in self._snapshot.currencies):
            raise DuplicateCurrencyError(f"Currency already exists: {currency.code}")
        snapshot = self._commit(currencies=self._snapshot.currencies + (currency,))
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.CURRENCY_ADDED, "currency", currency.code,
            f"Currency added: {currency.name}", snapshot.version,
        ))
        return snapshot, currency

    def delete_currency(self, code: str) -> Snapshot:
        """
        Delete a currency that no profile uses.

        Raises:
            NotFoundError: If the code does not exist
            CurrencyInUseError: If any profile references the code
        """
        code = self.get_currency(code).code
        in_use = [p.id for p in self._snapshot.profiles if p.currency_code == code]
        if in_use:
            self._audit.log(AuditEventBuilder.currency_delete_rejected(code, in_use))
            raise CurrencyInUseError(code, in_use)

        snapshot = self._commit(
            currencies=tuple(c for c in self._snapshot.currencies if c.code != code)
        )
        self._audit.log(AuditEventBuilder.entity_changed(
            AuditEventType.CURRENCY_DELETED, "currency", code,
            f"Currency deleted: {code}", snapshot.version,
        ))
        return snapshot
