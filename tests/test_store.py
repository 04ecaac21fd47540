"""Tests for the ledger store: users, profiles, transactions, cascades."""

import pytest
from decimal import Decimal

from zenith.models.audit import AuditEventType, AuditSeverity
from zenith.models.entities import Currency, ProfileData, Role, TransactionType
from zenith.store import (
    DEFAULT_CATEGORIES,
    DEFAULT_CURRENCIES,
    DEFAULT_INCOME_SOURCES,
    CurrencyInUseError,
    DuplicateCurrencyError,
    DuplicateEmailError,
    LedgerStore,
    NotFoundError,
    ValidationFailure,
    simple_hash,
)


class TestInitialState:
    """Tests for a store that has never been used."""

    def test_default_currencies(self):
        """Test that a fresh store has the default currencies and nothing else."""
        store = LedgerStore()
        assert store.snapshot.currencies == DEFAULT_CURRENCIES
        assert store.snapshot.users == ()
        assert store.version == 0

    def test_subscribers_see_every_commit(self, store):
        """Test that listeners get each new snapshot in order."""
        seen = []
        store.subscribe(lambda snapshot: seen.append(snapshot.version))

        _, user = store.create_user("a@example.com", simple_hash("x"))
        store.create_profile(user.id, "Personal", "USD")

        assert seen == [1, 2]


class TestUsers:
    """Tests for user management."""

    def test_first_user_is_admin(self, store):
        """Test that the first user ever gets the admin role."""
        _, first = store.create_user("first@example.com", simple_hash("x"))
        _, second = store.create_user("second@example.com", simple_hash("x"))
        assert first.role == Role.ADMIN
        assert second.role == Role.USER

    def test_duplicate_email_is_case_insensitive(self, store):
        """Test that emails differing only in case collide."""
        store.create_user("Alice@Example.com", simple_hash("x"))
        version = store.version

        with pytest.raises(DuplicateEmailError):
            store.create_user("alice@example.com", simple_hash("y"))
        assert store.version == version
        assert len(store.snapshot.users) == 1

    def test_find_user_by_email(self, store):
        """Test case-insensitive lookup."""
        _, user = store.create_user("Alice@Example.com", simple_hash("x"))
        assert store.find_user_by_email("ALICE@example.com") == user
        assert store.find_user_by_email("bob@example.com") is None

    def test_get_unknown_user(self, store):
        """Test that a missing user id raises."""
        with pytest.raises(NotFoundError):
            store.get_user("missing")

    def test_reset_password(self, store):
        """Test that a reset sets the configured default password."""
        _, user = store.create_user("a@example.com", simple_hash("forgotten"))
        _, updated = store.reset_password("A@example.com")
        assert updated.id == user.id
        assert updated.password_verifier == simple_hash("password123")
        assert store.get_user(user.id).password_verifier == simple_hash("password123")

    def test_reset_password_unknown_email(self, store):
        """Test that resetting an unknown email raises and commits nothing."""
        with pytest.raises(NotFoundError):
            store.reset_password("nobody@example.com")
        assert store.version == 0


class TestProfiles:
    """Tests for profile creation, seeding and deletion."""

    def test_profile_is_seeded(self, store, account):
        """Test that a new profile gets its own default categories and sources."""
        _, profile = account
        data = store.get_profile_data(profile.id)

        assert [c.name for c in data.categories] == [name for name, _ in DEFAULT_CATEGORIES]
        assert [s.name for s in data.income_sources] == [name for name, _ in DEFAULT_INCOME_SOURCES]
        assert all(c.is_default for c in data.categories)
        assert all(s.profile_id == profile.id for s in data.income_sources)

    def test_seeded_ids_are_distinct_across_profiles(self, store, account):
        """Test that two profiles never share category or source ids."""
        user, first = account
        _, second = store.create_profile(user.id, "Business", "EUR")

        first_data = store.get_profile_data(first.id)
        second_data = store.get_profile_data(second.id)
        first_ids = {e.id for e in first_data.categories + first_data.income_sources}
        second_ids = {e.id for e in second_data.categories + second_data.income_sources}

        assert len(first_ids) == len(DEFAULT_CATEGORIES) + len(DEFAULT_INCOME_SOURCES)
        assert len(second_ids) == len(first_ids)
        assert first_ids.isdisjoint(second_ids)

    def test_create_profile_unknown_user(self, store):
        """Test that a profile needs an existing owner."""
        with pytest.raises(NotFoundError):
            store.create_profile("missing", "Personal", "USD")

    def test_unknown_currency_is_logged(self, store, audit_storage):
        """Test that an unknown currency code is accepted with a warning."""
        _, user = store.create_user("a@example.com", simple_hash("x"))
        _, profile = store.create_profile(user.id, "Crypto", "BTC")

        assert profile.currency_code == "BTC"
        events = audit_storage.get_recent_events(event_type=AuditEventType.PROFILE_CREATED)
        assert events[0].severity == AuditSeverity.WARNING

    def test_update_profile(self, store, account):
        """Test renaming a profile."""
        _, profile = account
        store.update_profile(profile.model_copy(update={"name": "Household"}))
        assert store.get_profile(profile.id).name == "Household"

    def test_update_profile_cannot_change_owner(self, store, account):
        """Test that a profile cannot be moved to another user."""
        _, profile = account
        _, other = store.create_user("b@example.com", simple_hash("x"))
        with pytest.raises(ValidationFailure):
            store.update_profile(profile.model_copy(update={"user_id": other.id}))

    def test_delete_profile_cascades(self, store, account, make_draft, category_of):
        """Test that a profile's transactions, categories and sources go with it."""
        user, profile = account
        _, other = store.create_profile(user.id, "Business", "USD")
        store.add_transaction(make_draft(profile.id, category_id=category_of(profile.id, "Food")))
        store.add_transaction(make_draft(other.id, category_id=category_of(other.id, "Food")))

        store.delete_profile(profile.id)
        snapshot = store.snapshot

        assert [p.id for p in snapshot.profiles] == [other.id]
        assert all(t.profile_id == other.id for t in snapshot.transactions)
        assert all(c.profile_id == other.id for c in snapshot.categories)
        assert all(s.profile_id == other.id for s in snapshot.income_sources)
        assert len(snapshot.transactions) == 1


class TestCascade:
    """Tests for deleting users."""

    def test_delete_user_removes_only_their_data(self, store, make_draft, category_of, source_of):
        """Test that deleting one user leaves another user's books untouched."""
        _, alice = store.create_user("alice@example.com", simple_hash("x"))
        _, alice_profile = store.create_profile(alice.id, "Personal", "USD")
        _, bob = store.create_user("bob@example.com", simple_hash("x"))
        _, bob_profile = store.create_profile(bob.id, "Personal", "EUR")

        food = category_of(alice_profile.id, "Food")
        store.add_transactions([
            make_draft(alice_profile.id, category_id=food, day=1),
            make_draft(alice_profile.id, category_id=food, day=2),
            make_draft(alice_profile.id, source_id=source_of(alice_profile.id, "Salary"), day=3),
        ])
        store.add_transactions([
            make_draft(bob_profile.id, category_id=category_of(bob_profile.id, "Housing")),
            make_draft(bob_profile.id, source_id=source_of(bob_profile.id, "Gifts")),
        ])
        bob_before = store.get_profile_data(bob_profile.id)

        store.delete_user(alice.id)
        snapshot = store.snapshot

        assert [u.id for u in snapshot.users] == [bob.id]
        assert [p.id for p in snapshot.profiles] == [bob_profile.id]
        assert store.get_profile_data(bob_profile.id) == bob_before
        assert len(snapshot.transactions) == 2
        assert len(snapshot.categories) == len(DEFAULT_CATEGORIES)
        assert len(snapshot.income_sources) == len(DEFAULT_INCOME_SOURCES)

    def test_delete_unknown_user(self, store):
        """Test that deleting a missing user raises."""
        with pytest.raises(NotFoundError):
            store.delete_user("missing")


class TestTransactions:
    """Tests for adding, editing and removing transactions."""

    def test_add_transaction(self, store, account, make_draft, category_of):
        """Test adding one expense."""
        _, profile = account
        version = store.version
        draft = make_draft(profile.id, category_id=category_of(profile.id, "Food"), amount="5.25")

        snapshot, transaction = store.add_transaction(draft)

        assert snapshot.version == version + 1
        assert transaction.id
        assert transaction.amount == Decimal("5.25")
        assert store.get_transaction(transaction.id) == transaction

    def test_category_from_another_profile_is_rejected(self, store, account, make_draft, category_of):
        """Test that a transaction cannot point at another profile's category."""
        user, profile = account
        _, other = store.create_profile(user.id, "Business", "USD")
        before = store.snapshot

        with pytest.raises(NotFoundError):
            store.add_transaction(make_draft(profile.id, category_id=category_of(other.id, "Food")))
        assert store.snapshot is before

    def test_unknown_profile_is_rejected(self, store, make_draft):
        """Test that a transaction needs an existing profile."""
        with pytest.raises(NotFoundError):
            store.add_transaction(make_draft("missing", category_id="c1"))

    def test_batch_is_one_commit(self, store, account, make_draft, category_of):
        """Test that a batch bumps the version once."""
        _, profile = account
        food = category_of(profile.id, "Food")
        version = store.version

        _, added = store.add_transactions([
            make_draft(profile.id, category_id=food, day=d) for d in (1, 2, 3)
        ])

        assert len(added) == 3
        assert len({t.id for t in added}) == 3
        assert store.version == version + 1

    def test_batch_with_bad_draft_commits_nothing(self, store, account, make_draft, category_of):
        """Test that one bad reference rejects the whole batch."""
        _, profile = account
        before = store.snapshot
        with pytest.raises(NotFoundError):
            store.add_transactions([
                make_draft(profile.id, category_id=category_of(profile.id, "Food")),
                make_draft(profile.id, category_id="missing"),
            ])
        assert store.snapshot is before

    def test_empty_batch_is_noop(self, store, account):
        """Test that an empty batch does not commit."""
        version = store.version
        snapshot, added = store.add_transactions([])
        assert added == []
        assert snapshot.version == version

    def test_update_transaction(self, store, account, make_draft, category_of):
        """Test editing a transaction in place."""
        _, profile = account
        _, transaction = store.add_transaction(
            make_draft(profile.id, category_id=category_of(profile.id, "Food"))
        )
        store.update_transaction(transaction.model_copy(update={"amount": Decimal("99.99")}))
        assert store.get_transaction(transaction.id).amount == Decimal("99.99")

    def test_update_type_change_rechecks_reference(self, store, account, make_draft, category_of):
        """Test that turning an expense into income keeps a category id out."""
        _, profile = account
        food = category_of(profile.id, "Food")
        _, transaction = store.add_transaction(make_draft(profile.id, category_id=food))
        before = store.snapshot

        with pytest.raises(NotFoundError, match="Income source"):
            store.update_transaction(transaction.model_copy(update={
                "type": TransactionType.INCOME,
                "category_id": None,
                "source_id": food,
            }))

        assert store.snapshot is before
        assert store.get_transaction(transaction.id).type == TransactionType.EXPENSE

    def test_update_type_change_with_valid_source(self, store, account, make_draft, category_of, source_of):
        """Test that a type change is accepted when the new reference exists."""
        _, profile = account
        _, transaction = store.add_transaction(
            make_draft(profile.id, category_id=category_of(profile.id, "Food"))
        )
        store.update_transaction(transaction.model_copy(update={
            "type": TransactionType.INCOME,
            "category_id": None,
            "source_id": source_of(profile.id, "Salary"),
        }))
        assert store.get_transaction(transaction.id).type == TransactionType.INCOME

    def test_update_unknown_transaction(self, store, account, make_draft, category_of):
        """Test that updating a transaction that does not exist raises."""
        _, profile = account
        _, transaction = store.add_transaction(
            make_draft(profile.id, category_id=category_of(profile.id, "Food"))
        )
        with pytest.raises(NotFoundError):
            store.update_transaction(transaction.model_copy(update={"id": "missing"}))

    def test_delete_transaction(self, store, account, make_draft, category_of):
        """Test removing a transaction."""
        _, profile = account
        _, transaction = store.add_transaction(
            make_draft(profile.id, category_id=category_of(profile.id, "Food"))
        )
        store.delete_transaction(transaction.id)
        assert store.snapshot.transactions == ()

    def test_replace_transactions(self, store, account, make_draft, category_of):
        """Test swapping a profile's transactions wholesale."""
        _, profile = account
        food = category_of(profile.id, "Food")
        store.add_transactions([make_draft(profile.id, category_id=food, description="old")])

        _, added = store.replace_transactions(profile.id, [
            make_draft(profile.id, category_id=food, description="new 1"),
            make_draft(profile.id, category_id=food, description="new 2"),
        ])

        descriptions = [t.description for t in store.get_profile_data(profile.id).transactions]
        assert descriptions == ["new 1", "new 2"]
        assert len(added) == 2

    def test_replace_rejects_foreign_drafts(self, store, account, make_draft, category_of):
        """Test that replace only accepts drafts for the target profile."""
        user, profile = account
        _, other = store.create_profile(user.id, "Business", "USD")
        with pytest.raises(ValidationFailure):
            store.replace_transactions(profile.id, [
                make_draft(other.id, category_id=category_of(other.id, "Food")),
            ])


class TestCategories:
    """Tests for categories and income sources."""

    def test_add_category(self, store, account):
        """Test adding a custom category."""
        _, profile = account
        _, category = store.add_category(profile.id, "Pets", icon="paw")
        assert category.is_default is False
        assert category in store.get_profile_data(profile.id).categories

    def test_delete_category_leaves_dangling_reference(self, store, account, make_draft, category_of):
        """Test that transactions survive the deletion of their category."""
        _, profile = account
        food = category_of(profile.id, "Food")
        _, transaction = store.add_transaction(make_draft(profile.id, category_id=food))

        store.delete_category(food)

        assert store.get_transaction(transaction.id).category_id == food
        assert food not in {c.id for c in store.snapshot.categories}

    def test_delete_unknown_category(self, store):
        """Test that deleting a missing category raises."""
        with pytest.raises(NotFoundError):
            store.delete_category("missing")

    def test_add_and_delete_income_source(self, store, account):
        """Test the income source lifecycle."""
        _, profile = account
        _, source = store.add_income_source(profile.id, "Royalties")
        store.delete_income_source(source.id)
        assert source.id not in {s.id for s in store.snapshot.income_sources}


class TestCurrencies:
    """Tests for the shared currency table."""

    def test_add_currency(self, store):
        """Test adding a new currency."""
        store.add_currency(Currency(code="CHF", symbol="Fr", name="Swiss Franc"))
        assert store.get_currency("CHF").name == "Swiss Franc"

    def test_duplicate_currency(self, store):
        """Test that codes are unique regardless of case."""
        with pytest.raises(DuplicateCurrencyError):
            store.add_currency(Currency(code="usd", symbol="$", name="Dollar again"))

    def test_delete_unused_currency(self, store):
        """Test deleting a currency no profile uses."""
        store.delete_currency("JPY")
        assert "JPY" not in {c.code for c in store.snapshot.currencies}

    def test_delete_currency_in_use(self, store, account, audit_storage):
        """Test that a referenced currency cannot be deleted."""
        _, profile = account
        before = store.snapshot

        with pytest.raises(CurrencyInUseError) as exc_info:
            store.delete_currency("USD")

        assert exc_info.value.profile_ids == [profile.id]
        assert store.snapshot is before
        assert audit_storage.get_recent_events(event_type=AuditEventType.CURRENCY_DELETE_REJECTED)

    def test_currency_codes_are_upper_cased(self, store):
        """Test that a lower-case code is stored and found as upper-case."""
        store.add_currency(Currency(code="chf", symbol="Fr", name="Swiss Franc"))
        assert "CHF" in {c.code for c in store.snapshot.currencies}
        assert store.get_currency("chf").code == "CHF"
        with pytest.raises(DuplicateCurrencyError):
            store.add_currency(Currency(code="CHF", symbol="Fr", name="Franc again"))

    def test_delete_currency_in_use_any_case(self, store, account):
        """Test that the in-use check does not depend on the code's case."""
        with pytest.raises(CurrencyInUseError):
            store.delete_currency("usd")
        assert store.get_currency("USD")

    def test_profile_currency_code_is_upper_cased(self, store, account, audit_storage):
        """Test that a profile created with "eur" refers to the EUR currency."""
        user, _ = account
        _, profile = store.create_profile(user.id, "Travel", "eur")

        assert profile.currency_code == "EUR"
        events = audit_storage.get_recent_events(event_type=AuditEventType.PROFILE_CREATED)
        assert events[0].severity == AuditSeverity.INFO
        with pytest.raises(CurrencyInUseError):
            store.delete_currency("EUR")

    def test_updated_profile_currency_code_is_upper_cased(self, store, account):
        """Test that an edited currency code is normalized like a new one."""
        _, profile = account
        _, updated = store.update_profile(profile.model_copy(update={"currency_code": "gbp"}))
        assert updated.currency_code == "GBP"
        assert store.get_profile(profile.id).currency_code == "GBP"

    def test_delete_unknown_currency(self, store):
        """Test that deleting a missing currency raises."""
        with pytest.raises(NotFoundError):
            store.delete_currency("XXX")


class TestRestoreProfile:
    """Tests for re-creating a profile from backup data."""

    def test_restore_assigns_fresh_ids(self, store, account, make_draft, category_of, source_of):
        """Test that a restored profile is a copy under new identifiers."""
        user, profile = account
        store.add_transactions([
            make_draft(profile.id, category_id=category_of(profile.id, "Food"), description="Groceries"),
            make_draft(profile.id, source_id=source_of(profile.id, "Salary"), description="Pay"),
        ])
        backup = store.get_profile_data(profile.id)

        _, restored = store.restore_profile(user.id, backup)
        data = store.get_profile_data(restored.id)

        assert restored.id != profile.id
        assert restored.name == profile.name
        assert len(data.transactions) == 2
        new_ids = {e.id for e in data.categories + data.income_sources}
        old_ids = {e.id for e in backup.categories + backup.income_sources}
        assert new_ids.isdisjoint(old_ids)
        for transaction in data.transactions:
            assert transaction.reference_id in new_ids

        by_description = {t.description: t for t in data.transactions}
        assert by_description["Groceries"].type == TransactionType.EXPENSE
        assert by_description["Groceries"].category_id == category_of(restored.id, "Food")

    def test_restore_keeps_dangling_references(self, store, account, make_draft, category_of):
        """Test that references missing from the backup are left alone."""
        user, profile = account
        food = category_of(profile.id, "Food")
        store.add_transaction(make_draft(profile.id, category_id=food))
        data = store.get_profile_data(profile.id)
        backup = ProfileData(profile=profile, transactions=data.transactions)

        _, restored = store.restore_profile(user.id, backup)
        restored_data = store.get_profile_data(restored.id)

        assert restored_data.categories == ()
        assert restored_data.transactions[0].category_id == food
