"""Tests for JSON profile backups."""

import json

import pytest
from datetime import date

from zenith.store import ValidationFailure
from zenith.transfer import (
    export_filename,
    export_profile_json,
    load_profile_backup,
    restore_profile_backup,
)


class TestExportProfileJson:
    """Tests for writing a backup document."""

    def test_document_shape(self, store, account, make_draft, category_of):
        """Test that a backup uses the camelCase record format."""
        _, profile = account
        store.add_transaction(make_draft(profile.id, category_id=category_of(profile.id, "Food")))

        document = json.loads(export_profile_json(store.get_profile_data(profile.id)))

        assert document["profile"]["id"] == profile.id
        assert document["profile"]["currencyCode"] == "USD"
        assert set(document) == {"profile", "transactions", "categories", "incomeSources"}
        assert document["transactions"][0]["categoryId"] == category_of(profile.id, "Food")
        assert document["categories"][0]["isDefault"] is True

    def test_load_round_trip(self, store, account, make_draft, source_of):
        """Test that loading an export gives back the same data."""
        _, profile = account
        store.add_transaction(make_draft(profile.id, source_id=source_of(profile.id, "Gifts")))
        data = store.get_profile_data(profile.id)

        assert load_profile_backup(export_profile_json(data)) == data


class TestRestoreProfileBackup:
    """Tests for restoring a backup into the store."""

    def test_restore_under_another_user(self, store, account, make_draft, category_of):
        """Test restoring a profile for a different user under fresh ids."""
        _, profile = account
        store.add_transaction(make_draft(
            profile.id, category_id=category_of(profile.id, "Housing"), description="Rent",
        ))
        text = export_profile_json(store.get_profile_data(profile.id))
        _, bob = store.create_user("bob@example.com", "0")

        restored = restore_profile_backup(store, bob.id, text)
        data = store.get_profile_data(restored.id)

        assert restored.user_id == bob.id
        assert restored.id != profile.id
        assert data.transactions[0].description == "Rent"
        assert data.transactions[0].category_id == category_of(restored.id, "Housing")

    def test_invalid_document(self, store, account):
        """Test that a malformed backup is rejected."""
        user, _ = account
        with pytest.raises(ValidationFailure):
            restore_profile_backup(store, user.id, '{"profile": {"id": "p1"}}')

    def test_not_json(self):
        """Test that text that is not JSON is rejected."""
        with pytest.raises(ValidationFailure):
            load_profile_backup("not json at all")


class TestExportFilename:
    """Tests for export file names."""

    def test_backup_name(self):
        """Test the JSON backup file name."""
        assert export_filename("p1", "json", date(2024, 3, 5)) == "zenith_finance_backup_p1_2024-03-05.json"

    def test_csv_name(self):
        """Test the CSV export file name."""
        assert export_filename("p1", "csv", date(2024, 3, 5)) == "zenith_finance_export_p1_2024-03-05.csv"
