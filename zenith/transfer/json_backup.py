"""
JSON Profile Backup

A backup is the ProfileData of one profile (the profile record plus
its transactions, categories and income sources), serialized verbatim
in the camelCase wire format.

Restoring goes through LedgerStore.restore_profile, which assigns fresh
identifiers. A round trip reproduces the profile subgraph modulo ids.
"""

from datetime import date
from typing import Literal, Optional

from pydantic import ValidationError

from zenith.models.entities import Profile, ProfileData
from zenith.store import LedgerStore, ValidationFailure


def export_profile_json(profile_data: ProfileData) -> str:
    """Serialize a profile backup document."""
    return profile_data.model_dump_json(by_alias=True, indent=2)


def load_profile_backup(text: str) -> ProfileData:
    """
    Parse a profile backup document.

    Raises:
        ValidationFailure: If the document is not a valid backup
    """
    try:
        return ProfileData.model_validate_json(text)
    except ValidationError as e:
        raise ValidationFailure(f"Invalid profile backup: {e.error_count()} error(s)")


def restore_profile_backup(store: LedgerStore, user_id: str, text: str) -> Profile:
    """Load a backup document and re-create it under `user_id`."""
    backup = load_profile_backup(text)
    _, profile = store.restore_profile(user_id, backup)
    return profile


def export_filename(
    profile_id: str,
    kind: Literal["json", "csv"],
    on: Optional[date] = None,
) -> str:
    """
    File name for an export. Carries the profile id and export date
    for traceability only; nothing parses it.
    """
    stamp = (on or date.today()).isoformat()
    prefix = "backup" if kind == "json" else "export"
    return f"zenith_finance_{prefix}_{profile_id}_{stamp}.{kind}"
