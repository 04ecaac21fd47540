"""
Ledger Store Exceptions

Every rejected mutation raises one of these. Nothing here is fatal
to the process: the worst outcome is a rejected mutation.
"""


class LedgerError(Exception):
    """Base exception for ledger store operations."""
    pass


class NotFoundError(LedgerError):
    """A referenced identifier does not exist."""
    pass


class DuplicateError(LedgerError):
    """Attempted to insert a duplicate entity."""
    pass


class DuplicateEmailError(DuplicateError):
    """A user with this email (case-insensitive) already exists."""
    pass


class DuplicateCurrencyError(DuplicateError):
    """A currency with this code already exists."""
    pass


class CurrencyInUseError(LedgerError):
    """The currency is still referenced by at least one profile."""

    def __init__(self, code: str, profile_ids: list[str]):
        self.code = code
        self.profile_ids = profile_ids
        super().__init__(
            f"Currency {code} is used by {len(profile_ids)} profile(s)"
        )


class LastAdminProtectedError(LedgerError):
    """Demoting this user would leave no admin."""
    pass


class ValidationFailure(LedgerError):
    """Input failed validation (malformed CSV, unresolvable name, bad amount)."""
    pass
