"""
Core Entity Models for Zenith Finance

These models define the records held by the ledger store:
users, profiles, transactions, categories, income sources and currencies.

DESIGN DECISION: Every entity is a frozen Pydantic model.
The store never edits a record in place; it replaces it with a new one.
This is what makes a Snapshot safe to hand out to any caller.

DESIGN DECISION: Field names are snake_case in Python but serialize to
camelCase (profileId, passwordHash, ...). A saved snapshot therefore has
the same shape as the data the browser app kept in local storage.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Role(str, Enum):
    """User role. The first user ever created is an admin."""
    ADMIN = "admin"
    USER = "user"


class TransactionType(str, Enum):
    """Direction of money movement."""
    INCOME = "income"
    EXPENSE = "expense"


class PaymentMethod(str, Enum):
    """How a transaction was paid."""
    CASH = "cash"
    CREDIT = "credit"
    BANK = "bank"


# =============================================================================
# BASE
# =============================================================================

class LedgerModel(BaseModel):
    """Shared configuration for every ledger record."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# USERS AND PROFILES
# =============================================================================

class User(LedgerModel):
    """
    An account holder.

    NOTE: password_verifier is NOT a cryptographic hash.
    See zenith.store.passwords.
    """

    id: str
    email: str = Field(
        ...,
        min_length=1,
        max_length=320,
        description="Login email (unique, case-insensitive)"
    )
    password_verifier: str = Field(
        ...,
        alias="passwordHash",
        description="Output of the password verification function"
    )
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class Profile(LedgerModel):
    """A set of books owned by one user (e.g. 'Personal', 'Business')."""

    id: str
    user_id: str
    name: str = Field(..., min_length=1, max_length=100)
    currency_code: str = Field(
        ...,
        min_length=1,
        max_length=10,
        description="Code of a Currency; not owned by the profile"
    )

    @field_validator('currency_code')
    @classmethod
    def normalize_currency_code(cls, v: str) -> str:
        return v.upper()


class Currency(LedgerModel):
    """A currency shared by all profiles. The code is globally unique."""

    code: str = Field(..., min_length=1, max_length=10)
    symbol: str = Field(..., min_length=1, max_length=10)
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator('code')
    @classmethod
    def normalize_code(cls, v: str) -> str:
        """Codes are stored upper-case so every lookup agrees."""
        return v.upper()


class Category(LedgerModel):
    """An expense category scoped to one profile."""

    id: str
    profile_id: str
    name: str = Field(..., min_length=1, max_length=100)
    icon: str = ""
    is_default: bool = False


class IncomeSource(LedgerModel):
    """An income source scoped to one profile. Same shape as Category."""

    id: str
    profile_id: str
    name: str = Field(..., min_length=1, max_length=100)
    icon: str = ""
    is_default: bool = False


# =============================================================================
# TRANSACTIONS
# =============================================================================

class Attachment(LedgerModel):
    """A file kept inline with its transaction (receipt scan, PDF, ...)."""

    id: str
    name: str
    data_url: str = Field(
        ...,
        description="Binary content reference (base64 data URL)"
    )
    media_type: str = Field(
        default="",
        alias="type",
        description="MIME type of the content"
    )


class TransactionDraft(LedgerModel):
    """
    A transaction that has not been assigned an identifier yet.

    This is the input shape for adding transactions, both from the
    UI and from CSV import. The store turns it into a Transaction.

    CRITICAL: category_id is set if and only if type is EXPENSE,
    source_id if and only if type is INCOME. Any other combination
    fails validation, so it can never reach the store.
    """

    profile_id: str
    type: TransactionType
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount in the profile currency"
    )
    description: str = Field(..., min_length=1, max_length=500)
    date: datetime
    payment_method: PaymentMethod
    category_id: Optional[str] = None
    source_id: Optional[str] = None
    attachments: tuple[Attachment, ...] = ()

    @field_validator('date')
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as UTC so all dates compare."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode='after')
    def validate_reference_matches_type(self):
        """Expenses point at a category, income at a source. Never both."""
        if self.type == TransactionType.EXPENSE:
            if not self.category_id:
                raise ValueError("Expense transactions require a category")
            if self.source_id is not None:
                raise ValueError("Expense transactions cannot have an income source")
        else:
            if not self.source_id:
                raise ValueError("Income transactions require an income source")
            if self.category_id is not None:
                raise ValueError("Income transactions cannot have a category")
        return self

    @property
    def reference_id(self) -> str:
        """The category or source identifier, whichever applies."""
        return self.category_id if self.type == TransactionType.EXPENSE else self.source_id


class Transaction(TransactionDraft):
    """A committed transaction, owned by exactly one profile."""

    id: str

    @classmethod
    def from_draft(cls, draft: TransactionDraft, transaction_id: str) -> "Transaction":
        return cls(id=transaction_id, **draft.model_dump())


# =============================================================================
# AGGREGATES
# =============================================================================

class Snapshot(LedgerModel):
    """
    The complete, immutable state of all entities at one instant.

    Collections are tuples in insertion order. The version increases
    by one with every committed mutation.
    """

    version: int = Field(default=0, ge=0)
    users: tuple[User, ...] = ()
    profiles: tuple[Profile, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    categories: tuple[Category, ...] = ()
    income_sources: tuple[IncomeSource, ...] = ()
    currencies: tuple[Currency, ...] = ()

    def to_json(self) -> str:
        """Serialize in the camelCase wire format."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, text: str) -> "Snapshot":
        return cls.model_validate_json(text)


class ProfileData(LedgerModel):
    """
    Everything that belongs to one profile.

    Returned by LedgerStore.get_profile_data, and also the
    document format of a JSON profile backup.
    """

    profile: Profile
    transactions: tuple[Transaction, ...] = ()
    categories: tuple[Category, ...] = ()
    income_sources: tuple[IncomeSource, ...] = ()
