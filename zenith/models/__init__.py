"""
Data Models Package

This package contains all Pydantic models used in Zenith Finance.
All data held by the ledger store must conform to these schemas.
"""

from zenith.models.entities import (
    Attachment,
    Category,
    Currency,
    IncomeSource,
    LedgerModel,
    PaymentMethod,
    Profile,
    ProfileData,
    Role,
    Snapshot,
    Transaction,
    TransactionDraft,
    TransactionType,
    User,
)
from zenith.models.results import (
    CsvParseResult,
    ImportReport,
    MonthlyTotal,
    NamedTotal,
    PeriodSummary,
    SkippedRow,
    TransactionFilter,
)
from zenith.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entity models
    "Attachment",
    "Category",
    "Currency",
    "IncomeSource",
    "LedgerModel",
    "PaymentMethod",
    "Profile",
    "ProfileData",
    "Role",
    "Snapshot",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "User",
    # Result models
    "CsvParseResult",
    "ImportReport",
    "MonthlyTotal",
    "NamedTotal",
    "PeriodSummary",
    "SkippedRow",
    "TransactionFilter",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
