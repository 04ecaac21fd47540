"""Audit logging package."""

from zenith.audit.logger import AuditLogger, create_correlation_id
from zenith.audit.storage import AuditStorageInterface, InMemoryAuditStorage

__all__ = [
    "AuditLogger",
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "create_correlation_id",
]
