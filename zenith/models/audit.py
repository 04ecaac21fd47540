"""
Audit Models for Zenith Finance

Every committed mutation of the ledger is logged for audit purposes.
This provides:
1. Traceability of who changed what
2. Debugging information when an import or save goes wrong
3. A record of rejected operations (last-admin guard, currency in use)

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Each store mutation has its own event type.
    """
    # Users
    USER_CREATED = "user_created"
    USER_DELETED = "user_deleted"
    USER_ROLE_CHANGED = "user_role_changed"
    ROLE_CHANGE_REJECTED = "role_change_rejected"
    LAST_ADMIN_DELETED = "last_admin_deleted"
    PASSWORD_RESET = "password_reset"

    # Profiles
    PROFILE_CREATED = "profile_created"
    PROFILE_UPDATED = "profile_updated"
    PROFILE_DELETED = "profile_deleted"
    PROFILE_RESTORED = "profile_restored"

    # Transactions
    TRANSACTIONS_ADDED = "transactions_added"
    TRANSACTIONS_REPLACED = "transactions_replaced"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # Categories and income sources
    CATEGORY_ADDED = "category_added"
    CATEGORY_DELETED = "category_deleted"
    INCOME_SOURCE_ADDED = "income_source_added"
    INCOME_SOURCE_DELETED = "income_source_deleted"

    # Currencies
    CURRENCY_ADDED = "currency_added"
    CURRENCY_DELETED = "currency_deleted"
    CURRENCY_DELETE_REJECTED = "currency_delete_rejected"

    # Import
    CSV_IMPORT_COMPLETED = "csv_import_completed"
    CSV_IMPORT_EMPTY = "csv_import_empty"

    # Persistence
    SNAPSHOT_LOADED = "snapshot_loaded"
    SNAPSHOT_INITIALIZED = "snapshot_initialized"
    SAVE_FAILED = "save_failed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every committed mutation creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'user', 'profile', 'transaction')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one CSV import)"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    snapshot_version: Optional[int] = Field(
        default=None,
        description="Snapshot version produced by the mutation, if any"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "snapshot_version": self.snapshot_version,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_created(user_id, role, version)
        event = AuditEventBuilder.save_failed(version, error)
    """

    @staticmethod
    def user_created(user_id: str, role: str, version: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_CREATED,
            entity_type="user",
            entity_id=user_id,
            description=f"User created with role: {role}",
            details={"role": role},
            snapshot_version=version,
        )

    @staticmethod
    def user_deleted(
        user_id: str,
        removed: dict[str, int],
        version: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_DELETED,
            entity_type="user",
            entity_id=user_id,
            description=(
                f"User deleted with {removed.get('profiles', 0)} profiles "
                f"and {removed.get('transactions', 0)} transactions"
            ),
            details=removed,
            snapshot_version=version,
        )

    @staticmethod
    def last_admin_deleted(user_id: str, remaining_users: int, version: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LAST_ADMIN_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=user_id,
            description="The only admin was deleted while other users remain",
            details={"remaining_users": remaining_users},
            snapshot_version=version,
        )

    @staticmethod
    def role_changed(user_id: str, old_role: str, new_role: str, version: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_ROLE_CHANGED,
            entity_type="user",
            entity_id=user_id,
            description=f"Role changed: {old_role} -> {new_role}",
            details={"old_role": old_role, "new_role": new_role},
            snapshot_version=version,
        )

    @staticmethod
    def role_change_rejected(user_id: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ROLE_CHANGE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=user_id,
            description="Role change rejected",
            error_message=reason,
        )

    @staticmethod
    def currency_delete_rejected(code: str, profile_ids: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CURRENCY_DELETE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="currency",
            entity_id=code,
            description=f"Currency {code} is still used by {len(profile_ids)} profiles",
            details={"profile_ids": profile_ids},
        )

    @staticmethod
    def entity_changed(
        event_type: AuditEventType,
        entity_type: str,
        entity_id: Optional[str],
        description: str,
        version: int,
        details: Optional[dict] = None,
        severity: AuditSeverity = AuditSeverity.INFO,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            severity=severity,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            details=details or {},
            snapshot_version=version,
        )

    @staticmethod
    def csv_import_completed(
        profile_id: str,
        imported: int,
        skipped_lines: list[int],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.CSV_IMPORT_COMPLETED
                if imported
                else AuditEventType.CSV_IMPORT_EMPTY
            ),
            severity=AuditSeverity.INFO if imported else AuditSeverity.WARNING,
            entity_type="profile",
            entity_id=profile_id,
            correlation_id=correlation_id,
            description=f"CSV import: {imported} imported, {len(skipped_lines)} skipped",
            details={
                "imported": imported,
                "skipped_lines": skipped_lines,
            },
        )

    @staticmethod
    def save_failed(version: int, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="snapshot",
            description="Snapshot could not be saved to durable storage",
            error_message=error_message,
            snapshot_version=version,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.WARNING,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
