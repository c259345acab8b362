"""
Audit Models for Chit Ledger

Every mutation of the ledger is logged for audit purposes:
who was enrolled, which installment was collected, which prize was
allotted, when the data was last exported.

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Groups
    GROUP_CREATED = "group_created"
    GROUP_STATUS_CHANGED = "group_status_changed"
    GROUP_DELETED = "group_deleted"

    # Enrollment
    MEMBER_ENROLLED = "member_enrolled"
    ENROLLMENT_REJECTED = "enrollment_rejected"
    BULK_IMPORT_COMPLETED = "bulk_import_completed"
    MEMBER_DELETED = "member_deleted"

    # Collection
    PAYMENT_RECORDED = "payment_recorded"
    PAYMENT_REJECTED = "payment_rejected"

    # Allotment
    PRIZE_ALLOTTED = "prize_allotted"
    PRIZE_REJECTED = "prize_rejected"

    # Backup
    BACKUP_EXPORTED = "backup_exported"
    RESTORE_COMPLETED = "restore_completed"
    RESTORE_REJECTED = "restore_rejected"
    DATABASE_WIPED = "database_wiped"

    # System events
    STORAGE_ERROR = "storage_error"


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

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'group', 'member', 'payment')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

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
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.payment_recorded(payment, member_name)
        event = AuditEventBuilder.rejected(AuditEventType.PAYMENT_REJECTED, ...)
    """

    @staticmethod
    def group_created(group_id: str, name: str, capacity: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GROUP_CREATED,
            entity_type="group",
            entity_id=group_id,
            description=f"Group created: {name}",
            details={"name": name, "capacity": capacity},
        )

    @staticmethod
    def group_status_changed(group_id: str, status: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GROUP_STATUS_CHANGED,
            entity_type="group",
            entity_id=group_id,
            description=f"Group status set to {status}",
            details={"status": status},
        )

    @staticmethod
    def group_deleted(group_id: str, orphaned_members: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GROUP_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="group",
            entity_id=group_id,
            description="Group deleted; linked members and payments kept",
            details={"orphaned_members": orphaned_members},
        )

    @staticmethod
    def member_enrolled(member_id: str, name: str, group_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_ENROLLED,
            entity_type="member",
            entity_id=member_id,
            description=f"Member enrolled: {name}",
            details={"group_id": group_id},
        )

    @staticmethod
    def member_deleted(member_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="member",
            entity_id=member_id,
            description="Member deleted",
        )

    @staticmethod
    def bulk_import_completed(accepted: int, rejected: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BULK_IMPORT_COMPLETED,
            entity_type="member",
            description=f"Bulk import accepted {accepted} rows, dropped {rejected}",
            details={"accepted": accepted, "rejected": rejected},
        )

    @staticmethod
    def payment_recorded(
        payment_id: str,
        member_id: str,
        month: int,
        amount: int,
        receipt_number: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_RECORDED,
            entity_type="payment",
            entity_id=payment_id,
            description=f"Installment recorded: month {month} - ₹{amount}",
            details={
                "member_id": member_id,
                "month": month,
                "amount": amount,
                "receipt_number": receipt_number,
            },
        )

    @staticmethod
    def prize_allotted(member_id: str, month: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PRIZE_ALLOTTED,
            entity_type="member",
            entity_id=member_id,
            description=f"Prize allotted for month {month}",
            details={"month": month},
        )

    @staticmethod
    def backup_exported(filename: str, counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_EXPORTED,
            description=f"Database exported to {filename}",
            details={"filename": filename, **counts},
        )

    @staticmethod
    def restore_completed(counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RESTORE_COMPLETED,
            severity=AuditSeverity.WARNING,
            description="Database replaced from backup",
            details=counts,
        )

    @staticmethod
    def database_wiped() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATABASE_WIPED,
            severity=AuditSeverity.WARNING,
            description="All stored records wiped",
        )

    @staticmethod
    def rejected(
        event_type: AuditEventType,
        error_code: str,
        error_message: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        """A business rule blocked the action; nothing was changed."""
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"Action rejected: {error_code}",
            details=details or {},
            error_code=error_code,
            error_message=error_message,
        )

    @staticmethod
    def storage_error(error_code: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description="Store rejected a write",
            error_code=error_code,
            error_message=error_message,
        )
