"""
Data Models Package

This package contains all Pydantic models used in the Chit Ledger.
All data flowing through the system must conform to these schemas.
"""

from chitledger.models.chit import (
    UNASSIGNED_GROUP_NAME,
    Group,
    GroupStatus,
    Member,
    MemberDraft,
    MemberStatus,
    Payment,
    PaymentMode,
    chit_end_date,
    clean_phone_number,
    find_group,
    find_group_by_name,
    find_member,
    find_payment,
    generate_id,
    group_display_name,
    members_of_group,
    rollover_end_date,
)
from chitledger.models.results import (
    BackupDocument,
    BulkImportResult,
    DashboardStats,
    DueEntry,
    DueReport,
    ForecastEntry,
    GroupSummary,
    MemberStatement,
    OperationOutcome,
    ReportSummary,
    RowRejection,
)
from chitledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entity models
    "UNASSIGNED_GROUP_NAME",
    "Group",
    "GroupStatus",
    "Member",
    "MemberDraft",
    "MemberStatus",
    "Payment",
    "PaymentMode",
    "chit_end_date",
    "clean_phone_number",
    "find_group",
    "find_group_by_name",
    "find_member",
    "find_payment",
    "generate_id",
    "group_display_name",
    "members_of_group",
    "rollover_end_date",
    # Result models
    "BackupDocument",
    "BulkImportResult",
    "DashboardStats",
    "DueEntry",
    "DueReport",
    "ForecastEntry",
    "GroupSummary",
    "MemberStatement",
    "OperationOutcome",
    "ReportSummary",
    "RowRejection",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
