"""
Result Models

Value objects returned by the engines, the reports and the flows.
None of these are persisted except BackupDocument, which is the shape
of a full database export.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from chitledger.models.chit import Group, Member, Payment


class ForecastEntry(BaseModel):
    """One upcoming installment."""
    month: int = Field(..., ge=1)
    expected_amount: int = Field(..., ge=0)


# =============================================================================
# BULK IMPORT
# =============================================================================

class RowRejection(BaseModel):
    """Why a single import row was dropped."""
    row_index: int = Field(..., ge=0, description="0-based position in the batch")
    reason: str = Field(
        ...,
        pattern="^(missing_name|missing_phone|unknown_group|capacity_exceeded|invalid_row)$",
    )
    detail: str = ""


class BulkImportResult(BaseModel):
    """
    Outcome of a batch enrollment.

    rejections stays empty unless the batch ran in verbose mode.
    """
    accepted: list[Member] = Field(default_factory=list)
    rejected_count: int = Field(default=0, ge=0)
    rejections: list[RowRejection] = Field(default_factory=list)

    @property
    def accepted_count(self) -> int:
        return len(self.accepted)


# =============================================================================
# BACKUP
# =============================================================================

class BackupDocument(BaseModel):
    """
    A full database export: all three collections, nothing else.

    Serialized with camelCase entity records under lowercase top-level keys.
    """
    groups: list[Group] = Field(default_factory=list)
    members: list[Member] = Field(default_factory=list)
    payments: list[Payment] = Field(default_factory=list)

    def to_payload(self) -> dict[str, list[dict]]:
        return {
            "groups": [g.to_record() for g in self.groups],
            "members": [m.to_record() for m in self.members],
            "payments": [p.to_record() for p in self.payments],
        }


# =============================================================================
# REPORTS
# =============================================================================

class DueEntry(BaseModel):
    """A member who has not paid for the report month."""
    member: Member
    expected_amount: int


class DueReport(BaseModel):
    group: Group
    month: int
    entries: list[DueEntry] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def total_due(self) -> int:
        return sum(e.expected_amount for e in self.entries)


class MemberStatement(BaseModel):
    """All payments of one member, in month order."""
    member: Member
    group: Optional[Group] = Field(
        default=None,
        description="None when the member's group was deleted"
    )
    payments: list[Payment] = Field(default_factory=list)

    @property
    def total_paid(self) -> int:
        return sum(p.amount_paid for p in self.payments)

    @property
    def months_paid(self) -> list[int]:
        return [p.month_number for p in self.payments]


class GroupSummary(BaseModel):
    """One row of the consolidated report."""
    group: Group
    subscriber_count: int
    total_receipts: int


class ReportSummary(BaseModel):
    """Headline figure of a report, as shared with a subscriber or partner."""
    report: str = Field(..., description="Due, Individual or Consolidated")
    label: str
    count: int = Field(..., ge=0)
    total: int


class DashboardStats(BaseModel):
    active_groups: int
    total_members: int
    total_collections: int
    last_backup: Optional[datetime] = None
    needs_backup: bool
    recent_payments: list[Payment] = Field(default_factory=list)
    members_per_group: dict[str, int] = Field(default_factory=dict)


# =============================================================================
# FLOW OUTCOMES
# =============================================================================

class OperationOutcome(BaseModel):
    """
    What a flow reports back to the operator.

    success is False whenever a business rule or the store rejected the
    action; in that case nothing was changed.
    """
    success: bool
    message: str
    error_code: Optional[str] = None
    entity_id: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)
    recorded_at: datetime = Field(default_factory=datetime.now)

    @classmethod
    def ok(cls, message: str, entity_id: Optional[str] = None, **details) -> 'OperationOutcome':
        return cls(success=True, message=message, entity_id=entity_id, details=details)

    @classmethod
    def failed(cls, message: str, error_code: str, **details) -> 'OperationOutcome':
        return cls(success=False, message=message, error_code=error_code, details=details)
