"""
Core Data Models for Chit Ledger

These models define the strict schemas for the three entity collections:
groups (chit fund portfolios), members (subscribers) and payments
(settlement records).

DESIGN DECISION: Python field names are snake_case; the wire format is
camelCase. Persisted collections and backup files keep the camelCase
shapes so existing exports restore without conversion.

References between entities are plain string ids. Nothing enforces them:
deleting a group leaves its members and payments in place. The lookup
helpers at the bottom return None for a missing id so callers can tell an
orphan from a real record.
"""

from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Optional
from uuid import uuid4

from dateutil.relativedelta import relativedelta
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


UNASSIGNED_GROUP_NAME = "Unassigned"


def generate_id() -> str:
    """Create a new entity id."""
    return uuid4().hex


def clean_phone_number(phone: str) -> str:
    """Keep digits only, then the last ten of them."""
    digits = "".join(c for c in phone if c.isdigit())
    return digits[-10:]


def chit_end_date(start_date: date, total_months: int) -> date:
    """Last calendar month of a chit that starts on start_date."""
    return start_date + relativedelta(months=total_months - 1)


def rollover_end_date(start_date: date, total_months: int) -> date:
    """
    End date as a plain month setter computes it.

    A start day past the end of the target month overflows into the next
    month (31 Jan + 1 month is 2 or 3 Mar). Older records carry this form.
    """
    first = start_date.replace(day=1) + relativedelta(months=total_months - 1)
    return first + timedelta(days=start_date.day - 1)


def _month_of(day: date) -> tuple[int, int]:
    return day.year, day.month


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class GroupStatus(str, Enum):
    """Lifecycle of a chit group."""
    ACTIVE = "Active"
    CLOSED = "Closed"


class MemberStatus(str, Enum):
    """Lifecycle of a subscriber."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class PaymentMode(str, Enum):
    """How an installment was collected."""
    CASH = "Cash"
    UPI = "UPI"
    CHEQUE = "Cheque"
    OTHER = "Other"


class _Entity(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_record(self) -> dict:
        """Serialize to the persisted camelCase shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# GROUP
# =============================================================================

class Group(_Entity):
    """
    A chit fund group (portfolio).

    end_date is start_date + total_months - 1 months, checked to the month.
    It is derived when missing. A stored value is kept as written when it
    falls in the derived month or in the month a day overflow lands in;
    any other month is rejected. member_count is the
    subscriber capacity and defaults to total_months.
    """

    id: str = Field(default_factory=generate_id, min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    total_value: int = Field(..., ge=0, description="Total fund value in INR")
    total_months: int = Field(..., ge=1, description="Duration in months")
    member_count: Optional[int] = Field(
        default=None,
        ge=1,
        description="Subscriber capacity"
    )
    regular_installment: int = Field(
        ...,
        gt=0,
        description="Monthly installment before winning the prize"
    )
    prized_installment: int = Field(
        ...,
        gt=0,
        description="Monthly installment after winning the prize"
    )
    start_date: date
    end_date: Optional[date] = None
    allotment_day: Optional[int] = Field(default=None, ge=1, le=31)
    status: GroupStatus = GroupStatus.ACTIVE
    upi_id: Optional[str] = Field(
        default=None,
        description="Group-specific collection VPA, overrides the global one"
    )

    @field_validator('upi_id')
    @classmethod
    def blank_upi_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @model_validator(mode='after')
    def derive_schedule(self) -> 'Group':
        """Fill derived fields and check the end date invariant."""
        expected_end = chit_end_date(self.start_date, self.total_months)
        if self.end_date is None:
            self.end_date = expected_end
        elif _month_of(self.end_date) not in (
            _month_of(expected_end),
            _month_of(rollover_end_date(self.start_date, self.total_months)),
        ):
            raise ValueError(
                f"End date {self.end_date} does not match start date plus "
                f"{self.total_months} months ({expected_end})"
            )

        if self.member_count is None:
            self.member_count = self.total_months
        if self.allotment_day is None:
            self.allotment_day = self.start_date.day

        return self

    @property
    def is_active(self) -> bool:
        return self.status == GroupStatus.ACTIVE


# =============================================================================
# MEMBER
# =============================================================================

class Member(_Entity):
    """
    A subscriber enrolled in exactly one group.

    Prize status is one-way: once is_prized is set it stays set, and
    prized_month records the month of the win.
    """

    id: str = Field(default_factory=generate_id, min_length=1)
    group_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=20)
    address: str = ""
    email: str = ""
    id_proof_type: str = ""
    id_proof_number: str = ""
    nominee_name: str = ""
    nominee_relation: str = ""
    joining_date: Optional[date] = None
    is_prized: bool = False
    prized_month: Optional[int] = None
    status: MemberStatus = MemberStatus.ACTIVE

    @field_validator('joining_date', mode='before')
    @classmethod
    def blank_date_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode='after')
    def validate_prize_state(self) -> 'Member':
        """Prized members carry a positive prize month; others carry none."""
        if self.is_prized:
            if self.prized_month is None:
                raise ValueError("Prized member must have a prized month")
            if self.prized_month < 1:
                raise ValueError("Prized month must be a positive month number")
        elif self.prized_month is not None:
            raise ValueError("Prized month is only valid for a prized member")
        return self


# =============================================================================
# PAYMENT
# =============================================================================

class Payment(_Entity):
    """
    Settlement of one installment month for one member.

    group_id is copied from the member for query convenience.
    expected_amount is the amount due at save time, kept for audit.
    """

    id: str = Field(default_factory=generate_id, min_length=1)
    member_id: str = Field(..., min_length=1)
    group_id: str = Field(..., min_length=1)
    month_number: int = Field(..., ge=1)
    amount_paid: int = Field(..., ge=0)
    expected_amount: int = Field(..., ge=0)
    payment_date: date
    payment_mode: PaymentMode = PaymentMode.CASH
    receipt_number: str = Field(..., min_length=1)
    remarks: str = ""
    transaction_ref: Optional[str] = None

    @property
    def is_settled(self) -> bool:
        return self.amount_paid >= self.expected_amount


class MemberDraft(BaseModel):
    """
    Operator input for a new subscriber, before the capacity check.

    Fields are loose on purpose: the enrollment guard reports what is
    missing instead of pydantic rejecting the form outright.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    group_id: str = ""
    phone: str = ""
    address: str = ""
    email: str = ""
    id_proof_type: str = "Aadhar"
    id_proof_number: str = ""
    nominee_name: str = ""
    nominee_relation: str = ""
    joining_date: Optional[date] = None
    is_prized: bool = False
    prized_month: Optional[int] = None
    status: MemberStatus = MemberStatus.ACTIVE


# =============================================================================
# LOOKUP HELPERS
# =============================================================================

def find_group(groups: Iterable[Group], group_id: str) -> Optional[Group]:
    """Return the group with this id, or None if it does not exist."""
    return next((g for g in groups if g.id == group_id), None)


def find_group_by_name(groups: Iterable[Group], name: str) -> Optional[Group]:
    """Exact, case-insensitive, whitespace-trimmed name match."""
    wanted = name.strip().lower()
    if not wanted:
        return None
    return next((g for g in groups if g.name.strip().lower() == wanted), None)


def find_member(members: Iterable[Member], member_id: str) -> Optional[Member]:
    """Return the member with this id, or None if it does not exist."""
    return next((m for m in members if m.id == member_id), None)


def find_payment(
    payments: Iterable[Payment],
    member_id: str,
    month_number: int,
) -> Optional[Payment]:
    """Return the payment for (member, month), or None."""
    return next(
        (
            p for p in payments
            if p.member_id == member_id and p.month_number == month_number
        ),
        None,
    )


def members_of_group(members: Iterable[Member], group_id: str) -> list[Member]:
    return [m for m in members if m.group_id == group_id]


def group_display_name(groups: Iterable[Group], group_id: str) -> str:
    """Group name for display; orphaned references show as Unassigned."""
    group = find_group(groups, group_id)
    return group.name if group else UNASSIGNED_GROUP_NAME
