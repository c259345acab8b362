"""
Tests for Chit Ledger models

Test strategy:
1. Unit tests for individual components (models, engines)
2. Integration tests for flows (in-memory store)
3. No files outside tmp_path
"""

import pytest
from datetime import date

from chitledger.models import (
    UNASSIGNED_GROUP_NAME,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    BulkImportResult,
    Group,
    GroupStatus,
    Member,
    OperationOutcome,
    Payment,
    chit_end_date,
    clean_phone_number,
    find_group,
    find_group_by_name,
    find_member,
    find_payment,
    group_display_name,
    members_of_group,
    rollover_end_date,
)


class TestGroupModel:
    """Tests for the Group model."""

    def test_derived_fields(self, group):
        """Test end date, capacity and allotment day are derived."""
        assert group.end_date == date(2026, 8, 5)
        assert group.member_count == 20
        assert group.allotment_day == 5
        assert group.status == GroupStatus.ACTIVE
        assert group.is_active is True

    def test_end_date_mismatch_rejected(self):
        """Test that an inconsistent end date is rejected."""
        with pytest.raises(ValueError, match="does not match"):
            Group(
                name="Bad",
                total_value=10000,
                total_months=10,
                regular_installment=1000,
                prized_installment=1200,
                start_date=date(2025, 1, 1),
                end_date=date(2025, 12, 1),
            )

    def test_matching_end_date_accepted(self):
        """Test that an explicit, consistent end date is kept."""
        group = Group(
            name="Ok",
            total_value=10000,
            total_months=10,
            regular_installment=1000,
            prized_installment=1200,
            start_date=date(2025, 1, 1),
            end_date=date(2025, 10, 1),
        )
        assert group.end_date == date(2025, 10, 1)

    def test_month_end_start_date(self):
        """Test month arithmetic clamps to the end of shorter months."""
        assert chit_end_date(date(2025, 1, 31), 2) == date(2025, 2, 28)

    def test_rollover_end_date(self):
        """Test a day overflow rolls into the following month."""
        assert rollover_end_date(date(2024, 1, 31), 2) == date(2024, 3, 2)
        assert rollover_end_date(date(2025, 1, 31), 2) == date(2025, 3, 3)
        assert rollover_end_date(date(2025, 1, 5), 20) == chit_end_date(date(2025, 1, 5), 20)

    def test_overflowed_end_date_kept(self):
        """Test a stored end date in the overflow month loads as written."""
        group = Group.model_validate({
            "id": "g31",
            "name": "Month End",
            "totalValue": 20000,
            "totalMonths": 2,
            "regularInstallment": 10000,
            "prizedInstallment": 11000,
            "startDate": "2024-01-31",
            "endDate": "2024-03-02",
        })
        assert group.end_date == date(2024, 3, 2)
        assert group.allotment_day == 31

    def test_end_date_checked_to_the_month(self):
        """Test any day inside the derived month is accepted."""
        group = Group(
            name="Mid",
            total_value=10000,
            total_months=10,
            regular_installment=1000,
            prized_installment=1200,
            start_date=date(2025, 1, 1),
            end_date=date(2025, 10, 20),
        )
        assert group.end_date == date(2025, 10, 20)

    def test_rejects_zero_months(self):
        """Test that total_months must be positive."""
        with pytest.raises(ValueError):
            Group(
                name="Zero",
                total_value=0,
                total_months=0,
                regular_installment=1000,
                prized_installment=1200,
                start_date=date(2025, 1, 1),
            )

    def test_blank_upi_becomes_none(self):
        """Test that an empty group VPA is stored as absent."""
        group = Group(
            name="NoUpi",
            total_value=10000,
            total_months=10,
            regular_installment=1000,
            prized_installment=1200,
            start_date=date(2025, 1, 1),
            upi_id="",
        )
        assert group.upi_id is None

    def test_record_is_camel_case(self, group):
        """Test the persisted shape uses camelCase keys."""
        record = group.to_record()
        assert record["totalMonths"] == 20
        assert record["regularInstallment"] == 5000
        assert record["startDate"] == "2025-01-05"
        assert record["endDate"] == "2026-08-05"
        assert record["status"] == "Active"
        assert "upiId" not in record

    def test_record_round_trip(self, group):
        """Test a persisted record loads back to the same group."""
        assert Group.model_validate(group.to_record()) == group


class TestMemberModel:
    """Tests for the Member model."""

    def test_defaults(self, member):
        """Test a new member is eligible and active."""
        assert member.is_prized is False
        assert member.prized_month is None
        assert member.to_record()["groupId"] == "g1"

    def test_prized_requires_month(self):
        """Test that a prized member must carry a prize month."""
        with pytest.raises(ValueError, match="prized month"):
            Member(group_id="g1", name="A", phone="1", is_prized=True)

    def test_prize_month_must_be_positive(self):
        """Test that a prize month of zero is rejected."""
        with pytest.raises(ValueError):
            Member(group_id="g1", name="A", phone="1", is_prized=True, prized_month=0)

    def test_prize_month_without_prize_rejected(self):
        """Test that an eligible member cannot carry a prize month."""
        with pytest.raises(ValueError, match="only valid"):
            Member(group_id="g1", name="A", phone="1", prized_month=3)

    def test_blank_joining_date(self):
        """Test that a blank joining date from a form loads as None."""
        member = Member.model_validate(
            {"groupId": "g1", "name": "A", "phone": "1", "joiningDate": ""}
        )
        assert member.joining_date is None

    def test_name_whitespace_stripped(self):
        """Test that whitespace is stripped from names."""
        member = Member(group_id="g1", name="  Ravi  ", phone="1")
        assert member.name == "Ravi"


class TestPaymentModel:
    """Tests for the Payment model."""

    def test_is_settled(self, payment):
        """Test settlement is amount paid against amount expected."""
        assert payment.is_settled is True
        short = payment.model_copy(update={"amount_paid": 4000})
        assert short.is_settled is False

    def test_rejects_month_zero(self):
        """Test that month numbers start at 1."""
        with pytest.raises(ValueError):
            Payment(
                member_id="m1",
                group_id="g1",
                month_number=0,
                amount_paid=5000,
                expected_amount=5000,
                payment_date=date(2025, 1, 5),
                receipt_number="GTS-1",
            )

    def test_record_keys(self, payment):
        """Test the persisted payment shape."""
        record = payment.to_record()
        assert record["memberId"] == "m1"
        assert record["monthNumber"] == 1
        assert record["paymentMode"] == "Cash"
        assert record["receiptNumber"] == "GTS-123456"
        assert "transactionRef" not in record


class TestLookups:
    """Tests for id lookups and display helpers."""

    def test_find_returns_none_for_missing(self, group, member):
        """Test lookups return None instead of raising."""
        assert find_group([group], "nope") is None
        assert find_member([member], "nope") is None
        assert find_payment([], "m1", 1) is None

    def test_find_group_by_name(self, group):
        """Test name match is case-insensitive and trimmed."""
        assert find_group_by_name([group], "  diwali 1l ") is group
        assert find_group_by_name([group], "Diwali") is None
        assert find_group_by_name([group], "   ") is None

    def test_find_payment(self, payment):
        """Test payment lookup by member and month."""
        assert find_payment([payment], "m1", 1) is payment
        assert find_payment([payment], "m1", 2) is None

    def test_members_of_group(self, member, prized_member):
        """Test filtering members by group."""
        assert len(members_of_group([member, prized_member], "g1")) == 2
        assert members_of_group([member], "g2") == []

    def test_orphan_display_name(self, group):
        """Test a deleted group renders as Unassigned."""
        assert group_display_name([group], "g1") == "Diwali 1L"
        assert group_display_name([group], "gone") == UNASSIGNED_GROUP_NAME

    def test_clean_phone_number(self):
        """Test digits only, last ten kept."""
        assert clean_phone_number("+91 98765-43210") == "9876543210"
        assert clean_phone_number("12345") == "12345"
        assert clean_phone_number("n/a") == ""


class TestResultModels:
    """Tests for result value objects."""

    def test_bulk_import_counts(self, member):
        """Test accepted_count follows the accepted list."""
        result = BulkImportResult(accepted=[member], rejected_count=2)
        assert result.accepted_count == 1
        assert result.rejections == []

    def test_outcome_constructors(self):
        """Test ok/failed helpers."""
        ok = OperationOutcome.ok("Saved", entity_id="x", amount=5000)
        assert ok.success is True
        assert ok.details == {"amount": 5000}

        failed = OperationOutcome.failed("Blocked", "capacity_exceeded")
        assert failed.success is False
        assert failed.error_code == "capacity_exceeded"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.GROUP_CREATED,
            description="Group created",
        )
        assert event.event_type == AuditEventType.GROUP_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.payment_recorded(
            payment_id="p1",
            member_id="m1",
            month=3,
            amount=5000,
            receipt_number="GTS-000001",
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "payment_recorded"
        assert log_dict["entity_id"] == "p1"
        assert log_dict["details"]["receipt_number"] == "GTS-000001"

    def test_builder_rejected(self):
        """Test AuditEventBuilder.rejected carries the error."""
        event = AuditEventBuilder.rejected(
            event_type=AuditEventType.PAYMENT_REJECTED,
            error_code="amount_mismatch",
            error_message="Please collect exactly 5000",
            entity_type="member",
            entity_id="m1",
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.error_code == "amount_mismatch"
        assert event.entity_id == "m1"

    def test_builder_group_deleted_is_warning(self):
        """Test destructive events are logged as warnings."""
        event = AuditEventBuilder.group_deleted("g1", orphaned_members=3)
        assert event.severity == AuditSeverity.WARNING
        assert event.details["orphaned_members"] == 3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
