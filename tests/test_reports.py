"""Tests for report queries."""

import pytest
from datetime import date, datetime, timezone

from chitledger.ledger import GroupNotFound, MemberNotFound
from chitledger.models import GroupStatus, Member, Payment
from chitledger.queries import (
    consolidated_report,
    consolidated_summary,
    dashboard_stats,
    due_report,
    due_summary,
    member_statement,
    statement_summary,
)


def _payment(member_id, month, amount=5000, group_id="g1", pid=None):
    return Payment(
        id=pid or f"{member_id}-{month}",
        member_id=member_id,
        group_id=group_id,
        month_number=month,
        amount_paid=amount,
        expected_amount=amount,
        payment_date=date(2025, 1, 5),
        receipt_number=f"GTS-{month:06d}",
    )


class TestDueReport:
    """Tests for the monthly due list."""

    def test_unpaid_members_listed(self, group, member, prized_member):
        """Test paid members drop off the list."""
        report = due_report([group], [member, prized_member], [_payment("m1", 6)], "g1", 6)
        assert [e.member.id for e in report.entries] == ["m2"]
        assert report.entries[0].expected_amount == 6000
        assert report.count == 1
        assert report.total_due == 6000

    def test_other_groups_excluded(self, group, other_group, member):
        """Test only the requested group's members appear."""
        stranger = Member(id="m9", group_id="g2", name="X", phone="1")
        report = due_report([group, other_group], [member, stranger], [], "g1", 1)
        assert [e.member.id for e in report.entries] == ["m1"]

    def test_unknown_group(self, group):
        """Test reporting on a missing group."""
        with pytest.raises(GroupNotFound):
            due_report([group], [], [], "nope", 1)


class TestMemberStatement:
    """Tests for the per-member ledger."""

    def test_sorted_by_month(self, group, member):
        """Test payments come back in month order."""
        payments = [_payment("m1", 3), _payment("m1", 1), _payment("m2", 2), _payment("m1", 2)]
        statement = member_statement([group], [member], payments, "m1")
        assert statement.months_paid == [1, 2, 3]
        assert statement.total_paid == 15000
        assert statement.group == group

    def test_orphaned_member(self, member):
        """Test a member of a deleted group still has a statement."""
        statement = member_statement([], [member], [], "m1")
        assert statement.group is None
        assert statement.payments == []

    def test_unknown_member(self):
        """Test a statement for a missing member."""
        with pytest.raises(MemberNotFound):
            member_statement([], [], [], "nope")


class TestConsolidatedReport:
    """Tests for the all-groups summary."""

    def test_totals(self, group, other_group, member, prized_member):
        """Test subscriber counts and receipts per group."""
        payments = [_payment("m1", 1), _payment("m2", 1), _payment("m5", 1, 5500, "g2")]
        summaries = consolidated_report([group, other_group], [member, prized_member], payments)
        assert [(s.group.id, s.subscriber_count, s.total_receipts) for s in summaries] == [
            ("g1", 2, 10000),
            ("g2", 0, 5500),
        ]


class TestReportSummaries:
    """Tests for the shareable report headlines."""

    def test_due(self, group, member, prized_member):
        """Test the outstanding total of a due report."""
        summary = due_summary(due_report([group], [member, prized_member], [], "g1", 6))
        assert (summary.report, summary.label) == ("Due", "Total Outstanding")
        assert (summary.count, summary.total) == (2, 11000)

    def test_statement(self, group, member):
        """Test receipts of one member."""
        payments = [_payment("m1", 1), _payment("m1", 2)]
        summary = statement_summary(member_statement([group], [member], payments, "m1"))
        assert (summary.label, summary.count, summary.total) == ("Total Receipts", 2, 10000)

    def test_consolidated_counts_orphaned_payments(self, group, other_group):
        """Test the master collection includes payments of deleted groups."""
        payments = [_payment("m1", 1), _payment("m9", 1, 7000, "gone")]
        summary = consolidated_summary([group, other_group], payments)
        assert (summary.label, summary.count, summary.total) == ("Master Collection", 2, 12000)


class TestDashboard:
    """Tests for dashboard figures."""

    def test_stats(self, group, other_group, member, prized_member):
        """Test counts, totals and the recent payment list."""
        closed = other_group.model_copy(update={"status": GroupStatus.CLOSED})
        orphan = Member(id="m9", group_id="gone", name="Orphan", phone="1")
        payments = [_payment("m1", month) for month in range(1, 9)]
        backed_up = datetime(2025, 3, 1, tzinfo=timezone.utc)

        stats = dashboard_stats(
            [group, closed],
            [member, prized_member, orphan],
            payments,
            last_backup=backed_up,
            needs_backup=True,
        )

        assert stats.active_groups == 1
        assert stats.total_members == 3
        assert stats.total_collections == 40000
        assert stats.last_backup == backed_up
        assert stats.needs_backup is True
        assert [p.month_number for p in stats.recent_payments] == [8, 7, 6, 5, 4, 3]
        assert stats.members_per_group == {"Diwali 1L": 2, "Unassigned": 1}

    def test_empty(self):
        """Test an empty ledger."""
        stats = dashboard_stats([], [], [], last_backup=None, needs_backup=False)
        assert stats.total_collections == 0
        assert stats.recent_payments == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
