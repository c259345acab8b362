"""
Report Queries

DESIGN DECISION: Reports are DETERMINISTIC reads over the stored
collections. They never modify anything and never estimate: an amount
shown as due is recomputed with the installment rule, an amount shown as
collected is the sum of stored payments.
"""

from collections import Counter
from datetime import datetime
from typing import Iterable, Optional

from chitledger.ledger.errors import GroupNotFound, MemberNotFound
from chitledger.ledger.installments import expected_amount
from chitledger.models.chit import (
    Group,
    Member,
    Payment,
    find_group,
    find_member,
    group_display_name,
    members_of_group,
)
from chitledger.models.results import (
    DashboardStats,
    DueEntry,
    DueReport,
    GroupSummary,
    MemberStatement,
    ReportSummary,
)


RECENT_PAYMENTS_LIMIT = 6


def due_report(
    groups: Iterable[Group],
    members: Iterable[Member],
    payments: Iterable[Payment],
    group_id: str,
    month: int,
) -> DueReport:
    """
    Members of the group with no payment recorded for `month`.

    Raises:
        GroupNotFound: if the group does not exist
    """
    group = find_group(groups, group_id)
    if group is None:
        raise GroupNotFound(f"Group {group_id} not found")

    paid = {p.member_id for p in payments if p.month_number == month}
    entries = [
        DueEntry(member=m, expected_amount=expected_amount(group, m, month))
        for m in members_of_group(members, group_id)
        if m.id not in paid
    ]
    return DueReport(group=group, month=month, entries=entries)


def member_statement(
    groups: Iterable[Group],
    members: Iterable[Member],
    payments: Iterable[Payment],
    member_id: str,
) -> MemberStatement:
    """Every payment of one member, oldest month first."""
    member = find_member(members, member_id)
    if member is None:
        raise MemberNotFound(f"Member {member_id} not found")

    history = sorted(
        (p for p in payments if p.member_id == member_id),
        key=lambda p: p.month_number,
    )
    return MemberStatement(
        member=member,
        group=find_group(groups, member.group_id),
        payments=history,
    )


def consolidated_report(
    groups: Iterable[Group],
    members: Iterable[Member],
    payments: Iterable[Payment],
) -> list[GroupSummary]:
    member_counts = Counter(m.group_id for m in members)
    receipts = Counter()
    for p in payments:
        receipts[p.group_id] += p.amount_paid

    return [
        GroupSummary(
            group=g,
            subscriber_count=member_counts[g.id],
            total_receipts=receipts[g.id],
        )
        for g in groups
    ]


# =============================================================================
# SHAREABLE SUMMARIES
# =============================================================================

def due_summary(report: DueReport) -> ReportSummary:
    return ReportSummary(
        report="Due",
        label="Total Outstanding",
        count=report.count,
        total=report.total_due,
    )


def statement_summary(statement: MemberStatement) -> ReportSummary:
    return ReportSummary(
        report="Individual",
        label="Total Receipts",
        count=len(statement.payments),
        total=statement.total_paid,
    )


def consolidated_summary(
    groups: Iterable[Group],
    payments: Iterable[Payment],
) -> ReportSummary:
    """Group count and every stored receipt, orphaned payments included."""
    return ReportSummary(
        report="Consolidated",
        label="Master Collection",
        count=len(list(groups)),
        total=sum(p.amount_paid for p in payments),
    )


def dashboard_stats(
    groups: Iterable[Group],
    members: Iterable[Member],
    payments: Iterable[Payment],
    last_backup: Optional[datetime],
    needs_backup: bool,
) -> DashboardStats:
    """
    Headline numbers for the landing page.

    recent_payments holds the last six recorded payments, newest first.
    members_per_group is keyed by group name; orphaned members count
    under "Unassigned".
    """
    groups = list(groups)
    members = list(members)
    payments = list(payments)

    per_group = Counter(group_display_name(groups, m.group_id) for m in members)

    return DashboardStats(
        active_groups=sum(1 for g in groups if g.is_active),
        total_members=len(members),
        total_collections=sum(p.amount_paid for p in payments),
        last_backup=last_backup,
        needs_backup=needs_backup,
        recent_payments=list(reversed(payments[-RECENT_PAYMENTS_LIMIT:])),
        members_per_group=dict(per_group),
    )
