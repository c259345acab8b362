"""Report query package."""

from chitledger.queries.reports import (
    consolidated_report,
    consolidated_summary,
    dashboard_stats,
    due_report,
    due_summary,
    member_statement,
    statement_summary,
)

__all__ = [
    "consolidated_report",
    "consolidated_summary",
    "dashboard_stats",
    "due_report",
    "due_summary",
    "member_statement",
    "statement_summary",
]
