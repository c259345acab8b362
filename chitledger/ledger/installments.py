"""
Installment Rule Engine

Computes what a member owes for a given installment month.

RULE: a member who won the prize in month k still pays the regular
installment for month k. The prized installment applies strictly from
month k + 1 onwards.

Everything here is pure: same inputs, same answer. Payments store the
amount computed at save time, and recomputing later gives the same value
unless the member's prize status changed in between.
"""

from datetime import date
from typing import Iterator

from dateutil.relativedelta import relativedelta

from chitledger.ledger.errors import ValidationError
from chitledger.models.chit import Group, Member
from chitledger.models.results import ForecastEntry


DEFAULT_FORECAST_MONTHS = 3


def _check_month(month: int) -> None:
    if isinstance(month, bool) or not isinstance(month, int) or month < 1:
        raise ValidationError(f"Month must be a positive integer, got {month!r}")


def expected_amount(group: Group, member: Member, target_month: int) -> int:
    """
    Amount due from `member` for `target_month` of `group`.

    Raises:
        ValidationError: if target_month is not a positive integer
    """
    _check_month(target_month)

    if (
        member.is_prized
        and member.prized_month is not None
        and target_month > member.prized_month
    ):
        return group.prized_installment

    return group.regular_installment


def forecast(
    group: Group,
    member: Member,
    current_month: int,
    months: int = DEFAULT_FORECAST_MONTHS,
) -> Iterator[ForecastEntry]:
    """
    Lazily yield the next `months` installments after `current_month`.

    Stops early at the group's last month. Each call returns a fresh
    generator, so a forecast can be re-run at any time.
    """
    for offset in range(1, months + 1):
        month = current_month + offset
        if month > group.total_months:
            return
        yield ForecastEntry(
            month=month,
            expected_amount=expected_amount(group, member, month),
        )


def current_chit_month(start_date: date, today: date) -> int:
    """1-based installment month that `today` falls in; never below 1."""
    elapsed = (today.year - start_date.year) * 12 + (today.month - start_date.month) + 1
    return max(1, elapsed)


def installment_due_date(group: Group, month: int) -> date:
    """Calendar date on which installment `month` falls due."""
    _check_month(month)
    return group.start_date + relativedelta(months=month - 1)
