"""
Prize Allotment

A member moves from Eligible to Prized exactly once. There is no way
back: un-prizing is not a supported transition.

From month + 1 onwards the installment rule engine bills a prized member
at the group's prized installment.
"""

from typing import Optional, Sequence

from chitledger.ledger.errors import AlreadyPrized, MemberNotFound, ValidationError
from chitledger.models.chit import Group, Member


def allot_prize(
    members: Sequence[Member],
    member_id: str,
    month: int,
    group: Optional[Group] = None,
) -> list[Member]:
    """
    Mark `member_id` as the prize winner for `month`.

    When `group` is given, the month must also fall inside the group's
    duration.

    Raises:
        MemberNotFound: no member with this id
        AlreadyPrized: the member already won
        ValidationError: bad month
    """
    target = next((m for m in members if m.id == member_id), None)
    if target is None:
        raise MemberNotFound(f"No member with id {member_id}")

    if target.is_prized:
        raise AlreadyPrized(target.id, target.prized_month)

    if isinstance(month, bool) or not isinstance(month, int) or month < 1:
        raise ValidationError(f"Month must be a positive integer, got {month!r}")

    if group is not None:
        if group.id != target.group_id:
            raise ValidationError(
                f"Member {target.name} does not belong to group {group.name}"
            )
        if month > group.total_months:
            raise ValidationError(
                f"Month {month} is beyond the group's {group.total_months} months"
            )

    prized = target.model_copy(update={"is_prized": True, "prized_month": month})
    return [prized if m.id == member_id else m for m in members]
