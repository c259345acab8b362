"""
Group Setup

Groups are root entities. Once set up only their status changes.

Deleting a group does NOT cascade: members and payments that reference
it stay where they are and render as "Unassigned" in reports.
"""

from datetime import date
from typing import Callable, Optional, Sequence, Union

from pydantic import ValidationError as SchemaError

from chitledger.ledger.errors import GroupNotFound, ValidationError
from chitledger.models.chit import (
    Group,
    GroupStatus,
    find_group,
    find_group_by_name,
    generate_id,
)


def create_group(
    groups: Sequence[Group],
    name: str,
    total_value: int,
    total_months: int,
    regular_installment: int,
    prized_installment: int,
    start_date: date,
    member_count: Optional[int] = None,
    status: Union[GroupStatus, str] = GroupStatus.ACTIVE,
    upi_id: Optional[str] = None,
    *,
    id_factory: Callable[[], str] = generate_id,
) -> list[Group]:
    """
    Set up a new group and append it to the collection.

    Capacity defaults to the number of months; the end date and the
    allotment day are derived from the start date.

    Raises:
        ValidationError: missing financial parameters, bad values, or a
            name already used by another group
    """
    if not name or not name.strip():
        raise ValidationError("Group name is required")
    if not regular_installment or not prized_installment:
        raise ValidationError("Regular and prized installments are required")
    if find_group_by_name(groups, name) is not None:
        raise ValidationError(f"A group named '{name.strip()}' already exists")

    try:
        group = Group(
            id=id_factory(),
            name=name,
            total_value=total_value,
            total_months=total_months,
            member_count=member_count or None,
            regular_installment=regular_installment,
            prized_installment=prized_installment,
            start_date=start_date,
            status=status,
            upi_id=upi_id,
        )
    except SchemaError as e:
        raise ValidationError(str(e)) from e

    return [*groups, group]


def set_group_status(
    groups: Sequence[Group],
    group_id: str,
    status: Union[GroupStatus, str],
) -> list[Group]:
    """
    Change a group's lifecycle status; the only mutation groups allow.

    Raises:
        GroupNotFound: no group with this id
        ValidationError: unknown status
    """
    group = find_group(groups, group_id)
    if group is None:
        raise GroupNotFound(f"No group with id {group_id}")
    try:
        new_status = GroupStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown group status: {status!r}")

    updated = group.model_copy(update={"status": new_status})
    return [updated if g.id == group_id else g for g in groups]


def delete_group(groups: Sequence[Group], group_id: str) -> list[Group]:
    """
    Remove a group. Linked members and payments are left orphaned.

    Raises:
        GroupNotFound: no group with this id
    """
    if find_group(groups, group_id) is None:
        raise GroupNotFound(f"No group with id {group_id}")
    return [g for g in groups if g.id != group_id]
