"""
Capacity / Enrollment Guard

A group never holds more members than its declared capacity
(member_count), whether subscribers are added one at a time or in a
batch import.

BATCH ADMISSION: rows are admitted greedily in input order. A running
per-group counter starts at the current enrollment and grows with each
accepted row; once a group is full every later row for it is dropped.
No reordering, no look-ahead.
"""

from collections import Counter
from datetime import date, datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from pydantic import ValidationError as SchemaError

from chitledger.ledger.errors import (
    CapacityExceeded,
    GroupNotFound,
    MemberNotFound,
    ValidationError,
)
from chitledger.models.chit import (
    Group,
    Member,
    MemberDraft,
    clean_phone_number,
    find_group,
    find_group_by_name,
    generate_id,
    members_of_group,
)
from chitledger.models.results import BulkImportResult, RowRejection


# Header aliases accepted by the bulk import, in priority order.
NAME_COLUMNS = ("name", "member name", "subscriber name", "candidate name", "full name")
PHONE_COLUMNS = ("phone", "mobile", "phone number", "mobile number", "contact", "contact number")
GROUP_COLUMNS = ("group", "group name", "chit group", "chit name", "portfolio")
ADDRESS_COLUMNS = ("address",)
EMAIL_COLUMNS = ("email", "e-mail", "email id")
NOMINEE_NAME_COLUMNS = ("nominee", "nominee name")
NOMINEE_RELATION_COLUMNS = ("nominee relation", "relation")
JOINING_DATE_COLUMNS = ("joining date", "join date", "date of joining")


def can_enroll(group: Group, current_count: int) -> bool:
    """True while the group has a free slot."""
    return current_count < group.member_count


def enroll_member(
    members: Sequence[Member],
    groups: Sequence[Group],
    draft: MemberDraft,
    *,
    today: Optional[date] = None,
    id_factory: Callable[[], str] = generate_id,
) -> list[Member]:
    """
    Enroll a single subscriber.

    The new member is appended at the end of the returned list.

    Raises:
        ValidationError: a mandatory field is missing or invalid
        GroupNotFound: draft.group_id does not name an existing group
        CapacityExceeded: the group is full
    """
    missing = [
        label for label, value in (
            ("name", draft.name),
            ("group", draft.group_id),
            ("phone", draft.phone),
        )
        if not value
    ]
    if missing:
        raise ValidationError(f"Mandatory fields missing: {', '.join(missing)}")

    group = find_group(groups, draft.group_id)
    if group is None:
        raise GroupNotFound(f"No group with id {draft.group_id}")

    current = len(members_of_group(members, group.id))
    if not can_enroll(group, current):
        raise CapacityExceeded(group.name, current, group.member_count)

    phone = clean_phone_number(draft.phone)
    if not phone:
        raise ValidationError("Phone number must contain digits")

    if draft.is_prized and (
        draft.prized_month is None or draft.prized_month > group.total_months
    ):
        raise ValidationError(
            f"Prized month must be between 1 and {group.total_months}"
        )

    try:
        member = Member(
            id=id_factory(),
            group_id=group.id,
            name=draft.name,
            phone=phone,
            address=draft.address,
            email=draft.email,
            id_proof_type=draft.id_proof_type,
            id_proof_number=draft.id_proof_number,
            nominee_name=draft.nominee_name,
            nominee_relation=draft.nominee_relation,
            joining_date=draft.joining_date or today or date.today(),
            is_prized=draft.is_prized,
            prized_month=draft.prized_month if draft.is_prized else None,
            status=draft.status,
        )
    except SchemaError as e:
        raise ValidationError(str(e)) from e

    return [*members, member]


# =============================================================================
# BULK IMPORT
# =============================================================================

def _cell_text(value: Any) -> str:
    """Render a spreadsheet cell as trimmed text."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        # Spreadsheet parsers hand phone numbers over as floats
        return str(int(value))
    return str(value).strip()


def _normalize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    return {str(key).strip().lower(): value for key, value in row.items()}


def pick_field(row: Mapping[str, Any], aliases: Iterable[str]) -> str:
    """First alias present in `row` with a non-empty value wins."""
    for alias in aliases:
        text = _cell_text(row.get(alias))
        if text:
            return text
    return ""


def _pick_date(row: Mapping[str, Any], aliases: Iterable[str]) -> Optional[Any]:
    for alias in aliases:
        value = row.get(alias)
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        text = _cell_text(value)
        if text:
            return text
    return None


def admit_batch(
    rows: Iterable[Mapping[str, Any]],
    groups: Sequence[Group],
    members: Sequence[Member],
    default_group_id: Optional[str] = None,
    verbose: bool = False,
    *,
    today: Optional[date] = None,
    id_factory: Callable[[], str] = generate_id,
) -> BulkImportResult:
    """
    Admit candidate rows into their groups without exceeding capacity.

    Each row names its group by name (exact, case-insensitive, trimmed).
    Rows that name no group go to `default_group_id` when one is given.
    A named group that does not exist is not replaced by the default.

    Rows missing a name or phone, with no resolvable group, or arriving
    after their group filled up are dropped. In verbose mode every dropped
    row is itemized in `rejections`; otherwise only the count is kept.
    """
    default_group = find_group(groups, default_group_id) if default_group_id else None
    enrolled = Counter(m.group_id for m in members)
    joining = today or date.today()

    accepted: list[Member] = []
    rejections: list[RowRejection] = []
    rejected_count = 0

    def reject(index: int, reason: str, detail: str = "") -> None:
        nonlocal rejected_count
        rejected_count += 1
        if verbose:
            rejections.append(RowRejection(row_index=index, reason=reason, detail=detail))

    for index, raw in enumerate(rows):
        row = _normalize_row(raw)

        name = pick_field(row, NAME_COLUMNS)
        if not name:
            reject(index, "missing_name")
            continue

        phone = clean_phone_number(pick_field(row, PHONE_COLUMNS))
        if not phone:
            reject(index, "missing_phone", name)
            continue

        group_name = pick_field(row, GROUP_COLUMNS)
        group = find_group_by_name(groups, group_name) if group_name else default_group
        if group is None:
            reject(index, "unknown_group", group_name)
            continue

        if not can_enroll(group, enrolled[group.id]):
            reject(index, "capacity_exceeded", group.name)
            continue

        try:
            member = Member(
                id=id_factory(),
                group_id=group.id,
                name=name,
                phone=phone,
                address=pick_field(row, ADDRESS_COLUMNS),
                email=pick_field(row, EMAIL_COLUMNS),
                nominee_name=pick_field(row, NOMINEE_NAME_COLUMNS),
                nominee_relation=pick_field(row, NOMINEE_RELATION_COLUMNS),
                joining_date=_pick_date(row, JOINING_DATE_COLUMNS) or joining,
            )
        except SchemaError as e:
            reject(index, "invalid_row", str(e.errors()[0]["msg"]))
            continue

        accepted.append(member)
        enrolled[group.id] += 1

    return BulkImportResult(
        accepted=accepted,
        rejected_count=rejected_count,
        rejections=rejections,
    )


def delete_member(members: Sequence[Member], member_id: str) -> list[Member]:
    """
    Remove a member. Their payments stay in the ledger.

    Raises:
        MemberNotFound: no member with this id
    """
    if not any(m.id == member_id for m in members):
        raise MemberNotFound(f"No member with id {member_id}")
    return [m for m in members if m.id != member_id]
