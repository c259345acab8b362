"""
Ledger Consistency Engine

Records installment payments under a strict full-settlement policy.

GUARANTEES:
- At most one payment per (member, month). Saving again for the same
  pair updates the existing record (same id, same receipt number).
- The amount saved equals the amount due at save time. Partial and
  over-payments are rejected, never tracked.
- The input collection is never modified; a new list is returned.

The engine performs no I/O. Callers observe the outcome through the
return value or the raised LedgerError.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Sequence, Union

from chitledger.ledger.errors import (
    AlreadySettled,
    AmountMismatch,
    InvalidAmount,
    ValidationError,
)
from chitledger.ledger.installments import expected_amount
from chitledger.models.chit import (
    Group,
    Member,
    Payment,
    PaymentMode,
    generate_id,
)


AmountInput = Union[None, str, int, float, Decimal]


def resolve_amount(amount_entered: AmountInput, expected: int) -> Decimal:
    """
    Turn the operator's amount field into a number.

    An empty field means "collect the amount due".

    Raises:
        InvalidAmount: if the field is not a number
    """
    if amount_entered is None:
        return Decimal(expected)
    if isinstance(amount_entered, str):
        if not amount_entered.strip():
            return Decimal(expected)
        raw = amount_entered.strip().replace(",", "")
    elif isinstance(amount_entered, bool):
        raise InvalidAmount(f"Enter a valid amount, got {amount_entered!r}")
    else:
        raw = str(amount_entered)

    try:
        amount = Decimal(raw)
    except InvalidOperation:
        raise InvalidAmount(f"Enter a valid amount, got {amount_entered!r}")

    if not amount.is_finite():
        raise InvalidAmount(f"Enter a valid amount, got {amount_entered!r}")
    return amount


def make_receipt_number(prefix: str, now: datetime) -> str:
    """Receipt number from the last six digits of the epoch milliseconds."""
    millis = int(now.timestamp() * 1000)
    return f"{prefix}-{str(millis)[-6:]}"


def record_payment(
    payments: Sequence[Payment],
    member: Member,
    group: Group,
    month: int,
    amount_entered: AmountInput = None,
    mode: Union[PaymentMode, str] = PaymentMode.CASH,
    payment_date: Optional[date] = None,
    remarks: str = "",
    transaction_ref: Optional[str] = None,
    *,
    receipt_prefix: str = "GTS",
    clock: Callable[[], datetime] = datetime.now,
    id_factory: Callable[[], str] = generate_id,
) -> list[Payment]:
    """
    Record the installment of `member` for `month`.

    Returns:
        The full updated payment collection

    Raises:
        ValidationError: month out of range, unknown mode, or member not in group
        AlreadySettled: the month is already paid in full
        InvalidAmount: the amount is not a positive number
        AmountMismatch: the amount is not exactly the amount due
    """
    if member.group_id != group.id:
        raise ValidationError(
            f"Member {member.name} does not belong to group {group.name}"
        )

    try:
        payment_mode = PaymentMode(mode)
    except ValueError:
        raise ValidationError(f"Unknown payment mode: {mode!r}")

    expected = expected_amount(group, member, month)
    if month > group.total_months:
        raise ValidationError(
            f"Month {month} is beyond the group's {group.total_months} months"
        )

    existing_idx = next(
        (
            i for i, p in enumerate(payments)
            if p.member_id == member.id and p.month_number == month
        ),
        None,
    )
    existing = payments[existing_idx] if existing_idx is not None else None

    if existing is not None and existing.amount_paid >= expected:
        raise AlreadySettled(member.id, month)

    amount = resolve_amount(amount_entered, expected)

    if amount <= 0:
        raise InvalidAmount("Enter a valid amount greater than zero")

    if amount != expected:
        raise AmountMismatch(amount, expected)

    now = clock()
    record = Payment(
        id=existing.id if existing else id_factory(),
        member_id=member.id,
        group_id=group.id,
        month_number=month,
        amount_paid=int(amount),
        expected_amount=expected,
        payment_date=payment_date or now.date(),
        payment_mode=payment_mode,
        receipt_number=(
            existing.receipt_number if existing
            else make_receipt_number(receipt_prefix, now)
        ),
        remarks=remarks or "",
        transaction_ref=transaction_ref or None,
    )

    if existing_idx is not None:
        return [record if i == existing_idx else p for i, p in enumerate(payments)]
    return [*payments, record]
