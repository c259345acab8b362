"""
Ledger Error Taxonomy

Every error here is recoverable: it blocks the action that raised it,
leaves prior state untouched, and is shown to the operator as a message.

Each class carries a stable `code` that flows and audit events use.
"""


class ChitLedgerError(Exception):
    """Base exception for everything the ledger reports to the operator."""
    code = "error"


class LedgerError(ChitLedgerError):
    """A business rule blocked the action."""
    code = "ledger_error"


class ValidationError(LedgerError):
    """Missing required field or invalid value."""
    code = "validation_error"


class InvalidAmount(ValidationError):
    """Entered amount is not a positive number."""
    code = "invalid_amount"


class MemberNotFound(ValidationError):
    """No member with the given id."""
    code = "member_not_found"


class GroupNotFound(ValidationError):
    """No group with the given id."""
    code = "group_not_found"


class CapacityExceeded(LedgerError):
    """Enrollment would take a group over its declared capacity."""
    code = "capacity_exceeded"

    def __init__(self, group_name: str, current: int, capacity: int):
        self.group_name = group_name
        self.current = current
        self.capacity = capacity
        super().__init__(
            f"Enrollment for '{group_name}' is blocked: "
            f"capacity {current}/{capacity} reached"
        )


class AlreadySettled(LedgerError):
    """The installment for this member and month is already paid in full."""
    code = "already_settled"

    def __init__(self, member_id: str, month: int):
        self.member_id = member_id
        self.month = month
        super().__init__(f"Installment for month {month} is already settled")


class AmountMismatch(LedgerError):
    """Entered amount differs from the exact amount due."""
    code = "amount_mismatch"

    def __init__(self, entered, expected: int):
        self.entered = entered
        self.expected = expected
        super().__init__(
            f"Please collect exactly {expected}; {entered} was entered"
        )


class AlreadyPrized(LedgerError):
    """The member has already won the prize; allotment is one-way."""
    code = "already_prized"

    def __init__(self, member_id: str, prized_month):
        self.member_id = member_id
        self.prized_month = prized_month
        super().__init__(
            f"Member already received the prize in month {prized_month}"
        )


class StorageError(ChitLedgerError):
    """Base exception for storage operations."""
    code = "storage_error"


class StorageQuotaExceeded(StorageError):
    """The underlying store has no room for the write."""
    code = "storage_quota_exceeded"


class MalformedImport(StorageError):
    """A backup file does not have the expected shape."""
    code = "malformed_import"
