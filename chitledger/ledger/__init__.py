"""
Ledger Engines

Pure functions over the entity collections. Each takes the current
collection and returns a new one, or raises a LedgerError and changes
nothing.
"""

from chitledger.ledger.enrollment import (
    admit_batch,
    can_enroll,
    delete_member,
    enroll_member,
)
from chitledger.ledger.errors import (
    AlreadyPrized,
    AlreadySettled,
    AmountMismatch,
    CapacityExceeded,
    ChitLedgerError,
    GroupNotFound,
    InvalidAmount,
    LedgerError,
    MalformedImport,
    MemberNotFound,
    StorageError,
    StorageQuotaExceeded,
    ValidationError,
)
from chitledger.ledger.groups import create_group, delete_group, set_group_status
from chitledger.ledger.installments import (
    current_chit_month,
    expected_amount,
    forecast,
    installment_due_date,
)
from chitledger.ledger.payments import record_payment
from chitledger.ledger.prizes import allot_prize

__all__ = [
    # Engines
    "admit_batch",
    "allot_prize",
    "can_enroll",
    "create_group",
    "current_chit_month",
    "delete_group",
    "delete_member",
    "enroll_member",
    "expected_amount",
    "forecast",
    "installment_due_date",
    "record_payment",
    "set_group_status",
    # Exceptions
    "AlreadyPrized",
    "AlreadySettled",
    "AmountMismatch",
    "CapacityExceeded",
    "ChitLedgerError",
    "GroupNotFound",
    "InvalidAmount",
    "LedgerError",
    "MalformedImport",
    "MemberNotFound",
    "StorageError",
    "StorageQuotaExceeded",
    "ValidationError",
]
