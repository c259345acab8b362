"""Services package."""

from chitledger.services.storage import (
    InMemoryKeyValueAdapter,
    JsonFileKeyValueAdapter,
    KeyValueAdapter,
    LedgerStore,
    MalformedImport,
    StorageError,
    StorageQuotaExceeded,
    create_adapter,
    export_backup,
    parse_backup,
    restore,
)

__all__ = [
    # Storage backends
    "InMemoryKeyValueAdapter",
    "JsonFileKeyValueAdapter",
    "KeyValueAdapter",
    "create_adapter",
    # Ledger store
    "LedgerStore",
    "export_backup",
    "parse_backup",
    "restore",
    # Errors
    "MalformedImport",
    "StorageError",
    "StorageQuotaExceeded",
]
