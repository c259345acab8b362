from typing import Optional

from chitledger.config.settings import StorageSettings, get_settings
from chitledger.services.storage.backup import (
    backup_filename,
    export_backup,
    parse_backup,
    render_backup,
    restore,
)
from chitledger.services.storage.interface import (
    KeyValueAdapter,
    MalformedImport,
    StorageError,
    StorageQuotaExceeded,
)
from chitledger.services.storage.json_file import JsonFileKeyValueAdapter
from chitledger.services.storage.memory import InMemoryKeyValueAdapter
from chitledger.services.storage.store import LedgerStore, needs_backup


def create_adapter(settings: Optional[StorageSettings] = None) -> KeyValueAdapter:
    """Build the configured storage backend."""
    settings = settings or get_settings().storage
    if settings.backend == "memory":
        return InMemoryKeyValueAdapter()
    return JsonFileKeyValueAdapter(
        settings.data_file,
        retry_attempts=settings.retry_attempts,
    )


__all__ = [
    "InMemoryKeyValueAdapter",
    "JsonFileKeyValueAdapter",
    "KeyValueAdapter",
    "LedgerStore",
    "MalformedImport",
    "StorageError",
    "StorageQuotaExceeded",
    "backup_filename",
    "create_adapter",
    "export_backup",
    "needs_backup",
    "parse_backup",
    "render_backup",
    "restore",
]
