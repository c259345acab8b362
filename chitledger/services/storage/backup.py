"""
Full-database export and restore.

An export is a pretty-printed JSON object with exactly three arrays:
groups, members and payments. Restore is all-or-nothing: the document is
parsed and validated completely before anything in the store is touched.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import ValidationError as SchemaError

from chitledger.models.results import BackupDocument
from chitledger.services.storage.interface import MalformedImport, StorageError
from chitledger.services.storage.store import LedgerStore


logger = structlog.get_logger(__name__)

DEFAULT_BACKUP_PREFIX = "GTS_DATABASE"
BACKUP_SECTIONS = ("groups", "members", "payments")


def backup_filename(prefix: str, on: date) -> str:
    return f"{prefix}_{on.isoformat()}.json"


def render_backup(document: BackupDocument) -> str:
    return json.dumps(document.to_payload(), indent=2, ensure_ascii=False)


def export_backup(
    store: LedgerStore,
    prefix: str = DEFAULT_BACKUP_PREFIX,
    destination_dir: Optional[Union[str, Path]] = None,
) -> tuple[str, str]:
    """
    Serialize every collection and stamp last_backup.

    When destination_dir is given the file is written there first; the
    backup is only recorded once the write succeeded.

    Returns:
        (filename, json_text)
    """
    filename = backup_filename(prefix, store.now().date())
    text = render_backup(store.snapshot())

    if destination_dir is not None:
        target = Path(destination_dir) / filename
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot write backup file {target}: {e}") from e

    store.mark_backup()
    return filename, text


def parse_backup(text: Union[str, bytes]) -> BackupDocument:
    """
    Parse and validate an export.

    Raises:
        MalformedImport: not JSON, not an object, a section missing or not
            an array, or any record failing validation
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedImport(f"Backup is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedImport("Backup must be a JSON object")

    missing = [s for s in BACKUP_SECTIONS if not isinstance(data.get(s), list)]
    if missing:
        raise MalformedImport(
            f"Backup is missing required arrays: {', '.join(missing)}"
        )

    try:
        return BackupDocument.model_validate(
            {section: data[section] for section in BACKUP_SECTIONS}
        )
    except SchemaError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise MalformedImport(
            f"Backup contains an invalid record at {location}: {first['msg']}"
        ) from e


def restore(store: LedgerStore, document: BackupDocument) -> None:
    """Replace all three collections with the document's contents."""
    store.replace_all(document.groups, document.members, document.payments)
    logger.info(
        "store_restored",
        groups=len(document.groups),
        members=len(document.members),
        payments=len(document.payments),
    )
