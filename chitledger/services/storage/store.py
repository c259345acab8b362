"""
Ledger Store

Holds the three entity collections, the two change-tracking timestamps
and the operator preferences, on top of a KeyValueAdapter.

DESIGN DECISION: The store is an explicit object handed to whoever needs
it. There is no module-level instance.

CHANGE TRACKING:
- Every collection write stamps last_change in the same adapter call.
- A backup stamps last_backup.
- needs_backup is computed from those two stamps on every read; it is
  never stored.

Loading never raises. Missing keys, unreadable JSON, or records that no
longer validate degrade to empty (or shorter) collections with a warning.
"""

import json
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence, TypeVar

import structlog
from dateutil.parser import isoparse
from pydantic import BaseModel, ValidationError as SchemaError

from chitledger.models.chit import Group, Member, Payment
from chitledger.models.results import BackupDocument
from chitledger.services.storage.interface import KeyValueAdapter, StorageError


logger = structlog.get_logger(__name__)

GROUPS_KEY = "gts_chits_groups"
MEMBERS_KEY = "gts_chits_members"
PAYMENTS_KEY = "gts_chits_payments"
LAST_BACKUP_KEY = "gts_chits_last_backup"
LAST_CHANGE_KEY = "gts_chits_last_change"
UPI_KEY = "gts_chits_upi"
WHATSAPP_WEB_KEY = "gts_chits_wa_web"

ALL_KEYS = (
    GROUPS_KEY,
    MEMBERS_KEY,
    PAYMENTS_KEY,
    LAST_BACKUP_KEY,
    LAST_CHANGE_KEY,
    UPI_KEY,
    WHATSAPP_WEB_KEY,
)

EntityT = TypeVar("EntityT", bound=BaseModel)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def needs_backup(
    last_backup: Optional[datetime],
    last_change: Optional[datetime],
    has_data: bool,
) -> bool:
    """
    Whether the stored data has changed since the last export.

    Never exported: stale as soon as there is any data.
    Otherwise: stale when the last change is newer than the last backup.
    """
    if last_backup is None:
        return has_data
    if last_change is None:
        return False
    return last_change > last_backup


def _serialize(records: Sequence[BaseModel]) -> str:
    return json.dumps([r.to_record() for r in records], ensure_ascii=False)


class LedgerStore:
    """
    The application's persisted state.

    Collections are read through properties (copies) and replaced through
    the save_* methods. A failed write raises StorageError (or
    StorageQuotaExceeded) and leaves the in-memory state as it was.
    """

    def __init__(
        self,
        adapter: KeyValueAdapter,
        clock: Callable[[], datetime] = utc_now,
        default_upi_id: str = "",
        default_whatsapp_web: bool = False,
    ):
        self._adapter = adapter
        self._clock = clock
        self._default_upi_id = default_upi_id
        self._default_whatsapp_web = default_whatsapp_web

        self._groups: list[Group] = []
        self._members: list[Member] = []
        self._payments: list[Payment] = []
        self._last_backup: Optional[datetime] = None
        self._last_change: Optional[datetime] = None
        self._upi_id = default_upi_id
        self._whatsapp_web = default_whatsapp_web

        self.load()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _read(self, key: str) -> Optional[str]:
        try:
            return self._adapter.get(key)
        except StorageError as e:
            logger.warning("store_read_failed", key=key, error=str(e))
            return None

    def _load_collection(self, key: str, model: type[EntityT]) -> list[EntityT]:
        raw = self._read(key)
        if not raw:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("store_key_malformed", key=key, error=str(e))
            return []

        if not isinstance(data, list):
            logger.warning("store_key_malformed", key=key, error="not a list")
            return []

        records = []
        for index, item in enumerate(data):
            try:
                records.append(model.model_validate(item))
            except SchemaError as e:
                logger.warning(
                    "store_record_dropped",
                    key=key,
                    index=index,
                    error=str(e.errors()[0]["msg"]) if e.errors() else str(e),
                )
        return records

    def _load_timestamp(self, key: str) -> Optional[datetime]:
        raw = self._read(key)
        if not raw:
            return None
        try:
            return _as_utc(isoparse(raw))
        except (ValueError, OverflowError):
            logger.warning("store_timestamp_malformed", key=key, value=raw)
            return None

    def load(self) -> None:
        """(Re)load everything from the adapter. Never raises."""
        self._groups = self._load_collection(GROUPS_KEY, Group)
        self._members = self._load_collection(MEMBERS_KEY, Member)
        self._payments = self._load_collection(PAYMENTS_KEY, Payment)
        self._last_backup = self._load_timestamp(LAST_BACKUP_KEY)
        self._last_change = self._load_timestamp(LAST_CHANGE_KEY)

        upi = self._read(UPI_KEY)
        self._upi_id = upi if upi is not None else self._default_upi_id
        wa_web = self._read(WHATSAPP_WEB_KEY)
        self._whatsapp_web = (
            wa_web == "true" if wa_web is not None else self._default_whatsapp_web
        )

    # -------------------------------------------------------------------------
    # Collections
    # -------------------------------------------------------------------------

    @property
    def groups(self) -> list[Group]:
        return list(self._groups)

    @property
    def members(self) -> list[Member]:
        return list(self._members)

    @property
    def payments(self) -> list[Payment]:
        return list(self._payments)

    @property
    def is_empty(self) -> bool:
        return not (self._groups or self._members or self._payments)

    def _now(self) -> datetime:
        return _as_utc(self._clock())

    def now(self) -> datetime:
        """Current time from the store's clock (UTC)."""
        return self._now()

    def _write_collections(self, items: dict[str, str]) -> datetime:
        changed_at = self._now()
        self._adapter.set_many({**items, LAST_CHANGE_KEY: changed_at.isoformat()})
        self._last_change = changed_at
        return changed_at

    def save_groups(self, groups: Sequence[Group]) -> None:
        self._write_collections({GROUPS_KEY: _serialize(groups)})
        self._groups = list(groups)

    def save_members(self, members: Sequence[Member]) -> None:
        self._write_collections({MEMBERS_KEY: _serialize(members)})
        self._members = list(members)

    def save_payments(self, payments: Sequence[Payment]) -> None:
        self._write_collections({PAYMENTS_KEY: _serialize(payments)})
        self._payments = list(payments)

    def replace_all(
        self,
        groups: Sequence[Group],
        members: Sequence[Member],
        payments: Sequence[Payment],
    ) -> None:
        """Overwrite all three collections in one write (restore)."""
        self._write_collections({
            GROUPS_KEY: _serialize(groups),
            MEMBERS_KEY: _serialize(members),
            PAYMENTS_KEY: _serialize(payments),
        })
        self._groups = list(groups)
        self._members = list(members)
        self._payments = list(payments)

    def snapshot(self) -> BackupDocument:
        """All three collections as a backup document."""
        return BackupDocument(
            groups=self.groups,
            members=self.members,
            payments=self.payments,
        )

    def wipe(self) -> None:
        """Delete every stored key and reset to the configured defaults."""
        self._adapter.clear()
        self._groups = []
        self._members = []
        self._payments = []
        self._last_backup = None
        self._last_change = None
        self._upi_id = self._default_upi_id
        self._whatsapp_web = self._default_whatsapp_web

    # -------------------------------------------------------------------------
    # Change tracking
    # -------------------------------------------------------------------------

    @property
    def last_backup(self) -> Optional[datetime]:
        return self._last_backup

    @property
    def last_change(self) -> Optional[datetime]:
        return self._last_change

    def mark_backup(self) -> datetime:
        """Record that a full export just completed."""
        backed_up_at = self._now()
        self._adapter.set(LAST_BACKUP_KEY, backed_up_at.isoformat())
        self._last_backup = backed_up_at
        return backed_up_at

    @property
    def needs_backup(self) -> bool:
        return needs_backup(self._last_backup, self._last_change, not self.is_empty)

    # -------------------------------------------------------------------------
    # Preferences (do not count as data changes)
    # -------------------------------------------------------------------------

    @property
    def upi_id(self) -> str:
        return self._upi_id

    def set_upi_id(self, upi_id: str) -> None:
        value = upi_id.strip()
        self._adapter.set(UPI_KEY, value)
        self._upi_id = value

    @property
    def whatsapp_use_web(self) -> bool:
        return self._whatsapp_web

    def set_whatsapp_use_web(self, enabled: bool) -> None:
        self._adapter.set(WHATSAPP_WEB_KEY, "true" if enabled else "false")
        self._whatsapp_web = enabled

    def collection_vpa(self, group: Optional[Group] = None) -> str:
        """Group VPA when set, otherwise the global one."""
        if group is not None and group.upi_id:
            return group.upi_id
        return self._upi_id
