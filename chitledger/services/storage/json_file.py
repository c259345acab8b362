"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON object on disk holds every key, mirroring
the browser's localStorage the ledger was first built on:
1. No database setup required
2. The operator can open the file and read it
3. One file is one atomic write (temp file + rename)

TRADEOFFS:
- The whole file is rewritten on every change (fine for one branch office)
- No concurrent writers (one operator, one process)

Transient I/O errors are retried with tenacity. A full disk is reported
as StorageQuotaExceeded straight away; retrying cannot free space.
"""

import errno
import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Mapping, Optional, Union

import structlog
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from chitledger.services.storage.interface import (
    KeyValueAdapter,
    StorageError,
    StorageQuotaExceeded,
)


logger = structlog.get_logger(__name__)

QUOTA_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC), errno.EFBIG}


def _is_quota_error(exc: BaseException) -> bool:
    return isinstance(exc, OSError) and exc.errno in QUOTA_ERRNOS


def _is_transient(exc: BaseException) -> bool:
    """OS errors worth another attempt: not quota, not permissions."""
    return (
        isinstance(exc, OSError)
        and not _is_quota_error(exc)
        and not isinstance(exc, (PermissionError, IsADirectoryError, NotADirectoryError))
    )


class JsonFileKeyValueAdapter(KeyValueAdapter):
    """
    File-backed key-value store.

    The file is read once, on first access, and cached. Writes go to a
    temp file in the same directory that then replaces the original.
    """

    def __init__(
        self,
        path: Union[str, Path],
        retry_attempts: int = 3,
    ):
        self._path = Path(path)
        self._retry_attempts = retry_attempts
        self._cache: Optional[dict[str, str]] = None

    @property
    def path(self) -> Path:
        return self._path

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        )

    def _read_file(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        for attempt in self._retrying():
            with attempt:
                text = self._path.read_text(encoding="utf-8")

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            self._quarantine(str(e))
            return {}

        if not isinstance(data, dict):
            self._quarantine("top-level value is not an object")
            return {}

        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _quarantine(self, reason: str) -> None:
        """Move an unreadable file aside so the next write cannot destroy it."""
        stamp = datetime.now().strftime("%Y%m%d%H%M%S")
        target = self._path.with_name(f"{self._path.name}.corrupt-{stamp}")
        logger.warning(
            "store_file_unreadable",
            path=str(self._path),
            moved_to=str(target),
            reason=reason,
        )
        os.replace(self._path, target)

    def _load(self) -> dict[str, str]:
        if self._cache is None:
            try:
                self._cache = self._read_file()
            except OSError as e:
                raise StorageError(f"Cannot read store file {self._path}: {e}") from e
        return self._cache

    def _write_file(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            dir=self._path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _persist(self, data: dict[str, str]) -> None:
        try:
            for attempt in self._retrying():
                with attempt:
                    self._write_file(data)
        except OSError as e:
            if _is_quota_error(e):
                raise StorageQuotaExceeded(
                    f"No space left to write {self._path}"
                ) from e
            raise StorageError(f"Cannot write store file {self._path}: {e}") from e
        self._cache = data

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_many(self, items: Mapping[str, str]) -> None:
        self._persist({**self._load(), **items})

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            self._persist({k: v for k, v in data.items() if k != key})

    def clear(self) -> None:
        self._persist({})
