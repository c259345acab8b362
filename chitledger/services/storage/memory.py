"""In-memory key-value backend, used by tests and the 'memory' setting."""

from typing import Mapping, Optional

from chitledger.services.storage.interface import (
    KeyValueAdapter,
    StorageQuotaExceeded,
)


class InMemoryKeyValueAdapter(KeyValueAdapter):
    """
    Dict-backed store.

    quota_bytes, when set, caps the total UTF-8 size of keys plus values,
    which is how a full browser store behaves.
    """

    def __init__(
        self,
        initial: Optional[Mapping[str, str]] = None,
        quota_bytes: Optional[int] = None,
    ):
        self._data: dict[str, str] = dict(initial or {})
        self._quota_bytes = quota_bytes

    @staticmethod
    def _size(data: Mapping[str, str]) -> int:
        return sum(len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in data.items())

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_many(self, items: Mapping[str, str]) -> None:
        candidate = {**self._data, **items}
        if self._quota_bytes is not None and self._size(candidate) > self._quota_bytes:
            raise StorageQuotaExceeded(
                f"Write of {len(items)} keys exceeds the {self._quota_bytes} byte quota"
            )
        self._data = candidate

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def snapshot(self) -> dict[str, str]:
        """Copy of the raw stored strings."""
        return dict(self._data)
