import threading
import time
from collections import OrderedDict
from typing import Callable, Protocol

from src.models.status import StatusRecord


class StatusStore(Protocol):
    def get(self, key: str) -> StatusRecord | None: ...

    def set(self, key: str, record: StatusRecord) -> None: ...


class InMemoryStatusStore:
    """Process-local status cache with a TTL and a size cap.

    Writes replace the whole record (last writer wins). Expired entries are
    dropped lazily on access; when full, the least recently written entry
    is evicted.
    """

    def __init__(
        self,
        ttl_seconds: float | None = 86400,
        max_entries: int | None = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._records: OrderedDict[str, tuple[float, StatusRecord]] = OrderedDict()
        self._lock = threading.Lock()

    def _expired(self, written_at: float, now: float) -> bool:
        return self._ttl is not None and now - written_at > self._ttl

    def _prune(self, now: float) -> None:
        while self._records:
            key, (written_at, _) = next(iter(self._records.items()))
            if not self._expired(written_at, now):
                break
            del self._records[key]

    def set(self, key: str, record: StatusRecord) -> None:
        with self._lock:
            now = self._clock()
            self._records.pop(key, None)
            self._records[key] = (now, record)
            self._prune(now)
            if self._max_entries is not None:
                while len(self._records) > self._max_entries:
                    self._records.popitem(last=False)

    def get(self, key: str) -> StatusRecord | None:
        with self._lock:
            now = self._clock()
            self._prune(now)
            entry = self._records.get(key)
            if entry is not None:
                return entry[1]
            # fall back to the merchant-side id carried by the gateway
            for _, record in self._records.values():
                if record.custom_id is not None and record.custom_id == key:
                    return record
            return None

    def __len__(self) -> int:
        with self._lock:
            self._prune(self._clock())
            return len(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
