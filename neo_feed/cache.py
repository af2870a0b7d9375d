import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple


class TTLCache:
    """Process-wide memo keyed by request parameters.

    Entries older than ``ttl`` seconds are ignored on read and overwritten on
    the next ``set``. Stale entries are only dropped when the cache is full
    and room is needed for a new key; after that the oldest entry goes.
    """

    def __init__(
        self,
        ttl: float,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self.clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}

    def _is_fresh(self, stored_at: float) -> bool:
        return self.clock() - stored_at < self.ttl

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if not self._is_fresh(stored_at):
            return None
        return value

    def set(self, key: Hashable, value: Any) -> None:
        # re-insert so dict order stays oldest-first
        self._entries.pop(key, None)
        if len(self._entries) >= self.max_entries:
            self._make_room()
        self._entries[key] = (self.clock(), value)

    def _make_room(self) -> None:
        stale = [k for k, (stored_at, _) in self._entries.items() if not self._is_fresh(stored_at)]
        for key in stale:
            del self._entries[key]
        while len(self._entries) >= self.max_entries:
            del self._entries[next(iter(self._entries))]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
