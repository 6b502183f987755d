from collections import deque
from typing import Any, Hashable, List, Optional


class RingStore:
    """
    Capacity-limited key/value store with FIFO eviction.

    The admission queue is the source of truth for eviction order and the dict
    is the value lookup; both are always updated together. Re-putting an
    existing key replaces its value without moving it in eviction order.

    Not synchronized: the owner guards it with its own lock.
    """

    def __init__(self, max_entries: int = 100, snapshot_limit: Optional[int] = None):
        """
        Args:
            max_entries (int): Maximum number of live keys; <= 0 means unbounded.
            snapshot_limit (Optional[int]): Maximum number of values returned by
                `snapshot`; defaults to `max_entries`, <= 0 means everything.
        """
        self.max_entries = max_entries
        self.snapshot_limit = max_entries if snapshot_limit is None else snapshot_limit
        self._values = {}
        self._order = deque()

    def __len__(self):
        return len(self._values)

    def __contains__(self, key):
        return key in self._values

    def get(self, key: Hashable, default: Any = None) -> Any:
        return self._values.get(key, default)

    def put(self, key: Hashable, value: Any) -> Optional[Hashable]:
        """
        Insert or update a key.

        Returns:
            The key evicted to make room, or None.
        """
        if key in self._values:
            self._values[key] = value
            return None

        evicted = None
        if self.max_entries > 0:
            while len(self._order) >= self.max_entries:
                evicted = self._order.popleft()
                del self._values[evicted]

        self._values[key] = value
        self._order.append(key)
        return evicted

    def delete(self, key: Hashable) -> bool:
        if key not in self._values:
            return False
        del self._values[key]
        # linear scan; the queue is bounded by max_entries
        self._order.remove(key)
        return True

    def clear(self):
        self._values.clear()
        self._order.clear()

    def keys(self) -> List[Hashable]:
        """Live keys in admission order."""
        return list(self._order)

    def snapshot(self) -> List[Any]:
        """
        Values sorted by key, trimmed to the trailing `snapshot_limit` window.
        """
        ordered = [self._values[key] for key in sorted(self._values)]
        if self.snapshot_limit > 0 and len(ordered) > self.snapshot_limit:
            ordered = ordered[len(ordered) - self.snapshot_limit:]
        return ordered
