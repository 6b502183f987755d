import itertools
import logging
from datetime import datetime
from typing import Iterable, List

from contracts.log_entry import LogEntry
from core.ring_store import RingStore


class ExcludeLoggersFilter(logging.Filter):
    """Rejects records from the named loggers and their children."""

    def __init__(self, names: Iterable[str] = ()):
        super().__init__()
        self.names = tuple(names)

    def filter(self, record: logging.LogRecord) -> bool:
        return not any(
            record.name == name or record.name.startswith(name + ".") for name in self.names
        )


class RecentLogHandler(logging.Handler):
    """
    Keeps the most recent log records in memory for the dashboard.

    Entries are keyed by a monotonically increasing sequence number, which is
    also their retrieval order. `logging.Handler.handle` serializes `emit`
    under the handler lock; reads take the same lock.
    """

    def __init__(self, max_entries: int = 100, level=logging.NOTSET, exclude: Iterable[str] = ()):
        super().__init__(level)
        if exclude:
            self.addFilter(ExcludeLoggersFilter(exclude))
        self._store = RingStore(max_entries=max_entries)
        self._seq = itertools.count(1)
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord):
        try:
            entry = LogEntry(
                seq=next(self._seq),
                timestamp=datetime.fromtimestamp(record.created),
                level=record.levelname,
                message=self.format(record),
            )
            self._store.put(entry.seq, entry)
        except Exception:
            self.handleError(record)

    def recent(self) -> List[LogEntry]:
        self.acquire()
        try:
            return self._store.snapshot()
        finally:
            self.release()
