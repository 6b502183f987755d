import time
from collections import deque
from typing import Callable, List

from contracts.probe_status import CompletedProbe, ProbeStatus


class CompletedProbeBuffer:
    """
    Recently finished probes, bounded by count and by age.

    The count bound is enforced on every append; the age bound on every read
    and by `prune`, which the owner runs periodically.
    """

    def __init__(
        self,
        max_entries: int = 50,
        retention_seconds: float = 5.0,
        clock: Callable[[], float] = time.time,
    ):
        self.max_entries = max_entries
        self.retention_seconds = retention_seconds
        self._clock = clock
        self._entries = deque(maxlen=max_entries if max_entries > 0 else None)

    def __len__(self):
        return len(self._entries)

    def append(self, probe: ProbeStatus) -> CompletedProbe:
        completed = CompletedProbe(probe=probe.model_copy(), when=self._clock())
        self._entries.append(completed)
        return completed

    def _cutoff(self) -> float:
        return self._clock() - self.retention_seconds

    def recent(self) -> List[CompletedProbe]:
        cutoff = self._cutoff()
        out = [cp for cp in self._entries if cp.when >= cutoff]
        if self.max_entries > 0 and len(out) > self.max_entries:
            out = out[len(out) - self.max_entries:]
        return out

    def recent_probes(self) -> List[ProbeStatus]:
        return [cp.probe for cp in self.recent()]

    def prune(self) -> int:
        """
        Drop entries older than the retention window.

        Returns:
            int: Number of entries removed.
        """
        cutoff = self._cutoff()
        before = len(self._entries)
        # entries are appended in completion order, so expired ones are at the head
        while self._entries and self._entries[0].when < cutoff:
            self._entries.popleft()
        return before - len(self._entries)
