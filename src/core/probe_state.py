import asyncio
import logging
import time
from typing import Callable, List, Optional

from contracts.probe_status import CompletedProbe, ProbeStage, ProbeStatus
from core.completed_probe_buffer import CompletedProbeBuffer
from core.profiler import Profiler
from core.ring_store import RingStore

logger = logging.getLogger(__name__)


class ProbeStateStore:
    """
    In-flight probe states and recently completed probes.

    Both stores sit behind one lock so a probe is never visible in both, or in
    neither, while it moves from in-flight to completed.
    """

    def __init__(
        self,
        max_current: int = 100,
        completed_max_entries: int = 50,
        completed_retention_seconds: float = 5.0,
        clock: Callable[[], float] = time.time,
    ):
        self._current = RingStore(max_entries=max_current)
        self._completed = CompletedProbeBuffer(
            max_entries=completed_max_entries,
            retention_seconds=completed_retention_seconds,
            clock=clock,
        )
        self._lock = asyncio.Lock()

    @Profiler.profile
    async def set_stage(self, host: str, stage: ProbeStage) -> bool:
        """
        Move a host to a new non-terminal stage, creating its entry if needed.

        Returns:
            bool: False if the transition would go backwards and was ignored.
        """
        async with self._lock:
            existing: Optional[ProbeStatus] = self._current.get(host)
            if existing is not None and ProbeStage(existing.stage).rank > stage.rank:
                logger.debug(
                    f"Ignoring stage regression for {host}: {existing.stage} -> {stage.value}"
                )
                return False
            evicted = self._current.put(host, ProbeStatus(host=host, stage=stage))
            if evicted is not None:
                logger.debug(f"Evicted oldest tracked probe {evicted} to admit {host}")
            return True

    @Profiler.profile
    async def record_result(
        self, host: str, rtt_ms: Optional[float] = None, error: Optional[str] = None
    ) -> CompletedProbe:
        """
        Record the final outcome of a probe and retire it from the in-flight store.
        """
        if error is not None:
            final = ProbeStatus(host=host, stage=ProbeStage.FAILED, error=error)
        else:
            final = ProbeStatus(host=host, stage=ProbeStage.DONE, rtt_ms=int(rtt_ms or 0))
        async with self._lock:
            completed = self._completed.append(final)
            self._current.delete(host)
        return completed

    async def current_probes(self) -> List[ProbeStatus]:
        async with self._lock:
            return [p.model_copy() for p in self._current.snapshot()]

    async def recent_completed(self) -> List[ProbeStatus]:
        async with self._lock:
            return self._completed.recent_probes()

    async def recent_completed_with_time(self) -> List[dict]:
        async with self._lock:
            return [cp.as_dict() for cp in self._completed.recent()]

    async def prune_completed(self) -> int:
        async with self._lock:
            return self._completed.prune()

    async def run_pruner(self, shutdown: asyncio.Event, interval: float = 1.0):
        """
        Periodically drop expired completed probes until `shutdown` is set.
        """
        while not shutdown.is_set():
            try:
                await asyncio.wait_for(shutdown.wait(), timeout=interval)
            except asyncio.TimeoutError:
                removed = await self.prune_completed()
                if removed:
                    logger.debug(f"Pruned {removed} completed probes")
