import asyncio
import logging
from typing import List, Optional

from abstractions.probe_executor import ProbeExecutor
from contracts.probe_outcome import ProbeOutcome
from contracts.probe_status import ProbeStage
from core.metrics_manager import MetricsManager
from core.probe_state import ProbeStateStore
from core.profiler import Profiler

logger = logging.getLogger(__name__)

# Hard ceiling on workers regardless of configuration
SAFETY_MAX_WORKERS = 500


class ProbeDispatcher:
    """
    Probes a list of hosts with a bounded pool of workers.

    A fresh pool is spawned for every call to `dispatch`; workers pull hosts
    from a shared queue until it is empty and report outcomes on a result
    queue that is drained only after every worker has exited.
    """

    def __init__(
        self,
        probe_state: ProbeStateStore,
        probe_executor: ProbeExecutor,
        shutdown: Optional[asyncio.Event] = None,
        pacing_base_ms: int = 10,
        pacing_spread: int = 10,
        metrics: Optional[MetricsManager] = None,
    ):
        self.probe_state = probe_state
        self.probe_executor = probe_executor
        self.shutdown = shutdown or asyncio.Event()
        self.metrics = metrics
        self.set_pacing(pacing_base_ms, pacing_spread)

    def set_pacing(self, base_ms: int, spread: int):
        """Applies from the next `dispatch` on."""
        self.pacing_base_ms = base_ms
        self.pacing_spread = max(1, spread)

    def pacing_delay(self, worker_idx: int) -> float:
        """Seconds a worker waits between jobs; staggered by worker index."""
        return (self.pacing_base_ms + worker_idx % self.pacing_spread) / 1000.0

    @Profiler.profile
    async def dispatch(self, hosts: List[str], timeout: float, worker_cap: int) -> List[ProbeOutcome]:
        """
        Probe every host once.

        Args:
            hosts (List[str]): Hosts to probe; must not be empty.
            timeout (float): Per-attempt probe timeout in seconds.
            worker_cap (int): Current adaptive worker cap.

        Returns:
            List[ProbeOutcome]: Exactly one outcome per host; order not significant.
        """
        if not hosts:
            raise ValueError("no hosts to measure")

        workers = min(max(worker_cap, 1), SAFETY_MAX_WORKERS, len(hosts))
        logger.debug(f"Measuring RTT using TCP for {len(hosts)} hosts with {workers} workers")

        jobs = asyncio.Queue(maxsize=len(hosts))
        results = asyncio.Queue(maxsize=len(hosts))
        for host in hosts:
            await self.probe_state.set_stage(host, ProbeStage.QUEUED)
            jobs.put_nowait(host)

        await asyncio.gather(
            *(self._worker(idx, jobs, results, timeout) for idx in range(workers))
        )

        # Hosts never claimed because of shutdown still get an outcome
        while not jobs.empty():
            host = jobs.get_nowait()
            await self.probe_state.record_result(host, error="probe cancelled")
            results.put_nowait(ProbeOutcome(host=host, error="probe cancelled"))

        outcomes = []
        while not results.empty():
            outcomes.append(results.get_nowait())
        return outcomes

    async def _worker(self, worker_idx: int, jobs: asyncio.Queue, results: asyncio.Queue, timeout: float):
        while not self.shutdown.is_set():
            try:
                host = jobs.get_nowait()
            except asyncio.QueueEmpty:
                return

            await self.probe_state.set_stage(host, ProbeStage.PROBING)
            outcome = await self._probe(host, timeout)
            if outcome.ok:
                await self.probe_state.record_result(host, rtt_ms=outcome.rtt_ms)
            else:
                await self.probe_state.record_result(host, error=outcome.error)
            results.put_nowait(outcome)

            await asyncio.sleep(self.pacing_delay(worker_idx))

    async def _probe(self, host: str, timeout: float) -> ProbeOutcome:
        try:
            elapsed = await self.probe_executor.probe(host, timeout)
        except Exception as e:
            logger.debug(f"Probe failed for {host}: {e}")
            if self.metrics:
                self.metrics.probe_failed()
            return ProbeOutcome(host=host, error=str(e) or e.__class__.__name__)
        if self.metrics:
            self.metrics.observe_probe(elapsed)
        return ProbeOutcome(host=host, rtt_ms=elapsed * 1000.0)
