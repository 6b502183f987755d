import asyncio
import logging
from typing import Optional

from abstractions.cpu_sample_source import CPUSampleSource
from algorithms.worker_cap_policy import ThresholdWorkerCapPolicy
from contracts.cpu_sample import CPUSample
from contracts.errors import CPUSampleError
from contracts.service_config import ServiceConfig
from core.metrics_manager import MetricsManager
from core.service_state import ServiceState

logger = logging.getLogger(__name__)


def cpu_utilization(previous: CPUSample, current: CPUSample) -> Optional[float]:
    """
    CPU utilization in percent between two samples, or None when the total
    counter did not advance.
    """
    d_total = current.total_ticks - previous.total_ticks
    d_idle = current.idle_ticks - previous.idle_ticks
    if d_total <= 0:
        return None
    return (1.0 - d_idle / d_total) * 100.0


class ConcurrencyController:
    """
    Background loop that retunes the probe worker cap from CPU utilization.

    Best-effort: if no initial CPU sample can be taken the controller simply
    exits; later sampling errors skip a tick. It is the only writer of the
    worker cap.

    Unless pinned at construction, the policy and the sampling interval are
    taken from the live config on every tick, so a config reload applies
    from the next tick on.
    """

    def __init__(
        self,
        state: ServiceState,
        cpu_source: CPUSampleSource,
        policy: Optional[ThresholdWorkerCapPolicy] = None,
        sample_interval: Optional[float] = None,
        shutdown: Optional[asyncio.Event] = None,
        metrics: Optional[MetricsManager] = None,
    ):
        self.state = state
        self.cpu_source = cpu_source
        self.policy = policy
        self.sample_interval = sample_interval
        self.shutdown = shutdown or asyncio.Event()
        self.metrics = metrics

    async def _interval(self) -> float:
        if self.sample_interval is not None:
            return self.sample_interval
        return (await self.state.get_config()).cpu_sample_interval

    def policy_for(self, cfg: ServiceConfig) -> ThresholdWorkerCapPolicy:
        return self.policy or ThresholdWorkerCapPolicy.from_config(cfg)

    async def _wait_tick(self) -> bool:
        """Sleep one interval; False once shutdown is requested."""
        interval = await self._interval()
        try:
            await asyncio.wait_for(self.shutdown.wait(), timeout=interval)
        except asyncio.TimeoutError:
            return True
        return False

    async def step(self, previous: CPUSample, current: CPUSample) -> Optional[int]:
        """
        Apply the policy to one pair of samples.

        Returns:
            Optional[int]: The new worker cap if it changed, else None.
        """
        usage = cpu_utilization(previous, current)
        if usage is None:
            return None

        cfg = await self.state.get_config()
        policy = self.policy_for(cfg)
        current_cap = await self.state.get_worker_cap()
        target = policy.compute_target(current_cap, cfg.max_concurrent_probes, usage)
        if target == current_cap:
            return None

        await self.state.set_worker_cap(target)
        if self.metrics:
            self.metrics.set_worker_cap(target)
        logger.info(
            f"Adaptive controller adjusted workers: {current_cap} -> {target} (cpu {usage:.1f}%)"
        )
        return target

    async def run(self):
        try:
            previous = await self.cpu_source.sample()
        except CPUSampleError as e:
            logger.info(f"Adaptive controller disabled, no CPU sample available: {e}")
            return

        if self.metrics:
            self.metrics.set_worker_cap(await self.state.get_worker_cap())

        while await self._wait_tick():
            try:
                current = await self.cpu_source.sample()
            except CPUSampleError as e:
                logger.debug(f"Skipping CPU sample: {e}")
                continue
            await self.step(previous, current)
            previous = current
