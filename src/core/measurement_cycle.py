import asyncio
import logging
from typing import Optional

from abstractions.host_provider import HostProvider
from abstractions.shaping_adjuster import ShapingAdjuster
from algorithms.rtt_aggregator import RTTAggregator
from contracts.errors import HostProviderError, InsufficientDataError, ShapingAdjustmentError
from contracts.service_config import ServiceConfig
from core.metrics_manager import MetricsManager
from core.probe_dispatcher import ProbeDispatcher
from core.profiler import Profiler
from core.service_state import ServiceState

logger = logging.getLogger(__name__)


class MeasurementCycle:
    """
    Drives measure-then-adjust cycles on a fixed interval.

    Each cycle obtains the active hosts, probes them, reduces the outcomes to
    one RTT (or falls back to the configured default), adds the safety margin
    and hands the result to the shaping adjuster.
    """

    def __init__(
        self,
        state: ServiceState,
        host_provider: HostProvider,
        dispatcher: ProbeDispatcher,
        adjuster: ShapingAdjuster,
        metrics: Optional[MetricsManager] = None,
    ):
        self.state = state
        self.host_provider = host_provider
        self.dispatcher = dispatcher
        self.adjuster = adjuster
        self.metrics = metrics

    async def _record(self, kind: str, rtt_ms: float, active_hosts: Optional[int] = None):
        await self.state.record_measurement(kind, rtt_ms, active_hosts)
        if self.metrics:
            self.metrics.set_rtt(kind, rtt_ms, active_hosts)

    @Profiler.profile
    async def run_once(self) -> Optional[float]:
        """
        Run one measurement cycle.

        Returns:
            Optional[float]: The margin-adjusted RTT in ms that was applied, or
            None if the cycle was skipped.
        """
        cfg = await self.state.get_config()
        try:
            hosts = await self.host_provider.get_hosts()
        except HostProviderError as e:
            logger.error(f"Failed to extract hosts: {e}")
            return None
        hosts = hosts[: cfg.max_hosts]

        rtt_ms = float(cfg.default_rtt_ms)
        if hosts and len(hosts) >= cfg.min_hosts:
            worker_cap = await self.state.get_worker_cap()
            self.dispatcher.set_pacing(cfg.probe_pacing_base_ms, cfg.probe_pacing_spread)
            outcomes = await self.dispatcher.dispatch(hosts, cfg.tcp_connect_timeout, worker_cap)
            try:
                estimate = RTTAggregator(cfg.min_hosts).aggregate(outcomes)
            except InsufficientDataError as e:
                logger.debug(f"RTT measurement failed: {e}, using default RTT: {rtt_ms:.2f}ms")
                await self._record("default", rtt_ms, e.alive)
            else:
                rtt_ms = estimate.rtt_ms
                logger.debug(f"Using measured RTT: {rtt_ms:.2f}ms")
                await self._record("measured", rtt_ms, estimate.alive_hosts)
        else:
            logger.debug(
                f"Not enough hosts ({len(hosts)} < {cfg.min_hosts}), using default RTT: {rtt_ms:.2f}ms"
            )
            await self._record("default", rtt_ms, len(hosts))

        return await self.adjust(rtt_ms, cfg)

    async def adjust(self, target_rtt_ms: float, cfg: ServiceConfig) -> float:
        """
        Add the safety margin and apply the RTT to every shaped interface.
        Failures are logged; the next cycle tries again.
        """
        adjusted = target_rtt_ms * (1.0 + cfg.rtt_margin_percent / 100.0)
        rtt_us = int(adjusted * 1000)
        logger.info(f"Adjusting CAKE RTT to {adjusted:.2f}ms ({rtt_us}us)")
        await self._record("final", adjusted)

        for interface in cfg.interfaces():
            try:
                await self.adjuster.adjust(interface, rtt_us)
            except ShapingAdjustmentError as e:
                logger.error(f"Failed to update RTT on interface {interface}: {e}")
        return adjusted

    async def run(self, shutdown: asyncio.Event):
        """
        Run an initial cycle, then one per `rtt_update_interval`, until `shutdown` is set.
        """
        logger.info("Starting measurement loop")
        while not shutdown.is_set():
            try:
                await self.run_once()
            except Exception:
                logger.exception("Measurement cycle failed")
            await self.state.touch()

            interval = (await self.state.get_config()).rtt_update_interval
            try:
                await asyncio.wait_for(shutdown.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
        logger.info("Measurement loop stopped")
