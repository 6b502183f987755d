import asyncio
import logging
from typing import List, Optional

from abstractions.cpu_sample_source import CPUSampleSource
from abstractions.host_provider import HostProvider
from abstractions.probe_executor import ProbeExecutor
from abstractions.shaping_adjuster import ShapingAdjuster
from contracts.log_entry import LogEntry
from contracts.probe_status import ProbeStatus
from contracts.qdisc_stats import QdiscStats
from contracts.service_config import ServiceConfig
from contracts.system_status import SystemStatus
from core.concurrency_controller import ConcurrencyController
from core.conntrack_host_provider import ConntrackHostProvider
from core.cpu_sample_sources import PsutilCPUSampleSource
from core.measurement_cycle import MeasurementCycle
from core.metrics_manager import MetricsManager
from core.probe_dispatcher import ProbeDispatcher
from core.probe_state import ProbeStateStore
from core.recent_log_handler import RecentLogHandler
from core.service_state import ServiceState
from core.tc_shaping_adjuster import TCShapingAdjuster
from core.tcp_probe_executor import TCPProbeExecutor

logger = logging.getLogger(__name__)

# Records from these logger trees are mirrored into the recent-log ring
CAPTURED_LOGGERS = ("core", "algorithms")
# Per-call timings would flush every other entry out of the ring
UNCAPTURED_LOGGERS = ("core.profiler",)


class RTTService:
    """
    Owns all mutable state of the probing engine and its background tasks.

    Background tasks (completed-probe pruner, concurrency controller,
    measurement loop) share one shutdown event and are started and stopped
    together.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        host_provider: Optional[HostProvider] = None,
        probe_executor: Optional[ProbeExecutor] = None,
        cpu_source: Optional[CPUSampleSource] = None,
        adjuster: Optional[ShapingAdjuster] = None,
        metrics: Optional[MetricsManager] = None,
        probe_state: Optional[ProbeStateStore] = None,
        pruner_interval: float = 1.0,
        recent_logs_max_entries: int = 100,
    ):
        config = config or ServiceConfig()
        self.state = ServiceState(config)
        self.probe_state = probe_state or ProbeStateStore()
        self.metrics = metrics or MetricsManager()
        self.host_provider = host_provider or ConntrackHostProvider()
        self.cpu_source = cpu_source or PsutilCPUSampleSource()
        self.adjuster = adjuster or TCShapingAdjuster()
        self.pruner_interval = pruner_interval
        self.log_handler = RecentLogHandler(
            max_entries=recent_logs_max_entries,
            level=self._log_level(config),
            exclude=UNCAPTURED_LOGGERS,
        )

        self.shutdown = asyncio.Event()
        self.dispatcher = ProbeDispatcher(
            self.probe_state,
            probe_executor or TCPProbeExecutor(),
            shutdown=self.shutdown,
            pacing_base_ms=config.probe_pacing_base_ms,
            pacing_spread=config.probe_pacing_spread,
            metrics=self.metrics,
        )
        self.controller = ConcurrencyController(
            self.state,
            self.cpu_source,
            shutdown=self.shutdown,
            metrics=self.metrics,
        )
        self.cycle = MeasurementCycle(
            self.state,
            self.host_provider,
            self.dispatcher,
            self.adjuster,
            metrics=self.metrics,
        )
        self._tasks: List[asyncio.Task] = []

    @staticmethod
    def _log_level(config: ServiceConfig) -> int:
        return logging.DEBUG if config.debug else logging.INFO

    def attach_log_handler(self):
        for name in CAPTURED_LOGGERS:
            logging.getLogger(name).addHandler(self.log_handler)

    def detach_log_handler(self):
        for name in CAPTURED_LOGGERS:
            logging.getLogger(name).removeHandler(self.log_handler)

    async def resolve_interfaces(self):
        """
        Auto-detect whichever shaped interface is not configured.

        Raises:
            ShapingAdjustmentError: If detection fails.
        """
        cfg = await self.state.get_config()
        if cfg.dl_interface and cfg.ul_interface:
            return
        dl_detected, ul_detected = await self.adjuster.detect_interfaces()
        await self.state.set_interfaces(
            cfg.dl_interface or dl_detected, cfg.ul_interface or ul_detected
        )

    async def start(self):
        if self._tasks:
            return
        await self.resolve_interfaces()
        self.attach_log_handler()
        cfg = await self.state.get_config()
        logger.info("Starting cake-autortt main loop")
        logger.info(f"Detected interfaces - DL: {cfg.dl_interface}, UL: {cfg.ul_interface}")

        self.shutdown.clear()
        await self.state.set_running(True)
        self._tasks.append(
            asyncio.create_task(self.probe_state.run_pruner(self.shutdown, self.pruner_interval))
        )
        if cfg.adaptive_controller_enabled:
            self._tasks.append(asyncio.create_task(self.controller.run()))
        self._tasks.append(asyncio.create_task(self.cycle.run(self.shutdown)))

    async def stop(self):
        self.shutdown.set()
        if self._tasks:
            await asyncio.gather(*self._tasks)
            self._tasks = []
        await self.state.set_running(False)
        logger.info("Service stopped")
        self.detach_log_handler()

    async def update_config(self, config: ServiceConfig):
        """
        Swap the live config. The controller and the measurement cycle read it
        on their next tick; the recent-log level changes immediately.
        """
        self.log_handler.setLevel(self._log_level(config))
        await self.state.update_config(config)

    async def current_probes(self) -> List[ProbeStatus]:
        return await self.probe_state.current_probes()

    async def recent_completed_probes(self) -> List[ProbeStatus]:
        return await self.probe_state.recent_completed()

    async def recent_completed_probes_with_time(self) -> List[dict]:
        return await self.probe_state.recent_completed_with_time()

    def recent_logs(self) -> List[LogEntry]:
        return self.log_handler.recent()

    async def system_status(self) -> SystemStatus:
        return await self.state.snapshot()

    async def qdisc_stats(self) -> List[QdiscStats]:
        return await self.adjuster.qdisc_stats()
