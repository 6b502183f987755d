import asyncio
import logging
from datetime import datetime
from typing import Optional

from contracts.service_config import ServiceConfig
from contracts.system_status import SystemStatus

logger = logging.getLogger(__name__)


class ServiceState:
    """
    Service-level status: worker cap, RTT history, host count and config snapshot.

    Read far more often than written; guarded by its own lock, independent of
    the probe state lock.
    """

    def __init__(self, config: ServiceConfig):
        self._config = config
        self._worker_cap = config.max_concurrent_probes
        self._running = False
        self._last_update = datetime.now()
        self._last_rtt = {}  # kind ("default", "measured", "final") -> ms
        self._active_hosts = 0
        self._lock = asyncio.Lock()

    async def get_config(self) -> ServiceConfig:
        async with self._lock:
            return self._config

    async def update_config(self, config: ServiceConfig):
        async with self._lock:
            self._config = config
        logger.info(
            f"Configuration reloaded: min_hosts={config.min_hosts} "
            f"max_hosts={config.max_hosts} max_concurrent_probes={config.max_concurrent_probes}"
        )

    async def set_interfaces(self, dl_interface: str, ul_interface: str):
        async with self._lock:
            self._config = self._config.model_copy(
                update={"dl_interface": dl_interface, "ul_interface": ul_interface}
            )

    async def get_worker_cap(self) -> int:
        """
        Current worker cap, clamped to [1, max_concurrent_probes] of the live config.
        """
        async with self._lock:
            return max(1, min(self._worker_cap, self._config.max_concurrent_probes))

    async def set_worker_cap(self, value: int):
        async with self._lock:
            self._worker_cap = max(1, value)

    async def set_running(self, running: bool):
        async with self._lock:
            self._running = running

    async def record_measurement(self, kind: str, rtt_ms: float, active_hosts: Optional[int] = None):
        async with self._lock:
            self._last_rtt[kind] = int(rtt_ms)
            if active_hosts is not None:
                self._active_hosts = active_hosts

    async def touch(self):
        async with self._lock:
            self._last_update = datetime.now()

    async def snapshot(self) -> SystemStatus:
        async with self._lock:
            return SystemStatus(
                running=self._running,
                last_update=self._last_update,
                current_rtt=dict(self._last_rtt),
                active_hosts=self._active_hosts,
                worker_cap=max(1, min(self._worker_cap, self._config.max_concurrent_probes)),
                dl_interface=self._config.dl_interface,
                ul_interface=self._config.ul_interface,
                config=self._config.model_copy(),
            )
