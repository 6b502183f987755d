import asyncio
import logging
import time
from typing import Sequence

from abstractions.probe_executor import ProbeExecutor
from contracts.errors import ProbeError

logger = logging.getLogger(__name__)

# Tried in order; the first port that accepts a connection wins
DEFAULT_PORTS = (80, 443, 22, 21, 25, 53)


class TCPProbeExecutor(ProbeExecutor):
    """
    Measures RTT as the time needed to establish a TCP connection.
    """

    def __init__(self, ports: Sequence[int] = DEFAULT_PORTS):
        self.ports = tuple(ports)

    async def probe(self, host: str, timeout: float) -> float:
        last_error = None
        for port in self.ports:
            started = time.perf_counter()
            try:
                _, writer = await asyncio.wait_for(
                    asyncio.open_connection(host, port), timeout=timeout
                )
            except (OSError, asyncio.TimeoutError) as e:
                last_error = e
                continue
            elapsed = time.perf_counter() - started
            await self._close(writer)
            logger.debug(f"Connected to {host}:{port} in {elapsed * 1000:.2f}ms")
            return elapsed
        raise ProbeError("no reachable ports found") from last_error

    @staticmethod
    async def _close(writer):
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error closing probe connection: {e}")
