import asyncio

import psutil

from abstractions.cpu_sample_source import CPUSampleSource
from contracts.cpu_sample import CPUSample
from contracts.errors import CPUSampleError

# psutil reports seconds; convert back to kernel USER_HZ ticks
TICKS_PER_SECOND = 100


class PsutilCPUSampleSource(CPUSampleSource):
    """
    System-wide CPU time counters from psutil.
    """

    def _read(self) -> CPUSample:
        try:
            times = psutil.cpu_times()
        except (OSError, RuntimeError) as e:
            raise CPUSampleError(f"failed to read cpu times: {e}") from e
        total = sum(times)
        return CPUSample(
            total_ticks=int(total * TICKS_PER_SECOND),
            idle_ticks=int(times.idle * TICKS_PER_SECOND),
        )

    async def sample(self) -> CPUSample:
        return await asyncio.to_thread(self._read)
