from abc import ABC, abstractmethod

from contracts.cpu_sample import CPUSample


class CPUSampleSource(ABC):
    """
    Abstract base class for cumulative CPU tick counters.
    """

    @abstractmethod
    async def sample(self) -> CPUSample:
        """
        Take a CPU sample. Counters must not decrease between calls.

        Returns:
            CPUSample: Total and idle ticks.

        Raises:
            CPUSampleError: If the counters cannot be read.
        """
