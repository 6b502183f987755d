from abc import ABC, abstractmethod


class ProbeExecutor(ABC):
    """
    Abstract base class for per-host RTT probes.
    """

    @abstractmethod
    async def probe(self, host: str, timeout: float) -> float:
        """
        Measure the round-trip time to a host.

        Args:
            host (str): The address to probe.
            timeout (float): Timeout in seconds applied to each attempt.

        Returns:
            float: Elapsed time in seconds.

        Raises:
            ProbeError: If the host could not be reached.
        """
