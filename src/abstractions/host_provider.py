from abc import ABC, abstractmethod
from typing import List


class HostProvider(ABC):
    """
    Abstract base class for sources of currently active remote hosts.
    """

    @abstractmethod
    async def get_hosts(self) -> List[str]:
        """
        Return the addresses of the hosts that should be probed.

        Returns:
            List[str]: De-duplicated host addresses (IP literals).

        Raises:
            HostProviderError: If the host list cannot be obtained.
        """
