from abc import ABC, abstractmethod
from typing import List, Tuple

from contracts.errors import ShapingAdjustmentError
from contracts.qdisc_stats import QdiscStats


class ShapingAdjuster(ABC):
    """
    Abstract base class for the component that applies the RTT shaping parameter.
    """

    @abstractmethod
    async def adjust(self, interface: str, rtt_us: int) -> None:
        """
        Set the RTT parameter of the qdisc on an interface.

        Args:
            interface (str): Interface name.
            rtt_us (int): RTT in microseconds.

        Raises:
            ShapingAdjustmentError: If the parameter could not be changed.
        """

    async def detect_interfaces(self) -> Tuple[str, str]:
        """
        Discover the download and upload interfaces.

        Returns:
            Tuple[str, str]: (download interface, upload interface).

        Raises:
            ShapingAdjustmentError: If no shaped interface can be found, or the
                adjuster cannot detect interfaces at all.
        """
        raise ShapingAdjustmentError("interface auto-detection not supported")

    async def qdisc_stats(self) -> List[QdiscStats]:
        """
        Return current qdisc statistics, or an empty list if unsupported.
        """
        return []
