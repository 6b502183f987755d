import logging
from typing import Iterable

from contracts.errors import InsufficientDataError
from contracts.probe_outcome import ProbeOutcome, RTTEstimate

logger = logging.getLogger(__name__)


class RTTAggregator:
    """
    Reduces the outcomes of one dispatcher run to a single RTT.

    The worst (highest) RTT among responders is used so shaping is tuned to
    the slowest observed path. The mean is computed for diagnostics only.
    """

    def __init__(self, min_hosts: int):
        self.min_hosts = min_hosts

    def aggregate(self, outcomes: Iterable[ProbeOutcome]) -> RTTEstimate:
        """
        Args:
            outcomes: Per-host outcomes, in any order.

        Returns:
            RTTEstimate: Worst and mean RTT in milliseconds, with responder counts.

        Raises:
            InsufficientDataError: If fewer than `min_hosts` hosts answered.
        """
        outcomes = list(outcomes)
        rtts = []
        for outcome in outcomes:
            if outcome.ok:
                rtts.append(outcome.rtt_ms)
                logger.debug(f"Host {outcome.host}: RTT {outcome.rtt_ms:.2f}ms")
            else:
                logger.debug(f"Host {outcome.host}: {outcome.error}")

        alive = len(rtts)
        logger.debug(f"TCP summary: {alive}/{len(outcomes)} hosts alive")
        if alive == 0 or alive < self.min_hosts:
            raise InsufficientDataError(alive, self.min_hosts)

        mean_rtt = sum(rtts) / alive
        worst_rtt = max(rtts)
        logger.debug(f"Using worst RTT: {worst_rtt:.2f}ms (avg: {mean_rtt:.2f}ms)")
        return RTTEstimate(
            rtt_ms=worst_rtt,
            mean_ms=mean_rtt,
            alive_hosts=alive,
            total_hosts=len(outcomes),
        )
