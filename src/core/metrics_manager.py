import logging
from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

PROBE_RTT_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.2, 0.3, 0.5, 1.0, 2.0, 3.0)


class MetricsManager:
    """
    Prometheus metrics for the probing engine.

    Each instance owns its collector registry so several services (or tests)
    can coexist in one process.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Args:
            registry: Optional collector registry; a private one is created if None.
        """
        self.registry = registry or CollectorRegistry()
        self.WORKER_CAP = Gauge(
            "autortt_worker_cap",
            "Current adaptive cap on concurrent probe workers",
            registry=self.registry,
        )
        self.ACTIVE_HOSTS = Gauge(
            "autortt_active_hosts",
            "Hosts that answered in the last measurement cycle",
            registry=self.registry,
        )
        self.RTT_MS = Gauge(
            "autortt_rtt_ms",
            "Last RTT value by kind (default, measured, final)",
            ["kind"],
            registry=self.registry,
        )
        self.PROBE_RTT = Histogram(
            "autortt_probe_rtt_seconds",
            "TCP connect time of successful probes",
            buckets=PROBE_RTT_BUCKETS,
            registry=self.registry,
        )
        self.PROBE_FAILURES = Counter(
            "autortt_probe_failures",
            "Probes that reached no port",
            registry=self.registry,
        )
        logger.debug("MetricsManager initialized.")

    def observe_probe(self, rtt_seconds: float):
        self.PROBE_RTT.observe(rtt_seconds)

    def probe_failed(self):
        self.PROBE_FAILURES.inc()

    def set_worker_cap(self, value: int):
        self.WORKER_CAP.set(value)

    def set_rtt(self, kind: str, rtt_ms: float, active_hosts: Optional[int] = None):
        self.RTT_MS.labels(kind=kind).set(rtt_ms)
        if active_hosts is not None:
            self.ACTIVE_HOSTS.set(active_hosts)

    def export(self) -> bytes:
        return generate_latest(self.registry)
