from typing import Optional

from pydantic import BaseModel


class ProbeOutcome(BaseModel):
    """
    Result of probing one host during a dispatcher run.
    """

    host: str
    rtt_ms: Optional[float] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.rtt_ms is not None


class RTTEstimate(BaseModel):
    """
    Aggregated RTT of one measurement cycle. `rtt_ms` is the worst observed RTT.
    """

    rtt_ms: float
    mean_ms: float
    alive_hosts: int
    total_hosts: int
