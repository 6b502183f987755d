from pydantic import BaseModel, Field

from config.config import Config


class ServiceConfig(BaseModel):
    """
    Runtime configuration snapshot of the RTT service. Defaults come from the
    environment through `Config`.
    """

    rtt_update_interval: float = Field(default=Config.RTT_UPDATE_INTERVAL, gt=0)
    min_hosts: int = Field(default=Config.MIN_HOSTS, ge=0)
    max_hosts: int = Field(default=Config.MAX_HOSTS, ge=1)
    rtt_margin_percent: int = Field(default=Config.RTT_MARGIN_PERCENT, ge=0)
    default_rtt_ms: int = Field(default=Config.DEFAULT_RTT_MS, ge=1)
    dl_interface: str = Config.DL_INTERFACE
    ul_interface: str = Config.UL_INTERFACE
    debug: bool = Config.DEBUG
    tcp_connect_timeout: float = Field(default=Config.TCP_CONNECT_TIMEOUT, gt=0)
    max_concurrent_probes: int = Field(default=Config.MAX_CONCURRENT_PROBES, ge=1)
    probe_pacing_base_ms: int = Field(default=Config.PROBE_PACING_BASE_MS, ge=0)
    probe_pacing_spread: int = Field(default=Config.PROBE_PACING_SPREAD, ge=1)
    adaptive_controller_enabled: bool = Config.ADAPTIVE_CONTROLLER_ENABLED
    cpu_sample_interval: float = Field(default=Config.CPU_SAMPLE_INTERVAL, gt=0)
    cpu_high_threshold: float = Config.CPU_HIGH_THRESHOLD
    cpu_low_threshold: float = Config.CPU_LOW_THRESHOLD
    worker_decrease_factor: float = Field(default=Config.WORKER_DECREASE_FACTOR, gt=0)
    worker_increase_factor: float = Field(default=Config.WORKER_INCREASE_FACTOR, gt=0)

    def interfaces(self) -> list[str]:
        """Distinct configured interfaces, download first."""
        out = []
        for iface in (self.dl_interface, self.ul_interface):
            if iface and iface not in out:
                out.append(iface)
        return out
