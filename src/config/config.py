import os


def _env(name, default):
    return os.environ.get(f"CAKE_AUTORTT_{name}", default)


def _env_bool(name, default):
    return _env(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """
    Configuration class for environment variables and default settings.
    """

    # Measurement cycle
    RTT_UPDATE_INTERVAL = int(_env("RTT_UPDATE_INTERVAL", "5"))  # seconds
    MIN_HOSTS = int(_env("MIN_HOSTS", "3"))
    MAX_HOSTS = int(_env("MAX_HOSTS", "100"))
    RTT_MARGIN_PERCENT = int(_env("RTT_MARGIN_PERCENT", "10"))
    DEFAULT_RTT_MS = int(_env("DEFAULT_RTT_MS", "100"))

    # Shaped interfaces, auto-detected from `tc qdisc show` when empty
    DL_INTERFACE = _env("DL_INTERFACE", "")
    UL_INTERFACE = _env("UL_INTERFACE", "")

    DEBUG = _env_bool("DEBUG", False)

    # Probing
    TCP_CONNECT_TIMEOUT = float(_env("TCP_CONNECT_TIMEOUT", "3"))  # seconds
    MAX_CONCURRENT_PROBES = int(_env("MAX_CONCURRENT_PROBES", "50"))
    PROBE_PACING_BASE_MS = int(_env("PROBE_PACING_BASE_MS", "10"))
    PROBE_PACING_SPREAD = int(_env("PROBE_PACING_SPREAD", "10"))

    # Adaptive worker cap
    ADAPTIVE_CONTROLLER_ENABLED = _env_bool("ADAPTIVE_CONTROLLER_ENABLED", True)
    CPU_SAMPLE_INTERVAL = float(_env("CPU_SAMPLE_INTERVAL", "2"))  # seconds
    CPU_HIGH_THRESHOLD = float(_env("CPU_HIGH_THRESHOLD", "80"))
    CPU_LOW_THRESHOLD = float(_env("CPU_LOW_THRESHOLD", "30"))
    WORKER_DECREASE_FACTOR = float(_env("WORKER_DECREASE_FACTOR", "0.7"))
    WORKER_INCREASE_FACTOR = float(_env("WORKER_INCREASE_FACTOR", "1.1"))

    # Observability API
    WEB_ENABLED = _env_bool("WEB_ENABLED", True)
    WEB_HOST = _env("WEB_HOST", "0.0.0.0")
    WEB_PORT = int(_env("WEB_PORT", "80"))

    CONNTRACK_PATH = _env("CONNTRACK_PATH", "/proc/net/nf_conntrack")
