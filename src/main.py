import asyncio
import logging
import signal

import uvicorn

from config.config import Config
from config.logging_config import setup_logging
from contracts.service_config import ServiceConfig
from core.conntrack_host_provider import ConntrackHostProvider
from core.rtt_service import RTTService
from dashboard import create_app

VERSION = "2.0.0"

logger = logging.getLogger(__name__)


def build_service(config: ServiceConfig) -> RTTService:
    return RTTService(
        config=config,
        host_provider=ConntrackHostProvider(Config.CONNTRACK_PATH),
    )


async def run_headless(service: RTTService):
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)
    await service.start()
    await stop.wait()
    logger.info("Shutting down cake-autortt")
    await service.stop()


def main():
    config = ServiceConfig()
    setup_logging(debug=config.debug)
    logger.info(f"Starting cake-autortt v{VERSION}")
    logger.info(
        f"Config: rtt_update_interval={config.rtt_update_interval}s, "
        f"min_hosts={config.min_hosts}, max_hosts={config.max_hosts}"
    )
    logger.info(
        f"Config: rtt_margin={config.rtt_margin_percent}%, "
        f"default_rtt={config.default_rtt_ms}ms, tcp_timeout={config.tcp_connect_timeout}s"
    )

    service = build_service(config)
    if Config.WEB_ENABLED:
        logger.info(f"Web interface available at http://localhost:{Config.WEB_PORT}/api/status")
        uvicorn.run(create_app(service), host=Config.WEB_HOST, port=Config.WEB_PORT, log_config=None)
    else:
        asyncio.run(run_headless(service))


if __name__ == "__main__":
    main()
