import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, Response
from fastapi.responses import ORJSONResponse
from prometheus_client import CONTENT_TYPE_LATEST

from contracts.log_entry import LogEntry
from contracts.probe_status import ProbeStatus
from contracts.qdisc_stats import QdiscStats
from contracts.system_status import SystemStatus
from core.rtt_service import RTTService

logger = logging.getLogger(__name__)


def create_app(service: RTTService) -> FastAPI:
    """
    Build the read-only observability API around a service instance. The
    service is started and stopped with the application lifespan.
    """

    @asynccontextmanager
    async def lifespan(app):
        await service.start()
        yield
        await service.stop()

    app = FastAPI(
        title="cake-autortt",
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
    )
    app.state.service = service

    @app.get("/api/status", response_model=SystemStatus)
    async def status():
        return await service.system_status()

    @app.get("/api/probes", response_model=List[ProbeStatus])
    async def probes():
        return await service.current_probes()

    @app.get("/api/probes/completed")
    async def completed_probes():
        return await service.recent_completed_probes_with_time()

    @app.get("/api/logs", response_model=List[LogEntry])
    async def logs():
        return service.recent_logs()

    @app.get("/api/qdisc", response_model=List[QdiscStats])
    async def qdisc():
        return await service.qdisc_stats()

    @app.get("/metrics")
    def metrics():
        return Response(service.metrics.export(), media_type=CONTENT_TYPE_LATEST)

    return app
