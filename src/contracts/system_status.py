from datetime import datetime
from typing import Dict

from pydantic import BaseModel

from contracts.service_config import ServiceConfig


class SystemStatus(BaseModel):
    """
    Point-in-time view of the service for the dashboard.
    """

    running: bool
    last_update: datetime
    current_rtt: Dict[str, int]
    active_hosts: int
    worker_cap: int
    dl_interface: str
    ul_interface: str
    config: ServiceConfig
