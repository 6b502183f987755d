import asyncio
import ipaddress
import logging
import re
from typing import Iterable, List

from abstractions.host_provider import HostProvider
from contracts.errors import HostProviderError

logger = logging.getLogger(__name__)

DST_PATTERN = re.compile(r"dst=([0-9a-fA-F:.]+)")

LAN_NETWORKS_V4 = tuple(
    ipaddress.ip_network(net)
    for net in (
        "10.0.0.0/8",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "169.254.0.0/16",
        "127.0.0.0/8",
        "224.0.0.0/3",  # multicast and reserved
    )
)
UNIQUE_LOCAL_V6 = ipaddress.ip_network("fc00::/7")
LINK_LOCAL_MULTICAST_V6 = ipaddress.ip_network("ff02::/16")


def is_lan_address(address: str) -> bool:
    """
    True for private, loopback, link-local, multicast and reserved addresses.
    Unparseable input counts as LAN so it is never probed.
    """
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return True
    if ip.version == 4:
        return any(ip in net for net in LAN_NETWORKS_V4)
    return (
        ip.is_loopback
        or ip.is_link_local
        or ip in LINK_LOCAL_MULTICAST_V6
        or ip in UNIQUE_LOCAL_V6
    )


def parse_conntrack(lines: Iterable[str]) -> List[str]:
    """
    Destination addresses of ESTABLISHED connections to non-LAN hosts, first
    occurrence order, without duplicates.
    """
    hosts = {}
    for line in lines:
        if "ESTABLISHED" not in line:
            continue
        match = DST_PATTERN.search(line)
        if not match:
            continue
        dst = match.group(1)
        if not is_lan_address(dst):
            hosts.setdefault(dst, None)
    return list(hosts)


class ConntrackHostProvider(HostProvider):
    """
    Reads the kernel connection-tracking table for remote hosts.
    """

    def __init__(self, path: str = "/proc/net/nf_conntrack"):
        self.path = path

    def _read(self) -> List[str]:
        try:
            with open(self.path, encoding="utf-8", errors="replace") as f:
                return parse_conntrack(f)
        except OSError as e:
            raise HostProviderError(f"failed to read {self.path}: {e}") from e

    async def get_hosts(self) -> List[str]:
        hosts = await asyncio.to_thread(self._read)
        logger.debug(f"Found {len(hosts)} non-LAN hosts")
        return hosts
