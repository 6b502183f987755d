import asyncio
import logging
import re
from typing import List, Sequence, Tuple

from abstractions.shaping_adjuster import ShapingAdjuster
from contracts.errors import ShapingAdjustmentError
from contracts.qdisc_stats import QdiscStats

logger = logging.getLogger(__name__)

RTT_TOKEN = re.compile(r"^([0-9]*\.?[0-9]+)(us|ms|s)?$")
STATS_MARKERS = (
    "bytes", "pkt", "dropped", "overlimits", "interval",
    "thresh", "target", "pkts", "flows",
)


def parse_cake_interfaces(output: str) -> List[str]:
    """Interfaces that carry a CAKE qdisc in `tc qdisc show` output."""
    interfaces = []
    for line in output.splitlines():
        if "qdisc cake" in line:
            parts = line.split()
            if len(parts) >= 5:
                interfaces.append(parts[4])
    return interfaces


def choose_interfaces(cake_interfaces: Sequence[str], dl_interface: str = "", ul_interface: str = "") -> Tuple[str, str]:
    """
    Fill in missing interfaces. Download prefers an ifb device, upload prefers
    anything else.
    """
    if not cake_interfaces:
        raise ShapingAdjustmentError("no CAKE interfaces found")
    if not dl_interface:
        dl_interface = next(
            (i for i in cake_interfaces if i.startswith("ifb")), cake_interfaces[0]
        )
    if not ul_interface:
        ul_interface = next(
            (i for i in cake_interfaces if not i.startswith("ifb")), cake_interfaces[-1]
        )
    return dl_interface, ul_interface


def extract_rtt(line: str) -> str:
    """
    Normalise the value following `interval` (or `rtt`) to whole ms, or whole
    us when below one millisecond. Returns "N/A" if there is none.
    """
    parts = line.split()
    candidate = ""
    for keyword in ("interval", "rtt"):
        for i, part in enumerate(parts[:-1]):
            if part == keyword:
                candidate = parts[i + 1].strip(",;")
                break
        if candidate:
            break
    if not candidate:
        return "N/A"

    match = RTT_TOKEN.match(candidate)
    if not match:
        return candidate
    value = float(match.group(1))
    unit = match.group(2) or "ms"
    if unit == "us":
        if value < 1000:
            return f"{round(value)}us"
        return f"{round(value / 1000)}ms"
    if unit == "s":
        return f"{round(value * 1000)}ms"
    return f"{round(value)}ms"


def parse_qdisc_stats(output: str) -> List[QdiscStats]:
    """Split `tc -s qdisc` output into one entry per CAKE qdisc."""
    stats = []
    current = None
    lines = []
    for raw in output.splitlines():
        line = raw.strip()
        if line.startswith("qdisc"):
            if current is not None:
                current.stats = "\n".join(lines)
                stats.append(current)
                current = None
            parts = line.split()
            if "qdisc cake" in line and len(parts) >= 5:
                current = QdiscStats(interface=parts[4], qdisc=line, rtt=extract_rtt(line))
                lines = []
            continue
        if current is None or not line:
            continue
        if "interval" in line or " rtt " in f" {line} ":
            rtt = extract_rtt(line)
            if rtt != "N/A":
                current.rtt = rtt
        if line.startswith(("Sent", "backlog")) or any(m in line for m in STATS_MARKERS):
            lines.append(line)
    if current is not None:
        current.stats = "\n".join(lines)
        stats.append(current)
    return stats


class TCShapingAdjuster(ShapingAdjuster):
    """
    Applies the RTT to CAKE qdiscs with the `tc` command.
    """

    def __init__(self, tc_binary: str = "tc"):
        self.tc_binary = tc_binary

    async def _run(self, *args: str) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.tc_binary,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            raise ShapingAdjustmentError(f"failed to run {self.tc_binary}: {e}") from e
        output, _ = await proc.communicate()
        text = output.decode(errors="replace")
        if proc.returncode != 0:
            raise ShapingAdjustmentError(
                f"tc command failed: exit status {proc.returncode}, output: {text.strip()}"
            )
        return text

    async def adjust(self, interface: str, rtt_us: int) -> None:
        await self._run("qdisc", "change", "root", "dev", interface, "cake", "rtt", f"{rtt_us}us")
        logger.debug(f"Updated RTT on interface {interface} to {rtt_us}us")

    async def detect_interfaces(self) -> Tuple[str, str]:
        logger.debug("Auto-detecting CAKE interfaces")
        output = await self._run("qdisc", "show")
        return choose_interfaces(parse_cake_interfaces(output))

    async def qdisc_stats(self) -> List[QdiscStats]:
        try:
            output = await self._run("-s", "qdisc")
        except ShapingAdjustmentError as e:
            logger.error(f"Failed to get qdisc stats: {e}")
            return []
        return parse_qdisc_stats(output)
