import re
from typing import Optional

from core.errors import DetectionFailure
from core.models import HostContext, NetworkInterface
from utils.files import read_file
from utils.hosts import HostsTable

INET_RE = re.compile(r"\binet (\d{1,3}(?:\.\d{1,3}){3})")


def _default_route_interface(ctx: HostContext) -> Optional[str]:
    """Interface carrying the default route ('default via 10.0.0.1 dev eth0 ...')."""
    res = ctx.executor.run(["ip", "route", "show", "default"])
    if res.failed:
        return None

    for line in res.stdout.splitlines():
        fields = line.split()
        if fields[:1] == ["default"] and "dev" in fields:
            idx = fields.index("dev")
            if idx + 1 < len(fields):
                return fields[idx + 1]
    return None


def _first_non_loopback_link(ctx: HostContext) -> Optional[str]:
    """First interface of 'ip -o link show' that is not lo ('2: eth0: <BROADCAST,...> ...')."""
    res = ctx.executor.run(["ip", "-o", "link", "show"])
    if res.failed:
        return None

    for line in res.stdout.splitlines():
        parts = line.split(":", 2)
        if len(parts) < 3 or not parts[0].strip().isdigit():
            continue
        # veth pairs are listed as 'eth0@if12'
        name = parts[1].strip().split("@", 1)[0]
        if name and name != "lo":
            return name
    return None


def detect_primary_interface(ctx: HostContext) -> NetworkInterface:
    """
    Determines the primary interface: the default route's device, falling back
    to the first non-loopback link. Raises DetectionFailure if both come up empty.
    """
    name = _default_route_interface(ctx) or _first_non_loopback_link(ctx)
    if not name:
        raise DetectionFailure("Could not determine network interface (no default route and no non-loopback link)")
    return NetworkInterface(name=name)


class StateReader:
    """Read-only view of the host state. Every call goes back to the system."""

    def __init__(self, ctx: HostContext):
        self.ctx = ctx

    def current_hostname(self) -> str:
        res = self.ctx.executor.run(["hostname"])
        if res.failed:
            return ""
        return res.stdout.strip()

    def current_ip(self, iface: NetworkInterface) -> Optional[str]:
        """First IPv4 address bound to the interface, None if unbound."""
        res = self.ctx.executor.run(["ip", "-4", "-o", "addr", "show", "dev", iface.name])
        if res.failed:
            return None
        match = INET_RE.search(res.stdout)
        return match.group(1) if match else None

    def read_hosts_table(self) -> HostsTable:
        return HostsTable.parse(read_file(self.ctx.executor, self.ctx.settings.paths.hosts_file))
