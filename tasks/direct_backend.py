from core.errors import ApplyFailure
from core.models import HostContext, NetworkInterface
from utils.logger import logger, sys_logger


class DirectBackend:
    """
    Imperative assignment with 'ip'. Nothing is persisted: the address is lost
    on reboot unless something else writes it down.
    """
    name = "direct"

    def apply(self, ctx: HostContext, iface: NetworkInterface, ip: str):
        cidr = f"{ip}/{ctx.settings.network.prefix_length}"
        run = ctx.executor.run

        # An interface without addresses is a valid starting point
        res = run(["ip", "addr", "flush", "dev", iface.name], sudo=True)
        if res.failed:
            sys_logger.info(f"Ignoring flush failure on {iface}: {res.output}")

        res = run(["ip", "addr", "add", cidr, "dev", iface.name], sudo=True)
        if res.failed:
            raise ApplyFailure(f"Failed to set IP address {ip} on interface {iface}: {res.output}")

        # The interface may already be up
        res = run(["ip", "link", "set", iface.name, "up"], sudo=True)
        if res.failed:
            sys_logger.info(f"Ignoring link-up failure on {iface}: {res.output}")

        logger.verbose(f"Assigned {cidr} to {iface}")
