from core.errors import ApplyFailure
from core.models import HostContext, NetworkInterface
from utils.command import command_exists
from utils.files import copy_file, dir_exists, dir_is_empty, list_yaml_files, read_file, write_file
from utils.logger import logger
from utils.netplan import new_document, set_interface_address


class NetplanBackend:
    """
    Declarative assignment: edit the netplan document, then 'netplan apply'.
    The prefix comes from settings (24 by default); it is not derived from the network.
    """
    name = "netplan"

    def is_available(self, ctx: HostContext) -> bool:
        """netplan installed, its directory present and not empty."""
        netplan_dir = ctx.settings.paths.netplan_dir
        return (
            command_exists(ctx.executor, ctx.settings.network.netplan_command)
            and dir_exists(ctx.executor, netplan_dir)
            and not dir_is_empty(ctx.executor, netplan_dir)
        )

    def config_file(self, ctx: HostContext):
        """The authoritative document: first *.yaml in sorted order, or None."""
        files = list_yaml_files(ctx.executor, ctx.settings.paths.netplan_dir)
        return files[0] if files else None

    def write_config(self, ctx: HostContext, iface: NetworkInterface, ip: str) -> str:
        cidr = f"{ip}/{ctx.settings.network.prefix_length}"
        path = self.config_file(ctx)

        if path is None:
            path = ctx.settings.paths.netplan_default_path
            logger.verbose(f"Creating new netplan configuration file: {path}")
            write_file(ctx.executor, path, new_document(iface.name, cidr), mode="600")
            return path

        current = read_file(ctx.executor, path, sudo=True)
        copy_file(ctx.executor, path, f"{path}.bak")

        content, action = set_interface_address(current, iface.name, cidr)
        logger.verbose(f"Updating {path} ({action}, backup at {path}.bak)")
        write_file(ctx.executor, path, content)
        return path

    def apply(self, ctx: HostContext, iface: NetworkInterface, ip: str):
        self.write_config(ctx, iface, ip)

        res = ctx.executor.run([ctx.settings.network.netplan_command, "apply"], sudo=True)
        if res.failed:
            raise ApplyFailure(f"netplan apply failed: {res.output or f'exit status {res.returncode}'}")
