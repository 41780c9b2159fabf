from typing import Optional

from core.decorators import automated_step
from core.errors import ApplyFailure
from core.models import HostContext, NetworkInterface, Outcome, OutcomeStatus
from tasks.direct_backend import DirectBackend
from tasks.facts import StateReader, detect_primary_interface
from tasks.hosts_entry_setup import ensure_host_entry
from tasks.netplan_backend import NetplanBackend
from utils.logger import logger, sys_logger


def select_backend(ctx: HostContext):
    """Netplan when it is installed and configured on this host, direct 'ip' otherwise."""
    netplan = NetplanBackend()
    if netplan.is_available(ctx):
        logger.verbose("Using netplan for network configuration")
        return netplan

    logger.verbose("Using direct interface configuration")
    return DirectBackend()


def apply_address(ctx: HostContext, iface: NetworkInterface, ip: str) -> str:
    """
    Applies the address through the selected backend. A netplan failure gets
    exactly one second attempt through the direct backend.
    Returns the name of the backend that succeeded, raises ApplyFailure otherwise.
    """
    backend = select_backend(ctx)
    try:
        backend.apply(ctx, iface, ip)
        return backend.name
    except ApplyFailure as e:
        if not isinstance(backend, NetplanBackend):
            raise
        sys_logger.warning(f"Netplan backend failed on {iface}: {e}")
        logger.log_step("warning", f"{e}. Trying direct method")

    fallback = DirectBackend()
    fallback.apply(ctx, iface, ip)
    return fallback.name


@automated_step("Configure IP Address")
def reconcile_ip(ctx: HostContext, desired: str, hostname: Optional[str] = None) -> Outcome:
    """
    Moves the primary interface to the desired IPv4 address, then points the
    hosts entry of 'hostname' (or the current system hostname) at it.
    """
    reader = StateReader(ctx)

    iface = detect_primary_interface(ctx)
    logger.verbose(f"Using network interface: {iface}")

    current_ip = reader.current_ip(iface)

    if current_ip == desired:
        logger.verbose(f"IP Address is already set to {desired}. No changes needed.")
        if ctx.settings.network.sync_hosts_when_unchanged:
            _sync_hosts_entry(ctx, reader, desired, hostname)
        return Outcome(OutcomeStatus.NO_CHANGE, f"{iface} already has {desired}", data=iface)

    backend_name = apply_address(ctx, iface, desired)

    _sync_hosts_entry(ctx, reader, desired, hostname)

    ctx.recorder.record(f"IP address changed from {current_ip or 'none'} to {desired} on interface {iface}")
    return Outcome(
        OutcomeStatus.APPLIED,
        f"{iface}: {current_ip or 'none'} -> {desired} (via {backend_name})",
        data=iface,
    )


def _sync_hosts_entry(ctx: HostContext, reader: StateReader, ip: str, hostname: Optional[str]):
    hostname_to_use = hostname or reader.current_hostname()
    if hostname_to_use:
        ensure_host_entry(ctx, hostname_to_use, ip)
