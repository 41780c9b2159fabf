from .hosts_entry_setup import reconcile_host_entry
from .network_ip_setup import reconcile_ip
from .os_hostname_setup import reconcile_hostname

__all__ = [
    "reconcile_hostname",
    "reconcile_ip",
    "reconcile_host_entry",
]
