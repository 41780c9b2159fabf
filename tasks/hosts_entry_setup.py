from core.decorators import automated_step
from core.models import HostContext, Outcome, OutcomeStatus
from tasks.facts import StateReader
from utils.files import write_file
from utils.hosts import upsert
from utils.logger import logger


def ensure_host_entry(ctx: HostContext, name: str, ip: str) -> Outcome:
    """
    Read-modify-write of one hosts entry. The table is re-read here, never
    taken from an earlier action. The file is only written when it changes.
    """
    table = StateReader(ctx).read_hosts_table()
    new_table, changed = upsert(table, name, ip)

    if not changed:
        logger.verbose(f"Host entry for {name} ({ip}) already exists. No changes needed.")
        return Outcome(OutcomeStatus.NO_CHANGE, f"Host entry {name} -> {ip} present")

    write_file(ctx.executor, ctx.settings.paths.hosts_file, new_table.render())
    ctx.recorder.record(f"Added/updated host entry: {name} with IP {ip}")
    return Outcome(OutcomeStatus.APPLIED, f"Host entry {name} -> {ip} written")


@automated_step("Reconcile Host Entry")
def reconcile_host_entry(ctx: HostContext, name: str, ip: str) -> Outcome:
    """Explicit -hostentry request."""
    return ensure_host_entry(ctx, name, ip)
