from core.decorators import automated_step, automated_substep
from core.models import HostContext, Outcome, OutcomeStatus, SubTaskResult
from tasks.facts import StateReader
from utils.files import write_file
from utils.hosts import set_localhost_alias
from utils.logger import logger


# --- SUB-STEPS ---

@automated_substep("Write hostname file")
def _write_hostname_file(ctx: HostContext, target_name: str) -> SubTaskResult:
    path = ctx.settings.paths.hostname_file
    changed = write_file(ctx.executor, path, f"{target_name}\n")
    msg = f"{path} set to '{target_name}'" if changed else f"{path} already '{target_name}'"
    return SubTaskResult(success=True, message=msg)


@automated_substep("Configure /etc/hosts (127.0.1.1)")
def _ensure_resolution_entry(ctx: HostContext, target_name: str) -> SubTaskResult:
    """
    Points the localhost-alias line at the new name, appending it if missing.
    """
    alias_ip = ctx.settings.network.localhost_alias_ip
    table = StateReader(ctx).read_hosts_table()
    new_table, changed = set_localhost_alias(table, target_name, alias_ip)

    if not changed:
        return SubTaskResult(success=True, message="Resolution entry correct")

    write_file(ctx.executor, ctx.settings.paths.hosts_file, new_table.render())
    return SubTaskResult(success=True, message=f"Resolution entry set to {target_name}")


@automated_substep("Apply hostname to running system")
def _apply_live_hostname(ctx: HostContext, target_name: str) -> SubTaskResult:
    res = ctx.executor.run(["hostname", target_name], sudo=True)
    if res.failed:
        return SubTaskResult(success=False, message=f"Failed to set hostname: {res.output}")
    return SubTaskResult(success=True, message=f"Kernel hostname is '{target_name}'")


# --- MAIN TASK ---

@automated_step("Configure System Hostname")
def reconcile_hostname(ctx: HostContext, desired: str) -> Outcome:
    """
    Sets the hostname file, the 127.0.1.1 hosts line and the kernel hostname.

    Not transactional: every sub-step is attempted even after a failure, and
    whatever was written stays written. Any failed sub-step fails the action.
    """
    current_name = StateReader(ctx).current_hostname()

    if current_name == desired:
        logger.verbose(f"Hostname is already set to {desired}. No changes needed.")
        return Outcome(OutcomeStatus.NO_CHANGE, f"Hostname already '{desired}'")

    failures = []
    for step in (_write_hostname_file, _ensure_resolution_entry, _apply_live_hostname):
        res = step(ctx, desired)
        if not res.success:
            failures.append(res.message)

    if failures:
        return Outcome(OutcomeStatus.FAILED, f"Hostname change to '{desired}' incomplete: {'; '.join(failures)}")

    ctx.recorder.record(f"Hostname changed from {current_name} to {desired}")
    return Outcome(OutcomeStatus.APPLIED, f"Hostname changed: {current_name} -> {desired}")
