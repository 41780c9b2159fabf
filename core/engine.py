from functools import partial
from typing import Callable, List, Tuple

from core.models import DesiredState, HostContext, Outcome, OutcomeStatus
from tasks.hosts_entry_setup import reconcile_host_entry
from tasks.network_ip_setup import reconcile_ip
from tasks.os_hostname_setup import reconcile_hostname
from utils.logger import logger, sys_logger

Action = Tuple[str, Callable[[], Outcome]]


class ReconciliationEngine:
    def __init__(self, ctx: HostContext):
        self.ctx = ctx
        self.outcomes: List[Tuple[str, Outcome]] = []

    def plan(self, desired: DesiredState) -> List[Action]:
        """
        Fixed order: hostname, then IP, then explicit host entries as supplied.
        The hostname goes first so the hosts entry written by the IP action uses the new name.
        """
        actions: List[Action] = []

        if desired.hostname:
            actions.append((f"hostname {desired.hostname}",
                            partial(reconcile_hostname, self.ctx, desired.hostname)))

        if desired.ip_address:
            actions.append((f"ip {desired.ip_address}",
                            partial(reconcile_ip, self.ctx, desired.ip_address, hostname=desired.hostname)))

        for name, ip in desired.host_entries:
            actions.append((f"hostentry {name} {ip}",
                            partial(reconcile_host_entry, self.ctx, name, ip)))

        return actions

    def run(self, desired: DesiredState) -> bool:
        """
        Executes every requested action, each independently of the others' failures.
        Returns True when no action FAILED (NO_CHANGE counts as success).
        """
        actions = self.plan(desired)

        if not actions:
            logger.verbose("No actions specified. Use -name, -ip, or -hostentry.")
            return True

        with logger.workflow("Reconciling host network identity"):
            for label, action in actions:
                with logger.task(label):
                    outcome = action()
                self.outcomes.append((label, outcome))
                self._handle_result(label, outcome)

        success = not any(outcome.failed for _, outcome in self.outcomes)
        sys_logger.info(f"RUN COMPLETE actions={len(self.outcomes)} success={success}")
        return success

    def _handle_result(self, label: str, outcome: Outcome):
        """Prints the outcome. Failures always reach stderr."""
        if outcome.status == OutcomeStatus.NO_CHANGE:
            logger.log_step("skip", f"{label}: {outcome.message}")

        elif outcome.status == OutcomeStatus.APPLIED:
            logger.log_step("success", f"{label}: {outcome.message}")

        elif outcome.status == OutcomeStatus.FAILED:
            logger.log_step("error", f"Error: {label}: {outcome.message}")
