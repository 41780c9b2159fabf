from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple


class OutcomeStatus(str, Enum):
    NO_CHANGE = "NO_CHANGE"  # Current state already matched the desired state
    APPLIED = "APPLIED"  # A mutation was performed successfully
    FAILED = "FAILED"  # The action failed (earlier sub-steps may have persisted)


@dataclass
class Outcome:
    """
    Result of one top-level reconciliation action.
    """
    status: OutcomeStatus
    message: str
    data: Optional[Any] = None

    @property
    def failed(self) -> bool:
        return self.status == OutcomeStatus.FAILED

    @property
    def changed(self) -> bool:
        return self.status == OutcomeStatus.APPLIED


@dataclass
class SubTaskResult:
    """Lightweight result object for internal sub-steps."""
    success: bool
    message: str
    data: Optional[Any] = None  # To pass data back to the action (e.g. the new table)


@dataclass(frozen=True)
class DesiredState:
    """Validated operator input. Built once, never mutated."""
    hostname: Optional[str] = None
    ip_address: Optional[str] = None
    host_entries: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class NetworkInterface:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass
class HostContext:
    """
    Resource handles passed to every action: the privileged executor, the
    loaded AppSettings and the ChangeRecorder. Tests swap in fakes.
    """
    executor: Any
    settings: Any
    recorder: Any
