import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence, List

from core.state import config as global_config
from utils.logger import sys_logger


@dataclass
class CommandResult:
    """Outcome of one command invocation."""
    argv: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def failed(self) -> bool:
        return self.returncode != 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr for a complete picture on failure."""
        output = self.stdout
        if self.failed and self.stderr:
            output += f"\nError: {self.stderr}"
        return output.strip()

    @property
    def command(self) -> str:
        return shlex.join(self.argv)


class PrivilegedExecutor:
    """
    Runs commands on the local host.
    Handles:
    1. Privilege escalation when the caller is not root (sudo, passwordless or with a password)
    2. Normalising every outcome into a CommandResult

    Calls block until the command exits. No timeout is applied.
    """

    def __init__(self, sudo_password: Optional[str] = None, euid: Optional[int] = None):
        self.sudo_password = sudo_password if sudo_password is not None else global_config.SUDO_PASSWORD
        self.euid = os.geteuid() if euid is None else euid

    @property
    def is_root(self) -> bool:
        return self.euid == 0

    def _wrap(self, argv: List[str], sudo: bool, input: Optional[str]):
        if not sudo or self.is_root:
            return argv, input

        if self.sudo_password:
            # -S reads the password from stdin, -p '' hides the prompt
            stdin = f"{self.sudo_password}\n{input or ''}"
            return ["sudo", "-S", "-p", ""] + argv, stdin

        # Passwordless sudo
        return ["sudo", "-n"] + argv, input

    def run(self, argv: Sequence[str], sudo: bool = False, input: Optional[str] = None) -> CommandResult:
        argv = list(argv)
        final_argv, stdin = self._wrap(argv, sudo, input)
        sys_logger.info(f"EXEC {shlex.join(argv)}" + (" (privileged)" if sudo else ""))

        try:
            proc = subprocess.run(
                final_argv,
                input=stdin,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                universal_newlines=True
            )
        except OSError as e:
            # Binary missing or not executable
            return CommandResult(argv=argv, returncode=127, stderr=str(e))

        result = CommandResult(argv=argv, returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)

        if result.failed and "sudo: a password is required" in proc.stderr:
            result.stderr = "Sudo privileges missing. Run as root, configure 'NOPASSWD', or set CONFIGURE_HOST_SUDO_PASSWORD."

        if result.failed:
            sys_logger.warning(f"EXEC FAILED rc={result.returncode} cmd='{result.command}': {result.stderr.strip()}")
        return result


def command_exists(executor, command: str) -> bool:
    """Checks if a command exists in PATH (using 'which')."""
    return not executor.run(["which", command]).failed
