import os
import sys
from pathlib import Path
from typing import List, Optional

import typer

from core.engine import ReconciliationEngine
from core.errors import ConfigError
from core.models import DesiredState, HostContext
from core.settings import AppSettings, load_settings
from core.signals import uninterruptible
from core.state import config as global_config
from utils.command import PrivilegedExecutor
from utils.logger import ChangeRecorder, logger, setup_file_logging, sys_logger

app = typer.Typer(
    help="Reconciles hostname, primary IP address and /etc/hosts entries toward the requested values.",
    add_completion=False,
)


def build_context(settings: AppSettings) -> HostContext:
    """Real host handles. Tests replace this with in-memory fakes."""
    return HostContext(
        executor=PrivilegedExecutor(),
        settings=settings,
        recorder=ChangeRecorder(tag=settings.logging.syslog_tag, address=settings.logging.syslog_address),
    )


def _non_empty(value: Optional[str]):
    if value is not None and not value.strip():
        raise typer.BadParameter("requires a non-empty value")
    return value


def _non_empty_pairs(value: Optional[List[str]]):
    for pair in value or ():
        if any(not part.strip() for part in pair):
            raise typer.BadParameter("requires a hostname and an IP address")
    return value


@app.command()
def configure_host(
        name: Optional[str] = typer.Option(
            None, "-name",
            help="Desired hostname.",
            callback=_non_empty,
        ),
        ip: Optional[str] = typer.Option(
            None, "-ip",
            help="Desired IPv4 address for the primary interface (/24).",
            callback=_non_empty,
        ),
        hostentry: Optional[List[str]] = typer.Option(
            None, "-hostentry",
            metavar="HOSTNAME ADDRESS",
            help="Ensure /etc/hosts maps HOSTNAME to ADDRESS. Repeatable.",
            callback=_non_empty_pairs,
        ),
        verbose: bool = typer.Option(
            False, "-verbose",
            help="Print progress to standard output.",
        ),
        config_file: Optional[Path] = typer.Option(
            None, "-config",
            help="Settings YAML file (default /etc/configure-host.yaml).",
            dir_okay=False,
        ),
):
    """
    [Idempotent] Applies only the changes that are needed; re-running is safe.
    """
    # TERM, HUP and INT stay ignored until the process exits
    with uninterruptible():
        global_config.VERBOSE = verbose
        if config_file:
            global_config.CONFIG_FILE = str(config_file)

        try:
            settings = load_settings(str(config_file) if config_file else None)
        except ConfigError as e:
            logger.log_step("error", f"Error: {e}")
            raise typer.Exit(code=1)

        global_config.SUDO_PASSWORD = os.getenv("CONFIGURE_HOST_SUDO_PASSWORD") or None

        desired = DesiredState(
            hostname=name,
            ip_address=ip,
            host_entries=tuple((entry[0], entry[1]) for entry in hostentry or ()),
        )

        log_path = setup_file_logging(settings.logging.log_file)
        sys_logger.info(f"RUN START log={log_path} desired={desired}")

        engine = ReconciliationEngine(build_context(settings))
        success = engine.run(desired)
        raise typer.Exit(code=0 if success else 1)


def build_command():
    """
    The click command behind the typer app. '-hostentry' takes two values
    per occurrence, which typer annotations cannot express for a repeatable option.
    """
    command = typer.main.get_command(app)
    for param in command.params:
        if param.name == "hostentry":
            param.nargs = 2
    return command


def run(argv: Optional[List[str]] = None) -> int:
    """
    Runs the CLI and returns the process exit status.
    Usage errors (unknown flag, missing or empty value) exit with 1 before any action runs.
    """
    try:
        build_command().main(args=argv, prog_name="configure-host", standalone_mode=True)
    except SystemExit as e:
        code = e.code if isinstance(e.code, int) else (0 if e.code is None else 1)
        # click reports usage errors with status 2
        return 1 if code == 2 else code
    return 0


def cli():
    sys.exit(run())


if __name__ == "__main__":
    cli()
