import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

from core.state import config as global_config

# File log for diagnostics (START/END lines, stack traces). Handlers are attached by setup_file_logging.
sys_logger = logging.getLogger("configure_host")
sys_logger.setLevel(logging.INFO)
sys_logger.addHandler(logging.NullHandler())

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_file_logging(log_file: Optional[str]) -> Optional[Path]:
    """Attaches a file handler to sys_logger. Returns the resolved path, or None if disabled."""
    if not log_file:
        return None

    path = Path(log_file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as e:
        logger.log_step("warning", f"File logging disabled, cannot open {path}: {e}")
        return None

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    sys_logger.addHandler(handler)
    return path


class HostLogger:
    def __init__(self):
        self.custom_theme = Theme({
            "success": "bold green",
            "error": "bold red",
            "skip": "bold cyan",
            "warning": "bold yellow",
            "info": "dim white"
        })
        # Progress goes to stdout, errors always to stderr
        self.console = Console(theme=self.custom_theme)
        self.err_console = Console(theme=self.custom_theme, stderr=True)

        # Current nesting depth (indentation)
        self.indent_level = 0

    def log_step(self, status: str, msg: str):
        """
        Prints one line for the current step, indented at the current level.
        Errors and warnings always reach stderr; everything else only in verbose mode.
        """
        icons = {
            "success": "✅",
            "error": "❌",
            "skip": "🔵",
            "warning": "🔶",
            "info": "ℹ️"
        }
        icon = icons.get(status, "•")
        indent = "   " * self.indent_level
        line = f"{indent}{icon} [{status}]{escape(msg)}[/{status}]"

        if status in ("error", "warning"):
            self.err_console.print(line)
        elif global_config.VERBOSE:
            self.console.print(line)

    def verbose(self, msg: str):
        """Plain progress text, shown only with -verbose."""
        if global_config.VERBOSE:
            indent = "   " * self.indent_level
            self.console.print(f"{indent}{msg}", markup=False, highlight=False)

    def workflow(self, name: str):
        """Context manager for a top-level run"""
        return self._Context(self, name, type="workflow")

    def task(self, name: str):
        """Context manager for a nested action"""
        return self._Context(self, name, type="task")

    class _Context:
        def __init__(self, logger, name, type):
            self.logger = logger
            self.name = name
            self.type = type

        def __enter__(self):
            if global_config.VERBOSE:
                indent = "   " * self.logger.indent_level
                if self.type == "workflow":
                    self.logger.console.print(f"\n{indent}🚀 [bold blue]{self.name}[/bold blue]")
                else:
                    self.logger.console.print(f"{indent}🔸 [bold white]{self.name}[/bold white]")

            self.logger.indent_level += 1
            return self

        def __exit__(self, exc_type, exc_value, traceback):
            self.logger.indent_level -= 1

            if exc_type:
                self.logger.log_step("error", f"Interrupted by error: {exc_value}")
                # Let the error propagate
                return False


logger = HostLogger()


class ChangeRecorder:
    """
    Audit sink for applied changes. Writes to syslog under a fixed tag
    (like `logger -t configure-host`) and echoes the message in verbose mode.
    """

    def __init__(self, tag: str = "configure-host", address: Optional[str] = "/dev/log"):
        self.tag = tag
        self._audit = logging.getLogger(f"configure_host.audit.{tag}")
        self._audit.setLevel(logging.INFO)
        self._audit.propagate = False

        if address and not self._audit.handlers:
            self._attach_syslog(address)

    def _attach_syslog(self, address: str):
        if address.startswith("/") and not Path(address).exists():
            sys_logger.warning(f"Syslog socket {address} not found; audit entries go to the file log only")
            return
        try:
            handler = logging.handlers.SysLogHandler(address=address)
        except OSError as e:
            sys_logger.warning(f"Syslog unavailable at {address} ({e}); audit entries go to the file log only")
            return
        handler.setFormatter(logging.Formatter(f"{self.tag}: %(message)s"))
        self._audit.addHandler(handler)

    def record(self, message: str):
        self._audit.info(message)
        sys_logger.info(f"[AUDIT] {message}")
        logger.verbose(message)
