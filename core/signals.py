import signal
import threading
from contextlib import contextmanager

from utils.logger import sys_logger

# Signals that would otherwise stop a run between a read and its write
IGNORED_SIGNALS = ("SIGTERM", "SIGHUP", "SIGINT")


@contextmanager
def uninterruptible():
    """
    Ignores termination signals for the duration of the block, restoring the
    previous handlers afterwards. Crashes and power loss are not covered.
    Outside the main thread signal handlers cannot be changed, so this is a no-op there.
    """
    previous = {}

    if threading.current_thread() is threading.main_thread():
        for name in IGNORED_SIGNALS:
            sig = getattr(signal, name, None)
            if sig is None:  # Platform without this signal
                continue
            try:
                previous[sig] = signal.signal(sig, signal.SIG_IGN)
            except (ValueError, OSError) as e:
                sys_logger.warning(f"Cannot ignore {name}: {e}")

    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
