"""
configure-host errors.

The core only defines exceptions; the CLI and the engine decide how they are shown.
"""


class ConfigureHostError(Exception):
    """Base error."""
    pass


class ConfigError(ConfigureHostError):
    """Settings file unreadable or with an invalid format."""
    pass


class DetectionFailure(ConfigureHostError):
    """No usable network interface. Aborts IP reconciliation only."""
    pass


class ApplyFailure(ConfigureHostError):
    """A mutating command failed."""
    pass
