from typing import Optional


class RuntimeConfig:
    """
    Singleton class to hold global runtime configurations.
    """
    VERBOSE: bool = False
    SUDO_PASSWORD: Optional[str] = None
    CONFIG_FILE: str = "/etc/configure-host.yaml"


config = RuntimeConfig()
