import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Union

import yaml
from dotenv import load_dotenv

from core.errors import ConfigError

# Load env vars if present
load_dotenv()

DEFAULT_CONFIG_FILE = "/etc/configure-host.yaml"


# --- DATACLASSES (SCHEMA) ---

@dataclass
class PathSettings:
    """Files and directories touched on the host."""
    hostname_file: str = "/etc/hostname"
    hosts_file: str = "/etc/hosts"
    netplan_dir: str = "/etc/netplan"
    netplan_default_file: str = "01-netcfg.yaml"

    @property
    def netplan_default_path(self) -> str:
        return str(Path(self.netplan_dir) / self.netplan_default_file)


@dataclass
class NetworkSettings:
    """Address assignment behaviour."""
    # Fixed prefix: this is not a netmask resolver.
    prefix_length: int = 24
    localhost_alias_ip: str = "127.0.1.1"
    # When the interface already holds the desired IP, the hosts entry is left alone unless enabled.
    sync_hosts_when_unchanged: bool = False
    netplan_command: str = "netplan"


@dataclass
class LoggingSettings:
    log_file: Optional[str] = "~/.configure-host/configure-host.log"
    syslog_tag: str = "configure-host"
    syslog_address: str = "/dev/log"


@dataclass
class AppSettings:
    """Root configuration object."""
    paths: PathSettings = field(default_factory=PathSettings)
    network: NetworkSettings = field(default_factory=NetworkSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


# --- LOADER LOGIC ---

def _section(file_config: Dict, name: str) -> Dict:
    value = file_config.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Section '{name}' must be a mapping, got {type(value).__name__}")
    return value


def _build(schema, merged: Dict):
    # We filter only known keys to avoid init errors
    known = {k: v for k, v in merged.items() if k in schema.__annotations__}
    try:
        return schema(**known)
    except TypeError as e:
        raise ConfigError(f"Invalid {schema.__name__}: {e}") from e


def load_settings(config_path: Optional[str] = None) -> AppSettings:
    """
    Loads configuration merging: Defaults (Schema) < YAML File (Config) < Environment Vars.
    A missing file is not an error: the defaults describe a stock Ubuntu host.
    """
    config_path = config_path or os.getenv("CONFIGURE_HOST_CONFIG") or DEFAULT_CONFIG_FILE

    # 1. Load YAML Config
    file_config = {}
    path = Path(config_path)
    if path.exists():
        try:
            with open(path, 'r') as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load {config_path}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigError(f"{config_path} must contain a mapping at top level")

    # 2. Load Environment Variables (Overrides)
    env_config = {
        "paths": {
            "hostname_file": os.getenv("CONFIGURE_HOST_HOSTNAME_FILE"),
            "hosts_file": os.getenv("CONFIGURE_HOST_HOSTS_FILE"),
            "netplan_dir": os.getenv("CONFIGURE_HOST_NETPLAN_DIR"),
        },
        "logging": {
            "log_file": os.getenv("CONFIGURE_HOST_LOG_FILE"),
        },
    }

    # Cleanup: We remove None/Empty keys from ENV dictionaries
    def clean_none(d: Union[Dict, None]):
        if not isinstance(d, dict): return d
        return {k: clean_none(v) for k, v in d.items() if v is not None and v != {}}

    env_config = clean_none(env_config)

    # 3. Merge Logic. Priority: Env > File > Defaults
    paths_final = {**_section(file_config, "paths"), **env_config.get("paths", {})}
    network_final = _section(file_config, "network")
    logging_final = {**_section(file_config, "logging"), **env_config.get("logging", {})}

    network_obj = _build(NetworkSettings, network_final)
    if not isinstance(network_obj.prefix_length, int) or not 0 < network_obj.prefix_length <= 32:
        raise ConfigError(f"network.prefix_length must be an integer in 1..32, got {network_obj.prefix_length!r}")

    return AppSettings(
        paths=_build(PathSettings, paths_final),
        network=network_obj,
        logging=_build(LoggingSettings, logging_final),
    )
