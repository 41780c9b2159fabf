from typing import Dict, List, Optional, Set, Tuple

import pytest

from core.models import HostContext
from core.settings import AppSettings
from core.state import config as global_config
from utils.command import CommandResult

# Commands that change the host. Everything else is a read.
MUTATING = [
    ("tee",), ("cp",), ("chmod",),
    ("ip", "addr", "flush"), ("ip", "addr", "add"), ("ip", "link", "set"),
    ("netplan", "apply"),
]


class FakeHost:
    """
    In-memory Linux host answering the commands the reconcilers issue.
    Files live in a dict, interfaces in a name -> [cidr] map.
    """

    def __init__(
            self,
            hostname: str = "old-host",
            files: Optional[Dict[str, str]] = None,
            links: Tuple[str, ...] = ("lo", "eth0"),
            default_iface: Optional[str] = "eth0",
            netplan_installed: bool = False,
    ):
        self.hostname = hostname
        self.files: Dict[str, str] = dict(files or {})
        self.modes: Dict[str, str] = {}
        self.dirs: Set[str] = set()
        self.links: List[str] = list(links)
        self.addresses: Dict[str, List[str]] = {name: [] for name in links}
        self.up: Set[str] = set()
        self.default_iface = default_iface
        self.netplan_installed = netplan_installed
        self.failing: List[Tuple[str, ...]] = []
        self.calls: List[Tuple[List[str], bool]] = []

    # --- test helpers ---

    def fail(self, *prefix: str):
        self.failing.append(tuple(prefix))

    def mutating_calls(self) -> List[List[str]]:
        return [argv for argv, _ in self.calls
                if any(tuple(argv[:len(p)]) == p for p in MUTATING)
                or (argv[0] == "hostname" and len(argv) > 1)]

    def ran(self, *prefix: str) -> bool:
        return any(tuple(argv[:len(prefix)]) == prefix for argv, _ in self.calls)

    def _dir_exists(self, path: str) -> bool:
        path = path.rstrip("/")
        return path in self.dirs or any(f.startswith(path + "/") for f in self.files)

    def _children(self, path: str) -> List[str]:
        prefix = path.rstrip("/") + "/"
        return sorted(f for f in self.files if f.startswith(prefix) and "/" not in f[len(prefix):])

    # --- executor interface ---

    def run(self, argv, sudo: bool = False, input: Optional[str] = None) -> CommandResult:
        argv = list(argv)
        self.calls.append((argv, sudo))

        if any(tuple(argv[:len(p)]) == p for p in self.failing):
            return CommandResult(argv=argv, returncode=1, stderr="simulated failure")

        ok = lambda out="": CommandResult(argv=argv, returncode=0, stdout=out)
        err = lambda msg="": CommandResult(argv=argv, returncode=1, stderr=msg)
        cmd = argv[0]

        if cmd == "hostname":
            if len(argv) == 1:
                return ok(self.hostname + "\n")
            self.hostname = argv[1]
            return ok()

        if cmd == "ip":
            return self._ip(argv[1:], ok, err)

        if cmd == "test":
            exists = argv[2] in self.files if argv[1] == "-f" else self._dir_exists(argv[2])
            return ok() if exists else err()

        if cmd == "ls":
            if not self._dir_exists(argv[-1]):
                return err(f"ls: cannot access '{argv[-1]}'")
            return ok("".join(f.rsplit("/", 1)[1] + "\n" for f in self._children(argv[-1])))

        if cmd == "find":
            if not self._dir_exists(argv[1]):
                return err()
            return ok("".join(f + "\n" for f in self._children(argv[1]) if f.endswith(".yaml")))

        if cmd == "cat":
            if argv[1] not in self.files:
                return err(f"cat: {argv[1]}: No such file or directory")
            return ok(self.files[argv[1]])

        if cmd == "tee":
            self.files[argv[1]] = input or ""
            return ok(input or "")

        if cmd == "cp":
            src, dest = argv[-2], argv[-1]
            if src not in self.files:
                return err()
            self.files[dest] = self.files[src]
            return ok()

        if cmd == "chmod":
            self.modes[argv[2]] = argv[1]
            return ok()

        if cmd == "which":
            return ok(f"/usr/sbin/{argv[1]}\n") if argv[1] == "netplan" and self.netplan_installed else err()

        if cmd == "netplan" and argv[1:] == ["apply"]:
            return ok()

        return err(f"{cmd}: command not found")

    def _ip(self, args, ok, err):
        if args == ["route", "show", "default"]:
            if not self.default_iface:
                return ok()
            return ok(f"default via 10.0.0.1 dev {self.default_iface} proto dhcp metric 100\n")

        if args == ["-o", "link", "show"]:
            return ok("".join(
                f"{i}: {name}: <BROADCAST,MULTICAST,UP> mtu 1500 qdisc noqueue state UP\\    link/ether 00:00:00:00:00:0{i}\n"
                for i, name in enumerate(self.links, start=1)))

        if args[:4] == ["-4", "-o", "addr", "show"]:
            name = args[-1]
            if name not in self.addresses:
                return err(f'Device "{name}" does not exist.')
            return ok("".join(
                f"2: {name}    inet {cidr} brd 10.0.0.255 scope global {name}\\       valid_lft forever\n"
                for cidr in self.addresses[name]))

        if args[:2] == ["addr", "flush"]:
            self.addresses[args[-1]] = []
            return ok()

        if args[:2] == ["addr", "add"]:
            name = args[-1]
            if name not in self.addresses:
                return err("Cannot find device")
            self.addresses[name].append(args[2])
            return ok()

        if args[:2] == ["link", "set"]:
            self.up.add(args[2])
            return ok()

        return err("unsupported ip invocation")


class MemoryRecorder:
    def __init__(self):
        self.messages: List[str] = []

    def record(self, message: str):
        self.messages.append(message)


HOSTS = (
    "127.0.0.1\tlocalhost\n"
    "127.0.1.1\told-host\n"
    "\n"
    "# The following lines are desirable for IPv6 capable hosts\n"
    "::1     ip6-localhost ip6-loopback\n"
)


@pytest.fixture(autouse=True)
def quiet():
    global_config.VERBOSE = False
    yield
    global_config.VERBOSE = False
    global_config.SUDO_PASSWORD = None


@pytest.fixture
def fake_host():
    return FakeHost(files={"/etc/hosts": HOSTS, "/etc/hostname": "old-host\n"})


@pytest.fixture
def recorder():
    return MemoryRecorder()


@pytest.fixture
def settings():
    return AppSettings()


@pytest.fixture
def ctx(fake_host, settings, recorder):
    return HostContext(executor=fake_host, settings=settings, recorder=recorder)
