import subprocess

from utils.command import PrivilegedExecutor


class DummyCP:
    def __init__(self, rc=0, out="", err=""):
        self.returncode = rc
        self.stdout = out
        self.stderr = err


def capture(monkeypatch, rc=0, out="", err=""):
    calls = []

    def fake_run(argv, input=None, stdout=None, stderr=None, universal_newlines=False):
        calls.append((argv, input))
        return DummyCP(rc, out, err)

    monkeypatch.setattr(subprocess, "run", fake_run)
    return calls


def test_root_runs_directly(monkeypatch):
    calls = capture(monkeypatch, out="ok\n")
    res = PrivilegedExecutor(sudo_password="", euid=0).run(["hostname", "web01"], sudo=True)

    assert calls == [(["hostname", "web01"], None)]
    assert not res.failed
    assert res.stdout == "ok\n"


def test_unprivileged_uses_passwordless_sudo(monkeypatch):
    calls = capture(monkeypatch)
    PrivilegedExecutor(sudo_password="", euid=1000).run(["tee", "/etc/hosts"], sudo=True, input="x\n")
    assert calls == [(["sudo", "-n", "tee", "/etc/hosts"], "x\n")]


def test_sudo_password_sent_on_stdin(monkeypatch):
    calls = capture(monkeypatch)
    PrivilegedExecutor(sudo_password="s3cret", euid=1000).run(["tee", "/etc/hosts"], sudo=True, input="x\n")
    assert calls == [(["sudo", "-S", "-p", "", "tee", "/etc/hosts"], "s3cret\nx\n")]


def test_reads_never_escalate(monkeypatch):
    calls = capture(monkeypatch)
    PrivilegedExecutor(sudo_password="", euid=1000).run(["ip", "route", "show", "default"])
    assert calls[0][0] == ["ip", "route", "show", "default"]


def test_failure_is_reported_not_raised(monkeypatch):
    capture(monkeypatch, rc=1, err="sudo: a password is required\n")
    res = PrivilegedExecutor(sudo_password="", euid=1000).run(["hostname", "x"], sudo=True)

    assert res.failed
    assert "NOPASSWD" in res.output
    assert res.argv == ["hostname", "x"]


def test_missing_binary_is_a_failed_result(monkeypatch):
    def fake_run(*args, **kwargs):
        raise FileNotFoundError("No such file or directory: 'netplan'")

    monkeypatch.setattr(subprocess, "run", fake_run)
    res = PrivilegedExecutor(sudo_password="", euid=0).run(["netplan", "apply"])
    assert res.returncode == 127
    assert "netplan" in res.output
