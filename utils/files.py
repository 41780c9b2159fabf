import hashlib
from typing import List, Optional

from core.errors import ApplyFailure
from utils.command import CommandResult


def file_exists(executor, path: str) -> bool:
    return not executor.run(["test", "-f", path]).failed


def dir_exists(executor, path: str) -> bool:
    return not executor.run(["test", "-d", path]).failed


def dir_is_empty(executor, path: str) -> bool:
    res = executor.run(["ls", "-A", path])
    return res.failed or not res.stdout.strip()


def list_yaml_files(executor, directory: str) -> List[str]:
    """Top-level *.yaml files of a directory, sorted so 'the first one' is stable."""
    res = executor.run(["find", directory, "-maxdepth", "1", "-type", "f", "-name", "*.yaml"])
    if res.failed:
        return []
    return sorted(line.strip() for line in res.stdout.splitlines() if line.strip())


def read_file(executor, path: str, sudo: bool = False) -> str:
    """
    Reads a file and returns the content. A missing file reads as empty.
    Raises ApplyFailure when an existing file cannot be read.
    """
    if not file_exists(executor, path):
        return ""

    res = executor.run(["cat", path], sudo=sudo)
    _check(res, f"read {path}")
    return res.stdout


def write_file(executor, path: str, content: str, mode: Optional[str] = None) -> bool:
    """
    Overwrites a file through a privileged 'tee'.
    Returns False when the content is already up to date (nothing written).
    Raises ApplyFailure if the write fails.
    """
    new_hash = hashlib.md5(content.encode('utf-8')).hexdigest()
    current_hash = hashlib.md5(read_file(executor, path, sudo=True).encode('utf-8')).hexdigest()

    if new_hash == current_hash and file_exists(executor, path):
        return False

    res = executor.run(["tee", path], sudo=True, input=content)
    _check(res, f"write {path}")

    if mode:
        _check(executor.run(["chmod", mode, path], sudo=True), f"chmod {mode} {path}")
    return True


def copy_file(executor, src: str, dest: str):
    """Copies a file, overwriting the destination. Raises ApplyFailure on error."""
    _check(executor.run(["cp", "-f", src, dest], sudo=True), f"copy {src} to {dest}")


def _check(res: CommandResult, what: str):
    if res.failed:
        raise ApplyFailure(f"Failed to {what}: {res.output or f'exit status {res.returncode}'}")
