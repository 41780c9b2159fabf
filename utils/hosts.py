"""
Line-oriented editing of the static hosts table.

The table is kept as the ordered list of physical lines so untouched lines
(comments, blank lines, other entries) are written back verbatim. Logically it
maps names to addresses, but one line may carry several whitespace-separated
aliases.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


def _fields(line: str) -> List[str]:
    """Whitespace-separated fields of a line, ignoring comments."""
    return line.split("#", 1)[0].split()


@dataclass
class HostsTable:
    lines: List[str] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> "HostsTable":
        return cls(lines=text.splitlines())

    def render(self) -> str:
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"

    def lines_with_name(self, name: str) -> List[str]:
        """Lines where 'name' appears as a hostname or alias (never as the address field)."""
        return [l for l in self.lines if name in _fields(l)[1:]]

    def address_of(self, name: str) -> Optional[str]:
        for line in self.lines:
            fields = _fields(line)
            if name in fields[1:]:
                return fields[0]
        return None

    def has_entry(self, name: str, ip: str) -> bool:
        for line in self.lines:
            fields = _fields(line)
            if fields and fields[0] == ip and name in fields[1:]:
                return True
        return False


def upsert(table: HostsTable, name: str, ip: str) -> Tuple[HostsTable, bool]:
    """
    Ensures 'name' resolves to 'ip' through exactly one line.

    1. A line with address 'ip' already listing 'name' (possibly among aliases) -> unchanged.
    2. Otherwise every line listing 'name' is dropped and 'ip<TAB>name' is appended.
    """
    if table.has_entry(name, ip):
        return table, False

    kept = [l for l in table.lines if name not in _fields(l)[1:]]
    kept.append(f"{ip}\t{name}")
    return HostsTable(lines=kept), True


def set_localhost_alias(table: HostsTable, name: str, alias_ip: str = "127.0.1.1") -> Tuple[HostsTable, bool]:
    """
    Points the localhost-alias line (address 127.0.1.1) at 'name'.
    Every such line is rewritten to 'alias_ip<TAB>name'; if there is none, one is appended.
    """
    target = f"{alias_ip}\t{name}"
    new_lines = []
    found = False

    for line in table.lines:
        fields = _fields(line)
        if fields and fields[0] == alias_ip:
            new_lines.append(target)  # Replace
            found = True
        else:
            new_lines.append(line)  # Keep

    if not found:
        new_lines.append(target)

    changed = new_lines != table.lines
    return HostsTable(lines=new_lines), changed
