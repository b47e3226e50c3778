"""Listening port discovery.

A PortSource joins a pid -> process name table against the output of the
platform's socket enumeration tool. Sources never raise: a missing tool or a
failed run yields an empty list and malformed lines are skipped.
"""

import string
import sys
from collections.abc import Iterable, Mapping
from typing import Protocol

from dashy.logging import get_logger
from dashy.models import PortEntry
from dashy.tools import DEFAULT_TIMEOUT, run_tool

log = get_logger(__name__)

LSOF_COMMAND = ["lsof", "-i", "-P", "-n"]
SS_COMMAND = ["ss", "-tlnp"]

MAX_PORT = 65535


class PortSource(Protocol):
    """Capability: list listening TCP ports with their owning processes."""

    def list_ports(self, process_table: Mapping[int, str]) -> list[PortEntry]: ...


def _plain_int(text: str) -> int | None:
    """Parse plain ASCII digits, rejecting the extra forms int() accepts."""
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def parse_port(address: str) -> int | None:
    """Extract the port after the last ':' of an address field."""
    _, _, port_str = address.rpartition(":")
    port = _plain_int(port_str)
    if port is None or port > MAX_PORT:
        return None
    return port


def parse_pid(process_info: str) -> int | None:
    """Extract the digits following 'pid=' in an ss process column."""
    start = process_info.find("pid=")
    if start < 0:
        return None
    digits = []
    for char in process_info[start + 4 :]:
        if char not in string.digits:
            break
        digits.append(char)
    if not digits:
        return None
    return int("".join(digits))


def finalize_ports(entries: Iterable[PortEntry]) -> list[PortEntry]:
    """Drop repeated ports (first one wins) and sort ascending by port."""
    seen: dict[int, PortEntry] = {}
    for entry in entries:
        seen.setdefault(entry.port, entry)
    return sorted(seen.values(), key=lambda e: e.port)


def parse_lsof(text: str, process_table: Mapping[int, str]) -> list[PortEntry]:
    """
    Parse `lsof -i -P -n` output.

    Format: COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME
    where NAME is e.g. "*:8080" or "127.0.0.1:3000" followed by "(LISTEN)".
    """
    entries: list[PortEntry] = []
    for line in text.splitlines():
        if "LISTEN" not in line:
            continue
        parts = line.split()
        if len(parts) < 9:
            continue
        command, pid_str, address = parts[0], parts[1], parts[8]
        port = parse_port(address)
        if port is None:
            continue
        pid = _plain_int(pid_str)
        if pid is None:
            continue
        entries.append(PortEntry(port, process_table.get(pid) or command, pid))
    return finalize_ports(entries)


def parse_ss(text: str, process_table: Mapping[int, str]) -> list[PortEntry]:
    """
    Parse `ss -tlnp` output.

    Format: State Recv-Q Send-Q Local-Address:Port Peer-Address:Port Process
    where Process is e.g. users:(("nginx",pid=1234,fd=5)). Lines without a
    resolvable pid are not reported.
    """
    entries: list[PortEntry] = []
    for line in text.splitlines()[1:]:
        parts = line.split()
        if len(parts) < 5:
            continue
        port = parse_port(parts[3])
        if port is None:
            continue
        pid = parse_pid(" ".join(parts[5:]))
        if not pid:
            continue
        entries.append(PortEntry(port, process_table.get(pid) or "unknown", pid))
    return finalize_ports(entries)


class LsofPortSource:
    """macOS: one line per open socket from lsof."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout

    def list_ports(self, process_table: Mapping[int, str]) -> list[PortEntry]:
        output = run_tool(LSOF_COMMAND, timeout=self._timeout)
        if output is None:
            log.debug("port_source_unavailable", source="lsof")
            return []
        return parse_lsof(output, process_table)


class SsPortSource:
    """Linux: listening TCP sockets from ss."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout

    def list_ports(self, process_table: Mapping[int, str]) -> list[PortEntry]:
        output = run_tool(SS_COMMAND, timeout=self._timeout)
        if output is None:
            log.debug("port_source_unavailable", source="ss")
            return []
        return parse_ss(output, process_table)


class WindowsPortSource:
    """Windows port discovery is not implemented yet."""

    # TODO: parse `netstat -ano -p TCP` LISTENING rows here.

    def __init__(self) -> None:
        self._warned = False

    def list_ports(self, process_table: Mapping[int, str]) -> list[PortEntry]:
        if not self._warned:
            log.debug("port_source_unavailable", source="windows")
            self._warned = True
        return []


class UnsupportedPortSource:
    """Platforms without a socket enumeration tool we know how to read."""

    def list_ports(self, process_table: Mapping[int, str]) -> list[PortEntry]:
        return []


def select_port_source(
    platform: str | None = None, timeout: float = DEFAULT_TIMEOUT
) -> PortSource:
    """Pick the port source for the given (default: running) platform."""
    platform = platform or sys.platform
    if platform == "darwin":
        return LsofPortSource(timeout=timeout)
    if platform.startswith("linux"):
        return SsPortSource(timeout=timeout)
    if platform == "win32":
        return WindowsPortSource()
    return UnsupportedPortSource()
