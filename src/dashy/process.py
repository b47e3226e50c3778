"""Process table snapshot and process termination."""

import sys

import psutil

from dashy.logging import get_logger
from dashy.tools import DEFAULT_TIMEOUT, run_tool

log = get_logger(__name__)


def process_table() -> dict[int, str]:
    """
    Snapshot the host's pid -> process name mapping.

    Processes that vanish, deny access mid-iteration or report no name are
    skipped, so callers fall back to their own name for them.
    """
    table: dict[int, str] = {}
    for proc in psutil.process_iter(attrs=["pid", "name"]):
        try:
            info = proc.info
            name = info.get("name")
            if name:
                table[info["pid"]] = name
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
    return table


def kill_command(pid: int, platform: str | None = None) -> list[str]:
    """Build the platform's forced-termination command for pid."""
    platform = platform or sys.platform
    if platform == "win32":
        return ["taskkill", "/PID", str(pid), "/F"]
    return ["kill", "-9", str(pid)]


def terminate(
    pid: int, platform: str | None = None, timeout: float = DEFAULT_TIMEOUT
) -> bool:
    """
    Ask the platform to terminate a process.

    Returns True when the kill tool exited successfully. A missing tool,
    permission failure or non-zero exit returns False. The process is not
    checked afterwards; callers re-sample to observe the effect.
    """
    log.info("terminate_requested", pid=pid)
    ok = run_tool(kill_command(pid, platform), timeout=timeout) is not None
    if ok:
        log.info("terminate_ok", pid=pid)
    else:
        log.warning("terminate_failed", pid=pid)
    return ok
