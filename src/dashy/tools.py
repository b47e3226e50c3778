"""Invocation of the platform command-line tools the samplers read from."""

import subprocess

from dashy.logging import get_logger

log = get_logger(__name__)

DEFAULT_TIMEOUT = 5.0


def run_tool(args: list[str], timeout: float = DEFAULT_TIMEOUT) -> str | None:
    """
    Run an external tool and return its stdout.

    Returns None when the tool is missing, cannot be executed, times out or
    exits non-zero. Callers treat None as "source unavailable".
    """
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as e:
        log.debug("tool_unavailable", tool=args[0], error=str(e))
        return None

    if result.returncode != 0:
        log.debug("tool_failed", tool=args[0], returncode=result.returncode)
        return None
    return result.stdout
