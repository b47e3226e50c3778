"""Network I/O sampling."""

from collections.abc import Mapping
from typing import Any

import psutil

from dashy.logging import get_logger

log = get_logger(__name__)


def sum_interfaces(counters: Mapping[str, Any]) -> tuple[int, int]:
    """Sum received/sent bytes over every interface, loopback included."""
    total_rx = 0
    total_tx = 0
    for stats in counters.values():
        total_rx += stats.bytes_recv
        total_tx += stats.bytes_sent
    return total_rx, total_tx


def read_network_io() -> tuple[int, int]:
    """Return host-wide cumulative (rx_bytes, tx_bytes)."""
    try:
        counters = psutil.net_io_counters(pernic=True)
    except OSError as e:
        log.debug("network_source_unavailable", error=str(e))
        return 0, 0
    return sum_interfaces(counters or {})
