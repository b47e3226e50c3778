"""Data models for dashy."""

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class MetricSample:
    """Raw readings taken by the samplers during one tick."""

    cpu_percent: float  # 0.0 - 100.0, whole host
    memory_used: int  # Bytes
    memory_total: int  # Bytes
    disk_read_cum: int  # Bytes since boot
    disk_write_cum: int
    net_rx_cum: int  # Bytes since interface came up
    net_tx_cum: int


@dataclass(slots=True, frozen=True)
class PortEntry:
    """A listening TCP port and the process that owns it."""

    port: int
    process_name: str
    pid: int


@dataclass(slots=True, frozen=True)
class KillProcessDialog:
    """Open confirmation dialog for terminating the process on a port."""

    port: int
    process_name: str
    selected_yes: bool = False
