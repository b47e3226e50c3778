"""Sampling engine for dashy."""

import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from queue import Queue

import psutil

from dashy.disk import DiskIOSource, select_disk_source
from dashy.logging import get_logger
from dashy.models import MetricSample, PortEntry
from dashy.network import read_network_io
from dashy.ports import PortSource, select_port_source
from dashy.process import process_table

log = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class Tick:
    """One complete sampling pass: raw metrics plus the listening ports."""

    sample: MetricSample
    ports: list[PortEntry]
    # Port generation the pass started under; see SystemMonitor.resample_ports
    generation: int = 0


class SystemMonitor:
    """
    Samples host metrics and listening ports once per interval.

    Runs in a separate daemon thread and pushes complete Ticks to a
    thread-safe Queue. collect() and collect_ports() can also be called
    directly for a synchronous sample.
    """

    def __init__(
        self,
        update_queue: Queue[Tick],
        interval: float = 1.0,
        disk_source: DiskIOSource | None = None,
        port_source: PortSource | None = None,
        network_reader: Callable[[], tuple[int, int]] = read_network_io,
        process_reader: Callable[[], Mapping[int, str]] = process_table,
    ) -> None:
        """
        Initialize the SystemMonitor.

        Args:
            update_queue: Thread-safe queue to push ticks to.
            interval: How often to sample (in seconds). Default 1.0s.
            disk_source: Disk counter source; chosen for this platform if None.
            port_source: Listening port source; chosen for this platform if None.
            network_reader: Returns cumulative (rx, tx) bytes.
            process_reader: Returns the pid -> name table for this tick.
        """
        self._queue = update_queue
        self._interval = interval
        self._disk_source = disk_source or select_disk_source()
        self._port_source = port_source or select_port_source()
        self._read_network = network_reader
        self._read_processes = process_reader
        self._stop_event = threading.Event()
        self._generation = 0
        self._generation_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        # Initialize CPU percent (first call returns 0.0)
        psutil.cpu_percent()

    @property
    def queue(self) -> Queue[Tick]:
        """Queue that completed ticks are pushed to."""
        return self._queue

    @property
    def interval(self) -> float:
        """Get the current sampling interval."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Set the sampling interval."""
        self._interval = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def generation(self) -> int:
        """Bumped whenever the port list is re-read out of band."""
        with self._generation_lock:
            return self._generation

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sampling thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="SystemMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the sampling thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _poll_loop(self) -> None:
        """Main sampling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                self._queue.put(self.collect())
            except Exception:
                # Keep sampling; the next tick may succeed
                log.exception("tick_failed")

            self._stop_event.wait(timeout=self._interval)

    def collect_sample(self) -> MetricSample:
        """Take the raw metric readings for one tick."""
        # Non-blocking, measured since the previous call
        cpu = psutil.cpu_percent()
        mem = psutil.virtual_memory()
        disk_read, disk_write = self._disk_source.read()
        net_rx, net_tx = self._read_network()

        return MetricSample(
            cpu_percent=cpu,
            memory_used=mem.used,
            memory_total=mem.total,
            disk_read_cum=disk_read,
            disk_write_cum=disk_write,
            net_rx_cum=net_rx,
            net_tx_cum=net_tx,
        )

    def collect_ports(self) -> list[PortEntry]:
        """List listening ports against a fresh process table snapshot."""
        return self._port_source.list_ports(self._read_processes())

    def resample_ports(self) -> list[PortEntry]:
        """
        Re-read the port list after the host changed under us (e.g. a kill).

        Ticks already in flight were sampled under the old generation and
        must not replace the result.
        """
        with self._generation_lock:
            self._generation += 1
        return self.collect_ports()

    def collect(self) -> Tick:
        """Collect a complete tick."""
        generation = self.generation
        return Tick(
            sample=self.collect_sample(),
            ports=self.collect_ports(),
            generation=generation,
        )
