"""Dashboard session state.

Session is the single owner of everything the dashboard presents: the CPU
history, memory figures, disk and network rates, the port list, the
selected row and the kill confirmation dialog. The UI applies each sampled
tick through update() and routes key presses to the mutators below; no
other code changes this state.
"""

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass, replace

from dashy.models import KillProcessDialog, MetricSample, PortEntry
from dashy.rates import CounterPair

DEFAULT_HISTORY_SIZE = 60


@dataclass(slots=True, frozen=True)
class SessionView:
    """Read-only snapshot of the session for rendering."""

    cpu_history: tuple[float, ...]
    memory_used: int
    memory_total: int
    disk_read: int
    disk_write: int
    net_rx: int
    net_tx: int
    ports: tuple[PortEntry, ...]
    selected: int
    dialog: KillProcessDialog | None

    @property
    def cpu_percent(self) -> float:
        """Most recent CPU reading, 0.0 before the first tick."""
        return self.cpu_history[-1] if self.cpu_history else 0.0

    @property
    def memory_ratio(self) -> float:
        """Used / total memory clamped to 0.0 - 1.0."""
        if self.memory_total <= 0:
            return 0.0
        return min(self.memory_used / self.memory_total, 1.0)


class Session:
    """Mutable dashboard state driven by ticks and key presses."""

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE) -> None:
        self.cpu_history: deque[float] = deque(maxlen=history_size)
        self.memory_used = 0
        self.memory_total = 0
        self.ports: list[PortEntry] = []
        self.selected = 0
        self.dialog: KillProcessDialog | None = None
        self.should_quit = False
        self._disk = CounterPair()
        self._network = CounterPair()

    @property
    def disk_read(self) -> int:
        return self._disk.first

    @property
    def disk_write(self) -> int:
        return self._disk.second

    @property
    def net_rx(self) -> int:
        return self._network.first

    @property
    def net_tx(self) -> int:
        return self._network.second

    # Tick updates

    def update(self, sample: MetricSample, ports: Sequence[PortEntry]) -> None:
        """Apply one tick of samples. Leaves the confirmation dialog alone."""
        self.cpu_history.append(sample.cpu_percent)
        self.memory_used = sample.memory_used
        self.memory_total = sample.memory_total
        self._disk.update(sample.disk_read_cum, sample.disk_write_cum)
        self._network.update(sample.net_rx_cum, sample.net_tx_cum)
        self.replace_ports(ports)

    def replace_ports(self, ports: Sequence[PortEntry]) -> None:
        """Replace the whole port list and keep the selection in bounds."""
        self.ports = list(ports)
        if self.ports and self.selected >= len(self.ports):
            self.selected = len(self.ports) - 1

    # Selection

    def selected_port(self) -> PortEntry | None:
        """Entry under the selection, or None when the list is empty."""
        if 0 <= self.selected < len(self.ports):
            return self.ports[self.selected]
        return None

    def select_next(self) -> None:
        if self.ports:
            self.selected = (self.selected + 1) % len(self.ports)

    def select_prev(self) -> None:
        if self.ports:
            self.selected = (self.selected - 1) % len(self.ports)

    # Confirmation dialog

    def is_dialog_open(self) -> bool:
        return self.dialog is not None

    def request_kill(self) -> None:
        """Open the confirmation dialog for the selected port, answer defaulting to No."""
        entry = self.selected_port()
        if entry is not None:
            self.dialog = KillProcessDialog(entry.port, entry.process_name)

    def toggle_confirm(self) -> None:
        if self.dialog is not None:
            self.dialog = replace(self.dialog, selected_yes=not self.dialog.selected_yes)

    def cancel(self) -> None:
        self.dialog = None

    def confirm(self) -> int | None:
        """
        Close the dialog and return the pid to terminate, if the answer was Yes.

        The pid is read from the entry under the selection now, not from the
        entry the dialog was opened for. If the port list changed while the
        dialog was open, that can be a different process.
        """
        dialog, self.dialog = self.dialog, None
        if dialog is None or not dialog.selected_yes:
            return None
        entry = self.selected_port()
        return entry.pid if entry is not None else None

    def quick_confirm(self) -> int | None:
        """Close an open dialog and return the selected pid, ignoring the toggle."""
        if self.dialog is None:
            return None
        self.dialog = None
        entry = self.selected_port()
        return entry.pid if entry is not None else None

    def force_quit(self) -> None:
        self.should_quit = True

    def view(self) -> SessionView:
        """Snapshot the presented state."""
        return SessionView(
            cpu_history=tuple(self.cpu_history),
            memory_used=self.memory_used,
            memory_total=self.memory_total,
            disk_read=self.disk_read,
            disk_write=self.disk_write,
            net_rx=self.net_rx,
            net_tx=self.net_tx,
            ports=tuple(self.ports),
            selected=self.selected,
            dialog=self.dialog,
        )
