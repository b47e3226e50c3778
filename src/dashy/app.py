"""dashy - Main Textual application."""

import functools
from collections.abc import Callable
from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import DataTable, Footer, Sparkline, Static

from dashy.config import Config
from dashy.disk import select_disk_source
from dashy.formatting import format_gigabytes, format_rate
from dashy.keys import dispatch
from dashy.logging import get_logger
from dashy.models import KillProcessDialog, PortEntry
from dashy.monitor import SystemMonitor, Tick
from dashy.ports import select_port_source
from dashy.process import terminate
from dashy.session import Session, SessionView

log = get_logger(__name__)

BAR_WIDTH = 30

# Every key the dashboard reacts to goes through dispatch(); priority bindings
# keep focused widgets and Textual's defaults from consuming them first.
_KEYS = [
    ("ctrl+c", False, ""),
    ("q", True, "Quit"),
    ("Q", False, ""),
    ("escape", False, ""),
    ("down", False, ""),
    ("j", True, "Next"),
    ("up", False, ""),
    ("k", True, "Prev"),
    ("enter", True, "Kill"),
    ("tab", False, ""),
    ("left", False, ""),
    ("right", False, ""),
    ("h", False, ""),
    ("l", False, ""),
    ("y", False, ""),
    ("n", False, ""),
]


class CpuPanel(Container):
    """CPU usage sparkline over the history window."""

    DEFAULT_CSS = """
    CpuPanel {
        width: 1fr;
        border: round $accent;
    }

    CpuPanel Sparkline {
        height: 1fr;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the sparkline."""
        yield Sparkline([], summary_function=max, id="cpu-sparkline")

    def on_mount(self) -> None:
        """Set the initial title."""
        self.border_title = "CPU: 0.0%"

    def update_view(self, view: SessionView) -> None:
        """Update the sparkline from a session snapshot."""
        self.border_title = f"CPU: {view.cpu_percent:.1f}%"
        self.query_one("#cpu-sparkline", Sparkline).data = list(view.cpu_history)


class MemoryPanel(Static):
    """Memory gauge."""

    DEFAULT_CSS = """
    MemoryPanel {
        width: 1fr;
        border: round $accent;
        padding: 1;
    }
    """

    def on_mount(self) -> None:
        """Set the title."""
        self.border_title = "Memory"
        self.update("Loading memory info...")

    def update_view(self, view: SessionView) -> None:
        """Update the gauge from a session snapshot."""
        self.update(self.render_gauge(view))

    @staticmethod
    def render_gauge(view: SessionView) -> str:
        """Render the memory bar and its label."""
        if view.memory_total == 0:
            return "Loading memory info..."
        bar_len = int(view.memory_ratio * BAR_WIDTH)
        bar = "[magenta]█[/magenta]" * bar_len + "[dim]░[/dim]" * (BAR_WIDTH - bar_len)
        # Use escaped brackets for the bar container
        return (
            f"\\[{bar}]\n"
            f"{format_gigabytes(view.memory_used)} / {format_gigabytes(view.memory_total)}"
        )


class RatePanel(Static):
    """Two labelled byte-rate lines (disk read/write, network rx/tx)."""

    DEFAULT_CSS = """
    RatePanel {
        width: 1fr;
        border: round $accent;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        title: str,
        labels: tuple[str, str],
        colors: tuple[str, str],
        *args,
        **kwargs,
    ) -> None:
        """Initialize RatePanel."""
        super().__init__(*args, **kwargs)
        self._title = title
        self._labels = labels
        self._colors = colors

    def on_mount(self) -> None:
        """Set the title and zero rates."""
        self.border_title = self._title
        self.update_rates(0, 0)

    def update_rates(self, first: int, second: int) -> None:
        """Show the latest per-interval rates."""
        self.update(self.render_rates(first, second))

    def render_rates(self, first: int, second: int) -> str:
        """Render both rate lines."""
        lines = []
        for label, color, value in zip(self._labels, self._colors, (first, second)):
            lines.append(f"[dim]{label:<7}[/dim][{color}]{format_rate(value)}[/{color}]")
        return "\n".join(lines)


class PortTable(Container):
    """Container for the listening ports table."""

    DEFAULT_CSS = """
    PortTable {
        height: 1fr;
        border: round $accent;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the ports table."""
        yield DataTable(id="port-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#port-table", DataTable)
        table.cursor_type = "row"
        # Selection lives in the session; keys reach the app unconsumed
        table.can_focus = False
        table.add_column("Port", key="port", width=10)
        table.add_column("Process", key="process")
        table.add_column("PID", key="pid", width=8)
        self.border_title = "Open Ports (0)"

    def update_ports(self, ports: tuple[PortEntry, ...], selected: int) -> None:
        """
        Replace the table contents.

        The port list is replaced wholesale every tick, so rows are rebuilt
        rather than patched.
        """
        table = self.query_one("#port-table", DataTable)
        table.clear()
        for entry in ports:
            table.add_row(str(entry.port), entry.process_name, str(entry.pid))
        if ports:
            table.move_cursor(row=selected)
            self.border_title = "Open Ports - \\[k/j] navigate, \\[Enter] kill"
        else:
            self.border_title = "Open Ports (0)"


class ConfirmDialog(Static):
    """Kill confirmation shown over the dashboard while a dialog is open."""

    DEFAULT_CSS = """
    ConfirmDialog {
        width: 50;
        height: 9;
        border: round $error;
        background: $surface;
        padding: 1 2;
    }
    """

    def on_mount(self) -> None:
        """Set the title."""
        self.border_title = "Confirm Kill"

    def update_dialog(self, dialog: KillProcessDialog) -> None:
        """Render the question and highlight the current answer."""
        self.update(self.render_dialog(dialog))

    @staticmethod
    def render_dialog(dialog: KillProcessDialog) -> str:
        """Render dialog text."""
        if dialog.selected_yes:
            no = " No "
            yes = "[bold black on red] Yes [/]"
        else:
            no = "[bold black on green] No [/]"
            yes = " Yes "
        return (
            f"Kill process [bold yellow]{dialog.process_name}[/] on port {dialog.port}?\n\n"
            f"        {no}     {yes}\n\n"
            "[dim]\\[Tab] switch  \\[Enter] confirm  \\[Esc] cancel[/dim]"
        )


class DashyApp(App):
    """Main dashy application."""

    TITLE = "dashy"
    SUB_TITLE = "Terminal System Monitor"

    CSS = """
    Screen {
        layout: vertical;
        layers: base dialog;
    }

    #top-row {
        height: 35%;
    }

    #middle-row {
        height: 30%;
    }

    #dialog-layer {
        layer: dialog;
        width: 100%;
        height: 100%;
        align: center middle;
        display: none;
    }

    #dialog-layer.open {
        display: block;
    }
    """

    BINDINGS = [
        Binding(key, f"key('{key}')", description, show=show, priority=True)
        for key, show, description in _KEYS
    ]

    def __init__(
        self,
        config: Config | None = None,
        monitor: SystemMonitor | None = None,
        terminator: Callable[[int], bool] | None = None,
    ) -> None:
        """Initialize the DashyApp."""
        super().__init__()
        self._config = config or Config()
        self._session = Session(history_size=self._config.sampling.history_size)
        timeout = self._config.sampling.command_timeout
        self._monitor = monitor or SystemMonitor(
            Queue(),
            interval=self._config.sampling.interval,
            disk_source=select_disk_source(timeout=timeout),
            port_source=select_port_source(timeout=timeout),
        )
        self._update_queue = self._monitor.queue
        self._terminate = terminator or functools.partial(terminate, timeout=timeout)

    @property
    def session(self) -> Session:
        """The dashboard session state."""
        return self._session

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Horizontal(CpuPanel(id="cpu-panel"), MemoryPanel(id="memory-panel"), id="top-row")
        yield Horizontal(
            RatePanel("Disk I/O", ("Read:", "Write:"), ("green", "red"), id="disk-panel"),
            RatePanel("Network I/O", ("RX:", "TX:"), ("green", "yellow"), id="network-panel"),
            id="middle-row",
        )
        yield PortTable(id="port-panel")
        yield Container(ConfirmDialog(id="confirm-dialog"), id="dialog-layer")
        yield Footer()

    def on_mount(self) -> None:
        """Start the system monitor when the app is mounted."""
        log.info("dashboard_started", interval=self._monitor.interval)
        self._monitor.start()
        # Set up a timer to poll the queue for updates
        self.set_interval(0.25, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Apply the newest tick from the queue, skipping any stale ones."""
        tick = None
        while True:
            try:
                tick = self._update_queue.get_nowait()
            except Empty:
                break

        # Drop ticks sampled before the last out-of-band port re-sample
        if tick is not None and tick.generation >= self._monitor.generation:
            self.apply_tick(tick)

    def apply_tick(self, tick: Tick) -> None:
        """Push one tick into the session and redraw."""
        self._session.update(tick.sample, tick.ports)
        self.refresh_view()

    def refresh_view(self) -> None:
        """Redraw every panel from the session snapshot."""
        view = self._session.view()
        self.query_one(CpuPanel).update_view(view)
        self.query_one(MemoryPanel).update_view(view)
        self.query_one("#disk-panel", RatePanel).update_rates(view.disk_read, view.disk_write)
        self.query_one("#network-panel", RatePanel).update_rates(view.net_rx, view.net_tx)
        self.query_one(PortTable).update_ports(view.ports, view.selected)

        layer = self.query_one("#dialog-layer")
        if view.dialog is not None:
            self.query_one(ConfirmDialog).update_dialog(view.dialog)
            layer.add_class("open")
        else:
            layer.remove_class("open")

    def action_key(self, key: str) -> None:
        """Route a key press through the session key map."""
        pid = dispatch(self._session, key)
        if pid is not None:
            self._kill(pid)
        if self._session.should_quit:
            self.action_quit()
            return
        self.refresh_view()

    def _kill(self, pid: int) -> None:
        """Terminate pid, then re-sample the port list before returning."""
        if self._terminate(pid):
            self.notify(f"Killed process {pid}")
        else:
            self.notify(f"Failed to kill process {pid}", severity="error")
        self._session.replace_ports(self._monitor.resample_ports())

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        log.info("dashboard_stopped")
        self.exit()


def run(config: Config) -> None:
    """Run the dashboard with the given config."""
    app = DashyApp(config=config)
    app.run()
