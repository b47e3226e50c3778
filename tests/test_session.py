"""Tests for dashboard session state."""

import pytest

from dashy.models import KillProcessDialog, MetricSample, PortEntry
from dashy.session import Session


def make_sample(
    cpu: float = 10.0,
    disk: tuple[int, int] = (0, 0),
    network: tuple[int, int] = (0, 0),
    memory: tuple[int, int] = (4 * 1024**3, 16 * 1024**3),
) -> MetricSample:
    """Create a MetricSample for testing."""
    return MetricSample(
        cpu_percent=cpu,
        memory_used=memory[0],
        memory_total=memory[1],
        disk_read_cum=disk[0],
        disk_write_cum=disk[1],
        net_rx_cum=network[0],
        net_tx_cum=network[1],
    )


def make_ports(*ports: int) -> list[PortEntry]:
    """Create port entries with pid = port + 1000 and name = p<port>."""
    return [PortEntry(port, f"p{port}", port + 1000) for port in ports]


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def nginx_session(session: Session) -> Session:
    session.update(make_sample(), [PortEntry(80, "nginx", 123)])
    return session


class TestUpdate:
    """Tests for tick updates."""

    def test_cpu_history_bounded(self, session: Session):
        for i in range(75):
            session.update(make_sample(cpu=float(i)), [])
        assert len(session.cpu_history) == 60
        assert session.cpu_history[0] == 15.0
        assert session.cpu_history[-1] == 74.0

    def test_custom_history_size(self):
        session = Session(history_size=3)
        for i in range(5):
            session.update(make_sample(cpu=float(i)), [])
        assert list(session.cpu_history) == [2.0, 3.0, 4.0]

    def test_memory(self, session: Session):
        session.update(make_sample(memory=(1, 2)), [])
        assert (session.memory_used, session.memory_total) == (1, 2)

    def test_rates_cold_start_then_delta(self, session: Session):
        session.update(make_sample(disk=(1000, 2000), network=(5000, 6000)), [])
        assert (session.disk_read, session.disk_write) == (0, 0)
        assert (session.net_rx, session.net_tx) == (0, 0)

        session.update(make_sample(disk=(1500, 2100), network=(5300, 6400)), [])
        assert (session.disk_read, session.disk_write) == (500, 100)
        assert (session.net_rx, session.net_tx) == (300, 400)

    def test_rates_saturate_on_wrap(self, session: Session):
        session.update(make_sample(disk=(1000, 2000), network=(5000, 6000)), [])
        session.update(make_sample(disk=(10, 20), network=(50, 60)), [])
        assert (session.disk_read, session.disk_write) == (0, 0)
        assert (session.net_rx, session.net_tx) == (0, 0)

    def test_disk_and_network_cold_start_independent(self, session: Session):
        """A disk source reporting zeros does not hold back network rates."""
        session.update(make_sample(disk=(0, 0), network=(100, 100)), [])
        session.update(make_sample(disk=(4096, 4096), network=(300, 500)), [])
        assert (session.disk_read, session.disk_write) == (0, 0)
        assert (session.net_rx, session.net_tx) == (200, 400)

    def test_ports_replaced_not_merged(self, session: Session):
        session.update(make_sample(), make_ports(22, 80, 443))
        session.update(make_sample(), make_ports(8080))
        assert [e.port for e in session.ports] == [8080]

    def test_selection_clamped_when_list_shrinks(self, session: Session):
        session.update(make_sample(), make_ports(1, 2, 3, 4, 5))
        session.selected = 4
        session.update(make_sample(), make_ports(1, 2))
        assert session.selected == 1

    def test_selection_kept_when_list_empties(self, session: Session):
        session.update(make_sample(), make_ports(1, 2, 3))
        session.selected = 2
        session.update(make_sample(), [])
        assert session.selected == 2
        assert session.selected_port() is None

    def test_update_leaves_dialog_alone(self, nginx_session: Session):
        nginx_session.request_kill()
        nginx_session.update(make_sample(), make_ports(22))
        assert nginx_session.dialog == KillProcessDialog(80, "nginx", False)

    def test_replace_ports_clamps(self, session: Session):
        session.update(make_sample(), make_ports(1, 2, 3))
        session.selected = 2
        session.replace_ports(make_ports(1))
        assert session.selected == 0
        assert session.ports == make_ports(1)


class TestSelection:
    """Tests for wrapping selection movement."""

    def test_next_wraps(self, session: Session):
        session.update(make_sample(), make_ports(1, 2, 3))
        session.select_next()
        session.select_next()
        assert session.selected == 2
        session.select_next()
        assert session.selected == 0

    def test_prev_wraps(self, session: Session):
        session.update(make_sample(), make_ports(1, 2, 3))
        session.select_prev()
        assert session.selected == 2
        session.select_prev()
        assert session.selected == 1


class TestEmptyList:
    """Mutators on an empty port list change nothing and never fail."""

    def test_noops(self, session: Session):
        session.select_next()
        session.select_prev()
        session.request_kill()
        session.toggle_confirm()
        assert session.selected == 0
        assert session.dialog is None
        assert not session.is_dialog_open()

    def test_confirms_without_dialog(self, session: Session):
        assert session.confirm() is None
        assert session.quick_confirm() is None
        assert session.dialog is None


class TestDialog:
    """Tests for the kill confirmation state machine."""

    def test_round_trip(self, nginx_session: Session):
        nginx_session.request_kill()
        assert nginx_session.dialog == KillProcessDialog(80, "nginx", selected_yes=False)
        assert nginx_session.is_dialog_open()

        nginx_session.toggle_confirm()
        assert nginx_session.dialog == KillProcessDialog(80, "nginx", selected_yes=True)

        assert nginx_session.confirm() == 123
        assert nginx_session.dialog is None

    def test_toggle_twice_returns_to_no(self, nginx_session: Session):
        nginx_session.request_kill()
        nginx_session.toggle_confirm()
        nginx_session.toggle_confirm()
        assert nginx_session.dialog.selected_yes is False

    def test_confirm_no_closes_without_pid(self, nginx_session: Session):
        nginx_session.request_kill()
        assert nginx_session.confirm() is None
        assert nginx_session.dialog is None

    def test_cancel(self, nginx_session: Session):
        nginx_session.request_kill()
        nginx_session.toggle_confirm()
        nginx_session.cancel()
        assert nginx_session.dialog is None

    def test_quick_confirm_ignores_toggle(self, nginx_session: Session):
        nginx_session.request_kill()
        assert nginx_session.quick_confirm() == 123
        assert nginx_session.dialog is None

    def test_request_kill_uses_selection(self, session: Session):
        session.update(make_sample(), make_ports(22, 80, 443))
        session.select_next()
        session.request_kill()
        assert session.dialog == KillProcessDialog(80, "p80", False)

    def test_confirm_with_emptied_list_closes_dialog(self, nginx_session: Session):
        nginx_session.request_kill()
        nginx_session.toggle_confirm()
        nginx_session.update(make_sample(), [])
        assert nginx_session.confirm() is None
        assert nginx_session.dialog is None

    def test_quick_confirm_with_emptied_list_closes_dialog(self, nginx_session: Session):
        nginx_session.request_kill()
        nginx_session.replace_ports([])
        assert nginx_session.quick_confirm() is None
        assert nginx_session.dialog is None

    def test_confirm_reads_pid_at_confirm_time(self, session: Session):
        """
        Known edge case: the pid comes from the live selection.

        When the selected port disappears while the dialog is open and the
        selection is clamped onto another entry, confirming targets that
        other entry rather than the one named in the dialog.
        """
        session.update(make_sample(), make_ports(22, 80, 443))
        session.selected = 2
        session.request_kill()
        session.toggle_confirm()
        assert session.dialog.port == 443

        session.update(make_sample(), make_ports(22, 80))

        assert session.dialog.port == 443
        assert session.confirm() == 1080


class TestView:
    """Tests for the rendering snapshot."""

    def test_view_is_snapshot(self, nginx_session: Session):
        view = nginx_session.view()
        nginx_session.update(make_sample(cpu=99.0), [])
        assert view.ports == (PortEntry(80, "nginx", 123),)
        assert view.cpu_history == (10.0,)

    def test_view_properties(self, session: Session):
        assert session.view().cpu_percent == 0.0
        assert session.view().memory_ratio == 0.0
        session.update(make_sample(cpu=42.0, memory=(3, 4)), [])
        view = session.view()
        assert view.cpu_percent == 42.0
        assert view.memory_ratio == 0.75

    def test_memory_ratio_clamped(self, session: Session):
        session.update(make_sample(memory=(5, 4)), [])
        assert session.view().memory_ratio == 1.0

    def test_force_quit(self, session: Session):
        assert not session.should_quit
        session.force_quit()
        assert session.should_quit
