"""Tests for the process table and process termination."""

import os
import shutil
import subprocess
import sys
import time
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from dashy.process import kill_command, process_table, terminate


def completed(returncode: int) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout="", stderr="")


class TestProcessTable:
    """Tests for the pid -> name snapshot."""

    def test_contains_current_process(self):
        table = process_table()
        assert os.getpid() in table
        assert isinstance(table[os.getpid()], str)

    def test_all_entries_typed(self):
        for pid, name in list(process_table().items())[:20]:
            assert isinstance(pid, int)
            assert isinstance(name, str)

    def test_nameless_processes_skipped(self):
        """A process whose name psutil cannot read is left out of the table."""
        procs = [
            SimpleNamespace(info={"pid": 1, "name": "init"}),
            SimpleNamespace(info={"pid": 2, "name": None}),
        ]
        with patch("dashy.process.psutil.process_iter", return_value=procs):
            assert process_table() == {1: "init"}


class TestKillCommand:
    """Tests for the platform kill command."""

    def test_unix(self):
        assert kill_command(42, "linux") == ["kill", "-9", "42"]
        assert kill_command(42, "darwin") == ["kill", "-9", "42"]

    def test_windows(self):
        assert kill_command(42, "win32") == ["taskkill", "/PID", "42", "/F"]


class TestTerminate:
    """Tests for terminate() result mapping."""

    def test_success(self):
        with patch("dashy.tools.subprocess.run", return_value=completed(0)) as run:
            assert terminate(1234, platform="linux") is True
        assert run.call_args.args[0] == ["kill", "-9", "1234"]

    def test_non_zero_exit(self):
        with patch("dashy.tools.subprocess.run", return_value=completed(1)):
            assert terminate(1234, platform="linux") is False

    def test_tool_missing(self):
        with patch("dashy.tools.subprocess.run", side_effect=FileNotFoundError("kill")):
            assert terminate(1234, platform="linux") is False

    def test_permission_denied(self):
        with patch("dashy.tools.subprocess.run", side_effect=PermissionError("kill")):
            assert terminate(1234, platform="linux") is False

    @pytest.mark.skipif(shutil.which("kill") is None, reason="needs kill(1)")
    def test_kills_real_process(self):
        """A spawned child is actually terminated."""
        child = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(60)"])
        try:
            assert terminate(child.pid) is True
            deadline = time.monotonic() + 5.0
            while child.poll() is None and time.monotonic() < deadline:
                time.sleep(0.05)
            assert child.returncode is not None
        finally:
            if child.poll() is None:
                child.kill()
            child.wait()
