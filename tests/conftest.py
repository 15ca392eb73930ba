"""Shared pytest fixtures for playground-exec tests."""

import asyncio
import shutil
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from playground_exec.config import ExecutorConfig

# ============================================================================
# Skip markers
# ============================================================================

skip_unless_gxx = pytest.mark.skipif(
    shutil.which("g++") is None,
    reason="Requires g++ on PATH",
)

skip_unless_posix = pytest.mark.skipif(
    sys.platform == "win32",
    reason="Requires POSIX process groups",
)


# ============================================================================
# Fake processes
# ============================================================================
# Scripted stand-ins for spawned processes. A script describes what the
# process writes, how it exits and how long it takes; hang=True keeps it
# alive until kill_tree() is called, like a program stuck in a loop.


@dataclass
class ProcessScript:
    stdout: bytes = b""
    stderr: bytes = b""
    exit_code: int = 0
    delay: float = 0.0
    hang: bool = False


class FakeWriter:
    """Collects whatever the supervisor writes to stdin."""

    def __init__(self) -> None:
        self.data = bytearray()
        self.closed = False

    def write(self, data: bytes) -> None:
        self.data.extend(data)

    async def drain(self) -> None:
        await asyncio.sleep(0)

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        return None


class FakeProcess:
    """SpawnedProcess driven by a ProcessScript."""

    def __init__(self, script: ProcessScript, pid: int) -> None:
        self.script = script
        self.pid = pid
        self.returncode: int | None = None
        self.stdin = FakeWriter()
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        self.killed = False
        self._exited = asyncio.Event()
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        # Output written before any delay survives a kill, like unbuffered prints
        if self.script.stdout:
            self.stdout.feed_data(self.script.stdout)
        if self.script.stderr:
            self.stderr.feed_data(self.script.stderr)
        if self.script.hang:
            return
        await asyncio.sleep(self.script.delay)
        self._exit(self.script.exit_code)

    def _exit(self, code: int) -> None:
        if self._exited.is_set():
            return
        self.returncode = code
        self.stdout.feed_eof()
        self.stderr.feed_eof()
        self._exited.set()

    async def wait(self) -> int:
        await self._exited.wait()
        assert self.returncode is not None
        return self.returncode

    async def kill_tree(self) -> None:
        self.killed = True
        self._task.cancel()
        self._exit(-9)


class FakeSpawner:
    """Spawner returning FakeProcesses.

    Scripts are registered per command; a registered key matches a command
    equal to it or ending with it (".out" matches any compiled artifact).
    A registered exception is raised from spawn() instead.
    """

    def __init__(self, default: ProcessScript | None = None) -> None:
        self._default = default or ProcessScript()
        self._scripts: dict[str, ProcessScript | BaseException] = {}
        self.calls: list[tuple[str, list[str]]] = []
        self.processes: list[FakeProcess] = []

    def on(self, command: str, script: ProcessScript | BaseException) -> "FakeSpawner":
        self._scripts[command] = script
        return self

    def _lookup(self, command: str) -> ProcessScript | BaseException:
        for key, script in self._scripts.items():
            if command == key or command.endswith(key):
                return script
        return self._default

    async def spawn(self, command: str, args: Sequence[str] = (), *, cwd: Path | None = None) -> FakeProcess:
        self.calls.append((command, list(args)))
        script = self._lookup(command)
        if isinstance(script, BaseException):
            raise script
        proc = FakeProcess(script, pid=10_000 + len(self.processes))
        self.processes.append(proc)
        return proc

    def commands(self) -> list[str]:
        return [command for command, _ in self.calls]


# ============================================================================
# Config fixtures
# ============================================================================


@pytest.fixture
def fake_spawner() -> FakeSpawner:
    return FakeSpawner()


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., ExecutorConfig]:
    """Factory for ExecutorConfig rooted at tmp_path.

    Uses the running interpreter as python_bin so Python tests need no
    python3 on PATH.

    Usage:
        def test_something(make_config):
            config = make_config(run_timeout_seconds=0.5)
    """

    def _make(**overrides: Any) -> ExecutorConfig:
        defaults: dict[str, Any] = {
            "workspace_dir": tmp_path,
            "python_bin": sys.executable,
            "probe_before_run": False,
        }
        defaults.update(overrides)
        return ExecutorConfig(**defaults)

    return _make


@pytest.fixture
def config(make_config: Callable[..., ExecutorConfig]) -> ExecutorConfig:
    return make_config()


@pytest.fixture
def workspace_files(tmp_path: Path) -> Callable[[], list[Path]]:
    """Lists playground temp files left in the workspace directory."""

    def _list() -> list[Path]:
        return sorted(tmp_path.glob("playground_*"))

    return _list
