"""Tests for the Python runner against the running interpreter."""

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from playground_exec.config import ExecutorConfig
from playground_exec.exceptions import ErrorKind
from playground_exec.interpreted_runner import InterpretedRunner
from playground_exec.models import RunState
from tests.conftest import FakeSpawner, ProcessScript

# ============================================================================
# Real interpreter
# ============================================================================


class TestInterpretedRunner:
    async def test_hello(self, config: ExecutorConfig, workspace_files: Callable[[], list[Path]]) -> None:
        result = await InterpretedRunner(config).run("print('Hello, World!')")
        assert result.output == "Hello, World!\n"
        assert result.error is None
        assert result.error_kind is None
        assert workspace_files() == []

    async def test_stdin(self, config: ExecutorConfig) -> None:
        result = await InterpretedRunner(config).run("name = input()\nprint(f'Hi {name}')", "Ada")
        assert result.output == "Hi Ada\n"

    async def test_multiline_stdin(self, config: ExecutorConfig) -> None:
        code = "a = int(input())\nb = int(input())\nprint(a + b)"
        result = await InterpretedRunner(config).run(code, "3\n4\n")
        assert result.output == "7\n"

    async def test_no_output(self, config: ExecutorConfig) -> None:
        result = await InterpretedRunner(config).run("x = 1")
        assert result.output == "Program executed successfully (no output)"
        assert result.error is None

    async def test_runtime_error(self, config: ExecutorConfig, workspace_files: Callable[[], list[Path]]) -> None:
        result = await InterpretedRunner(config).run("print('before')\nraise ValueError('bad value')")
        assert result.output == "before\n"
        assert result.error is not None
        assert "ValueError: bad value" in result.error
        assert result.error_kind is ErrorKind.RUNTIME
        assert workspace_files() == []

    async def test_syntax_error_is_runtime_failure(self, config: ExecutorConfig) -> None:
        result = await InterpretedRunner(config).run("def broken(:\n    pass")
        assert result.error_kind is ErrorKind.RUNTIME
        assert result.error is not None
        assert "SyntaxError" in result.error

    async def test_warnings_reported_on_success(self, config: ExecutorConfig) -> None:
        code = "import sys\nsys.stderr.write('careful\\n')\nprint('done')"
        result = await InterpretedRunner(config).run(code)
        assert result.output == "done\n"
        assert result.error == "careful\n"
        assert result.error_kind is None

    async def test_unicode_output(self, config: ExecutorConfig) -> None:
        result = await InterpretedRunner(config).run("print('héllo, 世界')")
        assert result.output == "héllo, 世界\n"

    async def test_unencodable_source_leaves_no_files(
        self, config: ExecutorConfig, workspace_files: Callable[[], list[Path]]
    ) -> None:
        spawner = FakeSpawner()
        result = await InterpretedRunner(config, spawner).run("print('\ud800')")
        assert result.error_kind is ErrorKind.SYSTEM
        assert result.error is not None and result.error.startswith("Failed to write source file")
        assert spawner.calls == []
        assert workspace_files() == []

    @pytest.mark.slow
    async def test_timeout_keeps_partial_output(
        self, make_config: Callable[..., ExecutorConfig], workspace_files: Callable[[], list[Path]]
    ) -> None:
        config = make_config(interpret_timeout_seconds=1)
        result = await InterpretedRunner(config).run("print('started')\nwhile True:\n    pass")
        assert result.output == "started\n"
        assert result.error == "Execution timeout (1s limit exceeded)"
        assert result.error_kind is ErrorKind.TIMEOUT
        assert workspace_files() == []


# ============================================================================
# Command line and states (fake spawner)
# ============================================================================


class TestInterpretedRunnerStates:
    async def test_command_line(self, config: ExecutorConfig, tmp_path: Path) -> None:
        spawner = FakeSpawner()
        await InterpretedRunner(config, spawner).run("print(1)", request_id="r2")
        assert spawner.calls == [(sys.executable, ["-u", str(tmp_path / "playground_r2.py")])]

    async def test_transitions(self, config: ExecutorConfig) -> None:
        states: list[RunState] = []
        spawner = FakeSpawner().on(sys.executable, ProcessScript(stderr=b"boom", exit_code=1))

        await InterpretedRunner(config, spawner, observer=lambda _rid, s: states.append(s)).run("x")

        assert states == [RunState.RUNNING, RunState.RUNTIME_FAILED, RunState.CLEANED]

    async def test_interpret_timeout_used(self, make_config: Callable[..., ExecutorConfig]) -> None:
        config = make_config(interpret_timeout_seconds=0.1, run_timeout_seconds=100)
        spawner = FakeSpawner().on(sys.executable, ProcessScript(hang=True))
        result = await InterpretedRunner(config, spawner).run("while True: pass")
        assert result.error == "Execution timeout (0.1s limit exceeded)"
