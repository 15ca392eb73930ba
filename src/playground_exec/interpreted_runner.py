"""Python runner: interpret the source file directly.

    pending -> running -> {completed | runtime_failed | timed_out} -> cleaned

With no compile phase the single deadline is generous (30s by default).
"""

from __future__ import annotations

from playground_exec.models import ExecutionResult, Language, RunState
from playground_exec.runner_base import BaseRunner, RunTracker
from playground_exec.workspace import Workspace


class InterpretedRunner(BaseRunner):
    """Runs Python sources with the configured interpreter."""

    language = Language.PYTHON

    async def _execute(self, workspace: Workspace, stdin: str, run: RunTracker, started_at: float) -> ExecutionResult:
        config = self._config
        run.transition(RunState.RUNNING)
        outcome = await self._spawn_supervised(
            config.python_bin,
            [*config.python_flags, str(workspace.source_path)],
            stdin=stdin,
            deadline_seconds=config.interpret_timeout_seconds,
            name=config.python_bin,
            run=run,
        )
        return self._finish_run_phase(
            outcome,
            limit_seconds=config.interpret_timeout_seconds,
            run=run,
            started_at=started_at,
        )
