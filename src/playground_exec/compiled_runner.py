"""C++ runner: compile with g++, then run the artifact.

State machine per request:

    pending -> compiling -> compile_failed                          -> cleaned
                         -> compiled -> running -> completed        -> cleaned
                                                -> runtime_failed   -> cleaned
                                                -> timed_out        -> cleaned

The compile phase gets its own deadline (30s by default) and never sees
program input. The run phase starts only after a zero compiler exit.
"""

from __future__ import annotations

import re
from pathlib import Path

from playground_exec._logging import get_logger
from playground_exec.exceptions import PlaygroundSystemError, RequestValidationError
from playground_exec.models import ExecutionResult, Language, Phase, RunState
from playground_exec.normalizer import normalize
from playground_exec.runner_base import BaseRunner, RunTracker
from playground_exec.workspace import Workspace

logger = get_logger(__name__)

_ENTRY_POINT_RE = re.compile(r"\bmain\s*\(")


def _artifact_path(workspace: Workspace) -> Path:
    if workspace.artifact_path is None:
        raise PlaygroundSystemError(
            "Workspace has no build artifact path",
            context={"request_id": workspace.request_id},
        )
    return workspace.artifact_path


class CompiledRunner(BaseRunner):
    """Compile-then-run for C++ sources."""

    language = Language.CPP

    def validate(self, source_code: str) -> None:
        if not _ENTRY_POINT_RE.search(source_code):
            raise RequestValidationError(
                "No main() function found: a C++ program needs an entry point such as `int main()`"
            )

    def compile_command(self, workspace: Workspace) -> list[str]:
        """Compiler argv (without the binary) for workspace."""
        return [str(workspace.source_path), "-o", str(_artifact_path(workspace)), *self._config.cxx_flags]

    async def _execute(self, workspace: Workspace, stdin: str, run: RunTracker, started_at: float) -> ExecutionResult:
        config = self._config
        artifact_path = _artifact_path(workspace)

        run.transition(RunState.COMPILING)
        compile_outcome = await self._spawn_supervised(
            config.cxx_bin,
            self.compile_command(workspace),
            stdin="",
            deadline_seconds=config.compile_timeout_seconds,
            name=config.cxx_bin,
            run=run,
        )
        if compile_outcome.timed_out or compile_outcome.exit_code != 0:
            run.transition(RunState.COMPILE_FAILED)
            logger.info(
                "Compilation failed",
                extra={
                    "context_id": run.request_id,
                    "exit_code": compile_outcome.exit_code,
                    "timed_out": compile_outcome.timed_out,
                },
            )
            return normalize(
                compile_outcome,
                phase=Phase.COMPILE,
                started_at=started_at,
                limit_seconds=config.compile_timeout_seconds,
            )
        run.transition(RunState.COMPILED)

        run.transition(RunState.RUNNING)
        outcome = await self._spawn_supervised(
            str(artifact_path),
            [],
            stdin=stdin,
            deadline_seconds=config.run_timeout_seconds,
            name="program",
            run=run,
        )
        return self._finish_run_phase(
            outcome,
            limit_seconds=config.run_timeout_seconds,
            run=run,
            started_at=started_at,
        )
