"""Shared runner lifecycle.

A runner turns (source_code, stdin) into exactly one ExecutionResult. The
lifecycle common to both languages lives here:

    validate -> acquire workspace -> language phases -> release workspace

Every PlaygroundError raised by a phase, and any unexpected exception, is
caught at this boundary and folded into the result. Runner instances hold
only configuration; per-request state lives in a RunTracker so one runner
serves concurrent requests.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import ClassVar

from playground_exec._logging import get_logger
from playground_exec.config import ExecutorConfig
from playground_exec.exceptions import PlaygroundError
from playground_exec.models import ExecutionResult, Language, Phase, ProcessOutcome, RunState
from playground_exec.normalizer import normalize, result_from_error
from playground_exec.spawner import Spawner, SubprocessSpawner
from playground_exec.supervisor import supervise
from playground_exec.workspace import Workspace, acquire_workspace, new_request_id

logger = get_logger(__name__)

TransitionObserver = Callable[[str, RunState], None]
"""Called with (request_id, new_state) on every state change."""


class RunTracker:
    """State machine position of one request."""

    __slots__ = ("_observer", "request_id", "state", "transitions")

    def __init__(self, request_id: str, observer: TransitionObserver | None = None) -> None:
        self.request_id = request_id
        self.state = RunState.PENDING
        self.transitions: list[RunState] = [RunState.PENDING]
        self._observer = observer

    def transition(self, state: RunState) -> None:
        logger.debug(
            "Run state transition",
            extra={"context_id": self.request_id, "from_state": self.state.value, "to_state": state.value},
        )
        self.state = state
        self.transitions.append(state)
        if self._observer is not None:
            self._observer(self.request_id, state)


class BaseRunner(ABC):
    """Template for language runners."""

    language: ClassVar[Language]

    def __init__(
        self,
        config: ExecutorConfig | None = None,
        spawner: Spawner | None = None,
        *,
        observer: TransitionObserver | None = None,
    ) -> None:
        self._config = config or ExecutorConfig()
        self._spawner: Spawner = spawner or SubprocessSpawner()
        self._observer = observer

    @property
    def config(self) -> ExecutorConfig:
        return self._config

    def validate(self, source_code: str) -> None:
        """Reject malformed source before any file or process exists.

        Raises:
            RequestValidationError: source is unusable for this language
        """

    @abstractmethod
    async def _execute(self, workspace: Workspace, stdin: str, run: RunTracker, started_at: float) -> ExecutionResult:
        """Language-specific phases inside an acquired workspace."""

    async def run(
        self,
        source_code: str,
        stdin: str = "",
        *,
        request_id: str | None = None,
        started_at: float | None = None,
    ) -> ExecutionResult:
        """Build and/or run source_code with stdin. Never raises.

        Args:
            source_code: Program text
            stdin: Text written to the program's standard input, then closed
            request_id: Correlation id (also names the workspace files)
            started_at: time.monotonic() at request acceptance; defaults to now

        Returns:
            ExecutionResult for this request
        """
        started_at = time.monotonic() if started_at is None else started_at
        run = RunTracker(request_id or new_request_id(), self._observer)
        logger.debug(
            f"{self.language.display_name} run started",
            extra={"context_id": run.request_id, "code_size": len(source_code), "stdin_size": len(stdin)},
        )

        try:
            self.validate(source_code)
            async with acquire_workspace(
                source_code,
                language=self.language,
                base_dir=self._config.get_workspace_dir(),
                request_id=run.request_id,
            ) as workspace:
                result = await self._execute(workspace, stdin, run, started_at)
        except PlaygroundError as e:
            logger.info(
                f"{self.language.display_name} run rejected",
                extra={"context_id": run.request_id, "error_kind": e.kind.value, "error": e.message},
            )
            result = result_from_error(e, started_at=started_at)
        except Exception as e:
            logger.error(
                f"{self.language.display_name} run failed unexpectedly",
                extra={"context_id": run.request_id, "error": str(e), "error_type": type(e).__name__},
                exc_info=True,
            )
            result = result_from_error(e, started_at=started_at)

        run.transition(RunState.CLEANED)
        logger.debug(
            f"{self.language.display_name} run finished",
            extra={
                "context_id": run.request_id,
                "error_kind": result.error_kind.value if result.error_kind else None,
                "execution_time_ms": result.execution_time_ms,
            },
        )
        return result

    async def _spawn_supervised(
        self,
        command: str,
        args: Sequence[str],
        *,
        stdin: str,
        deadline_seconds: float,
        name: str,
        run: RunTracker,
    ) -> ProcessOutcome:
        """Spawn command and hand it to the deadline supervisor.

        Raises:
            SpawnError: process could not be started
        """
        proc = await self._spawner.spawn(command, args)
        return await supervise(
            proc,
            deadline_seconds=deadline_seconds,
            stdin=stdin.encode("utf-8"),
            name=name,
            context_id=run.request_id,
            max_stdout_bytes=self._config.max_output_bytes,
            max_stderr_bytes=self._config.max_error_bytes,
        )

    def _finish_run_phase(
        self,
        outcome: ProcessOutcome,
        *,
        limit_seconds: float,
        run: RunTracker,
        started_at: float,
    ) -> ExecutionResult:
        if outcome.timed_out:
            run.transition(RunState.TIMED_OUT)
        elif outcome.exit_code != 0:
            run.transition(RunState.RUNTIME_FAILED)
        else:
            run.transition(RunState.COMPLETED)
        return normalize(outcome, phase=Phase.RUN, started_at=started_at, limit_seconds=limit_seconds)
