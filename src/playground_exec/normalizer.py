"""Result normalizer.

Maps heterogeneous process outcomes and phase errors onto the single
ExecutionResult shape returned to callers:

    timed out        -> error = partial stderr + timeout note (phase, limit)
    nonzero exit     -> error = stderr (or exit description), output = stdout
    zero exit        -> output = stdout (or canned message), error = stderr if any
    PlaygroundError  -> error = message, error_kind = exc.kind
    other exception  -> error = message, error_kind = system_error

execution_time_ms always runs from request acceptance to normalization.
"""

from __future__ import annotations

import signal
import time

from playground_exec import constants
from playground_exec.exceptions import ErrorKind, PlaygroundError
from playground_exec.models import ExecutionResult, Phase, ProcessOutcome


def elapsed_ms(started_at: float) -> int:
    """Milliseconds since started_at (a time.monotonic() reading), clamped at 0."""
    return max(0, int((time.monotonic() - started_at) * 1000))


def decode_stream(data: bytes, truncated: bool = False) -> str:
    text = data.decode("utf-8", errors="replace")
    if truncated:
        text += constants.TRUNCATION_MARKER
    return text


def timeout_message(phase: Phase, limit_seconds: float) -> str:
    label = "Compilation" if phase is Phase.COMPILE else "Execution"
    return f"{label} timeout ({limit_seconds:g}s limit exceeded)"


def describe_exit(exit_code: int | None) -> str:
    if exit_code is None:
        return "Process exit status unknown"
    if exit_code < 0:
        try:
            return f"Process terminated by signal {signal.Signals(-exit_code).name}"
        except ValueError:
            return f"Process terminated by signal {-exit_code}"
    return f"Process exited with code {exit_code}"


def normalize(
    outcome: ProcessOutcome,
    *,
    phase: Phase,
    started_at: float,
    limit_seconds: float,
) -> ExecutionResult:
    """Fold one process outcome into an ExecutionResult.

    For the compile phase the compiler's stdout is not program output, so
    output is always empty and failures carry the compiler diagnostics.
    """
    stdout = decode_stream(outcome.stdout, outcome.stdout_truncated)
    stderr = decode_stream(outcome.stderr, outcome.stderr_truncated)

    if phase is Phase.COMPILE:
        if outcome.timed_out:
            note = timeout_message(phase, limit_seconds)
            return ExecutionResult(
                output="",
                error=f"{stderr}\n{note}" if stderr else note,
                execution_time_ms=elapsed_ms(started_at),
                error_kind=ErrorKind.TIMEOUT,
            )
        return ExecutionResult(
            output="",
            error=f"Compilation Error: {stderr or 'Compilation failed with unknown error'}",
            execution_time_ms=elapsed_ms(started_at),
            error_kind=ErrorKind.COMPILE,
        )

    if outcome.timed_out:
        note = timeout_message(phase, limit_seconds)
        return ExecutionResult(
            output=stdout,
            error=f"{stderr}\n{note}" if stderr else note,
            execution_time_ms=elapsed_ms(started_at),
            error_kind=ErrorKind.TIMEOUT,
        )

    if outcome.exit_code != 0:
        return ExecutionResult(
            output=stdout,
            error=stderr or describe_exit(outcome.exit_code),
            execution_time_ms=elapsed_ms(started_at),
            error_kind=ErrorKind.RUNTIME,
        )

    return ExecutionResult(
        output=stdout or constants.NO_OUTPUT_MESSAGE,
        error=stderr or None,
        execution_time_ms=elapsed_ms(started_at),
        error_kind=None,
    )


def result_from_error(exc: BaseException, *, started_at: float | None = None) -> ExecutionResult:
    """Fold an exception raised inside a runner into an ExecutionResult.

    started_at=None reports zero elapsed time (rejections that never
    reached a runner).
    """
    if isinstance(exc, PlaygroundError):
        kind = exc.kind
        message = exc.message
    else:
        kind = ErrorKind.SYSTEM
        message = str(exc) or type(exc).__name__
    return ExecutionResult(
        output="",
        error=message,
        execution_time_ms=0 if started_at is None else elapsed_ms(started_at),
        error_kind=kind,
    )
