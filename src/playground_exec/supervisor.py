"""Deadline supervisor: wall-clock timeout with forced termination.

supervise() owns a spawned process from its first byte of input to its
reaping. It feeds stdin, drains stdout/stderr concurrently and waits for
exit. If the process tree (including any descendant still holding the
pipes open) is not finished when the deadline passes, the whole process
group is SIGKILLed and the outcome is flagged timed_out.

There is no cooperative variant: executed code is untrusted and may
ignore polite signals.
"""

from __future__ import annotations

import asyncio
import time

from playground_exec import constants
from playground_exec._logging import get_logger
from playground_exec.models import ProcessOutcome
from playground_exec.resource_cleanup import cleanup_process
from playground_exec.spawner import SpawnedProcess
from playground_exec.subprocess_utils import CappedBuffer, drain_stream, feed_stdin

logger = get_logger(__name__)


async def supervise(
    process: SpawnedProcess,
    *,
    deadline_seconds: float,
    stdin: bytes = b"",
    name: str,
    context_id: str,
    max_stdout_bytes: int = constants.MAX_STDOUT_SIZE,
    max_stderr_bytes: int = constants.MAX_STDERR_SIZE,
    kill_timeout: float = constants.KILL_REAP_TIMEOUT_SECONDS,
) -> ProcessOutcome:
    """Run process to completion or deadline, whichever comes first.

    Args:
        process: Freshly spawned process with piped streams
        deadline_seconds: Wall-clock budget measured from this call
        stdin: Full input, written then closed
        name: Process name for logging (e.g. "g++", "program")
        context_id: Request identifier for log correlation
        max_stdout_bytes: stdout capture cap
        max_stderr_bytes: stderr capture cap
        kill_timeout: Seconds allowed to reap the group after SIGKILL

    Returns:
        ProcessOutcome with whatever output was captured. Never raises for
        program behaviour; only cancellation of the caller propagates (after
        the process tree has been killed).
    """
    started = time.monotonic()
    stdout_buf = CappedBuffer(max_stdout_bytes)
    stderr_buf = CappedBuffer(max_stderr_bytes)

    io_tasks = [
        asyncio.create_task(feed_stdin(process.stdin, stdin, context_id=context_id), name=f"{name}-stdin"),
        asyncio.create_task(drain_stream(process.stdout, stdout_buf), name=f"{name}-stdout"),
        asyncio.create_task(drain_stream(process.stderr, stderr_buf), name=f"{name}-stderr"),
    ]
    wait_task = asyncio.create_task(process.wait(), name=f"{name}-wait")
    all_tasks = [*io_tasks, wait_task]
    timed_out = False

    try:
        _, pending = await asyncio.wait(all_tasks, timeout=deadline_seconds)
        if pending:
            timed_out = True
            logger.warning(
                f"{name} exceeded {deadline_seconds}s deadline, killing process group",
                extra={"context_id": context_id, "pid": process.pid, "deadline_seconds": deadline_seconds},
            )
            await cleanup_process(process, name=name, context_id=context_id, kill_timeout=kill_timeout)
            # Let drainers pick up bytes already sitting in the pipes
            _, pending = await asyncio.wait(pending, timeout=kill_timeout)
            await _cancel_tasks(pending)
    except asyncio.CancelledError:
        await cleanup_process(process, name=name, context_id=context_id, kill_timeout=kill_timeout)
        await _cancel_tasks([t for t in all_tasks if not t.done()])
        raise

    for task in io_tasks:
        if task.done() and not task.cancelled() and (exc := task.exception()) is not None:
            logger.warning(
                f"{name} stream task failed",
                extra={"context_id": context_id, "task": task.get_name(), "error": str(exc)},
            )

    exit_code = process.returncode
    if wait_task.done() and not wait_task.cancelled() and wait_task.exception() is None:
        exit_code = wait_task.result()

    outcome = ProcessOutcome(
        stdout=stdout_buf.getvalue(),
        stderr=stderr_buf.getvalue(),
        exit_code=exit_code,
        timed_out=timed_out,
        duration_ms=max(0, int((time.monotonic() - started) * 1000)),
        stdout_truncated=stdout_buf.truncated,
        stderr_truncated=stderr_buf.truncated,
    )
    logger.debug(
        f"{name} finished",
        extra={
            "context_id": context_id,
            "exit_code": outcome.exit_code,
            "timed_out": outcome.timed_out,
            "duration_ms": outcome.duration_ms,
            "stdout_bytes": stdout_buf.total_bytes,
            "stderr_bytes": stderr_buf.total_bytes,
        },
    )
    return outcome


async def _cancel_tasks(tasks: list[asyncio.Task[object]] | set[asyncio.Task[object]]) -> None:
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
