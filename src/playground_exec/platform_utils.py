"""PID-reuse safe process handles with process-group termination.

Wraps asyncio subprocesses with psutil so a timed-out program and every
descendant it forked can be killed without signalling a recycled PID.
"""

import asyncio
import contextlib
import os
import signal

import psutil

from playground_exec._logging import get_logger

logger = get_logger(__name__)


class ProcessWrapper:
    """PID-reuse safe process wrapper using psutil.

    Wraps asyncio.subprocess.Process with psutil.Process for safer PID monitoring.
    The wrapped process must be started with start_new_session=True so that it
    leads its own process group; kill_tree() relies on that.
    """

    def __init__(self, async_proc: asyncio.subprocess.Process) -> None:
        """Wrap asyncio process with psutil for PID-safe monitoring.

        Args:
            async_proc: asyncio subprocess.Process instance
        """
        self.async_proc = async_proc
        self.psutil_proc: psutil.Process | None = None

        if async_proc.pid:
            with contextlib.suppress(psutil.NoSuchProcess, psutil.AccessDenied):
                # Process already died or inaccessible
                self.psutil_proc = psutil.Process(async_proc.pid)

    async def is_running(self) -> bool:
        """Check if process is still running (PID-reuse safe).

        Runs the blocking psutil call in a worker thread so a hung /proc read
        cannot stall the event loop.
        """
        if not self.psutil_proc:
            return self.async_proc.returncode is None

        try:
            return await asyncio.to_thread(self.psutil_proc.is_running)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return False

    @property
    def pid(self) -> int | None:
        """Process ID."""
        return self.async_proc.pid

    @property
    def returncode(self) -> int | None:
        """Process return code (None if still running)."""
        return self.async_proc.returncode

    @property
    def stdin(self) -> asyncio.StreamWriter | None:
        """Process stdin stream."""
        return self.async_proc.stdin

    @property
    def stdout(self) -> asyncio.StreamReader | None:
        """Process stdout stream."""
        return self.async_proc.stdout

    @property
    def stderr(self) -> asyncio.StreamReader | None:
        """Process stderr stream."""
        return self.async_proc.stderr

    async def wait(self) -> int:
        """Wait for process to complete.

        Returns:
            Process exit code
        """
        return await self.async_proc.wait()

    async def kill_tree(self) -> None:
        """SIGKILL the process, its process group and any escaped descendants.

        Descendants are snapshotted before the group kill because once the
        leader dies its children are reparented and no longer discoverable
        through it. Children that called setsid() left the group, so they are
        killed individually from the snapshot.
        """
        descendants: list[psutil.Process] = []
        if self.psutil_proc is not None:
            with contextlib.suppress(psutil.NoSuchProcess, psutil.AccessDenied):
                descendants = await asyncio.to_thread(self.psutil_proc.children, recursive=True)

        if self.pid:
            # The group outlives an exited leader while descendants hold the pipes
            if psutil.POSIX:
                with contextlib.suppress(ProcessLookupError, PermissionError):
                    os.killpg(self.pid, signal.SIGKILL)
            if self.async_proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    self.async_proc.kill()

        for child in descendants:
            with contextlib.suppress(psutil.NoSuchProcess, psutil.AccessDenied):
                await asyncio.to_thread(child.kill)

        if descendants:
            logger.debug(
                "Killed process tree",
                extra={"pid": self.pid, "descendants": [c.pid for c in descendants]},
            )
