"""Process spawning capability.

Runners and the prober never call asyncio.create_subprocess_exec directly;
they go through a Spawner so tests can substitute processes that are slow,
fail to start, exit nonzero or hang forever.

The real implementation starts every child in a new session (its own
process group) with all three standard streams piped.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from playground_exec._logging import get_logger
from playground_exec.exceptions import SpawnError
from playground_exec.platform_utils import ProcessWrapper

logger = get_logger(__name__)


@runtime_checkable
class SpawnedProcess(Protocol):
    """Minimal process handle consumed by the deadline supervisor."""

    @property
    def pid(self) -> int | None: ...

    @property
    def returncode(self) -> int | None: ...

    @property
    def stdin(self) -> asyncio.StreamWriter | None: ...

    @property
    def stdout(self) -> asyncio.StreamReader | None: ...

    @property
    def stderr(self) -> asyncio.StreamReader | None: ...

    async def wait(self) -> int: ...

    async def kill_tree(self) -> None: ...


class Spawner(Protocol):
    """spawn(command, args) -> SpawnedProcess with piped stdin/stdout/stderr."""

    async def spawn(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        cwd: Path | None = None,
    ) -> SpawnedProcess: ...


class SubprocessSpawner:
    """Spawns real OS processes via asyncio, one process group per child."""

    async def spawn(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        cwd: Path | None = None,
    ) -> ProcessWrapper:
        """Start command with args.

        Raises:
            SpawnError: binary missing, not executable, or fork failed
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                start_new_session=True,  # New process group for tree kill
            )
        except FileNotFoundError as e:
            raise SpawnError(f"{command}: command not found", context={"command": command}) from e
        except PermissionError as e:
            raise SpawnError(f"{command}: permission denied", context={"command": command}) from e
        except OSError as e:
            raise SpawnError(
                f"Failed to start {command}: {e}",
                context={"command": command, "errno": e.errno},
            ) from e

        logger.debug("Spawned process", extra={"command": command, "argc": len(args), "pid": proc.pid})
        return ProcessWrapper(proc)
