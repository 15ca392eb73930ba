"""Resource cleanup utilities for execution lifecycle management.

Cleanup operations that log errors but never raise. A failure to delete a
temp file or reap a killed process must not replace the result of the
request that owned it.
"""

import asyncio
from pathlib import Path

import aiofiles.os

from playground_exec import constants
from playground_exec._logging import get_logger
from playground_exec.spawner import SpawnedProcess

logger = get_logger(__name__)


async def cleanup_process(
    proc: SpawnedProcess | None,
    name: str,
    context_id: str,
    kill_timeout: float = constants.KILL_REAP_TIMEOUT_SECONDS,
) -> bool:
    """Force kill a process tree (SIGKILL, no SIGTERM phase) and reap it.

    Untrusted programs may trap or ignore SIGTERM, so there is no graceful
    step: the whole process group is killed immediately.

    Args:
        proc: Process to kill (None safe - returns immediately)
        name: Process name for logging (e.g., "g++", "program", "python3")
        context_id: Request identifier for log correlation
        kill_timeout: Seconds to wait for the killed process to be reaped

    Returns:
        True if the process was reaped, False if issues occurred
    """
    if proc is None:
        return True

    try:
        logger.debug(f"Sending SIGKILL to {name} process group", extra={"context_id": context_id, "pid": proc.pid})
        await proc.kill_tree()

        try:
            await asyncio.wait_for(proc.wait(), timeout=kill_timeout)
        except TimeoutError:
            logger.error(
                f"{name} didn't exit within {kill_timeout}s of SIGKILL",
                extra={"context_id": context_id, "kill_timeout": kill_timeout, "pid": proc.pid},
            )
            return False

        logger.debug(
            f"{name} force killed",
            extra={"context_id": context_id, "returncode": proc.returncode},
        )
        return True

    except ProcessLookupError:
        # Process already dead (race between exit and kill)
        logger.debug(f"{name} already dead (ProcessLookupError)", extra={"context_id": context_id})
        return True

    except Exception as e:
        logger.error(
            f"{name} cleanup error",
            extra={"context_id": context_id, "error": str(e), "error_type": type(e).__name__},
            exc_info=True,
        )
        return False


async def cleanup_file(
    file_path: Path | None,
    context_id: str,
    description: str = "file",
) -> bool:
    """Delete file.

    Silently succeeds if file doesn't exist: the artifact of a failed compile
    never existed, and that is not an error.

    Args:
        file_path: Path to file to delete (None safe - returns immediately)
        context_id: Request identifier for log correlation
        description: Description for logging (e.g., "source file", "build artifact")

    Returns:
        True if file cleaned successfully, False if issues occurred
    """
    if file_path is None:
        return True

    try:
        await aiofiles.os.remove(file_path)
        logger.debug(
            f"{description} deleted",
            extra={"context_id": context_id, "path": str(file_path)},
        )
        return True

    except FileNotFoundError:
        # aiofiles.os.remove has no missing_ok
        logger.debug(
            f"{description} already absent",
            extra={"context_id": context_id, "path": str(file_path)},
        )
        return True

    except PermissionError as e:
        logger.warning(
            f"{description} permission denied",
            extra={"context_id": context_id, "path": str(file_path), "error": str(e)},
        )
        return False

    except OSError as e:
        logger.warning(
            f"{description} OS error during deletion",
            extra={"context_id": context_id, "path": str(file_path), "error": str(e), "error_type": type(e).__name__},
        )
        return False

    except Exception as e:
        logger.error(
            f"{description} cleanup error",
            extra={
                "context_id": context_id,
                "path": str(file_path),
                "error": str(e),
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )
        return False
