"""Temporary workspace manager.

Every request gets its own file names under the workspace directory,
derived from a uuid4 so concurrent requests never collide. The source file
is created with O_EXCL, so even an impossible name clash fails loudly
instead of overwriting another request's code.

acquire_workspace() is the only way runners obtain paths; its exit path
deletes every file it allocated whether the body returned, raised or was
cancelled.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

import aiofiles

from playground_exec import constants
from playground_exec._logging import get_logger
from playground_exec.exceptions import WorkspaceError
from playground_exec.models import Language, LanguageKind
from playground_exec.resource_cleanup import cleanup_file

logger = get_logger(__name__)


@dataclass(frozen=True)
class Workspace:
    """Paths owned by one request."""

    request_id: str
    source_path: Path
    artifact_path: Path | None = None

    @property
    def paths(self) -> tuple[Path, ...]:
        if self.artifact_path is None:
            return (self.source_path,)
        return (self.source_path, self.artifact_path)


def new_request_id() -> str:
    return uuid.uuid4().hex


def allocate_workspace(base_dir: Path, language: Language, request_id: str | None = None) -> Workspace:
    """Compute unique paths for a request. Touches nothing on disk."""
    request_id = request_id or new_request_id()
    stem = f"{constants.WORKSPACE_FILE_PREFIX}{request_id}"
    if language.kind is LanguageKind.COMPILED:
        return Workspace(
            request_id=request_id,
            source_path=base_dir / f"{stem}{constants.CPP_SOURCE_SUFFIX}",
            artifact_path=base_dir / f"{stem}{constants.ARTIFACT_SUFFIX}",
        )
    return Workspace(request_id=request_id, source_path=base_dir / f"{stem}{constants.PYTHON_SOURCE_SUFFIX}")


async def release_workspace(workspace: Workspace) -> bool:
    """Delete every path of workspace. Never raises.

    Returns:
        True if all files are gone, False if any deletion failed
    """
    results = [
        await cleanup_file(workspace.source_path, workspace.request_id, "source file"),
        await cleanup_file(workspace.artifact_path, workspace.request_id, "build artifact"),
    ]
    clean = all(results)
    if not clean:
        logger.warning("Workspace cleanup incomplete", extra={"context_id": workspace.request_id})
    return clean


@asynccontextmanager
async def acquire_workspace(
    source_code: str,
    *,
    language: Language,
    base_dir: Path,
    request_id: str | None = None,
) -> AsyncIterator[Workspace]:
    """Allocate a workspace, write the source file, and always clean up.

    Raises:
        WorkspaceError: the source file could not be created or written
    """
    workspace = allocate_workspace(base_dir, language, request_id)
    try:
        async with aiofiles.open(workspace.source_path, "x", encoding="utf-8") as f:
            await f.write(source_code)
    except FileExistsError as e:
        # Paths belong to someone else; do not delete them
        raise WorkspaceError(
            "Workspace path collision",
            context={"path": str(workspace.source_path)},
        ) from e
    except (OSError, UnicodeError) as e:
        # UnicodeError: lone surrogates in source_code, raised after the file exists
        await release_workspace(workspace)
        raise WorkspaceError(
            f"Failed to write source file: {e}",
            context={"path": str(workspace.source_path), "error_type": type(e).__name__},
        ) from e
    except BaseException:
        await release_workspace(workspace)
        raise

    logger.debug(
        "Workspace ready",
        extra={"context_id": workspace.request_id, "paths": [str(p) for p in workspace.paths]},
    )
    try:
        yield workspace
    finally:
        await release_workspace(workspace)
