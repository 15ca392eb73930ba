"""Exception hierarchy for playground-exec.

All exceptions inherit from PlaygroundError. Each class carries the
ErrorKind it folds into when a runner converts it to an ExecutionResult.

Hierarchy:
    PlaygroundError (base)
    ├── RequestValidationError       ← missing/unsupported language, empty/malformed source
    ├── ToolchainUnavailableError    ← compiler/interpreter probe failed
    └── PlaygroundSystemError
        ├── SpawnError               ← process could not be started
        └── WorkspaceError           ← temp file I/O during setup

None of these escape Dispatcher.execute(); runners abort a request with
one of them and the normalizer folds it into the result. Compile errors,
runtime failures and timeouts are not exceptions: they are process
outcomes, mapped to ErrorKind.COMPILE, RUNTIME and TIMEOUT by normalize().
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar


class ErrorKind(str, Enum):
    """Failure taxonomy surfaced as ExecutionResult.error_kind."""

    VALIDATION = "validation_error"
    TOOLCHAIN_UNAVAILABLE = "toolchain_unavailable"
    COMPILE = "compile_error"
    RUNTIME = "runtime_failure"
    TIMEOUT = "timeout_error"
    SYSTEM = "system_error"


class PlaygroundError(Exception):
    """Base exception for all execution errors with structured context.

    Attributes:
        message: Human-readable error message
        context: Dictionary of structured error context for logging/debugging
    """

    kind: ClassVar[ErrorKind] = ErrorKind.SYSTEM

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class RequestValidationError(PlaygroundError):
    """Request rejected before any process was spawned.

    Raised for a missing or unsupported language, empty source, or a
    compiled-language source without a program entry point.
    """

    kind = ErrorKind.VALIDATION


class ToolchainUnavailableError(PlaygroundError):
    """Required compiler or interpreter is not installed or not runnable."""

    kind = ErrorKind.TOOLCHAIN_UNAVAILABLE


class PlaygroundSystemError(PlaygroundError):
    """Environment failure unrelated to the submitted program."""

    kind = ErrorKind.SYSTEM


class SpawnError(PlaygroundSystemError):
    """Subprocess could not be started (missing binary, permissions, ...)."""


class WorkspaceError(PlaygroundSystemError):
    """Temporary workspace could not be created or written."""
