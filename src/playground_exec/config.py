"""Executor configuration for playground-exec.

ExecutorConfig holds every knob the dispatcher, runners and prober read:
toolchain binaries, compiler flags, deadlines, output caps and where the
per-request workspace files live.

Example:
    ```python
    from playground_exec import Dispatcher, ExecutorConfig

    # Default configuration
    dispatcher = Dispatcher()
    result = await dispatcher.execute_code("print('hello')", "python")

    # Custom configuration
    config = ExecutorConfig(
        cxx_bin="clang++",
        run_timeout_seconds=5,
        workspace_dir=Path("/var/tmp/playground"),
    )
    dispatcher = Dispatcher(config)
    ```
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from playground_exec import constants
from playground_exec.models import Language

if TYPE_CHECKING:
    from playground_exec.settings import Settings


class ExecutorConfig(BaseModel):
    """Configuration for Dispatcher and runners.

    All fields have defaults matching the playground's production limits.

    Attributes:
        cxx_bin: C++ compiler executable. Default: g++.
        python_bin: Python interpreter executable. Default: python3.
        cxx_flags: Flags passed to the compiler after the output path.
        python_flags: Flags passed to the interpreter before the script path.
            Default: -u (unbuffered, so a killed program keeps its partial output).
        compile_timeout_seconds: C++ compile deadline. Range: (0, 300]. Default: 30.
        run_timeout_seconds: Compiled program deadline. Range: (0, 300]. Default: 10.
        interpret_timeout_seconds: Python program deadline. Range: (0, 300]. Default: 30.
        probe_timeout_seconds: Version check deadline. Range: (0, 60]. Default: 5.
        max_output_bytes: stdout capture cap. Default: 1MB.
        max_error_bytes: stderr capture cap. Default: 100KB.
        workspace_dir: Directory for per-request temp files. If None, the
            system temp directory is used.
        probe_before_run: Probe the toolchain before every execution so a
            missing compiler fails fast with a clear message. Default: True.
    """

    model_config = ConfigDict(
        frozen=True,  # Immutable after creation
        extra="forbid",  # Reject unknown fields
    )

    # Toolchains
    cxx_bin: str = Field(default=constants.DEFAULT_CXX_BIN, min_length=1, description="C++ compiler")
    python_bin: str = Field(default=constants.DEFAULT_PYTHON_BIN, min_length=1, description="Python interpreter")
    cxx_flags: tuple[str, ...] = Field(default=constants.DEFAULT_CXX_FLAGS, description="C++ compiler flags")
    python_flags: tuple[str, ...] = Field(default=constants.DEFAULT_PYTHON_FLAGS, description="Interpreter flags")

    # Deadlines
    compile_timeout_seconds: float = Field(
        default=constants.COMPILE_TIMEOUT_SECONDS,
        gt=0,
        le=constants.MAX_TIMEOUT_SECONDS,
        description="C++ compile deadline in seconds",
    )
    run_timeout_seconds: float = Field(
        default=constants.RUN_TIMEOUT_SECONDS,
        gt=0,
        le=constants.MAX_TIMEOUT_SECONDS,
        description="Compiled program deadline in seconds",
    )
    interpret_timeout_seconds: float = Field(
        default=constants.INTERPRET_TIMEOUT_SECONDS,
        gt=0,
        le=constants.MAX_TIMEOUT_SECONDS,
        description="Interpreted program deadline in seconds",
    )
    probe_timeout_seconds: float = Field(
        default=constants.PROBE_TIMEOUT_SECONDS,
        gt=0,
        le=60,
        description="Toolchain version check deadline in seconds",
    )

    # Output caps
    max_output_bytes: int = Field(default=constants.MAX_STDOUT_SIZE, ge=1, description="stdout capture cap")
    max_error_bytes: int = Field(default=constants.MAX_STDERR_SIZE, ge=1, description="stderr capture cap")

    # Workspace
    workspace_dir: Path | None = Field(
        default=None,
        description="Directory for temp source/artifact files (system temp dir if None)",
    )

    # Probing
    probe_before_run: bool = Field(default=True, description="Probe toolchain before each execution")

    def get_workspace_dir(self) -> Path:
        """Resolve the workspace directory, falling back to the system temp dir."""
        if self.workspace_dir is not None:
            return self.workspace_dir
        return Path(tempfile.gettempdir())

    def toolchain_bin(self, language: Language) -> str:
        """Binary invoked for a language (compiler or interpreter)."""
        return self.cxx_bin if language is Language.CPP else self.python_bin

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ExecutorConfig:
        """Build a config from PLAYGROUND_EXEC_* environment settings."""
        from playground_exec.settings import Settings  # noqa: PLC0415

        settings = settings or Settings()
        return cls(
            cxx_bin=settings.cxx_bin,
            python_bin=settings.python_bin,
            cxx_flags=tuple(settings.cxx_flags),
            python_flags=tuple(settings.python_flags),
            compile_timeout_seconds=settings.compile_timeout_seconds,
            run_timeout_seconds=settings.run_timeout_seconds,
            interpret_timeout_seconds=settings.interpret_timeout_seconds,
            probe_timeout_seconds=settings.probe_timeout_seconds,
            max_output_bytes=settings.max_output_bytes,
            max_error_bytes=settings.max_error_bytes,
            workspace_dir=settings.workspace_dir,
            probe_before_run=settings.probe_before_run,
        )
