"""Runtime configuration from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from playground_exec import constants


class Settings(BaseSettings):
    """Runtime configuration from environment variables.

    All settings can be overridden via environment variables with PLAYGROUND_EXEC_ prefix.
    Example: PLAYGROUND_EXEC_CXX_BIN=clang++
    """

    model_config = SettingsConfigDict(
        env_prefix="PLAYGROUND_EXEC_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Toolchains
    cxx_bin: str = constants.DEFAULT_CXX_BIN
    python_bin: str = constants.DEFAULT_PYTHON_BIN
    cxx_flags: list[str] = list(constants.DEFAULT_CXX_FLAGS)  # JSON list in env
    python_flags: list[str] = list(constants.DEFAULT_PYTHON_FLAGS)

    # Deadlines
    compile_timeout_seconds: float = constants.COMPILE_TIMEOUT_SECONDS
    run_timeout_seconds: float = constants.RUN_TIMEOUT_SECONDS
    interpret_timeout_seconds: float = constants.INTERPRET_TIMEOUT_SECONDS
    probe_timeout_seconds: float = constants.PROBE_TIMEOUT_SECONDS

    # Output caps
    max_output_bytes: int = constants.MAX_STDOUT_SIZE
    max_error_bytes: int = constants.MAX_STDERR_SIZE

    # Workspace (None = system temp dir)
    workspace_dir: Path | None = None

    # Probing
    probe_before_run: bool = True
    probe_cache_ttl_seconds: float = 0.0
    """TTL for CachedProber; 0 disables caching."""
    probe_retries: int = constants.DEFAULT_PROBE_RETRIES
    """Attempts per toolchain in a health check."""
