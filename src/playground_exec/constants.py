"""Constants for playground-exec configuration and limits."""

from typing import Final

# ============================================================================
# Toolchains
# ============================================================================

DEFAULT_CXX_BIN: Final[str] = "g++"
"""C++ compiler binary (resolved via PATH)."""

DEFAULT_PYTHON_BIN: Final[str] = "python3"
"""Python interpreter binary (resolved via PATH)."""

DEFAULT_CXX_FLAGS: Final[tuple[str, ...]] = ("-std=c++17", "-Wall", "-O2")
"""Compiler flags: language standard, warnings, optimization."""

DEFAULT_PYTHON_FLAGS: Final[tuple[str, ...]] = ("-u",)
"""Interpreter flags: unbuffered stdio so output written before a kill is kept."""

VERSION_FLAG: Final[str] = "--version"
"""Argument used by the availability probe."""

# ============================================================================
# Deadlines
# ============================================================================

COMPILE_TIMEOUT_SECONDS: Final[int] = 30
"""Wall-clock limit for the C++ compile phase."""

RUN_TIMEOUT_SECONDS: Final[int] = 10
"""Wall-clock limit for running a compiled program."""

INTERPRET_TIMEOUT_SECONDS: Final[int] = 30
"""Wall-clock limit for interpreted programs (no separate compile budget)."""

PROBE_TIMEOUT_SECONDS: Final[int] = 5
"""Wall-clock limit for a toolchain version check."""

MAX_TIMEOUT_SECONDS: Final[int] = 300
"""Upper bound accepted for any configured deadline."""

KILL_REAP_TIMEOUT_SECONDS: Final[float] = 2.0
"""Time allowed for a SIGKILLed process group to be reaped and its pipes to close."""

# ============================================================================
# Input / Output Limits
# ============================================================================

MAX_CODE_SIZE: Final[int] = 1024 * 1024  # 1MB
"""Maximum size in characters for source code."""

MAX_STDIN_SIZE: Final[int] = 1024 * 1024  # 1MB
"""Maximum size in characters for program input."""

MAX_STDOUT_SIZE: Final[int] = 1_000_000  # 1MB
"""Maximum stdout capture size in bytes."""

MAX_STDERR_SIZE: Final[int] = 100_000  # 100KB
"""Maximum stderr capture size in bytes."""

READ_CHUNK_SIZE: Final[int] = 64 * 1024
"""Pipe read size for incremental stream draining."""

# ============================================================================
# Workspace
# ============================================================================

WORKSPACE_FILE_PREFIX: Final[str] = "playground_"
"""Prefix for per-request temp files (followed by a uuid4 hex)."""

CPP_SOURCE_SUFFIX: Final[str] = ".cpp"
PYTHON_SOURCE_SUFFIX: Final[str] = ".py"
ARTIFACT_SUFFIX: Final[str] = ".out"

# ============================================================================
# Result Messages
# ============================================================================

NO_OUTPUT_MESSAGE: Final[str] = "Program executed successfully (no output)"
"""Placeholder output for a clean exit with empty stdout."""

TRUNCATION_MARKER: Final[str] = "\n[output truncated]"
"""Appended to a stream that hit its capture limit."""

# ============================================================================
# Health / Probing
# ============================================================================

DEFAULT_PROBE_RETRIES: Final[int] = 1
"""Probe attempts per toolchain in a health check (1 = no retry)."""

PROBE_RETRY_MIN_SECONDS: Final[float] = 0.1
"""Minimum backoff between probe retries."""

PROBE_RETRY_MAX_SECONDS: Final[float] = 2.0
"""Maximum backoff between probe retries."""
