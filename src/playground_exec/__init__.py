"""playground-exec: Compile and run untrusted C++ and Python snippets.

The execution core behind an online code playground. A request carries
source code, a language tag and optional stdin; the result carries the
program's output, any diagnostics and the elapsed wall time.

Quick Start:
    ```python
    from playground_exec import Dispatcher

    dispatcher = Dispatcher()
    result = await dispatcher.execute_code(
        "#include <iostream>\\nint main() { std::cout << 42; }",
        "cpp",
    )
    print(result.output)  # "42"
    ```

With Configuration:
    ```python
    from playground_exec import Dispatcher, ExecutorConfig

    config = ExecutorConfig(cxx_bin="clang++", run_timeout_seconds=5)
    dispatcher = Dispatcher(config)
    ```

Guarantees:
    - Every request yields exactly one ExecutionResult; no exception escapes
    - Programs exceeding their deadline are SIGKILLed with their whole process group
    - Per-request temp files are deleted on every exit path
    - Concurrent requests share no files and no mutable state

Wall-clock deadlines are the only resource limit. There is no memory,
filesystem or network isolation: run this behind a real sandbox when the
code is untrusted.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("playground-exec")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"

from playground_exec.compiled_runner import CompiledRunner
from playground_exec.config import ExecutorConfig
from playground_exec.dispatcher import Dispatcher, build_request
from playground_exec.exceptions import (
    ErrorKind,
    PlaygroundError,
    PlaygroundSystemError,
    RequestValidationError,
    SpawnError,
    ToolchainUnavailableError,
    WorkspaceError,
)
from playground_exec.health import HealthReport, ServiceHealth, check_health
from playground_exec.interpreted_runner import InterpretedRunner
from playground_exec.models import (
    ExecutionRequest,
    ExecutionResult,
    Language,
    LanguageKind,
    RunState,
    ToolchainStatus,
)
from playground_exec.prober import CachedProber, ToolchainProber
from playground_exec.settings import Settings
from playground_exec.templates import get_template

__all__ = [
    "CachedProber",
    "CompiledRunner",
    "Dispatcher",
    "ErrorKind",
    "ExecutionRequest",
    "ExecutionResult",
    "ExecutorConfig",
    "HealthReport",
    "InterpretedRunner",
    "Language",
    "LanguageKind",
    "PlaygroundError",
    "PlaygroundSystemError",
    "RequestValidationError",
    "RunState",
    "ServiceHealth",
    "Settings",
    "SpawnError",
    "ToolchainProber",
    "ToolchainUnavailableError",
    "WorkspaceError",
    "build_request",
    "check_health",
    "get_template",
]
