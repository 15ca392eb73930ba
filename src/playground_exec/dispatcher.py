"""Language dispatcher: the public entry point of the execution core.

The dispatcher validates a request, optionally probes the toolchain so a
missing compiler fails fast with a readable message, and routes to exactly
one runner. It never touches the filesystem or spawns the program itself.

Example:
    ```python
    dispatcher = Dispatcher()
    result = await dispatcher.execute_code("name = input()\\nprint(name)", "python", stdin="Ada")
    assert result.output == "Ada\\n"

    # Wire format used by the HTTP layer
    response = await dispatcher.handle({"code": "print(1)", "language": "python"})
    # {"output": "1\\n", "executionTime": 23}
    ```
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from playground_exec._logging import get_logger
from playground_exec.compiled_runner import CompiledRunner
from playground_exec.config import ExecutorConfig
from playground_exec.exceptions import RequestValidationError, ToolchainUnavailableError
from playground_exec.interpreted_runner import InterpretedRunner
from playground_exec.models import ExecutionRequest, ExecutionResult, Language, ToolchainStatus
from playground_exec.normalizer import result_from_error
from playground_exec.prober import CachedProber, Prober, ToolchainProber
from playground_exec.runner_base import BaseRunner
from playground_exec.settings import Settings
from playground_exec.spawner import Spawner, SubprocessSpawner
from playground_exec.workspace import new_request_id

logger = get_logger(__name__)


def build_request(code: Any, language: Any, stdin: Any = "") -> ExecutionRequest:
    """Build an ExecutionRequest from untyped boundary values.

    Raises:
        RequestValidationError: missing/unsupported language, empty or oversized source
    """
    try:
        return ExecutionRequest(source_code=code, language=language, stdin=stdin or "")
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"]) or "request"
        message = str(first["msg"]).removeprefix("Value error, ")
        raise RequestValidationError(
            f"Invalid {field}: {message}",
            context={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e


class Dispatcher:
    """Routes execution requests to the C++ or Python runner.

    Args:
        config: Executor configuration (defaults if None)
        spawner: Process spawner shared by the default runners and prober
        prober: Toolchain prober consulted before each run when
            config.probe_before_run is set
        runners: Override the runner per language (tests, custom toolchains)
    """

    def __init__(
        self,
        config: ExecutorConfig | None = None,
        *,
        spawner: Spawner | None = None,
        prober: Prober | None = None,
        runners: Mapping[Language, BaseRunner] | None = None,
    ) -> None:
        self._config = config or ExecutorConfig()
        spawner = spawner or SubprocessSpawner()
        self._prober: Prober = prober or ToolchainProber(self._config, spawner)
        self._runners: dict[Language, BaseRunner] = (
            dict(runners)
            if runners is not None
            else {
                Language.CPP: CompiledRunner(self._config, spawner),
                Language.PYTHON: InterpretedRunner(self._config, spawner),
            }
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> Dispatcher:
        """Dispatcher configured from PLAYGROUND_EXEC_* environment variables.

        A positive probe_cache_ttl_seconds wraps the prober in a CachedProber.
        """
        settings = settings or Settings()
        config = ExecutorConfig.from_settings(settings)
        prober: Prober = ToolchainProber(config)
        if settings.probe_cache_ttl_seconds > 0:
            prober = CachedProber(prober, settings.probe_cache_ttl_seconds)
        return cls(config, prober=prober)

    @property
    def config(self) -> ExecutorConfig:
        return self._config

    @property
    def prober(self) -> Prober:
        return self._prober

    async def probe(self, language: Language | str) -> ToolchainStatus:
        """Availability of one language's toolchain.

        Raises:
            RequestValidationError: unsupported language tag
        """
        return await self._prober.probe(Language.parse(language))

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        """Execute an accepted request. Always returns a result."""
        started_at = time.monotonic()
        request_id = new_request_id()
        language = request.language

        runner = self._runners.get(language)
        if runner is None:
            return result_from_error(RequestValidationError(f"No runner configured for {language.value}"))

        try:
            if self._config.probe_before_run:
                status = await self._prober.probe(language)
                if not status.available:
                    logger.warning(
                        f"{language.display_name} toolchain not available",
                        extra={"context_id": request_id, "error": status.error},
                    )
                    return result_from_error(
                        ToolchainUnavailableError(
                            f"{language.display_name} toolchain not available: {status.error}. "
                            f"Please install {self._config.toolchain_bin(language)} on the server."
                        )
                    )
            return await runner.run(request.source_code, request.stdin, request_id=request_id, started_at=started_at)
        except Exception as e:
            logger.error(
                "Dispatch failed unexpectedly",
                extra={"context_id": request_id, "error": str(e), "error_type": type(e).__name__},
                exc_info=True,
            )
            return result_from_error(e, started_at=started_at)

    async def execute_code(self, code: Any, language: Any, stdin: Any = "") -> ExecutionResult:
        """Validate raw values and execute. Invalid input yields a validation result."""
        try:
            request = build_request(code, language, stdin)
        except RequestValidationError as e:
            logger.info("Request rejected", extra={"error": e.message})
            return result_from_error(e)
        return await self.execute(request)

    async def handle(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Serve the wire request {code, language, input?}.

        Returns:
            {output, error?, executionTime}

        Raises:
            RequestValidationError: code or language is missing (the
                transport layer maps this to a 4xx)
        """
        code = payload.get("code")
        language = payload.get("language")
        if not code or not language:
            raise RequestValidationError("Code and language are required")
        result = await self.execute_code(code, language, payload.get("input") or "")
        return result.to_wire()
