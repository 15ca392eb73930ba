"""Data models for playground-exec."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from playground_exec import constants
from playground_exec.exceptions import ErrorKind, RequestValidationError


class LanguageKind(str, Enum):
    """How a language's source is turned into a running process."""

    COMPILED = "compiled"
    INTERPRETED = "interpreted"


class Language(str, Enum):
    """Supported programming languages."""

    CPP = "cpp"
    PYTHON = "python"

    @property
    def kind(self) -> LanguageKind:
        return LanguageKind.COMPILED if self is Language.CPP else LanguageKind.INTERPRETED

    @property
    def display_name(self) -> str:
        return "C++" if self is Language.CPP else "Python"

    @classmethod
    def parse(cls, tag: str | Language | None) -> Language:
        """Resolve a language name or kind tag ("compiled"/"interpreted").

        Raises:
            RequestValidationError: tag is missing or names no supported language
        """
        if isinstance(tag, Language):
            return tag
        if not tag or not isinstance(tag, str):
            raise RequestValidationError("Language is required")
        normalized = tag.strip().lower()
        for language in cls:
            if normalized in (language.value, language.kind.value):
                return language
        raise RequestValidationError(
            f"Unsupported language: {tag!r}",
            context={"supported": [lang.value for lang in cls]},
        )


class Phase(str, Enum):
    """Process phase a ProcessOutcome belongs to."""

    COMPILE = "compile"
    RUN = "run"


class RunState(str, Enum):
    """Runner state machine positions."""

    PENDING = "pending"
    COMPILING = "compiling"
    COMPILE_FAILED = "compile_failed"
    COMPILED = "compiled"
    RUNNING = "running"
    COMPLETED = "completed"
    RUNTIME_FAILED = "runtime_failed"
    TIMED_OUT = "timed_out"
    CLEANED = "cleaned"


class ExecutionRequest(BaseModel):
    """One request to build and/or run untrusted source code."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    source_code: str = Field(max_length=constants.MAX_CODE_SIZE, description="Program source text")
    language: Language = Field(description="Target language")
    stdin: str = Field(default="", max_length=constants.MAX_STDIN_SIZE, description="Text piped to the program")

    @field_validator("source_code")
    @classmethod
    def _check_source(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("source code must not be empty")
        if "\x00" in value:
            raise ValueError("source code must not contain null bytes")
        return value

    @field_validator("language", mode="before")
    @classmethod
    def _parse_language(cls, value: Any) -> Language:
        try:
            return Language.parse(value)
        except RequestValidationError as e:
            raise ValueError(e.message) from e


@dataclass
class ProcessOutcome:
    """Raw result of one spawned process."""

    stdout: bytes = b""
    stderr: bytes = b""
    exit_code: int | None = None
    timed_out: bool = False
    duration_ms: int = 0
    stdout_truncated: bool = False
    stderr_truncated: bool = False


class ExecutionResult(BaseModel):
    """Normalized outcome of one execution request."""

    output: str = Field(default="", description="Accumulated program stdout")
    error: str | None = Field(default=None, description="Diagnostics: compiler errors, stderr, timeout notes")
    execution_time_ms: int = Field(default=0, ge=0, description="Wall time from acceptance to normalization")
    error_kind: ErrorKind | None = Field(default=None, description="Failure category, None on success")

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    def to_wire(self) -> dict[str, Any]:
        """Boundary JSON shape: {output, error?, executionTime}."""
        payload: dict[str, Any] = {"output": self.output}
        if self.error:
            payload["error"] = self.error
        payload["executionTime"] = self.execution_time_ms
        return payload


class ToolchainStatus(BaseModel):
    """Availability of a compiler or interpreter."""

    available: bool
    version: str | None = None
    error: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
