"""Unit tests for request/result models and language parsing.

No processes, no filesystem: pure pydantic validation and wire shapes.
"""

import pytest
from pydantic import ValidationError

from playground_exec import constants
from playground_exec.exceptions import ErrorKind, RequestValidationError
from playground_exec.models import (
    ExecutionRequest,
    ExecutionResult,
    Language,
    LanguageKind,
    ToolchainStatus,
)

# ============================================================================
# Language
# ============================================================================


class TestLanguageParse:
    @pytest.mark.parametrize(
        ("tag", "expected"),
        [
            ("cpp", Language.CPP),
            ("python", Language.PYTHON),
            ("compiled", Language.CPP),
            ("interpreted", Language.PYTHON),
            ("  CPP ", Language.CPP),
            ("Python", Language.PYTHON),
            (Language.CPP, Language.CPP),
        ],
    )
    def test_accepts_names_and_kinds(self, tag: str | Language, expected: Language) -> None:
        assert Language.parse(tag) is expected

    @pytest.mark.parametrize("tag", [None, ""])
    def test_missing_language(self, tag: str | None) -> None:
        with pytest.raises(RequestValidationError, match="Language is required"):
            Language.parse(tag)

    def test_unsupported_language(self) -> None:
        with pytest.raises(RequestValidationError, match="Unsupported language") as exc_info:
            Language.parse("java")
        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert exc_info.value.context["supported"] == ["cpp", "python"]

    def test_kind_and_display_name(self) -> None:
        assert Language.CPP.kind is LanguageKind.COMPILED
        assert Language.PYTHON.kind is LanguageKind.INTERPRETED
        assert Language.CPP.display_name == "C++"
        assert Language.PYTHON.display_name == "Python"


# ============================================================================
# ExecutionRequest
# ============================================================================


class TestExecutionRequest:
    def test_minimal(self) -> None:
        request = ExecutionRequest(source_code="print(1)", language="python")
        assert request.language is Language.PYTHON
        assert request.stdin == ""

    def test_kind_tag_resolves(self) -> None:
        request = ExecutionRequest(source_code="int main(){}", language="compiled")
        assert request.language is Language.CPP

    @pytest.mark.parametrize("code", ["", "   \n\t"])
    def test_empty_source_rejected(self, code: str) -> None:
        with pytest.raises(ValidationError, match="must not be empty"):
            ExecutionRequest(source_code=code, language="python")

    def test_null_byte_rejected(self) -> None:
        with pytest.raises(ValidationError, match="null bytes"):
            ExecutionRequest(source_code="print(1)\x00", language="python")

    def test_oversized_source_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ExecutionRequest(source_code="x" * (constants.MAX_CODE_SIZE + 1), language="python")

    def test_unsupported_language_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Unsupported language"):
            ExecutionRequest(source_code="print(1)", language="ruby")

    def test_frozen(self) -> None:
        request = ExecutionRequest(source_code="print(1)", language="python")
        with pytest.raises(ValidationError):
            request.stdin = "changed"  # type: ignore[misc]

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            ExecutionRequest(source_code="print(1)", language="python", packages=["numpy"])  # type: ignore[call-arg]


# ============================================================================
# ExecutionResult / ToolchainStatus wire shapes
# ============================================================================


class TestWireShapes:
    def test_success_omits_error(self) -> None:
        result = ExecutionResult(output="hi\n", execution_time_ms=12)
        assert result.ok
        assert result.to_wire() == {"output": "hi\n", "executionTime": 12}

    def test_failure_includes_error(self) -> None:
        result = ExecutionResult(output="", error="boom", execution_time_ms=3, error_kind=ErrorKind.RUNTIME)
        assert not result.ok
        assert result.to_wire() == {"output": "", "error": "boom", "executionTime": 3}

    def test_warnings_on_success_are_reported(self) -> None:
        result = ExecutionResult(output="ok", error="warning: unused", execution_time_ms=1)
        assert result.ok
        assert result.to_wire()["error"] == "warning: unused"

    def test_negative_time_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ExecutionResult(execution_time_ms=-1)

    def test_toolchain_status_wire(self) -> None:
        assert ToolchainStatus(available=True, version="g++ 13.2").to_wire() == {
            "available": True,
            "version": "g++ 13.2",
        }
        assert ToolchainStatus(available=False, error="g++ not found").to_wire() == {
            "available": False,
            "error": "g++ not found",
        }
