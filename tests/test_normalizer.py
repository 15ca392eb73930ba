"""Tests for mapping process outcomes and errors onto ExecutionResult."""

import time

import pytest

from playground_exec import constants
from playground_exec.exceptions import (
    ErrorKind,
    RequestValidationError,
    SpawnError,
    ToolchainUnavailableError,
    WorkspaceError,
)
from playground_exec.models import Phase, ProcessOutcome
from playground_exec.normalizer import (
    decode_stream,
    describe_exit,
    elapsed_ms,
    normalize,
    result_from_error,
    timeout_message,
)


def _normalize(outcome: ProcessOutcome, phase: Phase = Phase.RUN, limit: float = 10):  # type: ignore[no-untyped-def]
    return normalize(outcome, phase=phase, started_at=time.monotonic(), limit_seconds=limit)


# ============================================================================
# Run phase
# ============================================================================


class TestNormalizeRun:
    def test_success_with_output(self) -> None:
        result = _normalize(ProcessOutcome(stdout=b"42\n", exit_code=0))
        assert result.output == "42\n"
        assert result.error is None
        assert result.error_kind is None

    def test_success_without_output(self) -> None:
        result = _normalize(ProcessOutcome(exit_code=0))
        assert result.output == constants.NO_OUTPUT_MESSAGE
        assert result.error is None

    def test_success_with_warnings(self) -> None:
        result = _normalize(ProcessOutcome(stdout=b"ok", stderr=b"DeprecationWarning: x", exit_code=0))
        assert result.output == "ok"
        assert result.error == "DeprecationWarning: x"
        assert result.error_kind is None

    def test_nonzero_exit_keeps_stdout(self) -> None:
        result = _normalize(ProcessOutcome(stdout=b"partial", stderr=b"Traceback...", exit_code=1))
        assert result.output == "partial"
        assert result.error == "Traceback..."
        assert result.error_kind is ErrorKind.RUNTIME

    def test_nonzero_exit_without_stderr(self) -> None:
        result = _normalize(ProcessOutcome(exit_code=3))
        assert result.error == "Process exited with code 3"
        assert result.error_kind is ErrorKind.RUNTIME

    def test_killed_by_signal(self) -> None:
        result = _normalize(ProcessOutcome(exit_code=-11))
        assert result.error == "Process terminated by signal SIGSEGV"

    def test_timeout_keeps_partial_output(self) -> None:
        result = _normalize(ProcessOutcome(stdout=b"tick\n", exit_code=-9, timed_out=True), limit=10)
        assert result.output == "tick\n"
        assert result.error == "Execution timeout (10s limit exceeded)"
        assert result.error_kind is ErrorKind.TIMEOUT

    def test_timeout_appends_note_to_stderr(self) -> None:
        result = _normalize(ProcessOutcome(stderr=b"warn", exit_code=-9, timed_out=True), limit=30)
        assert result.error == "warn\nExecution timeout (30s limit exceeded)"

    def test_truncated_output_marked(self) -> None:
        result = _normalize(ProcessOutcome(stdout=b"xxx", exit_code=0, stdout_truncated=True))
        assert result.output == "xxx" + constants.TRUNCATION_MARKER

    def test_invalid_utf8_replaced(self) -> None:
        result = _normalize(ProcessOutcome(stdout=b"\xff\xfeok", exit_code=0))
        assert result.output.endswith("ok")
        assert "�" in result.output


# ============================================================================
# Compile phase
# ============================================================================


class TestNormalizeCompile:
    def test_compile_error(self) -> None:
        result = _normalize(
            ProcessOutcome(stdout=b"ignored", stderr=b"main.cpp:1: error: expected ';'", exit_code=1),
            phase=Phase.COMPILE,
        )
        assert result.output == ""
        assert result.error == "Compilation Error: main.cpp:1: error: expected ';'"
        assert result.error_kind is ErrorKind.COMPILE

    def test_compile_error_without_diagnostics(self) -> None:
        result = _normalize(ProcessOutcome(exit_code=1), phase=Phase.COMPILE)
        assert result.error == "Compilation Error: Compilation failed with unknown error"

    def test_compile_timeout(self) -> None:
        result = _normalize(ProcessOutcome(exit_code=-9, timed_out=True), phase=Phase.COMPILE, limit=30)
        assert result.output == ""
        assert result.error == "Compilation timeout (30s limit exceeded)"
        assert result.error_kind is ErrorKind.TIMEOUT

    def test_compile_timeout_keeps_diagnostics(self) -> None:
        result = _normalize(ProcessOutcome(stderr=b"note: ...", timed_out=True), phase=Phase.COMPILE, limit=30)
        assert result.error == "note: ...\nCompilation timeout (30s limit exceeded)"


# ============================================================================
# Exceptions
# ============================================================================


class TestResultFromError:
    @pytest.mark.parametrize(
        ("exc", "kind"),
        [
            (RequestValidationError("Language is required"), ErrorKind.VALIDATION),
            (ToolchainUnavailableError("g++ missing"), ErrorKind.TOOLCHAIN_UNAVAILABLE),
            (SpawnError("g++: command not found"), ErrorKind.SYSTEM),
            (WorkspaceError("disk full"), ErrorKind.SYSTEM),
        ],
    )
    def test_playground_errors(self, exc: Exception, kind: ErrorKind) -> None:
        result = result_from_error(exc)
        assert result.error_kind is kind
        assert result.error == str(exc)
        assert result.output == ""
        assert result.execution_time_ms == 0

    def test_unexpected_exception_is_system_error(self) -> None:
        result = result_from_error(RuntimeError("kaboom"), started_at=time.monotonic())
        assert result.error_kind is ErrorKind.SYSTEM
        assert result.error == "kaboom"

    def test_empty_message_uses_type_name(self) -> None:
        assert result_from_error(KeyError()).error == "KeyError"


# ============================================================================
# Helpers
# ============================================================================


class TestHelpers:
    def test_elapsed_ms_never_negative(self) -> None:
        assert elapsed_ms(time.monotonic() + 100) == 0

    def test_elapsed_ms_grows(self) -> None:
        assert elapsed_ms(time.monotonic() - 0.25) >= 250

    def test_timeout_message_formats_fractional_limit(self) -> None:
        assert timeout_message(Phase.RUN, 0.5) == "Execution timeout (0.5s limit exceeded)"

    def test_describe_unknown(self) -> None:
        assert describe_exit(None) == "Process exit status unknown"
        assert describe_exit(-250) == "Process terminated by signal 250"

    def test_decode_stream(self) -> None:
        assert decode_stream(b"abc") == "abc"
        assert decode_stream(b"abc", truncated=True) == "abc\n[output truncated]"
