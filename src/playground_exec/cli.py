"""Command-line interface for playground-exec.

Usage:
    playground-exec run 'print("hello")'             # Run inline Python
    playground-exec run main.cpp -i "3 4"            # Compile and run a file with input
    echo 'print(1)' | playground-exec run -           # Run from stdin
    playground-exec health --json                     # Toolchain availability
    playground-exec template cpp > main.cpp           # Starter program
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import NoReturn

import click

from playground_exec import __version__
from playground_exec._logging import configure_logging
from playground_exec.config import ExecutorConfig
from playground_exec.dispatcher import Dispatcher
from playground_exec.exceptions import ErrorKind
from playground_exec.health import check_health
from playground_exec.models import ExecutionResult, Language
from playground_exec.prober import ToolchainProber
from playground_exec.settings import Settings
from playground_exec.templates import get_template

# Exit codes following Unix conventions
EXIT_SUCCESS = 0
EXIT_PROGRAM_FAILURE = 1
EXIT_CLI_ERROR = 2
EXIT_TIMEOUT = 124  # Matches `timeout` command
EXIT_ENVIRONMENT_ERROR = 125

EXIT_CODES: dict[ErrorKind | None, int] = {
    None: EXIT_SUCCESS,
    ErrorKind.COMPILE: EXIT_PROGRAM_FAILURE,
    ErrorKind.RUNTIME: EXIT_PROGRAM_FAILURE,
    ErrorKind.VALIDATION: EXIT_CLI_ERROR,
    ErrorKind.TIMEOUT: EXIT_TIMEOUT,
    ErrorKind.TOOLCHAIN_UNAVAILABLE: EXIT_ENVIRONMENT_ERROR,
    ErrorKind.SYSTEM: EXIT_ENVIRONMENT_ERROR,
}

# File extension to language mapping
EXTENSION_MAP: dict[str, str] = {
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".py": "python",
}

LANGUAGE_CHOICES = ["cpp", "python", "compiled", "interpreted"]


def detect_language(source: str | None) -> str | None:
    """Auto-detect language from file extension.

    Args:
        source: File path or stdin marker ("-") or inline code

    Returns:
        Detected language name or None if cannot detect
    """
    if not source or source == "-":
        return None

    path = Path(source)
    if path.suffix:
        return EXTENSION_MAP.get(path.suffix.lower())

    return None


def format_error(title: str, message: str, suggestions: list[str] | None = None) -> str:
    """Format an error message following What → Why → Fix pattern.

    Args:
        title: Short error title
        message: Detailed explanation
        suggestions: Optional list of suggestions to fix the issue

    Returns:
        Formatted error string
    """
    lines = [
        click.style(f"Error: {title}", fg="red", bold=True),
        "",
        f"  {message}",
    ]

    if suggestions:
        lines.extend(["", "  Suggestions:"])
        lines.extend(f"    • {suggestion}" for suggestion in suggestions)

    return "\n".join(lines)


def format_result_error(result: ExecutionResult, config: ExecutorConfig) -> str | None:
    """Human-readable rendering of result.error for the terminal."""
    if not result.error:
        return None
    match result.error_kind:
        case ErrorKind.COMPILE:
            return format_error("Compilation failed", result.error.removeprefix("Compilation Error: ").rstrip())
        case ErrorKind.TIMEOUT:
            return format_error(
                "Execution timed out",
                result.error.strip(),
                ["Check for infinite loops in your code", "Increase the limit with -t/--timeout"],
            )
        case ErrorKind.TOOLCHAIN_UNAVAILABLE:
            return format_error(
                "Toolchain not available",
                result.error,
                [
                    f"Install {config.cxx_bin} or {config.python_bin}",
                    "Point PLAYGROUND_EXEC_CXX_BIN / PLAYGROUND_EXEC_PYTHON_BIN at an installed binary",
                ],
            )
        case ErrorKind.VALIDATION:
            return format_error("Invalid request", result.error)
        case ErrorKind.SYSTEM:
            return format_error("System error", result.error)
        case _:
            # Program stderr (runtime failure or warnings) is shown verbatim
            return result.error


def is_tty() -> bool:
    """Check if stdout is connected to a terminal."""
    return sys.stdout.isatty()


def resolve_code(source: str | None, inline_code: str | None) -> str:
    """Resolve the program text from -c, stdin ("-"), a file path, or inline SOURCE."""
    if inline_code:
        return inline_code
    if source == "-":
        if sys.stdin.isatty():
            raise click.UsageError("No input provided. Pipe code to stdin or use -c flag.")
        return sys.stdin.read()
    if source:
        try:
            is_file = Path(source).is_file()
        except (OSError, ValueError):
            # Inline code too long or odd to be a path (ENAMETOOLONG, NUL)
            is_file = False
        return Path(source).read_text(encoding="utf-8") if is_file else source
    raise click.UsageError("No code provided. Provide SOURCE argument or use -c flag.")


def build_config(timeout: float | None, no_probe: bool) -> ExecutorConfig:
    config = ExecutorConfig.from_settings(Settings())
    overrides: dict[str, object] = {}
    if timeout is not None:
        overrides["run_timeout_seconds"] = timeout
        overrides["interpret_timeout_seconds"] = timeout
    if no_probe:
        overrides["probe_before_run"] = False
    if not overrides:
        return config
    # Re-validate rather than model_copy(), which skips field constraints
    return ExecutorConfig(**{**config.model_dump(), **overrides})


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors")
@click.version_option(__version__, "-V", "--version", prog_name="playground-exec")
def main(verbose: bool, quiet: bool) -> None:
    """Compile and run C++ or Python programs under wall-clock deadlines."""
    configure_logging(level="DEBUG" if verbose else None, quiet=quiet)


@main.command("run")
@click.argument("source", required=False)
@click.option(
    "-l",
    "--language",
    type=click.Choice(LANGUAGE_CHOICES, case_sensitive=False),
    help="Programming language (auto-detected from file extension)",
)
@click.option("-c", "--code", "inline_code", help="Code to execute (alternative to SOURCE)")
@click.option("-i", "--input", "input_text", help="Text passed to the program's stdin")
@click.option(
    "--input-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="File whose contents are passed to the program's stdin",
)
@click.option("-t", "--timeout", type=float, help="Run deadline in seconds (default: 10 for C++, 30 for Python)")
@click.option("--no-probe", is_flag=True, help="Skip the toolchain availability check")
@click.option("--json", "json_output", is_flag=True, help="Output the result as JSON")
def run_command(
    source: str | None,
    language: str | None,
    inline_code: str | None,
    input_text: str | None,
    input_file: Path | None,
    timeout: float | None,
    no_probe: bool,
    json_output: bool,
) -> NoReturn:
    """Execute a program and print its output.

    SOURCE can be:

    \b
      - Inline code:  playground-exec run 'print("hello")'
      - File path:    playground-exec run main.cpp
      - Stdin:        echo 'print(1)' | playground-exec run -

    Language is auto-detected from file extension (.cpp, .cc, .cxx, .py)
    or defaults to Python for inline code.
    """
    if input_text is not None and input_file is not None:
        raise click.UsageError("Use either -i/--input or --input-file, not both.")

    code = resolve_code(source, inline_code)
    if not code.strip():
        raise click.UsageError("Empty code provided.")

    stdin = input_file.read_text(encoding="utf-8") if input_file is not None else (input_text or "")
    resolved_language = language.lower() if language else (detect_language(source) or Language.PYTHON.value)

    try:
        config = build_config(timeout, no_probe)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    dispatcher = Dispatcher(config)
    result = asyncio.run(dispatcher.execute_code(code, resolved_language, stdin))

    if json_output:
        click.echo(result.model_dump_json(indent=2))
        sys.exit(EXIT_CODES[result.error_kind])

    if result.output:
        click.echo(result.output, nl=not result.output.endswith("\n"))
    if (rendered := format_result_error(result, config)) is not None:
        click.echo(rendered, err=True)

    if is_tty() and result.error_kind is None:
        click.echo(click.style(f"✓ Done in {result.execution_time_ms}ms", fg="green", dim=True), err=True)

    sys.exit(EXIT_CODES[result.error_kind])


@main.command("health")
@click.option("--json", "json_output", is_flag=True, help="Output the report as JSON")
@click.option("--retries", type=click.IntRange(min=1), help="Probe attempts per toolchain")
def health_command(json_output: bool, retries: int | None) -> NoReturn:
    """Report whether the C++ compiler and Python interpreter are available."""
    settings = Settings()
    prober = ToolchainProber(ExecutorConfig.from_settings(settings))
    report = asyncio.run(check_health(prober, attempts=retries or settings.probe_retries))

    if json_output:
        click.echo(report.model_dump_json(indent=2))
    else:
        for name, service in report.services.items():
            mark = click.style("✓", fg="green") if service.available else click.style("✗", fg="red")
            click.echo(f"{mark} {name:<7} {service.version}")
        status_color = "green" if report.healthy else "yellow"
        click.echo(click.style(f"status: {report.status}", fg=status_color))

    sys.exit(EXIT_SUCCESS if report.healthy else EXIT_PROGRAM_FAILURE)


@main.command("template")
@click.argument("language", type=click.Choice(LANGUAGE_CHOICES, case_sensitive=False))
def template_command(language: str) -> None:
    """Print the starter program for LANGUAGE."""
    click.echo(get_template(language), nl=False)


if __name__ == "__main__":
    main()
