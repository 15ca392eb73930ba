"""Logging for playground-exec.

The library only attaches a NullHandler; output handlers are added by
configure_logging(), which the CLI calls. PLAYGROUND_EXEC_LOG_LEVEL sets
the initial level.

Every record emitted for a request carries ``context_id`` (the request
id, or ``probe-<language>`` for toolchain probes). The CLI formatter puts
it after the logger name so interleaved concurrent runs can be told apart:

    WARNING [2026-02-25 10:02:54] playground_exec.supervisor [3f2a9c1e] - Deadline exceeded

Records go through a bounded in-process queue drained by a listener
thread, so a slow stderr never stalls the event loop. Records that do not
fit in the queue are dropped.
"""

import contextlib
import logging
import logging.handlers
import os
import queue

import click

LIBRARY_LOGGER_NAME: str = "playground_exec"
LOG_LEVEL_ENV_VAR: str = "PLAYGROUND_EXEC_LOG_LEVEL"

_DATEFMT = "%Y-%m-%d %H:%M:%S"
_QUEUE_CAPACITY = 4096
_CONTEXT_ID_WIDTH = 8


def _level_from_env() -> int | None:
    name = os.environ.get(LOG_LEVEL_ENV_VAR, "").strip().upper()
    level = logging.getLevelNamesMapping().get(name)
    # NOTSET would silently inherit the root level
    return level or None


_library_logger = logging.getLogger(LIBRARY_LOGGER_NAME)
_library_logger.addHandler(logging.NullHandler())
if (_env_level := _level_from_env()) is not None:
    _library_logger.setLevel(_env_level)


class _RequestFormatter(logging.Formatter):
    """Formats a record, tagging it with a shortened context_id when present."""

    def __init__(self) -> None:
        super().__init__(datefmt=_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        record.asctime = self.formatTime(record, self.datefmt)
        context_id = getattr(record, "context_id", None)
        tag = f" [{str(context_id)[:_CONTEXT_ID_WIDTH]}]" if context_id else ""
        line = f"{record.levelname} [{record.asctime}] {record.name}{tag} - {record.message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class _StderrHandler(logging.Handler):
    """Echoes records to stderr, dimmed; runs on the listener thread."""

    def __init__(self) -> None:
        super().__init__()
        self.setFormatter(_RequestFormatter())

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(click.style(self.format(record), dim=True), err=True)
        except BlockingIOError:
            pass  # stderr full
        except Exception:  # noqa: BLE001
            self.handleError(record)


class _NonBlockingHandler(logging.handlers.QueueHandler):
    """QueueHandler that drops records instead of waiting for queue space."""

    def __init__(self) -> None:
        records: queue.Queue[logging.LogRecord] = queue.Queue(maxsize=_QUEUE_CAPACITY)
        super().__init__(records)
        self._listener = logging.handlers.QueueListener(records, _StderrHandler())
        self._listener.start()

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        # Same process; the listener formats, so extras must survive intact
        return record

    def enqueue(self, record: logging.LogRecord) -> None:
        with contextlib.suppress(queue.Full):
            self.queue.put_nowait(record)

    def close(self) -> None:
        self._listener.stop()
        super().close()


def get_logger(name: str) -> logging.Logger:
    """Logger under the playground_exec hierarchy."""
    return logging.getLogger(name)


def configure_logging(*, level: int | str | None = None, quiet: bool = False) -> None:
    """Attach the stderr handler once and set the library level.

    Args:
        level: Explicit level; overrides PLAYGROUND_EXEC_LOG_LEVEL.
        quiet: Only errors. Wins over ``level``.
    """
    if not any(isinstance(h, _NonBlockingHandler) for h in _library_logger.handlers):
        _library_logger.addHandler(_NonBlockingHandler())

    if quiet:
        _library_logger.setLevel(logging.ERROR)
    elif level is not None:
        _library_logger.setLevel(level)
