"""Subprocess stream utilities.

- CappedBuffer: byte accumulator that stops storing past a limit
- drain_stream: read a pipe to EOF incrementally into a CappedBuffer
- feed_stdin: write the full input then close the pipe

Streams must be drained concurrently with each other and with the stdin
write; a child blocked on a full 64KB stdout pipe never reads its stdin
and never exits.
"""

from __future__ import annotations

import asyncio
import contextlib

from playground_exec import constants
from playground_exec._logging import get_logger

logger = get_logger(__name__)


class CappedBuffer:
    """Accumulates bytes up to limit; later bytes are counted but dropped.

    The pipe keeps being read after the cap is reached so the child does
    not block on a full pipe.
    """

    __slots__ = ("_data", "limit", "total_bytes")

    def __init__(self, limit: int) -> None:
        self._data = bytearray()
        self.limit = limit
        self.total_bytes = 0

    def append(self, chunk: bytes) -> None:
        self.total_bytes += len(chunk)
        room = self.limit - len(self._data)
        if room > 0:
            self._data.extend(chunk[:room])

    @property
    def truncated(self) -> bool:
        return self.total_bytes > self.limit

    def getvalue(self) -> bytes:
        return bytes(self._data)


async def drain_stream(
    reader: asyncio.StreamReader | None,
    buffer: CappedBuffer,
    *,
    chunk_size: int = constants.READ_CHUNK_SIZE,
) -> None:
    """Read reader until EOF, appending every chunk to buffer as it arrives.

    Data read before a cancellation stays in buffer, so a killed program's
    partial output survives.
    """
    if reader is None:
        return
    while True:
        chunk = await reader.read(chunk_size)
        if not chunk:
            return
        buffer.append(chunk)


async def feed_stdin(
    writer: asyncio.StreamWriter | None,
    data: bytes,
    *,
    context_id: str,
) -> None:
    """Write data to the child's stdin, then close it.

    A program that exits without reading its input closes the pipe first;
    the resulting BrokenPipeError/ConnectionResetError is expected and only
    logged.
    """
    if writer is None:
        return
    try:
        if data:
            writer.write(data)
            await writer.drain()
    except (BrokenPipeError, ConnectionResetError):
        logger.debug("stdin closed by child before input was consumed", extra={"context_id": context_id})
    finally:
        writer.close()
        with contextlib.suppress(BrokenPipeError, ConnectionResetError):
            await writer.wait_closed()
