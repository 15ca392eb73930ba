"""Toolchain availability probes.

ToolchainProber runs `<binary> --version` under a short deadline and
reports whether the compiler or interpreter can be used. It is stateless:
every probe() spawns a fresh process.

CachedProber layers an explicit, time-bounded cache on top for callers
that probe on every request (the dispatcher with probe_before_run, a
health endpoint polled by a load balancer). Locks are per language and
created lazily so concurrent first requests share one probe instead of
stampeding the binary.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Iterable
from typing import Protocol

from playground_exec import constants
from playground_exec._logging import get_logger
from playground_exec.config import ExecutorConfig
from playground_exec.exceptions import SpawnError
from playground_exec.models import Language, ToolchainStatus
from playground_exec.spawner import Spawner, SubprocessSpawner
from playground_exec.supervisor import supervise

logger = get_logger(__name__)


class Prober(Protocol):
    async def probe(self, language: Language) -> ToolchainStatus: ...


def _first_line(data: bytes) -> str | None:
    for line in data.decode("utf-8", errors="replace").splitlines():
        if line.strip():
            return line.strip()
    return None


class ToolchainProber:
    """Checks that the binary configured for each language runs."""

    def __init__(self, config: ExecutorConfig | None = None, spawner: Spawner | None = None) -> None:
        self._config = config or ExecutorConfig()
        self._spawner: Spawner = spawner or SubprocessSpawner()

    async def probe(self, language: Language) -> ToolchainStatus:
        """Probe one language's toolchain.

        Exit 0 means available; the version is the first non-empty line of
        stdout, or of stderr for interpreters that print their version there.
        Any other outcome (nonzero exit, spawn failure, timeout) means
        unavailable with a human-readable error. Never raises.
        """
        binary = self._config.toolchain_bin(language)
        limit = self._config.probe_timeout_seconds
        context_id = f"probe-{language.value}"

        try:
            proc = await self._spawner.spawn(binary, [constants.VERSION_FLAG])
        except SpawnError as e:
            logger.info("Toolchain not available", extra={"context_id": context_id, "error": e.message})
            return ToolchainStatus(available=False, error=f"{binary} not available: {e.message}")

        outcome = await supervise(proc, deadline_seconds=limit, name=binary, context_id=context_id)

        if outcome.timed_out:
            return ToolchainStatus(available=False, error=f"{binary} version check timed out after {limit:g}s")

        if outcome.exit_code == 0:
            version = _first_line(outcome.stdout) or _first_line(outcome.stderr)
            logger.debug("Toolchain available", extra={"context_id": context_id, "version": version})
            return ToolchainStatus(available=True, version=version)

        stderr = outcome.stderr.decode("utf-8", errors="replace").strip()
        logger.info(
            "Toolchain probe failed",
            extra={"context_id": context_id, "exit_code": outcome.exit_code, "stderr": stderr[:200]},
        )
        return ToolchainStatus(available=False, error=stderr or f"{binary} not found")

    async def probe_all(self, languages: Iterable[Language] = tuple(Language)) -> dict[Language, ToolchainStatus]:
        """Probe several languages concurrently."""
        return await probe_all(self, languages)


async def probe_all(prober: Prober, languages: Iterable[Language] = tuple(Language)) -> dict[Language, ToolchainStatus]:
    languages = list(languages)
    statuses = await asyncio.gather(*(prober.probe(language) for language in languages))
    return dict(zip(languages, statuses, strict=True))


class CachedProber:
    """Time-bounded cache in front of another prober.

    Both available and unavailable statuses are cached; a freshly installed
    compiler is picked up once the entry expires or after invalidate().
    """

    def __init__(
        self,
        prober: Prober,
        ttl_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self._prober = prober
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[Language, tuple[ToolchainStatus, float]] = {}
        self._locks: dict[Language, asyncio.Lock] = {}

    def _get_lock(self, language: Language) -> asyncio.Lock:
        # asyncio.Lock needs a running loop on older Pythons; create on first use
        if language not in self._locks:
            self._locks[language] = asyncio.Lock()
        return self._locks[language]

    def _fresh(self, language: Language) -> ToolchainStatus | None:
        entry = self._entries.get(language)
        if entry is not None and self._clock() < entry[1]:
            return entry[0]
        return None

    async def probe(self, language: Language) -> ToolchainStatus:
        if self._ttl == 0:
            return await self._prober.probe(language)

        if (status := self._fresh(language)) is not None:
            return status

        async with self._get_lock(language):
            # Another task may have refreshed the entry while we waited
            if (status := self._fresh(language)) is not None:
                return status
            status = await self._prober.probe(language)
            self._entries[language] = (status, self._clock() + self._ttl)
            return status

    def invalidate(self, language: Language | None = None) -> None:
        """Drop one cached entry, or all of them."""
        if language is None:
            self._entries.clear()
        else:
            self._entries.pop(language, None)
