"""Health report over every supported toolchain.

Consumed by the playground's health endpoint (and `playground-exec health`):
the service reports "degraded" when any toolchain it needs is missing.

Probing is idempotent, so an unavailable toolchain may be re-probed with
exponential backoff and full jitter before the report gives up on it.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from playground_exec import constants
from playground_exec._logging import get_logger
from playground_exec.exceptions import ToolchainUnavailableError
from playground_exec.models import Language, ToolchainStatus
from playground_exec.prober import Prober

logger = get_logger(__name__)


class ServiceHealth(BaseModel):
    available: bool
    version: str = Field(description="Toolchain version, or the probe error when unavailable")


class HealthReport(BaseModel):
    status: Literal["ok", "degraded"]
    timestamp: datetime
    services: dict[str, ServiceHealth]

    @property
    def healthy(self) -> bool:
        return self.status == "ok"


async def probe_with_retry(
    prober: Prober,
    language: Language,
    *,
    attempts: int = constants.DEFAULT_PROBE_RETRIES,
) -> ToolchainStatus:
    """Probe language, retrying while it reports unavailable.

    Returns the last status once attempts are exhausted; never raises for an
    unavailable toolchain.
    """
    if attempts <= 1:
        return await prober.probe(language)

    status = ToolchainStatus(available=False, error="not probed")
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_random_exponential(
                min=constants.PROBE_RETRY_MIN_SECONDS,
                max=constants.PROBE_RETRY_MAX_SECONDS,
            ),
            retry=retry_if_exception_type(ToolchainUnavailableError),
            before_sleep=before_sleep_log(logger, logging.INFO),
            reraise=True,
        ):
            with attempt:
                status = await prober.probe(language)
                if not status.available:
                    raise ToolchainUnavailableError(
                        status.error or f"{language.display_name} toolchain not available",
                        context={"language": language.value, "attempt": attempt.retry_state.attempt_number},
                    )
    except ToolchainUnavailableError:
        # Out of attempts: report the last unavailable status
        pass
    return status


def _service_health(status: ToolchainStatus) -> ServiceHealth:
    return ServiceHealth(
        available=status.available,
        version=status.version or status.error or "unknown",
    )


async def check_health(
    prober: Prober,
    *,
    languages: tuple[Language, ...] = tuple(Language),
    attempts: int = constants.DEFAULT_PROBE_RETRIES,
) -> HealthReport:
    """Probe every language concurrently and summarize."""
    statuses = await asyncio.gather(
        *(probe_with_retry(prober, language, attempts=attempts) for language in languages)
    )
    services = {
        language.value: _service_health(status) for language, status in zip(languages, statuses, strict=True)
    }
    report = HealthReport(
        status="ok" if all(s.available for s in services.values()) else "degraded",
        timestamp=datetime.now(UTC),
        services=services,
    )
    if not report.healthy:
        logger.warning(
            "Toolchain health degraded",
            extra={"unavailable": [name for name, s in services.items() if not s.available]},
        )
    return report
