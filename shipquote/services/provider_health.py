"""
Provider Health Service

Probes every carrier with a minimal quote call through the same
timeout-bounded dispatcher used for real quoting, and rolls the results
up into a system verdict:
- ONLINE: every provider answered
- DEGRADED: some answered
- OFFLINE: none answered (including when none are configured)

Nothing is cached; each call is a fresh fan-out.
"""
import asyncio
import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial
from typing import List, Sequence, Tuple

from shipquote.services.dispatcher import DEFAULT_TIMEOUT_MS, dispatch_with_timeout
from shipquote.services.quote_orchestrator import ProviderLike, carrier_of, provider_label

logger = logging.getLogger(__name__)

PROBE_WEIGHT_KG = 1.0
PROBE_DESTINATION = "test"
MIN_RESPONSE_MS = 50

ONLINE = "online"
OFFLINE = "offline"


class SystemState(str, enum.Enum):
    ONLINE = "ONLINE"
    DEGRADED = "DEGRADED"
    OFFLINE = "OFFLINE"


@dataclass(frozen=True)
class ProviderStatus:
    provider_name: str
    status: str
    response_time_ms: int
    last_check: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if not self.provider_name or not self.provider_name.strip():
            raise ValueError("provider_name is required")
        if self.status not in (ONLINE, OFFLINE):
            raise ValueError('status must be either "online" or "offline"')
        if self.response_time_ms < 0:
            raise ValueError("response_time_ms must not be negative")

    @property
    def is_online(self) -> bool:
        return self.status == ONLINE


@dataclass(frozen=True)
class SystemStatus:
    status: SystemState
    active_count: int
    total_count: int
    providers: Tuple[ProviderStatus, ...] = ()


def derive_system_state(active_count: int, total_count: int) -> SystemState:
    if active_count == 0:
        return SystemState.OFFLINE
    if active_count == total_count:
        return SystemState.ONLINE
    return SystemState.DEGRADED


class ProviderHealthService:
    def __init__(
        self,
        providers: Sequence[ProviderLike],
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        min_response_ms: int = MIN_RESPONSE_MS,
    ):
        self._providers: Tuple[ProviderLike, ...] = tuple(providers)
        self.timeout_ms = timeout_ms
        self.min_response_ms = min_response_ms

    async def check_health(self) -> List[ProviderStatus]:
        """One probe per provider, all concurrent, results in provider order."""
        labels = [provider_label(p, i) for i, p in enumerate(self._providers)]

        outcomes = await asyncio.gather(*[
            dispatch_with_timeout(
                partial(carrier_of(provider).get_quote, PROBE_WEIGHT_KG, PROBE_DESTINATION),
                timeout_ms=self.timeout_ms,
                label=label,
            )
            for provider, label in zip(self._providers, labels)
        ])

        statuses = []
        for label, outcome in zip(labels, outcomes):
            elapsed = int(round(outcome.elapsed_ms))
            if outcome.ok:
                statuses.append(ProviderStatus(
                    provider_name=label,
                    status=ONLINE,
                    response_time_ms=max(self.min_response_ms, elapsed),
                ))
            else:
                logger.warning(f"[HEALTH] {label} probe failed: {outcome.reason}")
                statuses.append(ProviderStatus(
                    provider_name=label,
                    status=OFFLINE,
                    response_time_ms=max(self.min_response_ms, elapsed),
                ))
        return statuses

    async def get_system_status(self) -> SystemStatus:
        providers = await self.check_health()
        active_count = sum(1 for p in providers if p.is_online)
        total_count = len(providers)
        state = derive_system_state(active_count, total_count)

        logger.info(f"[HEALTH] {state.value}: {active_count}/{total_count} providers online")
        return SystemStatus(
            status=state,
            active_count=active_count,
            total_count=total_count,
            providers=tuple(providers),
        )
