"""
Quote Orchestrator

Fans one quote request out to every configured carrier:
- All carrier calls start before any is awaited; each is bounded by its own deadline
- One slow or failing carrier never blocks or cancels the others
- Successes come back as Quotes in provider order, failures as ProviderMessages
- Fragile shipments get a single multiplicative surcharge on every quote

Usage:
    orchestrator = QuoteOrchestrator(build_default_providers())
    result = await orchestrator.aggregate(request)
    result.quotes, result.messages
"""
import asyncio
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import List, Optional, Sequence, Tuple, Union

from shipquote.core.exceptions import ProviderError
from shipquote.modules.shipping.carriers.base import (
    BaseCarrier,
    ProviderRegistration,
    Quote,
    QuoteRequest,
)
from shipquote.services.dispatcher import DEFAULT_TIMEOUT_MS, DispatchOutcome, dispatch_with_timeout

logger = logging.getLogger(__name__)

FRAGILE_SURCHARGE = 1.15  # +15%

ProviderLike = Union[ProviderRegistration, BaseCarrier]


@dataclass
class ProviderMessage:
    """User-facing notice for a carrier that could not quote."""
    provider: str
    message: str
    error: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"provider": self.provider, "message": self.message}
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class QuoteAggregation:
    """Quotes from the carriers that answered, messages for those that did not."""
    quotes: List[Quote] = field(default_factory=list)
    messages: List[ProviderMessage] = field(default_factory=list)

    @property
    def providers_available(self) -> bool:
        return bool(self.quotes)


def provider_label(provider: ProviderLike, index: int) -> str:
    """Registration name, or the 1-based position when the provider is unnamed."""
    if isinstance(provider, ProviderRegistration):
        return provider.name
    return f"Provider {index + 1}"


def unavailable_message(label: str, error: Optional[BaseException] = None) -> ProviderMessage:
    reason = None
    if error is not None:
        reason = str(error) or error.__class__.__name__
    return ProviderMessage(
        provider=label,
        message=f"{label} is not available at this time",
        error=reason or "Provider unavailable",
    )


def carrier_of(provider: ProviderLike) -> BaseCarrier:
    if isinstance(provider, ProviderRegistration):
        return provider.carrier
    return provider


class QuoteOrchestrator:
    """
    Concurrent, timeout-bounded fan-out over a fixed provider list.

    The provider list is read-only after construction and shared by every
    request. Only QuoteValidationError (raised while building the request)
    can escape; carrier failures always come back as data.
    """

    def __init__(
        self,
        providers: Sequence[ProviderLike],
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        fragile_surcharge: float = FRAGILE_SURCHARGE,
    ):
        self._providers: Tuple[ProviderLike, ...] = tuple(providers)
        self.timeout_ms = timeout_ms
        self.fragile_surcharge = fragile_surcharge

    @property
    def providers(self) -> Tuple[ProviderLike, ...]:
        return self._providers

    async def aggregate(self, request: QuoteRequest) -> QuoteAggregation:
        """
        Get quotes from every provider.

        Returns:
            QuoteAggregation with exactly one entry per provider, either a
            quote or a message. Zero providers yields two empty lists.
        """
        if not self._providers:
            logger.warning("[QUOTES] No providers configured")
            return QuoteAggregation()

        labels = [provider_label(p, i) for i, p in enumerate(self._providers)]

        # One slot per provider, filled by position
        outcomes: List[DispatchOutcome] = await asyncio.gather(*[
            dispatch_with_timeout(
                partial(carrier_of(provider).get_quote, request.weight, request.destination),
                timeout_ms=self.timeout_ms,
                label=label,
            )
            for provider, label in zip(self._providers, labels)
        ])

        result = QuoteAggregation()
        for label, outcome in zip(labels, outcomes):
            if outcome.ok and isinstance(outcome.value, Quote):
                result.quotes.append(outcome.value)
                continue

            error = outcome.error
            if outcome.ok:
                error = ProviderError("Provider returned no quote", provider=label)

            logger.warning(f"[QUOTES] {label} failed: {error}")
            result.messages.append(unavailable_message(label, error))

        if request.fragile:
            result.quotes = [self.apply_fragile_surcharge(q) for q in result.quotes]

        logger.info(
            f"[QUOTES] {len(result.quotes)}/{len(self._providers)} providers quoted "
            f"{request.origin} -> {request.destination} ({request.weight:g} kg)"
        )
        return result

    def apply_fragile_surcharge(self, quote: Quote) -> Quote:
        return quote.with_price(quote.price * self.fragile_surcharge)
