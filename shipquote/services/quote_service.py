"""
Quote Service

Cache-aside flow in front of the provider fan-out:
1. Look the request up by fingerprint; a hit returns the cached quotes alone
2. On a miss, fan out, assign badges, and persist non-empty results
3. Cache failures never reach the caller; they only cost a fan-out
"""
import logging
from typing import Optional

from shipquote.modules.shipping.carriers.base import QuoteRequest
from shipquote.services.badge_service import BadgeService
from shipquote.services.quote_cache import QuoteStore, quote_fingerprint
from shipquote.services.quote_orchestrator import QuoteAggregation, QuoteOrchestrator

logger = logging.getLogger(__name__)


class QuoteService:
    def __init__(
        self,
        orchestrator: QuoteOrchestrator,
        store: Optional[QuoteStore] = None,
        badge_service: Optional[BadgeService] = None,
    ):
        self.orchestrator = orchestrator
        self.store = store
        self.badge_service = badge_service or BadgeService()

    async def request_quotes(self, request: QuoteRequest) -> QuoteAggregation:
        """
        Quotes for a validated request.

        Returns:
            QuoteAggregation; empty quotes means no provider could answer.
        """
        fingerprint = quote_fingerprint(request) if self.store is not None else None

        if self.store is not None:
            try:
                cached = await self.store.lookup(fingerprint)
            except Exception as e:
                logger.warning(f"[QUOTE_CACHE] Lookup failed, fetching fresh quotes: {e}")
                cached = None

            if cached:
                logger.info(f"[QUOTES] Served {len(cached)} cached quotes for {request.origin} -> {request.destination}")
                return QuoteAggregation(quotes=cached, messages=[])

        result = await self.orchestrator.aggregate(request)
        result.quotes = self.badge_service.assign_badges(result.quotes)

        if self.store is not None and result.quotes:
            try:
                await self.store.store(fingerprint, result.quotes, request)
            except Exception as e:
                logger.error(f"[QUOTE_CACHE] Failed to persist quotes: {e}")

        return result
