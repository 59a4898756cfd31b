"""
Quote Cache for the provider fan-out

Purpose:
- Answers repeated identical requests without contacting carriers
- Cache key: SHA-256 of the normalized request (see quote_fingerprint)
- TTL: 5 minutes (QUOTE_CACHE_TTL_SECONDS)
- Entries are written whole and never partially updated; empty results are never stored

Backends:
- InMemoryQuoteStore: per-process LRU with TTL
- RedisQuoteStore: shared across instances, JSON payload under SETEX
- DatabaseQuoteStore: `quotes` table, one row per quote, fresh while created_at is inside the window

Usage:
    store = build_quote_store(settings)
    fingerprint = quote_fingerprint(request)
    cached = await store.lookup(fingerprint)
    if cached is None:
        ...
        await store.store(fingerprint, quotes, request)
"""
import hashlib
import logging
import time
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Tuple

from sqlalchemy import delete, select

from shipquote.core.exceptions import QuoteStoreError
from shipquote.core.redis_client import QUOTE_KEY_PREFIX, get_json, get_redis, quote_key, set_json
from shipquote.modules.shipping.carriers.base import Quote, QuoteRequest

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300  # 5 minutes
DEFAULT_MAX_ENTRIES = 1000


def quote_fingerprint(request: QuoteRequest) -> str:
    """
    Deterministic key for a request.

    Origin and destination are trimmed and case-folded; weight is compared
    as a float so 5 and 5.0 share an entry.
    """
    key_parts = [
        request.origin.strip().casefold(),
        request.destination.strip().casefold(),
        repr(float(request.weight)),
        request.pickup_date.isoformat(),
        "fragile" if request.fragile else "standard",
    ]
    key_string = "|".join(key_parts)
    return hashlib.sha256(key_string.encode("utf-8")).hexdigest()


class QuoteStore(Protocol):
    async def lookup(self, fingerprint: str) -> Optional[List[Quote]]:
        ...

    async def store(self, fingerprint: str, quotes: List[Quote], request: QuoteRequest) -> None:
        ...


def _copy_quotes(quotes: List[Quote]) -> List[Quote]:
    # Callers mutate badge flags; never hand out the stored objects
    return [Quote.from_dict(q.to_dict()) for q in quotes]


# =============================================================================
# In-memory
# =============================================================================

class InMemoryQuoteStore:
    """
    LRU cache with TTL for quote lists.

    Safe for single-threaded async usage (standard in asyncio).

    Attributes:
        ttl_seconds: Time-to-live for cache entries (default: 300 = 5 minutes)
        max_size: Maximum cache entries before LRU eviction (default: 1000)
    """

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, max_size: int = DEFAULT_MAX_ENTRIES):
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._cache: "OrderedDict[str, Tuple[float, List[Quote]]]" = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    async def lookup(self, fingerprint: str) -> Optional[List[Quote]]:
        if fingerprint not in self._cache:
            self._misses += 1
            logger.debug(f"[QUOTE_CACHE] Miss: {fingerprint[:12]}")
            return None

        timestamp, quotes = self._cache[fingerprint]

        if time.time() - timestamp > self.ttl_seconds:
            # Expired - remove and return miss
            del self._cache[fingerprint]
            self._misses += 1
            logger.debug(f"[QUOTE_CACHE] Expired: {fingerprint[:12]}")
            return None

        # Move to end (most recently used)
        self._cache.move_to_end(fingerprint)
        self._hits += 1
        logger.debug(f"[QUOTE_CACHE] Hit: {fingerprint[:12]} ({len(quotes)} quotes)")
        return _copy_quotes(quotes)

    async def store(self, fingerprint: str, quotes: List[Quote], request: QuoteRequest) -> None:
        if not quotes:
            return

        if fingerprint in self._cache:
            del self._cache[fingerprint]

        # Evict oldest entries if at capacity
        while len(self._cache) >= self.max_size:
            self._cache.popitem(last=False)
            self._evictions += 1
            logger.debug("[QUOTE_CACHE] Evicted oldest entry (capacity)")

        self._cache[fingerprint] = (time.time(), _copy_quotes(quotes))
        logger.debug(f"[QUOTE_CACHE] Stored: {fingerprint[:12]} ({len(quotes)} quotes)")

    def get_stats(self) -> Dict[str, Any]:
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 4) if total > 0 else 0.0,
            "size": len(self._cache),
            "max_size": self.max_size,
            "ttl_seconds": self.ttl_seconds,
            "evictions": self._evictions,
        }

    def clear(self) -> None:
        """Clear all cached entries."""
        count = len(self._cache)
        self._cache.clear()
        logger.info(f"[QUOTE_CACHE] Cleared {count} entries")


# =============================================================================
# Redis
# =============================================================================

RedisGetter = Callable[[], Awaitable[Any]]


class RedisQuoteStore:
    """
    Quote cache in Redis.

    A missing or unreachable Redis behaves as an always-empty cache; command
    failures raise QuoteStoreError so the caller can log them. Corrupt
    entries are deleted when read.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        redis_getter: Optional[RedisGetter] = None,
        prefix: str = QUOTE_KEY_PREFIX,
    ):
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix
        self._get_redis = redis_getter or get_redis

    async def lookup(self, fingerprint: str) -> Optional[List[Quote]]:
        client = await self._get_redis()
        if not client:
            return None

        quotes = await get_json(
            client,
            quote_key(fingerprint, self.prefix),
            decode=lambda data: [Quote.from_dict(item) for item in data],
        )
        if not quotes:
            logger.debug(f"[QUOTE_CACHE] Miss: {fingerprint[:12]}")
            return None

        logger.debug(f"[QUOTE_CACHE] Hit: {fingerprint[:12]} ({len(quotes)} quotes)")
        return quotes

    async def store(self, fingerprint: str, quotes: List[Quote], request: QuoteRequest) -> None:
        if not quotes:
            return

        client = await self._get_redis()
        if not client:
            return

        await set_json(client, quote_key(fingerprint, self.prefix), [q.to_dict() for q in quotes], self.ttl_seconds)
        logger.debug(f"[QUOTE_CACHE] Stored: {fingerprint[:12]} ({len(quotes)} quotes)")


# =============================================================================
# Database
# =============================================================================

class DatabaseQuoteStore:
    """
    Quote cache in the `quotes` table.

    store() replaces the entry's rows in one transaction, so a lookup sees
    either the previous entry or the new one, never a mix.
    """

    def __init__(self, session_factory: Optional[Callable[[], Any]] = None, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        if session_factory is None:
            from shipquote.core.database import get_session_factory
            session_factory = get_session_factory()
        self._session_factory = session_factory
        self.ttl_seconds = ttl_seconds

    async def lookup(self, fingerprint: str) -> Optional[List[Quote]]:
        from shipquote.models.quote import CachedQuote

        cutoff = datetime.now(timezone.utc) - timedelta(seconds=self.ttl_seconds)
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(CachedQuote)
                    .where(
                        CachedQuote.fingerprint == fingerprint,
                        CachedQuote.created_at >= cutoff,
                    )
                    .order_by(CachedQuote.position.asc())
                )
                rows = list(result.scalars().all())
        except Exception as e:
            raise QuoteStoreError(f"Database lookup failed: {e}") from e

        if not rows:
            logger.debug(f"[QUOTE_CACHE] Miss: {fingerprint[:12]}")
            return None

        logger.debug(f"[QUOTE_CACHE] Hit: {fingerprint[:12]} ({len(rows)} quotes)")
        return [_row_to_quote(row) for row in rows]

    async def store(self, fingerprint: str, quotes: List[Quote], request: QuoteRequest) -> None:
        from shipquote.models.quote import CachedQuote

        if not quotes:
            return

        created_at = datetime.now(timezone.utc)
        try:
            async with self._session_factory() as db:
                try:
                    await db.execute(delete(CachedQuote).where(CachedQuote.fingerprint == fingerprint))
                    for position, quote in enumerate(quotes):
                        db.add(CachedQuote(
                            fingerprint=fingerprint,
                            position=position,
                            provider_id=quote.provider_id,
                            provider_name=quote.provider_name,
                            price=quote.price,
                            currency=quote.currency,
                            min_days=quote.min_days,
                            max_days=quote.max_days,
                            transport_mode=quote.transport_mode,
                            is_cheapest=quote.is_cheapest,
                            is_fastest=quote.is_fastest,
                            origin=request.origin,
                            destination=request.destination,
                            weight=request.weight,
                            pickup_date=request.pickup_date,
                            fragile=request.fragile,
                            created_at=created_at,
                        ))
                    await db.commit()
                except Exception:
                    await db.rollback()
                    raise
        except Exception as e:
            raise QuoteStoreError(f"Database store failed: {e}") from e

        logger.debug(f"[QUOTE_CACHE] Stored: {fingerprint[:12]} ({len(quotes)} quotes)")


def _row_to_quote(row) -> Quote:
    return Quote(
        provider_id=row.provider_id,
        provider_name=row.provider_name,
        price=row.price,
        currency=row.currency,
        min_days=row.min_days,
        max_days=row.max_days,
        transport_mode=row.transport_mode,
        is_cheapest=bool(row.is_cheapest),
        is_fastest=bool(row.is_fastest),
    )


def build_quote_store(settings) -> Optional[QuoteStore]:
    """Pick the cache backend from QUOTE_CACHE_BACKEND; None disables caching."""
    backend = settings.QUOTE_CACHE_BACKEND
    ttl = settings.QUOTE_CACHE_TTL_SECONDS

    if backend == "none":
        logger.info("[QUOTE_CACHE] Disabled")
        return None
    if backend == "redis":
        logger.info(f"[QUOTE_CACHE] Using Redis (ttl={ttl}s)")
        return RedisQuoteStore(ttl_seconds=ttl)
    if backend == "database":
        logger.info(f"[QUOTE_CACHE] Using database (ttl={ttl}s)")
        return DatabaseQuoteStore(ttl_seconds=ttl)

    logger.info(f"[QUOTE_CACHE] Using in-memory LRU (ttl={ttl}s, max={settings.QUOTE_CACHE_MAX_ENTRIES})")
    return InMemoryQuoteStore(ttl_seconds=ttl, max_size=settings.QUOTE_CACHE_MAX_ENTRIES)
