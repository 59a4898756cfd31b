"""
Redis client for ShipQuote

Backs the shared quote cache when QUOTE_CACHE_BACKEND=redis, so every
instance answers repeated requests from the same entries.

- get_redis(): lazy shared client, None when Redis is not usable
- After a failed connect, no new attempt is made for RECONNECT_BACKOFF_SECONDS,
  so an outage costs one ping per window instead of one per quote request
- get_json()/set_json(): JSON values under a TTL; an undecodable value is
  deleted on read so it stops failing before its TTL runs out
"""
import json
import logging
import time
from typing import Any, Callable, Optional

import redis.asyncio as redis

from shipquote.core.config import settings
from shipquote.core.exceptions import QuoteStoreError

logger = logging.getLogger(__name__)

QUOTE_KEY_PREFIX = "quotes:fp:"
RECONNECT_BACKOFF_SECONDS = 30.0

# Global Redis client (initialized lazily)
_redis_client: Optional[redis.Redis] = None
_last_failure: Optional[float] = None


def quote_key(fingerprint: str, prefix: str = QUOTE_KEY_PREFIX) -> str:
    return f"{prefix}{fingerprint}"


async def get_redis() -> Optional[redis.Redis]:
    """Get Redis client, connecting if needed.

    Returns None if REDIS_URL is not configured, or if Redis was unreachable
    within the last RECONNECT_BACKOFF_SECONDS (graceful degradation).
    """
    global _redis_client, _last_failure

    if not settings.REDIS_URL:
        return None

    if _redis_client is not None:
        return _redis_client

    if _last_failure is not None and time.monotonic() - _last_failure < RECONNECT_BACKOFF_SECONDS:
        return None

    client = redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
    except Exception as e:
        _last_failure = time.monotonic()
        logger.warning(
            f"[REDIS] Connection failed: {e}. Quote cache off for {RECONNECT_BACKOFF_SECONDS:.0f}s"
        )
        return None

    if _last_failure is not None:
        logger.info("[REDIS] Connection restored")
    else:
        logger.info("[REDIS] Connection established")
    _redis_client = client
    _last_failure = None
    return _redis_client


async def close_redis():
    """Close Redis connection on shutdown."""
    global _redis_client, _last_failure
    if _redis_client:
        await _redis_client.close()
    _redis_client = None
    _last_failure = None


async def get_json(client: redis.Redis, key: str, decode: Callable[[Any], Any] = lambda data: data) -> Any:
    """
    Read and decode a JSON value.

    Returns None for a missing key. A value that is not valid JSON, or that
    decode() rejects, is deleted and reported as QuoteStoreError.
    """
    try:
        raw = await client.get(key)
    except Exception as e:
        raise QuoteStoreError(f"Redis lookup failed: {e}") from e

    if not raw:
        return None

    try:
        return decode(json.loads(raw))
    except (ValueError, KeyError, TypeError) as e:
        logger.warning(f"[REDIS] Dropping corrupt entry {key}: {e}")
        try:
            await client.delete(key)
        except Exception as delete_error:
            logger.warning(f"[REDIS] Could not delete {key}: {delete_error}")
        raise QuoteStoreError(f"Corrupt cache entry {key}: {e}") from e


async def set_json(client: redis.Redis, key: str, value: Any, ttl_seconds: int) -> None:
    try:
        await client.setex(key, ttl_seconds, json.dumps(value))
    except Exception as e:
        raise QuoteStoreError(f"Redis store failed: {e}") from e
