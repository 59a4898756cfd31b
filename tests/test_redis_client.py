"""
Tests for the Redis connection helper and its JSON value helpers.
"""
import time
from unittest.mock import AsyncMock, MagicMock

import pytest

from shipquote.core import redis_client
from shipquote.core.exceptions import QuoteStoreError


@pytest.fixture
def fresh_client_state(monkeypatch):
    monkeypatch.setattr(redis_client, "_redis_client", None)
    monkeypatch.setattr(redis_client, "_last_failure", None)
    monkeypatch.setattr(redis_client.settings, "REDIS_URL", "redis://cache:6379/0")


@pytest.fixture
def from_url(monkeypatch):
    client = MagicMock()
    client.ping = AsyncMock(return_value=True)
    client.close = AsyncMock()
    factory = MagicMock(return_value=client)
    monkeypatch.setattr(redis_client.redis, "from_url", factory)
    return factory


def test_quote_key():
    assert redis_client.quote_key("abc") == "quotes:fp:abc"
    assert redis_client.quote_key("abc", prefix="t:") == "t:abc"


@pytest.mark.asyncio
async def test_no_url_means_no_client(monkeypatch, from_url):
    monkeypatch.setattr(redis_client.settings, "REDIS_URL", "")

    assert await redis_client.get_redis() is None
    from_url.assert_not_called()


@pytest.mark.asyncio
async def test_client_is_shared(fresh_client_state, from_url):
    first = await redis_client.get_redis()
    second = await redis_client.get_redis()

    assert first is second is from_url.return_value
    from_url.assert_called_once()


@pytest.mark.asyncio
async def test_failed_connect_backs_off(fresh_client_state, from_url):
    from_url.return_value.ping.side_effect = ConnectionError("refused")

    assert await redis_client.get_redis() is None
    assert await redis_client.get_redis() is None

    # One attempt per backoff window
    from_url.assert_called_once()


@pytest.mark.asyncio
async def test_reconnects_after_backoff(fresh_client_state, from_url):
    from_url.return_value.ping.side_effect = [ConnectionError("refused"), True]
    assert await redis_client.get_redis() is None

    redis_client._last_failure = time.monotonic() - redis_client.RECONNECT_BACKOFF_SECONDS - 1

    assert await redis_client.get_redis() is from_url.return_value
    assert redis_client._last_failure is None


@pytest.mark.asyncio
async def test_close_resets_client(fresh_client_state, from_url):
    client = await redis_client.get_redis()

    await redis_client.close_redis()

    client.close.assert_awaited_once()
    assert redis_client._redis_client is None


class TestJsonValues:

    @pytest.fixture
    def client(self):
        client = AsyncMock()
        client.get = AsyncMock(return_value=None)
        return client

    @pytest.mark.asyncio
    async def test_missing_key(self, client):
        assert await redis_client.get_json(client, "k") is None

    @pytest.mark.asyncio
    async def test_decode_applied(self, client):
        client.get.return_value = "[1, 2]"

        assert await redis_client.get_json(client, "k", decode=sum) == 3

    @pytest.mark.asyncio
    async def test_invalid_json_is_deleted(self, client):
        client.get.return_value = "{not json"

        with pytest.raises(QuoteStoreError):
            await redis_client.get_json(client, "k")
        client.delete.assert_awaited_once_with("k")

    @pytest.mark.asyncio
    async def test_rejected_by_decoder_is_deleted(self, client):
        client.get.return_value = '{"unexpected": true}'

        def decode(data):
            return data["quotes"]

        with pytest.raises(QuoteStoreError):
            await redis_client.get_json(client, "k", decode=decode)
        client.delete.assert_awaited_once_with("k")

    @pytest.mark.asyncio
    async def test_command_failures_become_store_errors(self, client):
        client.get.side_effect = ConnectionError("reset")
        client.setex = AsyncMock(side_effect=ConnectionError("reset"))

        with pytest.raises(QuoteStoreError):
            await redis_client.get_json(client, "k")
        with pytest.raises(QuoteStoreError):
            await redis_client.set_json(client, "k", [1], ttl_seconds=10)
