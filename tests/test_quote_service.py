"""
Tests for the cache-aside quote flow.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from shipquote.core.exceptions import ProviderError, QuoteStoreError
from shipquote.services.quote_cache import InMemoryQuoteStore, quote_fingerprint
from shipquote.services.quote_orchestrator import QuoteOrchestrator
from shipquote.services.quote_service import QuoteService


@pytest.fixture
def carriers(stub_carrier):
    return [
        stub_carrier(price=85, min_days=3, max_days=4, provider_id="a"),
        stub_carrier(price=90, min_days=2, max_days=3, provider_id="b"),
    ]


@pytest.fixture
def orchestrator(carriers, registration):
    return QuoteOrchestrator([registration("A", carriers[0]), registration("B", carriers[1])])


class TestQuoteService:

    @pytest.mark.asyncio
    async def test_miss_fetches_badges_and_stores(self, orchestrator, quote_request):
        store = InMemoryQuoteStore()
        service = QuoteService(orchestrator, store=store)

        result = await service.request_quotes(quote_request)

        assert [q.provider_id for q in result.quotes] == ["a", "b"]
        assert result.quotes[0].is_cheapest is True
        assert result.quotes[1].is_fastest is True

        cached = await store.lookup(quote_fingerprint(quote_request))
        assert [(q.provider_id, q.is_cheapest, q.is_fastest) for q in cached] == [
            ("a", True, False),
            ("b", False, True),
        ]

    @pytest.mark.asyncio
    async def test_hit_skips_providers(self, orchestrator, carriers, quote_request):
        service = QuoteService(orchestrator, store=InMemoryQuoteStore())

        await service.request_quotes(quote_request)
        second = await service.request_quotes(quote_request)

        assert [q.provider_id for q in second.quotes] == ["a", "b"]
        assert second.messages == []
        assert all(len(c.calls) == 1 for c in carriers)

    @pytest.mark.asyncio
    async def test_hit_returns_no_messages(self, stub_carrier, registration, quote_request):
        orchestrator = QuoteOrchestrator([
            registration("A", stub_carrier(provider_id="a")),
            registration("B", stub_carrier(error=ProviderError("down"))),
        ])
        service = QuoteService(orchestrator, store=InMemoryQuoteStore())

        first = await service.request_quotes(quote_request)
        second = await service.request_quotes(quote_request)

        assert len(first.messages) == 1
        assert second.messages == []
        assert [q.provider_id for q in second.quotes] == ["a"]

    @pytest.mark.asyncio
    async def test_lookup_failure_is_treated_as_miss(self, orchestrator, quote_request):
        store = MagicMock()
        store.lookup = AsyncMock(side_effect=QuoteStoreError("redis down"))
        store.store = AsyncMock()
        service = QuoteService(orchestrator, store=store)

        result = await service.request_quotes(quote_request)

        assert len(result.quotes) == 2
        store.store.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_persist_failure_does_not_affect_response(self, orchestrator, quote_request):
        store = MagicMock()
        store.lookup = AsyncMock(return_value=None)
        store.store = AsyncMock(side_effect=RuntimeError("disk full"))
        service = QuoteService(orchestrator, store=store)

        result = await service.request_quotes(quote_request)

        assert [q.provider_id for q in result.quotes] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_empty_result_is_not_stored(self, stub_carrier, registration, quote_request):
        orchestrator = QuoteOrchestrator([registration("A", stub_carrier(error=ProviderError("down")))])
        store = MagicMock()
        store.lookup = AsyncMock(return_value=None)
        store.store = AsyncMock()
        service = QuoteService(orchestrator, store=store)

        result = await service.request_quotes(quote_request)

        assert result.quotes == []
        assert len(result.messages) == 1
        store.store.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_store_always_fans_out(self, orchestrator, carriers, quote_request):
        service = QuoteService(orchestrator)

        await service.request_quotes(quote_request)
        await service.request_quotes(quote_request)

        assert all(len(c.calls) == 2 for c in carriers)

    @pytest.mark.asyncio
    async def test_fragile_requests_cached_separately(self, orchestrator, quote_request):
        from dataclasses import replace

        service = QuoteService(orchestrator, store=InMemoryQuoteStore())

        plain = await service.request_quotes(quote_request)
        fragile = await service.request_quotes(replace(quote_request, fragile=True))

        assert fragile.quotes[0].price == pytest.approx(plain.quotes[0].price * 1.15)
