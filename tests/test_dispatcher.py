"""
Tests for timeout-bounded dispatch.
"""
import asyncio
import time

import pytest

from shipquote.core.exceptions import ProviderError, ProviderTimeoutError
from shipquote.services.dispatcher import dispatch_with_timeout


@pytest.mark.asyncio
async def test_success_returns_value():
    async def call():
        return 42

    outcome = await dispatch_with_timeout(call, timeout_ms=1000, label="A")

    assert outcome.ok is True
    assert outcome.value == 42
    assert outcome.error is None
    assert outcome.reason == ""
    assert outcome.elapsed_ms >= 0


@pytest.mark.asyncio
async def test_async_failure_is_captured():
    async def call():
        raise ProviderError("carrier down", provider="A")

    outcome = await dispatch_with_timeout(call, timeout_ms=1000, label="A")

    assert outcome.ok is False
    assert isinstance(outcome.error, ProviderError)
    assert outcome.reason == "carrier down"


@pytest.mark.asyncio
async def test_synchronous_raise_is_captured():
    def call():
        raise ValueError("bad input")

    outcome = await dispatch_with_timeout(call, timeout_ms=1000)

    assert outcome.ok is False
    assert isinstance(outcome.error, ValueError)


@pytest.mark.asyncio
async def test_empty_error_message_falls_back_to_class_name():
    async def call():
        raise RuntimeError()

    outcome = await dispatch_with_timeout(call, timeout_ms=1000)

    assert outcome.reason == "RuntimeError"


@pytest.mark.asyncio
async def test_hung_call_times_out_at_deadline():
    async def call():
        await asyncio.sleep(10)

    start = time.monotonic()
    outcome = await dispatch_with_timeout(call, timeout_ms=50, label="Slow")
    elapsed = time.monotonic() - start

    assert outcome.ok is False
    assert isinstance(outcome.error, ProviderTimeoutError)
    assert outcome.error.timeout_ms == 50
    assert outcome.error.provider == "Slow"
    assert outcome.reason == "Operation timed out after 50ms"
    assert elapsed < 1.0


@pytest.mark.asyncio
async def test_call_invoked_once():
    calls = []

    async def call():
        calls.append(1)
        raise ProviderError("nope")

    await dispatch_with_timeout(call, timeout_ms=1000)

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_slow_cleanup_does_not_hold_the_caller():
    cleaned_up = asyncio.Event()

    async def call():
        try:
            await asyncio.sleep(10)
        finally:
            # e.g. closing an HTTP connection on cancel
            await asyncio.sleep(0.3)
            cleaned_up.set()

    start = time.monotonic()
    outcome = await dispatch_with_timeout(call, timeout_ms=50, label="Slow")
    elapsed = time.monotonic() - start

    assert isinstance(outcome.error, ProviderTimeoutError)
    assert elapsed < 0.25
    assert not cleaned_up.is_set()

    # The abandoned call still finishes its cleanup in the background
    await asyncio.wait_for(cleaned_up.wait(), timeout=1.0)


@pytest.mark.asyncio
async def test_provider_timeout_error_is_not_the_deadline():
    async def call():
        raise TimeoutError("socket read timed out")

    outcome = await dispatch_with_timeout(call, timeout_ms=5000, label="A")

    assert outcome.ok is False
    assert not isinstance(outcome.error, ProviderTimeoutError)
    assert outcome.reason == "socket read timed out"
    assert outcome.elapsed_ms < 1000


@pytest.mark.asyncio
async def test_caller_cancellation_cancels_the_call():
    started = asyncio.Event()
    cancelled = asyncio.Event()

    async def call():
        started.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    outer = asyncio.ensure_future(dispatch_with_timeout(call, timeout_ms=5000))
    await started.wait()
    outer.cancel()

    with pytest.raises(asyncio.CancelledError):
        await outer
    await asyncio.wait_for(cancelled.wait(), timeout=1.0)
