"""
Pytest configuration and fixtures for ShipQuote tests.
"""
import asyncio
import os
from datetime import date, timedelta
from typing import Optional

import pytest

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["QUOTE_CACHE_BACKEND"] = "memory"
os.environ["REDIS_URL"] = ""
os.environ["DATABASE_URL"] = ""
os.environ["HEALTH_CHECK_ENABLED"] = "false"

from shipquote.modules.shipping.carriers.base import (  # noqa: E402
    BaseCarrier,
    ProviderRegistration,
    Quote,
    QuoteRequest,
)


class StubCarrier(BaseCarrier):
    """Carrier with scripted behaviour: a fixed quote, an error, or a delay."""

    def __init__(
        self,
        price: float = 100.0,
        min_days: int = 3,
        max_days: int = 4,
        provider_id: str = "stub",
        delay: float = 0.0,
        error: Optional[Exception] = None,
        cleanup_delay: float = 0.0,
    ):
        self.price = price
        self.min_days = min_days
        self.max_days = max_days
        self.provider_id = provider_id
        self.delay = delay
        self.error = error
        self.cleanup_delay = cleanup_delay
        self.calls = []

    @property
    def carrier_code(self) -> str:
        return "STUB"

    @property
    def carrier_name(self) -> str:
        return "Stub"

    async def get_quote(self, weight: float, destination: str) -> Quote:
        self.calls.append((weight, destination))
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            finally:
                # Runs on cancel too, like closing a connection
                if self.cleanup_delay:
                    await asyncio.sleep(self.cleanup_delay)
        if self.error is not None:
            raise self.error
        return Quote(
            provider_id=self.provider_id,
            provider_name=f"{self.provider_id} service",
            price=self.price,
            currency="COP",
            min_days=self.min_days,
            max_days=self.max_days,
            transport_mode="Truck",
        )


class SyncRaisingCarrier(StubCarrier):
    """get_quote raises before returning an awaitable."""

    def get_quote(self, weight: float, destination: str):  # type: ignore[override]
        raise RuntimeError("exploded synchronously")


@pytest.fixture
def stub_carrier():
    """Factory for StubCarrier instances."""
    return StubCarrier


@pytest.fixture
def registration():
    """Factory for named provider registrations."""
    def _make(name: str, carrier: BaseCarrier) -> ProviderRegistration:
        return ProviderRegistration(name=name, carrier=carrier)
    return _make


@pytest.fixture
def tomorrow() -> date:
    return date.today() + timedelta(days=1)


@pytest.fixture
def quote_request(tomorrow) -> QuoteRequest:
    return QuoteRequest(
        origin="Bogotá",
        destination="Medellín",
        weight=5.0,
        pickup_date=tomorrow,
        fragile=False,
    )


@pytest.fixture
def make_quote():
    def _make(provider_id: str = "p1", price: float = 100.0, min_days: int = 3, max_days: int = 4, **kwargs) -> Quote:
        return Quote(
            provider_id=provider_id,
            provider_name=kwargs.pop("provider_name", f"{provider_id} service"),
            price=price,
            currency=kwargs.pop("currency", "COP"),
            min_days=min_days,
            max_days=max_days,
            transport_mode=kwargs.pop("transport_mode", "Truck"),
            **kwargs,
        )
    return _make


@pytest.fixture
def sync_raising_carrier():
    return SyncRaisingCarrier()
