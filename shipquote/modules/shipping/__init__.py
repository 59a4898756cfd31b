"""
Shipping Module

- BaseCarrier interface for all carrier implementations
- CarrierFactory and named provider registrations
- Carrier-agnostic QuoteRequest / Quote data classes
"""
from shipquote.modules.shipping.carriers import CarrierFactory, build_default_providers
from shipquote.modules.shipping.carriers.base import (
    BaseCarrier,
    ProviderRegistration,
    Quote,
    QuoteRequest,
)

__all__ = [
    "CarrierFactory",
    "build_default_providers",
    "BaseCarrier",
    "ProviderRegistration",
    "Quote",
    "QuoteRequest",
]
