"""
Carrier Registry and Factory

- register_carrier adds an implementation under a registry code
- CarrierFactory builds carrier instances by code
- build_default_providers returns the named provider list the quote engine runs on
"""
import logging
from typing import Dict, List, Optional, Sequence, Type

from shipquote.modules.shipping.carriers.base import BaseCarrier, ProviderRegistration

logger = logging.getLogger(__name__)

# Registry of carrier implementations
_CARRIER_REGISTRY: Dict[str, Type[BaseCarrier]] = {}

# Display label per carrier code, in default provider order
DEFAULT_PROVIDER_LABELS: Dict[str, str] = {
    "FEDEX": "FedEx",
    "DHL": "DHL",
    "LOCAL": "Local",
}


def register_carrier(carrier_code: str):
    """
    Decorator to register a carrier implementation.

    Usage:
        @register_carrier("FEDEX")
        class FedExCarrier(BaseCarrier):
            ...
    """
    def decorator(cls: Type[BaseCarrier]):
        _CARRIER_REGISTRY[carrier_code] = cls
        logger.debug(f"Registered carrier: {carrier_code} -> {cls.__name__}")
        return cls
    return decorator


class CarrierFactory:
    """Factory for creating carrier instances by registry code."""

    @classmethod
    def get_carrier(cls, carrier_code: str, **options) -> Optional[BaseCarrier]:
        """
        Get a carrier instance.

        Args:
            carrier_code: Registry code (FEDEX, DHL, LOCAL)
            **options: Constructor options for carriers that accept them

        Returns:
            BaseCarrier instance or None if no implementation is registered
        """
        carrier_cls = _CARRIER_REGISTRY.get(carrier_code)
        if not carrier_cls:
            logger.warning(f"No implementation registered for carrier: {carrier_code}")
            return None
        return carrier_cls(**options)

    @classmethod
    def get_registered_carriers(cls) -> List[str]:
        """Get list of all registered carrier codes."""
        return list(_CARRIER_REGISTRY.keys())


def build_default_providers(
    carrier_codes: Optional[Sequence[str]] = None,
    route_calculator=None,
    hub_city: str = "Bogota",
) -> List[ProviderRegistration]:
    """
    Build the named provider list, in configuration order.

    The route calculator, when given, is only handed to carriers that price
    by distance (FedEx).
    """
    codes = list(carrier_codes) if carrier_codes is not None else list(DEFAULT_PROVIDER_LABELS)
    providers: List[ProviderRegistration] = []

    for code in codes:
        options = {}
        if code == "FEDEX" and route_calculator is not None:
            options = {"route_calculator": route_calculator, "hub_city": hub_city}

        carrier = CarrierFactory.get_carrier(code, **options)
        if carrier is None:
            continue

        label = DEFAULT_PROVIDER_LABELS.get(code, carrier.carrier_name)
        providers.append(ProviderRegistration(name=label, carrier=carrier))

    logger.info(f"Configured providers: {', '.join(p.name for p in providers) or 'none'}")
    return providers


# Import carriers to trigger registration
# These imports must be at the bottom to avoid circular imports
from shipquote.modules.shipping.carriers.fedex import FedExCarrier  # noqa: E402, F401
from shipquote.modules.shipping.carriers.dhl import DHLCarrier  # noqa: E402, F401
from shipquote.modules.shipping.carriers.local import LocalCarrier  # noqa: E402, F401
