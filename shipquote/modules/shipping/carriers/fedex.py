"""
FedEx Ground carrier.

Tiered weight pricing with zone multipliers. When a RouteCalculator is
configured, the price is also scaled by the distance from the dispatch hub.
"""
import logging
from typing import Optional

from shipquote.modules.shipping.carriers import register_carrier
from shipquote.modules.shipping.carriers.base import BaseCarrier, Quote
from shipquote.modules.shipping.carriers.pricing import (
    FEDEX_TIERS,
    weight_cost,
    zone_for_destination,
    zone_multiplier,
)
from shipquote.modules.shipping.routing import RouteCalculator, distance_category, distance_factor

logger = logging.getLogger(__name__)


@register_carrier("FEDEX")
class FedExCarrier(BaseCarrier):
    BASE_PRICE = 10000.0
    MIN_DELIVERY_DAYS = 3
    MAX_DELIVERY_DAYS = 4

    def __init__(
        self,
        route_calculator: Optional[RouteCalculator] = None,
        hub_city: str = "Bogota",
    ):
        self._route_calculator = route_calculator
        self._hub_city = hub_city

    @property
    def carrier_code(self) -> str:
        return "FEDEX"

    @property
    def carrier_name(self) -> str:
        return "FedEx"

    async def get_quote(self, weight: float, destination: str) -> Quote:
        self.validate_shipping_request(weight, destination)

        zone = zone_for_destination(destination)
        price = self.BASE_PRICE + weight_cost(weight, FEDEX_TIERS) * zone_multiplier(self.carrier_code, zone)
        price *= await self._distance_factor(destination)

        return Quote(
            provider_id="fedex-ground",
            provider_name="FedEx Ground",
            price=price,
            currency="COP",
            min_days=self.MIN_DELIVERY_DAYS,
            max_days=self.MAX_DELIVERY_DAYS,
            transport_mode="Truck",
        )

    async def _distance_factor(self, destination: str) -> float:
        if self._route_calculator is None:
            return 1.0
        try:
            distance_km = await self._route_calculator.get_distance_km(self._hub_city, destination)
        except LookupError:
            # Unknown route: price by zone only
            logger.debug(f"[FEDEX] No route from {self._hub_city} to {destination}, using zone pricing")
            return 1.0

        factor = distance_factor(distance_km)
        logger.debug(
            f"[FEDEX] {self._hub_city} -> {destination}: {distance_km:.0f} km "
            f"({distance_category(distance_km)}), factor {factor}"
        )
        return factor
