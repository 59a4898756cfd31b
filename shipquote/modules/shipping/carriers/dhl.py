"""
DHL Express carrier - air freight, flat five-day delivery window.
"""
from shipquote.modules.shipping.carriers import register_carrier
from shipquote.modules.shipping.carriers.base import BaseCarrier, Quote
from shipquote.modules.shipping.carriers.pricing import (
    DHL_TIERS,
    weight_cost,
    zone_for_destination,
    zone_multiplier,
)


@register_carrier("DHL")
class DHLCarrier(BaseCarrier):
    BASE_PRICE = 8000.0
    MIN_DELIVERY_DAYS = 5
    MAX_DELIVERY_DAYS = 5

    @property
    def carrier_code(self) -> str:
        return "DHL"

    @property
    def carrier_name(self) -> str:
        return "DHL"

    async def get_quote(self, weight: float, destination: str) -> Quote:
        self.validate_shipping_request(weight, destination)

        zone = zone_for_destination(destination)
        price = self.BASE_PRICE + weight_cost(weight, DHL_TIERS) * zone_multiplier(self.carrier_code, zone)

        return Quote(
            provider_id="dhl-express",
            provider_name="DHL Express",
            price=price,
            currency="COP",
            min_days=self.MIN_DELIVERY_DAYS,
            max_days=self.MAX_DELIVERY_DAYS,
            transport_mode="Air",
        )
