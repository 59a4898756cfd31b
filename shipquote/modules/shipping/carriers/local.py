"""
Local Courier carrier - cheapest ground option, same price in every zone.
"""
from shipquote.modules.shipping.carriers import register_carrier
from shipquote.modules.shipping.carriers.base import BaseCarrier, Quote
from shipquote.modules.shipping.carriers.pricing import (
    LOCAL_TIERS,
    weight_cost,
    zone_for_destination,
    zone_multiplier,
)


@register_carrier("LOCAL")
class LocalCarrier(BaseCarrier):
    BASE_PRICE = 5000.0
    MIN_DELIVERY_DAYS = 7
    MAX_DELIVERY_DAYS = 7

    @property
    def carrier_code(self) -> str:
        return "LOCAL"

    @property
    def carrier_name(self) -> str:
        return "Local"

    async def get_quote(self, weight: float, destination: str) -> Quote:
        self.validate_shipping_request(weight, destination)

        zone = zone_for_destination(destination)
        price = self.BASE_PRICE + weight_cost(weight, LOCAL_TIERS) * zone_multiplier(self.carrier_code, zone)

        return Quote(
            provider_id="local-courier",
            provider_name="Local Courier",
            price=price,
            currency="COP",
            min_days=self.MIN_DELIVERY_DAYS,
            max_days=self.MAX_DELIVERY_DAYS,
            transport_mode="Truck",
        )
