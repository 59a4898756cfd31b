"""
Base Carrier Interface

- Every carrier implements get_quote(weight, destination)
- Calls may be slow, may raise, or may hang; callers bound them with a deadline
- Carriers can share pricing helpers (see pricing.py)

Also holds the carrier-agnostic data classes the quote engine passes around.
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from numbers import Real
from typing import Optional

from shipquote.core.exceptions import ProviderError, QuoteValidationError

MIN_WEIGHT_KG = 0.1
MAX_WEIGHT_KG = 1000.0
MAX_PICKUP_DAYS_AHEAD = 30


# =============================================================================
# Carrier-Agnostic Data Classes
# =============================================================================

@dataclass(frozen=True)
class QuoteRequest:
    """
    Validated quote request.

    Construction fails with QuoteValidationError naming the offending field;
    values are never clamped. Strings are stored trimmed.
    """
    origin: str
    destination: str
    weight: float  # kilograms
    pickup_date: date
    fragile: bool = False

    def __post_init__(self):
        object.__setattr__(self, "origin", _required_text(self.origin, "origin"))
        object.__setattr__(self, "destination", _required_text(self.destination, "destination"))
        object.__setattr__(self, "weight", _valid_weight(self.weight))
        object.__setattr__(self, "pickup_date", _valid_pickup_date(self.pickup_date))

        if self.fragile is None:
            object.__setattr__(self, "fragile", False)
        elif not isinstance(self.fragile, bool):
            raise QuoteValidationError("fragile must be true or false", "fragile", self.fragile)


@dataclass
class Quote:
    """
    Priced offer from one carrier.

    Only the badge flags change after construction; price adjustments
    produce a new Quote via with_price().
    """
    provider_id: str
    provider_name: str
    price: float
    currency: str
    min_days: int
    max_days: int
    transport_mode: str
    is_cheapest: bool = False
    is_fastest: bool = False

    def __post_init__(self):
        if not self.provider_id or not str(self.provider_id).strip():
            raise ValueError("provider_id is required")
        if not self.provider_name or not str(self.provider_name).strip():
            raise ValueError("provider_name is required")
        if self.price is None or not math.isfinite(self.price) or self.price <= 0:
            raise ValueError("price must be a positive finite number")
        if self.min_days < 0:
            raise ValueError("min_days must not be negative")
        if self.max_days < self.min_days:
            raise ValueError("max_days must be greater than or equal to min_days")

    @property
    def estimated_days(self) -> int:
        """Midpoint of the delivery window, rounded half up."""
        return int(math.floor((self.min_days + self.max_days) / 2 + 0.5))

    def with_price(self, price: float) -> "Quote":
        return replace(self, price=price)

    def to_dict(self) -> dict:
        return {
            "provider_id": self.provider_id,
            "provider_name": self.provider_name,
            "price": self.price,
            "currency": self.currency,
            "min_days": self.min_days,
            "max_days": self.max_days,
            "transport_mode": self.transport_mode,
            "is_cheapest": self.is_cheapest,
            "is_fastest": self.is_fastest,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Quote":
        return cls(
            provider_id=data["provider_id"],
            provider_name=data["provider_name"],
            price=float(data["price"]),
            currency=data["currency"],
            min_days=int(data["min_days"]),
            max_days=int(data["max_days"]),
            transport_mode=data["transport_mode"],
            is_cheapest=bool(data.get("is_cheapest", False)),
            is_fastest=bool(data.get("is_fastest", False)),
        )


def _required_text(value, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuoteValidationError(f"{field_name} is required", field_name, value)
    return value.strip()


def _valid_weight(value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise QuoteValidationError("weight must be a valid number", "weight", value)
    weight = float(value)
    if math.isnan(weight) or math.isinf(weight):
        raise QuoteValidationError("weight must be a valid number", "weight", value)
    if weight < MIN_WEIGHT_KG:
        raise QuoteValidationError(f"weight must be at least {MIN_WEIGHT_KG} kg", "weight", value)
    if weight > MAX_WEIGHT_KG:
        raise QuoteValidationError(f"weight must not exceed {MAX_WEIGHT_KG:g} kg", "weight", value)
    return weight


def _valid_pickup_date(value) -> date:
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        raise QuoteValidationError("pickup_date must be a valid date", "pickup_date", value)

    today = date.today()
    if value < today:
        raise QuoteValidationError("pickup_date cannot be in the past", "pickup_date", value)
    if value > today + timedelta(days=MAX_PICKUP_DAYS_AHEAD):
        raise QuoteValidationError(
            f"pickup_date cannot be more than {MAX_PICKUP_DAYS_AHEAD} days ahead",
            "pickup_date",
            value,
        )
    return value


# =============================================================================
# Base Carrier Interface
# =============================================================================

class BaseCarrier(ABC):
    """
    Abstract base class for all shipping carriers.

    A carrier is a black-box pricing capability: given a weight and a
    destination it returns a Quote or raises.
    """

    @property
    @abstractmethod
    def carrier_code(self) -> str:
        """Return the registry code for this carrier."""
        pass

    @property
    @abstractmethod
    def carrier_name(self) -> str:
        """Return the human-readable carrier name."""
        pass

    @abstractmethod
    async def get_quote(self, weight: float, destination: str) -> Quote:
        """
        Price a shipment.

        Args:
            weight: Weight in kilograms
            destination: Destination city or address

        Returns:
            Quote for this carrier's service

        Raises:
            ProviderError if the request cannot be priced
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.carrier_code!r})"

    def validate_shipping_request(self, weight: float, destination: Optional[str]) -> None:
        """Shared sanity checks every carrier applies before pricing."""
        if weight < MIN_WEIGHT_KG:
            raise ProviderError(
                f"Weight must be at least {MIN_WEIGHT_KG} kg", provider=self.carrier_name
            )
        if weight > MAX_WEIGHT_KG:
            raise ProviderError(
                f"Weight must be less than or equal to {MAX_WEIGHT_KG:g} kg",
                provider=self.carrier_name,
            )
        if not destination or not destination.strip():
            raise ProviderError("Destination is required", provider=self.carrier_name)


@dataclass(frozen=True)
class ProviderRegistration:
    """
    A carrier plus the label it is reported under.

    The label is fixed when providers are configured and is used in
    unavailability messages and health statuses.
    """
    name: str
    carrier: BaseCarrier

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Provider registrations need a non-empty name")
