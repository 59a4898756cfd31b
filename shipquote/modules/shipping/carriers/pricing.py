"""
Shared pricing helpers for carrier implementations.

Price = base price + (weight cost x zone multiplier), where the weight cost
comes from a tiered per-kg rate table. The tables are illustrative; carriers
are treated as black boxes by the quote engine.
"""
from dataclasses import dataclass
from typing import Dict, List

from shipquote.modules.shipping.routing import normalize_place


@dataclass(frozen=True)
class WeightTier:
    """Per-kg rate for weights in [min_weight, max_weight)."""
    min_weight: float
    max_weight: float
    rate_per_kg: float


FEDEX_TIERS: List[WeightTier] = [
    WeightTier(0, 5, 8000),
    WeightTier(5, 20, 6500),
    WeightTier(20, 50, 5500),
    WeightTier(50, float("inf"), 4800),
]

DHL_TIERS: List[WeightTier] = [
    WeightTier(0, 5, 7500),
    WeightTier(5, 20, 6000),
    WeightTier(20, 50, 5000),
    WeightTier(50, float("inf"), 4500),
]

LOCAL_TIERS: List[WeightTier] = [
    WeightTier(0, 5, 5000),
    WeightTier(5, 20, 4500),
    WeightTier(20, 50, 4000),
    WeightTier(50, float("inf"), 3500),
]

# Destination -> zone (1 = metro, 5 = remote)
DESTINATION_ZONES: Dict[str, int] = {
    "bogota": 1,
    "medellin": 2,
    "cali": 3,
    "barranquilla": 4,
    "cartagena": 4,
    "bucaramanga": 3,
    "pereira": 3,
    "leticia": 5,
}
DEFAULT_ZONE = 3

ZONE_MULTIPLIERS: Dict[str, Dict[int, float]] = {
    "FEDEX": {1: 1.0, 2: 1.1, 3: 1.2, 4: 1.3, 5: 1.6},
    "DHL": {1: 1.0, 2: 1.1, 3: 1.2, 4: 1.3, 5: 1.5},
    "LOCAL": {1: 1.0, 2: 1.0, 3: 1.0, 4: 1.0, 5: 1.0},
}


def zone_for_destination(destination: str) -> int:
    normalized = normalize_place(destination)
    for city, zone in DESTINATION_ZONES.items():
        if city in normalized:
            return zone
    return DEFAULT_ZONE


def zone_multiplier(carrier_code: str, zone: int) -> float:
    return ZONE_MULTIPLIERS.get(carrier_code, {}).get(zone, 1.0)


def rate_for_weight(weight: float, tiers: List[WeightTier]) -> float:
    if weight <= 0:
        raise ValueError("Weight must be greater than 0")
    for tier in tiers:
        if tier.min_weight <= weight < tier.max_weight:
            return tier.rate_per_kg
    # Above every tier
    return tiers[-1].rate_per_kg


def weight_cost(weight: float, tiers: List[WeightTier]) -> float:
    return weight * rate_for_weight(weight, tiers)
