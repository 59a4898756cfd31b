"""
API dependencies

Composition root: the only place that reads settings to build the carrier
list and the services shared by every request. Tests override these with
app.dependency_overrides.
"""
from typing import List, Optional

from shipquote.core.config import settings
from shipquote.modules.shipping import build_default_providers
from shipquote.modules.shipping.carriers.base import ProviderRegistration
from shipquote.modules.shipping.routing import StaticRouteCalculator
from shipquote.services.badge_service import BadgeService
from shipquote.services.provider_health import ProviderHealthService
from shipquote.services.quote_cache import build_quote_store
from shipquote.services.quote_orchestrator import QuoteOrchestrator
from shipquote.services.quote_service import QuoteService

# Singletons
_providers: Optional[List[ProviderRegistration]] = None
_quote_service: Optional[QuoteService] = None
_health_service: Optional[ProviderHealthService] = None


def get_providers() -> List[ProviderRegistration]:
    global _providers
    if _providers is None:
        route_calculator = StaticRouteCalculator() if settings.ROUTE_PRICING_ENABLED else None
        _providers = build_default_providers(
            route_calculator=route_calculator,
            hub_city=settings.ROUTE_HUB_CITY,
        )
    return _providers


def get_quote_service() -> QuoteService:
    global _quote_service
    if _quote_service is None:
        orchestrator = QuoteOrchestrator(
            get_providers(),
            timeout_ms=settings.QUOTE_TIMEOUT_MS,
            fragile_surcharge=settings.FRAGILE_SURCHARGE,
        )
        _quote_service = QuoteService(
            orchestrator,
            store=build_quote_store(settings),
            badge_service=BadgeService(),
        )
    return _quote_service


def get_health_service() -> ProviderHealthService:
    global _health_service
    if _health_service is None:
        _health_service = ProviderHealthService(
            get_providers(),
            timeout_ms=settings.HEALTH_PROBE_TIMEOUT_MS,
            min_response_ms=settings.HEALTH_MIN_RESPONSE_MS,
        )
    return _health_service
