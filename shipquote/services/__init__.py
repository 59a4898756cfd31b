from shipquote.services.badge_service import BadgeService, assign_badges
from shipquote.services.dispatcher import DispatchOutcome, dispatch_with_timeout
from shipquote.services.provider_health import (
    ProviderHealthService,
    ProviderStatus,
    SystemState,
    SystemStatus,
)
from shipquote.services.quote_cache import (
    DatabaseQuoteStore,
    InMemoryQuoteStore,
    RedisQuoteStore,
    build_quote_store,
    quote_fingerprint,
)
from shipquote.services.quote_orchestrator import ProviderMessage, QuoteAggregation, QuoteOrchestrator
from shipquote.services.quote_service import QuoteService
