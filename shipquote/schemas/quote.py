"""
Quote Schemas

Pydantic models for the quote and provider-status API. JSON field names are
camelCase; Python attribute names stay snake_case.
"""
from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator

from shipquote.modules.shipping.carriers.base import Quote, QuoteRequest
from shipquote.services.provider_health import ProviderStatus, SystemStatus
from shipquote.services.quote_orchestrator import ProviderMessage


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ==================== Request Schemas ====================


class QuoteRequestIn(CamelModel):
    """
    Quote request body.

    Only types are checked here; ranges and required fields are enforced by
    QuoteRequest so every rule lives in one place.
    """
    origin: Optional[str] = None
    destination: Optional[str] = None
    weight: Optional[Union[StrictInt, StrictFloat]] = None
    pickup_date: Optional[date] = Field(default=None, alias="pickupDate")
    fragile: Optional[bool] = False

    @field_validator("pickup_date", mode="before")
    @classmethod
    def accept_iso_datetime(cls, v):
        # "2026-10-20T00:00:00.000Z" from browser clients
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v

    def to_domain(self) -> QuoteRequest:
        return QuoteRequest(
            origin=self.origin,
            destination=self.destination,
            weight=self.weight,
            pickup_date=self.pickup_date,
            fragile=self.fragile,
        )

    @classmethod
    def body_field_name(cls, field: str) -> str:
        """JSON key for a QuoteRequest field, e.g. pickup_date -> pickupDate."""
        info = cls.model_fields.get(field)
        if info is None or info.alias is None:
            return field
        return info.alias


# ==================== Response Schemas ====================


class QuoteOut(CamelModel):
    provider_id: str = Field(alias="providerId")
    provider_name: str = Field(alias="providerName")
    price: float
    currency: str
    min_days: int = Field(alias="minDays")
    max_days: int = Field(alias="maxDays")
    estimated_days: int = Field(alias="estimatedDays")
    transport_mode: str = Field(alias="transportMode")
    is_cheapest: bool = Field(default=False, alias="isCheapest")
    is_fastest: bool = Field(default=False, alias="isFastest")

    @classmethod
    def from_quote(cls, quote: Quote) -> "QuoteOut":
        return cls(
            provider_id=quote.provider_id,
            provider_name=quote.provider_name,
            price=quote.price,
            currency=quote.currency,
            min_days=quote.min_days,
            max_days=quote.max_days,
            estimated_days=quote.estimated_days,
            transport_mode=quote.transport_mode,
            is_cheapest=quote.is_cheapest,
            is_fastest=quote.is_fastest,
        )


class ProviderMessageOut(CamelModel):
    provider: str
    message: str
    error: Optional[str] = None

    @classmethod
    def from_message(cls, message: ProviderMessage) -> "ProviderMessageOut":
        return cls(provider=message.provider, message=message.message, error=message.error)


class QuoteListResponse(CamelModel):
    quotes: List[QuoteOut]
    messages: Optional[List[ProviderMessageOut]] = None


class NoProvidersResponse(CamelModel):
    error: str
    retry_after: int = Field(alias="retryAfter")
    messages: List[ProviderMessageOut] = Field(default_factory=list)


class ValidationErrorResponse(CamelModel):
    error: str
    field: Optional[str] = None
    value: Optional[Union[str, int, float, bool]] = None


class ProviderStatusOut(CamelModel):
    provider_name: str = Field(alias="providerName")
    status: str
    response_time: int = Field(alias="responseTime")
    last_check: datetime = Field(alias="lastCheck")

    @classmethod
    def from_status(cls, status: ProviderStatus) -> "ProviderStatusOut":
        return cls(
            provider_name=status.provider_name,
            status=status.status,
            response_time=status.response_time_ms,
            last_check=status.last_check,
        )


class SystemStatusOut(CamelModel):
    status: str
    active_count: int = Field(alias="activeCount")
    total_count: int = Field(alias="totalCount")
    providers: List[ProviderStatusOut]

    @classmethod
    def from_status(cls, status: SystemStatus) -> "SystemStatusOut":
        return cls(
            status=status.status.value,
            active_count=status.active_count,
            total_count=status.total_count,
            providers=[ProviderStatusOut.from_status(p) for p in status.providers],
        )
