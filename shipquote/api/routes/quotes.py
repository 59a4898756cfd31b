"""
Quote API Routes

POST /quotes: quotes from every available carrier, cheapest and fastest
flagged. Returns 503 with a retry hint when no carrier could answer.
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from shipquote.api.deps import get_quote_service
from shipquote.core.config import settings
from shipquote.core.exceptions import QuoteValidationError
from shipquote.schemas.quote import (
    NoProvidersResponse,
    ProviderMessageOut,
    QuoteListResponse,
    QuoteOut,
    QuoteRequestIn,
    ValidationErrorResponse,
)
from shipquote.services.quote_service import QuoteService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Quotes"])

NO_PROVIDERS_ERROR = "Service unavailable. No providers are currently available. Please try again later."


@router.post(
    "/quotes",
    response_model=QuoteListResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ValidationErrorResponse},
        503: {"model": NoProvidersResponse},
    },
)
async def request_quotes(
    payload: QuoteRequestIn,
    quote_service: QuoteService = Depends(get_quote_service),
):
    """
    Get shipping quotes for a package.

    Providers that fail or time out are listed in `messages`; the response
    is still 200 as long as one provider answered.
    """
    try:
        quote_request = payload.to_domain()
    except QuoteValidationError as e:
        logger.info(f"[QUOTES] Rejected request: {e.message}")
        body = ValidationErrorResponse(
            error=e.message,
            field=QuoteRequestIn.body_field_name(e.field),
            value=e.details.get("value"),
        )
        return JSONResponse(status_code=400, content=body.model_dump(by_alias=True, exclude_none=True))

    result = await quote_service.request_quotes(quote_request)
    messages = [ProviderMessageOut.from_message(m) for m in result.messages]

    if not result.quotes:
        retry_after = settings.NO_PROVIDERS_RETRY_AFTER_SECONDS
        body = NoProvidersResponse(error=NO_PROVIDERS_ERROR, retry_after=retry_after, messages=messages)
        return JSONResponse(
            status_code=503,
            content=body.model_dump(by_alias=True, exclude_none=True),
            headers={"Retry-After": str(retry_after)},
        )

    return QuoteListResponse(
        quotes=[QuoteOut.from_quote(q) for q in result.quotes],
        messages=messages or None,
    )
