"""
ShipQuote Exception Hierarchy

Structured exception classes for the quote engine.
All exceptions include code, message, and details for logging and API responses.

Exception Hierarchy:
    ShipQuoteError
    ├── QuoteValidationError
    ├── ProviderError
    │   └── ProviderTimeoutError
    └── QuoteStoreError

Only QuoteValidationError is allowed to escape the quote engine. Provider and
store failures are captured and turned into data (messages, empty results,
offline statuses).
"""
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ShipQuoteError(Exception):
    """
    Base exception for all ShipQuote errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
        severity: P0-P3 severity level
    """

    default_code: str = "SHIPQUOTE_ERROR"
    default_severity: str = "P2"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# VALIDATION ERRORS
# =============================================================================

class QuoteValidationError(ShipQuoteError):
    """
    Malformed quote request.

    Names the offending field and the rejected value. Raised before any
    provider is contacted and never retried.
    """

    default_code = "QUOTE_VALIDATION_ERROR"
    default_severity = "P3"

    def __init__(self, message: str, field: str, value: Any = None):
        self.field = field
        self.value = value
        super().__init__(
            message,
            details={"field": field, "value": _printable(value)},
        )


# =============================================================================
# PROVIDER ERRORS
# =============================================================================

class ProviderError(ShipQuoteError):
    """A single carrier failed to produce a quote."""

    default_code = "PROVIDER_ERROR"
    default_severity = "P2"

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.provider = provider
        merged = dict(details or {})
        if provider:
            merged.setdefault("provider", provider)
        super().__init__(message, code=code, details=merged)


class ProviderTimeoutError(ProviderError):
    """A carrier did not answer before its deadline."""

    default_code = "PROVIDER_TIMEOUT"

    def __init__(self, timeout_ms: int, provider: Optional[str] = None):
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Operation timed out after {timeout_ms}ms",
            provider=provider,
            details={"timeout_ms": timeout_ms},
        )


# =============================================================================
# STORE ERRORS
# =============================================================================

class QuoteStoreError(ShipQuoteError):
    """The quote cache or its backing store could not be reached."""

    default_code = "QUOTE_STORE_ERROR"
    default_severity = "P3"


def _printable(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)
