"""
Timeout-bounded dispatch for a single provider call.

dispatch_with_timeout races one awaitable against a deadline and always
returns a DispatchOutcome; it never raises for provider failures. A call that
misses the deadline is cancelled without waiting for it to unwind, and is
reported as ProviderTimeoutError. Callers treat that like any other provider
error. No retries.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from shipquote.core.exceptions import ProviderError, ProviderTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_MS = 5000


@dataclass(frozen=True)
class DispatchOutcome(Generic[T]):
    """Result of one bounded call: a value on success, an error otherwise."""
    ok: bool
    value: Optional[T] = None
    error: Optional[BaseException] = None
    elapsed_ms: float = 0.0

    @property
    def reason(self) -> str:
        if self.ok:
            return ""
        return str(self.error) or self.error.__class__.__name__


def _retrieve_result(task: asyncio.Task) -> None:
    # Abandoned calls finish on their own; mark their outcome as seen
    if not task.cancelled():
        task.exception()


async def dispatch_with_timeout(
    call: Callable[[], Awaitable[T]],
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    label: Optional[str] = None,
) -> DispatchOutcome[T]:
    """
    Run call() with a hard deadline.

    The call runs in its own task. At the deadline the task is cancelled and
    abandoned: the caller gets its outcome immediately, even if the call is
    still running cleanup code.

    Args:
        call: Zero-argument callable returning an awaitable. Synchronous
            raises inside call() are captured like async failures.
        timeout_ms: Deadline in milliseconds
        label: Provider label for error attribution and logging

    Returns:
        DispatchOutcome with ok=True and the value, or ok=False and the error
    """
    start = time.monotonic()

    async def _invoke() -> Any:
        return await call()

    task = asyncio.ensure_future(_invoke())
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
    except asyncio.CancelledError:
        task.cancel()
        raise
    elapsed_ms = (time.monotonic() - start) * 1000

    if not done:
        task.cancel()
        task.add_done_callback(_retrieve_result)
        logger.warning(f"[DISPATCH] {label or 'provider'} timed out after {timeout_ms}ms")
        return DispatchOutcome(
            ok=False,
            error=ProviderTimeoutError(timeout_ms, provider=label),
            elapsed_ms=elapsed_ms,
        )

    if task.cancelled():
        return DispatchOutcome(
            ok=False,
            error=ProviderError("call was cancelled", provider=label),
            elapsed_ms=elapsed_ms,
        )

    error = task.exception()
    if error is not None:
        if not isinstance(error, ProviderError):
            logger.debug(f"[DISPATCH] {label or 'provider'} raised {error.__class__.__name__}: {error}")
        return DispatchOutcome(ok=False, error=error, elapsed_ms=elapsed_ms)

    return DispatchOutcome(ok=True, value=task.result(), elapsed_ms=elapsed_ms)
