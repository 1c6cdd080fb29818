"""Error handling utilities for the Genius Hub bridge.

Outbound hub calls are fire-and-forget: nobody awaits their result for
correctness. Each call is wrapped so that it always resolves to a
``CallOutcome`` which is handed to the logging sink instead of surfacing as an
unhandled task exception.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Categories of errors for appropriate handling."""

    TIMEOUT = "timeout"
    CONNECTION = "connection"
    API_ERROR = "api_error"
    INVALID_PAYLOAD = "invalid_payload"
    DEVICE_NOT_FOUND = "device_not_found"
    MALFORMED_RECORD = "malformed_record"
    INTERNAL_ERROR = "internal_error"


class HubApiError(Exception):
    """Raised when the hub API rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class HubConnectionError(HubApiError):
    """Raised when the hub cannot be reached at all."""


class DeviceNotFoundError(Exception):
    """Raised when a command names a device missing from the cache."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"No cached {kind} named {name!r}")


class InvalidPayloadError(ValueError):
    """Raised when an inbound command payload cannot be interpreted."""

    def __init__(self, attribute: str, payload: str):
        self.attribute = attribute
        self.payload = payload
        super().__init__(f"Invalid {attribute} payload: {payload!r}")


@dataclass
class CallOutcome:
    """Result of a fire-and-forget hub call."""

    description: str
    ok: bool
    category: ErrorCategory | None = None
    error: str | None = None
    result: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a loggable dict."""
        data: dict[str, Any] = {"call": self.description, "ok": self.ok}
        if self.category:
            data["error_category"] = self.category.value
        if self.error:
            data["error"] = self.error
        return data


def classify_exception(e: BaseException) -> ErrorCategory:
    """Map an exception onto an error category."""
    if isinstance(e, asyncio.TimeoutError):
        return ErrorCategory.TIMEOUT
    if isinstance(e, HubConnectionError) or isinstance(e, ConnectionError):
        return ErrorCategory.CONNECTION
    if isinstance(e, HubApiError):
        return ErrorCategory.API_ERROR
    if isinstance(e, DeviceNotFoundError):
        return ErrorCategory.DEVICE_NOT_FOUND
    if isinstance(e, InvalidPayloadError):
        return ErrorCategory.INVALID_PAYLOAD
    if isinstance(e, (KeyError, TypeError)):
        return ErrorCategory.MALFORMED_RECORD
    return ErrorCategory.INTERNAL_ERROR


# Default timeout for a single hub request
DEFAULT_API_TIMEOUT = 10.0


async def execute_with_timeout(
    coro: Awaitable[Any],
    timeout: float = DEFAULT_API_TIMEOUT,
) -> Any:
    """Execute a coroutine with a timeout.

    Raises:
        asyncio.TimeoutError: If the operation times out
    """
    async with asyncio.timeout(timeout):
        return await coro


def log_outcome(outcome: CallOutcome) -> None:
    """Logging sink for call outcomes."""
    if outcome.ok:
        logger.debug(f"{outcome.description} succeeded")
    else:
        logger.error(
            f"{outcome.description} failed "
            f"({outcome.category.value if outcome.category else 'unknown'}): "
            f"{outcome.error}"
        )


async def run_api_call(
    coro: Awaitable[Any],
    description: str,
    timeout: float = DEFAULT_API_TIMEOUT,
) -> CallOutcome:
    """Await a hub call and turn whatever happens into a CallOutcome.

    Never raises, except for cancellation.
    """
    try:
        result = await execute_with_timeout(coro, timeout=timeout)
        outcome = CallOutcome(description=description, ok=True, result=result)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        outcome = CallOutcome(
            description=description,
            ok=False,
            category=classify_exception(e),
            error=str(e) or type(e).__name__,
        )
    log_outcome(outcome)
    return outcome
