"""Utility modules for the Genius Hub bridge."""

from utils.errors import (
    CallOutcome,
    DeviceNotFoundError,
    ErrorCategory,
    HubApiError,
    HubConnectionError,
    InvalidPayloadError,
    run_api_call,
)
from utils.retry import RetryExhausted, retry_async

__all__ = [
    "CallOutcome",
    "DeviceNotFoundError",
    "ErrorCategory",
    "HubApiError",
    "HubConnectionError",
    "InvalidPayloadError",
    "RetryExhausted",
    "retry_async",
    "run_api_call",
]
