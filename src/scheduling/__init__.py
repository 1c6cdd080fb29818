"""Scheduling module for the Genius Hub bridge."""

from scheduling.scheduler import (
    DEFAULT_OVERRIDE_DURATION,
    DEFAULT_OVERRIDE_INTERVAL,
    DEFAULT_POLL_INTERVAL,
    Scheduler,
)

__all__ = [
    "DEFAULT_OVERRIDE_DURATION",
    "DEFAULT_OVERRIDE_INTERVAL",
    "DEFAULT_POLL_INTERVAL",
    "Scheduler",
]
