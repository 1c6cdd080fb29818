"""Zone state cache and change detection."""

from state.cache import StateCache
from state.changes import (
    TRACKED_FIELDS,
    FieldChange,
    ReconcileResult,
    check_for_change,
    reconcile,
)

__all__ = [
    "FieldChange",
    "ReconcileResult",
    "StateCache",
    "TRACKED_FIELDS",
    "check_for_change",
    "reconcile",
]
