"""Per-field change detection between cached and freshly fetched zones."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from models import ZoneKind
from state.cache import StateCache

logger = logging.getLogger(__name__)

PublishCallback = Callable[[Any], None]

TRACKED_FIELDS: dict[ZoneKind, tuple[str, ...]] = {
    ZoneKind.SWITCH: ("state",),
    ZoneKind.ROOM: ("mode", "setpoint", "temperature", "battery", "luminance"),
}


@dataclass
class FieldChange:
    """One field of one zone that changed value."""

    kind: ZoneKind
    zone_id: int
    name: str
    field: str
    old: Any
    new: Any


@dataclass
class ReconcileResult:
    """Outcome of comparing one snapshot against the cache."""

    changes: list[FieldChange] = field(default_factory=list)
    discovered: list[Any] = field(default_factory=list)


def _display(value: Any) -> Any:
    return getattr(value, "value", value)


def check_for_change(
    cached: Any,
    current: Any,
    prop: str,
    publish: PublishCallback | None = None,
) -> bool:
    """Copy `prop` from current to cached if it differs, then publish.

    Returns True when the field changed. The callback receives the current
    (freshly fetched) zone. With no callback only the cache is updated.
    """
    old = getattr(cached, prop)
    new = getattr(current, prop)
    if old == new:
        return False

    logger.info(
        f"{current.name} ({current.id}) {prop} changed from "
        f"{_display(old)} to {_display(new)}"
    )
    setattr(cached, prop, new)

    if publish:
        publish(current)
    return True


async def reconcile(
    cache: StateCache,
    snapshot: Any,
    publishers: Mapping[str, PublishCallback] | None = None,
) -> ReconcileResult:
    """Diff a snapshot against the cache, field by field.

    Zones seen for the first time are added to the cache without publishing.
    Zones missing from the snapshot are left in the cache untouched.

    Args:
        cache: The state cache to update in place
        snapshot: Freshly normalized zones
        publishers: Field name -> publish callback. Fields without a callback
            are still updated in the cache.

    Returns:
        ReconcileResult listing changed fields and newly discovered zones
    """
    publishers = publishers or {}
    result = ReconcileResult()

    async with cache.locked():
        for kind, current_zones in (
            (ZoneKind.SWITCH, snapshot.switches),
            (ZoneKind.ROOM, snapshot.rooms),
        ):
            for zone_id, current in current_zones.items():
                cached = cache.get(kind, zone_id)
                if cached is None:
                    logger.info(f"Discovered new {kind.value}: {current.name} ({zone_id})")
                    cache.upsert_locked(kind, current)
                    result.discovered.append(current)
                    continue

                for prop in TRACKED_FIELDS[kind]:
                    old = getattr(cached, prop)
                    if check_for_change(cached, current, prop, publishers.get(prop)):
                        result.changes.append(
                            FieldChange(
                                kind=kind,
                                zone_id=zone_id,
                                name=current.name,
                                field=prop,
                                old=old,
                                new=getattr(current, prop),
                            )
                        )

    return result
