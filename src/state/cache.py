"""In-memory cache of last-known zone state."""

import asyncio
import logging
from typing import Any

from models import Room, Switch, ZoneKind

logger = logging.getLogger(__name__)


class StateCache:
    """Last-known state of every zone, keyed by kind and hub id.

    Created empty, filled by the first successful fetch and then mutated in
    place by the change detector. Nothing is persisted; a restart starts from
    an empty cache.

    Writers must hold ``locked()``. Reads are synchronous so a reader on the
    event loop never sees an entity mid-update.
    """

    def __init__(self) -> None:
        self._zones: dict[ZoneKind, dict[int, Any]] = {kind: {} for kind in ZoneKind}
        self._lock = asyncio.Lock()

    @property
    def houses(self) -> dict[int, Any]:
        return self._zones[ZoneKind.HOUSE]

    @property
    def switches(self) -> dict[int, Switch]:
        return self._zones[ZoneKind.SWITCH]

    @property
    def rooms(self) -> dict[int, Room]:
        return self._zones[ZoneKind.ROOM]

    def locked(self) -> asyncio.Lock:
        """Exclusive section for cache mutation."""
        return self._lock

    def get(self, kind: ZoneKind, zone_id: int) -> Any | None:
        """Get a cached zone by id."""
        return self._zones[kind].get(zone_id)

    def get_all(self, kind: ZoneKind) -> dict[int, Any]:
        """Get a copy of the id -> zone mapping for one kind."""
        return dict(self._zones[kind])

    def find_by_name(self, kind: ZoneKind, name: str) -> Any | None:
        """Find a cached zone by display name.

        Names are not guaranteed unique on the hub. This is a linear scan and
        the first match wins; a second zone with the same name can never be
        addressed by name.
        """
        for zone in self._zones[kind].values():
            if zone.name == name:
                return zone
        return None

    def names(self) -> list[str]:
        """Display names of all cached switches and rooms, without duplicates."""
        seen: dict[str, None] = {}
        for kind in (ZoneKind.SWITCH, ZoneKind.ROOM):
            for zone in self._zones[kind].values():
                seen.setdefault(zone.name, None)
        return list(seen)

    async def upsert(self, kind: ZoneKind, zone: Any) -> None:
        """Insert or replace a single zone."""
        async with self._lock:
            self.upsert_locked(kind, zone)

    def upsert_locked(self, kind: ZoneKind, zone: Any) -> None:
        """Insert or replace a zone; caller must hold ``locked()``."""
        self._zones[kind][zone.id] = zone

    async def populate(self, snapshot: Any) -> None:
        """Replace the whole cache with a freshly fetched snapshot."""
        async with self._lock:
            self._zones[ZoneKind.HOUSE] = dict(snapshot.houses)
            self._zones[ZoneKind.SWITCH] = dict(snapshot.switches)
            self._zones[ZoneKind.ROOM] = dict(snapshot.rooms)
        logger.info(
            f"Cache populated with {len(self.switches)} switches "
            f"and {len(self.rooms)} rooms"
        )

    def __len__(self) -> int:
        return sum(len(zones) for zones in self._zones.values())
