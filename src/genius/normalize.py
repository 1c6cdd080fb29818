"""Normalization of raw Genius Hub zone records.

The hub's ``GET zones`` endpoint returns a flat list of zone records. Only a
handful of fields matter to the bridge:

- ``iType``: zone type code (1 house, 2 switch, 3 room)
- ``iID`` / ``strName``: identity and display name
- ``iMode`` / ``iBaseMode``: current and configured mode codes
- ``iOverrideDuration``: default override duration in seconds
- ``fPV`` / ``fSP``: process value (temperature) and setpoint
- ``nodes``: attached devices; empty for the hot-water switch
- ``datapoints``: sensor readings tagged by ``addr``
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from models import Room, Switch, ZoneType, parse_mode

logger = logging.getLogger(__name__)

BATTERY_ADDR = "Battery"
LUMINANCE_ADDR = "LUMINANCE"


@dataclass
class ZoneSnapshot:
    """Typed view of one fetch of the hub's zones."""

    houses: dict[int, Any] = field(default_factory=dict)
    switches: dict[int, Switch] = field(default_factory=dict)
    rooms: dict[int, Room] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.houses) + len(self.switches) + len(self.rooms)


def _datapoint_values(record: dict[str, Any], addr: str) -> list[float]:
    return [dp["val"] for dp in record.get("datapoints") or [] if dp.get("addr") == addr]


def aggregate_min(values: list[float]) -> float | None:
    """Lowest value, or None when there are no readings."""
    return min(values) if values else None


def aggregate_max(values: list[float]) -> float | None:
    """Highest value, or None when there are no readings."""
    return max(values) if values else None


def parse_switch(record: dict[str, Any]) -> Switch | None:
    """Build a Switch from a type-2 record.

    Returns None for the hot-water zone, which has no nodes attached.
    """
    if not record.get("nodes"):
        return None

    return Switch(
        id=int(record["iID"]),
        name=str(record["strName"]),
        state=record["fSP"] == 1,
    )


def parse_room(record: dict[str, Any]) -> Room:
    """Build a Room from a type-3 record."""
    return Room(
        id=int(record["iID"]),
        name=str(record["strName"]),
        mode=parse_mode(record["iMode"]),
        default_mode=record["iBaseMode"],
        default_override_duration=record["iOverrideDuration"],
        temperature=record["fPV"],
        setpoint=record["fSP"],
        battery=aggregate_min(_datapoint_values(record, BATTERY_ADDR)),
        luminance=aggregate_max(_datapoint_values(record, LUMINANCE_ADDR)),
    )


def parse_zone_data(raw: Iterable[dict[str, Any]]) -> ZoneSnapshot:
    """Convert raw zone records into a ZoneSnapshot.

    Malformed records are skipped with a warning so that one bad zone does
    not hide the rest of the house.
    """
    zones = ZoneSnapshot()

    for index, record in enumerate(raw):
        try:
            zone_type = record["iType"]

            if zone_type == ZoneType.HOUSE.value:
                continue

            if zone_type == ZoneType.SWITCH.value:
                switch = parse_switch(record)
                if switch is None:
                    logger.debug(f"Skipping hot water zone {record.get('iID')}")
                    continue
                zones.switches[switch.id] = switch

            elif zone_type == ZoneType.ROOM.value:
                room = parse_room(record)
                zones.rooms[room.id] = room

        except (KeyError, TypeError, ValueError, AttributeError) as e:
            zone_id = record.get("iID") if isinstance(record, dict) else None
            logger.warning(
                f"Skipping malformed zone record #{index} (id={zone_id}): "
                f"{type(e).__name__}: {e}"
            )

    return zones
