"""Data models for the Genius Hub bridge."""

from models.base import (
    MODE_OFF,
    MODE_OVERRIDE,
    ThermostatMode,
    ZoneKind,
    ZoneType,
    parse_mode,
)
from models.room import Room
from models.switch import Switch

Zone = Switch | Room

__all__ = [
    "MODE_OFF",
    "MODE_OVERRIDE",
    "Room",
    "Switch",
    "ThermostatMode",
    "Zone",
    "ZoneKind",
    "ZoneType",
    "parse_mode",
]
