"""Base zone models for the Genius Hub bridge."""

from enum import Enum
from typing import Any

# Hub mode codes (iMode / iBaseMode)
MODE_OFF = 1
MODE_TIMER = 2
MODE_FOOTPRINT = 4
MODE_AWAY = 8
MODE_OVERRIDE = 16
MODE_EARLY = 32
MODE_TEST = 64
MODE_LINKED = 128
MODE_OTHER = 256


class ZoneType(Enum):
    """Zone type codes as reported by the hub (iType)."""

    HOUSE = 1
    SWITCH = 2
    ROOM = 3


class ZoneKind(Enum):
    """Kinds of zone held in the state cache."""

    HOUSE = "house"
    SWITCH = "switch"
    ROOM = "room"


class ThermostatMode(Enum):
    """Thermostat mode categories exposed over MQTT."""

    OFF = "off"
    AUTO = "auto"
    HEAT = "heat"
    UNKNOWN = "unknown"


_MODE_TABLE: dict[int, ThermostatMode] = {
    MODE_OFF: ThermostatMode.OFF,
    MODE_TIMER: ThermostatMode.AUTO,
    MODE_FOOTPRINT: ThermostatMode.AUTO,
    MODE_AWAY: ThermostatMode.AUTO,
    MODE_EARLY: ThermostatMode.AUTO,
    MODE_LINKED: ThermostatMode.AUTO,
    MODE_OVERRIDE: ThermostatMode.HEAT,
    MODE_TEST: ThermostatMode.UNKNOWN,
    MODE_OTHER: ThermostatMode.UNKNOWN,
}


def parse_mode(code: Any) -> ThermostatMode:
    """Classify a raw hub mode code.

    Timer, footprint, away, early and linked are all scheduled variants and
    collapse to AUTO. Override (boost) is HEAT. Anything unrecognised is
    UNKNOWN.
    """
    return _MODE_TABLE.get(code, ThermostatMode.UNKNOWN)
