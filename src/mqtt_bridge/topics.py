"""MQTT topic layout: <prefix>/<device name>/<attribute>."""

from typing import Any

DEFAULT_PREFIX = "genius"

# Outbound attributes, all published retained
PUB_SWITCH = "switch"
PUB_THERMOSTAT_MODE = "thermostatMode"
PUB_HEATING_SETPOINT = "heatingSetpoint"
PUB_TEMPERATURE = "temperature"
PUB_BATTERY = "battery"
PUB_LUMINANCE = "luminance"

# Zone field -> outbound attribute
FIELD_ATTRIBUTES: dict[str, str] = {
    "state": PUB_SWITCH,
    "mode": PUB_THERMOSTAT_MODE,
    "setpoint": PUB_HEATING_SETPOINT,
    "temperature": PUB_TEMPERATURE,
    "battery": PUB_BATTERY,
    "luminance": PUB_LUMINANCE,
}


# MQTT wildcards and the level separator can't appear in a topic name level
RESERVED_NAME_CHARS = frozenset("+#/\0")


def is_valid_device_name(name: str) -> bool:
    """Whether a zone name can be used as a single topic level."""
    return bool(name) and not RESERVED_NAME_CHARS.intersection(name)


def device_topic(prefix: str, name: str, attribute: str) -> str:
    return f"{prefix}/{name}/{attribute}"


def device_wildcard(prefix: str, name: str) -> str:
    """Subscription covering every attribute of one device."""
    return f"{prefix}/{name}/#"


def parse_topic(topic: str, prefix: str = DEFAULT_PREFIX) -> tuple[str, str] | None:
    """Split a topic into (device name, attribute).

    Returns None for topics outside the prefix or without an attribute.
    """
    parts = topic.split("/")
    if len(parts) < 3 or parts[0] != prefix or not parts[1] or not parts[2]:
        return None
    return parts[1], parts[2]


def format_value(value: Any) -> str | None:
    """Render a zone field as an MQTT payload.

    Booleans become on/off, enums their value, integral floats drop the
    trailing '.0'. None has no payload.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "on" if value else "off"
    if hasattr(value, "value"):
        return str(value.value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
