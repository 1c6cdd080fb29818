"""Inbound MQTT command dispatch."""

from commands.dispatcher import (
    ATTR_HEATING_SETPOINT,
    ATTR_SWITCH,
    ATTR_THERMOSTAT_MODE,
    COMMAND_ATTRIBUTES,
    CommandDispatcher,
)

__all__ = [
    "ATTR_HEATING_SETPOINT",
    "ATTR_SWITCH",
    "ATTR_THERMOSTAT_MODE",
    "COMMAND_ATTRIBUTES",
    "CommandDispatcher",
]
