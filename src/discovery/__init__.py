"""Inspection and setup utilities for the Genius Hub MQTT bridge."""

from discovery.config_utils import init_config, validate_config
from discovery.mqtt import scan_mqtt
from discovery.zones import list_zones

__all__ = [
    "init_config",
    "list_zones",
    "scan_mqtt",
    "validate_config",
]
