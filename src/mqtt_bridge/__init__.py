"""MQTT boundary of the Genius Hub bridge."""

from mqtt_bridge.bridge import MqttBridge
from mqtt_bridge.topics import DEFAULT_PREFIX, format_value, parse_topic

__all__ = ["DEFAULT_PREFIX", "MqttBridge", "format_value", "parse_topic"]
