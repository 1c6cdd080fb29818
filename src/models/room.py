"""Room zone model."""

from dataclasses import dataclass, field
from typing import Any

from models.base import MODE_TIMER, ThermostatMode, ZoneKind


@dataclass
class Room:
    """A thermostat-controlled room zone."""

    id: int
    name: str
    mode: ThermostatMode = ThermostatMode.UNKNOWN
    default_mode: int = MODE_TIMER
    default_override_duration: int = 0  # seconds
    temperature: float | None = None
    setpoint: float | None = None
    battery: float | None = None  # lowest reading across the room's sensors
    luminance: float | None = None  # highest reading across the room's sensors
    kind: ZoneKind = field(default=ZoneKind.ROOM, init=False, repr=False)

    def to_state_dict(self) -> dict[str, Any]:
        """Return current state as dict."""
        return {
            "id": self.id,
            "name": self.name,
            "mode": self.mode.value,
            "temperature": self.temperature,
            "setpoint": self.setpoint,
            "battery": self.battery,
            "luminance": self.luminance,
        }
