"""Inbound command handling.

Commands arrive from MQTT as (device name, attribute, payload). Each one is
checked against the cached state and, only when it would change something,
forwarded to the hub as a background API call. The cache itself is never
touched here: the next poll observes the effect and publishes it.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from genius.client import GeniusHubClient
from models import MODE_OFF, Room, Switch, ThermostatMode, ZoneKind
from state.cache import StateCache
from utils.errors import (
    DEFAULT_API_TIMEOUT,
    CallOutcome,
    DeviceNotFoundError,
    InvalidPayloadError,
    run_api_call,
)

logger = logging.getLogger(__name__)

ATTR_SWITCH = "switch"
ATTR_HEATING_SETPOINT = "heatingSetpoint"
ATTR_THERMOSTAT_MODE = "thermostatMode"

COMMAND_ATTRIBUTES = (ATTR_SWITCH, ATTR_HEATING_SETPOINT, ATTR_THERMOSTAT_MODE)


def parse_switch_payload(payload: str) -> bool:
    """Exactly 'on' means on; anything else means off."""
    return payload == "on"


def parse_setpoint_payload(payload: str) -> float:
    try:
        return float(payload)
    except ValueError:
        raise InvalidPayloadError(ATTR_HEATING_SETPOINT, payload) from None


def parse_mode_payload(payload: str) -> ThermostatMode:
    try:
        return ThermostatMode(payload)
    except ValueError:
        raise InvalidPayloadError(ATTR_THERMOSTAT_MODE, payload) from None


class CommandDispatcher:
    """Turns inbound commands into hub API calls."""

    def __init__(
        self,
        cache: StateCache,
        client: GeniusHubClient,
        api_timeout: float = DEFAULT_API_TIMEOUT,
    ):
        self.cache = cache
        self.client = client
        self.api_timeout = api_timeout
        self._pending: set[asyncio.Task[CallOutcome]] = set()

        self._handlers: dict[str, Callable[[str, str], bool]] = {
            ATTR_SWITCH: self.handle_switch,
            ATTR_HEATING_SETPOINT: self.handle_heating_setpoint,
            ATTR_THERMOSTAT_MODE: self.handle_thermostat_mode,
        }

    def dispatch(self, device_name: str, attribute: str, payload: str) -> bool:
        """Route a command to its handler.

        Returns True if a hub call was issued. Unknown attributes, unknown
        devices and bad payloads are logged and dropped.
        """
        handler = self._handlers.get(attribute)
        if handler is None:
            return False

        try:
            return handler(device_name, payload)
        except (DeviceNotFoundError, InvalidPayloadError) as e:
            logger.warning(f"Dropping {attribute} command for {device_name!r}: {e}")
            return False

    def _resolve_switch(self, name: str) -> Switch:
        switch = self.cache.find_by_name(ZoneKind.SWITCH, name)
        if switch is None:
            raise DeviceNotFoundError(ZoneKind.SWITCH.value, name)
        return switch

    def _resolve_room(self, name: str) -> Room:
        room = self.cache.find_by_name(ZoneKind.ROOM, name)
        if room is None:
            raise DeviceNotFoundError(ZoneKind.ROOM.value, name)
        return room

    def handle_switch(self, name: str, payload: str) -> bool:
        """Switch a relay on or off if it isn't already."""
        switch = self._resolve_switch(name)
        state = parse_switch_payload(payload)
        logger.info(f"Received request to set {name} ({switch.id}) state to {state}")

        if switch.state == state:
            logger.debug(f"{name} ({switch.id}) already {state}, nothing to do")
            return False

        logger.info(f"Sending api request to set {name} ({switch.id}) state to {state}")
        self._fire(
            self.client.set_switch_state(switch.id, state),
            f"set_switch_state({switch.id}, {state})",
        )
        return True

    def handle_heating_setpoint(self, name: str, payload: str) -> bool:
        """Change a room's setpoint if it differs from the cached one."""
        room = self._resolve_room(name)
        setpoint = parse_setpoint_payload(payload)
        logger.info(f"Received request to set {name} ({room.id}) setpoint to {setpoint}")

        if room.setpoint == setpoint:
            logger.debug(f"{name} ({room.id}) setpoint already {setpoint}")
            return False

        logger.info(f"Sending api request to set {name} ({room.id}) setpoint to {setpoint}")
        self._fire(
            self.client.set_room_setpoint(room.id, setpoint),
            f"set_room_setpoint({room.id}, {setpoint})",
        )
        return True

    def handle_thermostat_mode(self, name: str, payload: str) -> bool:
        """Change a room's mode.

        'heat' puts the room into override for its configured default
        duration. 'off' sets the off code. Anything else restores the room's
        configured base mode.
        """
        room = self._resolve_room(name)
        mode = parse_mode_payload(payload)
        logger.info(f"Received request to set {name} ({room.id}) mode to {mode.value}")

        if room.mode == mode:
            logger.debug(f"{name} ({room.id}) mode already {mode.value}")
            return False

        if mode == ThermostatMode.HEAT:
            duration = room.default_override_duration
            logger.info(
                f"Sending api request to set {name} ({room.id}) to override for {duration} sec"
            )
            self._fire(
                self.client.set_zone_to_override(room.id, duration),
                f"set_zone_to_override({room.id}, {duration})",
            )
        else:
            mode_id = MODE_OFF if mode == ThermostatMode.OFF else room.default_mode
            logger.info(
                f"Sending api request to set {name} ({room.id}) mode to {mode_id} ({mode.value})"
            )
            self._fire(
                self.client.set_zone_mode(room.id, mode_id),
                f"set_zone_mode({room.id}, {mode_id})",
            )
        return True

    def _fire(self, coro: Awaitable[Any], description: str) -> None:
        """Run a hub call in the background; its outcome is only logged."""
        task = asyncio.create_task(
            run_api_call(coro, description, timeout=self.api_timeout)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @property
    def pending(self) -> int:
        """Number of hub calls still in flight."""
        return len(self._pending)

    async def drain(self) -> list[CallOutcome]:
        """Wait for in-flight hub calls to finish."""
        if not self._pending:
            return []
        return list(await asyncio.gather(*self._pending))

    async def cancel_pending(self) -> None:
        """Cancel in-flight hub calls."""
        for task in list(self._pending):
            task.cancel()
        await asyncio.gather(*self._pending, return_exceptions=True)
