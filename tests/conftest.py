"""Pytest configuration and fixtures for Genius Hub bridge tests."""

import copy
import sys
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from genius.client import GeniusHubClient
from genius.normalize import parse_zone_data
from models import Room, Switch, ThermostatMode
from state.cache import StateCache

HOUSE_ID = 0
HOT_WATER_ID = 1
BOILER_ID = 2
LIVING_ROOM_ID = 3
BEDROOM_ID = 4


def house_record() -> dict[str, Any]:
    return {
        "iType": 1,
        "iID": HOUSE_ID,
        "strName": "Home",
        "iMode": 2,
        "iBaseMode": 2,
        "iOverrideDuration": 3600,
        "fPV": 19.0,
        "fSP": 18.0,
        "nodes": [],
        "datapoints": [],
    }


def switch_record(
    zone_id: int = BOILER_ID,
    name: str = "Boiler",
    fsp: float = 1,
    nodes: list[Any] | None = None,
) -> dict[str, Any]:
    return {
        "iType": 2,
        "iID": zone_id,
        "strName": name,
        "iMode": 16,
        "iBaseMode": 2,
        "iOverrideDuration": 3600,
        "fPV": 0,
        "fSP": fsp,
        "nodes": [{"addr": "7"}] if nodes is None else nodes,
        "datapoints": [],
    }


def room_record(
    zone_id: int = LIVING_ROOM_ID,
    name: str = "Living Room",
    mode: int = 2,
    base_mode: int = 2,
    override_duration: int = 3600,
    temperature: float = 19.5,
    setpoint: float = 20.0,
    datapoints: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    return {
        "iType": 3,
        "iID": zone_id,
        "strName": name,
        "iMode": mode,
        "iBaseMode": base_mode,
        "iOverrideDuration": override_duration,
        "fPV": temperature,
        "fSP": setpoint,
        "nodes": [{"addr": "3"}, {"addr": "4"}],
        "datapoints": (
            [
                {"addr": "Battery", "val": 80},
                {"addr": "Battery", "val": 60},
                {"addr": "LUMINANCE", "val": 10},
                {"addr": "LUMINANCE", "val": 40},
                {"addr": "TEMPERATURE", "val": 19.5},
            ]
            if datapoints is None
            else datapoints
        ),
    }


@pytest.fixture
def raw_zones() -> list[dict[str, Any]]:
    """Raw zone records as returned by GET zones."""
    return [
        house_record(),
        switch_record(zone_id=HOT_WATER_ID, name="Hot Water", fsp=0, nodes=[]),
        switch_record(),
        room_record(),
        room_record(
            zone_id=BEDROOM_ID,
            name="Bedroom",
            mode=1,
            base_mode=8,
            override_duration=1800,
            temperature=17.0,
            setpoint=16.0,
            datapoints=[],
        ),
    ]


@pytest.fixture
def mock_client(raw_zones: list[dict[str, Any]]) -> AsyncMock:
    """Hub client double returning the raw zones."""
    client = AsyncMock(spec=GeniusHubClient)
    client.host = "hub.local"
    client.fetch_zones.return_value = copy.deepcopy(raw_zones)
    return client


@pytest.fixture
def cache() -> StateCache:
    """An empty state cache."""
    return StateCache()


@pytest.fixture
async def populated_cache(cache: StateCache, raw_zones: list[dict[str, Any]]) -> StateCache:
    """A cache filled from the raw zones."""
    await cache.populate(parse_zone_data(raw_zones))
    return cache


@pytest.fixture
def living_room() -> Room:
    """A room in auto mode."""
    return Room(
        id=LIVING_ROOM_ID,
        name="Living Room",
        mode=ThermostatMode.AUTO,
        default_mode=2,
        default_override_duration=3600,
        temperature=19.5,
        setpoint=20.0,
        battery=60,
        luminance=40,
    )


@pytest.fixture
def boiler() -> Switch:
    """A switch that is on."""
    return Switch(id=BOILER_ID, name="Boiler", state=True)
