"""Tests for raw zone normalization."""

import logging

import pytest

from conftest import (
    BEDROOM_ID,
    BOILER_ID,
    HOT_WATER_ID,
    LIVING_ROOM_ID,
    room_record,
    switch_record,
)
from genius.normalize import aggregate_max, aggregate_min, parse_zone_data
from models import ThermostatMode


class TestSwitches:
    """Tests for switch zones."""

    def test_hot_water_excluded(self, raw_zones):
        """Test the zone with no nodes is left out."""
        zones = parse_zone_data(raw_zones)
        assert HOT_WATER_ID not in zones.switches
        assert BOILER_ID in zones.switches

    @pytest.mark.parametrize("zone_id", [10, 11, 12])
    def test_any_switch_without_nodes_excluded(self, zone_id):
        zones = parse_zone_data([switch_record(zone_id=zone_id, fsp=1, nodes=[])])
        assert zones.switches == {}

    def test_switch_without_node_list_excluded(self):
        record = switch_record()
        del record["nodes"]
        assert parse_zone_data([record]).switches == {}

    def test_switch_on_when_setpoint_is_one(self):
        zones = parse_zone_data([switch_record(fsp=1)])
        assert zones.switches[BOILER_ID].state is True

    def test_switch_off_otherwise(self):
        zones = parse_zone_data([switch_record(fsp=0)])
        assert zones.switches[BOILER_ID].state is False

    def test_switch_fields(self, raw_zones):
        switch = parse_zone_data(raw_zones).switches[BOILER_ID]
        assert switch.id == BOILER_ID
        assert switch.name == "Boiler"


class TestRooms:
    """Tests for room zones."""

    def test_room_fields(self, raw_zones):
        room = parse_zone_data(raw_zones).rooms[LIVING_ROOM_ID]
        assert room.name == "Living Room"
        assert room.mode == ThermostatMode.AUTO
        assert room.default_mode == 2
        assert room.default_override_duration == 3600
        assert room.temperature == 19.5
        assert room.setpoint == 20.0

    def test_battery_is_minimum(self):
        room = parse_zone_data(
            [
                room_record(
                    datapoints=[
                        {"addr": "Battery", "val": 80},
                        {"addr": "Battery", "val": 60},
                    ]
                )
            ]
        ).rooms[LIVING_ROOM_ID]
        assert room.battery == 60

    def test_luminance_is_maximum(self, raw_zones):
        room = parse_zone_data(raw_zones).rooms[LIVING_ROOM_ID]
        assert room.luminance == 40

    def test_other_datapoints_ignored(self):
        room = parse_zone_data(
            [room_record(datapoints=[{"addr": "TEMPERATURE", "val": 5}])]
        ).rooms[LIVING_ROOM_ID]
        assert room.battery is None
        assert room.luminance is None

    def test_no_datapoints_leaves_aggregates_absent(self, raw_zones):
        room = parse_zone_data(raw_zones).rooms[BEDROOM_ID]
        assert room.battery is None
        assert room.luminance is None
        assert room.mode == ThermostatMode.OFF

    def test_unknown_mode_code(self):
        room = parse_zone_data([room_record(mode=999)]).rooms[LIVING_ROOM_ID]
        assert room.mode == ThermostatMode.UNKNOWN


class TestBatch:
    """Tests for whole-batch behaviour."""

    def test_house_ignored(self, raw_zones):
        zones = parse_zone_data(raw_zones)
        assert zones.houses == {}
        assert 0 not in zones.rooms

    def test_unrecognised_type_skipped(self):
        record = room_record()
        record["iType"] = 9
        zones = parse_zone_data([record])
        assert len(zones) == 0

    def test_malformed_record_skipped(self, caplog):
        """Test a broken record is logged and the rest survive."""
        broken = room_record(zone_id=99, name="Broken")
        del broken["fSP"]
        records = [broken, room_record(), switch_record()]

        with caplog.at_level(logging.WARNING):
            zones = parse_zone_data(records)

        assert 99 not in zones.rooms
        assert LIVING_ROOM_ID in zones.rooms
        assert BOILER_ID in zones.switches
        assert "malformed" in caplog.text

    def test_non_dict_record_skipped(self):
        zones = parse_zone_data(["garbage", None, room_record()])
        assert list(zones.rooms) == [LIVING_ROOM_ID]

    def test_empty_input(self):
        assert len(parse_zone_data([])) == 0


class TestAggregates:
    def test_min_empty(self):
        assert aggregate_min([]) is None

    def test_max_empty(self):
        assert aggregate_max([]) is None

    def test_min_max(self):
        assert aggregate_min([3, 1, 2]) == 1
        assert aggregate_max([3, 1, 2]) == 3
