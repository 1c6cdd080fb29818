"""One-shot listing of the hub's zones."""

import json
import sys
from typing import Any

from genius.client import GeniusHubClient
from genius.normalize import ZoneSnapshot, parse_zone_data
from utils.errors import HubApiError


def snapshot_to_dict(snapshot: ZoneSnapshot) -> dict[str, Any]:
    return {
        "switches": [s.to_state_dict() for s in snapshot.switches.values()],
        "rooms": [r.to_state_dict() for r in snapshot.rooms.values()],
    }


async def list_zones(client: GeniusHubClient, as_json: bool = False) -> ZoneSnapshot | None:
    """Fetch the hub's zones once and print them."""
    try:
        async with client:
            raw = await client.fetch_zones()
    except (HubApiError, TimeoutError) as e:
        print(f"Error fetching zones from {client.host}: {e}", file=sys.stderr)
        return None

    snapshot = parse_zone_data(raw)

    if as_json:
        print(json.dumps(snapshot_to_dict(snapshot), indent=2))
        return snapshot

    print(f"Fetched {len(raw)} zone record(s) from {client.host}")
    print()

    print(f"Switches ({len(snapshot.switches)}):")
    for switch in snapshot.switches.values():
        print(f"  [{switch.id}] {switch.name}: {'on' if switch.state else 'off'}")
    print()

    print(f"Rooms ({len(snapshot.rooms)}):")
    for room in snapshot.rooms.values():
        print(
            f"  [{room.id}] {room.name}: {room.mode.value}, "
            f"{room.temperature}° -> {room.setpoint}°, "
            f"battery {room.battery if room.battery is not None else '-'}, "
            f"luminance {room.luminance if room.luminance is not None else '-'}"
        )

    return snapshot
