"""MQTT topic scanner for inspecting what the bridge has published."""

import asyncio
import sys
from collections import defaultdict
from dataclasses import dataclass, field

import aiomqtt

from mqtt_bridge.topics import DEFAULT_PREFIX, parse_topic


@dataclass
class TopicSummary:
    """Summary of messages on a topic."""

    topic: str
    message_count: int = 0
    last_payload: str = ""
    payloads: set[str] = field(default_factory=set)


def group_by_device(
    topics: dict[str, TopicSummary], prefix: str = DEFAULT_PREFIX
) -> dict[str, dict[str, str]]:
    """Group topic summaries into device name -> attribute -> last payload."""
    devices: dict[str, dict[str, str]] = defaultdict(dict)
    for topic, summary in topics.items():
        parsed = parse_topic(topic, prefix)
        if parsed is None:
            continue
        name, attribute = parsed
        devices[name][attribute] = summary.last_payload
    return dict(devices)


async def scan_mqtt(
    host: str = "localhost",
    port: int = 1883,
    username: str | None = None,
    password: str | None = None,
    prefix: str = DEFAULT_PREFIX,
    timeout: float = 10.0,
) -> dict[str, TopicSummary]:
    """Listen on <prefix>/# and summarize the topics seen.

    Retained state arrives straight away, so a short timeout is enough to
    see every device the bridge knows about.

    Returns:
        Dictionary of topic -> TopicSummary
    """
    topic_filter = f"{prefix}/#"
    print(f"Connecting to MQTT broker at {host}:{port}...")
    print(f"Subscribing to: {topic_filter}")
    print(f"Listening for {timeout} seconds...")
    print()

    topics: dict[str, TopicSummary] = {}

    try:
        async with aiomqtt.Client(
            hostname=host,
            port=port,
            username=username,
            password=password,
        ) as client:
            await client.subscribe(topic_filter)

            try:
                async with asyncio.timeout(timeout):
                    async for message in client.messages:
                        topic_str = str(message.topic)
                        raw = message.payload
                        if isinstance(raw, (bytes, bytearray)):
                            try:
                                payload = raw.decode("utf-8")
                            except UnicodeDecodeError:
                                payload = f"<binary: {len(raw)} bytes>"
                        else:
                            payload = str(raw)

                        summary = topics.setdefault(topic_str, TopicSummary(topic=topic_str))
                        summary.message_count += 1
                        summary.last_payload = payload
                        summary.payloads.add(payload[:100])

                        print(f"  [{topic_str}] {payload[:80]}")

            except asyncio.TimeoutError:
                pass  # Expected - timeout reached

    except aiomqtt.MqttError as e:
        print(f"Error connecting to MQTT broker: {e}", file=sys.stderr)
        return {}

    if not topics:
        print()
        print("No messages received.")
        print()
        print("Troubleshooting tips:")
        print("  - Check that the broker host and port are correct")
        print("  - Verify credentials if authentication is required")
        print("  - Make sure the bridge is running and the prefix matches")
        return {}

    devices = group_by_device(topics, prefix)

    print()
    print("=" * 60)
    print(f"Summary: {len(topics)} topic(s), {len(devices)} device(s)")
    print("=" * 60)
    print()

    for name, attributes in sorted(devices.items()):
        print(f"  {name}")
        for attribute, payload in sorted(attributes.items()):
            print(f"    {attribute}: {payload}")
        print()

    return topics
