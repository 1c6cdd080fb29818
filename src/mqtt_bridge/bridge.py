"""MQTT side of the bridge.

Publishes zone changes as retained messages and feeds inbound commands to the
dispatcher. Publishing is decoupled from the broker connection: publish
callbacks only record the latest payload per topic, and the connected session
drains those. A value that changes twice while the broker is unreachable is
sent once, with its newest payload.
"""

import asyncio
import logging
from typing import Any, Callable

import aiomqtt

from commands.dispatcher import COMMAND_ATTRIBUTES, CommandDispatcher
from models import ZoneKind
from mqtt_bridge.topics import (
    DEFAULT_PREFIX,
    FIELD_ATTRIBUTES,
    device_topic,
    device_wildcard,
    format_value,
    is_valid_device_name,
    parse_topic,
)
from state.cache import StateCache
from state.changes import TRACKED_FIELDS

logger = logging.getLogger(__name__)


class MqttBridge:
    """Connects the state cache and command dispatcher to an MQTT broker."""

    def __init__(
        self,
        cache: StateCache,
        dispatcher: CommandDispatcher,
        host: str = "localhost",
        port: int = 1883,
        username: str | None = None,
        password: str | None = None,
        topic_prefix: str = DEFAULT_PREFIX,
        client_id: str | None = None,
        keepalive: int = 60,
        reconnect_delay: float = 5.0,
        publish_on_connect: bool = True,
    ):
        self.cache = cache
        self.dispatcher = dispatcher
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.topic_prefix = topic_prefix
        self.client_id = client_id
        self.keepalive = keepalive
        self.reconnect_delay = reconnect_delay
        self.publish_on_connect = publish_on_connect

        self._device_names: dict[str, None] = {}
        self._rejected_names: set[str] = set()
        self._outbox: dict[str, str] = {}
        self._outbox_ready = asyncio.Event()
        self._client: aiomqtt.Client | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def connected(self) -> bool:
        return self._client is not None

    @property
    def device_names(self) -> list[str]:
        return list(self._device_names)

    # Outbound

    def _usable_name(self, name: str) -> bool:
        if is_valid_device_name(name):
            return True
        if name not in self._rejected_names:
            self._rejected_names.add(name)
            logger.warning(
                f"Zone name {name!r} contains '+', '#' or '/' and can't be used in an MQTT topic; "
                f"rename it on the hub to bridge it"
            )
        return False

    def enqueue(self, name: str, attribute: str, value: Any) -> None:
        """Queue a retained publish; replaces any unsent payload for the topic."""
        payload = format_value(value)
        if payload is None:
            logger.debug(f"Not publishing {name}/{attribute}: no value")
            return
        if not self._usable_name(name):
            return

        topic = device_topic(self.topic_prefix, name, attribute)
        self._outbox.pop(topic, None)
        self._outbox[topic] = payload
        self._outbox_ready.set()

    def publish_field(self, zone: Any, prop: str) -> None:
        """Queue one field of a zone for publishing."""
        self.enqueue(zone.name, FIELD_ATTRIBUTES[prop], getattr(zone, prop))

    def publish_zone(self, zone: Any) -> None:
        """Queue every tracked field of a zone for publishing."""
        for prop in TRACKED_FIELDS[zone.kind]:
            self.publish_field(zone, prop)

    def publishers(self) -> dict[str, Callable[[Any], None]]:
        """Publish callbacks for the change detector, keyed by zone field."""

        def make(prop: str) -> Callable[[Any], None]:
            return lambda zone: self.publish_field(zone, prop)

        return {prop: make(prop) for prop in FIELD_ATTRIBUTES}

    def pending_messages(self) -> dict[str, str]:
        """Unsent topic -> payload pairs."""
        return dict(self._outbox)

    async def _flush_outbox(self, client: aiomqtt.Client) -> None:
        while self._outbox:
            topic = next(iter(self._outbox))
            payload = self._outbox.pop(topic)
            try:
                await client.publish(topic, payload, retain=True)
                logger.debug(f"Published {topic}: {payload}")
            except aiomqtt.MqttError:
                # Keep it unless a newer payload arrived meanwhile
                self._outbox.setdefault(topic, payload)
                raise

    async def _publish_outbox(self, client: aiomqtt.Client) -> None:
        while True:
            await self._outbox_ready.wait()
            self._outbox_ready.clear()
            await self._flush_outbox(client)

    # Subscriptions

    async def subscribe_device(self, name: str) -> None:
        """Subscribe to every attribute of a device.

        Remembered across reconnects; subscribed right away when connected.
        """
        if not self._usable_name(name):
            return
        if name in self._device_names:
            return
        self._device_names[name] = None

        client = self._client
        if client is None:
            return
        topic = device_wildcard(self.topic_prefix, name)
        try:
            await client.subscribe(topic)
            logger.info(f"Subscribed to topic {topic}")
        except aiomqtt.MqttError as e:
            logger.warning(f"Failed to subscribe to {topic}: {e}; will retry on reconnect")

    async def on_zones_discovered(self, zones: list[Any]) -> None:
        """Publish and subscribe zones first seen after startup.

        Always published: nothing has been sent for these zones yet, whatever
        publish_on_connect says about republishing the cache on connect.
        """
        for zone in zones:
            self.publish_zone(zone)
            await self.subscribe_device(zone.name)

    async def _on_connect(self, client: aiomqtt.Client) -> None:
        for name in self.cache.names():
            if self._usable_name(name):
                self._device_names.setdefault(name, None)

        # Publish before subscribing so retained values echoed back to us are
        # the current ones, not a stale command from a previous run.
        if self.publish_on_connect:
            for kind in (ZoneKind.SWITCH, ZoneKind.ROOM):
                for zone in self.cache.get_all(kind).values():
                    self.publish_zone(zone)
            await self._flush_outbox(client)

        # From here on subscribe_device subscribes directly, so a zone
        # discovered while this pass awaits is not missed.
        self._client = client
        for name in list(self._device_names):
            topic = device_wildcard(self.topic_prefix, name)
            await client.subscribe(topic)
            logger.info(f"Subscribed to topic {topic}")

    # Inbound

    async def handle_message(self, topic: str, payload: Any) -> bool:
        """Route an inbound message to the dispatcher.

        Returns True if it resulted in a hub call.
        """
        if isinstance(payload, (bytes, bytearray)):
            try:
                text = payload.decode("utf-8")
            except UnicodeDecodeError:
                logger.warning(f"Ignoring non-UTF-8 payload on {topic}")
                return False
        else:
            text = "" if payload is None else str(payload)

        logger.debug(f"Received: {topic}: {text}")

        parsed = parse_topic(topic, self.topic_prefix)
        if parsed is None:
            return False

        name, attribute = parsed
        if attribute not in COMMAND_ATTRIBUTES:
            return False

        return self.dispatcher.dispatch(name, attribute, text)

    # Lifecycle

    async def start(self) -> None:
        """Start the connection loop in the background."""
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._mqtt_loop())
        logger.info(f"Started MQTT bridge for {self.host}:{self.port}")

    async def stop(self) -> None:
        """Stop the connection loop."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._client = None
        logger.info("Stopped MQTT bridge")

    async def _mqtt_loop(self) -> None:
        """Connect, serve, and reconnect after a delay when the broker drops."""
        while True:
            try:
                async with aiomqtt.Client(
                    hostname=self.host,
                    port=self.port,
                    username=self.username,
                    password=self.password,
                    identifier=self.client_id,
                    keepalive=self.keepalive,
                ) as client:
                    logger.info(f"Connected to MQTT broker at {self.host}:{self.port}")
                    await self._on_connect(client)
                    self._outbox_ready.set()

                    publisher = asyncio.create_task(self._publish_outbox(client))
                    try:
                        async for message in client.messages:
                            await self.handle_message(str(message.topic), message.payload)
                    finally:
                        publisher.cancel()
                        try:
                            await publisher
                        except asyncio.CancelledError:
                            pass

            except asyncio.CancelledError:
                raise
            except aiomqtt.MqttError as e:
                logger.error(f"MQTT connection error: {e}")
            except Exception as e:
                logger.error(f"MQTT bridge error: {type(e).__name__}: {e}")
            finally:
                self._client = None

            await asyncio.sleep(self.reconnect_delay)
