"""Main entry point for the Genius Hub MQTT bridge."""

import asyncio
import logging
import sys
from pathlib import Path

from commands.dispatcher import CommandDispatcher
from config import BridgeConfig, SecretsConfig, load_settings
from genius.client import GeniusHubClient
from mqtt_bridge.bridge import MqttBridge
from scheduling.scheduler import Scheduler
from state.cache import StateCache
from utils.retry import RetryExhausted

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger(__name__)


def create_client(config: BridgeConfig, secrets: SecretsConfig) -> GeniusHubClient:
    """Create the hub API client from settings."""
    return GeniusHubClient(
        host=config.hub.host,
        token=secrets.hub.token,
        port=config.hub.port,
        api_version=config.hub.api_version,
        timeout=config.hub.timeout,
    )


def create_bridge(
    config: BridgeConfig,
    secrets: SecretsConfig,
    cache: StateCache,
    client: GeniusHubClient,
) -> tuple[CommandDispatcher, MqttBridge, Scheduler]:
    """Wire dispatcher, MQTT bridge and scheduler around one cache."""
    dispatcher = CommandDispatcher(cache, client, api_timeout=config.hub.timeout)
    bridge = MqttBridge(
        cache,
        dispatcher,
        host=config.mqtt.host,
        port=config.mqtt.port,
        username=secrets.mqtt.username,
        password=secrets.mqtt.password,
        topic_prefix=config.mqtt.topic_prefix,
        client_id=config.mqtt.client_id,
        keepalive=config.mqtt.keepalive,
        reconnect_delay=config.mqtt.reconnect_delay,
        publish_on_connect=config.mqtt.publish_on_connect,
    )
    scheduler = Scheduler(
        cache,
        client,
        publishers=bridge.publishers(),
        on_discovered=bridge.on_zones_discovered,
        poll_interval=config.polling.poll_interval,
        override_interval=config.polling.override_interval,
        override_duration=config.polling.override_duration,
        api_timeout=config.hub.timeout,
    )
    return dispatcher, bridge, scheduler


async def main(config_dir: Path | None = None) -> None:
    """Main entry point."""
    logger.info("Starting Genius Hub MQTT bridge...")

    # Load configuration
    try:
        config, secrets = load_settings(config_dir)
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    logging.getLogger().setLevel(config.logging.level)
    if not secrets.hub.token:
        logger.warning("No hub token configured; requests will be unauthorized")

    cache = StateCache()
    client = create_client(config, secrets)
    dispatcher, bridge, scheduler = create_bridge(config, secrets, cache, client)

    # Populate the cache before anything subscribes or polls
    try:
        snapshot = await scheduler.initialize(
            max_attempts=config.polling.initial_fetch_attempts
        )
        logger.info(
            f"Loaded {len(snapshot.switches)} switches and "
            f"{len(snapshot.rooms)} rooms from {config.hub.host}"
        )
    except RetryExhausted as e:
        logger.error(f"Failed to fetch zones from hub: {e}")
        await client.close()
        sys.exit(1)

    try:
        await bridge.start()
        await scheduler.start()
        logger.info("Bridge running...")
        await asyncio.Event().wait()
    finally:
        await scheduler.stop()
        await bridge.stop()
        await dispatcher.cancel_pending()
        await client.close()
        logger.info("Shutdown complete")


def run() -> None:
    """Synchronous entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    run()
