"""Periodic polling and override refresh.

Two independent background loops:

1. Poll loop (every few seconds): fetch zones, normalize, diff against the
   cache and publish whatever changed.
2. Override loop (every few hours): push every switch back into override so
   it never falls back to the hub's own schedule.

Both run on a fixed interval measured from the start of each tick. A failing
tick is logged and the loop carries on; nothing here ever clears the cache.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping

from genius.client import GeniusHubClient
from genius.normalize import ZoneSnapshot, parse_zone_data
from models import ZoneKind
from state.cache import StateCache
from state.changes import PublishCallback, ReconcileResult, reconcile
from utils.errors import DEFAULT_API_TIMEOUT, CallOutcome, execute_with_timeout, run_api_call
from utils.retry import retry_async

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_OVERRIDE_INTERVAL = 3 * 60 * 60.0
DEFAULT_OVERRIDE_DURATION = 23 * 60 * 60

DiscoveryCallback = Callable[[list[Any]], Awaitable[None]]


class Scheduler:
    """Runs the poll and override-refresh loops."""

    def __init__(
        self,
        cache: StateCache,
        client: GeniusHubClient,
        publishers: Mapping[str, PublishCallback] | None = None,
        on_discovered: DiscoveryCallback | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        override_interval: float = DEFAULT_OVERRIDE_INTERVAL,
        override_duration: int = DEFAULT_OVERRIDE_DURATION,
        api_timeout: float = DEFAULT_API_TIMEOUT,
    ):
        """Initialize scheduler.

        Args:
            cache: Shared state cache
            client: Hub API client
            publishers: Zone field -> publish callback for changed fields
            on_discovered: Awaited with zones first seen by a poll
            poll_interval: Seconds between zone polls
            override_interval: Seconds between override refreshes
            override_duration: Override length requested for each switch (seconds)
            api_timeout: Timeout for each hub request
        """
        self.cache = cache
        self.client = client
        self.publishers = dict(publishers or {})
        self.on_discovered = on_discovered
        self.poll_interval = poll_interval
        self.override_interval = override_interval
        self.override_duration = override_duration
        self.api_timeout = api_timeout

        self._tasks: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def fetch_snapshot(self) -> ZoneSnapshot:
        """Fetch and normalize the hub's zones."""
        raw = await execute_with_timeout(self.client.fetch_zones(), timeout=self.api_timeout)
        return parse_zone_data(raw)

    async def initialize(
        self,
        max_attempts: int = 5,
        initial_delay: float = 2.0,
    ) -> ZoneSnapshot:
        """Populate the cache from a first fetch, retrying with backoff.

        Raises:
            RetryExhausted: If the hub could not be read at all
        """
        snapshot = await retry_async(
            self.fetch_snapshot,
            description=f"Initial zone fetch from {self.client.host}",
            max_attempts=max_attempts,
            initial_delay=initial_delay,
        )
        await self.cache.populate(snapshot)
        return snapshot

    async def poll_once(self) -> ReconcileResult | None:
        """Run one poll tick.

        Returns None if the fetch failed; the cache is then left as it was.
        """
        try:
            snapshot = await self.fetch_snapshot()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Failed to fetch zones: {e or type(e).__name__}")
            return None

        result = await reconcile(self.cache, snapshot, self.publishers)

        if result.discovered and self.on_discovered:
            try:
                await self.on_discovered(result.discovered)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Failed to handle newly discovered zones: {e}")

        return result

    async def refresh_overrides_once(self) -> list[CallOutcome]:
        """Put every cached switch back into override.

        One switch failing doesn't stop the others.
        """
        switches = self.cache.get_all(ZoneKind.SWITCH)
        logger.info(f"Setting {len(switches)} switches to override")

        calls = [
            run_api_call(
                self.client.set_zone_to_override(zone_id, self.override_duration),
                f"set_zone_to_override({zone_id}, {self.override_duration})",
                timeout=self.api_timeout,
            )
            for zone_id in switches
        ]
        return list(await asyncio.gather(*calls))

    async def start(self) -> None:
        """Start both loops."""
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(
                self._run_every(self.override_interval, self.refresh_overrides_once, "override")
            ),
            asyncio.create_task(
                self._run_every(self.poll_interval, self.poll_once, "poll")
            ),
        ]
        logger.info(
            f"Scheduler started (poll every {self.poll_interval}s, "
            f"override refresh every {self.override_interval}s)"
        )

    async def stop(self) -> None:
        """Stop both loops."""
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []
        logger.info("Scheduler stopped")

    async def _run_every(
        self,
        interval: float,
        tick: Callable[[], Awaitable[Any]],
        label: str,
    ) -> None:
        """Call `tick` every `interval` seconds until cancelled."""
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            try:
                await tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Scheduler {label} error: {e}")

            elapsed = loop.time() - started
            await asyncio.sleep(max(0.0, interval - elapsed))
