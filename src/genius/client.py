"""Genius Hub local API client.

Talks to the hub's v3 REST API on port 1223. Reads go through ``GET zones``;
every mutation is a ``PATCH zone/<id>`` with a small JSON body.
"""

import logging
from typing import Any

import httpx

from models import MODE_OVERRIDE
from utils.errors import DEFAULT_API_TIMEOUT, HubApiError, HubConnectionError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 1223
DEFAULT_API_VERSION = "v3"


class GeniusHubClient:
    """Async client for the Genius Hub local API."""

    def __init__(
        self,
        host: str,
        token: str,
        port: int = DEFAULT_PORT,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = DEFAULT_API_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.host = host
        self.base_url = f"http://{host}:{port}/{api_version}/"
        self._token = token
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_headers(self) -> dict[str, str]:
        """Get API headers."""
        return {"Authorization": f"Basic {self._token}"}

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure HTTP client exists."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._get_headers(),
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GeniusHubClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        json_data: dict[str, Any] | None = None,
    ) -> Any:
        client = await self._ensure_client()
        try:
            response = await client.request(method, path, json=json_data)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise TimeoutError(f"{method} {path} timed out") from e
        except httpx.HTTPStatusError as e:
            raise HubApiError(
                f"{method} {path} returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise HubConnectionError(f"{method} {path} failed: {e}") from e

        if not response.content:
            return None
        return response.json()

    async def fetch_zones(self) -> list[dict[str, Any]]:
        """Fetch the raw zone records."""
        body = await self._request("GET", "zones")
        if not isinstance(body, dict) or not isinstance(body.get("data"), list):
            raise HubApiError("Unexpected zones response shape")

        zones = body["data"]
        logger.debug(f"Data for {len(zones)} zones fetched")
        return zones

    async def set_zone_to_override(
        self, zone_id: int, duration: int | None = None
    ) -> Any:
        """Put a zone into override (boost) mode, optionally for `duration` seconds."""
        data: dict[str, Any] = {"iMode": MODE_OVERRIDE}
        if duration:
            data["iBoostTimeRemaining"] = duration
        return await self._request("PATCH", f"zone/{zone_id}", data)

    async def set_switch_state(self, zone_id: int, state: bool) -> Any:
        """Switch a relay zone on or off."""
        return await self._request("PATCH", f"zone/{zone_id}", {"fBoostSP": 1 if state else 0})

    async def set_zone_mode(self, zone_id: int, mode: int) -> Any:
        """Set a zone's numeric mode code."""
        return await self._request("PATCH", f"zone/{zone_id}", {"iMode": mode})

    async def set_room_setpoint(self, zone_id: int, setpoint: float) -> Any:
        """Set a room's target temperature."""
        return await self._request("PATCH", f"zone/{zone_id}", {"fBoostSP": setpoint})
