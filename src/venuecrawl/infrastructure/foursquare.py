"""Foursquare venue source — adjacency via the ``nextvenues`` endpoint.

Error mapping:

=====================================  ===========================
Response                               Raised
=====================================  ===========================
401, 403                               PermanentFetchError
429, 5xx, other 4xx                    TransientFetchError
timeout / connection / protocol error  TransientFetchError
body not JSON or missing fields        TransientFetchError
=====================================  ===========================
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

import httpx
import structlog

from venuecrawl.domain.errors import PermanentFetchError, TransientFetchError
from venuecrawl.domain.types import Node

if TYPE_CHECKING:
    from venuecrawl.config.models import SourceConfig

logger = structlog.get_logger(__name__)

PERMANENT_STATUS_CODES = frozenset({401, 403})


def venue_to_node(venue: dict[str, Any]) -> Node:
    """Map a Foursquare compact venue object to a :class:`Node`."""
    return Node(id=str(venue["id"]), label=str(venue.get("name", "")))


class FoursquareSource:
    """Adjacency and node source backed by the Foursquare v2 API.

    Usable as an async context manager; the underlying
    :class:`httpx.AsyncClient` is closed on exit.
    """

    def __init__(self, config: SourceConfig, *, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout),
            )
        return self._client

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _params(self) -> dict[str, str]:
        return {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "v": self.config.api_version,
        }

    async def _get(self, node_id: str, path: str) -> dict[str, Any]:
        """GET *path* and return the decoded ``response`` object."""
        try:
            response = await self.client.get(path, params=self._params())
        except httpx.TransportError as exc:
            raise TransientFetchError(node_id, f"{type(exc).__name__}: {exc}") from exc

        status = response.status_code
        if status in PERMANENT_STATUS_CODES:
            raise PermanentFetchError(
                node_id, f"HTTP {status} for {path}", status_code=status
            )
        if status >= 400:
            raise TransientFetchError(node_id, f"HTTP {status} for {path}")

        try:
            body = response.json()
            return body["response"]
        except (ValueError, KeyError, TypeError) as exc:
            raise TransientFetchError(node_id, f"Malformed response for {path}") from exc

    async def lookup_neighbors(self, node_id: str) -> list[Node]:
        payload = await self._get(node_id, f"/venues/{node_id}/nextvenues")
        try:
            items = payload["nextVenues"]["items"]
            return [venue_to_node(item) for item in items]
        except (KeyError, TypeError) as exc:
            raise TransientFetchError(node_id, "Malformed nextVenues payload") from exc

    async def lookup_node(self, node_id: str) -> Node:
        payload = await self._get(node_id, f"/venues/{node_id}")
        try:
            return venue_to_node(payload["venue"])
        except (KeyError, TypeError) as exc:
            raise TransientFetchError(node_id, "Malformed venue payload") from exc
