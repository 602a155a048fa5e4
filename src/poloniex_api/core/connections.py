"""HTTP transport for the trading client built on ``httpx``."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from ..base import TransportBase, TransportResponse
from ..exceptions import RequestTimeoutError, TransportError

logger = logging.getLogger(__name__)


class HttpxTransport(TransportBase):
    """Issue POST requests through a shared ``httpx.AsyncClient``.

    The client is created lazily on first use so the transport can be built
    outside a running event loop. A caller-supplied client is never closed here.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client
        self._owns_client = client is None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
            self._owns_client = True
        return self._client

    def is_connected(self) -> bool:
        return self._client is not None and not self._client.is_closed

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------
    async def post(
        self,
        url: str,
        headers: Sequence[tuple[str, str]],
        body: bytes,
        timeout: float,
    ) -> TransportResponse:
        try:
            response = await self.client.post(
                url,
                headers=list(headers),
                content=body,
                timeout=timeout,
            )
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError(
                f"No response from {url} within {timeout}s",
                endpoint=url,
                timeout=timeout,
            ) from exc
        except httpx.HTTPError as exc:
            logger.debug("POST %s failed: %s", url, exc)
            raise TransportError(f"Request to {url} failed: {exc}", endpoint=url) from exc

        logger.debug("POST %s -> %s (%d bytes)", url, response.status_code, len(response.content))
        return TransportResponse(status_code=response.status_code, body=response.content)
