"""HTTP market-data source backed by a shared httpx.AsyncClient."""
from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..config import Settings
from ..errors import NetworkFailure, ParseFailure
from ..observability import record_fetch_latency
from .base import MarketDataSource

LOGGER = logging.getLogger(__name__)


class HttpSource(MarketDataSource):
    """Issue one GET per fetch and return the decoded JSON body.

    Transport errors, timeouts and non-2xx statuses raise NetworkFailure.
    Undecodable bodies raise ParseFailure. A body that decodes to a JSON
    string is decoded once more, since some relays double-encode.
    """

    def __init__(
        self,
        url: str,
        timeout: float,
        *,
        accept: str = "application/json",
        transport: httpx.AsyncBaseTransport | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._headers = {"accept": accept}
        self._transport = transport
        self._settings = settings
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self._headers,
                transport=self._transport,
            )
        return self._client

    async def fetch(self) -> Any:
        client = self._get_client()
        try:
            with record_fetch_latency("source", self._settings):
                response = await client.get(self.url)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise NetworkFailure(f"timed out after {self.timeout}s fetching {self.url}") from exc
        except httpx.HTTPStatusError as exc:
            raise NetworkFailure(f"upstream returned {exc.response.status_code} for {self.url}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NetworkFailure(f"request to {self.url} failed: {exc}") from exc
        return decode_body(response.text)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def decode_body(body: str) -> Any:
    try:
        payload = json.loads(body)
        if isinstance(payload, str):
            payload = json.loads(payload)
    except (json.JSONDecodeError, TypeError) as exc:
        raise ParseFailure(f"response body is not valid JSON: {exc}") from exc
    return payload
