"""HTTP client for the chain's LCD (REST) endpoint."""

import asyncio
import base64
import json as jsonlib
from typing import Any, Optional
from urllib.parse import quote

import httpx

from todoledger.config import ChainConfig


class ChainClient:
    """Read-only HTTP client for CosmWasm smart queries."""

    def __init__(self, config: ChainConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.base_url = config.lcd_endpoint.rstrip("/")
        self.timeout = config.timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_headers(self) -> dict[str, str]:
        return {"Accept": "application/json"}

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                follow_redirects=True,
                headers=self._get_headers(),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        retry: Optional[int] = None,
    ) -> httpx.Response:
        """Make an HTTP request to the LCD endpoint."""
        if retry is None:
            retry = self.config.retry

        client = await self._get_client()
        url = path if path.startswith("/") else f"/{path}"

        last_exception: Optional[Exception] = None
        for attempt in range(retry + 1):
            try:
                response = await client.request(method=method, url=url, params=params)
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                # Don't retry client errors (4xx)
                if 400 <= e.response.status_code < 500:
                    raise
                last_exception = e
            except httpx.RequestError as e:
                last_exception = e

            if attempt < retry:
                await asyncio.sleep(2**attempt)

        if last_exception:
            raise last_exception
        raise RuntimeError("Request failed after all retries")

    async def get(self, path: str, *, params: Optional[dict[str, Any]] = None) -> httpx.Response:
        """Make a GET request."""
        return await self.request("GET", path, params=params)

    async def query_smart(self, contract: str, query: dict[str, Any]) -> Any:
        """Run a smart query against a contract and return its ``data`` payload."""
        encoded = base64.b64encode(
            jsonlib.dumps(query, separators=(",", ":")).encode("utf-8")
        ).decode("ascii")
        response = await self.get(
            f"/cosmwasm/wasm/v1/contract/{contract}/smart/{quote(encoded, safe='')}"
        )
        return response.json().get("data")
