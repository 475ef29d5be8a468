from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from .errors import FetchError

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass
class AsyncHttpClient:
    """
    Upstream-agnostic async HTTP client wrapper.

    - Uses a single underlying httpx.AsyncClient for connection pooling.
    - Every request is bounded by `timeout_s` so one slow upstream can't stall a refresh.
    - Transport failures and non-2xx responses surface as FetchError.
    - `max_attempts > 1` retries transport errors and 5xx with linear backoff.
    """

    timeout_s: float = 30.0
    connect_timeout_s: float = 10.0
    max_attempts: int = 1
    backoff_s: float = 1.0
    headers: Mapping[str, str] = field(default_factory=dict)

    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_s, connect=self.connect_timeout_s),
            headers=dict(self.headers),
            transport=self.transport,
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def request_text(
        self,
        method: str,
        url: str,
        *,
        content: str | None = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> str:
        """
        Perform an HTTP request and return the decoded body.
        Raises FetchError on transport issues / non-2xx.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await self._request_once(
                    method, url, content=content, params=params, headers=headers
                )
            except _Retryable as e:
                if attempt >= self.max_attempts:
                    raise FetchError(str(e)) from e.__cause__
                delay = self.backoff_s * attempt
                logger.info(
                    "Retrying %s %s in %.1fs (attempt %d/%d): %s",
                    method,
                    url,
                    delay,
                    attempt + 1,
                    self.max_attempts,
                    e,
                )
                await asyncio.sleep(delay)

    async def _request_once(
        self,
        method: str,
        url: str,
        *,
        content: str | None,
        params: Mapping[str, Any] | None,
        headers: Mapping[str, str] | None,
    ) -> str:
        try:
            resp = await self._client.request(
                method=method,
                url=url,
                content=content,
                params=params,
                headers=headers,
            )
        except (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError) as e:
            raise _Retryable(f"{type(e).__name__} for {method} {url}: {e}") from e

        if resp.status_code >= 500:
            raise _Retryable(f"HTTP {resp.status_code} for {method} {resp.request.url}")

        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(f"HTTP {resp.status_code} for {method} {resp.request.url}") from e

        return resp.text

    async def get_text(self, url: str, *, params: Mapping[str, Any] | None = None) -> str:
        return await self.request_text("GET", url, params=params)

    async def post_form_text(self, url: str, body: str) -> str:
        """POST an already url-encoded form body."""

        return await self.request_text(
            "POST", url, content=body, headers={"Content-Type": FORM_CONTENT_TYPE}
        )


class _Retryable(Exception):
    """Internal marker for failures worth another attempt."""
