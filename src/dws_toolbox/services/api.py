from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any

import httpx

from ..config import get_api_key, get_base_url, get_version
from ..errors import DWSAPIError

MultipartFiles = Sequence[tuple[str, tuple[str | None, bytes | str]]]

logger = logging.getLogger(__name__)


class DWSClient:
    """Thin async client for the DWS Processor API.

    One ``httpx.AsyncClient`` is shared by every call so connections are
    pooled. The API key is looked up on each request, which lets a missing
    key surface as a configuration error for that call.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self.base_url = base_url or get_base_url()
        self.user_agent = f"DWSToolbox/{get_version()}"
        self._http = httpx.AsyncClient(base_url=self.base_url, transport=transport)

    def _headers(self) -> dict[str, str]:
        api_key = self._api_key or get_api_key()
        return {
            "Authorization": f"Bearer {api_key}",
            "User-Agent": self.user_agent,
        }

    @asynccontextmanager
    async def stream_post(
        self,
        endpoint: str,
        *,
        json: Mapping[str, Any] | None = None,
        data: Mapping[str, str] | None = None,
        files: MultipartFiles | None = None,
        timeout: float | None = None,
    ) -> AsyncIterator[httpx.Response]:
        """POST to ``endpoint`` and yield the response with its body still unread."""

        headers = self._headers()
        logger.info("POST /%s (%s)", endpoint, "multipart" if json is None else "json")
        async with self._http.stream(
            "POST",
            f"/{endpoint}",
            json=json,
            data=data,
            files=files,
            headers=headers,
            timeout=timeout,
        ) as response:
            if response.is_error:
                raise await _api_error(response)
            yield response

    async def get_text(self, endpoint: str, *, timeout: float | None = 30.0) -> str:
        headers = self._headers()
        logger.info("GET /%s", endpoint)
        response = await self._http.get(f"/{endpoint}", headers=headers, timeout=timeout)
        if response.is_error:
            raise DWSAPIError(response.status_code, response.text)
        return response.text

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> DWSClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


async def _api_error(response: httpx.Response) -> DWSAPIError:
    try:
        body = await response.aread()
    except (httpx.HTTPError, httpx.StreamError) as exc:
        logger.warning("Could not read error body for status %s: %s", response.status_code, exc)
        return DWSAPIError(response.status_code, stream_error=exc)

    text = body.decode("utf-8", errors="replace")
    logger.warning("DWS API returned %s: %s", response.status_code, text[:200])
    return DWSAPIError(response.status_code, text)


__all__ = ["DWSClient", "MultipartFiles"]
