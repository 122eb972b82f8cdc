"""Default transport: one request through ``httpx.AsyncClient``.

A transport is any callable used as ``await transport(url, options)`` that
returns an object exposing ``status_code``, ``headers`` and an awaitable
``aread()``. ``httpx.Response`` is exactly that, so custom transports
usually wrap an ``httpx.AsyncClient`` as well.
"""

from __future__ import annotations

from typing import Any, Mapping

import httpx


class HttpxTransport:
    """Send requests with a shared or lazily-created ``httpx.AsyncClient``.

    A client passed in is owned by the caller. A client created here lives
    until ``aclose()`` is called.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, **client_kwargs: Any) -> None:
        self._client = client
        self._owns_client = client is None
        self._client_kwargs = client_kwargs

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(**self._client_kwargs)
        return self._client

    async def __call__(self, url: str, options: Mapping[str, Any] | None = None) -> httpx.Response:
        options = dict(options or {})
        method = str(options.pop("method", None) or "GET").upper()
        body = options.pop("body", None)
        headers = options.pop("headers", None)
        if isinstance(body, (str, bytes)):
            options["content"] = body
        elif body is not None:
            options["json"] = body
        return await self.client.request(method, url, headers=headers, **options)

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
