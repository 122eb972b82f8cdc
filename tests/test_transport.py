"""Tests for HttpxTransport against httpx.MockTransport."""

import json

import httpx
import pytest

from fetchfx import HttpxTransport


def _echo(request):
    return httpx.Response(
        200,
        json={
            "method": request.method,
            "path": request.url.path,
            "query": dict(request.url.params),
            "content_type": request.headers.get("content-type"),
            "accept": request.headers.get("accept"),
            "body": request.content.decode(),
        },
    )


def _client():
    return httpx.AsyncClient(transport=httpx.MockTransport(_echo))


class TestHttpxTransport:
    @pytest.mark.asyncio
    async def test_plain_get(self):
        async with _client() as client:
            response = await HttpxTransport(client)("http://api.test/items")
        echoed = response.json()
        assert echoed["method"] == "GET"
        assert echoed["path"] == "/items"

    @pytest.mark.asyncio
    async def test_json_body_and_headers(self):
        async with _client() as client:
            response = await HttpxTransport(client)(
                "http://api.test/items",
                {"method": "post", "body": {"a": 1}, "headers": {"Accept": "application/json"}},
            )
        echoed = response.json()
        assert echoed["method"] == "POST"
        assert echoed["content_type"] == "application/json"
        assert echoed["accept"] == "application/json"
        assert json.loads(echoed["body"]) == {"a": 1}

    @pytest.mark.asyncio
    async def test_raw_body_and_passthrough_options(self):
        async with _client() as client:
            response = await HttpxTransport(client)(
                "http://api.test/items",
                {"method": "PUT", "body": "a=1", "params": {"page": "2"}},
            )
        echoed = response.json()
        assert echoed["body"] == "a=1"
        assert echoed["query"] == {"page": "2"}

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self):
        transport = HttpxTransport(transport=httpx.MockTransport(_echo))
        async with transport:
            client = transport.client
            await transport("http://api.test/")
        assert client.is_closed

    @pytest.mark.asyncio
    async def test_borrowed_client_stays_open(self):
        async with _client() as client:
            transport = HttpxTransport(client)
            await transport.aclose()
            assert not client.is_closed

    @pytest.mark.asyncio
    async def test_does_not_mutate_options(self):
        options = {"method": "post", "body": {"a": 1}}
        async with _client() as client:
            await HttpxTransport(client)("http://api.test/", options)
        assert options == {"method": "post", "body": {"a": 1}}
