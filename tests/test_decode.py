"""Tests for payload decoding."""

import json
from datetime import datetime

import httpx
import pytest

from conftest import FakeTransport
from fetchfx import DefaultDecoder, FetchConfig, MappingDecoder, OverrideDecoder, RequestOrchestrator, resolve_decoder
from fetchfx.decode import category, content_type


def _upgrade_dates(obj):
    for key, value in obj.items():
        if isinstance(value, str) and key.endswith("Date"):
            obj[key] = datetime.fromisoformat(value)
    return obj


STAMP = datetime(2024, 5, 1, 12, 30)


def _dated():
    return httpx.Response(200, json={"someDate": STAMP.isoformat()})


class TestTypeTable:
    @pytest.mark.parametrize(
        "media_type, expected",
        [
            ("application/json", "json"),
            ("application/problem+json", "json"),
            ("text/html", "text"),
            ("application/xml", "text"),
            ("image/svg+xml", "text"),
            ("image/png", "bytes"),
            ("application/octet-stream", "bytes"),
            ("", "text"),
        ],
    )
    def test_category(self, media_type, expected):
        assert category(media_type) == expected

    def test_content_type_is_normalized(self):
        response = httpx.Response(200, headers={"Content-Type": "Application/JSON; charset=utf-8"})
        assert content_type(response) == "application/json"


class TestResolve:
    def test_variants(self):
        assert isinstance(resolve_decoder(None), DefaultDecoder)
        assert isinstance(resolve_decoder(lambda r: r), OverrideDecoder)
        assert isinstance(resolve_decoder({"json": json.loads}), MappingDecoder)
        decoder = DefaultDecoder()
        assert resolve_decoder(decoder) is decoder

    def test_rejects_other_values(self):
        with pytest.raises(TypeError):
            resolve_decoder(42)


class TestDefaultDecoder:
    @pytest.mark.asyncio
    async def test_json(self):
        assert await DefaultDecoder().decode(httpx.Response(200, json={"hello": "world"})) == {"hello": "world"}

    @pytest.mark.asyncio
    async def test_html_as_text(self):
        response = httpx.Response(200, content=b"<html />", headers={"content-type": "text/html"})
        assert await DefaultDecoder().decode(response) == "<html />"

    @pytest.mark.asyncio
    async def test_binary_as_bytes(self):
        response = httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})
        assert await DefaultDecoder().decode(response) == b"\x89PNG"

    @pytest.mark.asyncio
    async def test_unknown_type_as_text(self):
        assert await DefaultDecoder().decode(httpx.Response(200, content=b"plain")) == "plain"

    @pytest.mark.asyncio
    async def test_empty_body(self):
        assert await DefaultDecoder().decode(httpx.Response(204)) is None

    @pytest.mark.asyncio
    async def test_json_hook(self):
        assert await DefaultDecoder().decode(_dated(), _upgrade_dates) == {"someDate": STAMP}

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        response = httpx.Response(200, content=b"{", headers={"content-type": "application/json"})
        with pytest.raises(ValueError):
            await DefaultDecoder().decode(response)


class TestOverrideDecoder:
    @pytest.mark.asyncio
    async def test_sync_function(self):
        decoder = OverrideDecoder(lambda res: res.text)
        result = await decoder.decode(httpx.Response(200, json={"foo": "foo"}))
        assert isinstance(result, str)
        assert json.loads(result) == {"foo": "foo"}

    @pytest.mark.asyncio
    async def test_async_function(self):
        async def parse(res):
            return len(await res.aread())

        assert await OverrideDecoder(parse).decode(httpx.Response(200, content=b"abcd")) == 4

    @pytest.mark.asyncio
    async def test_empty_body_skips_function(self):
        calls = []
        await OverrideDecoder(calls.append).decode(httpx.Response(204))
        assert calls == []


class TestMappingDecoder:
    @pytest.mark.asyncio
    async def test_by_content_type(self):
        async def parse(res):
            return json.loads(await res.aread(), object_hook=_upgrade_dates)

        decoder = MappingDecoder({"Application/JSON": parse})
        assert await decoder.decode(_dated()) == {"someDate": STAMP}

    @pytest.mark.asyncio
    async def test_by_category_name(self):
        decoder = MappingDecoder({"json": lambda res: json.loads(res.text, object_hook=_upgrade_dates)})
        assert await decoder.decode(_dated()) == {"someDate": STAMP}

    @pytest.mark.asyncio
    async def test_content_type_beats_category(self):
        decoder = MappingDecoder({"json": lambda res: "category", "application/json": lambda res: "exact"})
        assert await decoder.decode(_dated()) == "exact"

    @pytest.mark.asyncio
    async def test_falls_back_to_default(self):
        decoder = MappingDecoder({"text/csv": lambda res: "csv"})
        assert await decoder.decode(httpx.Response(200, json=[1])) == [1]


class TestThroughOrchestrator:
    @pytest.mark.asyncio
    async def test_override_result_is_published_verbatim(self):
        data = {"foo": "foo"}
        orch = RequestOrchestrator(
            FetchConfig("http://localhost", decoder=lambda res: res.text, transport=FakeTransport(httpx.Response(200, json=data)))
        )
        orch.activate()
        await orch.wait()
        assert json.loads(orch.state.data) == data

    @pytest.mark.asyncio
    async def test_json_hook_from_config(self):
        orch = RequestOrchestrator(
            FetchConfig("http://localhost", json_hook=_upgrade_dates, transport=FakeTransport(_dated()))
        )
        orch.activate()
        await orch.wait()
        assert orch.state.data == {"someDate": STAMP}
