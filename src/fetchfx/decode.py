"""Payload decoding.

The ``decoder`` setting of the configuration resolves once per operation into one
of three variants:

- OverrideDecoder: a callable; its return value is the payload verbatim.
- MappingDecoder: parsers keyed by content type (``"application/json"``) or
  by category name (``"json"``, ``"text"``, ``"bytes"``).
- DefaultDecoder: JSON for JSON types, text for text-like types, raw bytes
  for binary types.

Every variant reads the body first; an empty body decodes to ``None``.
Parser callables receive the raw response and may be sync or async.
"""

from __future__ import annotations

import inspect
import json
from typing import Any, Callable, Mapping

JSON = "json"
TEXT = "text"
BYTES = "bytes"

_TEXT_TYPES = frozenset(
    {
        "application/xml",
        "application/javascript",
        "application/ecmascript",
        "application/x-www-form-urlencoded",
    }
)
_BYTES_TYPES = frozenset(
    {
        "application/octet-stream",
        "application/pdf",
        "application/zip",
        "application/gzip",
    }
)
_BYTES_PREFIXES = ("image/", "audio/", "video/", "font/")


def content_type(response: Any) -> str:
    """Media type of a response, lower-cased, parameters stripped."""
    headers = getattr(response, "headers", None) or {}
    raw = headers.get("content-type") or headers.get("Content-Type") or ""
    return raw.split(";", 1)[0].strip().lower()


def category(media_type: str) -> str:
    """Map a media type onto json/text/bytes."""
    if media_type == "application/json" or media_type.endswith("+json"):
        return JSON
    if media_type.startswith("text/") or media_type in _TEXT_TYPES or media_type.endswith("+xml"):
        return TEXT
    if media_type in _BYTES_TYPES or media_type.startswith(_BYTES_PREFIXES):
        return BYTES
    return TEXT


async def read_body(response: Any) -> bytes:
    body = await response.aread()
    return body or b""


def body_text(response: Any, body: bytes) -> str:
    text = getattr(response, "text", None)
    if isinstance(text, str):
        return text
    encoding = getattr(response, "encoding", None) or "utf-8"
    return body.decode(encoding)


async def _call(parser: Callable[[Any], Any], response: Any) -> Any:
    result = parser(response)
    if inspect.isawaitable(result):
        result = await result
    return result


class Decoder:
    async def decode(self, response: Any, json_hook: Callable[[dict], Any] | None = None) -> Any:
        body = await read_body(response)
        if not body:
            return None
        return await self._decode(response, body, json_hook)

    async def _decode(self, response: Any, body: bytes, json_hook) -> Any:
        raise NotImplementedError


class DefaultDecoder(Decoder):
    async def _decode(self, response, body, json_hook):
        kind = category(content_type(response))
        if kind == JSON:
            return json.loads(body_text(response, body), object_hook=json_hook)
        if kind == BYTES:
            return body
        return body_text(response, body)


class OverrideDecoder(Decoder):
    def __init__(self, parser: Callable[[Any], Any]) -> None:
        self.parser = parser

    async def _decode(self, response, body, json_hook):
        return await _call(self.parser, response)


class MappingDecoder(Decoder):
    """Parsers looked up by exact media type, then by category name."""

    def __init__(self, parsers: Mapping[str, Callable[[Any], Any]]) -> None:
        self.parsers = {key.lower(): parser for key, parser in parsers.items()}

    def lookup(self, response: Any) -> Callable[[Any], Any] | None:
        media_type = content_type(response)
        parser = self.parsers.get(media_type)
        if parser is None:
            parser = self.parsers.get(category(media_type))
        return parser

    async def _decode(self, response, body, json_hook):
        parser = self.lookup(response)
        if parser is None:
            return await DefaultDecoder()._decode(response, body, json_hook)
        return await _call(parser, response)


def resolve_decoder(setting: Any) -> Decoder:
    """Turn the ``decoder`` configuration value into a Decoder variant."""
    if setting is None:
        return DefaultDecoder()
    if isinstance(setting, Decoder):
        return setting
    if isinstance(setting, Mapping):
        return MappingDecoder(setting)
    if callable(setting):
        return OverrideDecoder(setting)
    raise TypeError(f"decoder must be a callable, a mapping or None, not {type(setting).__name__}")
