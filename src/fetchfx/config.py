"""Configuration snapshot supplied by the embedding UI binding.

A FetchConfig is immutable; the binding derives a new one with
``dataclasses.replace`` and hands it to ``RequestOrchestrator.reconfigure``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Mapping, Union

if TYPE_CHECKING:
    from fetchfx.cache import ResponseCache

Options = Union[Mapping[str, Any], Callable[[], Mapping[str, Any]], None]


@dataclass(frozen=True)
class FetchConfig:
    url: str | None = None
    method: str = "GET"
    body: Any = None
    headers: Mapping[str, str] | None = None
    # A mapping, or a zero-argument callable evaluated at every issue.
    options: Options = None
    manual: bool = False
    # False: no caching. True: private cache. ResponseCache: shared instance.
    cache: Union[bool, "ResponseCache"] = False
    # Callable, mapping of content-type/category to parser, or None.
    decoder: Any = None
    on_data_change: Callable[..., Any] | None = None
    transport: Callable[..., Any] | None = None
    # Publish non-2xx decoded bodies as ``error`` instead of ``data``.
    error_on_status: bool = False
    # Passed to json.loads as ``object_hook`` by the built-in JSON decoder.
    json_hook: Callable[[dict], Any] | None = None

    def request_options(self, overrides: Mapping[str, Any] | None = None) -> dict[str, Any] | None:
        """Merge method/body/headers, configured options and per-call overrides.

        Returns None when nothing beyond the defaults was configured, which is
        what a custom transport receives for a plain GET.
        """
        merged: dict[str, Any] = {}
        if self.method and self.method.upper() != "GET":
            merged["method"] = self.method.upper()
        if self.body is not None:
            merged["body"] = self.body
        if self.headers:
            merged["headers"] = dict(self.headers)
        configured = self.options() if callable(self.options) else self.options
        if configured:
            merged.update(configured)
        if overrides:
            merged.update(overrides)
        if "method" in merged and merged["method"] is not None:
            merged["method"] = str(merged["method"]).upper()
        return merged or None

    def request_key(self) -> tuple:
        """What must change for a reconfigure to count as a new request."""
        options = self.options
        if options is not None and not callable(options):
            options = _freeze(options)
        return (
            self.url,
            self.method.upper(),
            _freeze(self.body),
            _freeze(self.headers),
            options,
        )


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return tuple(sorted((str(k), _freeze(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze(v) for v in value)
    return value
