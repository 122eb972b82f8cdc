"""Observable fetch state and the request/response descriptors it carries."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping


@dataclass(frozen=True)
class RequestInfo:
    """Descriptor of an issued operation."""

    url: str
    method: str = "GET"
    options: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class ResponseInfo:
    """Transport-level metadata of a completed operation."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @classmethod
    def from_response(cls, response: Any) -> ResponseInfo:
        """Build from anything exposing ``status_code`` (or ``status``) and ``headers``."""
        status = getattr(response, "status_code", None)
        if status is None:
            status = getattr(response, "status", 0)
        headers = getattr(response, "headers", None) or {}
        return cls(status=int(status), headers=dict(headers.items()))


# eq=False: every publish is a distinct transition, even when the fields repeat.
@dataclass(frozen=True, eq=False)
class FetchState:
    """Snapshot delivered to observers.

    ``loading`` is ``None`` until the first operation is issued, then
    ``True`` while waiting and ``False`` once an operation settles.
    """

    loading: bool | None = None
    data: Any = None
    error: Any = None
    request: RequestInfo | None = None
    response: ResponseInfo | None = None

    def evolve(self, **changes: Any) -> FetchState:
        return replace(self, **changes)

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
