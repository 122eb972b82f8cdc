"""Exceptions published into ``FetchState.error``.

Nothing here is raised out of the orchestrator: failures are captured on the
completion task and turned into the ``error`` field of the next state.
"""

from __future__ import annotations

from typing import Any


class FetchError(Exception):
    """Base class for fetchfx errors."""


class TransportError(FetchError):
    """The transport call raised before producing a response."""

    def __init__(self, request: Any, cause: BaseException) -> None:
        self.request = request
        self.cause = cause
        super().__init__(f"transport failed for {getattr(request, 'url', request)!r}: {cause!r}")


class DecodeError(FetchError):
    """The transport produced a response but its body could not be decoded."""

    def __init__(self, response: Any, cause: BaseException) -> None:
        self.response = response
        self.cause = cause
        super().__init__(f"could not decode response body: {cause!r}")
