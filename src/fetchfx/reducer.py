"""Merging decoded payloads into previously held data."""

from __future__ import annotations

from typing import Any, Callable

# Returned by DataReducer.reduce when the held data must stay as it is.
NO_CHANGE = object()


class DataReducer:
    """Applies the optional ``on_data_change`` combine function.

    Without a combine function the new payload replaces the previous data.
    With one, it is called as ``combine(payload, previous)``, or as
    ``combine(payload)`` when there is no previous data, so the function's
    own default argument (``def combine(new, prev=())``) seeds accumulation.
    A ``None`` return means "leave the data alone"; any other value,
    including falsy ones such as ``0`` or ``[]``, becomes the new data.
    """

    __slots__ = ("combine",)

    def __init__(self, combine: Callable[..., Any] | None = None) -> None:
        self.combine = combine

    @property
    def accumulating(self) -> bool:
        return self.combine is not None

    def reduce(self, payload: Any, previous: Any = None, *, ignore_previous: bool = False) -> Any:
        if self.combine is None:
            return payload
        if ignore_previous or previous is None:
            result = self.combine(payload)
        else:
            result = self.combine(payload, previous)
        return NO_CHANGE if result is None else result
