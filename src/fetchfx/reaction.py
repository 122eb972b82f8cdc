"""Reactions: side effects that re-run when the observables they read change.

Two flavors:
- autorun(fn): runs fn immediately, re-runs whenever an observable it read changes.
- reaction(data_fn, effect_fn): tracks data_fn, calls effect_fn with the new
  value only when data_fn's result changes.

StateChannel builds its render observers on reaction(); every published
FetchState is a fresh object, so each publish counts as a change.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from fetchfx._tracking import current_derivation

T = TypeVar("T")


class _Derivation:
    __slots__ = ("_dependencies", "_disposed")

    def __init__(self) -> None:
        self._dependencies: set = set()
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _untrack(self) -> None:
        for dep in self._dependencies:
            dep._remove_observer(self)
        self._dependencies.clear()

    def _evaluate(self, fn: Callable[[], T]) -> T:
        self._untrack()
        token = current_derivation.set(self)
        try:
            return fn()
        finally:
            current_derivation.reset(token)

    def dispose(self) -> None:
        """Stop reacting and disconnect from every dependency."""
        self._disposed = True
        self._untrack()


class Reaction(_Derivation):
    """Eager side effect re-run on every dependency change."""

    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[[], None]) -> None:
        super().__init__()
        self._fn = fn

    def _run(self) -> None:
        if self._disposed:
            return
        self._evaluate(self._fn)

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"Reaction({getattr(self._fn, '__name__', self._fn)!r}, {state})"


class _DataReaction(_Derivation):
    """reaction(data_fn, effect_fn) implementation."""

    __slots__ = ("_data_fn", "_effect_fn", "_last_value", "_initialized")

    def __init__(self, data_fn: Callable[[], T], effect_fn: Callable[[T], None]) -> None:
        super().__init__()
        self._data_fn = data_fn
        self._effect_fn = effect_fn
        self._last_value = None
        self._initialized = False

    def _run(self) -> None:
        if self._disposed:
            return
        new_value = self._evaluate(self._data_fn)
        if not self._initialized or (new_value is not self._last_value and new_value != self._last_value):
            self._last_value = new_value
            self._initialized = True
            self._effect_fn(new_value)

    def _prime(self) -> None:
        """Establish dependencies without firing the effect."""
        self._last_value = self._evaluate(self._data_fn)
        self._initialized = True

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"_DataReaction({getattr(self._data_fn, '__name__', self._data_fn)!r}, {state})"


def autorun(fn: Callable[[], None]) -> Reaction:
    """Run fn now, then again whenever any observable it read changes.

    Usage:
        orchestrator = RequestOrchestrator(FetchConfig(url))
        autorun(lambda: print("pending:", len(orchestrator.pending)))
    """
    r = Reaction(fn)
    r._run()
    return r


def reaction(
    data_fn: Callable[[], T],
    effect_fn: Callable[[T], None],
    *,
    fire_immediately: bool = False,
) -> _DataReaction:
    """Track data_fn's observables; call effect_fn when its result changes."""
    r = _DataReaction(data_fn, effect_fn)
    if fire_immediately:
        r._run()
    else:
        r._prime()
    return r
