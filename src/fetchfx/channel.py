"""StateChannel: current FetchState plus the observers that render it.

Two kinds of observers:
- render observers (``observe``) are reactions on the state Observable. They
  only run while the channel is alive; ``dispose()`` tears them down.
- always observers (``subscribe``) listen on the ``transitions`` stream and
  keep receiving states after disposal, for side effects such as navigating
  after a POST that settles once the view is gone.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from fetchfx.observable import Observable
from fetchfx.reaction import reaction
from fetchfx.state import FetchState
from fetchfx.stream import Disposer, EventStream

logger = logging.getLogger("fetchfx.channel")

Observer = Callable[[FetchState], Any]


class StateChannel:
    def __init__(self, initial: FetchState | None = None) -> None:
        self._state: Observable[FetchState] = Observable(initial or FetchState())
        self._alive = True
        self._renderers: list = []
        self.transitions: EventStream[FetchState] = EventStream()

    @property
    def state(self) -> FetchState:
        """Current state. Reading it inside a reaction tracks it."""
        return self._state.get()

    @property
    def current(self) -> FetchState:
        """Current state, without dependency tracking."""
        return self._state.peek()

    @property
    def alive(self) -> bool:
        return self._alive

    def observe(self, render: Observer) -> Disposer:
        """Register a render observer. Returns a function that removes it."""

        def _deliver(state: FetchState) -> None:
            if self._alive:
                _safely(render, state)

        r = reaction(self._state.get, _deliver)
        self._renderers.append(r)

        def _remove() -> None:
            r.dispose()
            if r in self._renderers:
                self._renderers.remove(r)

        if not self._alive:
            _remove()
        return _remove

    def subscribe(self, callback: Observer) -> Disposer:
        """Register an always observer. Returns a function that removes it."""
        return self.transitions.subscribe(lambda state: _safely(callback, state))

    def publish(self, **changes: Any) -> FetchState:
        """Merge changes into the current state and notify every observer."""
        state = self._state.peek().evolve(**changes)
        self._state.set(state)
        self.transitions.emit(state)
        return state

    def dispose(self) -> None:
        """Clear the liveness flag and stop render observers.

        Always observers and the state itself stay usable.
        """
        self._alive = False
        for r in self._renderers:
            r.dispose()
        self._renderers.clear()


def _safely(observer: Observer, state: FetchState) -> None:
    try:
        observer(state)
    except Exception:
        logger.exception("Observer %r failed", observer)
