"""Textual binding for fetchfx. Opt-in, requires textual.

Renders FetchState transitions into a running Textual app. Every callback
is guarded here rather than at call sites: nothing fires while the app is
not running or paused, NoMatches from widget queries is ignored, and calls
from other threads are marshaled with ``app.call_from_thread``.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from textual.css.query import NoMatches

from fetchfx.orchestrator import RequestOrchestrator
from fetchfx.reaction import reaction as _reaction
from fetchfx.state import FetchState
from fetchfx.stream import Disposer

# id(app) present <=> inside a pause() block for that app.
_paused_apps: set[int] = set()


@contextmanager
def pause(app) -> Iterator[None]:
    """Suspend guarded renders during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def _guard(app, fn: Callable[[Any], None]) -> Callable[[Any], None]:
    main = threading.get_ident()

    def _safe(value: Any) -> None:
        try:
            fn(value)
        except NoMatches:
            pass

    def _guarded(value: Any) -> None:
        if not is_safe(app):
            return
        if threading.get_ident() != main:
            app.call_from_thread(_safe, value)
        else:
            _safe(value)

    return _guarded


def bind(app, orchestrator: RequestOrchestrator, render: Callable[[FetchState], None]) -> Disposer:
    """Render every live state transition of orchestrator into app."""
    return orchestrator.observe(_guard(app, render))


def bind_pending(app, orchestrator: RequestOrchestrator, effect: Callable[[int], None]) -> Disposer:
    """Call effect with the outstanding-operation count whenever it changes.

    Usage:
        bind_pending(app, orchestrator, lambda n: spinner.set_class(n > 0, "-busy"))
    """
    r = _reaction(lambda: len(orchestrator.pending), _guard(app, effect), fire_immediately=True)
    return r.dispose
