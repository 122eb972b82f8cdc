"""Observable values: state that remembers who read it.

Reading an Observable inside a reaction registers the reaction as an
observer. Writing a different value schedules every observer again.

Each instance owns its value and observer set. Only the batching scope
(``_tracking``) is process-wide, so a transaction opened by one orchestrator
also defers reactions that belong to another.
"""

from __future__ import annotations

from typing import Generic, Iterator, TypeVar

from fetchfx._tracking import current_derivation, schedule

T = TypeVar("T")


class _Trackable:
    __slots__ = ("_observers",)

    def __init__(self) -> None:
        # dict keeps registration order, so observers run in the order they subscribed
        self._observers: dict = {}

    def _track(self) -> None:
        derivation = current_derivation.get()
        if derivation is not None:
            self._observers[derivation] = None
            derivation._dependencies.add(self)

    def _notify(self) -> None:
        for observer in list(self._observers):
            schedule(observer)

    def _remove_observer(self, observer) -> None:
        self._observers.pop(observer, None)

    @property
    def observer_count(self) -> int:
        return len(self._observers)


class Observable(_Trackable, Generic[T]):
    """A single observable value."""

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        super().__init__()
        self._value = value

    def get(self) -> T:
        """Read the value, registering the dependency when inside a reaction."""
        self._track()
        return self._value

    def peek(self) -> T:
        """Read the value without registering a dependency."""
        return self._value

    def set(self, value: T) -> None:
        old = self._value
        if old is not value and old != value:
            self._value = value
            self._notify()

    def __repr__(self) -> str:
        return f"Observable({self._value!r})"


class ObservableList(_Trackable, Generic[T]):
    """A list whose reads track and whose mutations notify."""

    __slots__ = ("_items",)

    def __init__(self, items: list[T] | None = None) -> None:
        super().__init__()
        self._items: list[T] = list(items) if items else []

    # --- reads ---

    def __getitem__(self, index: int) -> T:
        self._track()
        return self._items[index]

    def __len__(self) -> int:
        self._track()
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        self._track()
        # iterate a snapshot; operations settle while callers are iterating
        return iter(list(self._items))

    def __contains__(self, item: object) -> bool:
        self._track()
        return item in self._items

    def __bool__(self) -> bool:
        self._track()
        return bool(self._items)

    def snapshot(self) -> list[T]:
        """Copy of the items, without tracking."""
        return list(self._items)

    # --- writes ---

    def append(self, item: T) -> None:
        self._items.append(item)
        self._notify()

    def remove(self, item: T) -> None:
        self._items.remove(item)
        self._notify()

    def discard(self, item: T) -> bool:
        """Remove item if present. Returns whether anything changed."""
        try:
            self._items.remove(item)
        except ValueError:
            return False
        self._notify()
        return True

    def clear(self) -> None:
        self._items.clear()
        self._notify()

    def __repr__(self) -> str:
        return f"ObservableList({self._items!r})"
