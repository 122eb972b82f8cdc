"""Tests for Observable and ObservableList."""

from fetchfx import Observable, ObservableList, autorun


class TestObservable:
    def test_get_set(self):
        o = Observable(42)
        assert o.get() == 42
        o.set(100)
        assert o.get() == 100

    def test_dedup(self):
        """Setting an equal value does not re-run observers."""
        o = Observable(42)
        log = []
        autorun(lambda: log.append(o.get()))
        o.set(42)
        assert log == [42]

    def test_notifies_observers(self):
        o = Observable("hello")
        log = []
        autorun(lambda: log.append(o.get()))
        o.set("world")
        assert log == ["hello", "world"]

    def test_peek_does_not_track(self):
        o = Observable(1)
        log = []
        autorun(lambda: log.append(o.peek()))
        o.set(2)
        assert log == [1]
        assert o.observer_count == 0

    def test_instances_are_independent(self):
        a, b = Observable(1), Observable(1)
        log = []
        autorun(lambda: log.append(a.get()))
        b.set(2)
        assert log == [1]

    def test_repr(self):
        assert "Observable(5)" in repr(Observable(5))


class TestObservableList:
    def test_basic_operations(self):
        lst = ObservableList([1, 2, 3])
        assert len(lst) == 3
        assert lst[0] == 1
        assert list(lst) == [1, 2, 3]
        assert 2 in lst
        assert bool(lst) is True

    def test_mutations_notify(self):
        lst = ObservableList([1, 2])
        log = []
        autorun(lambda: log.append(list(lst)))
        lst.append(3)
        lst.remove(1)
        assert log == [[1, 2], [1, 2, 3], [2, 3]]

    def test_discard(self):
        lst = ObservableList(["a"])
        log = []
        autorun(lambda: log.append(len(lst)))
        assert lst.discard("missing") is False
        assert lst.discard("a") is True
        assert log == [1, 0]

    def test_iteration_is_a_snapshot(self):
        lst = ObservableList([1, 2, 3])
        for item in lst:
            lst.discard(item)
        assert lst.snapshot() == []

    def test_clear(self):
        lst = ObservableList([1, 2])
        lst.clear()
        assert lst.snapshot() == []
