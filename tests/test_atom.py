"""Tests for Atom and ReadOnlyAtom."""

from facadex import (
    Atom,
    Observable,
    ReactiveList,
    ReadOnlyAtom,
    autorun,
    create_cell,
    create_scope,
    identity,
    name_of,
    run_in_scope,
    wrap,
)
from facadex import _anchor


class Point:
    def __init__(self, x=0, y=0):
        self.x = x
        self.y = y


class TestReadOnlyAtom:
    def test_value_and_try_set(self):
        o = Observable(3)
        atom = ReadOnlyAtom(o.get)
        assert atom.value == 3
        assert atom.get() == 3
        assert atom.try_set(4) is False
        assert o.get() == 3

    def test_update_returns_new_value_without_writing(self):
        atom = ReadOnlyAtom(lambda: 2)
        assert atom.update(lambda v: v * 10) == 20
        assert atom.value == 2


class TestAtom:
    def test_value_setter_and_try_set(self):
        atom = Atom.from_cell(Observable(1))
        atom.value = 2
        assert atom.value == 2
        assert atom.try_set(3) is True
        assert atom.value == 3

    def test_reactive(self):
        atom = Atom.from_cell(create_cell(1))
        log = []
        autorun(lambda: log.append(atom.value))
        atom.value = 2
        assert log == [1, 2]

    def test_update_reads_untracked(self):
        counter = Atom.from_cell(Observable(0))
        other = Observable(0)
        runs = []

        def effect():
            runs.append(other.get())
            counter.update(lambda v: v + 1)

        autorun(effect)
        assert counter.value == 1
        counter.value = 10
        assert runs == [0]
        other.set(1)
        assert runs == [0, 1]
        assert counter.value == 11

    def test_update_defaults_to_identity(self):
        o = Observable([], equals=False)
        atom = Atom.from_cell(o)
        log = []
        autorun(lambda: log.append(len(atom.value)))
        atom.value.append(1)
        atom.update()
        assert log == [0, 1]
        assert identity(5) == 5

    def test_convert(self):
        celsius = Atom.from_cell(Observable(100.0))
        fahrenheit = celsius.convert(lambda c: c * 9 / 5 + 32, lambda f: (f - 32) * 5 / 9)
        assert fahrenheit.value == 212.0
        fahrenheit.value = 32.0
        assert celsius.value == 0.0

    def test_unwrap(self):
        a = Atom.from_cell(Observable("a"))
        b = Atom.from_cell(Observable("b"))
        current = Observable(a)
        forward = Atom.unwrap(current.get)
        log = []
        autorun(lambda: log.append(forward.value))
        current.set(b)
        forward.value = "B"
        assert b.value == "B"
        assert a.value == "a"
        assert log == ["a", "b", "B"]


class TestProp:
    def test_name_of(self):
        assert name_of(lambda p: p.x) == "x"
        assert name_of(lambda p: p[2]) == 2

    def test_attribute(self):
        point = wrap(Point(1, 2))
        x = Atom.prop(lambda: point, lambda p: p.x)
        log = []
        autorun(lambda: log.append(x.value))
        x.value = 5
        assert point.x == 5
        point.y = 7
        assert log == [1, 5]

    def test_object_accessor_is_followed(self):
        first = wrap(Point(1))
        second = wrap(Point(2))
        target = Observable(first)
        x = Atom.prop(target.get, lambda p: p.x)
        log = []
        autorun(lambda: log.append(x.value))
        target.set(second)
        assert log == [1, 2]

    def test_selector_resolved_once(self):
        calls = []

        def selector(p):
            calls.append(None)
            return p.x

        x = Atom.prop(lambda: Point(3), selector)
        assert x.value == 3
        assert x.value == 3
        assert len(calls) == 1

    def test_construction_creates_no_derivation(self):
        point = wrap(Point(1))
        scope, teardown = create_scope()
        before = len(_anchor.derivation_fns)
        x = run_in_scope(scope, lambda: Atom.prop(lambda: point, lambda p: p.x))
        assert len(_anchor.derivation_fns) == before
        teardown()
        assert x.value == 1

    def test_item(self):
        items = ReactiveList(["a", "b"])
        second = Atom.prop(lambda: items, lambda xs: xs[1])
        log = []
        autorun(lambda: log.append(second.value))
        second.value = "B"
        assert list(items) == ["a", "B"]
        assert log == ["b", "B"]


class TestSource:
    def test_falls_back_to_local_cell(self):
        bound = Observable(None)
        field = Atom.source(bound.get)
        assert field.value is None
        field.value = 5
        assert field.value == 5

    def test_forwards_to_bound_atom(self):
        bound = Observable(None)
        field = Atom.source(bound.get)
        field.value = 5
        target = Atom.from_cell(Observable("x"))
        bound.set(target)
        assert field.value == "x"
        field.value = "y"
        assert target.value == "y"

    def test_fresh_fallback_after_unbinding(self):
        bound = Observable(None)
        field = Atom.source(bound.get, lambda: create_cell(0))
        field.value = 5
        bound.set(Atom.from_cell(Observable(1)))
        bound.set(None)
        assert field.value == 0

    def test_reactive_through_binding(self):
        bound = Observable(None)
        field = Atom.source(bound.get)
        log = []
        autorun(lambda: log.append(field.value))
        target = Atom.from_cell(Observable("t"))
        bound.set(target)
        target.value = "u"
        assert log == [None, "t", "u"]
