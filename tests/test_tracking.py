"""Tests for per-attribute tracking through facades."""

import math

import pytest

from facadex import (
    Internal,
    TrackingPolicy,
    autorun,
    define_attr,
    delete_attr,
    get_class,
    get_store,
    has_attr,
    is_extensible,
    notify,
    own_keys,
    prevent_extensions,
    same_value_zero,
    set_class,
    transaction,
    wrap,
)


class Base:
    kind = "base"

    def __init__(self, x=0, y=0):
        self.x = x
        self.y = y

    def total(self):
        return self.x + self.y


class Other:
    kind = "other"


class Pinned(Base):
    @property
    def x(self):
        return 99


class Slotted:
    __slots__ = ("a", "b")

    def __init__(self):
        self.a = 1


class Temperature:
    def __init__(self, celsius=0.0):
        self._celsius = celsius

    @property
    def fahrenheit(self):
        return self._celsius * 9 / 5 + 32

    @fahrenheit.setter
    def fahrenheit(self, value):
        self._celsius = (value - 32) * 5 / 9


class Uncalibrated(Temperature):
    @property
    def fahrenheit(self):
        return 0.0


class TestReads:
    def test_read_transparency(self):
        raw = Base(1, 2)
        facade = wrap(raw)
        assert facade.x == raw.x
        assert facade.kind == "base"
        assert facade.total() == 3
        raw.x = 10
        assert facade.x == 10

    def test_missing_attribute_raises(self):
        facade = wrap(Base())
        with pytest.raises(AttributeError):
            facade.missing

    def test_reads_outside_derivations_allocate_nothing(self):
        facade = wrap(Base())
        facade.x
        facade.x = 5
        assert get_store(facade) == {}

    def test_store_only_holds_observed_keys(self):
        facade = wrap(Base())
        r = autorun(lambda: facade.x)
        assert list(get_store(facade)) == ["x"]
        r.dispose()
        assert get_store(facade) == {}

    def test_accessor_keys_are_excluded(self):
        facade = wrap(Temperature(100.0))
        log = []
        autorun(lambda: log.append(facade.fahrenheit))
        assert log == [212.0]
        assert get_store(facade)["fahrenheit"] is None
        facade.fahrenheit = 32.0
        assert log == [212.0, 32.0]


class TestWrites:
    def test_write_notifies_reader(self):
        facade = wrap(Base())
        log = []
        autorun(lambda: log.append(facade.x))
        facade.x = 1
        assert log == [0, 1]

    def test_tracking_minimality(self):
        facade = wrap(Base())
        log = []
        autorun(lambda: log.append(facade.x))
        facade.y = 5
        assert log == [0]

    def test_equal_write_is_silent(self):
        facade = wrap(Base(1, 0))
        log = []
        autorun(lambda: log.append(facade.x))
        facade.x = 1
        assert log == [1]

    def test_once_per_batch(self):
        facade = wrap(Base())
        log = []
        autorun(lambda: log.append(facade.x))
        with transaction():
            facade.x = 1
            facade.x = 2
            facade.x = 3
        assert log == [0, 3]

    def test_method_writes_through_facade(self):
        class Counter:
            def __init__(self):
                self.count = 0

            def increment(self):
                self.count += 1

        facade = wrap(Counter())
        log = []
        autorun(lambda: log.append(facade.count))
        facade.increment()
        assert log == [0, 1]

    def test_new_attribute_notifies_shape(self):
        facade = wrap(Base())
        log = []
        autorun(lambda: log.append(sorted(own_keys(facade))))
        facade.z = 1
        facade.z = 2
        assert log == [["x", "y"], ["x", "y", "z"]]

    def test_custom_comparator(self):
        facade = wrap(Base(1.0), TrackingPolicy(equals=lambda a, b: math.isclose(a, b)))
        log = []
        autorun(lambda: log.append(facade.x))
        facade.x = 1.0 + 1e-12
        assert log == [1.0]
        facade.x = 2.0
        assert log == [1.0, 2.0]

    def test_same_value_zero(self):
        assert same_value_zero(math.nan, math.nan)
        assert same_value_zero(1, 1.0)
        assert not same_value_zero(1, True)
        assert not same_value_zero([], [])
        assert same_value_zero("a", "a")

    def test_slots(self):
        facade = wrap(Slotted())
        log = []
        autorun(lambda: log.append(getattr(facade, "b", None)))
        facade.b = 2
        assert log == [None, 2]
        assert own_keys(facade) == ["a", "b"]


class TestDelete:
    def test_delete_notifies_key_and_shape(self):
        facade = wrap(Base())
        values = []
        shapes = []
        autorun(lambda: values.append(getattr(facade, "x", None)))
        autorun(lambda: shapes.append(has_attr(facade, "x")))
        del facade.x
        assert values == [0, None]
        assert shapes == [True, False]

    def test_delete_silence_on_absence(self):
        facade = wrap(Base())
        log = []
        autorun(lambda: log.append((has_attr(facade, "z"), getattr(facade, "z", None))))
        assert delete_attr(facade, "z") is False
        with pytest.raises(AttributeError):
            del facade.z
        assert log == [(False, None)]

    def test_deleting_class_attribute_is_refused(self):
        facade = wrap(Base())
        assert delete_attr(facade, "kind") is False
        assert Base.kind == "base"


class TestDefine:
    def test_define_bypasses_setattr(self):
        class Frozen:
            def __setattr__(self, key, value):
                raise AttributeError("frozen")

        facade = wrap(Frozen())
        log = []
        autorun(lambda: log.append(sorted(own_keys(facade))))
        with pytest.raises(AttributeError):
            facade.a = 1
        define_attr(facade, "a", 1)
        assert facade.a == 1
        assert log == [[], ["a"]]

    def test_define_notifies_changed_value(self):
        facade = wrap(Base())
        log = []
        autorun(lambda: log.append(facade.x))
        define_attr(facade, "x", 0)
        define_attr(facade, "x", 7)
        assert log == [0, 7]


class TestStructure:
    def test_class_swap_notifies_inherited_readers(self):
        facade = wrap(Base())
        kinds = []
        xs = []
        autorun(lambda: kinds.append(facade.kind))
        autorun(lambda: xs.append(facade.x))
        set_class(facade, Other)
        assert kinds == ["base", "other"]
        assert xs == [0]
        assert isinstance(facade, Other)

    def test_class_swap_notifies_shadowed_own_attributes(self):
        raw = Base(1)
        facade = wrap(raw)
        log = []
        autorun(lambda: log.append(facade.x))
        set_class(facade, Pinned)
        assert raw.x == 99
        assert log == [1, 99]
        set_class(facade, Base)
        assert log == [1, 99, 1]

    def test_class_swap_reruns_getter_readers(self):
        facade = wrap(Temperature(100.0))
        log = []
        autorun(lambda: log.append(facade.fahrenheit))
        set_class(facade, Uncalibrated)
        assert log == [212.0, 0.0]

    def test_class_assignment_through_facade(self):
        facade = wrap(Base())
        log = []
        autorun(lambda: log.append(get_class(facade)))
        facade.__class__ = Other
        facade.__class__ = Other
        assert log == [Base, Other]

    def test_prevent_extensions(self):
        facade = wrap(Base())
        log = []
        autorun(lambda: log.append(is_extensible(facade)))
        prevent_extensions(facade)
        prevent_extensions(facade)
        assert log == [True, False]
        facade.x = 3
        with pytest.raises(AttributeError):
            facade.z = 1
        with pytest.raises(AttributeError):
            define_attr(facade, "z", 1)

    def test_prevent_extensions_needs_facade(self):
        with pytest.raises(TypeError):
            prevent_extensions(Base())

    def test_slotted_objects_are_not_extensible(self):
        assert not is_extensible(wrap(Slotted()))

    def test_forced_notify(self):
        raw = Base()
        facade = wrap(raw)
        log = []
        autorun(lambda: log.append(facade.x))
        raw.x = 9
        assert log == [0]
        assert notify(facade, "x") is True
        assert log == [0, 9]
        assert notify(facade, Internal.SHAPE) is False
