"""
Tests for sample value synthesis.
"""
import datetime
import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, FrozenSet, List, Literal, Mapping, Optional, Sequence, Set, Tuple

import numpy as np
import numpy.typing as npt
import pytest
from hypothesis import given, strategies as st

from eqverify import MalformedTypeError, PrefabValues


class Color(enum.Enum):
    RED = 1
    GREEN = 2
    BLUE = 3


@dataclass(frozen=True)
class Inner:
    label: str
    weight: float


@dataclass(frozen=True)
class Outer:
    inner: Inner
    tags: FrozenSet[str]


SUPPORTED_TYPES = [
    int, bool, float, complex, str, bytes, bytearray, Decimal,
    datetime.date, datetime.datetime, datetime.timedelta,
    List[int], List[List[str]], Set[int], FrozenSet[str], Dict[str, int], Mapping[str, float],
    Sequence[int], Tuple[int, str], Tuple[int, ...], tuple, list, dict,
    Optional[int], Literal["a", "b"], Color, np.int32, Inner, Outer, Any,
]


@given(st.sampled_from(SUPPORTED_TYPES))
def test_red_and_black_are_distinct_and_not_none(tp):
    prefab = PrefabValues()
    red, black = prefab.sample(tp)
    assert red is not None and black is not None
    assert red is not black
    assert not bool(red == black)


def test_samples_are_cached():
    prefab = PrefabValues()
    assert prefab.sample(List[int]) is prefab.sample(List[int])
    assert prefab.red(Inner) is prefab.red(Inner)


def test_nested_classes_are_built_field_by_field():
    prefab = PrefabValues()
    red = prefab.red(Outer)
    assert red.inner == Inner("one", 0.5)
    assert red.tags == frozenset({"one"})
    assert prefab.black(Outer).inner == Inner("two", 1.5)


def test_red_object_is_fresh_each_time():
    prefab = PrefabValues()
    first = prefab.red_object(Inner)
    second = prefab.red_object(Inner)
    assert first is not second
    assert first == second


def test_ndarray_dtype_from_annotation():
    red, black = PrefabValues().sample(npt.NDArray[np.float32])
    assert red.dtype == np.float32
    assert red.shape == (1,)
    assert not np.array_equal(red, black)


def test_callables():
    red, black = PrefabValues().sample(Callable[[], str])
    assert red() != black()


def test_register_overrides_synthesis():
    prefab = PrefabValues()
    prefab.register(str, "left", "right")
    assert prefab.sample(str) == ("left", "right")
    assert prefab.red(Inner).label == "left"


def test_register_rejects_equal_or_none():
    prefab = PrefabValues()
    with pytest.raises(ValueError, match="must not be equal"):
        prefab.register(int, 3, 3)
    with pytest.raises(ValueError, match="must not be None"):
        prefab.register(int, None, 3)
    with pytest.raises(ValueError, match="must not be equal"):
        prefab.register(np.ndarray, np.array([1]), np.array([1]))


class Opaque:
    def __init__(self, handle):
        self.handle = handle


def test_unsupported_type_is_malformed():
    with pytest.raises(MalformedTypeError, match="register prefab values"):
        PrefabValues().sample(Opaque)


@dataclass(frozen=True)
class Link:
    value: int
    next: Optional["Link"]


def test_registered_values_break_recursion():
    prefab = PrefabValues()
    with pytest.raises(MalformedTypeError, match="Recursive datastructure"):
        prefab.red_object(Link)

    prefab = PrefabValues()
    tail_red = object.__new__(Link)
    tail_black = object.__new__(Link)
    object.__setattr__(tail_red, "value", 10)
    object.__setattr__(tail_red, "next", None)
    object.__setattr__(tail_black, "value", 20)
    object.__setattr__(tail_black, "next", None)
    prefab.register(Optional[Link], tail_red, tail_black)
    assert prefab.red_object(Link).next is tail_red
