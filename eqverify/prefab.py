"""
Sample values ("red" and "black") for every type a class under test uses.

Each type gets exactly two distinct, non-None values. Values are created on
first use and cached per type, so every check that asks for the samples of a
field type receives the same objects. Classes are built recursively, field by
field; values for types that cannot be synthesized are registered up front.
"""
import array
import collections.abc
import datetime
import types
import uuid
from decimal import Decimal
from fractions import Fraction
from typing import Annotated, Any, Dict, List, Literal, Tuple, Union, get_args, get_origin

import numpy as np

from .accessor import ObjectAccessor
from .errors import MalformedTypeError
from .introspection import TypeIntrospector, is_enum_type, unwrap_optional

SCALAR_SAMPLES = {
    int: (1, 2),
    bool: (True, False),
    float: (0.5, 1.5),
    complex: (1j, 2j),
    str: ("one", "two"),
    bytes: (b"one", b"two"),
    Decimal: (Decimal("1.5"), Decimal("2.5")),
    Fraction: (Fraction(1, 2), Fraction(1, 3)),
    datetime.date: (datetime.date(2020, 1, 1), datetime.date(2021, 6, 15)),
    datetime.datetime: (datetime.datetime(2020, 1, 1, 12, 0), datetime.datetime(2021, 6, 15, 18, 30)),
    datetime.time: (datetime.time(12, 0), datetime.time(18, 30)),
    datetime.timedelta: (datetime.timedelta(seconds=1), datetime.timedelta(days=2)),
    uuid.UUID: (uuid.UUID(int=1), uuid.UUID(int=2)),
}

# Abstract collection annotations and the concrete class used to fill them
ABSTRACT_COLLECTIONS = {
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
}


class PrefabValues:
    def __init__(self, introspector: TypeIntrospector = None, accessor: ObjectAccessor = None):
        self.introspector = introspector or TypeIntrospector()
        self.accessor = accessor or ObjectAccessor(self.introspector)
        self._cache: Dict[Any, Tuple[Any, Any]] = {}
        self._in_progress: List[type] = []

    def register(self, tp: Any, red: Any, black: Any):
        """Use ``red`` and ``black`` as the samples for ``tp``."""
        if red is None or black is None:
            raise ValueError(f"Prefab values for {_name(tp)} must not be None")
        if red is black or _plainly_equal(red, black):
            raise ValueError(f"Prefab values for {_name(tp)} must not be equal: {red!r}")
        self._cache[tp] = (red, black)

    def contains(self, tp: Any) -> bool:
        return tp in self._cache

    def sample(self, tp: Any) -> Tuple[Any, Any]:
        if tp in self._cache:
            return self._cache[tp]
        try:
            values = self._create(tp)
        except MalformedTypeError:
            raise
        except Exception as e:
            raise MalformedTypeError(f"Cannot create sample values for {_name(tp)}: {e}") from e
        self._cache[tp] = values
        return values

    def red(self, tp: Any) -> Any:
        return self.sample(tp)[0]

    def black(self, tp: Any) -> Any:
        return self.sample(tp)[1]

    def red_object(self, cls: type) -> Any:
        """A new instance of ``cls`` with every field set to its red sample."""
        return self._build(cls, 0)

    def black_object(self, cls: type) -> Any:
        return self._build(cls, 1)

    def _build(self, cls: type, pick: int) -> Any:
        if cls in self._in_progress:
            chain = ", ".join(_name(c) for c in self._in_progress)
            raise MalformedTypeError(
                "Recursive datastructure.\n"
                f"Add prefab values for one of the following types: {chain}")
        self._in_progress.append(cls)
        try:
            instance = self.accessor.instantiate(cls)
            for field in self.introspector.instance_fields(cls):
                self.accessor.set(instance, field, self.sample(field.type)[pick])
            return instance
        finally:
            self._in_progress.pop()

    def _create(self, tp: Any) -> Tuple[Any, Any]:
        if tp is Any or tp is object:
            return object(), object()
        if get_origin(tp) is Annotated:
            return self.sample(get_args(tp)[0])
        inner, optional = unwrap_optional(tp)
        if optional:
            return self.sample(inner)

        origin = get_origin(tp)
        args = get_args(tp)
        if origin in (Union, types.UnionType):
            return self.sample(args[0])
        if origin is Literal:
            if len(args) < 2:
                raise MalformedTypeError(f"{tp} has fewer than two values")
            return args[0], args[1]
        if tp in SCALAR_SAMPLES:
            return SCALAR_SAMPLES[tp]

        container = ABSTRACT_COLLECTIONS.get(origin or tp, origin or tp)
        if container in (list, set, frozenset):
            red, black = self.sample(args[0] if args else Any)
            return container([red]), container([black])
        if container is tuple:
            if not args:
                args = (Any,)
            if len(args) == 2 and args[1] is Ellipsis:
                args = args[:1]
            pairs = [self.sample(a) for a in args]
            return tuple(p[0] for p in pairs), tuple(p[1] for p in pairs)
        if container is dict:
            key_type, value_type = args if args else (Any, Any)
            keys, values = self.sample(key_type), self.sample(value_type)
            return {keys[0]: values[0]}, {keys[1]: values[1]}
        if container is bytearray:
            return bytearray(b"one"), bytearray(b"two")
        if container is array.array:
            return array.array("i", [1]), array.array("i", [2])
        if container is np.ndarray:
            dtype = self._ndarray_dtype(args)
            return np.array([1], dtype=dtype), np.array([2], dtype=dtype)
        if container is collections.abc.Callable:
            return _red_callable, _black_callable
        if is_enum_type(tp):
            members = list(tp)
            if len(members) < 2:
                raise MalformedTypeError(
                    f"Enum {_name(tp)} has fewer than two members; register prefab values for it")
            return members[0], members[1]
        if isinstance(tp, type) and issubclass(tp, np.generic):
            return tp(1), tp(2)
        if self.introspector.is_introspectable(tp):
            return self._build(tp, 0), self._build(tp, 1)
        raise MalformedTypeError(
            f"Cannot create sample values for {_name(tp)}; register prefab values for it")

    def _ndarray_dtype(self, args):
        # NDArray[np.float64] is ndarray[Any, dtype[np.float64]]
        if len(args) == 2:
            dtype_args = get_args(args[1])
            if dtype_args and isinstance(dtype_args[0], type):
                return dtype_args[0]
        return np.int64


def _red_callable():
    return "red"


def _black_callable():
    return "black"


def _plainly_equal(a: Any, b: Any) -> bool:
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return isinstance(a, np.ndarray) and isinstance(b, np.ndarray) and np.array_equal(a, b)
    return type(a) is type(b) and a == b


def _name(tp: Any) -> str:
    return getattr(tp, "__qualname__", None) or repr(tp)
