"""
Field enumeration and type predicates for classes under verification.

Supports dataclasses, attrs classes, classes with ``__slots__`` and plain
classes with annotated attributes. Fields are reported base class first, in
declaration order.
"""
import array
import dataclasses
import functools
import inspect
import sys
import types
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Final, FrozenSet, List, Optional, Tuple, Union
from typing import Annotated, get_args, get_origin, get_type_hints

import numpy as np

from .errors import MalformedTypeError


class Modifier(Enum):
    STATIC = "static"
    FINAL = "final"
    TRANSIENT = "transient"
    PRIMITIVE = "primitive"


PRIMITIVE_DEFAULTS = {int: 0, float: 0.0, bool: False, complex: 0j}

ARRAY_TYPES = (list, array.array, np.ndarray)

_UNION_TYPES = (Union, types.UnionType)


@dataclass(frozen=True)
class Field:
    """A field of a class: its name, declared type and modifiers."""
    name: str
    type: Any
    modifiers: FrozenSet[Modifier] = frozenset()
    metadata: Tuple[Any, ...] = ()
    owner: Optional[type] = None

    @property
    def is_static(self) -> bool:
        return Modifier.STATIC in self.modifiers

    @property
    def is_final(self) -> bool:
        return Modifier.FINAL in self.modifiers

    @property
    def is_transient(self) -> bool:
        return Modifier.TRANSIENT in self.modifiers

    @property
    def is_primitive(self) -> bool:
        return Modifier.PRIMITIVE in self.modifiers

    @property
    def is_optional(self) -> bool:
        return unwrap_optional(self.type)[1]


def unwrap_optional(tp: Any) -> Tuple[Any, bool]:
    """Strip ``None`` from a union: ``Optional[int]`` -> ``(int, True)``."""
    if get_origin(tp) in _UNION_TYPES:
        args = [a for a in get_args(tp) if a is not type(None)]
        optional = len(args) != len(get_args(tp))
        if len(args) == 1:
            return args[0], optional
        return Union[tuple(args)], optional
    return tp, False


def raw_type(tp: Any) -> Any:
    """The runtime class behind an annotation, or the annotation itself."""
    tp, _ = unwrap_optional(tp)
    return get_origin(tp) or tp


def is_array_type(tp: Any) -> bool:
    origin = raw_type(tp)
    return isinstance(origin, type) and issubclass(origin, ARRAY_TYPES)


def is_array_value(value: Any) -> bool:
    return isinstance(value, ARRAY_TYPES)


def array_component(tp: Any) -> Any:
    tp, _ = unwrap_optional(tp)
    if raw_type(tp) is list:
        args = get_args(tp)
        return args[0] if args else Any
    return Any


def is_multidimensional(tp: Any, value: Any) -> bool:
    if is_array_type(array_component(tp)):
        return True
    if isinstance(value, np.ndarray):
        return value.ndim > 1
    return isinstance(value, list) and len(value) > 0 and is_array_value(value[0])


def is_float_type(tp: Any) -> bool:
    tp, _ = unwrap_optional(tp)
    return tp is float or (isinstance(tp, type) and issubclass(tp, np.floating))


def is_enum_type(tp: Any) -> bool:
    tp = raw_type(tp)
    return isinstance(tp, type) and issubclass(tp, Enum)


def is_synthetic(value: Any) -> bool:
    """Values generated by the interpreter rather than written as classes."""
    return isinstance(value, (types.FunctionType, types.MethodType, types.BuiltinFunctionType,
                              types.GeneratorType, types.ModuleType, functools.partial))


def _own_annotations(klass: type) -> Dict[str, Any]:
    return inspect.get_annotations(klass)


def _strip_annotation(tp: Any) -> Tuple[Any, Tuple[Any, ...], bool, bool]:
    """Peel Annotated, ClassVar and Final wrappers off an annotation."""
    metadata: Tuple[Any, ...] = ()
    static = final = False
    while True:
        origin = get_origin(tp)
        if origin is Annotated:
            metadata += tuple(tp.__metadata__)
            tp = get_args(tp)[0]
        elif origin is ClassVar or tp is ClassVar:
            static = True
            args = get_args(tp)
            tp = args[0] if args else Any
        elif origin is Final or tp is Final:
            final = True
            args = get_args(tp)
            tp = args[0] if args else Any
        else:
            return tp, metadata, static, final


class TypeIntrospector:
    """Enumerates the fields of a class and answers questions about its type."""

    def __init__(self):
        self._cache: Dict[type, List[Field]] = {}

    def fields(self, cls: type) -> List[Field]:
        if cls not in self._cache:
            self._cache[cls] = self._collect(cls)
        return self._cache[cls]

    def instance_fields(self, cls: type) -> List[Field]:
        return [f for f in self.fields(cls) if not f.is_static]

    def field_named(self, cls: type, name: str) -> Optional[Field]:
        for f in self.fields(cls):
            if f.name == name:
                return f
        return None

    def has_custom_equality(self, cls: Any) -> bool:
        cls = raw_type(cls)
        if not isinstance(cls, type):
            return False
        return getattr(cls, "__eq__", object.__eq__) is not object.__eq__

    def is_hashable(self, cls: type) -> bool:
        return getattr(cls, "__hash__", None) is not None

    def is_introspectable(self, cls: Any) -> bool:
        """Whether instances can be built field by field."""
        if not isinstance(cls, type) or cls.__module__.partition(".")[0] in sys.stdlib_module_names:
            return False
        if issubclass(cls, (Enum, tuple, np.generic)) or issubclass(cls, ARRAY_TYPES):
            return False
        if dataclasses.is_dataclass(cls) or hasattr(cls, "__attrs_attrs__"):
            return True
        return any(_own_annotations(k) for k in cls.__mro__ if k is not object)

    def _type_hints(self, cls: type) -> Dict[str, Any]:
        try:
            return get_type_hints(cls, include_extras=True)
        except Exception as e:
            raise MalformedTypeError(f"Cannot resolve annotations of {cls.__qualname__}: {e}") from e

    def _collect(self, cls: type) -> List[Field]:
        hints = self._type_hints(cls)
        dataclass_fields = {f.name: f for f in dataclasses.fields(cls)} if dataclasses.is_dataclass(cls) else {}
        attrs_fields = {a.name: a for a in getattr(cls, "__attrs_attrs__", ())}
        frozen = self._is_frozen(cls)
        kw_only = getattr(dataclasses, "KW_ONLY", None)

        names = [name for name, tp in hints.items()
                 if not isinstance(tp, dataclasses.InitVar) and tp is not dataclasses.InitVar
                 and (kw_only is None or tp is not kw_only)]
        for klass in reversed(cls.__mro__):
            slots = klass.__dict__.get("__slots__", ())
            if isinstance(slots, str):
                slots = (slots,)
            for name in slots:
                if name not in names and name not in ("__dict__", "__weakref__"):
                    names.append(name)

        result = []
        for name in names:
            tp, metadata, static, final = _strip_annotation(hints.get(name, Any))
            modifiers = set()
            if static:
                modifiers.add(Modifier.STATIC)
            if final or (frozen and not static):
                modifiers.add(Modifier.FINAL)
            if tp in PRIMITIVE_DEFAULTS:
                modifiers.add(Modifier.PRIMITIVE)
            field_metadata = {}
            if name in dataclass_fields:
                field_metadata = dataclass_fields[name].metadata
            elif name in attrs_fields:
                field_metadata = attrs_fields[name].metadata
            if field_metadata.get("transient"):
                modifiers.add(Modifier.TRANSIENT)
            result.append(Field(name=name, type=tp, modifiers=frozenset(modifiers),
                                metadata=metadata, owner=self._owner(cls, name)))

        # Dataclasses and attrs classes may legitimately have no fields
        if not result and self.has_custom_equality(cls) and not (
                dataclasses.is_dataclass(cls) or hasattr(cls, "__attrs_attrs__")):
            raise MalformedTypeError(
                f"{cls.__qualname__} declares no fields: annotate the attributes its __eq__ compares, "
                f"or declare __slots__")
        return result

    def _is_frozen(self, cls: type) -> bool:
        params = getattr(cls, "__dataclass_params__", None)
        if params is not None and params.frozen:
            return True
        setattr_impl = cls.__dict__.get("__setattr__")
        return getattr(setattr_impl, "__name__", "") == "_frozen_setattrs"

    def _owner(self, cls: type, name: str) -> type:
        for klass in cls.__mro__:
            if name in _own_annotations(klass) or name in klass.__dict__.get("__slots__", ()):
                return klass
        return cls
