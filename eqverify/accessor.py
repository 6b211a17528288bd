"""
Instance creation and field access for classes under verification.

Instances are created with ``cls.__new__`` so constructors and
``__post_init__`` validation never run, and fields are written with
``object.__setattr__`` so frozen dataclasses and slotted classes can be
modified like any other.
"""
import copy
import inspect
import types
from typing import Any, Optional

from .errors import MalformedTypeError
from .introspection import Field, TypeIntrospector, PRIMITIVE_DEFAULTS

_SCALARS = (int, float, complex, bool, str, bytes)


class ObjectAccessor:
    def __init__(self, introspector: Optional[TypeIntrospector] = None):
        self.introspector = introspector or TypeIntrospector()

    def instantiate(self, cls: type) -> Any:
        try:
            return cls.__new__(cls)
        except Exception as e:
            raise MalformedTypeError(f"Cannot instantiate {cls.__qualname__}: {e}") from e

    def get(self, instance: Any, field: Field) -> Any:
        target = type(instance) if field.is_static else instance
        try:
            return getattr(target, field.name)
        except AttributeError as e:
            if _is_unset(instance, field.name):
                return None
            raise MalformedTypeError(
                f"Cannot read field {field.name} of {type(instance).__qualname__}: {e}") from e

    def set(self, instance: Any, field: Field, value: Any):
        if field.is_static:
            raise MalformedTypeError(
                f"Static field {field.name} of {type(instance).__qualname__} cannot be modified")
        try:
            object.__setattr__(instance, field.name, value)
        except (AttributeError, TypeError) as e:
            raise MalformedTypeError(
                f"Cannot set field {field.name} of {type(instance).__qualname__}: {e}") from e

    def copy(self, instance: Any) -> Any:
        """A new instance holding the same field values (not copies of them)."""
        cls = type(instance)
        result = self.instantiate(cls)
        if hasattr(instance, "__dict__"):
            for name, value in vars(instance).items():
                object.__setattr__(result, name, value)
        for field in self.introspector.instance_fields(cls):
            self.set(result, field, self.get(instance, field))
        return result

    def clone_value(self, value: Any) -> Any:
        """A distinct object with the same content as ``value``, where possible."""
        if self.introspector.is_introspectable(type(value)):
            return self.copy(value)
        return copy.copy(value)

    def field_accessor(self, instance: Any, field: Field) -> "FieldAccessor":
        return FieldAccessor(self, instance, field)


class FieldAccessor:
    """A view on one field of one instance."""

    def __init__(self, accessor: ObjectAccessor, instance: Any, field: Field):
        self.accessor = accessor
        self.instance = instance
        self.field = field

    @property
    def object(self) -> Any:
        return self.instance

    @property
    def field_name(self) -> str:
        return self.field.name

    @property
    def field_type(self) -> Any:
        return self.field.type

    @property
    def is_static(self) -> bool:
        return self.field.is_static

    @property
    def is_final(self) -> bool:
        return self.field.is_final

    @property
    def is_transient(self) -> bool:
        return self.field.is_transient

    @property
    def is_primitive(self) -> bool:
        return self.field.is_primitive

    def can_be_modified(self) -> bool:
        # Class attributes are shared with every other instance of the type
        return not self.field.is_static

    def get(self) -> Any:
        return self.accessor.get(self.instance, self.field)

    def set(self, value: Any):
        self.accessor.set(self.instance, self.field, value)

    def change_field(self, prefab):
        """Switch the field to the other of its two sample values."""
        if not self.can_be_modified():
            return
        red, black = prefab.sample(self.field.type)
        self.set(black if _is_same(self.get(), red) else red)

    def default_field(self):
        """Reset the field to None, or to zero for primitive fields."""
        if not self.can_be_modified():
            return
        self.set(PRIMITIVE_DEFAULTS.get(self.field.type) if self.is_primitive else None)

    def __repr__(self):
        return f"FieldAccessor({type(self.instance).__qualname__}.{self.field.name})"


def _is_same(value: Any, sample: Any) -> bool:
    if value is sample:
        return True
    return type(value) is type(sample) and isinstance(sample, _SCALARS) and value == sample


def _is_unset(instance: Any, name: str) -> bool:
    """Whether ``name`` is a slot or plain attribute that was never assigned."""
    descriptor = inspect.getattr_static(type(instance), name, None)
    if isinstance(descriptor, types.MemberDescriptorType):
        return True
    return descriptor is None and name not in getattr(instance, "__dict__", {})
