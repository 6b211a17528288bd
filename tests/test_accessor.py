"""
Tests for reading and writing fields of instances under verification.
"""
from dataclasses import dataclass

import pytest

from eqverify import MalformedTypeError
from eqverify.accessor import ObjectAccessor
from eqverify.introspection import Field


class Slotted:
    __slots__ = ("x",)


@dataclass
class Plain:
    x: int


class Guarded:
    @property
    def x(self):
        raise AttributeError("x is computed from a missing source")


def test_unset_slot_reads_as_none():
    accessor = ObjectAccessor()
    assert accessor.get(accessor.instantiate(Slotted), Field("x", int)) is None


def test_unset_attribute_reads_as_none():
    accessor = ObjectAccessor()
    assert accessor.get(accessor.instantiate(Plain), Field("x", int)) is None


def test_attribute_error_from_property_is_malformed():
    accessor = ObjectAccessor()
    with pytest.raises(MalformedTypeError, match="Cannot read field x of Guarded"):
        accessor.get(accessor.instantiate(Guarded), Field("x", int))


def test_copy_shares_field_values():
    accessor = ObjectAccessor()
    original = Plain([1])
    copied = accessor.copy(original)
    assert copied is not original
    assert copied.x is original.x
