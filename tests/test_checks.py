"""
Tests for the individual field checks.
"""
import array
from dataclasses import dataclass
from typing import Annotated, ClassVar, Dict

import numpy as np
import pytest

from eqverify import CheckKind, Configuration, ContractViolation, Marker, PrefabValues, Rule, verify, violations
from eqverify.checks import (ArrayFieldCheck, CheckContext, FloatAndDoubleFieldCheck, ReflexivityFieldCheck,
                             SymmetryFieldCheck, TransientFieldsCheck, TransitivityFieldCheck, array_copy)
from eqverify.markers import MarkerInspector


def context_for(cls, configuration=None):
    prefab = PrefabValues()
    return CheckContext(cls=cls, configuration=configuration or Configuration(), prefab=prefab,
                        accessor=prefab.accessor, introspector=prefab.introspector,
                        markers=MarkerInspector())


def run_check(check_class, cls, field_name, configuration=None):
    context = context_for(cls, configuration)
    field = context.introspector.field_named(cls, field_name)
    reference = context.accessor.field_accessor(context.prefab.red_object(cls), field)
    changed = context.accessor.field_accessor(context.prefab.red_object(cls), field)
    check_class(context).execute(reference, changed)
    return reference, changed


def test_array_copy_list():
    original = [7, 8]
    copy = array_copy(original)
    assert copy == [7]
    assert copy is not original


def test_array_copy_nested_list():
    original = [[1, 2], [3]]
    copy = array_copy(original)
    assert copy == [[1]]
    assert copy[0] is not original[0]


def test_array_copy_ndarray_keeps_dimensions():
    original = np.arange(6, dtype=np.int32).reshape(2, 3)
    copy = array_copy(original)
    assert copy.shape == (1, 1)
    assert copy.dtype == np.int32
    assert copy[0, 0] == 0


def test_array_copy_stdlib_array():
    copy = array_copy(array.array("d", [1.5, 2.5]))
    assert copy == array.array("d", [1.5])


@dataclass(frozen=True, eq=False)
class Samples:
    values: np.ndarray

    def __eq__(self, other):
        return isinstance(other, Samples) and self.values is other.values

    def __hash__(self):
        return 0


def test_array_check_on_ndarray_identity():
    with pytest.raises(ContractViolation) as info:
        run_check(ArrayFieldCheck, Samples, "values")
    assert info.value.kind == CheckKind.ARRAY
    assert info.value.field_name == "values"


@dataclass(frozen=True, eq=False)
class Reading:
    level: np.float32

    def __eq__(self, other):
        return isinstance(other, Reading) and self.level == other.level

    def __hash__(self):
        return 0


def test_float_check_on_numpy_float():
    with pytest.raises(ContractViolation, match="numpy float32"):
        run_check(FloatAndDoubleFieldCheck, Reading, "level")


@dataclass(frozen=True)
class Measured:
    value: float


def test_float_check_sets_nan_on_both_sides():
    reference, changed = run_check(FloatAndDoubleFieldCheck, Measured, "value")
    assert reference.get() != reference.get()
    assert changed.get() is reference.get()


@dataclass(frozen=True, eq=False)
class Lenient:
    x: int

    def __eq__(self, other):
        return isinstance(other, Lenient) and self.x <= other.x

    def __hash__(self):
        return 0


def test_symmetry_check():
    with pytest.raises(ContractViolation, match="Symmetry: objects are not symmetric"):
        run_check(SymmetryFieldCheck, Lenient, "x")


@dataclass(frozen=True, eq=False)
class EitherField:
    a: int
    b: int

    def __eq__(self, other):
        return isinstance(other, EitherField) and (self.a == other.a or self.b == other.b)

    def __hash__(self):
        return 0


def test_transitivity_check():
    with pytest.raises(ContractViolation) as info:
        run_check(TransitivityFieldCheck, EitherField, "a")
    assert len(info.value.values) == 3


@dataclass(frozen=True)
class Cached:
    key: str
    memo: Annotated[str, Marker.TRANSIENT]


def test_transient_marker_in_annotation():
    with pytest.raises(ContractViolation, match="Transient field memo"):
        run_check(TransientFieldsCheck, Cached, "memo")


@dataclass(frozen=True, eq=False)
class Config:
    options: Dict[str, int]

    def __eq__(self, other):
        return isinstance(other, Config) and self.options is other.options

    def __hash__(self):
        return 0


def test_value_reflexivity_catches_identity_comparison():
    with pytest.raises(ContractViolation, match="identity comparison used instead of == on field: options"):
        run_check(ReflexivityFieldCheck, Config, "options")


def test_value_reflexivity_suppressed():
    configuration = Configuration(suppressed_rules=frozenset({Rule.REFERENCE_EQUALITY, Rule.NULL_FIELDS}))
    run_check(ReflexivityFieldCheck, Config, "options", configuration)


@dataclass(frozen=True, eq=False)
class NeverEqual:
    x: int

    def __eq__(self, other):
        return False

    def __hash__(self):
        return 0


def test_identical_copy_suppression():
    with pytest.raises(ContractViolation, match="does not equal an identical copy"):
        run_check(ReflexivityFieldCheck, NeverEqual, "x")

    configuration = Configuration(suppressed_rules=frozenset({Rule.IDENTICAL_COPY}))
    run_check(ReflexivityFieldCheck, NeverEqual, "x", configuration)


@dataclass(frozen=True)
class Plain:
    x: int


def test_unnecessary_identical_copy_suppression():
    configuration = Configuration(suppressed_rules=frozenset({Rule.IDENTICAL_COPY}))
    with pytest.raises(ContractViolation, match="Unnecessary suppression: IDENTICAL_COPY"):
        run_check(ReflexivityFieldCheck, Plain, "x", configuration)


def test_versioned_entity_suppression_skips_reflexivity():
    configuration = Configuration(suppressed_rules=frozenset({Rule.IDENTICAL_COPY_FOR_VERSIONED_ENTITY}))
    run_check(ReflexivityFieldCheck, NeverEqual, "x", configuration)


@dataclass(frozen=True)
class WithConstant:
    VERSION: ClassVar[int] = 3
    x: int


def test_static_fields_are_left_alone():
    assert violations(verify(WithConstant)) == []
    assert WithConstant.VERSION == 3
