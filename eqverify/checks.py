"""
The field checks: one law of the equality contract each.

Every check receives two FieldAccessors positioned at the same field of two
freshly built instances ("reference" and "changed") whose fields start out
with identical content. A check mutates the instances through the accessors,
evaluates ``==`` and ``hash()`` on them, and raises ContractViolation when
the law does not hold.
"""
import array
import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from .accessor import FieldAccessor, ObjectAccessor
from .config import Configuration, Rule
from .errors import ContractViolation, EqVerifyError, EvaluationError, MalformedTypeError
from .formatter import Formatter
from .introspection import (Field, TypeIntrospector, is_array_type, is_enum_type, is_float_type,
                            is_multidimensional, is_synthetic, raw_type, unwrap_optional)
from .markers import Marker, MarkerInspector
from .prefab import PrefabValues
from .results import CheckKind


@dataclass
class CheckContext:
    """Everything the checks share while verifying one class."""
    cls: type
    configuration: Configuration
    prefab: PrefabValues
    accessor: ObjectAccessor
    introspector: TypeIntrospector
    markers: MarkerInspector

    @property
    def hashable(self) -> bool:
        return self.introspector.is_hashable(self.cls)

    def is_suppressed(self, rule: Rule) -> bool:
        return self.configuration.is_suppressed(rule)

    def is_cached_hash_field(self, accessor: FieldAccessor) -> bool:
        return accessor.field_name == self.configuration.cached_hash_field_name

    def hash_of(self, instance: Any) -> int:
        try:
            return self.configuration.cached_hash.hash_of(instance)
        except EqVerifyError:
            raise
        except Exception as e:
            raise EvaluationError("hash", e) from e

    def field_is_nonnull(self, field: Field) -> bool:
        if self.markers.has_field_marker(field, Marker.NONNULL):
            return True
        return self.markers.has_type_marker(self.cls, Marker.NONNULL) and not field.is_optional


class FieldCheck:
    kind: CheckKind

    def __init__(self, context: CheckContext):
        self.context = context
        self.prefab = context.prefab

    def execute(self, reference: FieldAccessor, changed: FieldAccessor):
        raise NotImplementedError

    def fail(self, formatter: Formatter, field_name: str, *values: Any):
        raise ContractViolation(formatter.format(), kind=self.kind, field_name=field_name, values=values)

    def assert_true(self, formatter: Formatter, field_name: str, condition: bool, *values: Any):
        if not condition:
            self.fail(formatter, field_name, *values)

    def assert_false(self, formatter: Formatter, field_name: str, condition: bool, *values: Any):
        if condition:
            self.fail(formatter, field_name, *values)

    def assert_equal(self, formatter: Formatter, field_name: str, expected: Any, actual: Any):
        self.assert_true(formatter, field_name, equals(expected, actual), expected, actual)

    def hash_changed(self, reference: Any, changed: Any, equals_changed: bool) -> bool:
        if not self.context.hashable:
            return equals_changed
        return self.context.hash_of(reference) != self.context.hash_of(changed)


def equals(left: Any, right: Any) -> bool:
    try:
        return bool(left == right)
    except Exception as e:
        raise EvaluationError("equality", e) from e


class ArrayFieldCheck(FieldCheck):
    kind = CheckKind.ARRAY

    def execute(self, reference, changed):
        field_type = reference.field_type
        if not is_array_type(field_type):
            return
        if not reference.can_be_modified():
            return
        value = changed.get()
        if value is None:
            return

        field_name = reference.field_name
        left = reference.object
        right = changed.object
        changed.set(array_copy(value))

        if is_multidimensional(field_type, value):
            self._assert_deep(field_name, left, right)
        else:
            self._assert_array(field_name, left, right)

    def _assert_deep(self, field_name, left, right):
        self.assert_equal(Formatter.of("Multidimensional array: identity or shallow comparison used "
                                       "instead of deep element-wise comparison for field %%.", field_name),
                          field_name, left, right)
        if self.context.hashable:
            self.assert_true(Formatter.of("Multidimensional array: identity-based or shallow hash used "
                                          "instead of deep element-wise hash for field %%.", field_name),
                             field_name, self.context.hash_of(left) == self.context.hash_of(right), left, right)

    def _assert_array(self, field_name, left, right):
        self.assert_equal(Formatter.of("Array: identity comparison used instead of element-wise "
                                       "comparison for field %%.", field_name),
                          field_name, left, right)
        if self.context.hashable:
            self.assert_true(Formatter.of("Array: identity-based hash used instead of element-wise "
                                          "hash for field %%.", field_name),
                             field_name, self.context.hash_of(left) == self.context.hash_of(right), left, right)


def array_copy(value: Any) -> Any:
    """A new array, one element per dimension, holding the same innermost value."""
    if isinstance(value, np.ndarray):
        if value.size == 0:
            return value.copy()
        return np.full((1,) * value.ndim, value.flat[0], dtype=value.dtype)
    if isinstance(value, array.array):
        return array.array(value.typecode, value[:1])
    if isinstance(value, list):
        if not value:
            return []
        head = value[0]
        if isinstance(head, (list, array.array, np.ndarray)):
            return [array_copy(head)]
        return [head]
    raise MalformedTypeError(f"Sample value for an array field is not an array: {type(value).__qualname__}")


class FloatAndDoubleFieldCheck(FieldCheck):
    kind = CheckKind.FLOAT

    def execute(self, reference, changed):
        field_type = reference.field_type
        if not is_float_type(field_type) or not reference.can_be_modified():
            return
        float_type, _ = unwrap_optional(field_type)
        if float_type is float:
            nan = math.nan
            label = "Float"
        else:
            nan = float_type("nan")
            label = f"numpy {float_type.__name__}"

        reference.set(nan)
        changed.set(nan)
        self.assert_equal(Formatter.of("%%: equals compares field %% with ==, so NaN is never equal "
                                       "to itself. Compare with math.isnan or via tuples.",
                                       label, reference.field_name),
                          reference.field_name, reference.object, changed.object)


class ReflexivityFieldCheck(FieldCheck):
    kind = CheckKind.REFLEXIVITY

    def execute(self, reference, changed):
        if self.context.is_suppressed(Rule.IDENTICAL_COPY_FOR_VERSIONED_ENTITY):
            return

        self._check_reference_reflexivity(reference, changed)
        self._check_value_reflexivity(reference, changed)
        self._check_null_reflexivity(reference, changed)

    def _check_reference_reflexivity(self, reference, changed):
        reference.change_field(self.prefab)
        changed.change_field(self.prefab)
        self._check_reflexivity_for(reference, changed)

    def _check_value_reflexivity(self, reference, changed):
        if self.context.is_suppressed(Rule.REFERENCE_EQUALITY):
            return
        field_type, _ = unwrap_optional(changed.field_type)
        if changed.is_primitive or is_enum_type(field_type) or is_array_type(field_type):
            return
        if changed.is_static and changed.is_final:
            return
        if raw_type(field_type) in (Any, object) or not self.context.introspector.has_custom_equality(field_type):
            return

        value = changed.get()
        if value is None or is_synthetic(value):
            return
        copy = self.context.accessor.clone_value(value)
        if copy is value:
            # Nothing distinct to compare against, e.g. interned strings
            return
        changed.set(copy)

        f = Formatter.of("Reflexivity: identity comparison used instead of == on field: %%"
                         "\nIf this is intentional, consider suppressing Rule.%%",
                         changed.field_name, Rule.REFERENCE_EQUALITY.name)
        self.assert_equal(f, changed.field_name, reference.object, changed.object)

    def _check_null_reflexivity(self, reference, changed):
        is_nonnull = self.context.field_is_nonnull(reference.field)
        ignore_null = is_nonnull or self.context.is_suppressed(Rule.NULL_FIELDS)
        if reference.is_primitive or not ignore_null:
            reference.default_field()
            changed.default_field()
            self._check_reflexivity_for(reference, changed)

    def _check_reflexivity_for(self, reference, changed):
        left = reference.object
        right = changed.object

        if self.context.is_suppressed(Rule.IDENTICAL_COPY):
            self.assert_false(Formatter.of("Unnecessary suppression: %%. Two identical copies are equal.",
                                           Rule.IDENTICAL_COPY.name),
                              reference.field_name, equals(left, right), left, right)
        else:
            f = Formatter.of("Reflexivity: object does not equal an identical copy of itself:\n  %%"
                             "\nIf this is intentional, consider suppressing Rule.%%",
                             left, Rule.IDENTICAL_COPY.name)
            self.assert_equal(f, reference.field_name, left, right)


class MutableStateFieldCheck(FieldCheck):
    kind = CheckKind.MUTABILITY

    def execute(self, reference, changed):
        if self.context.is_cached_hash_field(reference):
            return

        left = reference.object
        right = changed.object

        changed.change_field(self.prefab)

        equals_changed = not equals(left, right)
        if equals_changed and not reference.is_final:
            self.fail(Formatter.of("Mutability: equals depends on mutable field %%.", reference.field_name),
                      reference.field_name, left, right)

        reference.change_field(self.prefab)


class TransientFieldsCheck(FieldCheck):
    kind = CheckKind.TRANSIENT

    def execute(self, reference, changed):
        left = reference.object
        right = changed.object

        changed.change_field(self.prefab)

        equals_changed = not equals(left, right)
        field_is_transient = (reference.is_transient or
                              self.context.markers.has_field_marker(reference.field, Marker.TRANSIENT))

        if equals_changed and field_is_transient:
            self.fail(Formatter.of("Transient field %% should not be included in equals/hash contract.",
                                   reference.field_name),
                      reference.field_name, left, right)

        reference.change_field(self.prefab)


class SignificantFieldCheck(FieldCheck):
    kind = CheckKind.SIGNIFICANT_FIELDS

    def execute(self, reference, changed):
        if self.context.is_cached_hash_field(reference):
            return

        left = reference.object
        right = changed.object
        field_name = reference.field_name
        configuration = self.context.configuration

        equal_to_itself = equals(left, right)

        changed.change_field(self.prefab)

        equals_changed = not equals(left, right)
        hash_changed = self.hash_changed(left, right, equals_changed)

        if equals_changed != hash_changed:
            self.assert_false(Formatter.of("Significant fields: equals relies on %%, but hash does not.",
                                           field_name),
                              field_name, equals_changed, left, right)
            self.assert_false(Formatter.of("Significant fields: hash relies on %%, but equals does not.",
                                           field_name),
                              field_name, hash_changed, left, right)

        if configuration.all_fields_used and not reference.is_static and not reference.is_transient:
            self.assert_true(Formatter.of("Significant fields: equals does not use %%, or it is stateless.",
                                          field_name),
                             field_name, equal_to_itself, left, right)

            should_be_used = field_name not in configuration.all_fields_used_exceptions
            self.assert_true(Formatter.of("Significant fields: equals does not use %%.", field_name),
                             field_name, not should_be_used or equals_changed, left, right)
            self.assert_true(Formatter.of("Significant fields: equals should not use %%, but it does.",
                                          field_name),
                             field_name, should_be_used or not equals_changed, left, right)

        reference.change_field(self.prefab)


class SymmetryFieldCheck(FieldCheck):
    kind = CheckKind.SYMMETRY

    def execute(self, reference, changed):
        self._check_symmetry(reference, changed)

        changed.change_field(self.prefab)
        self._check_symmetry(reference, changed)

        reference.change_field(self.prefab)
        self._check_symmetry(reference, changed)

    def _check_symmetry(self, reference, changed):
        left = reference.object
        right = changed.object
        self.assert_true(Formatter.of("Symmetry: objects are not symmetric:\n  %%\nand\n  %%", left, right),
                         reference.field_name, equals(left, right) == equals(right, left), left, right)


class TransitivityFieldCheck(FieldCheck):
    kind = CheckKind.TRANSITIVITY

    def execute(self, reference, changed):
        a1 = reference.object
        b1 = self._build_b1(changed)
        b2 = self._build_b2(a1, reference.field)

        x = equals(a1, b1)
        y = equals(b1, b2)
        z = equals(a1, b2)

        if [x, y, z].count(False) == 1:
            self.fail(Formatter.of("Transitivity: two of these three instances are equal to each other, "
                                   "so the third one should be, too:\n-  %%\n-  %%\n-  %%", a1, b1, b2),
                      reference.field_name, a1, b1, b2)

    def _build_b1(self, accessor):
        accessor.change_field(self.prefab)
        return accessor.object

    def _build_b2(self, a1, reference_field):
        accessor = self.context.accessor
        result = accessor.copy(a1)
        accessor.field_accessor(result, reference_field).change_field(self.prefab)
        for field in self.context.introspector.fields(type(result)):
            if field.name != reference_field.name:
                accessor.field_accessor(result, field).change_field(self.prefab)
        return result
