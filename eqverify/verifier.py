"""
Fluent entry point for verifying a class from a test suite::

    def test_point_equality():
        EqualsVerifier.for_class(Point).suppress(Rule.NULL_FIELDS).verify()
"""
from typing import Any, Callable, List

from .checker import verify
from .config import CachedHashInitializer, Configuration, Rule
from .errors import ContractViolation, VerificationError
from .prefab import PrefabValues
from .results import CheckResult, violations


class EqualsVerifier:
    def __init__(self, cls: type):
        self.cls = cls
        self.configuration = Configuration()
        self.prefab = PrefabValues()

    @classmethod
    def for_class(cls, target: type) -> "EqualsVerifier":
        return cls(target)

    def suppress(self, *rules: Rule) -> "EqualsVerifier":
        self.configuration = self.configuration.replace(
            suppressed_rules=self.configuration.suppressed_rules | frozenset(rules))
        return self

    def all_fields_should_be_used(self) -> "EqualsVerifier":
        self.configuration = self.configuration.replace(all_fields_used=True)
        return self

    def all_fields_should_be_used_except(self, *field_names: str) -> "EqualsVerifier":
        unknown = [name for name in field_names if self._field(name) is None]
        if unknown:
            raise ValueError(f"Class {self.cls.__qualname__} does not contain field(s) "
                             f"{', '.join(unknown)}")
        self.configuration = self.configuration.replace(
            all_fields_used=True,
            all_fields_used_exceptions=self.configuration.all_fields_used_exceptions | frozenset(field_names))
        return self

    def with_cached_hash_code(self, field_name: str, calculate: Callable[[Any], int]) -> "EqualsVerifier":
        if self._field(field_name) is None:
            raise ValueError(f"Cached hash field {field_name} does not exist in {self.cls.__qualname__}")
        self.configuration = self.configuration.replace(
            cached_hash=CachedHashInitializer(field_name, calculate))
        return self

    def with_prefab_values(self, tp: Any, red: Any, black: Any) -> "EqualsVerifier":
        self.prefab.register(tp, red, black)
        return self

    def fail_fast(self) -> "EqualsVerifier":
        self.configuration = self.configuration.replace(fail_fast=True)
        return self

    def report(self) -> List[CheckResult]:
        """All check results. With fail_fast(), the first ContractViolation is raised instead."""
        return verify(self.cls, self.configuration, self.prefab)

    def verify(self):
        try:
            failed = violations(self.report())
        except ContractViolation as violation:
            failed = [CheckResult.failure(violation)]
        if failed:
            raise VerificationError(self.cls, failed)

    def _field(self, name: str):
        return self.prefab.introspector.field_named(self.cls, name)
