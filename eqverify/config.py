"""
Verification configuration: suppressed rules, strictness and hashing.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, FrozenSet, Optional

from .errors import MalformedTypeError


class Rule(Enum):
    """Rule categories that can be suppressed for a verification run."""
    NONFINAL_FIELDS = "nonfinal_fields"
    TRANSIENT_FIELDS = "transient_fields"
    IDENTICAL_COPY = "identical_copy"
    IDENTICAL_COPY_FOR_VERSIONED_ENTITY = "identical_copy_for_versioned_entity"
    REFERENCE_EQUALITY = "reference_equality"
    NULL_FIELDS = "null_fields"


@dataclass(frozen=True)
class CachedHashInitializer:
    """Hash accessor aware of a field that caches the object's hash.

    When ``field_name`` is set, ``calculate`` recomputes the cached value from
    the instance and the field is refreshed before ``hash()`` is taken, so a
    stale cache left over from a field mutation never masks a real change.
    """
    field_name: Optional[str] = None
    calculate: Optional[Callable[[Any], int]] = None

    def __post_init__(self):
        if (self.field_name is None) != (self.calculate is None):
            raise ValueError("cached hash needs both a field name and a calculate function")

    @property
    def enabled(self) -> bool:
        return self.field_name is not None

    def hash_of(self, instance: Any) -> int:
        if self.enabled:
            try:
                value = self.calculate(instance)
                object.__setattr__(instance, self.field_name, value)
            except AttributeError as e:
                raise MalformedTypeError(
                    f"Cannot refresh cached hash field {self.field_name} "
                    f"on {type(instance).__qualname__}: {e}") from e
        return hash(instance)


@dataclass(frozen=True)
class Configuration:
    suppressed_rules: FrozenSet[Rule] = frozenset()
    all_fields_used: bool = False
    all_fields_used_exceptions: FrozenSet[str] = frozenset()
    cached_hash: CachedHashInitializer = field(default_factory=CachedHashInitializer)
    fail_fast: bool = False

    @property
    def cached_hash_field_name(self) -> Optional[str]:
        return self.cached_hash.field_name

    def is_suppressed(self, rule: Rule) -> bool:
        return rule in self.suppressed_rules

    def replace(self, **changes) -> "Configuration":
        return replace(self, **changes)
