"""
Intentionally broken equality implementations.

ALL classes in this file should FAIL (violations expected).
This validates that the field checks find the classic mistakes.

Run with:
    python contract_tester.py --module-file benchmarks/contracts/buggy.py
"""
from dataclasses import dataclass, field
from typing import List


# =============================================================================
# Mutability
# =============================================================================

class MutableCounter:
    """BUG: equality and hash depend on a field that can be reassigned.

    A counter used as a dict key is lost as soon as it is incremented.
    """
    count: int

    def __init__(self, count: int):
        self.count = count

    def __eq__(self, other):
        return isinstance(other, MutableCounter) and self.count == other.count

    def __hash__(self):
        return hash(self.count)


@dataclass
class MutableRecord:
    """BUG: a plain dataclass compares its mutable fields."""
    name: str
    size: int


# =============================================================================
# Arrays
# =============================================================================

@dataclass(frozen=True, eq=False)
class IdentityArray:
    """BUG: compares the list with `is` and hashes its id."""
    values: List[int]

    def __eq__(self, other):
        return isinstance(other, IdentityArray) and self.values is other.values

    def __hash__(self):
        return hash(id(self.values))


@dataclass(frozen=True, eq=False)
class ShallowGrid:
    """BUG: compares the rows of a nested list by identity."""
    rows: List[List[int]]

    def __eq__(self, other):
        if not isinstance(other, ShallowGrid) or len(self.rows) != len(other.rows):
            return False
        return all(a is b for a, b in zip(self.rows, other.rows))

    def __hash__(self):
        return hash(tuple(id(row) for row in self.rows))


# =============================================================================
# Floating point
# =============================================================================

@dataclass(frozen=True, eq=False)
class RawFloat:
    """BUG: NaN is never == to itself, so this object is not equal to itself."""
    value: float

    def __eq__(self, other):
        return isinstance(other, RawFloat) and self.value == other.value

    def __hash__(self):
        return hash(self.value)


# =============================================================================
# Hash consistency
# =============================================================================

@dataclass(frozen=True, eq=False)
class HashUsesExtraField:
    """BUG: equal objects that differ in `c` get different hashes."""
    a: int
    b: int
    c: int

    def __eq__(self, other):
        return isinstance(other, HashUsesExtraField) and (self.a, self.b) == (other.a, other.b)

    def __hash__(self):
        return hash((self.a, self.b, self.c))


# =============================================================================
# Equivalence relation
# =============================================================================

@dataclass(frozen=True, eq=False)
class Lenient:
    """BUG: `<=` is not symmetric."""
    x: int

    def __eq__(self, other):
        return isinstance(other, Lenient) and self.x <= other.x

    def __hash__(self):
        return 0


@dataclass(frozen=True, eq=False)
class EitherField:
    """BUG: matching on either field is not transitive."""
    a: int
    b: int

    def __eq__(self, other):
        return isinstance(other, EitherField) and (self.a == other.a or self.b == other.b)

    def __hash__(self):
        return 0


@dataclass(frozen=True, eq=False)
class NeverEqual:
    """BUG: not even equal to an identical copy of itself."""
    x: int

    def __eq__(self, other):
        return False

    def __hash__(self):
        return hash(self.x)


# =============================================================================
# Reference equality and transient state
# =============================================================================

@dataclass(frozen=True)
class _Address:
    street: str


@dataclass(frozen=True, eq=False)
class Customer:
    """BUG: compares the address object by identity."""
    address: _Address

    def __eq__(self, other):
        return isinstance(other, Customer) and self.address is other.address

    def __hash__(self):
        return hash(id(self.address))


@dataclass(frozen=True)
class Session:
    """BUG: the transient token takes part in the generated __eq__."""
    user: str
    token: str = field(metadata={"transient": True})
