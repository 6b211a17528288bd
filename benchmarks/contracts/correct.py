"""
Equality implementations that honor the whole contract.

ALL classes in this file should PASS (no violations expected).

Run with:
    python contract_tester.py --module-file benchmarks/contracts/correct.py
"""
import math
from dataclasses import dataclass, field
from typing import Final, List, Optional

import numpy as np

from eqverify import nonnull


@dataclass(frozen=True)
class Point:
    """Generated __eq__ and __hash__ over immutable fields."""
    x: int
    y: int


@nonnull
@dataclass(frozen=True)
class Person:
    """Non-null name, optional email."""
    name: str
    email: Optional[str] = None


class Temperature:
    """NaN-aware comparison on a slotted class."""
    __slots__ = ("celsius",)
    celsius: Final[float]

    def __init__(self, celsius: float):
        object.__setattr__(self, "celsius", celsius)

    def __eq__(self, other):
        if not isinstance(other, Temperature):
            return NotImplemented
        if math.isnan(self.celsius) and math.isnan(other.celsius):
            return True
        return self.celsius == other.celsius

    def __hash__(self):
        return 0 if math.isnan(self.celsius) else hash(self.celsius)


@dataclass(frozen=True, eq=False)
class Polygon:
    """Element-wise list comparison, hashed through a tuple."""
    xs: List[int]

    def __eq__(self, other):
        return isinstance(other, Polygon) and self.xs == other.xs

    def __hash__(self):
        return hash(tuple(self.xs) if self.xs is not None else None)


@dataclass(frozen=True, eq=False)
class Grid:
    """Nested lists compare deeply with ==."""
    rows: List[List[int]]

    def __eq__(self, other):
        return isinstance(other, Grid) and self.rows == other.rows

    def __hash__(self):
        if self.rows is None:
            return 0
        return hash(tuple(tuple(row) for row in self.rows))


@dataclass(frozen=True, eq=False)
class Signal:
    """numpy arrays compared with array_equal and hashed by content."""
    samples: np.ndarray

    def __eq__(self, other):
        return isinstance(other, Signal) and np.array_equal(self.samples, other.samples)

    def __hash__(self):
        return hash(self.samples.tobytes()) if self.samples is not None else 0


@dataclass(frozen=True)
class Order:
    """A nested value object and a field excluded from comparison."""
    customer: Person
    lines: tuple
    note: str = field(default="", compare=False, metadata={"transient": True})
