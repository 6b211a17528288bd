"""
Markers that adjust which equality rules apply to a class or a field.

Class-level markers are attached with decorators::

    @immutable
    @dataclass
    class Money:
        amount: int

Field-level markers go into ``typing.Annotated`` metadata::

    @dataclass
    class Person:
        name: Annotated[str, Marker.NONNULL]
        cache: Annotated[dict, Marker.TRANSIENT]
"""
from enum import Enum
from typing import Any, Iterable

MARKERS_ATTRIBUTE = "__eqverify_markers__"


class Marker(Enum):
    IMMUTABLE = "immutable"
    ENTITY = "entity"
    NONNULL = "nonnull"
    TRANSIENT = "transient"


# Names recognized when metadata is a plain string or a foreign marker object,
# compared case-insensitively.
RECOGNIZED_NAMES = {
    Marker.IMMUTABLE: {"immutable"},
    Marker.ENTITY: {"entity"},
    Marker.NONNULL: {"nonnull", "notnull", "nonnullable"},
    Marker.TRANSIENT: {"transient"},
}


def marked(*markers: Marker):
    """Class decorator attaching the given markers."""
    def decorate(cls):
        existing = frozenset(cls.__dict__.get(MARKERS_ATTRIBUTE, ()))
        setattr(cls, MARKERS_ATTRIBUTE, existing | frozenset(markers))
        return cls
    return decorate


def immutable(cls):
    return marked(Marker.IMMUTABLE)(cls)


def entity(cls):
    return marked(Marker.ENTITY)(cls)


def nonnull(cls):
    """Every field of the class is non-null unless annotated Optional."""
    return marked(Marker.NONNULL)(cls)


def _matches(item: Any, marker: Marker) -> bool:
    if item is marker:
        return True
    if isinstance(item, str):
        name = item
    elif isinstance(item, type):
        name = item.__name__
    else:
        name = type(item).__name__
    return name.lower() in RECOGNIZED_NAMES[marker]


class MarkerInspector:
    """Answers marker queries for classes and introspected fields."""

    def type_markers(self, cls: type) -> frozenset:
        found = set()
        for klass in cls.__mro__:
            found.update(klass.__dict__.get(MARKERS_ATTRIBUTE, ()))
        return frozenset(found)

    def has_type_marker(self, cls: type, marker: Marker) -> bool:
        return marker in self.type_markers(cls)

    def has_field_marker(self, field, marker: Marker) -> bool:
        return self._any_matches(field.metadata, marker)

    def _any_matches(self, metadata: Iterable[Any], marker: Marker) -> bool:
        return any(_matches(item, marker) for item in metadata)
