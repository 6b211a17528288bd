"""
Renders diagnostic messages with the offending objects substituted in.
"""
from typing import Any

PLACEHOLDER = "%%"


class Formatter:
    """A message with ``%%`` placeholders, filled lazily with object reprs.

    Rendering never raises: when an object's ``__repr__`` blows up (which is
    common for half-initialized instances of a broken class) a description of
    the object and the exception is used instead.
    """

    def __init__(self, message: str, objects):
        self.message = message
        self.objects = objects

    @classmethod
    def of(cls, message: str, *objects: Any) -> "Formatter":
        return cls(message, objects)

    def format(self) -> str:
        parts = self.message.split(PLACEHOLDER)
        if len(parts) - 1 < len(self.objects):
            raise ValueError(f"Not enough %% placeholders in {self.message!r}")
        if len(parts) - 1 > len(self.objects):
            raise ValueError(f"Too many %% placeholders in {self.message!r}")
        result = [parts[0]]
        for obj, part in zip(self.objects, parts[1:]):
            result.append(self._stringify(obj))
            result.append(part)
        return "".join(result)

    def _stringify(self, obj: Any) -> str:
        if isinstance(obj, str):
            return obj
        try:
            return repr(obj)
        except Exception as e:
            return self._fallback(obj, e)

    def _fallback(self, obj: Any, error: Exception) -> str:
        cls = type(obj)
        fields = []
        for name in getattr(obj, "__dict__", {}):
            fields.append(name)
        description = f"{cls.__qualname__}@{id(obj):x}"
        if fields:
            description += "(" + ", ".join(fields) + ")"
        return f"{description}-throws {type(error).__name__}({error})"

    def __str__(self):
        return self.format()
