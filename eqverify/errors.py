"""
Exceptions raised while verifying an equality contract.
"""
from typing import Any, Optional, Tuple


class EqVerifyError(Exception):
    """Base class for everything eqverify raises."""


class MalformedTypeError(EqVerifyError):
    """The class under test cannot be verified at all.

    Raised when a field cannot be introspected, a sample value cannot be
    synthesized, or an instance cannot be created or modified. Aborts the
    verification of the class.
    """


class ContractViolation(EqVerifyError):
    """A single broken law of the equality contract."""

    def __init__(self, message: str, kind=None,
                 field_name: Optional[str] = None, values: Tuple[Any, ...] = ()):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.field_name = field_name
        self.values = values

    def __str__(self):
        return self.message


class VerificationError(AssertionError):
    """Raised by EqualsVerifier.verify() when one or more violations were found."""

    def __init__(self, cls: type, violations):
        self.cls = cls
        self.violations = list(violations)
        lines = [f"{cls.__qualname__}: {len(self.violations)} equality contract violation(s)"]
        for result in self.violations:
            lines.append(f"- [{result.kind.value}] {result.message}")
        super().__init__("\n".join(lines))


class EvaluationError(EqVerifyError):
    """``==`` or ``hash()`` of the class under test raised an exception."""

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(f"{operation} raised {type(cause).__name__}: {cause}")
        self.operation = operation
        self.cause = cause
