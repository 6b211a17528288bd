"""
Runs field checks against every field of a class.
"""
import logging
from typing import List, Sequence

from .checks import CheckContext, FieldCheck
from .errors import ContractViolation, EvaluationError
from .formatter import Formatter
from .introspection import Field
from .results import CheckResult


class FieldInspector:
    """Drives the checks field by field.

    For each field, and for each check, two fresh "red" instances are built
    (identical content, distinct objects) and the check runs against
    accessors positioned at that field. Violations are collected and the
    traversal moves on, unless the configuration asks to fail fast, in which
    case the first ContractViolation propagates. A MalformedTypeError always
    ends the traversal.
    """

    def __init__(self, context: CheckContext):
        self.context = context
        self.logger = logging.getLogger(__name__)

    def run(self, checks: Sequence[FieldCheck]) -> List[CheckResult]:
        cls = self.context.cls
        results = []
        for field in self.context.introspector.fields(cls):
            self.logger.debug(f"Checking field {cls.__qualname__}.{field.name}")
            for check in checks:
                result = self._execute(check, field)
                results.append(result)
        return results

    def _execute(self, check: FieldCheck, field: Field) -> CheckResult:
        reference = self._accessor_for(field)
        changed = self._accessor_for(field)
        try:
            check.execute(reference, changed)
        except EvaluationError as e:
            # Raised by the __eq__ or __hash__ under test
            message = Formatter.of("%%: evaluating %% for field %% raised %%: %%",
                                   check.kind.value.capitalize(), e.operation, field.name,
                                   type(e.cause).__name__, str(e.cause))
            self.logger.debug(f"{check.kind.value} raised on {field.name}", exc_info=True)
            violation = ContractViolation(message.format(), kind=check.kind, field_name=field.name,
                                          values=(reference.object, changed.object))
            return self._failure(violation, e)
        except ContractViolation as violation:
            return self._failure(violation)
        return CheckResult.success(check.kind, field.name)

    def _failure(self, violation: ContractViolation, cause=None) -> CheckResult:
        self.logger.debug(f"{violation.kind.value} failed on {violation.field_name}: {violation}")
        if self.context.configuration.fail_fast:
            self.logger.info(f"Stopping at first violation: {violation}")
            if cause is not None:
                raise violation from cause
            raise violation
        return CheckResult.failure(violation)

    def _accessor_for(self, field: Field):
        instance = self.context.prefab.red_object(self.context.cls)
        return self.context.accessor.field_accessor(instance, field)
