"""
Selects the field checks that apply to a class and runs them.
"""
import logging
from typing import List, Optional

from .checks import (ArrayFieldCheck, CheckContext, FieldCheck, FloatAndDoubleFieldCheck,
                     MutableStateFieldCheck, ReflexivityFieldCheck, SignificantFieldCheck,
                     SymmetryFieldCheck, TransientFieldsCheck, TransitivityFieldCheck)
from .config import Configuration, Rule
from .inspector import FieldInspector
from .markers import Marker, MarkerInspector
from .prefab import PrefabValues
from .results import CheckResult, violations


class FieldsChecker:
    def __init__(self, cls: type, configuration: Optional[Configuration] = None,
                 prefab: Optional[PrefabValues] = None,
                 markers: Optional[MarkerInspector] = None):
        self.logger = logging.getLogger(__name__)
        prefab = prefab or PrefabValues()
        self.context = CheckContext(
            cls=cls,
            configuration=configuration or Configuration(),
            prefab=prefab,
            accessor=prefab.accessor,
            introspector=prefab.introspector,
            markers=markers or MarkerInspector(),
        )

    def select_checks(self) -> List[FieldCheck]:
        context = self.context
        checks: List[FieldCheck] = []

        if context.introspector.has_custom_equality(context.cls):
            checks.append(ArrayFieldCheck(context))
            checks.append(FloatAndDoubleFieldCheck(context))
            checks.append(ReflexivityFieldCheck(context))

        if not self._ignore_mutability():
            checks.append(MutableStateFieldCheck(context))

        if not context.is_suppressed(Rule.TRANSIENT_FIELDS):
            checks.append(TransientFieldsCheck(context))

        checks.append(SignificantFieldCheck(context))
        checks.append(SymmetryFieldCheck(context))
        checks.append(TransitivityFieldCheck(context))
        return checks

    def check(self) -> List[CheckResult]:
        cls = self.context.cls
        checks = self.select_checks()
        self.logger.info(f"Verifying {cls.__qualname__} with checks: "
                         f"{', '.join(c.kind.value for c in checks)}")
        results = FieldInspector(self.context).run(checks)
        self.logger.info(f"{cls.__qualname__}: {len(results)} checks run, "
                         f"{len(violations(results))} violations")
        return results

    def _ignore_mutability(self) -> bool:
        markers = self.context.markers
        cls = self.context.cls
        return (self.context.is_suppressed(Rule.NONFINAL_FIELDS) or
                markers.has_type_marker(cls, Marker.IMMUTABLE) or
                markers.has_type_marker(cls, Marker.ENTITY))


def verify(cls: type, configuration: Optional[Configuration] = None,
           prefab: Optional[PrefabValues] = None) -> List[CheckResult]:
    """Run every applicable field check on ``cls`` and return all results.

    Raises MalformedTypeError when the class cannot be verified at all.
    """
    return FieldsChecker(cls, configuration, prefab).check()
