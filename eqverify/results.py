"""
Check outcomes, and statistics over the outcomes of many verified classes.
"""
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class CheckKind(Enum):
    ARRAY = "array"
    FLOAT = "float"
    REFLEXIVITY = "reflexivity"
    MUTABILITY = "mutability"
    TRANSIENT = "transient"
    SIGNIFICANT_FIELDS = "significant_fields"
    SYMMETRY = "symmetry"
    TRANSITIVITY = "transitivity"


@dataclass
class CheckResult:
    """Outcome of one check on one field."""
    kind: CheckKind
    field_name: str
    passed: bool
    message: Optional[str] = None
    values: Tuple[Any, ...] = ()

    @classmethod
    def success(cls, kind: CheckKind, field_name: str) -> "CheckResult":
        return cls(kind=kind, field_name=field_name, passed=True)

    @classmethod
    def failure(cls, violation) -> "CheckResult":
        return cls(kind=violation.kind, field_name=violation.field_name, passed=False,
                   message=violation.message, values=violation.values)


def violations(results: List[CheckResult]) -> List[CheckResult]:
    return [r for r in results if not r.passed]


class CheckStats:
    """Collects check results per class and reports them as a table."""

    def __init__(self):
        self._by_class: Dict[str, List[CheckResult]] = defaultdict(list)

    def add(self, class_name: str, results: List[CheckResult]):
        self._by_class[class_name].extend(results)

    def get_classes(self) -> List[str]:
        return list(self._by_class.keys())

    def get_kinds(self) -> List[CheckKind]:
        """Check kinds that ran at least once, in declaration order."""
        seen = {r.kind for results in self._by_class.values() for r in results}
        return [kind for kind in CheckKind if kind in seen]

    def failures(self, class_name: str) -> List[CheckResult]:
        return violations(self._by_class.get(class_name, []))

    def summary_table(self) -> str:
        """Generate a markdown table of check outcomes per class."""
        classes = self.get_classes()
        if not classes:
            return "No classes verified.\n"

        kinds = self.get_kinds()
        headers = ["Class"] + [kind.value for kind in kinds]
        data_rows = []
        for class_name in classes:
            row = [class_name]
            results = self._by_class[class_name]
            for kind in kinds:
                ran = [r for r in results if r.kind == kind]
                failed = [r for r in ran if not r.passed]
                if not ran:
                    row.append("-")
                elif failed:
                    row.append(f"✗{len(failed)}")
                else:
                    row.append("✓")
            data_rows.append(row)

        col_widths = [len(h) for h in headers]
        for row in data_rows:
            for i, cell in enumerate(row):
                col_widths[i] = max(col_widths[i], len(cell))

        def format_row(cells):
            return "| " + " | ".join(cell.ljust(col_widths[i]) for i, cell in enumerate(cells)) + " |"

        header_line = format_row(headers)
        separator = "|" + "|".join("-" * (w + 2) for w in col_widths) + "|"
        row_lines = [format_row(row) for row in data_rows]

        passing = sum(1 for c in classes if not self.failures(c))
        table = "\n".join([header_line, separator] + row_lines)
        return f"## Equality contract checks\n\n{table}\n\n- **{passing}/{len(classes)}** classes without violations"
