#!/usr/bin/env python3
"""
Verify the equality contract of every class in a Python file.

Each class with a custom __eq__ is run through the field checks; classes
relying on identity equality are reported as unsupported.

    python contract_tester.py --module-file benchmarks/contracts/buggy.py
"""
import argparse
import importlib.util
import inspect
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from func_timeout import func_timeout, FunctionTimedOut

from eqverify import CheckResult, CheckStats, Configuration, ContractViolation, MalformedTypeError, Rule, verify, violations
from eqverify.introspection import TypeIntrospector


@dataclass
class ClassReport:
    """Result of verifying one class."""
    class_name: str
    status: str  # "passed", "violations", "timeout", "malformed", "error", "unsupported"
    results: List[CheckResult] = field(default_factory=list)
    message: Optional[str] = None


class ContractTester:
    def __init__(self, configuration: Optional[Configuration] = None, timeout: float = 10):
        self.configuration = configuration or Configuration()
        self.timeout = timeout
        self.reports: List[ClassReport] = []
        self.stats = CheckStats()
        self.introspector = TypeIntrospector()
        self.logger = logging.getLogger(__name__)

    def load_module(self, filepath: str):
        path = Path(filepath)
        spec = importlib.util.spec_from_file_location(path.stem, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load {filepath}")
        module = importlib.util.module_from_spec(spec)
        # dataclasses resolve string annotations through sys.modules
        sys.modules[spec.name] = module
        spec.loader.exec_module(module)
        return module

    def find_classes(self, module, class_prefix: str = "") -> List[type]:
        return [obj for name, obj in vars(module).items()
                if inspect.isclass(obj) and obj.__module__ == module.__name__
                and name.startswith(class_prefix) and not name.startswith("_")]

    def test_class(self, cls: type) -> ClassReport:
        name = cls.__qualname__
        if not self.introspector.has_custom_equality(cls):
            return ClassReport(name, "unsupported", message="No custom __eq__; equality is identity")

        try:
            results = func_timeout(self.timeout, verify, args=(cls, self.configuration))
        except FunctionTimedOut:
            return ClassReport(name, "timeout", message=f"Verification exceeded {self.timeout}s")
        except ContractViolation as violation:
            results = [CheckResult.failure(violation)]
        except MalformedTypeError as e:
            return ClassReport(name, "malformed", message=str(e))
        except Exception as e:
            self.logger.error(f"Verification of {name} failed: {e}", exc_info=True)
            return ClassReport(name, "error", message=str(e))

        self.stats.add(name, results)
        status = "violations" if violations(results) else "passed"
        return ClassReport(name, status, results=results)

    def test_file(self, filepath: str, class_prefix: str = "") -> List[ClassReport]:
        module = self.load_module(filepath)
        reports = []
        for cls in self.find_classes(module, class_prefix):
            print(f"\n{'='*60}")
            print(f"Verifying {cls.__qualname__}")
            print(f"{'='*60}")

            report = self.test_class(cls)
            reports.append(report)
            self.reports.append(report)
            self._print_report(report)
        return reports

    def _print_report(self, report: ClassReport):
        if report.status == "violations":
            failed = violations(report.results)
            print(f"  ✗ VIOLATIONS FOUND: {report.class_name} ({len(failed)})")
            for result in failed:
                print(f"    [{result.kind.value}] {result.field_name}: {result.message}")
        elif report.status == "passed":
            print(f"  ✓ PASSED: {report.class_name}")
        elif report.status == "timeout":
            print(f"  ? Timeout: {report.message}")
        elif report.status == "malformed":
            print(f"  ! Malformed: {report.message}")
        elif report.status == "error":
            print(f"  ! Error: {report.message}")
        elif report.status == "unsupported":
            print(f"  - Unsupported: {report.message}")

    def print_summary(self, show_table: bool = False):
        print(f"\n{'='*60}")
        print("SUMMARY")
        print(f"{'='*60}")

        by_status = {}
        for report in self.reports:
            by_status.setdefault(report.status, []).append(report)

        print(f"Total classes: {len(self.reports)}")
        print(f"  ✓ Passed: {len(by_status.get('passed', []))}")
        print(f"  ✗ With violations: {len(by_status.get('violations', []))}")
        print(f"  ? Timeouts: {len(by_status.get('timeout', []))}")
        print(f"  ! Malformed: {len(by_status.get('malformed', []))}")
        print(f"  ! Errors: {len(by_status.get('error', []))}")
        print(f"  - Unsupported: {len(by_status.get('unsupported', []))}")

        if by_status.get("violations"):
            print(f"\nClasses with violations:")
            for report in by_status["violations"]:
                kinds = sorted({r.kind.value for r in violations(report.results)})
                print(f"  - {report.class_name}: {', '.join(kinds)}")

        if show_table:
            print()
            print(self.stats.summary_table())

    def failed(self) -> bool:
        return any(r.status in ("violations", "timeout", "malformed", "error") for r in self.reports)


def build_configuration(args) -> Configuration:
    exceptions = frozenset(args.all_fields_used_except or ())
    return Configuration(
        suppressed_rules=frozenset(Rule[name.upper()] for name in args.suppress or ()),
        all_fields_used=args.all_fields_used or bool(exceptions),
        all_fields_used_exceptions=exceptions,
        fail_fast=args.fail_fast,
    )


def main(argv=None):
    parser = argparse.ArgumentParser(description="Equality contract verification with eqverify")
    parser.add_argument('--module-file', required=True,
                        help='Path to Python file containing the classes to verify')
    parser.add_argument('--class-prefix', default='',
                        help='Only verify classes whose name starts with this prefix')
    parser.add_argument('--suppress', nargs='+', choices=[r.name.lower() for r in Rule],
                        help='Rule categories to suppress')
    parser.add_argument('--all-fields-used', action='store_true',
                        help='Require every field to take part in equality')
    parser.add_argument('--all-fields-used-except', nargs='+', metavar='FIELD',
                        help='Fields exempt from --all-fields-used (implies it)')
    parser.add_argument('--fail-fast', action='store_true',
                        help='Stop verifying a class at its first violation')
    parser.add_argument('--timeout', type=float, default=10,
                        help='Seconds allowed per class (default: 10)')
    parser.add_argument('--table', action='store_true',
                        help='Print a table of check outcomes per class')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: WARNING)')

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s - %(levelname)s - %(message)s')

    tester = ContractTester(build_configuration(args), timeout=args.timeout)
    tester.test_file(args.module_file, args.class_prefix)
    tester.print_summary(show_table=args.table)
    return 1 if tester.failed() else 0


if __name__ == "__main__":
    sys.exit(main())
