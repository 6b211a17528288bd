#!/usr/bin/env python3
"""
Compare two contract_tester.py logs class by class.

Reports classes whose status changed between the runs (for instance
"passed" -> "violations") and classes whose set of violated check kinds
changed. Exits with status 1 when LOG2 regresses against LOG1.

    python regression.py before.log after.log
"""
import argparse
import re
import sys
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

HEADER = re.compile(r'^Verifying\s+(\S+)')
STATUS_LINES = [
    (re.compile(r'^\s*✓ PASSED:'), "passed"),
    (re.compile(r'^\s*✗ VIOLATIONS FOUND:'), "violations"),
    (re.compile(r'^\s*\? Timeout:'), "timeout"),
    (re.compile(r'^\s*! Malformed:'), "malformed"),
    (re.compile(r'^\s*! Error:'), "error"),
    (re.compile(r'^\s*- Unsupported:'), "unsupported"),
]
VIOLATION = re.compile(r'^\s+\[([a-z_]+)\] ')


@dataclass
class ClassOutcome:
    status: str = "unknown"
    kinds: Set[str] = field(default_factory=set)


@dataclass
class Change:
    class_name: str
    before: ClassOutcome
    after: ClassOutcome

    @property
    def is_regression(self) -> bool:
        if self.before.status == "passed":
            return self.after.status != "passed"
        return bool(self.after.kinds - self.before.kinds)

    @property
    def is_improvement(self) -> bool:
        if self.after.status == "passed":
            return self.before.status != "passed"
        return bool(self.before.kinds - self.after.kinds) and not self.after.kinds - self.before.kinds

    def describe(self) -> str:
        text = f"{self.class_name}: {self.before.status} -> {self.after.status}"
        added = sorted(self.after.kinds - self.before.kinds)
        removed = sorted(self.before.kinds - self.after.kinds)
        if added:
            text += f" (new: {', '.join(added)})"
        if removed:
            text += f" (gone: {', '.join(removed)})"
        return text


def parse_log(lines: Iterable[str]) -> Dict[str, ClassOutcome]:
    """Per-class outcome of one contract_tester.py run."""
    outcomes: Dict[str, ClassOutcome] = {}
    current = None
    for line in lines:
        if line.strip() == "SUMMARY":
            current = None
            continue
        header = HEADER.match(line)
        if header:
            current = outcomes.setdefault(header.group(1), ClassOutcome())
            continue
        if current is None:
            continue
        for pattern, status in STATUS_LINES:
            if pattern.match(line):
                current.status = status
                break
        else:
            violation = VIOLATION.match(line)
            if violation:
                current.kinds.add(violation.group(1))
    return outcomes


def compare(before: Dict[str, ClassOutcome], after: Dict[str, ClassOutcome]) -> List[Change]:
    changes = []
    for name in sorted(set(before) | set(after)):
        old = before.get(name, ClassOutcome(status="missing"))
        new = after.get(name, ClassOutcome(status="missing"))
        if old.status != new.status or old.kinds != new.kinds:
            changes.append(Change(name, old, new))
    return changes


def read_log(filename: str) -> Dict[str, ClassOutcome]:
    with open(filename, 'r', encoding='utf-8') as f:
        return parse_log(f)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Compare two contract_tester.py logs")
    parser.add_argument('log1', help='Log of the baseline run')
    parser.add_argument('log2', help='Log of the run to compare against the baseline')
    args = parser.parse_args(argv)

    before = read_log(args.log1)
    after = read_log(args.log2)
    changes = compare(before, after)

    passed1 = sum(1 for o in before.values() if o.status == "passed")
    passed2 = sum(1 for o in after.values() if o.status == "passed")
    print(f"LOG1 ({args.log1}): {passed1}/{len(before)} classes passed")
    print(f"LOG2 ({args.log2}): {passed2}/{len(after)} classes passed")

    regressions = [c for c in changes if c.is_regression]
    improvements = [c for c in changes if c.is_improvement]
    other = [c for c in changes if c not in regressions and c not in improvements]

    for title, group in (("Regressions", regressions), ("Improvements", improvements),
                         ("Other changes", other)):
        print()
        print(f"{title} ({len(group)}):")
        for change in group:
            print(f"  {change.describe()}")

    return 1 if regressions else 0


if __name__ == "__main__":
    sys.exit(main())
