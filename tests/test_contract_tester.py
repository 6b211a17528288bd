"""
Tests for the contract_tester command line driver, run over the benchmark classes.
"""
from pathlib import Path

import pytest

from contract_tester import ContractTester, main
from eqverify import CheckKind, Configuration, violations

BENCHMARKS = Path(__file__).parent.parent / "benchmarks" / "contracts"

EXPECTED_BUGGY = {
    "MutableCounter": {CheckKind.MUTABILITY},
    "MutableRecord": {CheckKind.MUTABILITY},
    "IdentityArray": {CheckKind.ARRAY},
    "ShallowGrid": {CheckKind.ARRAY},
    "RawFloat": {CheckKind.FLOAT},
    "HashUsesExtraField": {CheckKind.SIGNIFICANT_FIELDS},
    "Lenient": {CheckKind.SYMMETRY},
    "EitherField": {CheckKind.TRANSITIVITY},
    "NeverEqual": {CheckKind.REFLEXIVITY},
    "Customer": {CheckKind.REFLEXIVITY},
    "Session": {CheckKind.TRANSIENT},
}


def test_every_buggy_class_is_caught():
    tester = ContractTester()
    reports = {r.class_name: r for r in tester.test_file(str(BENCHMARKS / "buggy.py"))}

    assert set(reports) == set(EXPECTED_BUGGY)
    for name, expected in EXPECTED_BUGGY.items():
        report = reports[name]
        assert report.status == "violations", name
        found = {r.kind for r in violations(report.results)}
        assert expected <= found, name
    assert tester.failed()


def test_every_correct_class_passes():
    tester = ContractTester()
    reports = tester.test_file(str(BENCHMARKS / "correct.py"))

    assert [r.class_name for r in reports] == ["Point", "Person", "Temperature", "Polygon", "Grid",
                                               "Signal", "Order"]
    assert all(r.status == "passed" for r in reports), [(r.class_name, r.results) for r in reports
                                                        if r.status != "passed"]
    assert not tester.failed()


def test_main_exit_status_and_summary(capsys):
    assert main(["--module-file", str(BENCHMARKS / "correct.py"), "--table"]) == 0
    out = capsys.readouterr().out
    assert "✓ PASSED: Point" in out
    assert "## Equality contract checks" in out
    assert "**7/7** classes without violations" in out

    assert main(["--module-file", str(BENCHMARKS / "buggy.py"), "--class-prefix", "Mutable"]) == 1
    out = capsys.readouterr().out
    assert "Total classes: 2" in out
    assert "MutableCounter: mutability" in out


def test_main_suppress_flag(capsys):
    argv = ["--module-file", str(BENCHMARKS / "buggy.py"), "--class-prefix", "Mutable",
            "--suppress", "nonfinal_fields"]
    assert main(argv) == 0


def test_unsupported_class():
    class Identity:
        x: int

    report = ContractTester().test_class(Identity)
    assert report.status == "unsupported"


def test_malformed_class():
    class Wrapper:
        holder: "Missing"

        def __eq__(self, other):
            return True

    report = ContractTester().test_class(Wrapper)
    assert report.status == "malformed"
    assert "Cannot resolve annotations" in report.message


def test_fail_fast_reports_first_violation_only():
    tester = ContractTester(Configuration(fail_fast=True))
    module = tester.load_module(str(BENCHMARKS / "buggy.py"))
    report = tester.test_class(module.MutableRecord)
    assert report.status == "violations"
    assert [(r.kind, r.field_name) for r in report.results] == [(CheckKind.MUTABILITY, "name")]
