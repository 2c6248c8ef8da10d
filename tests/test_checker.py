"""Tests for the satisfiability checker.

Covers the reference Fibonacci run (k=4, seeds 1, 1, seven steps), the
single-cell tampering scenario, and hand-built traces that isolate each kind
of failure.
"""

import pytest

from plonkish.circuits.fibonacci import FibonacciCircuit
from plonkish.primitives.field import Fp
from plonkish.primitives.value import Value
from plonkish.protocol import (
    Cell,
    CellNotAssigned,
    ConstraintNotSatisfied,
    ConstraintSystem,
    CopyConstraintViolated,
    MockProver,
    Trace,
    UnsatisfiedConstraintsError,
    assert_satisfied,
    evaluate_gate_at_row,
    verify,
)

# c column of the reference run
REFERENCE_C = [2, 3, 5, 8, 13, 21, 34, 55]


class TestSatisfiedTrace:

    def test_reference_run_is_satisfied(self, fibo_prover) -> None:
        report = verify(fibo_prover.schema, fibo_prover.trace)
        assert report.is_satisfied
        assert len(report) == 0
        assert report.rows_checked == 16
        assert report.gates_checked == 1
        assert report.copies_checked == 14

    def test_assert_satisfied_returns_report(self, fibo_prover) -> None:
        report = assert_satisfied(fibo_prover.schema, fibo_prover.trace)
        assert report.is_satisfied

    def test_gate_vanishes_on_every_enabled_row(self, fibo_prover) -> None:
        gate = fibo_prover.schema.gate("sum")
        for row in range(8):
            assert evaluate_gate_at_row(fibo_prover.trace, gate, row) == [Fp(0)]

    def test_idempotent(self, fibo_prover) -> None:
        """Two checker runs over the same trace produce equal reports."""
        first = verify(fibo_prover.schema, fibo_prover.trace)
        second = verify(fibo_prover.schema, fibo_prover.trace)
        assert first == second


class TestTamperedRow:
    """Row 4 (the fifth row) c cell overwritten after synthesis."""

    @pytest.fixture
    def report(self, fibo_prover, fibo_config):
        bad = fibo_prover.trace.tampered(fibo_config.advice[2], 4, 14)
        return verify(fibo_prover.schema, bad)

    def test_not_satisfied(self, report) -> None:
        assert not report.is_satisfied

    def test_sum_gate_fails_at_row_4_only(self, report) -> None:
        assert report.failing_rows("sum") == [4]
        failure = report.gate_failures()[0]
        assert failure.gate == "sum"
        assert failure.poly == 0
        assert failure.region == "fib/next row"
        assert [value for _, value in failure.cell_values] == [5, 8, 14]

    def test_copies_out_of_tampered_cell_reported_separately(self, report, fibo_config) -> None:
        """c@4 feeds b@5 and a@6; both copies now disagree."""
        a, b, c = fibo_config.advice
        assert report.copy_failures() == [
            CopyConstraintViolated(Cell(c, 4), Cell(b, 5), 14, 13),
            CopyConstraintViolated(Cell(c, 4), Cell(a, 6), 14, 13),
        ]
        assert report.unassigned_failures() == []
        assert len(report) == 3

    def test_failure_messages(self, report) -> None:
        messages = [str(failure) for failure in report]
        assert "gate 'sum'" in messages[0]
        assert "row 4" in messages[0]
        assert "Copy constraint violated" in messages[1]
        assert "Copy constraint violated" in messages[2]

    def test_assert_satisfied_raises(self, fibo_prover, fibo_config) -> None:
        bad = fibo_prover.trace.tampered(fibo_config.advice[2], 4, 14)
        with pytest.raises(UnsatisfiedConstraintsError) as exc_info:
            assert_satisfied(fibo_prover.schema, bad)
        assert len(exc_info.value.report) == 3
        assert "3 constraint failure(s)" in str(exc_info.value)

    def test_gate_nonzero_at_tampered_row(self, fibo_prover, fibo_config) -> None:
        bad = fibo_prover.trace.tampered(fibo_config.advice[2], 4, 14)
        gate = fibo_prover.schema.gate("sum")
        # 5 + 8 - 14
        assert evaluate_gate_at_row(bad, gate, 4) == [Fp(-1 % Fp.order)]
        assert evaluate_gate_at_row(bad, gate, 3) == [Fp(0)]


class TestSingleCellTampering:
    """Every assigned cell is covered by a gate or a copy constraint."""

    @pytest.mark.parametrize("column_idx", [0, 1, 2])
    @pytest.mark.parametrize("row", range(8))
    def test_detected(self, fibo_prover, fibo_config, column_idx: int, row: int) -> None:
        column = fibo_config.advice[column_idx]
        original = int(fibo_prover.trace.column_values(column)[row])
        bad = fibo_prover.trace.tampered(column, row, original + 1)
        assert not verify(fibo_prover.schema, bad).is_satisfied

    @pytest.mark.parametrize("row", [1, 5, 7])
    def test_tampered_b_breaks_gate_and_copy(self, fibo_prover, fibo_config, row: int) -> None:
        _, b, _ = fibo_config.advice
        bad = fibo_prover.trace.tampered(b, row, 0)
        report = verify(fibo_prover.schema, bad)
        assert report.failing_rows("sum") == [row]
        assert len(report.copy_failures()) >= 1


def two_column_setup():
    """Columns x, y (both equality-enabled), selector s, gate x - y."""
    meta = ConstraintSystem(Fp)
    x, y = meta.advice_column("x"), meta.advice_column("y")
    s = meta.selector("s")
    meta.enable_equality(x)
    meta.enable_equality(y)
    meta.create_gate("eq", s, lambda cells: cells.query_advice(x) - cells.query_advice(y))
    return meta.build(), x, y, s


class TestFailureKinds:

    def test_copy_violation_without_gate_failure(self) -> None:
        """A broken copy is CopyConstraintViolated, not a gate failure."""
        schema, x, y, _ = two_column_setup()
        trace = Trace(schema, k=2)
        trace.assign(x, 0, Value.known(1))
        trace.assign(y, 1, Value.known(2))
        trace.copy(Cell(x, 0), Cell(y, 1))

        report = verify(schema, trace)

        assert report.gate_failures() == []
        assert report.copy_failures() == [CopyConstraintViolated(Cell(x, 0), Cell(y, 1), 1, 2)]

    def test_gate_failure_without_copy_violation(self) -> None:
        schema, x, y, s = two_column_setup()
        trace = Trace(schema, k=2)
        trace.assign(x, 2, Value.known(3))
        trace.assign(y, 2, Value.known(4))
        trace.enable_selector(s, 2)

        report = verify(schema, trace)

        assert report.copy_failures() == []
        assert report.failing_rows("eq") == [2]
        assert isinstance(report.failures[0], ConstraintNotSatisfied)

    def test_disabled_rows_are_not_checked(self) -> None:
        schema, x, y, _ = two_column_setup()
        trace = Trace(schema, k=2)
        trace.assign(x, 0, Value.known(3))
        trace.assign(y, 0, Value.known(4))
        assert verify(schema, trace).is_satisfied

    def test_unassigned_cell_under_enabled_selector(self) -> None:
        schema, x, y, s = two_column_setup()
        trace = Trace(schema, k=2)
        trace.assign(x, 1, Value.known(3))
        trace.enable_selector(s, 1)

        report = verify(schema, trace)

        assert report.gate_failures() == []
        assert report.unassigned_failures() == [
            CellNotAssigned(context="gate 'eq' poly 0", row=1, cell=Cell(y, 1), region=None),
        ]
        assert "not assigned" in str(report.failures[0])

    def test_unassigned_copy_endpoint(self) -> None:
        schema, x, y, _ = two_column_setup()
        trace = Trace(schema, k=2)
        trace.assign(x, 0, Value.known(1))
        trace.copy(Cell(x, 0), Cell(y, 3))

        report = verify(schema, trace)

        assert [f.cell for f in report.unassigned_failures()] == [Cell(y, 3)]
        assert report.copy_failures() == []

    def test_gates_reported_before_copies(self) -> None:
        schema, x, y, s = two_column_setup()
        trace = Trace(schema, k=2)
        trace.assign(x, 0, Value.known(1))
        trace.assign(y, 0, Value.known(2))
        trace.enable_selector(s, 0)
        trace.copy(Cell(x, 0), Cell(y, 0))

        kinds = [type(f) for f in verify(schema, trace)]
        assert kinds == [ConstraintNotSatisfied, CopyConstraintViolated]


def test_schema_mismatch_rejected(fibo_prover) -> None:
    schema, _, _, _ = two_column_setup()
    with pytest.raises(ValueError, match="different schema"):
        verify(schema, fibo_prover.trace)


def test_larger_run_is_satisfied() -> None:
    prover = MockProver.run(k=6, circuit=FibonacciCircuit(a=3, b=7, steps=60))
    assert verify(prover.schema, prover.trace).is_satisfied
