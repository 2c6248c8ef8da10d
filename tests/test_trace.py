"""Tests for Trace: write-once cells, selectors, copies and sealing."""

import numpy as np
import pytest

from plonkish.primitives.field import Fp
from plonkish.primitives.value import Value
from plonkish.protocol import (
    Cell,
    CellAlreadyAssignedError,
    CellState,
    ColumnNotInPermutationError,
    ConfigurationError,
    ConstraintSystem,
    CopyConstraint,
    MissingWitnessError,
    NotEnoughRowsAvailableError,
    RegionInfo,
    Trace,
    TraceSealedError,
)


def partial_equality_schema():
    """Columns x (equality-enabled) and y (not)."""
    meta = ConstraintSystem(Fp)
    x, y = meta.advice_column("x"), meta.advice_column("y")
    meta.enable_equality(x)
    return meta.build(), x, y


class TestAssign:

    def test_assign_returns_field_value(self, empty_trace, fibo_config) -> None:
        a = fibo_config.advice[0]
        written = empty_trace.assign(a, 0, Value.known(5), annotation="a")
        assert written == Value.known(Fp(5))
        assert empty_trace.value(Cell(a, 0)) == Fp(5)
        assert empty_trace.state(Cell(a, 0)) == CellState.KNOWN
        assert empty_trace.annotations[Cell(a, 0)] == "a"

    def test_negative_values_reduced(self, empty_trace, fibo_config) -> None:
        a = fibo_config.advice[0]
        empty_trace.assign(a, 0, Value.known(-1))
        assert empty_trace.value(Cell(a, 0)) == Fp(Fp.order - 1)

    def test_raw_values_are_lifted(self, empty_trace, fibo_config) -> None:
        a = fibo_config.advice[0]
        empty_trace.assign(a, 3, 9)
        assert empty_trace.value(Cell(a, 3)) == Fp(9)

    def test_float_value_rejected(self, empty_trace, fibo_config) -> None:
        """1.9 is not truncated to 1."""
        a = fibo_config.advice[0]
        with pytest.raises(TypeError):
            empty_trace.assign(a, 0, Value.known(1.9))
        assert empty_trace.state(Cell(a, 0)) == CellState.UNASSIGNED

    def test_double_assignment(self, empty_trace, fibo_config) -> None:
        a = fibo_config.advice[0]
        empty_trace.assign(a, 2, Value.known(1))
        with pytest.raises(CellAlreadyAssignedError) as exc_info:
            empty_trace.assign(a, 2, Value.known(1), region="r")
        assert exc_info.value.row == 2
        assert exc_info.value.region == "r"

    @pytest.mark.parametrize("row", [16, 100, -1])
    def test_row_out_of_range(self, empty_trace, fibo_config, row: int) -> None:
        with pytest.raises(NotEnoughRowsAvailableError, match="k=4"):
            empty_trace.assign(fibo_config.advice[0], row, Value.known(1))

    def test_last_row_is_usable(self, empty_trace, fibo_config) -> None:
        empty_trace.assign(fibo_config.advice[0], 15, Value.known(1))
        assert empty_trace.used_rows == 16

    def test_unknown_value_in_witness_mode(self, empty_trace, fibo_config) -> None:
        with pytest.raises(MissingWitnessError, match="seed"):
            empty_trace.assign(fibo_config.advice[0], 0, Value.unknown(), annotation="seed")

    def test_unknown_value_in_shape_mode(self, fibo_schema, fibo_config) -> None:
        trace = Trace(fibo_schema, k=4, witness_mode=False)
        a = fibo_config.advice[0]
        written = trace.assign(a, 0, Value.unknown())
        assert not written.is_known
        assert trace.state(Cell(a, 0)) == CellState.UNKNOWN
        assert not trace.is_assigned(Cell(a, 0))
        # Still write-once
        with pytest.raises(CellAlreadyAssignedError):
            trace.assign(a, 0, Value.known(1))

    def test_selector_column_rejected(self, empty_trace, fibo_config) -> None:
        with pytest.raises(ConfigurationError):
            empty_trace.assign(fibo_config.selector.column, 0, Value.known(1))

    def test_k_must_be_positive(self, fibo_schema) -> None:
        with pytest.raises(ConfigurationError):
            Trace(fibo_schema, k=0)


class TestReads:

    def test_unassigned_cell_has_no_value(self, empty_trace, fibo_config) -> None:
        cell = Cell(fibo_config.advice[1], 4)
        assert empty_trace.state(cell) == CellState.UNASSIGNED
        with pytest.raises(MissingWitnessError):
            empty_trace.value(cell)

    @pytest.mark.parametrize("row", [-1, 16, 20])
    def test_direct_reads_do_not_wrap(self, empty_trace, fibo_config, row: int) -> None:
        a = fibo_config.advice[0]
        empty_trace.assign(a, row % 16, Value.known(7))
        with pytest.raises(NotEnoughRowsAvailableError):
            empty_trace.value(Cell(a, row))
        with pytest.raises(NotEnoughRowsAvailableError):
            empty_trace.state(Cell(a, row))

    def test_column_values_and_states(self, empty_trace, fibo_config) -> None:
        c = fibo_config.advice[2]
        empty_trace.assign(c, 1, Value.known(3))
        values = empty_trace.column_values(c)
        assert len(values) == 16
        assert values[1] == Fp(3)
        assert values[0] == Fp(0)
        states = empty_trace.column_states(c)
        assert list(np.nonzero(states)[0]) == [1]

    def test_selectors(self, empty_trace, fibo_config) -> None:
        s = fibo_config.selector
        empty_trace.enable_selector(s, 0)
        empty_trace.enable_selector(s, 5)
        enabled = empty_trace.selector_values(s)
        assert list(np.nonzero(enabled)[0]) == [0, 5]
        assert empty_trace.used_rows == 6

    def test_regions(self, empty_trace) -> None:
        empty_trace.record_region(RegionInfo("first", 0, 1))
        empty_trace.record_region(RegionInfo("second", 1, 2))
        assert empty_trace.region_at(0) == "first"
        assert empty_trace.region_at(2) == "second"
        assert empty_trace.region_at(3) is None
        assert RegionInfo("second", 1, 2).end == 3


class TestCopies:

    def test_copy_recorded(self, empty_trace, fibo_config) -> None:
        b, c = fibo_config.advice[1], fibo_config.advice[2]
        empty_trace.copy(Cell(c, 0), Cell(b, 1))
        assert empty_trace.copies == [CopyConstraint(Cell(c, 0), Cell(b, 1))]

    def test_copy_needs_equality_enabled(self) -> None:
        schema, x, y = partial_equality_schema()
        trace = Trace(schema, k=2)
        trace.copy(Cell(x, 0), Cell(x, 1))
        with pytest.raises(ColumnNotInPermutationError) as exc_info:
            trace.copy(Cell(x, 0), Cell(y, 1))
        assert exc_info.value.column == y

    def test_copy_row_out_of_range(self, empty_trace, fibo_config) -> None:
        a = fibo_config.advice[0]
        with pytest.raises(NotEnoughRowsAvailableError):
            empty_trace.copy(Cell(a, 0), Cell(a, 16))


class TestSealing:

    def test_writes_after_seal(self, empty_trace, fibo_config) -> None:
        a = fibo_config.advice[0]
        assert empty_trace.seal() is empty_trace
        assert empty_trace.sealed
        with pytest.raises(TraceSealedError):
            empty_trace.assign(a, 0, Value.known(1))
        with pytest.raises(TraceSealedError):
            empty_trace.enable_selector(fibo_config.selector, 0)
        with pytest.raises(TraceSealedError):
            empty_trace.copy(Cell(a, 0), Cell(a, 1))
        with pytest.raises(TraceSealedError):
            empty_trace.record_region(RegionInfo("late", 0, 1))


class TestTampered:

    def test_overwrites_one_cell_of_a_copy(self, empty_trace, fibo_config) -> None:
        a = fibo_config.advice[0]
        empty_trace.assign(a, 0, Value.known(1))
        empty_trace.seal()

        bad = empty_trace.tampered(a, 0, 42)

        assert bad.value(Cell(a, 0)) == Fp(42)
        assert empty_trace.value(Cell(a, 0)) == Fp(1)
        assert bad.sealed

    def test_can_fill_unassigned_cell(self, empty_trace, fibo_config) -> None:
        b = fibo_config.advice[1]
        bad = empty_trace.tampered(b, 3, 5)
        assert bad.is_assigned(Cell(b, 3))
        assert not empty_trace.is_assigned(Cell(b, 3))

    def test_copy_keeps_structure(self, fibo_prover, fibo_config) -> None:
        trace = fibo_prover.trace
        bad = trace.tampered(fibo_config.advice[2], 4, 0)
        assert bad.copies == trace.copies
        assert bad.regions == trace.regions
        assert bad.schema is trace.schema


class TestToTable:

    def test_known_unknown_and_unassigned(self, fibo_schema, fibo_config) -> None:
        trace = Trace(fibo_schema, k=2, witness_mode=False)
        a, b, _ = fibo_config.advice
        trace.assign(a, 0, Value.known(4))
        trace.assign(b, 0, Value.unknown())
        trace.enable_selector(fibo_config.selector, 0)

        header, body = trace.to_table()

        assert header == ["row", "a", "b", "c", "s"]
        assert body == [["0", "4", "?", "", "1"]]

    def test_explicit_row_count(self, empty_trace) -> None:
        _, body = empty_trace.to_table(rows=3)
        assert len(body) == 3
        _, body = empty_trace.to_table(rows=100)
        assert len(body) == 16
