"""The trace: one execution's assignment of values to cells.

Storage is column-major. Each advice column is a galois array of 2^k field
elements plus a parallel uint8 array of CellState, so the checker can evaluate
a gate over every row at once. Selector columns are boolean arrays.

A Trace is written by exactly one layouter during synthesis and then sealed.
Every cell is write-once; rows outside [0, 2^k) do not exist. Values are only
read back through value(), which refuses cells that hold no known value.

Shape-only traces (witness_mode=False) accept unknown values and mark those
cells UNKNOWN. They are used to see a circuit's layout without private inputs.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

import galois
import numpy as np

from plonkish.primitives.field import to_field
from plonkish.primitives.value import Value
from plonkish.protocol.errors import (
    CellAlreadyAssignedError,
    ColumnNotInPermutationError,
    ConfigurationError,
    MissingWitnessError,
    NotEnoughRowsAvailableError,
    TraceSealedError,
)
from plonkish.protocol.schema import Column, ColumnKind, ConstraintSchema, Selector


class CellState(IntEnum):
    UNASSIGNED = 0
    UNKNOWN = 1  # assigned during shape-only synthesis, value not available
    KNOWN = 2


@dataclass(frozen=True)
class Cell:
    """Address of a single cell."""
    column: Column
    row: int

    def __str__(self) -> str:
        return f"{self.column}@{self.row}"


@dataclass(frozen=True)
class CopyConstraint:
    """Two cells that must hold the same value."""
    left: Cell
    right: Cell


@dataclass(frozen=True)
class RegionInfo:
    """Where a region landed: rows [start, start + height)."""
    name: str
    start: int
    height: int

    @property
    def end(self) -> int:
        return self.start + self.height


class Trace:
    """Row-indexed table of witness values for one circuit execution."""

    def __init__(self, schema: ConstraintSchema, k: int, witness_mode: bool = True):
        if k < 1:
            raise ConfigurationError(f"k must be at least 1, got {k}")
        self.schema = schema
        self.k = k
        self.n = 1 << k
        self.witness_mode = witness_mode

        field = schema.field
        self._values: Dict[Column, galois.FieldArray] = {
            col: field.Zeros(self.n) for col in schema.advice_columns
        }
        self._states: Dict[Column, np.ndarray] = {
            col: np.zeros(self.n, dtype=np.uint8) for col in schema.advice_columns
        }
        self._selectors: Dict[Selector, np.ndarray] = {
            sel: np.zeros(self.n, dtype=bool) for sel in schema.selectors
        }
        self.annotations: Dict[Cell, str] = {}
        self.copies: List[CopyConstraint] = []
        self.regions: List[RegionInfo] = []
        self._sealed = False

    # --- Writes ---

    def assign(self, column: Column, row: int, value: Value,
               annotation: str = "", region: Optional[str] = None) -> Value:
        """Write `value` into (column, row) and return it coerced into the field.

        Raises:
            MissingWitnessError: value is unknown and this is a witness trace
            CellAlreadyAssignedError: the cell was written before
            NotEnoughRowsAvailableError: row is outside the trace
        """
        self._check_writable()
        self._check_column(column)
        self._check_row(row)
        if self._states[column][row] != CellState.UNASSIGNED:
            raise CellAlreadyAssignedError(column, row, region)

        value = Value.lift(value)
        if value.is_known:
            field_value = to_field(self.schema.field, value.inner)
            self._values[column][row] = field_value
            self._states[column][row] = CellState.KNOWN
            result = Value.known(field_value)
        elif self.witness_mode:
            raise MissingWitnessError(annotation or str(Cell(column, row)), region)
        else:
            self._states[column][row] = CellState.UNKNOWN
            result = Value.unknown()

        if annotation:
            self.annotations[Cell(column, row)] = annotation
        return result

    def enable_selector(self, selector: Selector, row: int) -> None:
        self._check_writable()
        if selector not in self._selectors:
            raise ConfigurationError(f"Selector {selector} is not part of this schema")
        self._check_row(row)
        self._selectors[selector][row] = True

    def copy(self, left: Cell, right: Cell) -> None:
        """Record that `left` and `right` must be equal.

        Raises:
            ColumnNotInPermutationError: either column is not equality-enabled
        """
        self._check_writable()
        for cell in (left, right):
            self._check_column(cell.column)
            if not self.schema.is_equality_enabled(cell.column):
                raise ColumnNotInPermutationError(cell.column)
            self._check_row(cell.row)
        self.copies.append(CopyConstraint(left, right))

    def record_region(self, info: RegionInfo) -> None:
        self._check_writable()
        self.regions.append(info)

    def seal(self) -> "Trace":
        """End synthesis. Later writes raise TraceSealedError."""
        self._sealed = True
        return self

    @property
    def sealed(self) -> bool:
        return self._sealed

    # --- Reads ---

    def state(self, cell: Cell) -> CellState:
        self._check_column(cell.column)
        self._check_row(cell.row)
        return CellState(int(self._states[cell.column][cell.row]))

    def is_assigned(self, cell: Cell) -> bool:
        return self.state(cell) == CellState.KNOWN

    def value(self, cell: Cell) -> galois.FieldArray:
        """Known value of a cell. Rows do not wrap; rotated reads wrap at the query site.

        Raises:
            MissingWitnessError: the cell is unassigned or unknown
            NotEnoughRowsAvailableError: row is outside the trace
        """
        if self.state(cell) != CellState.KNOWN:
            raise MissingWitnessError(self.annotations.get(cell, str(cell)), self.region_at(cell.row))
        return self._values[cell.column][cell.row]

    def column_values(self, column: Column) -> galois.FieldArray:
        """All values of an advice column (unassigned rows read as zero)."""
        self._check_column(column)
        return self._values[column]

    def column_states(self, column: Column) -> np.ndarray:
        self._check_column(column)
        return self._states[column]

    def selector_values(self, selector: Selector) -> np.ndarray:
        return self._selectors[selector]

    def region_at(self, row: int) -> Optional[str]:
        for info in self.regions:
            if info.start <= row < info.end:
                return info.name
        return None

    @property
    def used_rows(self) -> int:
        """One past the last row holding a cell or an enabled selector."""
        used = 0
        for states in self._states.values():
            rows = np.nonzero(states)[0]
            if len(rows):
                used = max(used, int(rows[-1]) + 1)
        for enabled in self._selectors.values():
            rows = np.nonzero(enabled)[0]
            if len(rows):
                used = max(used, int(rows[-1]) + 1)
        return used

    # --- Utilities ---

    def tampered(self, column: Column, row: int, value: int) -> "Trace":
        """Copy of this trace with one advice cell overwritten.

        Bypasses write-once on purpose: it models a corrupted witness handed to
        the checker. The copy keeps this trace's sealed state.
        """
        self._check_column(column)
        self._check_row(row)
        clone = Trace.__new__(Trace)
        clone.schema = self.schema
        clone.k = self.k
        clone.n = self.n
        clone.witness_mode = self.witness_mode
        clone._values = {col: vals.copy() for col, vals in self._values.items()}
        clone._states = {col: states.copy() for col, states in self._states.items()}
        clone._selectors = {sel: on.copy() for sel, on in self._selectors.items()}
        clone.annotations = dict(self.annotations)
        clone.copies = list(self.copies)
        clone.regions = list(self.regions)
        clone._sealed = self._sealed

        clone._values[column][row] = to_field(self.schema.field, value)
        clone._states[column][row] = CellState.KNOWN
        return clone

    def to_table(self, rows: Optional[int] = None) -> Tuple[List[str], List[List[str]]]:
        """Render the first `rows` rows (default: used rows) as strings.

        Returns:
            (header, body): header names every column, body has one list per
            row. Unknown cells print as "?", unassigned cells as "".
        """
        rows = self.used_rows if rows is None else min(rows, self.n)
        header = ["row"] + [str(c) for c in self.schema.advice_columns] + [str(s) for s in self.schema.selectors]
        body = []
        for r in range(rows):
            line = [str(r)]
            for col in self.schema.advice_columns:
                state = self._states[col][r]
                if state == CellState.KNOWN:
                    line.append(str(int(self._values[col][r])))
                elif state == CellState.UNKNOWN:
                    line.append("?")
                else:
                    line.append("")
            for sel in self.schema.selectors:
                line.append("1" if self._selectors[sel][r] else "0")
            body.append(line)
        return header, body

    # --- Checks ---

    def _check_writable(self) -> None:
        if self._sealed:
            raise TraceSealedError("Trace is sealed; synthesis has finished")

    def _check_column(self, column: Column) -> None:
        if column.kind is not ColumnKind.ADVICE or column not in self._values:
            raise ConfigurationError(f"Column {column} is not an advice column of this schema")

    def _check_row(self, row: int) -> None:
        if not 0 <= row < self.n:
            raise NotEnoughRowsAvailableError(self.k, row)
