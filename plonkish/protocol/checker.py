"""Satisfiability checker.

Checks a finished trace against its schema without any cryptography:

1. Gates - for every gate and each of its polynomials, evaluate the polynomial
   over all rows at once and look at the rows where the gate's selector is
   enabled. A row fails if a queried cell holds no known value
   (CellNotAssigned) or if the polynomial is not zero (ConstraintNotSatisfied).
2. Copy constraints - both cells must hold known values, and the values must
   be equal (CopyConstraintViolated).

Nothing stops at the first failure: every finding is collected into a
VerificationReport so one run shows every violation. Failures are listed in a
fixed order (gates in declaration order, polynomial by polynomial; then copy
constraints in the order they were recorded), and the checker neither reads
nor writes anything but its inputs, so checking the same trace twice gives
equal reports.

A proving backend performs the same check implicitly while building a proof;
this module is the local stand-in used before handing a trace over.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import galois
import numpy as np

from plonkish.constraints.base import RowConstraintContext, TraceConstraintContext
from plonkish.protocol.errors import UnsatisfiedConstraintsError
from plonkish.protocol.schema import Column, ConstraintSchema, Gate
from plonkish.protocol.trace import Cell, CellState, CopyConstraint, Trace


# --- Failure Records ---

class VerifyFailure:
    """Base class for a single reported violation."""


@dataclass(frozen=True)
class CellNotAssigned(VerifyFailure):
    """A constrained cell holds no known value.

    Attributes:
        context: What needed the cell, e.g. "gate 'sum' poly 0" or "copy constraint"
        row: Row the gate was evaluated at (for copies, the cell's own row)
        cell: The cell that was read
        region: Region the row belongs to, if any
    """
    context: str
    row: int
    cell: Cell
    region: Optional[str] = None

    def __str__(self) -> str:
        where = f" in region '{self.region}'" if self.region else ""
        return f"{self.context} at row {self.row}{where}: cell {self.cell} is not assigned"


@dataclass(frozen=True)
class ConstraintNotSatisfied(VerifyFailure):
    """A gate polynomial did not vanish on an enabled row.

    Attributes:
        gate: Gate name
        poly: Index of the failing polynomial within the gate
        row: Row the gate was evaluated at
        region: Region the row belongs to, if any
        cell_values: (cell, value) for every cell the polynomial read
    """
    gate: str
    poly: int
    row: int
    region: Optional[str]
    cell_values: Tuple[Tuple[Cell, int], ...]

    def __str__(self) -> str:
        where = f" in region '{self.region}'" if self.region else ""
        values = ", ".join(f"{cell} = {value}" for cell, value in self.cell_values)
        return f"Constraint {self.poly} of gate '{self.gate}' is not satisfied at row {self.row}{where} ({values})"


@dataclass(frozen=True)
class CopyConstraintViolated(VerifyFailure):
    """Two copy-constrained cells hold different values."""
    left: Cell
    right: Cell
    left_value: int
    right_value: int

    def __str__(self) -> str:
        return (
            f"Copy constraint violated: {self.left} = {self.left_value} "
            f"but {self.right} = {self.right_value}"
        )


# --- Report ---

@dataclass(frozen=True)
class VerificationReport:
    """Aggregated outcome of one checker run."""
    failures: Tuple[VerifyFailure, ...]
    rows_checked: int
    gates_checked: int
    copies_checked: int

    @property
    def is_satisfied(self) -> bool:
        return not self.failures

    def gate_failures(self) -> List[ConstraintNotSatisfied]:
        return [f for f in self.failures if isinstance(f, ConstraintNotSatisfied)]

    def copy_failures(self) -> List[CopyConstraintViolated]:
        return [f for f in self.failures if isinstance(f, CopyConstraintViolated)]

    def unassigned_failures(self) -> List[CellNotAssigned]:
        return [f for f in self.failures if isinstance(f, CellNotAssigned)]

    def failing_rows(self, gate: str) -> List[int]:
        """Rows at which `gate` evaluated to a nonzero value."""
        return sorted({f.row for f in self.gate_failures() if f.gate == gate})

    def __iter__(self) -> Iterator[VerifyFailure]:
        return iter(self.failures)

    def __len__(self) -> int:
        return len(self.failures)


# --- Main Entry Points ---

def verify(schema: ConstraintSchema, trace: Trace) -> VerificationReport:
    """Check every gate and every copy constraint of `trace`.

    Args:
        schema: The schema the trace was synthesized against
        trace: Finished trace

    Returns:
        VerificationReport listing every failure (empty when satisfied)
    """
    if trace.schema is not schema and trace.schema != schema:
        raise ValueError("Trace was synthesized against a different schema")

    failures: List[VerifyFailure] = []
    ctx = TraceConstraintContext(trace)
    for gate in schema.gates:
        failures.extend(_check_gate(ctx, gate))
    for copy in trace.copies:
        failures.extend(_check_copy(trace, copy))

    return VerificationReport(
        failures=tuple(failures),
        rows_checked=trace.n,
        gates_checked=len(schema.gates),
        copies_checked=len(trace.copies),
    )


def assert_satisfied(schema: ConstraintSchema, trace: Trace) -> VerificationReport:
    """Like verify(), but raise UnsatisfiedConstraintsError if anything failed."""
    report = verify(schema, trace)
    if not report.is_satisfied:
        raise UnsatisfiedConstraintsError(report)
    return report


def evaluate_gate_at_row(trace: Trace, gate: Gate, row: int) -> List[galois.FieldArray]:
    """Evaluate each of `gate`'s polynomials at one row, ignoring the selector.

    Raises:
        MissingWitnessError: a queried cell holds no known value
    """
    ctx = RowConstraintContext(trace, row)
    return [ctx.evaluate(poly) for poly in gate.polys]


# --- Gate Checks ---

def _check_gate(ctx: TraceConstraintContext, gate: Gate) -> List[VerifyFailure]:
    trace = ctx.trace
    enabled = trace.selector_values(gate.selector)
    if not enabled.any():
        return []

    failures: List[VerifyFailure] = []
    for poly_idx, poly in enumerate(gate.polys):
        queries = poly.queries()
        known = {q: ctx.known_mask(q) for q in queries}
        all_known = np.ones(trace.n, dtype=bool)
        for mask in known.values():
            all_known &= mask

        # Rows whose inputs are incomplete: report each missing cell
        context = f"gate '{gate.name}' poly {poly_idx}"
        for row in np.nonzero(enabled & ~all_known)[0]:
            row = int(row)
            for q in queries:
                if not known[q][row]:
                    failures.append(CellNotAssigned(
                        context=context,
                        row=row,
                        cell=_queried_cell(trace, q.column, row, q.rotation.value),
                        region=trace.region_at(row),
                    ))

        # Rows with complete inputs: the polynomial must vanish
        values = ctx.evaluate(poly)
        nonzero = np.asarray(values != 0, dtype=bool)
        for row in np.nonzero(enabled & all_known & nonzero)[0]:
            row = int(row)
            cell_values = []
            for q in queries:
                cell = _queried_cell(trace, q.column, row, q.rotation.value)
                cell_values.append((cell, int(trace.value(cell))))
            failures.append(ConstraintNotSatisfied(
                gate=gate.name,
                poly=poly_idx,
                row=row,
                region=trace.region_at(row),
                cell_values=tuple(cell_values),
            ))
    return failures


def _queried_cell(trace: Trace, column: Column, row: int, rotation: int) -> Cell:
    return Cell(column, (row + rotation) % trace.n)


# --- Copy Checks ---

def _check_copy(trace: Trace, copy: CopyConstraint) -> List[VerifyFailure]:
    missing = [cell for cell in (copy.left, copy.right) if trace.state(cell) != CellState.KNOWN]
    if missing:
        return [
            CellNotAssigned(context="copy constraint", row=cell.row, cell=cell, region=trace.region_at(cell.row))
            for cell in missing
        ]

    left_value = int(trace.value(copy.left))
    right_value = int(trace.value(copy.right))
    if left_value != right_value:
        return [CopyConstraintViolated(copy.left, copy.right, left_value, right_value)]
    return []
