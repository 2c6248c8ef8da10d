"""Proving backend interface and the local mock prover.

A real backend consumes a finished (schema, trace) pair and produces a proof.
This package does not ship one; ProvingBackend pins down the hand-off so one
can be plugged in, and MockBackend implements it with the local checker.

MockBackend's "proof" is the sealed trace itself, serialized to JSON. It hides
nothing and proves nothing cryptographically; verify() rebuilds the trace
against the verifier's own schema and runs the satisfiability checker on it.

MockProver is the usual entry point for tests and the CLI:

    prover = MockProver.run(k=4, circuit=FibonacciCircuit(a=1, b=1))
    prover.assert_satisfied()

run() configures the circuit, synthesizes a fresh trace, and seals it.
Configuration and synthesis errors propagate out of run() unchanged.
"""

import json
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from plonkish.primitives.value import Value
from plonkish.protocol.checker import VerificationReport, VerifyFailure, verify
from plonkish.protocol.errors import ConfigurationError, PlonkishError, UnsatisfiedConstraintsError
from plonkish.protocol.layouter import SimpleLayouter
from plonkish.protocol.schema import ConstraintSchema, ConstraintSystem
from plonkish.protocol.trace import Cell, CellState, RegionInfo, Trace

if TYPE_CHECKING:
    from plonkish.circuits.base import Circuit

# Cell marker for values that were assigned during shape-only synthesis
UNKNOWN_CELL = "?"


class ProvingBackend(ABC):
    """Consumes a finished schema/trace pair."""

    @abstractmethod
    def prove(self, schema: ConstraintSchema, trace: Trace, k: int,
              public_inputs: Sequence[int] = ()) -> bytes:
        """Produce a proof.

        Args:
            schema: Constraint schema
            trace: Sealed trace synthesized against `schema`
            k: Circuit size parameter (trace has 2^k rows)
            public_inputs: Public inputs (none of the shipped circuits have any)

        Returns:
            Serialized proof
        """
        pass

    @abstractmethod
    def verify(self, schema: ConstraintSchema, proof: bytes, k: int,
               public_inputs: Sequence[int] = ()) -> bool:
        """Check a proof produced by prove() against `schema`.

        Returns:
            True if the proof is accepted, False otherwise
        """
        pass

    def check_handoff(self, schema: ConstraintSchema, trace: Trace, k: int,
                      public_inputs: Sequence[int] = ()) -> None:
        """Validate the pair before proving.

        Raises:
            ConfigurationError: trace not sealed, built for another schema or
                size, or public inputs given to a circuit without instance columns
        """
        if not trace.sealed:
            raise ConfigurationError("Trace must be sealed before it is handed to a backend")
        if trace.schema != schema:
            raise ConfigurationError("Trace was synthesized against a different schema")
        if trace.k != k:
            raise ConfigurationError(f"Trace has k={trace.k}, backend was asked for k={k}")
        if len(public_inputs):
            raise ConfigurationError("Circuit has no instance columns; public inputs must be empty")


class MockBackend(ProvingBackend):
    """Backend stand-in: the proof is the trace, verifying means running the checker."""

    def prove(self, schema: ConstraintSchema, trace: Trace, k: int,
              public_inputs: Sequence[int] = ()) -> bytes:
        self.check_handoff(schema, trace, k, public_inputs)
        return json.dumps(trace_to_json(trace)).encode()

    def verify(self, schema: ConstraintSchema, proof: bytes, k: int,
               public_inputs: Sequence[int] = ()) -> bool:
        if len(public_inputs):
            print("ERROR: Circuit has no instance columns; public inputs must be empty")
            return False

        try:
            trace = trace_from_json(schema, json.loads(proof))
        except (PlonkishError, ValueError, KeyError, TypeError, IndexError) as e:
            print(f"ERROR: Malformed proof: {e}")
            return False

        if trace.k != k:
            print(f"ERROR: Proof has k={trace.k}, expected k={k}")
            return False

        report = verify(schema, trace)
        for failure in report:
            print(f"ERROR: {failure}")
        return report.is_satisfied


# --- Trace Serialization ---

def trace_to_json(trace: Trace) -> Dict[str, Any]:
    """Serialize a trace to a JSON-compatible dict.

    Advice cells are ints when known, "?" when unknown and None when
    unassigned. Columns are listed in schema order; copies reference columns by
    their index.
    """
    advice = []
    for column in trace.schema.advice_columns:
        values = trace.column_values(column)
        states = trace.column_states(column)
        cells: List[Any] = []
        for row in range(trace.n):
            if states[row] == CellState.KNOWN:
                cells.append(int(values[row]))
            elif states[row] == CellState.UNKNOWN:
                cells.append(UNKNOWN_CELL)
            else:
                cells.append(None)
        advice.append(cells)

    return {
        "k": trace.k,
        "witness_mode": trace.witness_mode,
        "advice": advice,
        "selectors": [
            [int(row) for row in trace.selector_values(sel).nonzero()[0]]
            for sel in trace.schema.selectors
        ],
        "copies": [
            [c.left.column.index, c.left.row, c.right.column.index, c.right.row]
            for c in trace.copies
        ],
        "regions": [[info.name, info.start, info.height] for info in trace.regions],
    }


def trace_from_json(schema: ConstraintSchema, data: Dict[str, Any]) -> Trace:
    """Rebuild a sealed trace from trace_to_json() output.

    Every cell goes through the normal write path, so a malformed document
    fails with the same errors synthesis would raise.

    Raises:
        ValueError: Column counts do not match `schema`
        PlonkishError: A cell, selector or copy is invalid for `schema`
    """
    advice_columns = schema.advice_columns
    if len(data["advice"]) != len(advice_columns):
        raise ValueError(
            f"Proof has {len(data['advice'])} advice columns, schema has {len(advice_columns)}"
        )
    if len(data["selectors"]) != len(schema.selectors):
        raise ValueError(
            f"Proof has {len(data['selectors'])} selectors, schema has {len(schema.selectors)}"
        )

    trace = Trace(schema, data["k"], witness_mode=data["witness_mode"])
    for column, cells in zip(advice_columns, data["advice"]):
        if len(cells) != trace.n:
            raise ValueError(f"Column {column} has {len(cells)} rows, expected {trace.n}")
        for row, cell in enumerate(cells):
            if cell is None:
                continue
            value = Value.unknown() if cell == UNKNOWN_CELL else Value.known(cell)
            trace.assign(column, row, value)

    for selector, rows in zip(schema.selectors, data["selectors"]):
        for row in rows:
            trace.enable_selector(selector, row)

    for left_col, left_row, right_col, right_row in data["copies"]:
        trace.copy(Cell(advice_columns[left_col], left_row), Cell(advice_columns[right_col], right_row))

    for name, start, height in data["regions"]:
        trace.record_region(RegionInfo(name, start, height))

    return trace.seal()


class MockProver:
    """Synthesizes a circuit and checks the resulting trace."""

    def __init__(self, k: int, schema: ConstraintSchema, trace: Trace,
                 public_inputs: Sequence[int] = ()):
        self.k = k
        self.schema = schema
        self.trace = trace
        self.public_inputs = list(public_inputs)
        self._report: Optional[VerificationReport] = None

    @classmethod
    def run(cls, k: int, circuit: "Circuit", public_inputs: Sequence[int] = ()) -> "MockProver":
        """Configure `circuit`, synthesize it into a fresh 2^k-row trace, and seal it."""
        if len(public_inputs):
            raise ConfigurationError("Circuit has no instance columns; public inputs must be empty")
        meta = ConstraintSystem(circuit.field)
        config = circuit.configure(meta)
        schema = meta.build()

        trace = Trace(schema, k)
        circuit.synthesize(config, SimpleLayouter(trace))
        trace.seal()
        return cls(k, schema, trace, public_inputs)

    def report(self) -> VerificationReport:
        if self._report is None:
            self._report = verify(self.schema, self.trace)
        return self._report

    def verify(self) -> List[VerifyFailure]:
        """Every failure found; empty when the trace satisfies the schema."""
        return list(self.report().failures)

    def assert_satisfied(self) -> None:
        """Print every failure, then raise UnsatisfiedConstraintsError if there were any."""
        report = self.report()
        if report.is_satisfied:
            return
        for failure in report.failures:
            print(failure)
        raise UnsatisfiedConstraintsError(report)


def extract_layout(circuit: "Circuit", k: int) -> Trace:
    """Synthesize `circuit` without its witnesses and return the sealed shape trace.

    Cells hold CellState.UNKNOWN instead of values; regions, selectors and copy
    constraints are recorded exactly as in a witness run.
    """
    shape = circuit.without_witnesses()
    meta = ConstraintSystem(shape.field)
    config = shape.configure(meta)
    schema = meta.build()

    trace = Trace(schema, k, witness_mode=False)
    shape.synthesize(config, SimpleLayouter(trace))
    return trace.seal()
