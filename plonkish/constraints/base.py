"""Contexts for evaluating gate expressions against a trace.

ConstraintContext gives gate expressions a uniform way to read cells, whether
they are evaluated over every row at once (returns arrays) or at one row
(returns scalars). The same Expression works in both thanks to galois
broadcasting.

Example:
    gate = schema.gate('add')
    poly = gate.polys[0]

    # All rows: array with one entry per row
    values = TraceConstraintContext(trace).evaluate(poly)

    # One row: field scalar
    value = RowConstraintContext(trace, row=3).evaluate(poly)
"""

from abc import ABC, abstractmethod
from typing import Union

import galois
import numpy as np

from plonkish.primitives.expression import ColumnQuery, Expression
from plonkish.primitives.field import to_field
from plonkish.protocol.schema import Column
from plonkish.protocol.trace import Cell, CellState, Trace

# Type aliases for clarity
FieldPoly = galois.FieldArray  # One field element per row
FieldScalar = galois.FieldArray  # 0-d field element


class ConstraintContext(ABC):
    """Uniform interface for expression evaluation."""

    def __init__(self, trace: Trace):
        self.trace = trace
        self.field = trace.schema.field

    @abstractmethod
    def query(self, column: Column, rotation: int = 0) -> Union[FieldPoly, FieldScalar]:
        """Get column at the current row offset by `rotation`.

        Args:
            column: Advice column
            rotation: Row offset (0 = current, 1 = next, -1 = previous)

        Returns:
            TraceConstraintContext: array shifted so entry i holds row i + rotation
            RowConstraintContext: scalar value of that single cell
        """
        pass

    def constant(self, value: int) -> FieldScalar:
        return to_field(self.field, value)

    def evaluate(self, expr: Expression) -> Union[FieldPoly, FieldScalar]:
        """Evaluate `expr` by reading cells through this context."""
        return expr.evaluate(
            constant=self.constant,
            query=lambda q: self.query(q.column, q.rotation.value),
            negate=lambda x: -x,
            add=lambda x, y: x + y,
            sub=lambda x, y: x - y,
            mul=lambda x, y: x * y,
        )


class TraceConstraintContext(ConstraintContext):
    """Evaluates over all 2^k rows at once; rotations wrap around (circular)."""

    def query(self, column: Column, rotation: int = 0) -> FieldPoly:
        # Entry i of the result is the value at row i + rotation
        return np.roll(self.trace.column_values(column), -rotation)

    def known_mask(self, query: ColumnQuery) -> np.ndarray:
        """Boolean array: entry i is True when the cell read at row i holds a known value."""
        states = self.trace.column_states(query.column)
        return np.roll(states == CellState.KNOWN, -query.rotation.value)

    def evaluate(self, expr: Expression) -> FieldPoly:
        result = super().evaluate(expr)
        if np.ndim(result) == 0:
            # Constant-only expression: broadcast to one entry per row
            result = self.field.Zeros(self.trace.n) + result
        return result


class RowConstraintContext(ConstraintContext):
    """Evaluates at a single row; reading a cell without a known value raises MissingWitnessError."""

    def __init__(self, trace: Trace, row: int):
        super().__init__(trace)
        self.row = row

    def query(self, column: Column, rotation: int = 0) -> FieldScalar:
        return self.trace.value(Cell(column, (self.row + rotation) % self.trace.n))
