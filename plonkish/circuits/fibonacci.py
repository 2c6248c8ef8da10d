"""Fibonacci circuit: a pairwise-sum recurrence laid out one step per row.

Layout (one region per row, all rows gated by `s`):

    | a      | b      | c      | s |
    |--------|--------|--------|---|
    | f0     | f1     | f2     | 1 |   "first row": a, b are the seeds
    | f1     | f2     | f3     | 1 |   "next row": a, b copied from the row above
    | f2     | f3     | f4     | 1 |
    | ...                          |

Gate "sum": s * (a + b - c) == 0 at the current row.

Values are carried from row to row with copy constraints rather than being
written fresh: a[i] is constrained equal to b[i-1] and b[i] to c[i-1]. Without
them a prover could start every row from arbitrary numbers and still satisfy
the gate.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from plonkish.primitives.expression import Rotation
from plonkish.primitives.field import Fp, FieldType, field_name, to_field, to_ints
from plonkish.primitives.value import Value
from plonkish.protocol.layouter import AssignedCell, Layouter, Region
from plonkish.protocol.schema import Column, ConstraintSystem, Selector
from plonkish.protocol.trace import Trace

from .base import Chip, Circuit

# First row plus seven more: seeds (1, 1) give c = 2, 3, 5, ..., 55
DEFAULT_STEPS = 7


@dataclass(frozen=True)
class FiboConfig:
    """Column handles: advice = (a, b, c), all equality-enabled."""
    advice: Tuple[Column, Column, Column]
    selector: Selector


class FiboChip(Chip):
    """Assigns rows of the Fibonacci recurrence."""

    config: FiboConfig

    @classmethod
    def configure(cls, meta: ConstraintSystem) -> FiboConfig:
        col_a = meta.advice_column("a")
        col_b = meta.advice_column("b")
        col_c = meta.advice_column("c")
        selector = meta.selector("s")

        # Rows copy values from the row above, so every column needs equality
        meta.enable_equality(col_a)
        meta.enable_equality(col_b)
        meta.enable_equality(col_c)

        def sum_gate(cells):
            a = cells.query_advice(col_a, Rotation.cur())
            b = cells.query_advice(col_b, Rotation.cur())
            c = cells.query_advice(col_c, Rotation.cur())
            return a + b - c

        meta.create_gate("sum", selector, sum_gate)

        return FiboConfig(advice=(col_a, col_b, col_c), selector=selector)

    def assign_first_row(self, layouter: Layouter, a: Value,
                         b: Value) -> Tuple[AssignedCell, AssignedCell, AssignedCell]:
        """Write the seeds and their sum; return the (a, b, c) cells.

        Raises:
            MissingWitnessError: a seed is unknown during witness synthesis
        """
        def assign(region: Region) -> Tuple[AssignedCell, AssignedCell, AssignedCell]:
            self.config.selector.enable(region, 0)

            a_cell = region.assign_advice("a", self.config.advice[0], 0, a)
            b_cell = region.assign_advice("b", self.config.advice[1], 0, b)
            c_cell = region.assign_advice("c", self.config.advice[2], 0, a_cell.value + b_cell.value)
            return a_cell, b_cell, c_cell

        return layouter.assign_region("first row", assign)

    def assign_row(self, layouter: Layouter, prev_b: AssignedCell,
                   prev_c: AssignedCell) -> AssignedCell:
        """Copy (prev_b, prev_c) into a new row and write their sum; return the new c cell."""
        def assign(region: Region) -> AssignedCell:
            self.config.selector.enable(region, 0)

            prev_b.copy_advice("a", region, self.config.advice[0], 0)
            prev_c.copy_advice("b", region, self.config.advice[1], 0)

            c_val = prev_b.value + prev_c.value
            return region.assign_advice("c", self.config.advice[2], 0, c_val)

        return layouter.assign_region("next row", assign)


class FibonacciCircuit(Circuit):
    """Fills `steps + 1` rows of the recurrence starting from seeds (a, b).

    Args:
        a, b: Seeds; None means unknown (shape-only synthesis)
        steps: Number of rows after the first
        field: galois field class for all values
    """

    def __init__(self, a: Optional[Union[int, Value]] = None, b: Optional[Union[int, Value]] = None,
                 steps: int = DEFAULT_STEPS, field: FieldType = Fp):
        if steps < 0:
            raise ValueError(f"steps must be non-negative, got {steps}")
        self.field = field
        self.a = self._seed(a)
        self.b = self._seed(b)
        self.steps = steps

    def _seed(self, seed: Optional[Union[int, Value]]) -> Value:
        if isinstance(seed, Value):
            return seed.map(lambda v: to_field(self.field, v))
        return Value.from_optional(seed).map(lambda v: to_field(self.field, v))

    def without_witnesses(self) -> "FibonacciCircuit":
        return FibonacciCircuit(None, None, self.steps, self.field)

    @classmethod
    def configure(cls, meta: ConstraintSystem) -> FiboConfig:
        return FiboChip.configure(meta)

    def synthesize(self, config: FiboConfig, layouter: Layouter) -> None:
        chip = FiboChip(config)
        layouter = layouter.namespace("fib")

        _, prev_b, prev_c = chip.assign_first_row(layouter, self.a, self.b)

        for _ in range(self.steps):
            c = chip.assign_row(layouter, prev_b, prev_c)
            prev_b, prev_c = prev_c, c

    def required_rows(self) -> int:
        return self.steps + 1

    def minimum_k(self) -> int:
        """Smallest k whose 2^k rows fit the circuit."""
        return max(1, (self.required_rows() - 1).bit_length())

    def __repr__(self) -> str:
        return (f"FibonacciCircuit(a={self.a!r}, b={self.b!r}, steps={self.steps}, "
                f"field={field_name(self.field)!r})")


def fibonacci_sequence(a: int, b: int, steps: int, field: FieldType = Fp) -> List[int]:
    """Reference values of the c column, computed directly in the field."""
    x, y = to_field(field, a), to_field(field, b)
    out = []
    for _ in range(steps + 1):
        x, y = y, x + y
        out.append(int(y))
    return out


def c_column(trace: Trace, config: FiboConfig) -> List[int]:
    """Values of the c column, one per region, in row order."""
    values = to_ints(trace.column_values(config.advice[2]))
    return [values[info.start] for info in trace.regions]
