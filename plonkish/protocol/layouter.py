"""Regions and the layouter that places them in the trace.

Chips never address absolute rows. They ask the layouter for a region, write
at offsets relative to the region's first row, and get back AssignedCell
handles that later regions can copy from:

    def assign(region):
        config.selector.enable(region, 0)
        return region.assign_advice("c", config.advice[2], 0, a + b)

    c_cell = layouter.assign_region("first row", assign)

SimpleLayouter packs regions one after another: each region starts at the
first row after everything placed so far, and is as tall as its largest
offset + 1.
"""

from typing import Any, Callable, TypeVar, Union

from plonkish.primitives.value import Value
from plonkish.protocol.schema import Column, Selector
from plonkish.protocol.trace import Cell, RegionInfo, Trace

T = TypeVar("T")

ValueSource = Union[Value, Callable[[], Value], Any]


class AssignedCell:
    """A cell written during synthesis, together with the value written to it."""

    def __init__(self, cell: Cell, value: Value):
        self.cell = cell
        self.value = value

    @property
    def column(self) -> Column:
        return self.cell.column

    @property
    def row(self) -> int:
        return self.cell.row

    def copy_advice(self, annotation: str, region: "Region", column: Column, offset: int) -> "AssignedCell":
        """Assign this cell's value at (column, offset) in `region` and constrain the two equal."""
        assigned = region.assign_advice(annotation, column, offset, self.value)
        region.constrain_equal(self.cell, assigned.cell)
        return assigned

    def __repr__(self) -> str:
        return f"AssignedCell({self.cell}, {self.value!r})"


class Region:
    """A contiguous block of rows starting at `start`, addressed by offset."""

    def __init__(self, name: str, start: int, trace: Trace):
        self.name = name
        self.start = start
        self._trace = trace
        self.height = 0

    def _row(self, offset: int) -> int:
        if offset < 0:
            raise ValueError(f"Region offsets are non-negative, got {offset}")
        self.height = max(self.height, offset + 1)
        return self.start + offset

    def enable_selector(self, selector: Selector, offset: int) -> None:
        self._trace.enable_selector(selector, self._row(offset))

    def assign_advice(self, annotation: str, column: Column, offset: int,
                      value: ValueSource) -> AssignedCell:
        """Write a value into (column, offset).

        `value` may be a Value, a zero-argument callable returning one, or a
        raw int / field element (treated as known).
        """
        if callable(value) and not isinstance(value, Value):
            value = value()
        row = self._row(offset)
        written = self._trace.assign(column, row, Value.lift(value), annotation, self.name)
        return AssignedCell(Cell(column, row), written)

    def constrain_equal(self, left: Cell, right: Cell) -> None:
        self._trace.copy(left, right)


class SimpleLayouter:
    """Places regions sequentially in a single trace."""

    def __init__(self, trace: Trace):
        self.trace = trace
        self._next_row = 0

    def assign_region(self, name: str, assignment: Callable[[Region], T]) -> T:
        region = Region(name, self._next_row, self.trace)
        result = assignment(region)
        self.trace.record_region(RegionInfo(name, region.start, region.height))
        self._next_row += region.height
        return result

    def namespace(self, name: str) -> "NamespacedLayouter":
        return NamespacedLayouter(self, name)

    @property
    def next_row(self) -> int:
        return self._next_row


class NamespacedLayouter:
    """Layouter view that prefixes region names with a namespace."""

    def __init__(self, parent: Union[SimpleLayouter, "NamespacedLayouter"], prefix: str):
        self._parent = parent
        self.prefix = prefix

    def assign_region(self, name: str, assignment: Callable[[Region], T]) -> T:
        return self._parent.assign_region(f"{self.prefix}/{name}", assignment)

    def namespace(self, name: str) -> "NamespacedLayouter":
        return NamespacedLayouter(self, name)

    @property
    def trace(self) -> Trace:
        return self._parent.trace

    @property
    def next_row(self) -> int:
        return self._parent.next_row


Layouter = Union[SimpleLayouter, NamespacedLayouter]
