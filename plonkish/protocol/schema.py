"""Constraint system schema: columns, selectors and gates.

Configuration happens once per circuit, through a mutable ConstraintSystem:

    meta = ConstraintSystem(Fp)
    a, b, c = meta.advice_column("a"), meta.advice_column("b"), meta.advice_column("c")
    s = meta.selector("s")
    meta.enable_equality(a)
    meta.create_gate("sum", s, lambda cells: cells.query_advice(a)
                                           + cells.query_advice(b)
                                           - cells.query_advice(c))
    schema = meta.build()

build() returns a ConstraintSchema, a frozen snapshot that any number of
traces can be checked against. Nothing about a schema changes after build();
the builder itself refuses further declarations.

Every check that can be made without a trace is made here, at declaration
time: queries must name columns declared in this system, gate selectors must
belong to it, and equality can only be enabled on its own advice columns.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

from plonkish.primitives.expression import ColumnQuery, Expression, Rotation
from plonkish.primitives.field import Fp, FieldType
from plonkish.protocol.errors import ConfigurationError


# --- Handles ---

class ColumnKind(Enum):
    """What a column holds."""
    ADVICE = "advice"      # private witness values
    SELECTOR = "selector"  # boolean flag enabling gates per row


@dataclass(frozen=True)
class Column:
    """Handle to a declared column. Identity is (kind, index); name is display only."""
    index: int
    kind: ColumnKind
    name: str = field(default="", compare=False)

    def __str__(self) -> str:
        return self.name or f"{self.kind.value}[{self.index}]"


@dataclass(frozen=True)
class Selector:
    """Handle to a selector column."""
    column: Column

    @property
    def index(self) -> int:
        return self.column.index

    @property
    def name(self) -> str:
        return str(self.column)

    def enable(self, region, offset: int) -> None:
        """Enable this selector at `offset` within `region`."""
        region.enable_selector(self, offset)

    def __str__(self) -> str:
        return str(self.column)


@dataclass(frozen=True)
class Gate:
    """A named set of polynomials that must vanish wherever `selector` is enabled.

    The constraint contributed at row r is selector(r) * poly(r) == 0 for each
    poly. Selector values are 0 or 1, so only enabled rows are constrained.
    """
    name: str
    selector: Selector
    polys: Tuple[Expression, ...]

    def queries(self) -> Tuple[ColumnQuery, ...]:
        """Distinct column queries across all polys, in first-seen order."""
        seen: List[ColumnQuery] = []
        for poly in self.polys:
            for q in poly.queries():
                if q not in seen:
                    seen.append(q)
        return tuple(seen)

    def degree(self) -> int:
        """Degree of the gated constraint (the selector adds one)."""
        return 1 + max(poly.degree() for poly in self.polys)


# --- Query Builder ---

class VirtualCells:
    """Query handle passed to gate builders.

    Only advice columns declared on the owning ConstraintSystem can be queried;
    anything else is a ConfigurationError raised while the gate is created.
    """

    def __init__(self, meta: "ConstraintSystem"):
        self._meta = meta
        self.queried: List[ColumnQuery] = []

    def query_advice(self, column: Column, rotation: Union[Rotation, int] = Rotation()) -> ColumnQuery:
        if isinstance(rotation, int):
            rotation = Rotation(rotation)
        if column.kind is not ColumnKind.ADVICE:
            raise ConfigurationError(
                f"query_advice() needs an advice column, got {column.kind.value} column {column}"
            )
        if not self._meta.has_column(column):
            raise ConfigurationError(f"Gate queries undeclared column {column}")
        query = ColumnQuery(column, rotation)
        self.queried.append(query)
        return query


# --- Immutable Schema ---

@dataclass(frozen=True)
class ConstraintSchema:
    """Frozen result of configuration.

    Attributes:
        field: galois field class every trace value belongs to
        advice_columns: Advice columns in declaration order
        selectors: Selectors in declaration order
        gates: Gates in declaration order
        equality_columns: Advice columns allowed in copy constraints
    """
    field: FieldType
    advice_columns: Tuple[Column, ...]
    selectors: Tuple[Selector, ...]
    gates: Tuple[Gate, ...]
    equality_columns: FrozenSet[Column]

    def gate(self, name: str) -> Gate:
        for gate in self.gates:
            if gate.name == name:
                return gate
        raise KeyError(f"No gate named '{name}'. Available: {[g.name for g in self.gates]}")

    def is_equality_enabled(self, column: Column) -> bool:
        return column in self.equality_columns

    @property
    def max_degree(self) -> int:
        return max((g.degree() for g in self.gates), default=0)

    @property
    def max_rotation(self) -> int:
        """Largest absolute row offset any gate reads."""
        return max(
            (abs(q.rotation.value) for g in self.gates for q in g.queries()),
            default=0,
        )


# --- Builder ---

GateBuilder = Callable[[VirtualCells], Union[Expression, Sequence[Expression]]]


class ConstraintSystem:
    """Mutable builder for a ConstraintSchema."""

    def __init__(self, field: FieldType = Fp):
        self.field = field
        self._advice: List[Column] = []
        self._selectors: List[Selector] = []
        self._gates: List[Gate] = []
        self._equality: Dict[Column, None] = {}  # insertion-ordered set
        self._built = False

    # Columns

    def advice_column(self, name: Optional[str] = None) -> Column:
        self._check_open()
        column = Column(len(self._advice), ColumnKind.ADVICE, name or "")
        self._advice.append(column)
        return column

    def selector(self, name: Optional[str] = None) -> Selector:
        self._check_open()
        selector = Selector(Column(len(self._selectors), ColumnKind.SELECTOR, name or ""))
        self._selectors.append(selector)
        return selector

    declare_selector = selector

    def declare_column(self, kind: ColumnKind, name: Optional[str] = None) -> Union[Column, Selector]:
        """Declare a column of the given kind (selectors come back as Selector handles)."""
        if kind is ColumnKind.ADVICE:
            return self.advice_column(name)
        return self.selector(name)

    def has_column(self, column: Column) -> bool:
        if column.kind is ColumnKind.ADVICE:
            return column in self._advice
        return any(s.column == column for s in self._selectors)

    def enable_equality(self, column: Column) -> None:
        """Allow `column` to take part in copy constraints."""
        self._check_open()
        if column.kind is not ColumnKind.ADVICE:
            raise ConfigurationError(f"Equality can only be enabled on advice columns, got {column}")
        if not self.has_column(column):
            raise ConfigurationError(f"Cannot enable equality on undeclared column {column}")
        self._equality[column] = None

    # Gates

    def create_gate(self, name: str, selector: Selector, builder: GateBuilder) -> Gate:
        """Register a gate: each returned expression must vanish where `selector` is on."""
        self._check_open()
        if not isinstance(selector, Selector) or selector not in self._selectors:
            raise ConfigurationError(f"Gate '{name}' uses undeclared selector {selector}")
        if any(g.name == name for g in self._gates):
            raise ConfigurationError(f"Duplicate gate name '{name}'")

        result = builder(VirtualCells(self))
        polys = (result,) if isinstance(result, Expression) else tuple(result)
        if not polys:
            raise ConfigurationError(f"Gate '{name}' has no constraints")
        for poly in polys:
            if not isinstance(poly, Expression):
                raise ConfigurationError(
                    f"Gate '{name}' returned {type(poly).__name__}, expected an Expression"
                )
            # Catches queries built by hand instead of through VirtualCells
            for query in poly.queries():
                if not self.has_column(query.column):
                    raise ConfigurationError(f"Gate '{name}' queries undeclared column {query.column}")

        gate = Gate(name, selector, polys)
        self._gates.append(gate)
        return gate

    add_gate = create_gate

    # Snapshot

    def build(self) -> ConstraintSchema:
        """Freeze the configuration. The builder accepts no declarations afterwards."""
        self._built = True
        return ConstraintSchema(
            field=self.field,
            advice_columns=tuple(self._advice),
            selectors=tuple(self._selectors),
            gates=tuple(self._gates),
            equality_columns=frozenset(self._equality),
        )

    def _check_open(self) -> None:
        if self._built:
            raise ConfigurationError("Constraint system is already built")
