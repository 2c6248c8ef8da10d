"""Symbolic gate expressions.

A gate asserts that a polynomial over the cells of a row (and of rows at fixed
relative offsets) vanishes wherever the gate's selector is enabled. The
polynomial is kept as a small expression tree rather than a Python closure, so
the same gate can be:

  - evaluated over a whole trace at once (arrays, one entry per row),
  - evaluated at a single row (field scalars),
  - inspected for its degree and the cells it reads,
  - printed in failure reports.

The tree has two leaf kinds and four internal nodes:

    Constant(value)               an integer, reduced into the field on use
    ColumnQuery(column, rotation) the value of `column` at row + rotation
    Add(left, right)
    Sub(left, right)
    Mul(left, right)
    Negate(expr)

Python operators build trees directly, with ints lifted to Constant:

    s * (a + b - c)
    Mul(s, Sub(Add(a, b), c))

Evaluation is a fold: `expr.evaluate(constant, query, negate, add, sub, mul)`
calls the matching function at every node, so an evaluation strategy only has
to say what a leaf means and how to combine two results.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, List, Tuple, Union

if TYPE_CHECKING:
    from plonkish.protocol.schema import Column


# --- Rotation ---

@dataclass(frozen=True)
class Rotation:
    """Row offset of a query relative to the row a gate is evaluated at."""
    value: int = 0

    @classmethod
    def cur(cls) -> "Rotation":
        return cls(0)

    @classmethod
    def next(cls) -> "Rotation":
        return cls(1)

    @classmethod
    def prev(cls) -> "Rotation":
        return cls(-1)

    def __str__(self) -> str:
        return f"{self.value:+d}" if self.value else "cur"


# --- Expression Tree ---

class Expression:
    """Base class for all expression nodes."""

    def evaluate(
        self,
        constant: Callable[[int], Any],
        query: Callable[["ColumnQuery"], Any],
        negate: Callable[[Any], Any],
        add: Callable[[Any, Any], Any],
        sub: Callable[[Any, Any], Any],
        mul: Callable[[Any, Any], Any],
    ) -> Any:
        raise NotImplementedError("Subclass must implement evaluate")

    def degree(self) -> int:
        raise NotImplementedError("Subclass must implement degree")

    def queries(self) -> Tuple["ColumnQuery", ...]:
        """All distinct column queries in the tree, in first-seen order."""
        seen: List[ColumnQuery] = []
        self._collect_queries(seen)
        return tuple(seen)

    def _collect_queries(self, seen: List["ColumnQuery"]) -> None:
        for child in self.children():
            child._collect_queries(seen)

    def children(self) -> Tuple["Expression", ...]:
        return ()

    # Operator overloading

    def __add__(self, other: "ExprLike") -> "Expression":
        return Add(self, lift(other))

    def __radd__(self, other: "ExprLike") -> "Expression":
        return Add(lift(other), self)

    def __sub__(self, other: "ExprLike") -> "Expression":
        return Sub(self, lift(other))

    def __rsub__(self, other: "ExprLike") -> "Expression":
        return Sub(lift(other), self)

    def __mul__(self, other: "ExprLike") -> "Expression":
        return Mul(self, lift(other))

    def __rmul__(self, other: "ExprLike") -> "Expression":
        return Mul(lift(other), self)

    def __neg__(self) -> "Expression":
        return Negate(self)

    def __str__(self) -> str:
        return fmt(self)


ExprLike = Union[Expression, int]


@dataclass(frozen=True, eq=True)
class Constant(Expression):
    """A field constant, stored as an int and reduced into the field when evaluated."""
    value: int

    def evaluate(self, constant, query, negate, add, sub, mul):
        return constant(self.value)

    def degree(self) -> int:
        return 0


@dataclass(frozen=True, eq=True)
class ColumnQuery(Expression):
    """The value of `column` at the current row offset by `rotation`."""
    column: "Column"
    rotation: Rotation = Rotation()

    def evaluate(self, constant, query, negate, add, sub, mul):
        return query(self)

    def degree(self) -> int:
        return 1

    def _collect_queries(self, seen: List["ColumnQuery"]) -> None:
        if self not in seen:
            seen.append(self)


@dataclass(frozen=True, eq=True)
class Add(Expression):
    left: Expression
    right: Expression

    def evaluate(self, constant, query, negate, add, sub, mul):
        return add(
            self.left.evaluate(constant, query, negate, add, sub, mul),
            self.right.evaluate(constant, query, negate, add, sub, mul),
        )

    def degree(self) -> int:
        return max(self.left.degree(), self.right.degree())

    def children(self) -> Tuple[Expression, ...]:
        return (self.left, self.right)


@dataclass(frozen=True, eq=True)
class Sub(Expression):
    left: Expression
    right: Expression

    def evaluate(self, constant, query, negate, add, sub, mul):
        return sub(
            self.left.evaluate(constant, query, negate, add, sub, mul),
            self.right.evaluate(constant, query, negate, add, sub, mul),
        )

    def degree(self) -> int:
        return max(self.left.degree(), self.right.degree())

    def children(self) -> Tuple[Expression, ...]:
        return (self.left, self.right)


@dataclass(frozen=True, eq=True)
class Mul(Expression):
    left: Expression
    right: Expression

    def evaluate(self, constant, query, negate, add, sub, mul):
        return mul(
            self.left.evaluate(constant, query, negate, add, sub, mul),
            self.right.evaluate(constant, query, negate, add, sub, mul),
        )

    def degree(self) -> int:
        return self.left.degree() + self.right.degree()

    def children(self) -> Tuple[Expression, ...]:
        return (self.left, self.right)


@dataclass(frozen=True, eq=True)
class Negate(Expression):
    expr: Expression

    def evaluate(self, constant, query, negate, add, sub, mul):
        return negate(self.expr.evaluate(constant, query, negate, add, sub, mul))

    def degree(self) -> int:
        return self.expr.degree()

    def children(self) -> Tuple[Expression, ...]:
        return (self.expr,)


def lift(obj: ExprLike) -> Expression:
    """Turn ints into Constant nodes; pass expressions through."""
    if isinstance(obj, Expression):
        return obj
    if isinstance(obj, int) and not isinstance(obj, bool):
        return Constant(obj)
    raise TypeError(f"Cannot use {type(obj).__name__} in a gate expression")


# --- Pretty-printing ---

# Binding strength: higher binds tighter
_PREC_ADD = 1
_PREC_MUL = 2
_PREC_NEG = 3
_PREC_ATOM = 4


def fmt(expr: Expression) -> str:
    """Render an expression as a single-line string, e.g. `a + b - c`."""
    text, _ = _fmt(expr)
    return text


def _fmt(expr: Expression) -> Tuple[str, int]:
    if isinstance(expr, Constant):
        return str(expr.value), _PREC_ATOM
    if isinstance(expr, ColumnQuery):
        if expr.rotation.value == 0:
            return str(expr.column), _PREC_ATOM
        return f"{expr.column}[{expr.rotation}]", _PREC_ATOM
    if isinstance(expr, Negate):
        return f"-{_wrap(expr.expr, _PREC_NEG)}", _PREC_NEG
    if isinstance(expr, Add):
        return f"{_wrap(expr.left, _PREC_ADD)} + {_wrap(expr.right, _PREC_ADD)}", _PREC_ADD
    if isinstance(expr, Sub):
        # Right operand of a subtraction needs parens at equal precedence
        return f"{_wrap(expr.left, _PREC_ADD)} - {_wrap(expr.right, _PREC_ADD + 1)}", _PREC_ADD
    if isinstance(expr, Mul):
        return f"{_wrap(expr.left, _PREC_MUL)} * {_wrap(expr.right, _PREC_MUL)}", _PREC_MUL
    raise TypeError(f"Unknown expression type: {type(expr)}")


def _wrap(expr: Expression, min_prec: int) -> str:
    text, prec = _fmt(expr)
    return text if prec >= min_prec else f"({text})"
