"""Tests for symbolic gate expressions."""

import pytest

from plonkish.primitives.expression import (
    Add,
    ColumnQuery,
    Constant,
    Mul,
    Negate,
    Rotation,
    Sub,
    fmt,
)
from plonkish.protocol.schema import Column, ColumnKind

A = ColumnQuery(Column(0, ColumnKind.ADVICE, "a"))
B = ColumnQuery(Column(1, ColumnKind.ADVICE, "b"))
C = ColumnQuery(Column(2, ColumnKind.ADVICE, "c"))


def evaluate_ints(expr, env) -> int:
    """Evaluate over plain ints, reading queries from env[(name, rotation)]."""
    return expr.evaluate(
        constant=lambda v: v,
        query=lambda q: env[(q.column.name, q.rotation.value)],
        negate=lambda x: -x,
        add=lambda x, y: x + y,
        sub=lambda x, y: x - y,
        mul=lambda x, y: x * y,
    )


class TestRotation:

    def test_named_rotations(self) -> None:
        assert Rotation.cur() == Rotation(0)
        assert Rotation.next() == Rotation(1)
        assert Rotation.prev() == Rotation(-1)

    def test_str(self) -> None:
        assert str(Rotation.cur()) == "cur"
        assert str(Rotation.next()) == "+1"
        assert str(Rotation.prev()) == "-1"


class TestConstruction:
    """Python operators build expression trees."""

    def test_operators_build_nodes(self) -> None:
        assert A + B - C == Sub(Add(A, B), C)
        assert A * B == Mul(A, B)
        assert -A == Negate(A)

    def test_ints_are_lifted(self) -> None:
        assert 2 * A == Mul(Constant(2), A)
        assert A + 1 == Add(A, Constant(1))
        assert 1 - A == Sub(Constant(1), A)

    def test_non_int_operand_rejected(self) -> None:
        with pytest.raises(TypeError):
            A + 1.5

    def test_children(self) -> None:
        expr = A + B
        assert expr.children() == (A, B)
        assert (-A).children() == (A,)
        assert A.children() == ()


class TestAnalysis:
    """degree() and queries()."""

    def test_degree(self) -> None:
        assert Constant(3).degree() == 0
        assert A.degree() == 1
        assert (A + B - C).degree() == 1
        assert (A * B + C).degree() == 2
        assert (A * B * C).degree() == 3
        assert (-(A * A)).degree() == 2

    def test_queries_are_distinct_in_first_seen_order(self) -> None:
        expr = C * A + A - B * C
        assert expr.queries() == (C, A, B)

    def test_rotated_queries_are_distinct(self) -> None:
        a_next = ColumnQuery(A.column, Rotation.next())
        assert (A + a_next).queries() == (A, a_next)


class TestEvaluate:

    def test_fold(self) -> None:
        env = {("a", 0): 3, ("b", 0): 4, ("c", 0): 7}
        assert evaluate_ints(A + B - C, env) == 0
        assert evaluate_ints(A * B - 2 * C, env) == -2
        assert evaluate_ints(-A + 10, env) == 7

    def test_rotation_reaches_evaluator(self) -> None:
        a_prev = ColumnQuery(A.column, Rotation.prev())
        env = {("a", 0): 5, ("a", -1): 2}
        assert evaluate_ints(A - a_prev, env) == 3


class TestFormatting:

    @pytest.mark.parametrize("expr, expected", [
        (A + B - C, "a + b - c"),
        (A * (B + C), "a * (b + c)"),
        (A - (B - C), "a - (b - c)"),
        (A * B + C, "a * b + c"),
        (-A, "-a"),
        (-(A + B), "-(a + b)"),
        (2 * A, "2 * a"),
    ])
    def test_fmt(self, expr, expected: str) -> None:
        assert fmt(expr) == expected
        assert str(expr) == expected

    def test_fmt_rotation(self) -> None:
        assert fmt(ColumnQuery(A.column, Rotation.next())) == "a[+1]"
