"""Primitives - Field arithmetic, witness values and gate expressions."""

from plonkish.primitives.expression import (
    Add,
    ColumnQuery,
    Constant,
    Expression,
    Mul,
    Negate,
    Rotation,
    Sub,
    fmt,
)
from plonkish.primitives.field import (
    FF,
    FIELDS,
    GOLDILOCKS_PRIME,
    PALLAS_BASE_PRIME,
    Fp,
    get_field,
    to_field,
)
from plonkish.primitives.value import Value

__all__ = [
    # Field
    "Fp",
    "FF",
    "FIELDS",
    "PALLAS_BASE_PRIME",
    "GOLDILOCKS_PRIME",
    "get_field",
    "to_field",
    # Values
    "Value",
    # Expressions
    "Expression",
    "Constant",
    "ColumnQuery",
    "Add",
    "Sub",
    "Mul",
    "Negate",
    "Rotation",
    "fmt",
]
