"""Gate evaluation contexts.

Gate polynomials are data (see primitives.expression); a ConstraintContext
decides where their column queries read from. The checker evaluates gates over
whole columns with TraceConstraintContext, and falls back to
RowConstraintContext when it needs a single row.
"""

from .base import (
    ConstraintContext,
    RowConstraintContext,
    TraceConstraintContext,
)

__all__ = [
    "ConstraintContext",
    "TraceConstraintContext",
    "RowConstraintContext",
]
