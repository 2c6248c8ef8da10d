"""Protocol - Schema, trace, layouter, checker and backend interface."""

from plonkish.protocol.errors import (
    CellAlreadyAssignedError,
    ColumnNotInPermutationError,
    ConfigurationError,
    MissingWitnessError,
    NotEnoughRowsAvailableError,
    PlonkishError,
    SynthesisError,
    TraceSealedError,
    UnsatisfiedConstraintsError,
)
from plonkish.protocol.schema import (
    Column,
    ColumnKind,
    ConstraintSchema,
    ConstraintSystem,
    Gate,
    Selector,
    VirtualCells,
)
from plonkish.protocol.trace import Cell, CellState, CopyConstraint, RegionInfo, Trace
from plonkish.protocol.layouter import AssignedCell, NamespacedLayouter, Region, SimpleLayouter
from plonkish.protocol.checker import (
    CellNotAssigned,
    ConstraintNotSatisfied,
    CopyConstraintViolated,
    VerificationReport,
    VerifyFailure,
    assert_satisfied,
    evaluate_gate_at_row,
    verify,
)
from plonkish.protocol.backend import (
    MockBackend,
    MockProver,
    ProvingBackend,
    extract_layout,
    trace_from_json,
    trace_to_json,
)

__all__ = [
    # Errors
    "PlonkishError",
    "ConfigurationError",
    "ColumnNotInPermutationError",
    "SynthesisError",
    "MissingWitnessError",
    "CellAlreadyAssignedError",
    "NotEnoughRowsAvailableError",
    "TraceSealedError",
    "UnsatisfiedConstraintsError",
    # Schema
    "Column",
    "ColumnKind",
    "Selector",
    "Gate",
    "VirtualCells",
    "ConstraintSystem",
    "ConstraintSchema",
    # Trace
    "Cell",
    "CellState",
    "CopyConstraint",
    "RegionInfo",
    "Trace",
    # Layouter
    "AssignedCell",
    "Region",
    "SimpleLayouter",
    "NamespacedLayouter",
    # Checker
    "VerifyFailure",
    "CellNotAssigned",
    "ConstraintNotSatisfied",
    "CopyConstraintViolated",
    "VerificationReport",
    "verify",
    "assert_satisfied",
    "evaluate_gate_at_row",
    # Backend
    "ProvingBackend",
    "MockBackend",
    "MockProver",
    "extract_layout",
    "trace_to_json",
    "trace_from_json",
]
