"""Exception hierarchy.

Configuration and synthesis errors are programming errors in a chip or
circuit: they abort schema construction or synthesis immediately, so no
half-built trace ever reaches the checker.

Unsatisfied constraints are not errors in that sense. The checker returns them
as data (see protocol.checker); UnsatisfiedConstraintsError only exists for
callers that ask for an exception via assert_satisfied().
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from plonkish.protocol.checker import VerificationReport
    from plonkish.protocol.schema import Column


class PlonkishError(Exception):
    """Base class for all errors raised by this package."""


# --- Configuration ---

class ConfigurationError(PlonkishError):
    """The constraint system is malformed (raised while it is being built)."""


class ColumnNotInPermutationError(ConfigurationError):
    """A copy constraint touches a column that was not equality-enabled."""

    def __init__(self, column: "Column"):
        self.column = column
        super().__init__(
            f"Column {column} is not equality-enabled; call enable_equality() "
            f"on it during configuration before copying its cells"
        )


# --- Synthesis ---

class SynthesisError(PlonkishError):
    """An assignment into the trace failed."""


class MissingWitnessError(SynthesisError):
    """A cell was assigned from a value that is not known."""

    def __init__(self, annotation: str, region: Optional[str] = None):
        self.annotation = annotation
        self.region = region
        where = f" in region '{region}'" if region else ""
        super().__init__(f"Missing witness for '{annotation}'{where}")


class CellAlreadyAssignedError(SynthesisError):
    """A cell was written twice."""

    def __init__(self, column: "Column", row: int, region: Optional[str] = None):
        self.column = column
        self.row = row
        self.region = region
        where = f" (region '{region}')" if region else ""
        super().__init__(f"Cell {column}@{row} is already assigned{where}")


class NotEnoughRowsAvailableError(SynthesisError):
    """An assignment landed outside the 2^k rows of the trace."""

    def __init__(self, k: int, row: int):
        self.k = k
        self.row = row
        super().__init__(
            f"Row {row} is out of range for k={k} ({1 << k} rows available); "
            f"increase k"
        )


class TraceSealedError(SynthesisError):
    """The trace was written to after synthesis finished."""


# --- Checking ---

class UnsatisfiedConstraintsError(PlonkishError):
    """Raised by assert_satisfied() when the checker reports failures."""

    def __init__(self, report: "VerificationReport"):
        self.report = report
        lines = [f"{len(report.failures)} constraint failure(s):"]
        lines.extend(f"  {failure}" for failure in report.failures)
        super().__init__("\n".join(lines))
